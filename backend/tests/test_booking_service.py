import threading
from datetime import timedelta
from unittest.mock import MagicMock

import pytest
from fastapi import HTTPException

from stockbook.models import CellularDevice, SerialDevice, StorageLocation, TacCode, PurchaseOrder
from stockbook.services import booking_service as svc
from stockbook.services.tray_service import next_available_tray

from conftest import imei, APPLE_TAC, PIXEL_TAC, UNKNOWN_TAC


def _open(db, kind="cellular", **kw):
    return svc.open_booking(db, device_kind=kind, **kw)


# -------- opening --------
def test_open_starts_after_highest_persisted_tray(db):
    assert _open(db).start_tray == "TRAY003"

    db.add(StorageLocation(location_code="TRAY009"))
    db.commit()
    assert _open(db).start_tray == "TRAY010"


def test_next_tray_without_locations(db):
    db.query(StorageLocation).delete()
    db.commit()
    assert next_available_tray(db) == "TRAY001"


def test_next_tray_orders_numerically(db):
    db.add_all([StorageLocation(location_code="TRAY999"), StorageLocation(location_code="TRAY1000"),
                StorageLocation(location_code="SHELF-7")])
    db.commit()
    assert next_available_tray(db) == "TRAY1001"


def test_open_with_unknown_po_is_404(db):
    with pytest.raises(HTTPException) as ei:
        _open(db, purchase_order_id=9999)
    assert ei.value.status_code == 404


def test_discard_and_lookup(db):
    b = _open(db)
    assert svc.get_booking(b.id) is b
    svc.discard_booking(b.id)
    with pytest.raises(HTTPException) as ei:
        svc.get_booking(b.id)
    assert ei.value.status_code == 404


# -------- scan --------
@pytest.mark.parametrize("raw", ["12345", "35328611000000X", "3532861100000011"])
def test_scan_rejects_bad_imei_before_lookup(raw):
    db = MagicMock()
    b = svc.ShipmentBooking("cellular", "TRAY001")
    with pytest.raises(HTTPException) as ei:
        svc.scan_identifier(db, b, raw)
    assert ei.value.status_code == 422
    assert ei.value.detail == "IMEI must be exactly 15 digits"
    assert db.method_calls == []
    assert len(b) == 0


def test_scan_rejects_empty_input(db):
    b = _open(db)
    with pytest.raises(HTTPException) as ei:
        svc.scan_identifier(db, b, "   ")
    assert ei.value.status_code == 422


def test_scan_classifies_known_tac_and_loads_config(db):
    b = _open(db)
    e = svc.scan_identifier(db, b, imei(APPLE_TAC, 1) + "\n")
    assert e.identifier == imei(APPLE_TAC, 1)
    assert (e.manufacturer, e.model) == ("Apple", "iPhone 13")
    assert e.location == "TRAY003"
    assert e.status == "qc_required"
    assert b.config_for(e).storage_options == ["128", "256", "512"]


def test_scan_unknown_tac_stays_unclassified(db):
    b = _open(db)
    e = svc.scan_identifier(db, b, imei(UNKNOWN_TAC, 1))
    assert (e.manufacturer, e.model) == ("", "")
    assert e.error is None


def test_scan_rejects_duplicate_in_working_set(db):
    b = _open(db)
    svc.scan_identifier(db, b, imei(APPLE_TAC, 1))
    with pytest.raises(HTTPException) as ei:
        svc.scan_identifier(db, b, imei(APPLE_TAC, 1))
    assert ei.value.status_code == 409
    assert len(b) == 1


def test_scan_rejects_persisted_imei(db):
    tac = db.query(TacCode).filter_by(tac_code=APPLE_TAC).one()
    db.add(CellularDevice(imei=imei(APPLE_TAC, 7), tac_id=tac.id, status="in_stock"))
    db.commit()

    b = _open(db)
    with pytest.raises(HTTPException) as ei:
        svc.scan_identifier(db, b, imei(APPLE_TAC, 7))
    assert ei.value.status_code == 409
    assert ei.value.detail == "Device with this IMEI already exists"


def test_serial_scan_accepts_any_text_and_checks_serial_table(db):
    db.add(SerialDevice(serial_number="C02XK0AAJG5H", status="in_stock"))
    db.commit()

    b = _open(db, kind="serial")
    e = svc.scan_identifier(db, b, "sn 001/x")
    assert e.identifier == "sn 001/x"
    with pytest.raises(HTTPException) as ei:
        svc.scan_identifier(db, b, "C02XK0AAJG5H")
    assert ei.value.detail == "Device with this serial number already exists"


# -------- edit --------
def test_update_flags_alert_on_config_mismatch(db):
    b = _open(db)
    e = svc.scan_identifier(db, b, imei(APPLE_TAC, 1))
    e, alert = svc.update_device(db, b, e.identifier, {"color": "Purple", "storage": "64"})
    assert alert is True
    assert len(e.error.splitlines()) == 2

    e, alert = svc.update_device(db, b, e.identifier, {"color": "Blue", "storage": "256"})
    assert alert is False
    assert e.error is None


def test_manual_classification_loads_config(db):
    b = _open(db)
    e = svc.scan_identifier(db, b, imei(UNKNOWN_TAC, 1))
    e, alert = svc.update_device(db, b, e.identifier,
                                 {"manufacturer": "Samsung", "model": "Galaxy S21", "color": "Blue"})
    assert alert is True
    assert "Phantom Gray" in e.error


def test_update_unknown_device_is_404(db):
    b = _open(db)
    with pytest.raises(HTTPException) as ei:
        svc.update_device(db, b, imei(APPLE_TAC, 1), {"color": "Blue"})
    assert ei.value.status_code == 404


# -------- submit --------
def test_submit_without_po_makes_no_backend_calls():
    db = MagicMock()
    b = svc.ShipmentBooking("cellular", "TRAY001")
    b.add(b.new_entry(imei(APPLE_TAC, 1)))
    with pytest.raises(HTTPException) as ei:
        svc.submit_booking(db, b, user_id=1)
    assert ei.value.status_code == 400
    assert ei.value.detail == "Please select a purchase order"
    assert db.method_calls == []


def test_submit_blocked_by_device_error(db, pending_po):
    b = _open(db, purchase_order_id=pending_po.id)
    e = svc.scan_identifier(db, b, imei(APPLE_TAC, 1))
    svc.update_device(db, b, e.identifier, {"color": "Purple"})
    with pytest.raises(HTTPException) as ei:
        svc.submit_booking(db, b, user_id=None)
    assert ei.value.detail == "Please correct device configuration errors before proceeding"
    assert db.query(CellularDevice).count() == 0


def test_submit_cellular_shipment(db, user, pending_po):
    b = _open(db, purchase_order_id=pending_po.id, requires_qc=False)
    a = svc.scan_identifier(db, b, imei(APPLE_TAC, 1))
    u1 = svc.scan_identifier(db, b, imei(UNKNOWN_TAC, 1))
    u2 = svc.scan_identifier(db, b, imei(UNKNOWN_TAC, 2))
    svc.update_device(db, b, a.identifier, {"color": "Blue", "storage": "128", "grade": 1})
    svc.update_device(db, b, u1.identifier, {"manufacturer": "Nokia", "model": "G21", "requires_repair": True})

    result = svc.submit_booking(db, b, user_id=user.id)

    assert result["created"] == 3
    assert result["trays"] == [{"code": "TRAY003", "count": 3, "capacity": 50}]

    po = db.get(PurchaseOrder, pending_po.id)
    db.refresh(po)
    assert (po.requires_qc, po.requires_repair) == (False, True)

    rows = {r.imei: r for r in db.query(CellularDevice).all()}
    apple = rows[a.identifier]
    assert (apple.color, apple.storage_gb, apple.grade_id, apple.status) == ("Blue", 128, 1, "in_stock")
    assert apple.tac.model_name == "iPhone 13"
    assert (apple.created_by, apple.updated_by) == (user.id, user.id)
    assert apple.location.location_code == "TRAY003"
    assert rows[u1.identifier].status == "repair"

    # one new TAC row for the unseen prefix, shared by both devices
    new_tac = db.query(TacCode).filter_by(tac_code=UNKNOWN_TAC).one()
    assert (new_tac.manufacturer, new_tac.model_name) == ("Nokia", "G21")
    assert rows[u2.identifier].tac_id == new_tac.id

    # the booking is gone once committed
    with pytest.raises(HTTPException):
        svc.get_booking(b.id)


def test_submit_serial_shipment(db, user, pending_po):
    b = _open(db, kind="serial", purchase_order_id=pending_po.id)
    e = svc.scan_identifier(db, b, "SN-0001")
    svc.update_device(db, b, e.identifier, {"manufacturer": "Apple", "model": "MacBook Air", "color": "Silver"})
    svc.submit_booking(db, b, user_id=user.id)

    row = db.query(SerialDevice).filter_by(serial_number="SN-0001").one()
    assert (row.manufacturer, row.model_name, row.color, row.status) == ("Apple", "MacBook Air", "Silver", "qc_required")
    assert db.query(TacCode).count() == 3
    po = db.get(PurchaseOrder, pending_po.id)
    db.refresh(po)
    assert po.requires_qc is True


def test_submit_rolls_back_everything_on_failure(db, user, pending_po):
    b = _open(db, purchase_order_id=pending_po.id, requires_repair=True)
    first = svc.scan_identifier(db, b, imei(UNKNOWN_TAC, 1))
    second = svc.scan_identifier(db, b, imei(PIXEL_TAC, 1))

    # another session books the second IMEI after our scan
    pixel = db.query(TacCode).filter_by(tac_code=PIXEL_TAC).one()
    db.add(CellularDevice(imei=second.identifier, tac_id=pixel.id, status="in_stock"))
    db.commit()
    locations_before = db.query(StorageLocation).count()

    with pytest.raises(HTTPException) as ei:
        svc.submit_booking(db, b, user_id=user.id)
    assert ei.value.status_code == 409

    assert db.query(CellularDevice).filter_by(imei=first.identifier).first() is None
    assert db.query(TacCode).filter_by(tac_code=UNKNOWN_TAC).first() is None
    assert db.query(StorageLocation).count() == locations_before
    po = db.get(PurchaseOrder, pending_po.id)
    db.refresh(po)
    assert (po.requires_qc, po.requires_repair) == (False, False)

    # the working set survives so the operator can fix it and retry
    assert svc.get_booking(b.id) is b
    svc.remove_device(b, second.identifier)
    assert svc.submit_booking(db, b, user_id=user.id)["created"] == 1


def test_submit_against_non_pending_po_is_409(db, user):
    received = db.query(PurchaseOrder).filter_by(po_number="PO-0999").one()
    b = _open(db, purchase_order_id=received.id)
    svc.scan_identifier(db, b, imei(APPLE_TAC, 1))
    with pytest.raises(HTTPException) as ei:
        svc.submit_booking(db, b, user_id=user.id)
    assert ei.value.status_code == 409
    assert db.query(CellularDevice).count() == 0


def test_second_submit_of_committed_booking_is_404(db, user, pending_po):
    b = _open(db, purchase_order_id=pending_po.id)
    svc.scan_identifier(db, b, imei(APPLE_TAC, 1))
    assert svc.submit_booking(db, b, user_id=user.id)["created"] == 1

    with pytest.raises(HTTPException) as ei:
        svc.submit_booking(db, b, user_id=user.id)
    assert ei.value.status_code == 404
    assert db.query(CellularDevice).count() == 1


# -------- one request at a time per booking --------
def test_scan_waits_for_booking_lock(db):
    b = _open(db)
    result = {}

    def scan():
        result["entry"] = svc.scan_identifier(db, b, imei(APPLE_TAC, 1))

    with b.lock:
        t = threading.Thread(target=scan)
        t.start()
        t.join(0.2)
        assert t.is_alive()
        assert len(b) == 0
    t.join(5)
    assert not t.is_alive()
    assert result["entry"].location == "TRAY003"


def test_discarded_booking_rejects_changes(db):
    b = _open(db, kind="serial")
    svc.scan_identifier(db, b, "SN-1")
    svc.discard_booking(b.id)
    with pytest.raises(HTTPException) as ei:
        svc.scan_identifier(db, b, "SN-2")
    assert ei.value.status_code == 404
    with pytest.raises(HTTPException):
        svc.remove_device(b, "SN-1")
    assert len(b) == 1


# -------- idle bookings --------
def test_idle_booking_expires(db, monkeypatch):
    monkeypatch.setattr(svc, "IDLE_TIMEOUT", timedelta(minutes=30))
    stale = _open(db)
    fresh = _open(db)
    stale.last_used -= timedelta(minutes=31)

    with pytest.raises(HTTPException) as ei:
        svc.get_booking(stale.id)
    assert ei.value.status_code == 404
    assert stale.id not in svc._BOOKINGS
    assert stale.closed is True
    assert svc.get_booking(fresh.id) is fresh


def test_opening_sweeps_idle_bookings(db, monkeypatch):
    monkeypatch.setattr(svc, "IDLE_TIMEOUT", timedelta(minutes=30))
    stale = _open(db)
    stale.last_used -= timedelta(hours=2)
    newer = _open(db)
    assert list(svc._BOOKINGS) == [newer.id]


def test_activity_keeps_booking_open(db, monkeypatch):
    monkeypatch.setattr(svc, "IDLE_TIMEOUT", timedelta(minutes=30))
    b = _open(db, kind="serial")
    b.last_used -= timedelta(minutes=29)
    svc.scan_identifier(db, b, "SN-1")
    b.last_used -= timedelta(minutes=29)
    assert svc.get_booking(b.id) is b


def test_zero_timeout_keeps_bookings(db, monkeypatch):
    monkeypatch.setattr(svc, "IDLE_TIMEOUT", timedelta(0))
    b = _open(db)
    b.last_used -= timedelta(days=30)
    assert svc.get_booking(b.id) is b
