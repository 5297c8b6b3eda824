from datetime import timedelta

import pytest

from stockbook.domain.booking import ShipmentBooking, DeviceConfig, derive_status


def _booking(**kw):
    return ShipmentBooking("cellular", "TRAY003", **kw)


@pytest.mark.parametrize("qc, repair, expected", [
    (True, True, "qc_required"),
    (True, False, "qc_required"),
    (False, True, "repair"),
    (False, False, "in_stock"),
])
def test_status_precedence(qc, repair, expected):
    assert derive_status(qc, repair) == expected


def test_new_entries_inherit_batch_flags():
    b = _booking(requires_qc=False, requires_repair=True)
    e = b.add(b.new_entry("353286110000001", "Apple", "iPhone 13"))
    assert (e.requires_qc, e.requires_repair, e.status) == (False, True, "repair")
    assert e.location == "TRAY003"


def test_add_rejects_duplicates():
    b = _booking()
    b.add(b.new_entry("353286110000001"))
    with pytest.raises(ValueError):
        b.add(b.new_entry("353286110000001"))
    assert len(b) == 1


def test_update_revalidates_against_own_model_config():
    b = _booking()
    b.remember_config("Apple", "iPhone 13", DeviceConfig(available_colors=["Blue"], storage_options=["128"]))
    b.remember_config("Google", "Pixel 6", None)
    apple = b.add(b.new_entry("353286110000001", "Apple", "iPhone 13"))
    pixel = b.add(b.new_entry("867530090000001", "Google", "Pixel 6"))

    b.update(apple.identifier, {"color": "Red"})
    b.update(pixel.identifier, {"color": "Red"})
    assert apple.error.startswith("Invalid color")
    assert pixel.error is None

    # fixing the field clears the error
    b.update(apple.identifier, {"color": "Blue"})
    assert apple.error is None


def test_any_edit_rechecks_whole_entry():
    b = _booking()
    b.remember_config("Apple", "iPhone 13", DeviceConfig(available_colors=["Blue"], storage_options=["128"]))
    e = b.add(b.new_entry("353286110000001", "Apple", "iPhone 13"))
    b.update(e.identifier, {"storage": "64"})
    b.update(e.identifier, {"grade": 2})
    assert "Invalid storage option" in e.error


def test_update_rejects_unknown_fields_and_devices():
    b = _booking()
    b.add(b.new_entry("353286110000001"))
    with pytest.raises(ValueError):
        b.update("353286110000001", {"location": "TRAY999"})
    with pytest.raises(KeyError):
        b.update("000000000000000", {"color": "Blue"})
    with pytest.raises(KeyError):
        b.remove("000000000000000")


def test_blocking_error_order():
    b = _booking()
    assert b.blocking_error() == "Please select a purchase order"
    b.purchase_order_id = 1
    assert b.blocking_error() == "Please add at least one device"
    e = b.add(b.new_entry("353286110000001"))
    assert b.blocking_error() is None
    e.error = "Invalid color. Available colors: Blue"
    assert b.blocking_error() == "Please correct device configuration errors before proceeding"


def test_requirement_flags_are_or_over_devices():
    b = _booking(requires_qc=False)
    b.add(b.new_entry("353286110000001"))
    b.add(b.new_entry("353286110000002"))
    assert (b.requires_qc_any, b.requires_repair_any) == (False, False)
    b.update("353286110000002", {"requires_repair": True})
    assert (b.requires_qc_any, b.requires_repair_any) == (False, True)


def test_next_tray_tracks_list_length():
    b = ShipmentBooking("serial", "TRAY001", capacity=2)
    assert b.next_tray == "TRAY001"
    b.add(b.new_entry("a"))
    b.add(b.new_entry("b"))
    assert b.next_tray == "TRAY002"
    b.remove("a")
    assert b.next_tray == "TRAY001"


def test_unknown_device_kind_is_rejected():
    with pytest.raises(ValueError):
        ShipmentBooking("tablet", "TRAY001")


def test_touch_resets_idle_time():
    b = _booking()
    b.last_used -= timedelta(hours=1)
    assert b.idle_for() >= timedelta(hours=1)
    b.touch()
    assert b.idle_for() < timedelta(minutes=1)
