import pytest
from sqlalchemy.exc import IntegrityError

from stockbook.domain.constants import DEVICE_STATUSES, PO_STATUSES, ROLES, sql_in
from stockbook.models import AppUser, CellularDevice, PurchaseOrder, Supplier, TacCode


def test_sql_in_quotes_values():
    assert sql_in("status", ("a", "b")) == "status IN ('a', 'b')"


def test_value_lists():
    assert DEVICE_STATUSES == ("qc_required", "repair", "in_stock")
    assert "pending" in PO_STATUSES
    assert ROLES == ("viewer", "intake", "qc", "admin")


@pytest.mark.parametrize("role", ROLES)
def test_every_role_is_accepted(db, role):
    db.add(AppUser(username=f"u-{role}", hashed_password="x", role=role))
    db.commit()


def test_unknown_role_is_rejected(db):
    db.add(AppUser(username="guest", hashed_password="x", role="guest"))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_unknown_device_status_is_rejected(db):
    tac = db.query(TacCode).first()
    db.add(CellularDevice(imei="353286110000001", tac_id=tac.id, status="sold"))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()


def test_unknown_po_status_is_rejected(db):
    supplier = db.query(Supplier).first()
    db.add(PurchaseOrder(po_number="PO-X", supplier_id=supplier.id, status="lost"))
    with pytest.raises(IntegrityError):
        db.commit()
    db.rollback()
