from __future__ import annotations
from typing import List, Optional
import logging

from fastapi import HTTPException, status
from sqlalchemy.orm import Session, joinedload
from sqlalchemy import text

from stockbook.models import PurchaseOrder
from stockbook.domain.constants import PO_STATUS_PENDING

logger = logging.getLogger(__name__)


def _dialect(db: Session) -> str:
    try:
        return db.bind.dialect.name
    except AttributeError:
        return "unknown"


def lock_po_for_update(db: Session, po_id: int) -> Optional[PurchaseOrder]:
    """
    Lock the PO row and read it fresh.
    MSSQL gets UPDLOCK+ROWLOCK, SQLite has no row locks, the rest SELECT ... FOR UPDATE.
    """
    dialect = _dialect(db)
    if dialect == "mssql":
        db.execute(
            text("SELECT id FROM purchase_orders WITH (UPDLOCK, ROWLOCK) WHERE id=:pid"),
            {"pid": po_id},
        )
        po = db.get(PurchaseOrder, po_id)
        if po:
            db.refresh(po)
        return po
    if dialect == "sqlite":
        return db.get(PurchaseOrder, po_id)
    return (
        db.query(PurchaseOrder)
        .filter(PurchaseOrder.id == po_id)
        .with_for_update()
        .one_or_none()
    )


def set_requirement_flags(db: Session, *, po_id: int, requires_qc: bool, requires_repair: bool) -> PurchaseOrder:
    """
    Stamp QC/repair requirements on a pending PO. Does not commit; the
    caller owns the transaction.
    """
    po = lock_po_for_update(db, po_id)
    if not po:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Purchase order not found")
    if po.status != PO_STATUS_PENDING:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Purchase order {po.po_number} is '{po.status}', not '{PO_STATUS_PENDING}'",
        )

    po.requires_qc = bool(requires_qc)
    po.requires_repair = bool(requires_repair)
    db.add(po)
    db.flush()
    logger.info("PO %s flags: qc=%s repair=%s", po.po_number, po.requires_qc, po.requires_repair)
    return po


def get_po(db: Session, po_id: int) -> PurchaseOrder:
    po = db.get(PurchaseOrder, po_id)
    if not po:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Purchase order not found")
    return po


# ---- Listing ----
def list_pos(
    db: Session,
    *,
    status_s: Optional[str] = PO_STATUS_PENDING,
    supplier_id: Optional[int] = None,
    skip: int = 0,
    limit: int = 100,
    sort: str = "-id",
) -> List[PurchaseOrder]:
    q = db.query(PurchaseOrder).options(joinedload(PurchaseOrder.supplier))

    if status_s:
        q = q.filter(PurchaseOrder.status == status_s)
    if supplier_id:
        q = q.filter(PurchaseOrder.supplier_id == supplier_id)

    order_fields = {
        "id": PurchaseOrder.id,
        "po_number": PurchaseOrder.po_number,
        "order_date": PurchaseOrder.order_date,
    }
    desc = sort.startswith("-")
    key = sort[1:] if desc else sort
    col = order_fields.get(key, PurchaseOrder.id)
    q = q.order_by(col.desc() if desc else col.asc())

    return q.offset(max(0, skip)).limit(min(max(1, limit), 500)).all()
