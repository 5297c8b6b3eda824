# stockbook/routers/purchase.py
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from stockbook.core.db import get_db
from stockbook.core.security import get_current_user
from stockbook.domain.constants import PoStatus
from stockbook.schemas.purchase import PORead
from stockbook.services.purchase_service import list_pos, get_po

router = APIRouter(
    prefix="/purchase-orders",
    tags=["purchase-orders"],
    dependencies=[Depends(get_current_user)],
)


# --- LIST (defaults to the orders a shipment can be booked against) ---
@router.get("", response_model=List[PORead])
def list_purchase_orders(
    status_s: Optional[PoStatus] = Query("pending", alias="status"),
    supplier_id: Optional[int] = Query(None, ge=1),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    sort: str = Query("-id"),
    db: Session = Depends(get_db),
):
    return list_pos(
        db,
        status_s=status_s,
        supplier_id=supplier_id,
        skip=skip,
        limit=limit,
        sort=sort,
    )


@router.get("/{po_id}", response_model=PORead)
def get_purchase_order(po_id: int, db: Session = Depends(get_db)):
    return get_po(db, po_id)
