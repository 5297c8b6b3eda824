# stockbook/schemas/purchase.py
from datetime import date
from typing import Optional, Literal

from pydantic import BaseModel, ConfigDict

POStatusLiteral = Literal["draft", "pending", "received", "cancelled"]

class PORead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    po_number: str
    supplier_id: int
    supplier_name: Optional[str] = None
    order_date: Optional[date] = None
    status: POStatusLiteral
    requires_qc: bool
    requires_repair: bool
