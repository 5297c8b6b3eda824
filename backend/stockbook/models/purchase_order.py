from datetime import date
from sqlalchemy import Column, Integer, String, Date, Boolean, ForeignKey, CheckConstraint, text, false
from sqlalchemy.orm import relationship
from ..core.db import Base
from ..domain.constants import PO_STATUSES, sql_in

class PurchaseOrder(Base):
    __tablename__ = "purchase_orders"

    id              = Column(Integer, primary_key=True, autoincrement=True)
    po_number       = Column(String(50), nullable=False, unique=True)
    supplier_id     = Column(Integer, ForeignKey("suppliers.id"), nullable=False)
    order_date      = Column(Date, nullable=False, default=date.today)
    status          = Column(String(20), nullable=False, server_default=text("'pending'"))
    # set when a device shipment is booked against the order
    requires_qc     = Column(Boolean, nullable=False, server_default=false())
    requires_repair = Column(Boolean, nullable=False, server_default=false())

    __table_args__ = (
        CheckConstraint(sql_in("status", PO_STATUSES), name="CK_PO_Status"),
    )

    supplier = relationship("Supplier", back_populates="purchase_orders")

    @property
    def supplier_name(self):
        return self.supplier.name if self.supplier else None
