from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from ..core.db import Base

class Supplier(Base):
    __tablename__ = "suppliers"

    id    = Column(Integer, primary_key=True, autoincrement=True)
    name  = Column(String(200), nullable=False)
    phone = Column(String(50))
    email = Column(String(200))

    purchase_orders = relationship("PurchaseOrder", back_populates="supplier")
