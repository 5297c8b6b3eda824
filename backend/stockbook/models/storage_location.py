from sqlalchemy import Column, Integer, String, CheckConstraint, text
from ..core.db import Base

class StorageLocation(Base):
    __tablename__ = "storage_locations"

    id            = Column(Integer, primary_key=True, autoincrement=True)
    location_code = Column(String(20), nullable=False, unique=True)  # TRAY###
    capacity      = Column(Integer, nullable=False, server_default=text("50"))

    __table_args__ = (
        CheckConstraint("capacity > 0", name="CK_Location_Capacity_Positive"),
    )
