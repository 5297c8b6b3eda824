from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, CheckConstraint, func, text
from sqlalchemy.orm import relationship, declared_attr
from ..core.db import Base
from ..domain.constants import DEVICE_STATUSES, sql_in

_STATUS_CHECK = sql_in("status", DEVICE_STATUSES)


class _DeviceColumns:
    """Columns shared by both device tables."""

    id         = Column(Integer, primary_key=True, autoincrement=True)
    color      = Column(String(50))
    status     = Column(String(20), nullable=False, server_default=text("'qc_required'"))
    created_at = Column(DateTime, nullable=False, server_default=func.now())
    updated_at = Column(DateTime, nullable=False, server_default=func.now(), onupdate=func.now())

    @declared_attr
    def grade_id(cls):
        return Column(Integer, ForeignKey("product_grades.id"))

    @declared_attr
    def location_id(cls):
        return Column(Integer, ForeignKey("storage_locations.id"))

    @declared_attr
    def created_by(cls):
        return Column(Integer, ForeignKey("app_users.id"))

    @declared_attr
    def updated_by(cls):
        return Column(Integer, ForeignKey("app_users.id"))

    @declared_attr
    def location(cls):
        return relationship("StorageLocation")


class CellularDevice(_DeviceColumns, Base):
    __tablename__ = "cellular_devices"

    imei       = Column(String(15), nullable=False, unique=True)
    tac_id     = Column(Integer, ForeignKey("tac_codes.id"), nullable=False)
    storage_gb = Column(Integer)

    __table_args__ = (
        CheckConstraint(_STATUS_CHECK, name="CK_Cellular_Status"),
    )

    tac = relationship("TacCode", back_populates="devices")


class SerialDevice(_DeviceColumns, Base):
    __tablename__ = "serial_devices"

    serial_number = Column(String(100), nullable=False, unique=True)
    manufacturer  = Column(String(100))
    model_name    = Column(String(200))

    __table_args__ = (
        CheckConstraint(_STATUS_CHECK, name="CK_Serial_Status"),
    )
