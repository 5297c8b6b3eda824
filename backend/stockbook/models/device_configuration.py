from sqlalchemy import Column, Integer, String, JSON, UniqueConstraint
from ..core.db import Base

class DeviceConfiguration(Base):
    __tablename__ = "device_configurations"

    id               = Column(Integer, primary_key=True, autoincrement=True)
    manufacturer     = Column(String(100), nullable=False)
    model_name       = Column(String(200), nullable=False)
    available_colors = Column(JSON, nullable=False, default=list)
    storage_options  = Column(JSON, nullable=False, default=list)  # GB values as strings

    __table_args__ = (
        UniqueConstraint("manufacturer", "model_name", name="UQ_DeviceConfig_Model"),
    )
