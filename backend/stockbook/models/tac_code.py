from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from ..core.db import Base

class TacCode(Base):
    __tablename__ = "tac_codes"

    id           = Column(Integer, primary_key=True, autoincrement=True)
    tac_code     = Column(String(8), nullable=False, unique=True)
    # left empty when an unclassified IMEI introduced the prefix
    manufacturer = Column(String(100))
    model_name   = Column(String(200))

    devices = relationship("CellularDevice", back_populates="tac")
