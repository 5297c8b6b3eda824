from sqlalchemy import Column, Integer, String
from ..core.db import Base

class ProductGrade(Base):
    __tablename__ = "product_grades"

    id    = Column(Integer, primary_key=True, autoincrement=False)
    grade = Column(String(5), nullable=False, unique=True)
