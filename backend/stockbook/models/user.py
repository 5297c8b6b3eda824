from sqlalchemy import (
    Column, Integer, String, Boolean, DateTime, CheckConstraint, func, text, true
)
from ..core.db import Base
from ..domain.constants import ROLES, sql_in

class AppUser(Base):
    __tablename__ = "app_users"

    id              = Column(Integer, primary_key=True, autoincrement=True)
    username        = Column(String(50),  nullable=False, unique=True)
    full_name       = Column(String(100))
    email           = Column(String(200))
    hashed_password = Column(String(255), nullable=False)
    role            = Column(String(20),  nullable=False, server_default=text("'viewer'"))
    is_active       = Column(Boolean,     nullable=False, server_default=true())
    created_at      = Column(DateTime,    nullable=False, server_default=func.now())

    __table_args__ = (
        CheckConstraint(sql_in("role", ROLES), name="CK_AppUser_Role"),
    )
