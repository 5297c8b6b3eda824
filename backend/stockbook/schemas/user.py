from typing import Optional
from pydantic import BaseModel, EmailStr, ConfigDict

from stockbook.domain.constants import Role

class UserRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    username: str
    full_name: Optional[str]
    email: Optional[EmailStr]
    role: Role
    is_active: bool

class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
