from typing import List, Optional
from pydantic import BaseModel, ConfigDict

class TacRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    tac_code: str
    manufacturer: Optional[str]
    model_name: Optional[str]

class ConfigRead(BaseModel):
    manufacturer: str
    model_name: str
    available_colors: List[str]
    storage_options: List[str]

class GradeRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: int
    grade: str
