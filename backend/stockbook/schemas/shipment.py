# stockbook/schemas/shipment.py
from typing import List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from stockbook.domain.booking import DeviceEntry
from stockbook.domain.constants import DeviceKind, GRADES

# ---- Requests ----
class BookingCreate(BaseModel):
    device_kind: DeviceKind
    requires_qc: bool = True
    requires_repair: bool = False
    purchase_order_id: Optional[int] = Field(default=None, ge=1)

class BookingSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")
    purchase_order_id: Optional[int] = Field(default=None, ge=1)
    requires_qc: Optional[bool] = None
    requires_repair: Optional[bool] = None

class ScanIn(BaseModel):
    identifier: str

class DeviceUpdate(BaseModel):
    """Only the fields sent are applied (exclude_unset)."""
    model_config = ConfigDict(extra="forbid")

    manufacturer: Optional[str] = None
    model: Optional[str] = None
    color: Optional[str] = None
    storage: Optional[Union[str, int]] = None
    grade: Optional[int] = None
    requires_qc: Optional[bool] = None
    requires_repair: Optional[bool] = None

    @field_validator("manufacturer", "model", "color")
    @classmethod
    def _strip(cls, v: Optional[str]) -> str:
        return (v or "").strip()

    @field_validator("storage")
    @classmethod
    def _storage_gb(cls, v) -> str:
        # GB as a whole number, "" clears it
        s = str(v if v is not None else "").strip()
        if s.upper().endswith("GB"):
            s = s[:-2].strip()
        if s and not s.isdigit():
            raise ValueError("storage must be a whole number of GB")
        return s

    @field_validator("grade")
    @classmethod
    def _known_grade(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v not in GRADES:
            raise ValueError(f"grade must be one of {sorted(GRADES)}")
        return v

    @field_validator("requires_qc", "requires_repair")
    @classmethod
    def _no_null_flags(cls, v: Optional[bool]) -> bool:
        if v is None:
            raise ValueError("flag cannot be null")
        return v

# ---- Responses ----
class TrayRead(BaseModel):
    code: str
    count: int
    capacity: int

class DeviceRead(DeviceEntry):
    alert: bool = False

class BookingRead(BaseModel):
    id: str
    device_kind: str
    purchase_order_id: Optional[int]
    requires_qc: bool
    requires_repair: bool
    start_tray: str
    next_tray: str
    device_count: int
    devices: List[DeviceEntry]
    trays: List[TrayRead]

    @classmethod
    def from_booking(cls, b) -> "BookingRead":
        return cls(
            id=b.id,
            device_kind=b.device_kind,
            purchase_order_id=b.purchase_order_id,
            requires_qc=b.requires_qc,
            requires_repair=b.requires_repair,
            start_tray=b.start_tray,
            next_tray=b.next_tray,
            device_count=len(b),
            devices=list(b.devices),
            trays=b.trays(),
        )

class SubmitRead(BaseModel):
    booking_id: str
    purchase_order_id: int
    device_kind: str
    created: int
    device_ids: List[int]
    trays: List[TrayRead]
