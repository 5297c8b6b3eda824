# backend/stockbook/domain/booking.py
"""
Working set of a device shipment being booked.

A ``ShipmentBooking`` is what the operator sees while scanning: the ordered
device list with tray positions, batch defaults and the selected purchase
order. Nothing here touches the database; services load lookups and
configurations and hand them in.
"""
from __future__ import annotations
import threading
import uuid
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional, Tuple

from pydantic import BaseModel, computed_field, field_validator

from stockbook.domain.constants import (
    DeviceKind, DEVICE_KINDS,
    STATUS_QC_REQUIRED, STATUS_REPAIR, STATUS_IN_STOCK,
    MSG_SELECT_PO, MSG_ADD_DEVICE, MSG_FIX_ERRORS,
    TRAY_CAPACITY,
)
from stockbook.domain.trays import assign_trays, tray_for_index, tray_summary
from stockbook.domain.validation import validate_attributes

EDITABLE_FIELDS = ("manufacturer", "model", "color", "storage", "grade", "requires_qc", "requires_repair")


def derive_status(requires_qc: bool, requires_repair: bool) -> str:
    if requires_qc:
        return STATUS_QC_REQUIRED
    if requires_repair:
        return STATUS_REPAIR
    return STATUS_IN_STOCK


class DeviceConfig(BaseModel):
    available_colors: List[str] = []
    storage_options: List[str] = []

    @field_validator("available_colors", "storage_options", mode="before")
    @classmethod
    def _as_strings(cls, v):
        # JSON columns may hold numbers for storage sizes
        return [str(x) for x in (v or [])]


class DeviceEntry(BaseModel):
    identifier: str
    manufacturer: str = ""
    model: str = ""
    color: str = ""
    storage: str = ""
    grade: Optional[int] = None
    location: str = ""
    requires_qc: bool = True
    requires_repair: bool = False
    error: Optional[str] = None

    @computed_field
    @property
    def status(self) -> str:
        return derive_status(self.requires_qc, self.requires_repair)


class ShipmentBooking:
    def __init__(
        self,
        device_kind: DeviceKind,
        start_tray: str,
        *,
        requires_qc: bool = True,
        requires_repair: bool = False,
        purchase_order_id: Optional[int] = None,
        capacity: int = TRAY_CAPACITY,
    ):
        if device_kind not in DEVICE_KINDS:
            raise ValueError(f"unknown device kind {device_kind!r}")
        self.id = uuid.uuid4().hex
        self.device_kind = device_kind
        self.start_tray = start_tray
        self.capacity = capacity
        self.requires_qc = requires_qc
        self.requires_repair = requires_repair
        self.purchase_order_id = purchase_order_id
        self.devices: List[DeviceEntry] = []
        self.configs: Dict[Tuple[str, str], Optional[DeviceConfig]] = {}
        self.last_used = datetime.now(timezone.utc)
        # scan, edit, remove and submit hold this while they work on the list
        self.lock = threading.RLock()
        # set once the booking is committed or discarded
        self.closed = False

    def touch(self) -> None:
        self.last_used = datetime.now(timezone.utc)

    def idle_for(self, now: Optional[datetime] = None) -> timedelta:
        return (now or datetime.now(timezone.utc)) - self.last_used

    def __len__(self) -> int:
        return len(self.devices)

    def __contains__(self, identifier: str) -> bool:
        return self.find(identifier) is not None

    def find(self, identifier: str) -> Optional[DeviceEntry]:
        for d in self.devices:
            if d.identifier == identifier:
                return d
        return None

    # ---- configuration cache ----
    def has_config(self, manufacturer: str, model: str) -> bool:
        return (manufacturer, model) in self.configs

    def remember_config(self, manufacturer: str, model: str, config: Optional[DeviceConfig]) -> None:
        self.configs[(manufacturer, model)] = config

    def config_for(self, entry: DeviceEntry) -> Optional[DeviceConfig]:
        return self.configs.get((entry.manufacturer, entry.model))

    # ---- trays ----
    @property
    def next_tray(self) -> str:
        """Tray the next scanned device will land in."""
        return tray_for_index(self.start_tray, len(self.devices), self.capacity)

    def trays(self) -> List[dict]:
        return tray_summary(self.devices, self.capacity)

    # ---- working set ----
    def new_entry(self, identifier: str, manufacturer: str = "", model: str = "") -> DeviceEntry:
        return DeviceEntry(
            identifier=identifier,
            manufacturer=manufacturer,
            model=model,
            location=self.next_tray,
            requires_qc=self.requires_qc,
            requires_repair=self.requires_repair,
        )

    def add(self, entry: DeviceEntry) -> DeviceEntry:
        if entry.identifier in self:
            raise ValueError(f"duplicate identifier {entry.identifier}")
        entry.location = self.next_tray
        entry.error = validate_attributes(entry, self.config_for(entry))
        self.devices.append(entry)
        return entry

    def update(self, identifier: str, changes: dict) -> DeviceEntry:
        entry = self.find(identifier)
        if entry is None:
            raise KeyError(identifier)
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValueError(f"not editable: {', '.join(sorted(unknown))}")

        for field, value in changes.items():
            setattr(entry, field, value)
        # the whole entry is re-checked on every edit
        entry.error = validate_attributes(entry, self.config_for(entry))
        return entry

    def remove(self, identifier: str) -> DeviceEntry:
        entry = self.find(identifier)
        if entry is None:
            raise KeyError(identifier)
        self.devices.remove(entry)
        assign_trays(self.devices, self.start_tray, self.capacity)
        return entry

    # ---- submission ----
    @property
    def requires_qc_any(self) -> bool:
        return any(d.requires_qc for d in self.devices)

    @property
    def requires_repair_any(self) -> bool:
        return any(d.requires_repair for d in self.devices)

    def blocking_error(self) -> Optional[str]:
        if not self.purchase_order_id:
            return MSG_SELECT_PO
        if not self.devices:
            return MSG_ADD_DEVICE
        if any(d.error for d in self.devices):
            return MSG_FIX_ERRORS
        return None
