# backend/stockbook/domain/constants.py

"""
Single source for intake rules and the user-facing messages they produce.
"""

from typing import Final, Literal, get_args

# ---- Trays ----
TRAY_CAPACITY: Final[int] = 50
TRAY_PREFIX: Final[str] = "TRAY"
TRAY_DIGITS: Final[int] = 3
FIRST_TRAY: Final[str] = "TRAY001"

# ---- Identifiers ----
IMEI_LENGTH: Final[int] = 15
TAC_LENGTH: Final[int] = 8

DeviceKind = Literal["cellular", "serial"]
DEVICE_KINDS: Final[tuple] = get_args(DeviceKind)

# ---- Device status (first matching flag wins) ----
STATUS_QC_REQUIRED: Final[str] = "qc_required"
STATUS_REPAIR: Final[str] = "repair"
STATUS_IN_STOCK: Final[str] = "in_stock"
DEVICE_STATUSES: Final[tuple] = (STATUS_QC_REQUIRED, STATUS_REPAIR, STATUS_IN_STOCK)

# ---- Purchase orders ----
PoStatus = Literal["draft", "pending", "received", "cancelled"]
PO_STATUSES: Final[tuple] = get_args(PoStatus)
PO_STATUS_PENDING: Final[str] = "pending"

# ---- Users ----
Role = Literal["viewer", "intake", "qc", "admin"]
ROLES: Final[tuple] = get_args(Role)

# ---- Grades (product_grades.id -> letter) ----
GRADES: Final[dict] = {1: "A", 2: "B", 3: "C", 4: "D", 5: "E", 6: "F"}

# ---- Messages ----
MSG_IMEI_FORMAT: Final[str] = "IMEI must be exactly 15 digits"
MSG_IDENTIFIER_REQUIRED: Final[str] = "Identifier is required"
MSG_ALREADY_SCANNED: Final[str] = "Device {} is already in this shipment"
MSG_ALREADY_EXISTS: Final[str] = "Device with this {} already exists"
MSG_SELECT_PO: Final[str] = "Please select a purchase order"
MSG_ADD_DEVICE: Final[str] = "Please add at least one device"
MSG_FIX_ERRORS: Final[str] = "Please correct device configuration errors before proceeding"
MSG_INVALID_COLOR: Final[str] = "Invalid color. Available colors: {}"
MSG_INVALID_STORAGE: Final[str] = "Invalid storage option. Available options: {}GB"

# label used in "already exists" messages
IDENTIFIER_LABELS: Final[dict] = {"cellular": "IMEI", "serial": "serial number"}

# ---- Open bookings ----
# minutes without activity before an open booking is dropped, 0 keeps them
DEFAULT_BOOKING_IDLE_MINUTES: Final[int] = 240


def sql_in(column: str, values: tuple) -> str:
    """CHECK constraint body for a fixed value list."""
    return f"{column} IN ({', '.join(repr(v) for v in values)})"
