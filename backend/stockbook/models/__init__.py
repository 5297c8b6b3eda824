from .supplier import Supplier
from .purchase_order import PurchaseOrder
from .storage_location import StorageLocation
from .tac_code import TacCode
from .device_configuration import DeviceConfiguration
from .product_grade import ProductGrade
from .device import CellularDevice, SerialDevice
from .user import AppUser
__all__ = ["Supplier","PurchaseOrder","StorageLocation","TacCode","DeviceConfiguration","ProductGrade","CellularDevice","SerialDevice","AppUser"]
