from contextlib import contextmanager
import logging
import os

from sqlalchemy import select

from stockbook.core.db import SessionLocal, Base, engine
from stockbook.core.security import hash_password
from stockbook.domain.constants import GRADES
from stockbook.models import (
    Supplier, PurchaseOrder, ProductGrade, TacCode, DeviceConfiguration, StorageLocation, AppUser,
)

logger = logging.getLogger(__name__)

# ---------- helpers ----------

@contextmanager
def session_scope():
    """One-off session (rollback on error)."""
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()

def get_one(db, model, **by):
    return db.execute(select(model).filter_by(**by)).scalars().first()

def get_or_create(db, model, unique_by: dict, defaults: dict | None = None):
    """Look up by unique_by, create when missing (idempotent)."""
    inst = get_one(db, model, **unique_by)
    if inst:
        return inst, False
    data = {**unique_by, **(defaults or {})}
    inst = model(**data)
    db.add(inst)
    # caller commits
    return inst, True

# ---------- reference data (idempotent) ----------

SUPPLIERS = [
    {"name": "Northwind Mobile", "phone": "+44 20 0000 0000", "email": "sales@northwind.example"},
    {"name": "Refurb Direct", "email": "orders@refurb.example"},
]

PURCHASE_ORDERS = [
    {"po_number": "PO-1001", "supplier": "Northwind Mobile", "status": "pending"},
    {"po_number": "PO-1002", "supplier": "Refurb Direct", "status": "pending"},
    {"po_number": "PO-0999", "supplier": "Northwind Mobile", "status": "received"},
]

TAC_CODES = [
    {"tac_code": "35328611", "manufacturer": "Apple", "model_name": "iPhone 13"},
    {"tac_code": "35391110", "manufacturer": "Samsung", "model_name": "Galaxy S21"},
    {"tac_code": "86753009", "manufacturer": "Google", "model_name": "Pixel 6"},
]

CONFIGURATIONS = [
    {"manufacturer": "Apple", "model_name": "iPhone 13",
     "available_colors": ["Midnight", "Starlight", "Blue", "Pink", "Red"],
     "storage_options": ["128", "256", "512"]},
    {"manufacturer": "Samsung", "model_name": "Galaxy S21",
     "available_colors": ["Phantom Gray", "Phantom White", "Phantom Violet"],
     "storage_options": ["128", "256"]},
]

LOCATIONS = ["TRAY001", "TRAY002"]


def seed_reference_data(db) -> None:
    for gid, letter in GRADES.items():
        get_or_create(db, ProductGrade, {"id": gid}, defaults={"grade": letter})

    for s in SUPPLIERS:
        get_or_create(db, Supplier, {"name": s["name"]}, defaults=s)
    db.flush()

    for po in PURCHASE_ORDERS:
        supp = get_one(db, Supplier, name=po["supplier"])
        get_or_create(db, PurchaseOrder, {"po_number": po["po_number"]},
                      defaults={"supplier_id": supp.id, "status": po["status"]})

    for t in TAC_CODES:
        get_or_create(db, TacCode, {"tac_code": t["tac_code"]}, defaults=t)

    for c in CONFIGURATIONS:
        get_or_create(db, DeviceConfiguration,
                      {"manufacturer": c["manufacturer"], "model_name": c["model_name"]}, defaults=c)

    for code in LOCATIONS:
        get_or_create(db, StorageLocation, {"location_code": code})


def seed_admin(db) -> None:
    username = os.getenv("SEED_ADMIN_USER", "admin")
    password = os.getenv("SEED_ADMIN_PASSWORD", "Passw0rd!")
    get_or_create(db, AppUser, {"username": username},
                  defaults={"hashed_password": hash_password(password), "role": "admin", "full_name": "Administrator"})


def run():
    Base.metadata.create_all(bind=engine)
    with session_scope() as db:
        logger.info("seeding grades / suppliers / POs / TACs / configurations / trays")
        seed_reference_data(db)
    with session_scope() as db:
        seed_admin(db)
    logger.info("seed done")

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    run()
