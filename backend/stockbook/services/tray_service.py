from __future__ import annotations
import logging
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from stockbook.models import StorageLocation
from stockbook.domain.constants import FIRST_TRAY, TRAY_PREFIX, TRAY_CAPACITY
from stockbook.domain.identifiers import format_tray_code, parse_tray_code, is_tray_code

logger = logging.getLogger(__name__)


def max_tray_code(db: Session) -> Optional[str]:
    # longer codes first so TRAY1000 sorts above TRAY999
    rows = (
        db.query(StorageLocation.location_code)
        .filter(StorageLocation.location_code.like(f"{TRAY_PREFIX}%"))
        .order_by(func.length(StorageLocation.location_code).desc(), StorageLocation.location_code.desc())
        .limit(20)
        .all()
    )
    for (code,) in rows:
        if is_tray_code(code):
            return code
    return None


def next_available_tray(db: Session) -> str:
    last = max_tray_code(db)
    if last is None:
        return FIRST_TRAY
    return format_tray_code(parse_tray_code(last) + 1)


def resolve_location_id(db: Session, code: str) -> Optional[int]:
    """
    Storage-location id for a tray code. Trays handed out by a booking do not
    exist yet, so a missing one is created here (inside the caller's
    transaction).
    """
    if not code:
        return None
    loc = db.query(StorageLocation).filter(StorageLocation.location_code == code).one_or_none()
    if loc is None:
        loc = StorageLocation(location_code=code, capacity=TRAY_CAPACITY)
        db.add(loc)
        db.flush()
        logger.info("storage location %s created (id=%s)", code, loc.id)
    return loc.id
