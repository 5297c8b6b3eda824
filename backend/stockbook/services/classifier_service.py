from __future__ import annotations
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from stockbook.models import TacCode, DeviceConfiguration, ProductGrade
from stockbook.domain.booking import DeviceConfig

logger = logging.getLogger(__name__)


def find_tac(db: Session, tac: str) -> Optional[TacCode]:
    return db.query(TacCode).filter(TacCode.tac_code == tac).one_or_none()


def load_config(db: Session, manufacturer: str, model: str) -> Optional[DeviceConfig]:
    """Allowed colors/storage for a model, or None when nobody configured it."""
    if not manufacturer or not model:
        return None
    row = (
        db.query(DeviceConfiguration)
        .filter(DeviceConfiguration.manufacturer == manufacturer)
        .filter(DeviceConfiguration.model_name == model)
        .one_or_none()
    )
    if row is None:
        logger.debug("no configuration for %s %s", manufacturer, model)
        return None
    return DeviceConfig(available_colors=row.available_colors, storage_options=row.storage_options)


def get_or_create_tac(db: Session, tac: str, *, manufacturer: str, model: str) -> TacCode:
    row = find_tac(db, tac)
    if row:
        return row
    row = TacCode(tac_code=tac, manufacturer=manufacturer or None, model_name=model or None)
    db.add(row)
    # flush so a second device with the same prefix in this commit finds it
    db.flush()
    logger.info("TAC %s added (%s %s)", tac, manufacturer or "?", model or "?")
    return row


def list_grades(db: Session) -> List[ProductGrade]:
    return db.query(ProductGrade).order_by(ProductGrade.id.asc()).all()
