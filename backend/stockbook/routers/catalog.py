# stockbook/routers/catalog.py
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from stockbook.core.db import get_db
from stockbook.core.security import get_current_user
from stockbook.domain.validation import suggest_colors
from stockbook.schemas.catalog import TacRead, ConfigRead, GradeRead
from stockbook.services.classifier_service import find_tac, load_config, list_grades
from stockbook.services.tray_service import next_available_tray

router = APIRouter(tags=["catalog"], dependencies=[Depends(get_current_user)])


@router.get("/catalog/tac/{tac}", response_model=TacRead)
def get_tac(tac: str, db: Session = Depends(get_db)):
    row = find_tac(db, tac)
    if not row:
        raise HTTPException(status_code=404, detail="TAC not found")
    return row


@router.get("/catalog/configurations", response_model=ConfigRead)
def get_configuration(
    manufacturer: str = Query(..., min_length=1),
    model: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
):
    cfg = load_config(db, manufacturer, model)
    if cfg is None:
        raise HTTPException(status_code=404, detail="No configuration for this model")
    return ConfigRead(manufacturer=manufacturer, model_name=model, **cfg.model_dump())


@router.get("/catalog/configurations/colors", response_model=List[str])
def get_color_suggestions(
    manufacturer: str = Query(..., min_length=1),
    model: str = Query(..., min_length=1),
    q: str = Query(""),
    db: Session = Depends(get_db),
):
    """Colors of the model containing ``q`` (case-insensitive); empty without a configuration."""
    return suggest_colors(load_config(db, manufacturer, model), q)


@router.get("/catalog/grades", response_model=List[GradeRead])
def get_grades(db: Session = Depends(get_db)):
    return list_grades(db)


@router.get("/storage-locations/next-tray")
def get_next_tray(db: Session = Depends(get_db)):
    return {"location_code": next_available_tray(db)}
