# stockbook/routers/shipments.py
from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.orm import Session

from stockbook.core.db import get_db
from stockbook.core.security import require_roles
from stockbook.models.user import AppUser
from stockbook.schemas.shipment import (
    BookingCreate, BookingSettings, BookingRead, ScanIn, DeviceUpdate, DeviceRead, SubmitRead,
)
from stockbook.services import booking_service as svc

router = APIRouter(prefix="/shipments/bookings", tags=["shipments"])

# intake|admin guard
Guard = require_roles("intake", "admin")


def _device_read(entry, alert: bool = False) -> DeviceRead:
    return DeviceRead(**entry.model_dump(exclude={"status"}), alert=alert)


@router.post("", response_model=BookingRead, status_code=status.HTTP_201_CREATED, dependencies=[Depends(Guard)])
def open_booking(payload: BookingCreate, db: Session = Depends(get_db)):
    booking = svc.open_booking(
        db,
        device_kind=payload.device_kind,
        requires_qc=payload.requires_qc,
        requires_repair=payload.requires_repair,
        purchase_order_id=payload.purchase_order_id,
    )
    return BookingRead.from_booking(booking)


@router.get("/{booking_id}", response_model=BookingRead, dependencies=[Depends(Guard)])
def get_booking(booking_id: str):
    return BookingRead.from_booking(svc.get_booking(booking_id))


@router.patch("/{booking_id}", response_model=BookingRead, dependencies=[Depends(Guard)])
def update_booking(booking_id: str, payload: BookingSettings, db: Session = Depends(get_db)):
    booking = svc.update_settings(db, svc.get_booking(booking_id), payload.model_dump(exclude_unset=True))
    return BookingRead.from_booking(booking)


@router.delete("/{booking_id}", status_code=status.HTTP_204_NO_CONTENT, dependencies=[Depends(Guard)])
def discard_booking(booking_id: str):
    svc.discard_booking(booking_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# serials are not validated and may contain "/", so device routes take a path segment
# --- Scanner ---
@router.post("/{booking_id}/scan", response_model=DeviceRead, status_code=status.HTTP_201_CREATED, dependencies=[Depends(Guard)])
def scan(booking_id: str, payload: ScanIn, db: Session = Depends(get_db)):
    entry = svc.scan_identifier(db, svc.get_booking(booking_id), payload.identifier)
    return _device_read(entry, alert=bool(entry.error))


@router.patch("/{booking_id}/devices/{identifier:path}", response_model=DeviceRead, dependencies=[Depends(Guard)])
def edit_device(booking_id: str, identifier: str, payload: DeviceUpdate, db: Session = Depends(get_db)):
    entry, alert = svc.update_device(
        db, svc.get_booking(booking_id), identifier, payload.model_dump(exclude_unset=True)
    )
    return _device_read(entry, alert=alert)


@router.delete("/{booking_id}/devices/{identifier:path}", response_model=BookingRead, dependencies=[Depends(Guard)])
def remove_device(booking_id: str, identifier: str):
    booking = svc.get_booking(booking_id)
    svc.remove_device(booking, identifier)
    return BookingRead.from_booking(booking)


# --- Commit ---
@router.post("/{booking_id}/submit", response_model=SubmitRead)
def submit(booking_id: str, db: Session = Depends(get_db), current: AppUser = Depends(Guard)):
    return svc.submit_booking(db, svc.get_booking(booking_id), user_id=current.id)
