# backend/stockbook/services/booking_service.py
from __future__ import annotations
import logging
import os
import threading
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Dict, Iterator, List, Optional, Tuple

from fastapi import HTTPException, status
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import Session

from stockbook.models import CellularDevice, SerialDevice
from stockbook.domain.booking import DeviceEntry, ShipmentBooking, derive_status
from stockbook.domain.constants import (
    DeviceKind, IDENTIFIER_LABELS, DEFAULT_BOOKING_IDLE_MINUTES,
    MSG_IDENTIFIER_REQUIRED, MSG_IMEI_FORMAT, MSG_ALREADY_SCANNED, MSG_ALREADY_EXISTS,
)
from stockbook.domain.identifiers import normalize_identifier, is_valid_imei, tac_of
from stockbook.services.classifier_service import find_tac, load_config, get_or_create_tac
from stockbook.services.purchase_service import get_po, set_requirement_flags
from stockbook.services.tray_service import next_available_tray, resolve_location_id

logger = logging.getLogger(__name__)

# Open bookings live in this process only, like the scan dialog they back.
_BOOKINGS: Dict[str, ShipmentBooking] = {}
_LOCK = threading.Lock()

# open bookings untouched for longer than this are dropped (0 = never)
IDLE_TIMEOUT = timedelta(minutes=int(os.getenv("BOOKING_IDLE_MINUTES", str(DEFAULT_BOOKING_IDLE_MINUTES))))


def _sweep_expired(now: Optional[datetime] = None) -> None:
    """Drop idle bookings. Caller holds _LOCK."""
    if IDLE_TIMEOUT <= timedelta(0):
        return
    now = now or datetime.now(timezone.utc)
    for booking_id, booking in list(_BOOKINGS.items()):
        if booking.idle_for(now) > IDLE_TIMEOUT:
            del _BOOKINGS[booking_id]
            booking.closed = True
            logger.info("booking %s expired after %s idle with %d device(s)",
                        booking_id, IDLE_TIMEOUT, len(booking))


@contextmanager
def _working_on(booking: ShipmentBooking) -> Iterator[ShipmentBooking]:
    """One request at a time per booking; a closed booking is gone."""
    with booking.lock:
        if booking.closed:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
        booking.touch()
        yield booking


# -------- Registry --------
def open_booking(
    db: Session, *,
    device_kind: DeviceKind,
    requires_qc: bool = True,
    requires_repair: bool = False,
    purchase_order_id: Optional[int] = None,
) -> ShipmentBooking:
    if purchase_order_id:
        get_po(db, purchase_order_id)

    booking = ShipmentBooking(
        device_kind,
        next_available_tray(db),
        requires_qc=requires_qc,
        requires_repair=requires_repair,
        purchase_order_id=purchase_order_id,
    )
    with _LOCK:
        _sweep_expired()
        _BOOKINGS[booking.id] = booking
    logger.info("booking %s opened (%s, start=%s)", booking.id, device_kind, booking.start_tray)
    return booking


def get_booking(booking_id: str) -> ShipmentBooking:
    with _LOCK:
        _sweep_expired()
        booking = _BOOKINGS.get(booking_id)
        if booking is not None:
            booking.touch()
    if booking is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    return booking


def discard_booking(booking_id: str) -> ShipmentBooking:
    with _LOCK:
        booking = _BOOKINGS.pop(booking_id, None)
    if booking is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    with booking.lock:
        booking.closed = True
    logger.info("booking %s discarded with %d device(s)", booking_id, len(booking))
    return booking



def update_settings(db: Session, booking: ShipmentBooking, changes: dict) -> ShipmentBooking:
    """PO selection and batch defaults. Batch flags only affect later scans."""
    with _working_on(booking):
        if "purchase_order_id" in changes:
            po_id = changes["purchase_order_id"]
            if po_id:
                get_po(db, po_id)
            booking.purchase_order_id = po_id or None
        if changes.get("requires_qc") is not None:
            booking.requires_qc = bool(changes["requires_qc"])
        if changes.get("requires_repair") is not None:
            booking.requires_repair = bool(changes["requires_repair"])
        return booking


# -------- Scan --------
def device_exists(db: Session, device_kind: DeviceKind, identifier: str) -> bool:
    if device_kind == "cellular":
        q = db.query(CellularDevice.id).filter(CellularDevice.imei == identifier)
    else:
        q = db.query(SerialDevice.id).filter(SerialDevice.serial_number == identifier)
    return q.first() is not None


def _remember_config(db: Session, booking: ShipmentBooking, manufacturer: str, model: str) -> None:
    if manufacturer and model and not booking.has_config(manufacturer, model):
        booking.remember_config(manufacturer, model, load_config(db, manufacturer, model))


def scan_identifier(db: Session, booking: ShipmentBooking, raw: Optional[str]) -> DeviceEntry:
    identifier = normalize_identifier(raw)
    if not identifier:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=MSG_IDENTIFIER_REQUIRED)

    # format is checked before anything is looked up
    if booking.device_kind == "cellular" and not is_valid_imei(identifier):
        logger.info("rejected scan %r: bad IMEI format", identifier)
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=MSG_IMEI_FORMAT)

    with _working_on(booking):
        if identifier in booking:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=MSG_ALREADY_SCANNED.format(identifier))

        if device_exists(db, booking.device_kind, identifier):
            logger.info("rejected scan %s: already in stock", identifier)
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=MSG_ALREADY_EXISTS.format(IDENTIFIER_LABELS[booking.device_kind]),
            )

        manufacturer = model = ""
        if booking.device_kind == "cellular":
            tac = find_tac(db, tac_of(identifier))
            if tac:
                manufacturer = tac.manufacturer or ""
                model = tac.model_name or ""
                _remember_config(db, booking, manufacturer, model)

        entry = booking.add(booking.new_entry(identifier, manufacturer, model))
    logger.info("booking %s: %s -> %s (%s %s)", booking.id, identifier, entry.location,
                manufacturer or "?", model or "?")
    return entry


# -------- Edit / remove --------
def update_device(db: Session, booking: ShipmentBooking, identifier: str, changes: dict) -> Tuple[DeviceEntry, bool]:
    """
    Apply edits and re-validate. The second value tells the client to play
    the error alert.
    """
    with _working_on(booking):
        entry = booking.find(identifier)
        if entry is None:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Device not in this booking")

        _remember_config(
            db, booking,
            changes.get("manufacturer", entry.manufacturer),
            changes.get("model", entry.model),
        )
        try:
            entry = booking.update(identifier, changes)
        except ValueError as e:
            raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(e))

    if entry.error:
        logger.info("booking %s: %s invalid: %s", booking.id, identifier, entry.error.replace("\n", "; "))
    return entry, bool(entry.error)


def remove_device(booking: ShipmentBooking, identifier: str) -> DeviceEntry:
    with _working_on(booking):
        try:
            return booking.remove(identifier)
        except KeyError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Device not in this booking")


# -------- Submit --------
def _storage_gb(storage: str) -> Optional[int]:
    return int(storage) if storage else None


def _device_row(booking: ShipmentBooking, device: DeviceEntry, *, location_id, tac_id, user_id):
    common = dict(
        color=device.color or None,
        grade_id=device.grade or None,
        status=derive_status(device.requires_qc, device.requires_repair),
        location_id=location_id,
        created_by=user_id,
        updated_by=user_id,
    )
    if booking.device_kind == "cellular":
        return CellularDevice(
            imei=device.identifier,
            tac_id=tac_id,
            storage_gb=_storage_gb(device.storage),
            **common,
        )
    return SerialDevice(
        serial_number=device.identifier,
        manufacturer=device.manufacturer or None,
        model_name=device.model or None,
        **common,
    )


def submit_booking(db: Session, booking: ShipmentBooking, *, user_id: Optional[int]) -> dict:
    """
    Persist every device of the booking and stamp the PO flags in one
    transaction. The first failure rolls everything back and is reported.

    A second submit of the same booking waits for the first and then finds
    it closed (404).
    """
    with _working_on(booking):
        blocked = booking.blocking_error()
        if blocked:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=blocked)

        created = _commit(db, booking, user_id=user_id)

        booking.closed = True
        with _LOCK:
            _BOOKINGS.pop(booking.id, None)

    logger.info("booking %s committed: %d %s device(s) on PO %s",
                booking.id, len(created), booking.device_kind, booking.purchase_order_id)
    return {
        "booking_id": booking.id,
        "purchase_order_id": booking.purchase_order_id,
        "device_kind": booking.device_kind,
        "created": len(created),
        "device_ids": [r.id for r in created],
        "trays": booking.trays(),
    }


def _commit(db: Session, booking: ShipmentBooking, *, user_id: Optional[int]) -> List:
    created: List = []
    current: Optional[str] = None
    try:
        set_requirement_flags(
            db,
            po_id=booking.purchase_order_id,
            requires_qc=booking.requires_qc_any,
            requires_repair=booking.requires_repair_any,
        )

        for device in booking.devices:
            current = device.identifier
            tac_id = None
            if booking.device_kind == "cellular":
                tac_id = get_or_create_tac(
                    db, tac_of(device.identifier),
                    manufacturer=device.manufacturer, model=device.model,
                ).id
            row = _device_row(
                booking, device,
                location_id=resolve_location_id(db, device.location),
                tac_id=tac_id,
                user_id=user_id,
            )
            db.add(row)
            db.flush()
            created.append(row)

        db.commit()
    except HTTPException:
        db.rollback()
        raise
    except IntegrityError as e:
        db.rollback()
        msg = str(getattr(e, "orig", e))
        logger.warning("booking %s rolled back at %s: %s", booking.id, current, msg)
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"db_error: {msg}")
    except DBAPIError as e:
        db.rollback()
        msg = str(getattr(e, "orig", e))
        logger.warning("booking %s rolled back at %s: %s", booking.id, current, msg)
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=f"db_error: {msg}")
    except Exception as e:
        db.rollback()
        logger.exception("submit_booking error (booking=%s, device=%s)", booking.id, current)
        raise HTTPException(status_code=500, detail=f"submit_booking error: {type(e).__name__}: {e}")
    return created
