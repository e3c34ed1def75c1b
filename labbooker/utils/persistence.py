"""
Reservation storage.

Availability is checked before a reservation is written, so two requests can
both see a free slot. Every write that claims a slot therefore bumps the
``booking_version`` of the row it was validated against (the resource, or the
booking type when bookings are exclusive per type) with a compare-and-set.
The database serializes those updates; the loser sees no matching row and
gets a ConflictError instead of a double booking.
"""
import logging
from datetime import datetime
from typing import Iterable, List, Optional
from sqlalchemy import func
from sqlalchemy.orm import Session
from labbooker.models.booking_type import BookingType
from labbooker.models.reservation import (
    ConnectionInfo,
    Reservation,
    NON_TERMINAL_STATUSES,
    RESERVATION_STATUSES,
    STATUS_ACTIVE,
    STATUS_CANCELLED,
    STATUS_SCHEDULED,
)
from labbooker.models.resource import LabResource
from labbooker.utils.access_codes import build_connection_values, generate_access_code
from labbooker.utils.errors import ConflictError, NotFoundError
from labbooker.utils.timewindow import TimeWindow, utcnow

logger = logging.getLogger(__name__)


def find_reservations(
    db: Session,
    *,
    user_id: Optional[int] = None,
    booking_type_id: Optional[int] = None,
    resource_id: Optional[int] = None,
    statuses: Optional[Iterable[str]] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
    skip: int = 0,
    limit: Optional[int] = None,
) -> List[Reservation]:
    query = db.query(Reservation)
    if user_id is not None:
        query = query.filter(Reservation.user_id == user_id)
    if booking_type_id is not None:
        query = query.filter(Reservation.booking_type_id == booking_type_id)
    if resource_id is not None:
        query = query.filter(Reservation.resource_id == resource_id)
    if statuses is not None:
        query = query.filter(Reservation.status.in_(list(statuses)))
    if start is not None:
        query = query.filter(Reservation.start_time >= start)
    if end is not None:
        query = query.filter(Reservation.start_time <= end)
    query = query.order_by(Reservation.start_time, Reservation.id).offset(skip)
    if limit is not None:
        query = query.limit(limit)
    return query.all()


def find_user_last_booking_at(
    db: Session, user_id: int, include_cancelled: bool = False, exclude_id: Optional[int] = None
) -> Optional[datetime]:
    query = db.query(func.max(Reservation.created_at)).filter(Reservation.user_id == user_id)
    if not include_cancelled:
        query = query.filter(Reservation.status != STATUS_CANCELLED)
    if exclude_id is not None:
        query = query.filter(Reservation.id != exclude_id)
    return query.scalar()


def claim_slot(db: Session, decision) -> None:
    """Compare-and-set the version of the row ``decision`` was validated against."""
    if decision.resource_id is not None:
        model, row_id = LabResource, decision.resource_id
    else:
        model, row_id = BookingType, decision.booking_type_id

    updated = (
        db.query(model)
        .filter(model.id == row_id, model.booking_version == decision.version)
        .update({model.booking_version: model.booking_version + 1}, synchronize_session=False)
    )
    if updated != 1:
        db.rollback()
        logger.warning(f"Stale availability for {model.__tablename__} {row_id} at version {decision.version}")
        raise ConflictError()


def attach_connection_info(db: Session, reservation: Reservation) -> None:
    """(Re)build a reservation's connection details from its current resource."""
    if reservation.resource_id is None:
        reservation.connection_info = None
        return

    resource = db.get(LabResource, reservation.resource_id)
    values = build_connection_values(resource.id, resource.resource_type, resource.connection_metadata)
    if not values:
        reservation.connection_info = None
    elif reservation.connection_info is not None:
        reservation.connection_info.values = values
    else:
        reservation.connection_info = ConnectionInfo(values=values)


def create_reservation(
    db: Session, user_id: int, booking_type_id: int, window: TimeWindow, decision
) -> Reservation:
    """Persist a validated booking. Raises ConflictError if the slot was taken meanwhile."""
    claim_slot(db, decision)

    reservation = Reservation(
        user_id=user_id,
        booking_type_id=booking_type_id,
        resource_id=decision.resource_id,
        start_time=window.start,
        end_time=window.end,
        status=STATUS_SCHEDULED,
        access_code=generate_access_code(),
    )
    db.add(reservation)
    attach_connection_info(db, reservation)

    db.commit()
    db.refresh(reservation)
    logger.info(f"Created reservation {reservation.id} on resource {reservation.resource_id}")
    return reservation


def reschedule_reservation(
    db: Session, reservation: Reservation, window: TimeWindow, decision, now: Optional[datetime] = None
) -> Reservation:
    claim_slot(db, decision)

    moved = reservation.resource_id != decision.resource_id
    reservation.start_time = window.start
    reservation.end_time = window.end
    reservation.resource_id = decision.resource_id
    if moved:
        attach_connection_info(db, reservation)
    # a running booking pushed into the future has not started yet
    if reservation.status == STATUS_ACTIVE and window.start > (now or utcnow()):
        reservation.status = STATUS_SCHEDULED
    db.commit()
    db.refresh(reservation)
    logger.info(f"Rescheduled reservation {reservation.id} to {window.start} - {window.end}")
    return reservation


def reopen_reservation(db: Session, reservation: Reservation, decision, status: str) -> Reservation:
    """Claim the reservation's slot again and set a live status on it."""
    if status not in NON_TERMINAL_STATUSES:
        raise ValueError(f"Cannot reopen a reservation as {status}")
    claim_slot(db, decision)

    reservation.status = status
    db.commit()
    db.refresh(reservation)
    logger.info(f"Reopened reservation {reservation.id} as {status}")
    return reservation


def update_reservation_status(
    db: Session, reservation_id: int, status: str, *, override: bool = False
) -> bool:
    """
    Set a reservation's status.

    Without ``override`` only live (scheduled or active) reservations change, so a
    terminal status is never overwritten by a late writer. ``override`` lets one
    terminal status replace another, but never makes a closed reservation live
    again: that needs its slot claimed, see ``booking_rules.reopen``. Returns
    whether a row was updated.
    """
    if status not in RESERVATION_STATUSES:
        raise ValueError(f"Unknown reservation status: {status}")
    if db.get(Reservation, reservation_id) is None:
        raise NotFoundError("reservation_not_found", "Booking not found")

    query = db.query(Reservation).filter(Reservation.id == reservation_id)
    if not override or status in NON_TERMINAL_STATUSES:
        query = query.filter(Reservation.status.in_(NON_TERMINAL_STATUSES))
    updated = query.update({Reservation.status: status}, synchronize_session=False)
    db.commit()
    logger.debug(f"Set reservation {reservation_id} to {status}: updated={updated}")
    return updated == 1
