from typing import List, Optional
from fastapi import APIRouter, Depends, HTTPException, status
from datetime import datetime
from sqlalchemy.orm import Session
from labbooker.db import get_db
from labbooker.models.reservation import Reservation, STATUS_CANCELLED
from labbooker.schemas.booking import (
    AvailabilityResponse,
    BookingCreate,
    BookingResponse,
    BookingUpdate,
    ConnectionInfoResponse,
)
from labbooker.utils.auth import get_current_user, is_admin
from labbooker.utils.booking_rules import book, check_availability, reschedule
from labbooker.utils.errors import BookingError, NotFoundError, to_http_exception
from labbooker.utils.persistence import find_reservations, update_reservation_status
from labbooker.utils.timewindow import TimeWindow
from labbooker.utils.validation_helpers import normalize_timestamp
import logging

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/bookings",
    tags=["bookings"],
)


def get_owned_booking(db: Session, booking_id: int, current_user: dict) -> Reservation:
    booking = db.query(Reservation).filter(Reservation.id == booking_id).first()
    if not booking:
        logger.error(f"Booking not found: {booking_id}")
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")
    if not is_admin(current_user) and booking.user_id != current_user["id"]:
        logger.error(f"User {current_user['username']} not authorized for booking {booking_id}")
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not authorized to access this booking")
    return booking


@router.post(
    "/",
    response_model=BookingResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new booking",
    description="Book a lab resource of the given booking type. Requires authentication."
)
def create_booking(
    booking: BookingCreate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """
    Create a new booking. A free resource of the booking type is picked automatically.

    - **booking_type_id**: ID of the booking type to book.
    - **start_time**: Start of the booking (ISO-8601).
    - **end_time**: End of the booking (ISO-8601).

    Rejections carry a `reason` tag and a human readable `message`.
    """
    logger.debug(
        f"Creating booking for user: {current_user['username']}, type: {booking.booking_type_id}, "
        f"{booking.start_time} - {booking.end_time}"
    )
    try:
        reservation = book(
            db, current_user["id"], booking.booking_type_id, booking.start_time, booking.end_time
        )
    except BookingError as e:
        logger.error(f"Booking rejected for user {current_user['username']}: {e.reason}")
        raise to_http_exception(e)
    return reservation


@router.get(
    "/",
    response_model=List[BookingResponse],
    summary="List bookings",
    description="List the caller's bookings, or every booking for administrators."
)
def get_bookings(
    booking_type_id: Optional[int] = None,
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """
    - **booking_type_id**: only bookings of this type.
    - **start_date** / **end_date**: only bookings starting in this range.
    """
    bookings = find_reservations(
        db,
        user_id=None if is_admin(current_user) else current_user["id"],
        booking_type_id=booking_type_id,
        start=normalize_timestamp(start_date),
        end=normalize_timestamp(end_date),
        skip=skip,
        limit=limit,
    )
    logger.debug(f"Retrieved {len(bookings)} bookings")
    return bookings


@router.get(
    "/availability",
    response_model=AvailabilityResponse,
    summary="Check availability",
    description="Check whether a booking type can take a time window right now."
)
def get_availability(
    booking_type_id: int,
    start_time: datetime,
    end_time: datetime,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """
    - **booking_type_id**: booking type to check.
    - **start_time** / **end_time**: the window to check (ISO-8601).
    """
    window = TimeWindow(normalize_timestamp(start_time), normalize_timestamp(end_time))
    if window.end <= window.start:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="end_time must be after start_time")

    decision = check_availability(db, booking_type_id, window)
    if isinstance(decision.error, NotFoundError):
        raise to_http_exception(decision.error)
    return {
        "available": decision.is_valid,
        "resource_id": decision.resource_id,
        "reason": decision.error.reason if decision.error else None,
    }


@router.get(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Get a booking by ID",
)
def get_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    return get_owned_booking(db, booking_id, current_user)


@router.put(
    "/{booking_id}",
    response_model=BookingResponse,
    summary="Reschedule a booking",
    description="Move a booking to a new time window. Requires ownership."
)
def update_booking(
    booking_id: int,
    booking_update: BookingUpdate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """
    Move a booking to a new window. The booking is revalidated as if it were new,
    ignoring itself, and may land on another resource of the same booking type.

    - **start_time**: (Optional) New start time.
    - **end_time**: (Optional) New end time.
    """
    db_booking = get_owned_booking(db, booking_id, current_user)
    new_start_time = booking_update.start_time or db_booking.start_time
    new_end_time = booking_update.end_time or db_booking.end_time

    try:
        db_booking = reschedule(db, db_booking, new_start_time, new_end_time)
    except BookingError as e:
        logger.error(f"Reschedule of booking {booking_id} rejected: {e.reason}")
        raise to_http_exception(e)
    logger.debug(f"Updated booking: {booking_id}, {db_booking.start_time} - {db_booking.end_time}")
    return db_booking


@router.delete(
    "/{booking_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Cancel a booking",
    description="Cancel a booking that has not finished yet. Requires ownership."
)
def cancel_booking(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    db_booking = get_owned_booking(db, booking_id, current_user)
    if not update_reservation_status(db, db_booking.id, STATUS_CANCELLED):
        db.refresh(db_booking)
        logger.error(f"Cannot cancel booking {booking_id} in status {db_booking.status}")
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Cannot cancel {db_booking.status} bookings",
        )
    logger.debug(f"Cancelled booking: {booking_id}")
    return None


@router.get(
    "/{booking_id}/connection-info",
    response_model=ConnectionInfoResponse,
    summary="Get connection details for a booking",
)
def get_connection_info(
    booking_id: int,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    db_booking = get_owned_booking(db, booking_id, current_user)
    if not db_booking.connection_info:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Connection info not found")
    return db_booking.connection_info
