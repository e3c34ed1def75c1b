import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from labbooker.db import get_db
from labbooker.models.reservation import Reservation, NON_TERMINAL_STATUSES
from labbooker.schemas.booking import BookingResponse, BookingStatusUpdate, SweepResponse
from labbooker.utils.auth import require_admin
from labbooker.utils.booking_rules import reopen
from labbooker.utils.errors import BookingError, to_http_exception
from labbooker.utils.persistence import update_reservation_status
from labbooker.utils.sweeper import sweep_session

logger = logging.getLogger(__name__)

router = APIRouter(
    tags=["admin"],
)


@router.put("/admin/bookings/{booking_id}", response_model=BookingResponse)
def override_booking_status(
    booking_id: int,
    update: BookingStatusUpdate,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    """
    Set a booking's status, including bookings that already finished.
    Reopening a finished booking fails with 409 if its slot has been booked since.
    Requires admin privileges.
    """
    booking = db.get(Reservation, booking_id)
    if not booking:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking not found")

    try:
        if booking.is_terminal and update.status in NON_TERMINAL_STATUSES:
            reopen(db, booking, update.status)
        else:
            update_reservation_status(db, booking_id, update.status, override=True)
    except BookingError as e:
        logger.error(f"Admin {admin['username']} could not set booking {booking_id} to {update.status}: {e.reason}")
        raise to_http_exception(e)
    logger.info(f"Admin {admin['username']} set booking {booking_id} to {update.status}")
    db.refresh(booking)
    return booking


@router.post("/booking-expiration", response_model=SweepResponse, status_code=status.HTTP_200_OK)
def expire_bookings(db: Session = Depends(get_db), admin: dict = Depends(require_admin)):
    """
    Expire finished bookings and activate started ones.
    """
    return sweep_session(db)
