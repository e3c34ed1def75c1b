import logging
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from labbooker.config import LOG_LEVEL
from labbooker.db import SessionLocal, init_database
from labbooker.models.reservation import (
    Reservation,
    NON_TERMINAL_STATUSES,
    STATUS_ACTIVE,
    STATUS_EXPIRED,
    STATUS_SCHEDULED,
)
from labbooker.utils.timewindow import utcnow

logger = logging.getLogger(__name__)


def expire_reservations(db: Session, now: Optional[datetime] = None) -> int:
    """Move live reservations whose window has ended to ``expired``."""
    now = now or utcnow()
    # conditioned on a live status so cancelled rows are never resurrected
    return (
        db.query(Reservation)
        .filter(Reservation.status.in_(NON_TERMINAL_STATUSES), Reservation.end_time <= now)
        .update({Reservation.status: STATUS_EXPIRED}, synchronize_session=False)
    )


def activate_reservations(db: Session, now: Optional[datetime] = None) -> int:
    """Move scheduled reservations whose window has begun to ``active``."""
    now = now or utcnow()
    return (
        db.query(Reservation)
        .filter(
            Reservation.status == STATUS_SCHEDULED,
            Reservation.start_time <= now,
            Reservation.end_time > now,
        )
        .update({Reservation.status: STATUS_ACTIVE}, synchronize_session=False)
    )


def sweep_session(db: Session, now: Optional[datetime] = None) -> dict:
    now = now or utcnow()
    expired = expire_reservations(db, now)
    activated = activate_reservations(db, now)
    db.commit()
    logger.info(f"Sweep at {now}: expired={expired}, activated={activated}")
    return {"expired": expired, "activated": activated}


def sweep() -> None:
    """Entry point for the periodic scheduler. Safe to call repeatedly."""
    db = SessionLocal()
    try:
        sweep_session(db)
    except Exception:
        db.rollback()
        logger.exception("Reservation sweep failed")
        raise
    finally:
        db.close()


def main():
    """Console entry point: `labbooker-sweep`, meant to run from cron."""
    logging.basicConfig(level=LOG_LEVEL)
    init_database()
    sweep()
