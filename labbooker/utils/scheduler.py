import logging
from typing import List, Optional
from sqlalchemy.orm import Session
from labbooker.config import BUFFER_HOURS
from labbooker.models.reservation import Reservation, NON_TERMINAL_STATUSES
from labbooker.models.resource import LabResource
from labbooker.utils.directory import find_resources_for_type, is_eligible
from labbooker.utils.timewindow import Hours, TimeWindow, as_timedelta, expand, overlaps

logger = logging.getLogger(__name__)


def find_conflicts(
    db: Session,
    window: TimeWindow,
    *,
    resource_id: Optional[int] = None,
    booking_type_id: Optional[int] = None,
    buffer: Optional[Hours] = None,
    exclude_id: Optional[int] = None,
) -> List[Reservation]:
    """
    Find the live reservations that block ``window``.

    A candidate conflicts with an existing reservation when it overlaps that
    reservation widened by ``buffer`` on both sides, so consecutive bookings on
    the same resource (or booking type) are always at least ``buffer`` apart.
    Exactly one of ``resource_id`` and ``booking_type_id`` selects the scope.
    """
    if (resource_id is None) == (booking_type_id is None):
        raise ValueError("Pass exactly one of resource_id or booking_type_id")

    gap = as_timedelta(BUFFER_HOURS if buffer is None else buffer)

    query = db.query(Reservation).filter(
        Reservation.status.in_(NON_TERMINAL_STATUSES),
        Reservation.start_time < window.end + gap,
        Reservation.end_time > window.start - gap,
    )
    if resource_id is not None:
        query = query.filter(Reservation.resource_id == resource_id)
    else:
        query = query.filter(Reservation.booking_type_id == booking_type_id)
    if exclude_id is not None:
        query = query.filter(Reservation.id != exclude_id)

    return [
        reservation
        for reservation in query.order_by(Reservation.start_time).all()
        if overlaps(window, expand(reservation.window, gap, gap))
    ]


def count_conflicts(db: Session, window: TimeWindow, **scope) -> int:
    return len(find_conflicts(db, window, **scope))


def is_available(db: Session, window: TimeWindow, **scope) -> bool:
    return count_conflicts(db, window, **scope) == 0


def find_available_resource(
    db: Session,
    booking_type_id: int,
    window: TimeWindow,
    buffer: Optional[Hours] = None,
    exclude_id: Optional[int] = None,
) -> Optional[LabResource]:
    """
    Find the first resource of a booking type that can take ``window``.

    Resources are tried in the order they were attached to the booking type and
    the first eligible one without conflicts wins. Changing this order changes
    which resource a booking lands on.
    """
    for resource in find_resources_for_type(db, booking_type_id):
        if not is_eligible(resource):
            logger.debug(f"Skipping resource {resource.id}: active={resource.is_active}, status={resource.status}")
            continue
        conflicts = count_conflicts(
            db, window, resource_id=resource.id, buffer=buffer, exclude_id=exclude_id
        )
        if conflicts == 0:
            logger.debug(f"Allocated resource {resource.id} for booking type {booking_type_id}")
            return resource
        logger.debug(f"Resource {resource.id} has {conflicts} conflicting reservation(s)")

    return None
