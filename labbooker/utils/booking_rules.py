"""
Booking validation.

``validate_booking`` runs the booking rules in a fixed order and stops at the
first failure:

1. duration bounds
2. start time not in the past
3. booking type exists, is active and its resources are online
4. the user's cooldown has passed
5. a resource (or the booking type as a whole) is free for the window

Rule failures are returned as a typed error on the decision, never raised.
``book`` and ``reschedule`` turn a decision into a stored reservation.
``check_availability`` answers the allocation question on its own, and
``reopen`` puts a closed reservation back on the books.
"""
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional
from sqlalchemy.orm import Session
from labbooker.config import BookingPolicy, DEFAULT_POLICY
from labbooker.models.booking_type import BookingType
from labbooker.models.reservation import Reservation
from labbooker.utils.cooldown import check_cooldown
from labbooker.utils.directory import (
    find_resources_for_type,
    get_booking_type,
    is_eligible,
    offline_resources,
)
from labbooker.utils.errors import (
    BookingError,
    ConflictError,
    NotFoundError,
    PolicyViolation,
    ValidationError,
)
from labbooker.utils.persistence import create_reservation, reopen_reservation, reschedule_reservation
from labbooker.utils.scheduler import find_available_resource, find_conflicts, is_available
from labbooker.utils.timewindow import TimeWindow, duration_hours, utcnow

logger = logging.getLogger(__name__)


@dataclass
class BookingDecision:
    booking_type_id: int
    resource_id: Optional[int] = None
    # booking_version of the row the slot was checked against
    version: Optional[int] = None
    error: Optional[BookingError] = None

    @property
    def is_valid(self) -> bool:
        return self.error is None


def check_duration(
    window: TimeWindow, booking_type: Optional[BookingType], policy: BookingPolicy
) -> Optional[ValidationError]:
    if window.end <= window.start:
        return ValidationError("duration_out_of_bounds", "Booking end time must be after its start time")

    hours = duration_hours(window.start, window.end)
    if hours < policy.min_duration_hours:
        return ValidationError(
            "duration_out_of_bounds",
            f"Booking duration must be at least {policy.min_duration_hours:g} hour(s)",
        )
    max_hours = booking_type.max_duration_hours if booking_type is not None else None
    if max_hours is not None and hours > max_hours:
        return ValidationError(
            "duration_out_of_bounds",
            f"Booking duration cannot exceed {max_hours:g} hours",
        )
    return None


def check_booking_type(
    db: Session, booking_type: Optional[BookingType], booking_type_id: int, policy: BookingPolicy
) -> Optional[BookingError]:
    if booking_type is None:
        return NotFoundError("booking_type_not_found", "Booking type not found")
    if not booking_type.is_active:
        return PolicyViolation("booking_type_inactive", "Booking type is not active")

    resources = find_resources_for_type(db, booking_type_id)
    if policy.offline_policy == "all":
        offline = offline_resources(resources)
        if offline:
            names = ", ".join(resource.name for resource in offline)
            return PolicyViolation("resources_offline", f"Resources are offline: {names}")
    elif resources and not any(is_eligible(resource) for resource in resources):
        return PolicyViolation("resources_offline", "All resources for this booking type are offline")
    return None


def validate_booking(
    db: Session,
    user_id: int,
    booking_type_id: int,
    start_time: datetime,
    end_time: datetime,
    now: Optional[datetime] = None,
    policy: Optional[BookingPolicy] = None,
    exclude_id: Optional[int] = None,
) -> BookingDecision:
    """
    Decide whether ``user_id`` may book ``booking_type_id`` for ``[start_time, end_time)``.

    ``exclude_id`` ignores one existing reservation, used when revalidating an edit
    of that reservation. On success the decision names the allocated resource
    (None when bookings are exclusive per booking type).
    """
    policy = policy or DEFAULT_POLICY
    now = now or utcnow()
    window = TimeWindow(start_time, end_time)
    booking_type = get_booking_type(db, booking_type_id)

    def reject(error: BookingError) -> BookingDecision:
        logger.info(f"Rejected booking for user {user_id} on type {booking_type_id}: {error.reason}")
        return BookingDecision(booking_type_id=booking_type_id, error=error)

    error = check_duration(window, booking_type, policy)
    if error:
        return reject(error)

    if start_time < now:
        return reject(ValidationError("start_in_past", "Booking start time must be in the future"))

    error = check_booking_type(db, booking_type, booking_type_id, policy)
    if error:
        return reject(error)

    cooldown = check_cooldown(db, user_id, now=now, policy=policy, exclude_id=exclude_id)
    if not cooldown.allowed:
        return reject(
            PolicyViolation(
                "cooldown_active",
                f"Cooldown active: {cooldown.days_remaining} day(s) remaining. "
                f"Cooldown period is {policy.cooldown_days} days.",
            )
        )

    decision = allocate(db, booking_type, window, policy, exclude_id=exclude_id)
    if not decision.is_valid:
        return reject(decision.error)
    logger.debug(f"Booking for user {user_id} fits on resource {decision.resource_id}")
    return decision


def allocate(
    db: Session,
    booking_type: BookingType,
    window: TimeWindow,
    policy: BookingPolicy,
    exclude_id: Optional[int] = None,
) -> BookingDecision:
    """Pick the slot owner for ``window``: a resource, or the booking type itself."""
    if policy.exclusivity_scope == "booking_type":
        if not is_available(
            db, window, booking_type_id=booking_type.id, buffer=policy.buffer_hours, exclude_id=exclude_id
        ):
            return BookingDecision(booking_type_id=booking_type.id, error=no_availability())
        return BookingDecision(booking_type_id=booking_type.id, version=booking_type.booking_version)

    resource = find_available_resource(
        db, booking_type.id, window, buffer=policy.buffer_hours, exclude_id=exclude_id
    )
    if resource is None:
        return BookingDecision(booking_type_id=booking_type.id, error=no_availability())
    return BookingDecision(
        booking_type_id=booking_type.id,
        resource_id=resource.id,
        version=resource.booking_version,
    )


def check_availability(
    db: Session, booking_type_id: int, window: TimeWindow, policy: Optional[BookingPolicy] = None
) -> BookingDecision:
    """
    Answer "could this window be booked?" without a user: the booking type,
    offline and allocation rules of ``validate_booking``, minus duration,
    start time and cooldown.
    """
    policy = policy or DEFAULT_POLICY
    booking_type = get_booking_type(db, booking_type_id)
    error = check_booking_type(db, booking_type, booking_type_id, policy)
    if error:
        return BookingDecision(booking_type_id=booking_type_id, error=error)
    return allocate(db, booking_type, window, policy)


def no_availability() -> PolicyViolation:
    return PolicyViolation(
        "no_availability",
        "No available resources for the selected time slot. All resources are booked or have buffer periods.",
    )


def book(
    db: Session,
    user_id: int,
    booking_type_id: int,
    start_time: datetime,
    end_time: datetime,
    now: Optional[datetime] = None,
    policy: Optional[BookingPolicy] = None,
    attempts: int = 2,
) -> Reservation:
    """Validate and store a booking, revalidating if a concurrent booking took the slot first."""
    window = TimeWindow(start_time, end_time)
    for attempt in range(1, attempts + 1):
        decision = validate_booking(db, user_id, booking_type_id, start_time, end_time, now=now, policy=policy)
        if not decision.is_valid:
            raise decision.error
        try:
            return create_reservation(db, user_id, booking_type_id, window, decision)
        except ConflictError:
            logger.warning(f"Booking attempt {attempt}/{attempts} for user {user_id} lost the slot")
            if attempt == attempts:
                raise
    raise ConflictError()


def reschedule(
    db: Session,
    reservation: Reservation,
    start_time: datetime,
    end_time: datetime,
    now: Optional[datetime] = None,
    policy: Optional[BookingPolicy] = None,
    attempts: int = 2,
) -> Reservation:
    """Move a live reservation to a new window, possibly onto another resource of its type."""
    if reservation.is_terminal:
        raise PolicyViolation("reservation_closed", f"Cannot change a {reservation.status} booking")

    now = now or utcnow()
    window = TimeWindow(start_time, end_time)
    for attempt in range(1, attempts + 1):
        decision = validate_booking(
            db,
            reservation.user_id,
            reservation.booking_type_id,
            start_time,
            end_time,
            now=now,
            policy=policy,
            exclude_id=reservation.id,
        )
        if not decision.is_valid:
            raise decision.error
        try:
            return reschedule_reservation(db, reservation, window, decision, now=now)
        except ConflictError:
            logger.warning(f"Reschedule attempt {attempt}/{attempts} for reservation {reservation.id} lost the slot")
            if attempt == attempts:
                raise
    raise ConflictError()


def reopen(
    db: Session, reservation: Reservation, status: str, policy: Optional[BookingPolicy] = None
) -> Reservation:
    """
    Put a terminal reservation back into ``status`` (scheduled or active).

    Its slot may have been booked since it closed, so the window is checked
    again on the reservation's own resource (or its booking type) and claimed
    through the storage guard. Raises ConflictError when the slot is taken.
    """
    policy = policy or DEFAULT_POLICY
    if reservation.resource_id is not None:
        scope = {"resource_id": reservation.resource_id}
        version = reservation.resource.booking_version
    else:
        scope = {"booking_type_id": reservation.booking_type_id}
        version = reservation.booking_type.booking_version

    conflicts = find_conflicts(
        db, reservation.window, buffer=policy.buffer_hours, exclude_id=reservation.id, **scope
    )
    if conflicts:
        logger.info(f"Cannot reopen reservation {reservation.id}: slot taken by {[r.id for r in conflicts]}")
        raise ConflictError("slot_taken", "The booking's slot has been taken by another booking")

    decision = BookingDecision(
        booking_type_id=reservation.booking_type_id,
        resource_id=reservation.resource_id,
        version=version,
    )
    return reopen_reservation(db, reservation, decision, status)
