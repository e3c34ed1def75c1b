import math
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional
from sqlalchemy.orm import Session
from labbooker.config import BookingPolicy, DEFAULT_POLICY
from labbooker.utils.persistence import find_user_last_booking_at
from labbooker.utils.timewindow import utcnow


@dataclass
class CooldownResult:
    allowed: bool
    remaining: Optional[timedelta] = None

    @property
    def days_remaining(self) -> int:
        if not self.remaining:
            return 0
        return math.ceil(self.remaining / timedelta(days=1))


def check_cooldown(
    db: Session,
    user_id: int,
    now: Optional[datetime] = None,
    policy: Optional[BookingPolicy] = None,
    exclude_id: Optional[int] = None,
) -> CooldownResult:
    """
    A user may not book again within ``cooldown_days`` of creating their last
    reservation. Cancelled reservations only count when the policy says so.
    """
    policy = policy or DEFAULT_POLICY
    now = now or utcnow()

    last_booking_at = find_user_last_booking_at(
        db, user_id, include_cancelled=policy.cooldown_counts_cancelled, exclude_id=exclude_id
    )
    if last_booking_at is None:
        return CooldownResult(allowed=True)

    cooldown_ends = last_booking_at + timedelta(days=policy.cooldown_days)
    if now < cooldown_ends:
        return CooldownResult(allowed=False, remaining=cooldown_ends - now)
    return CooldownResult(allowed=True)
