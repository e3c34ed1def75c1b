import os
from dataclasses import dataclass
from dotenv import load_dotenv

load_dotenv()

DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./data/lab_booking.db")

# JWT configuration
SECRET_KEY = os.getenv("SECRET_KEY", "change-me-lab-booker-secret")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "30"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Booking rules
BUFFER_HOURS = float(os.getenv("BOOKING_BUFFER_HOURS", "2"))
COOLDOWN_DAYS = int(os.getenv("BOOKING_COOLDOWN_DAYS", "3"))
MIN_DURATION_HOURS = float(os.getenv("BOOKING_MIN_DURATION_HOURS", "1"))

# "resource": reservations are exclusive per lab resource.
# "booking_type": reservations are exclusive per booking type as a whole.
EXCLUSIVITY_SCOPE = os.getenv("EXCLUSIVITY_SCOPE", "resource")

# Whether cancelled reservations still start a user's cooldown.
COOLDOWN_COUNTS_CANCELLED = os.getenv("COOLDOWN_COUNTS_CANCELLED", "0").strip() == "1"

# "all": a booking type is unavailable while any of its resources is offline.
# "any": it is available while at least one of its resources is eligible.
OFFLINE_POLICY = os.getenv("OFFLINE_POLICY", "all")


@dataclass(frozen=True)
class BookingPolicy:
    buffer_hours: float = BUFFER_HOURS
    cooldown_days: int = COOLDOWN_DAYS
    min_duration_hours: float = MIN_DURATION_HOURS
    exclusivity_scope: str = EXCLUSIVITY_SCOPE
    cooldown_counts_cancelled: bool = COOLDOWN_COUNTS_CANCELLED
    offline_policy: str = OFFLINE_POLICY

    def __post_init__(self):
        if self.exclusivity_scope not in ("resource", "booking_type"):
            raise ValueError(f"Unknown exclusivity scope: {self.exclusivity_scope}")
        if self.offline_policy not in ("all", "any"):
            raise ValueError(f"Unknown offline policy: {self.offline_policy}")


DEFAULT_POLICY = BookingPolicy()
