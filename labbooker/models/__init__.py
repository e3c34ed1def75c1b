from labbooker.models.user import User
from labbooker.models.resource import LabResource
from labbooker.models.booking_type import BookingType, BookingTypeResource
from labbooker.models.reservation import Reservation, ConnectionInfo

__all__ = [
    "User",
    "LabResource",
    "BookingType",
    "BookingTypeResource",
    "Reservation",
    "ConnectionInfo",
]
