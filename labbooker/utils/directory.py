from typing import List, Optional
from sqlalchemy.orm import Session
from labbooker.models.booking_type import BookingType, BookingTypeResource
from labbooker.models.resource import LabResource, STATUS_ONLINE


def get_booking_type(db: Session, booking_type_id: int) -> Optional[BookingType]:
    return db.query(BookingType).filter(BookingType.id == booking_type_id).first()


def find_resources_for_type(db: Session, booking_type_id: int) -> List[LabResource]:
    """
    Resources mapped to a booking type, in the order they were attached to it.
    The allocator walks this list front to back.
    """
    return (
        db.query(LabResource)
        .join(BookingTypeResource, BookingTypeResource.resource_id == LabResource.id)
        .filter(BookingTypeResource.booking_type_id == booking_type_id)
        .order_by(BookingTypeResource.id)
        .all()
    )


def is_eligible(resource: LabResource) -> bool:
    return bool(resource.is_active) and resource.status == STATUS_ONLINE


def offline_resources(resources: List[LabResource]) -> List[LabResource]:
    """Active resources that are offline or in maintenance. Deactivated ones are ignored."""
    return [resource for resource in resources if resource.is_active and resource.status != STATUS_ONLINE]
