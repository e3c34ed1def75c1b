import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from labbooker.db import get_db
from labbooker.models.booking_type import BookingType, BookingTypeResource
from labbooker.models.resource import LabResource
from labbooker.schemas.booking_type import BookingTypeCreate, BookingTypeUpdate, BookingTypeResponse
from labbooker.utils.auth import get_current_user, is_admin, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/booking-types",
    tags=["booking-types"],
)


def get_booking_type_or_404(db: Session, booking_type_id: int) -> BookingType:
    booking_type = db.query(BookingType).filter(BookingType.id == booking_type_id).first()
    if not booking_type:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Booking type not found")
    return booking_type


def get_resource_or_404(db: Session, resource_id: int) -> LabResource:
    resource = db.query(LabResource).filter(LabResource.id == resource_id).first()
    if not resource:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resource not found")
    return resource


@router.post("/", response_model=BookingTypeResponse, status_code=status.HTTP_201_CREATED)
def create_booking_type(
    booking_type: BookingTypeCreate,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    """
    Create a booking type, optionally with its resources.
    Resources are allocated in the order given.
    """
    if len(set(booking_type.resource_ids)) != len(booking_type.resource_ids):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Duplicate resource ids")

    data = booking_type.model_dump(exclude={"resource_ids"})
    db_booking_type = BookingType(**data)
    for resource_id in booking_type.resource_ids:
        resource = get_resource_or_404(db, resource_id)
        db_booking_type.resources.append(BookingTypeResource(resource=resource))
    db.add(db_booking_type)
    db.commit()
    db.refresh(db_booking_type)
    logger.debug(f"Created booking type {db_booking_type.id} with resources {db_booking_type.resource_ids}")
    return db_booking_type


@router.get("/", response_model=List[BookingTypeResponse])
def get_booking_types(db: Session = Depends(get_db), current_user: dict = Depends(get_current_user)):
    """
    List booking types. Regular users only see active ones.
    """
    query = db.query(BookingType)
    if not is_admin(current_user):
        query = query.filter(BookingType.is_active.is_(True))
    return query.order_by(BookingType.name).all()


@router.get("/{booking_type_id}", response_model=BookingTypeResponse)
def get_booking_type(
    booking_type_id: int,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    return get_booking_type_or_404(db, booking_type_id)


@router.put("/{booking_type_id}", response_model=BookingTypeResponse)
def update_booking_type(
    booking_type_id: int,
    booking_type_update: BookingTypeUpdate,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    db_booking_type = get_booking_type_or_404(db, booking_type_id)
    update_data = booking_type_update.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        setattr(db_booking_type, key, value)
    db.commit()
    db.refresh(db_booking_type)
    return db_booking_type


@router.delete("/{booking_type_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_booking_type(
    booking_type_id: int,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    """
    Delete a booking type. Types with bookings cannot be deleted; deactivate them instead.
    """
    db_booking_type = get_booking_type_or_404(db, booking_type_id)
    if db_booking_type.reservations:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Booking type has bookings; deactivate it instead",
        )
    db.delete(db_booking_type)
    db.commit()
    return None


@router.post("/{booking_type_id}/resources/{resource_id}", response_model=BookingTypeResponse)
def add_resource(
    booking_type_id: int,
    resource_id: int,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    """
    Attach a resource to a booking type. It is tried after the resources attached before it.
    """
    db_booking_type = get_booking_type_or_404(db, booking_type_id)
    resource = get_resource_or_404(db, resource_id)
    if resource_id in db_booking_type.resource_ids:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Resource already mapped")

    db.add(BookingTypeResource(booking_type_id=booking_type_id, resource_id=resource.id))
    db.commit()
    db.refresh(db_booking_type)
    return db_booking_type


@router.delete("/{booking_type_id}/resources/{resource_id}", response_model=BookingTypeResponse)
def remove_resource(
    booking_type_id: int,
    resource_id: int,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    db_booking_type = get_booking_type_or_404(db, booking_type_id)
    link = (
        db.query(BookingTypeResource)
        .filter(
            BookingTypeResource.booking_type_id == booking_type_id,
            BookingTypeResource.resource_id == resource_id,
        )
        .first()
    )
    if not link:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resource not mapped to booking type")

    db.delete(link)
    db.commit()
    db.refresh(db_booking_type)
    return db_booking_type
