from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from labbooker.db import get_db
from labbooker.models.resource import LabResource
from labbooker.schemas.resource import ResourceCreate, ResourceUpdate, ResourceResponse
from labbooker.utils.auth import get_current_user, require_admin


router = APIRouter(
    prefix="/resources",
    tags=["resources"],
)


@router.post("/", response_model=ResourceResponse, status_code=status.HTTP_201_CREATED)
def create_resource(resource: ResourceCreate, db: Session = Depends(get_db), admin: dict = Depends(require_admin)):
    """
    Create a new lab resource.
    Requires admin privileges.
    """
    db_resource = LabResource(**resource.model_dump())
    db.add(db_resource)
    db.commit()
    db.refresh(db_resource)
    return db_resource


@router.get("/", response_model=List[ResourceResponse])
def get_resources(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    current_user: dict = Depends(get_current_user),
):
    """
    Retrieve a list of all lab resources.
    """
    return db.query(LabResource).order_by(LabResource.name).offset(skip).limit(limit).all()


@router.get("/{resource_id}", response_model=ResourceResponse)
def get_resource(resource_id: int, db: Session = Depends(get_db), current_user: dict = Depends(get_current_user)):
    """
    Retrieve a specific lab resource by ID.
    """
    resource = db.query(LabResource).filter(LabResource.id == resource_id).first()
    if not resource:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resource not found")
    return resource


@router.put("/{resource_id}", response_model=ResourceResponse)
def update_resource(
    resource_id: int,
    resource_update: ResourceUpdate,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    """
    Update a lab resource, including taking it offline or into maintenance.
    Requires admin privileges.
    """
    db_resource = db.query(LabResource).filter(LabResource.id == resource_id).first()
    if not db_resource:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resource not found")

    update_data = resource_update.model_dump(exclude_unset=True)
    for key, value in update_data.items():
        setattr(db_resource, key, value)

    db.commit()
    db.refresh(db_resource)
    return db_resource


@router.delete("/{resource_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_resource(resource_id: int, db: Session = Depends(get_db), admin: dict = Depends(require_admin)):
    """
    Delete a lab resource.
    Requires admin privileges. Resources with bookings cannot be deleted; deactivate them instead.
    """
    db_resource = db.query(LabResource).filter(LabResource.id == resource_id).first()
    if not db_resource:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Resource not found")
    if db_resource.reservations:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Resource has bookings; deactivate it instead",
        )

    db.delete(db_resource)
    db.commit()
    return None
