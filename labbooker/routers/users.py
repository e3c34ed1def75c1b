import logging
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from typing import List
from labbooker.db import get_db
from labbooker.models.user import User
from labbooker.schemas.user import UserResponse, UserUpdate
from labbooker.utils.auth import get_password_hash, require_admin

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/users",
    tags=["users"],
)


def get_user_or_404(db: Session, user_id: int) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("/", response_model=List[UserResponse])
def get_users(
    skip: int = 0,
    limit: int = 100,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    """
    List all users.
    Requires admin privileges.
    """
    return db.query(User).order_by(User.id).offset(skip).limit(limit).all()


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: int, db: Session = Depends(get_db), admin: dict = Depends(require_admin)):
    return get_user_or_404(db, user_id)


@router.put("/{user_id}", response_model=UserResponse)
def update_user(
    user_id: int,
    user_update: UserUpdate,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    """
    Change a user's email or role, or reset their password.
    Requires admin privileges.
    """
    db_user = get_user_or_404(db, user_id)
    update_data = user_update.model_dump(exclude_unset=True, exclude_none=True)
    password = update_data.pop("password", None)
    for key, value in update_data.items():
        setattr(db_user, key, value)
    if password:
        db_user.hashed_password = get_password_hash(password)

    db.commit()
    db.refresh(db_user)
    logger.info(f"Admin {admin['username']} updated user {db_user.username}: {sorted(user_update.model_fields_set)}")
    return db_user


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_user(user_id: int, db: Session = Depends(get_db), admin: dict = Depends(require_admin)):
    """
    Delete a user and their bookings. Administrators cannot delete themselves.
    """
    if user_id == admin["id"]:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Cannot delete your own account")
    db_user = get_user_or_404(db, user_id)
    username = db_user.username

    db.delete(db_user)
    db.commit()
    logger.info(f"Admin {admin['username']} deleted user {username}")
    return None
