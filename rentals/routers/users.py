"""User profiles."""
import logging

from fastapi import APIRouter, Depends, File, UploadFile
from sqlalchemy.orm import Session

from rentals.database import atomic, get_db
from rentals.dependencies import get_current_user
from rentals.errors import NotFound, ValidationError
from rentals.models.user import User
from rentals.repositories import UserRepository
from rentals.schemas.auth import ChangePasswordRequest, UserResponse, UserUpdate
from rentals.services.auth import get_password_hash, verify_password
from rentals.services.storage import KIND_PROFILE, ImageStorage, get_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["users"])


@router.get("", response_model=list[UserResponse])
def list_users(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    return UserRepository(db).all()


@router.put("", response_model=UserResponse)
def update_me(
    data: UserUpdate,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    with atomic(db):
        for key, value in data.model_dump(exclude_unset=True).items():
            if value is None and key in ("name", "is_host"):
                continue
            setattr(current_user, key, value)
    db.refresh(current_user)
    return current_user


@router.put("/change-password")
def change_password(
    data: ChangePasswordRequest,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
):
    if not verify_password(data.current_password, current_user.hashed_password):
        raise ValidationError("Current password is incorrect", field="current_password")
    with atomic(db):
        current_user.hashed_password = get_password_hash(data.new_password)
    logger.info("User %s changed password", current_user.id)
    return {"message": "Password updated successfully"}


@router.delete("")
def delete_me(db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    user_id = current_user.id
    with atomic(db):
        UserRepository(db).delete(current_user)
    logger.info("User %s deleted their account", user_id)
    return {"message": "User deleted successfully"}


@router.post("/profile-image", response_model=UserResponse)
def upload_profile_image(
    profile_image: UploadFile = File(...),
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_user),
    storage: ImageStorage = Depends(get_storage),
):
    old_url = current_user.profile_image
    url = storage.store(profile_image, KIND_PROFILE)
    try:
        with atomic(db):
            current_user.profile_image = url
    except Exception:
        storage.discard(url)
        raise
    if old_url:
        storage.discard(old_url)
    db.refresh(current_user)
    return current_user


@router.get("/{user_id}", response_model=UserResponse)
def get_user(user_id: int, db: Session = Depends(get_db), current_user: User = Depends(get_current_user)):
    user = UserRepository(db).get(user_id)
    if not user:
        raise NotFound("User not found")
    return user
