"""Authentication: register, login, current user."""
import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from rentals.database import atomic, get_db
from rentals.dependencies import get_current_user
from rentals.errors import Conflict
from rentals.models.user import User
from rentals.repositories import UserRepository
from rentals.schemas.auth import Token, UserCreate, UserLogin, UserResponse
from rentals.services.auth import create_access_token, get_password_hash, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


def _token_for(user: User) -> Token:
    token = create_access_token(user.id, user.email, user.is_host)
    return Token(access_token=token, user=UserResponse.model_validate(user))


@router.post("/register", response_model=Token, status_code=201)
def register(data: UserCreate, db: Session = Depends(get_db)):
    users = UserRepository(db)
    if users.by_email(data.email):
        raise Conflict("User already exists")
    with atomic(db):
        # The first account on a fresh install administers it
        first = users.count() == 0
        user = users.add(
            User(
                name=data.name,
                email=data.email.lower(),
                hashed_password=get_password_hash(data.password),
                phone=data.phone,
                address=data.address,
                is_host=data.is_host,
                is_admin=first,
            )
        )
    db.refresh(user)
    logger.info("User %s registered (host=%s, admin=%s)", user.id, user.is_host, user.is_admin)
    return _token_for(user)


@router.post("/login", response_model=Token)
def login(data: UserLogin, db: Session = Depends(get_db)):
    user = UserRepository(db).by_email(data.email)
    if not user or not verify_password(data.password, user.hashed_password):
        raise HTTPException(status_code=401, detail="Invalid credentials")
    return _token_for(user)


@router.get("/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)):
    return current_user
