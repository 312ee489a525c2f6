from __future__ import annotations

from sqlalchemy import func
from sqlalchemy.orm import Session

from rentals.models.user import User


class UserRepository:
    def __init__(self, db: Session):
        self.db = db

    def get(self, user_id: int) -> User | None:
        return self.db.query(User).filter(User.id == user_id).first()

    def by_email(self, email: str) -> User | None:
        return self.db.query(User).filter(func.lower(User.email) == email.strip().lower()).first()

    def all(self) -> list[User]:
        return self.db.query(User).order_by(User.id).all()

    def add(self, user: User) -> User:
        self.db.add(user)
        self.db.flush()
        return user

    def delete(self, user: User) -> None:
        self.db.delete(user)
        self.db.flush()

    def count(self) -> int:
        return self.db.query(func.count(User.id)).scalar() or 0

    def count_admins(self) -> int:
        return self.db.query(func.count(User.id)).filter(User.is_admin.is_(True)).scalar() or 0
