"""
User lookups. Only ``get_user_by_email_with_password`` exposes the hash.
"""
from typing import Optional

from sqlalchemy.orm import Session

from app.errors import storage_operation
from app.models import UserModel
from app.schemas import User


@storage_operation("creating user")
def create_user(
    db: Session,
    username: str,
    email: str,
    password_hash: str,
    photo: Optional[str] = None,
) -> int:
    user = UserModel(username=username, email=email, password=password_hash, photo=photo)
    db.add(user)
    db.flush()
    return user.id


@storage_operation("getting user by ID")
def get_user_by_id(db: Session, user_id: int) -> Optional[User]:
    row = db.query(UserModel).filter(UserModel.id == user_id).first()
    return User.model_validate(row) if row else None


@storage_operation("getting user by email")
def get_user_by_email(db: Session, email: str) -> Optional[User]:
    row = db.query(UserModel).filter(UserModel.email == email).first()
    return User.model_validate(row) if row else None


@storage_operation("getting user by email for auth")
def get_user_by_email_with_password(db: Session, email: str) -> Optional[UserModel]:
    """For password verification at login only."""
    return db.query(UserModel).filter(UserModel.email == email).first()
