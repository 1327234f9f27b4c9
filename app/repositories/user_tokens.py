"""
Long-lived API tokens. A user holds at most one; only its hash is stored.
"""
from typing import Optional

from sqlalchemy.orm import Session

from app.crypto import hash_secret, random_token
from app.database import transaction
from app.errors import storage_operation
from app.models import UserTokenModel


@storage_operation("creating user token")
def create_token(db: Session, user_id: int, hashed_token: str) -> int:
    token = UserTokenModel(user_id=user_id, hashed_token=hashed_token)
    db.add(token)
    db.flush()
    return token.id


@storage_operation("getting user token by user ID")
def get_token_by_user_id(db: Session, user_id: int) -> Optional[UserTokenModel]:
    return db.query(UserTokenModel).filter(UserTokenModel.user_id == user_id).first()


@storage_operation("deleting user token by user ID")
def delete_token_by_user_id(db: Session, user_id: int) -> None:
    db.query(UserTokenModel).filter(UserTokenModel.user_id == user_id).delete(
        synchronize_session="fetch"
    )


def refresh_token(db: Session, user_id: int) -> str:
    """Replace the user's token with a new one and return it in plain text.

    The plain value is returned exactly once; the table keeps its hash.
    """
    with transaction(db):
        token = random_token(32)
        delete_token_by_user_id(db, user_id)
        create_token(db, user_id, hash_secret(token))
    return token
