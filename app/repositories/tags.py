"""
Per-user tags.
"""
from typing import List, Optional

from sqlalchemy.orm import Session

from app.database import transaction
from app.errors import NotFoundError, storage_operation
from app.models import ReceiptTagModel, TagModel
from app.repositories import insert_ignoring_conflicts


def _find_tag_id(db: Session, user_id: int, name: str) -> Optional[int]:
    return (
        db.query(TagModel.id)
        .filter(TagModel.user_id == user_id, TagModel.name == name)
        .scalar()
    )


@storage_operation("in find_or_create_tag")
def find_or_create(
    db: Session, user_id: int, name: str, parent_id: Optional[int] = None
) -> int:
    tag_id = _find_tag_id(db, user_id, name)
    if tag_id is not None:
        return tag_id

    db.execute(
        insert_ignoring_conflicts(db, TagModel).values(
            user_id=user_id, name=name, parent_id=parent_id
        )
    )
    return _find_tag_id(db, user_id, name)


@storage_operation("getting tags by user ID")
def get_tags_by_user_id(db: Session, user_id: int) -> List[TagModel]:
    return (
        db.query(TagModel)
        .filter(TagModel.user_id == user_id)
        .order_by(TagModel.name.asc())
        .all()
    )


@storage_operation("getting tag by ID")
def get_tag_by_id(db: Session, user_id: int, tag_id: int) -> Optional[TagModel]:
    return (
        db.query(TagModel)
        .filter(TagModel.id == tag_id, TagModel.user_id == user_id)
        .first()
    )


@storage_operation("deleting tag")
def delete_tag(db: Session, user_id: int, tag_id: int) -> None:
    """Unlink the tag from every receipt, then delete it, in one transaction."""
    with transaction(db):
        owned = (
            db.query(TagModel.id)
            .filter(TagModel.id == tag_id, TagModel.user_id == user_id)
            .scalar()
        )
        if owned is None:
            raise NotFoundError(
                "Tag not found or user does not have permission to delete it."
            )
        db.query(ReceiptTagModel).filter(ReceiptTagModel.tag_id == tag_id).delete(
            synchronize_session="fetch"
        )
        db.query(TagModel).filter(TagModel.id == tag_id).delete(synchronize_session="fetch")
