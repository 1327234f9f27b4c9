"""
Receipt/tag links.
"""
from typing import Iterable, List

from sqlalchemy.orm import Session

from app.errors import storage_operation
from app.models import ReceiptTagModel, TagModel
from app.repositories import insert_ignoring_conflicts


@storage_operation("adding tags to receipt")
def add_tags_to_receipt(db: Session, receipt_id: int, tag_ids: Iterable[int]) -> None:
    """Link every tag to the receipt; already linked tags are skipped."""
    rows = [{"receipt_id": receipt_id, "tag_id": tag_id} for tag_id in tag_ids]
    if not rows:
        return
    db.execute(insert_ignoring_conflicts(db, ReceiptTagModel).values(rows))


@storage_operation("removing tag from receipt")
def remove_tag_from_receipt(db: Session, receipt_id: int, tag_id: int) -> None:
    db.query(ReceiptTagModel).filter(
        ReceiptTagModel.receipt_id == receipt_id, ReceiptTagModel.tag_id == tag_id
    ).delete(synchronize_session="fetch")


@storage_operation("getting tags for receipt")
def get_tags_for_receipt(db: Session, receipt_id: int) -> List[TagModel]:
    return (
        db.query(TagModel)
        .join(ReceiptTagModel, TagModel.id == ReceiptTagModel.tag_id)
        .filter(ReceiptTagModel.receipt_id == receipt_id)
        .order_by(TagModel.name.asc())
        .all()
    )
