"""
Receipt header rows.

``get_receipt_by_id`` does not filter by owner; callers compare
``receipt.user_id`` with the caller before exposing anything.
"""
import logging
from typing import Any, Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.errors import storage_operation
from app.models import ReceiptModel

logger = logging.getLogger(__name__)

# Columns a caller may set through update_receipt_by_id
UPDATABLE_FIELDS = frozenset(
    {
        "type",
        "store_name",
        "datetime",
        "image_url",
        "total_amount",
        "description",
        "card_id",
        "folder_id",
    }
)


@storage_operation("creating receipt")
def create_receipt(db: Session, user_id: int, data: Dict[str, Any]) -> int:
    receipt = ReceiptModel(
        user_id=user_id,
        type=data["type"],
        store_name=data.get("store_name"),
        datetime=data["datetime"],
        image_url=data.get("image_url"),
        total_amount=data["total_amount"],
        description=data.get("description"),
        card_id=data.get("card_id"),
        folder_id=data.get("folder_id"),
    )
    db.add(receipt)
    db.flush()
    return receipt.id


@storage_operation("getting receipt by ID")
def get_receipt_by_id(db: Session, receipt_id: int) -> Optional[ReceiptModel]:
    return db.query(ReceiptModel).filter(ReceiptModel.id == receipt_id).first()


@storage_operation("getting receipts by user ID")
def get_receipts_by_user_id(db: Session, user_id: int) -> List[ReceiptModel]:
    return (
        db.query(ReceiptModel)
        .filter(ReceiptModel.user_id == user_id)
        .order_by(ReceiptModel.datetime.desc(), ReceiptModel.id.desc())
        .all()
    )


@storage_operation("getting store names by user ID")
def get_store_names_by_user_id(db: Session, user_id: int) -> List[str]:
    rows = (
        db.query(ReceiptModel.store_name)
        .filter(ReceiptModel.user_id == user_id, ReceiptModel.store_name.isnot(None))
        .distinct()
        .order_by(ReceiptModel.store_name.asc())
        .all()
    )
    return [row.store_name for row in rows]


@storage_operation("updating receipt by ID")
def update_receipt_by_id(
    db: Session, receipt_id: int, user_id: int, fields: Dict[str, Any]
) -> None:
    """Set only the given columns on the caller's receipt.

    No fields means no statement. A receipt that is missing or owned by
    someone else matches zero rows; that is logged, not raised.
    """
    values = {key: value for key, value in fields.items() if key in UPDATABLE_FIELDS}
    if not values:
        return

    values["updated_at"] = func.now()
    matched = (
        db.query(ReceiptModel)
        .filter(ReceiptModel.id == receipt_id, ReceiptModel.user_id == user_id)
        .update(values, synchronize_session="fetch")
    )
    if matched == 0:
        logger.info("No receipt found with id %s for user %s to update", receipt_id, user_id)


@storage_operation("deleting receipt by ID")
def delete_receipt_by_id(db: Session, receipt_id: int, user_id: int) -> bool:
    deleted = (
        db.query(ReceiptModel)
        .filter(ReceiptModel.id == receipt_id, ReceiptModel.user_id == user_id)
        .delete(synchronize_session="fetch")
    )
    return deleted > 0
