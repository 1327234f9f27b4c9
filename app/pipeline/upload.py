"""
Receipt upload: header, line items, and tags written as one unit.
"""
import logging
from typing import Iterable, List

from sqlalchemy.orm import Session

from app.database import transaction
from app.errors import NotFoundError, ReceiptSaveError
from app.repositories import products, receipt_items, receipt_tags, receipts, tags
from app.schemas import ReceiptUpload, ReceiptUploadItem

logger = logging.getLogger(__name__)


def _resolve_product_id(db: Session, user_id: int, item: ReceiptUploadItem) -> int:
    if item.id is None:
        return products.find_or_create_product(db, user_id, item.name, item.category)

    product = products.get_product_by_id(db, item.id)
    if product is None or product.user_id != user_id:
        raise NotFoundError(f"Product {item.id} not found")
    return product.id


def save_items(
    db: Session, user_id: int, receipt_id: int, items: Iterable[ReceiptUploadItem]
) -> List[int]:
    """Insert one line per item and record its unit price as the product's last price.

    The last price is overwritten in upload order, whatever the receipt's date.
    """
    item_ids = []
    for item in items:
        product_id = _resolve_product_id(db, user_id, item)
        item_ids.append(
            receipt_items.create_receipt_item(
                db,
                receipt_id=receipt_id,
                product_id=product_id,
                quantity=item.quantity,
                unit_price=item.unit_price,
                line_total=item.quantity * item.unit_price,
            )
        )
        products.update_product_last_price(db, product_id, item.unit_price)
    return item_ids


def handle_new_receipt_upload(db: Session, user_id: int, upload: ReceiptUpload) -> int:
    """Persist a receipt draft and return the new receipt id.

    Either everything is written or nothing is. Any failure is logged and
    re-raised as ``ReceiptSaveError`` with no storage detail.
    """
    try:
        with transaction(db):
            header = upload.model_dump(exclude={"items", "tags"})
            receipt_id = receipts.create_receipt(db, user_id, header)

            save_items(db, user_id, receipt_id, upload.items)

            tag_ids = [tags.find_or_create(db, user_id, name) for name in upload.tags]
            receipt_tags.add_tags_to_receipt(db, receipt_id, tag_ids)
    except Exception as exc:
        logger.exception("Failed to process receipt transaction for user %s", user_id)
        raise ReceiptSaveError() from exc

    logger.info(
        "Receipt %s saved with %d items and %d tags",
        receipt_id,
        len(upload.items),
        len(upload.tags),
    )
    return receipt_id


def replace_receipt(
    db: Session,
    user_id: int,
    receipt_id: int,
    fields: dict,
    items: List[ReceiptUploadItem] = None,
) -> None:
    """Update header fields and, when *items* is given, swap every line for it."""
    with transaction(db):
        receipts.update_receipt_by_id(db, receipt_id, user_id, fields)
        if items is not None:
            receipt_items.delete_items_by_receipt_id(db, receipt_id)
            save_items(db, user_id, receipt_id, items)
