"""
Receipt line items, alone or joined with their product (and receipt).
"""
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from app.errors import storage_operation
from app.models import ProductModel, ReceiptItemModel, ReceiptModel


def _item_dict(item: ReceiptItemModel) -> Dict[str, Any]:
    return {
        "id": item.id,
        "receipt_id": item.receipt_id,
        "product_id": item.product_id,
        "quantity": item.quantity,
        "unit_price": item.unit_price,
        "line_total": item.line_total,
        "created_at": item.created_at,
        "updated_at": item.updated_at,
    }


@storage_operation("creating receipt item")
def create_receipt_item(
    db: Session,
    receipt_id: int,
    product_id: int,
    quantity: int,
    unit_price: float,
    line_total: float,
) -> int:
    item = ReceiptItemModel(
        receipt_id=receipt_id,
        product_id=product_id,
        quantity=quantity,
        unit_price=unit_price,
        line_total=line_total,
    )
    db.add(item)
    db.flush()
    return item.id


@storage_operation("getting receipt items by receipt ID")
def get_items_by_receipt_id(db: Session, receipt_id: int) -> List[ReceiptItemModel]:
    return (
        db.query(ReceiptItemModel)
        .filter(ReceiptItemModel.receipt_id == receipt_id)
        .order_by(ReceiptItemModel.id.asc())
        .all()
    )


@storage_operation("getting detailed receipt items")
def get_detailed_items_by_receipt_id(db: Session, receipt_id: int) -> List[Dict[str, Any]]:
    rows = (
        db.query(ReceiptItemModel, ProductModel.name, ProductModel.category)
        .join(ProductModel, ReceiptItemModel.product_id == ProductModel.id)
        .filter(ReceiptItemModel.receipt_id == receipt_id)
        .order_by(ReceiptItemModel.id.asc())
        .all()
    )
    return [
        {**_item_dict(item), "product_name": name, "product_category": category}
        for item, name, category in rows
    ]


@storage_operation("getting detailed receipt items by user ID")
def get_detailed_items_by_user_id(db: Session, user_id: int) -> List[Dict[str, Any]]:
    """Every line item across the user's receipts, newest receipt first."""
    rows = (
        db.query(
            ReceiptItemModel,
            ProductModel.name,
            ProductModel.category,
            ProductModel.last_price,
            ReceiptModel.store_name,
            ReceiptModel.datetime,
        )
        .join(ProductModel, ReceiptItemModel.product_id == ProductModel.id)
        .join(ReceiptModel, ReceiptItemModel.receipt_id == ReceiptModel.id)
        .filter(ReceiptModel.user_id == user_id)
        .order_by(ReceiptModel.datetime.desc(), ReceiptItemModel.id.asc())
        .all()
    )
    return [
        {
            **_item_dict(item),
            "product_name": name,
            "product_category": category,
            "last_price": last_price,
            "store_name": store_name,
            "datetime": when,
        }
        for item, name, category, last_price, store_name, when in rows
    ]


@storage_operation("deleting receipt items by receipt ID")
def delete_items_by_receipt_id(db: Session, receipt_id: int) -> None:
    db.query(ReceiptItemModel).filter(ReceiptItemModel.receipt_id == receipt_id).delete(
        synchronize_session="fetch"
    )
