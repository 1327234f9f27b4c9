"""
Product catalog. Names are unique per user.
"""
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from app.errors import storage_operation
from app.models import ProductModel
from app.repositories import insert_ignoring_conflicts


def _find_product_id(db: Session, user_id: int, name: str) -> Optional[int]:
    return (
        db.query(ProductModel.id)
        .filter(ProductModel.user_id == user_id, ProductModel.name == name)
        .scalar()
    )


@storage_operation("in find_or_create_product")
def find_or_create_product(
    db: Session, user_id: int, name: str, category: Optional[str] = None
) -> int:
    """Return the id of the user's product called *name*, creating it if needed.

    The insert ignores a conflicting row, so a concurrent first use of the
    same name resolves to whichever row won instead of failing.
    """
    product_id = _find_product_id(db, user_id, name)
    if product_id is not None:
        return product_id

    db.execute(
        insert_ignoring_conflicts(db, ProductModel).values(
            user_id=user_id, name=name, category=category
        )
    )
    return _find_product_id(db, user_id, name)


@storage_operation("getting product by ID")
def get_product_by_id(db: Session, product_id: int) -> Optional[ProductModel]:
    return db.query(ProductModel).filter(ProductModel.id == product_id).first()


@storage_operation("updating product last price")
def update_product_last_price(db: Session, product_id: int, price: float) -> None:
    db.query(ProductModel).filter(ProductModel.id == product_id).update(
        {"last_price": price, "updated_at": func.now()}, synchronize_session="fetch"
    )
