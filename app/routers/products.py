"""
GET /api/products   every line item the caller has bought, with product and store
"""
import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.repositories import receipt_items
from app.schemas import ProductLine, User
from app.session import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/products", response_model=List[ProductLine])
def list_products(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    rows = receipt_items.get_detailed_items_by_user_id(db, user.id)
    logger.info("Found %d product lines for user %s", len(rows), user.id)
    return [{**row, "name": row["product_name"]} for row in rows]
