"""
GET /api/stores   distinct store names, for autocompletion
"""
import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db
from app.repositories import receipts
from app.schemas import User
from app.session import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/stores", response_model=List[str])
def list_store_names(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return receipts.get_store_names_by_user_id(db, user.id)
