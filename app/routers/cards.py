"""
Payment cards.

GET    /api/card
POST   /api/card
DELETE /api/card/{id}
"""
import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db, transaction
from app.repositories import cards
from app.schemas import Card, CardCreate, IdResponse, SuccessResponse, User
from app.session import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/card", response_model=List[Card])
def list_cards(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return cards.get_cards_by_user_id(db, user.id)


@router.post("/card", response_model=IdResponse)
def create_card(
    req: CardCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    with transaction(db):
        card_id = cards.create_card(db, user.id, req.name, req.last4)
    logger.info("Created card %s for user %s", card_id, user.id)
    return IdResponse(id=card_id)


@router.delete("/card/{card_id}", response_model=SuccessResponse)
def delete_card(
    card_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    with transaction(db):
        cards.delete_card(db, user.id, card_id)
    return SuccessResponse()
