"""
Payment cards a receipt can be filed under.
"""
from typing import List

from sqlalchemy.orm import Session

from app.errors import storage_operation
from app.models import CardModel


@storage_operation("getting cards by user ID")
def get_cards_by_user_id(db: Session, user_id: int) -> List[CardModel]:
    return (
        db.query(CardModel)
        .filter(CardModel.user_id == user_id)
        .order_by(CardModel.name.asc())
        .all()
    )


@storage_operation("creating card")
def create_card(db: Session, user_id: int, name: str, last4: str) -> int:
    card = CardModel(user_id=user_id, name=name, last4=last4)
    db.add(card)
    db.flush()
    return card.id


@storage_operation("deleting card")
def delete_card(db: Session, user_id: int, card_id: int) -> None:
    # Receipts keep their row; the FK sets card_id to NULL
    db.query(CardModel).filter(CardModel.id == card_id, CardModel.user_id == user_id).delete(
        synchronize_session="fetch"
    )
