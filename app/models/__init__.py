"""
SQLAlchemy models. Importing this package registers every table on ``Base.metadata``.
"""
from app.models.user import UserModel, UserTokenModel
from app.models.receipt import (
    CardModel,
    FolderModel,
    ProductModel,
    ReceiptItemModel,
    ReceiptModel,
)
from app.models.tag import ReceiptTagModel, TagModel

__all__ = [
    "UserModel",
    "UserTokenModel",
    "CardModel",
    "FolderModel",
    "ProductModel",
    "ReceiptItemModel",
    "ReceiptModel",
    "ReceiptTagModel",
    "TagModel",
]
