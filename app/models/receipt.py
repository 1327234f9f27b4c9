"""
Receipts, their line items, the product catalog, and the cards and
folders a receipt can be filed under.
"""
from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
)

from app.database import Base

# Money columns come back as float, not Decimal
Money = Numeric(10, 2, asdecimal=False)


class CardModel(Base):
    __tablename__ = "cards"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    last4 = Column(String(4), nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), nullable=False)


class FolderModel(Base):
    __tablename__ = "folders"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), nullable=False)


class ReceiptModel(Base):
    __tablename__ = "receipts"

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String(50), nullable=False)  # grocery, restaurant, gas, retail, other
    store_name = Column(String(255))
    datetime = Column(DateTime, nullable=False)
    image_url = Column(String(255))
    total_amount = Column(Money, nullable=False)
    description = Column(Text)
    card_id = Column(Integer, ForeignKey("cards.id", ondelete="SET NULL"))
    folder_id = Column(Integer, ForeignKey("folders.id", ondelete="SET NULL"))
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), nullable=False)


class ProductModel(Base):
    """Catalog entry reused across a user's receipts."""
    __tablename__ = "products"
    __table_args__ = (UniqueConstraint("user_id", "name", name="uq_products_user_name"),)

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    category = Column(String(50))  # Dairy, Bakery, Electronics ...
    last_price = Column(Money)
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), nullable=False)


class ReceiptItemModel(Base):
    __tablename__ = "receipt_items"
    # A product appears at most once per receipt
    __table_args__ = (
        UniqueConstraint("receipt_id", "product_id", name="uq_receipt_items_receipt_product"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    receipt_id = Column(
        Integer, ForeignKey("receipts.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # NO ACTION rather than RESTRICT: checked at statement end, so a user delete
    # can cascade through receipts and products in one go
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)
    quantity = Column(Integer, nullable=False)
    unit_price = Column(Money, nullable=False)
    line_total = Column(Money, nullable=False)  # quantity * unit_price, set by the writer
    created_at = Column(DateTime, server_default=func.now(), nullable=False)
    updated_at = Column(DateTime, server_default=func.now(), nullable=False)
