"""
JSON contracts for the receipt API.

Fields are snake_case in Python and camelCase on the wire; requests
accept either spelling.
"""
import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def _naive_utc(value: Optional[dt.datetime]) -> Optional[dt.datetime]:
    """Store instants as naive UTC; the receipts table has no time zone."""
    if value is not None and value.tzinfo is not None:
        return value.astimezone(dt.timezone.utc).replace(tzinfo=None)
    return value


# ---------------------------------------------------------------------------
# Users / session
# ---------------------------------------------------------------------------

class User(ApiModel):
    """A user as exposed to clients. Never carries the password hash."""
    id: int
    username: str
    email: str
    photo: Optional[str] = None
    created_at: dt.datetime
    updated_at: dt.datetime


class LoginRequest(ApiModel):
    email: str
    password: str


class TokenResponse(ApiModel):
    token: str


# ---------------------------------------------------------------------------
# Tags
# ---------------------------------------------------------------------------

class Tag(ApiModel):
    id: int
    name: str
    user_id: int
    parent_id: Optional[int] = None
    created_at: dt.datetime
    updated_at: dt.datetime


class TagCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=50)
    parent_id: Optional[int] = None


class ReceiptTagAdd(ApiModel):
    tag_id: int


# ---------------------------------------------------------------------------
# Receipts
# ---------------------------------------------------------------------------

class Receipt(ApiModel):
    id: int
    user_id: int
    type: str
    store_name: Optional[str] = None
    datetime: dt.datetime
    image_url: Optional[str] = None
    total_amount: float
    description: Optional[str] = None
    card_id: Optional[int] = None
    folder_id: Optional[int] = None
    created_at: dt.datetime
    updated_at: dt.datetime


class ReceiptItem(ApiModel):
    id: int
    receipt_id: int
    product_id: int
    quantity: int
    unit_price: float
    line_total: float
    created_at: dt.datetime
    updated_at: dt.datetime


class ReceiptItemDetail(ReceiptItem):
    name: str
    product_name: str
    product_category: Optional[str] = None


class ReceiptDetail(Receipt):
    items: List[ReceiptItemDetail] = Field(default_factory=list)
    tags: List[Tag] = Field(default_factory=list)


class ReceiptUploadItem(ApiModel):
    """One line of a receipt draft. ``id`` reuses an existing product."""
    id: Optional[int] = None
    name: str = Field(..., min_length=1, max_length=255)
    category: Optional[str] = None
    quantity: int = Field(..., ge=0)
    unit_price: float


class ReceiptUpload(ApiModel):
    type: str = Field(..., max_length=50)
    store_name: Optional[str] = None
    datetime: dt.datetime
    image_url: Optional[str] = None
    total_amount: float
    description: Optional[str] = None
    card_id: Optional[int] = None
    folder_id: Optional[int] = None
    tags: List[str] = Field(default_factory=list)
    items: List[ReceiptUploadItem] = Field(default_factory=list)

    @field_validator("datetime")
    @classmethod
    def normalize_datetime(cls, value):
        return _naive_utc(value)


class ReceiptUpdate(ApiModel):
    """Header fields to change; ``items``, when present, replaces every line."""
    type: Optional[str] = Field(None, max_length=50)
    store_name: Optional[str] = None
    datetime: Optional[dt.datetime] = None
    image_url: Optional[str] = None
    total_amount: Optional[float] = None
    description: Optional[str] = None
    card_id: Optional[int] = None
    folder_id: Optional[int] = None
    items: Optional[List[ReceiptUploadItem]] = None

    # Omitted means unchanged; an explicit null would clear a required column.
    @field_validator("type", "datetime", "total_amount")
    @classmethod
    def reject_null(cls, value):
        if value is None:
            raise ValueError("may be omitted but not null")
        return value

    @field_validator("datetime")
    @classmethod
    def normalize_datetime(cls, value):
        return _naive_utc(value)


class ProductLine(ReceiptItem):
    """A line item joined with its product and receipt, for /api/products."""
    name: str
    product_name: str
    product_category: Optional[str] = None
    last_price: Optional[float] = None
    store_name: Optional[str] = None
    datetime: dt.datetime


# ---------------------------------------------------------------------------
# Cards / folders
# ---------------------------------------------------------------------------

class Card(ApiModel):
    id: int
    user_id: int
    name: str
    last4: str
    created_at: dt.datetime
    updated_at: dt.datetime


class CardCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=255)
    last4: str = Field(..., min_length=4, max_length=4)


class Folder(ApiModel):
    id: int
    user_id: int
    name: str
    created_at: dt.datetime
    updated_at: dt.datetime


class FolderCreate(ApiModel):
    name: str = Field(..., min_length=1, max_length=255)


class IdResponse(ApiModel):
    id: int


class SuccessResponse(ApiModel):
    success: bool = True
