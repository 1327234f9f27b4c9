"""
Receipt analyzer output.
"""
from typing import List, Optional

from pydantic import Field

from app.schemas.base import ApiModel


class ParsedReceiptItem(ApiModel):
    name: str
    count: float = 1
    price: float = Field(..., description="Total price of the line, not the unit price")


class ParsedReceipt(ApiModel):
    items: List[ParsedReceiptItem] = Field(default_factory=list)
    type: str = "other"
    store_name: Optional[str] = None
    datetime: Optional[str] = Field(None, description="YYYY-MM-DD HH:mm:ss")


class AnalyzeResponse(ParsedReceipt):
    total: float
