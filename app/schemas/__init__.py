from app.schemas.base import (
    ApiModel,
    Card,
    CardCreate,
    Folder,
    FolderCreate,
    IdResponse,
    LoginRequest,
    ProductLine,
    Receipt,
    ReceiptDetail,
    ReceiptItem,
    ReceiptItemDetail,
    ReceiptTagAdd,
    ReceiptUpdate,
    ReceiptUpload,
    ReceiptUploadItem,
    SuccessResponse,
    Tag,
    TagCreate,
    TokenResponse,
    User,
)
from app.schemas.analysis import AnalyzeResponse, ParsedReceipt, ParsedReceiptItem

__all__ = [
    "ApiModel",
    "AnalyzeResponse",
    "Card",
    "CardCreate",
    "Folder",
    "FolderCreate",
    "IdResponse",
    "LoginRequest",
    "ParsedReceipt",
    "ParsedReceiptItem",
    "ProductLine",
    "Receipt",
    "ReceiptDetail",
    "ReceiptItem",
    "ReceiptItemDetail",
    "ReceiptTagAdd",
    "ReceiptUpdate",
    "ReceiptUpload",
    "ReceiptUploadItem",
    "SuccessResponse",
    "Tag",
    "TagCreate",
    "TokenResponse",
    "User",
]
