"""
Receipt endpoints.

POST   /api/receipts/analyze   image to parsed draft (not saved)
GET    /api/receipts           the caller's receipts, newest first
PUT    /api/receipts           save a draft (header + items + tags)
GET    /api/receipts/{id}      one receipt with items and tags
POST   /api/receipts/{id}      update header, optionally replace items
DELETE /api/receipts/{id}      delete a receipt
"""
from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from sqlalchemy.orm import Session

from app.analyzer import ReceiptAnalyzer, get_analyzer
from app.database import get_db, transaction
from app.errors import ReceiptSaveError
from app.models import ReceiptModel
from app.pipeline import handle_new_receipt_upload, replace_receipt
from app.repositories import receipt_items, receipt_tags, receipts
from app.schemas import (
    AnalyzeResponse,
    IdResponse,
    Receipt,
    ReceiptDetail,
    ReceiptUpdate,
    ReceiptUpload,
    SuccessResponse,
    Tag,
    User,
)
from app.session import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter()


def get_owned_receipt(db: Session, receipt_id: int, user: User) -> ReceiptModel:
    """The receipt, if it exists and belongs to *user*; 404 otherwise."""
    receipt = receipts.get_receipt_by_id(db, receipt_id)
    if receipt is None or receipt.user_id != user.id:
        logger.warning("Receipt %s not found for user %s", receipt_id, user.id)
        raise HTTPException(status_code=404, detail="Receipt not found")
    return receipt


def build_detail(db: Session, receipt: ReceiptModel) -> ReceiptDetail:
    items = [
        {**item, "name": item["product_name"]}
        for item in receipt_items.get_detailed_items_by_receipt_id(db, receipt.id)
    ]
    tags = [Tag.model_validate(tag) for tag in receipt_tags.get_tags_for_receipt(db, receipt.id)]
    return ReceiptDetail(**Receipt.model_validate(receipt).model_dump(), items=items, tags=tags)


# ── POST /api/receipts/analyze ───────────────────────────────────────────
@router.post("/receipts/analyze", response_model=AnalyzeResponse)
def analyze_receipt(
    receipt: Optional[UploadFile] = File(None),
    user: User = Depends(get_current_user),
    analyzer: ReceiptAnalyzer = Depends(get_analyzer),
):
    if receipt is None:
        raise HTTPException(status_code=400, detail="Receipt file is required.")

    image = receipt.file.read()
    if not image:
        raise HTTPException(status_code=400, detail="Receipt file is required.")

    parsed = analyzer.analyze(image, receipt.content_type or "application/octet-stream")
    total = sum(item.price for item in parsed.items)
    logger.info("Analyzed receipt for user %s: %d items", user.id, len(parsed.items))
    return AnalyzeResponse(**parsed.model_dump(), total=total)


# ── GET /api/receipts ────────────────────────────────────────────────────
@router.get("/receipts", response_model=List[Receipt])
def list_receipts(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    rows = receipts.get_receipts_by_user_id(db, user.id)
    logger.info("Found %d receipts for user %s", len(rows), user.id)
    return rows


# ── PUT /api/receipts ────────────────────────────────────────────────────
@router.put("/receipts", response_model=IdResponse)
def upload_receipt(
    req: ReceiptUpload,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        receipt_id = handle_new_receipt_upload(db, user.id, req)
    except ReceiptSaveError:
        raise HTTPException(status_code=500, detail="Failed to handle new receipt upload.")
    return IdResponse(id=receipt_id)


# ── GET /api/receipts/{receipt_id} ───────────────────────────────────────
@router.get("/receipts/{receipt_id}", response_model=ReceiptDetail)
def get_receipt(
    receipt_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    receipt = get_owned_receipt(db, receipt_id, user)
    return build_detail(db, receipt)


# ── POST /api/receipts/{receipt_id} ──────────────────────────────────────
@router.post("/receipts/{receipt_id}", response_model=ReceiptDetail)
def update_receipt(
    receipt_id: int,
    req: ReceiptUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    get_owned_receipt(db, receipt_id, user)

    fields = req.model_dump(exclude_unset=True, exclude={"items"})
    replace_receipt(db, user.id, receipt_id, fields, req.items)
    logger.info("Updated receipt %s (fields: %s)", receipt_id, sorted(fields))

    return build_detail(db, receipts.get_receipt_by_id(db, receipt_id))


# ── DELETE /api/receipts/{receipt_id} ────────────────────────────────────
@router.delete("/receipts/{receipt_id}", response_model=SuccessResponse)
def delete_receipt(
    receipt_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    get_owned_receipt(db, receipt_id, user)
    with transaction(db):
        receipts.delete_receipt_by_id(db, receipt_id, user.id)
    logger.info("Deleted receipt %s", receipt_id)
    return SuccessResponse()
