"""
Tag endpoints.

GET    /api/tags                              the caller's tags
POST   /api/tags                              create a tag, or return the existing one
DELETE /api/tags/{id}                         delete a tag and unlink it everywhere
POST   /api/receipts/{id}/tags                attach an existing tag to a receipt
DELETE /api/receipts/{receipt_id}/tags/{tag_id}  detach a tag
"""
from __future__ import annotations

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Response
from sqlalchemy.orm import Session

from app.database import get_db, transaction
from app.repositories import receipt_tags, tags
from app.routers.receipts import get_owned_receipt
from app.schemas import ReceiptTagAdd, Tag, TagCreate, User
from app.session import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter()


# ── GET /api/tags ────────────────────────────────────────────────────────
@router.get("/tags", response_model=List[Tag])
def list_tags(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return tags.get_tags_by_user_id(db, user.id)


# ── POST /api/tags ───────────────────────────────────────────────────────
@router.post("/tags", response_model=Tag, status_code=201)
def create_tag(
    req: TagCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if req.parent_id is not None and tags.get_tag_by_id(db, user.id, req.parent_id) is None:
        raise HTTPException(status_code=404, detail="Parent tag not found")

    with transaction(db):
        tag_id = tags.find_or_create(db, user.id, req.name, req.parent_id)
    logger.info("Tag %s (%r) ready for user %s", tag_id, req.name, user.id)
    return tags.get_tag_by_id(db, user.id, tag_id)


# ── DELETE /api/tags/{tag_id} ────────────────────────────────────────────
@router.delete("/tags/{tag_id}", status_code=204)
def delete_tag(
    tag_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    tags.delete_tag(db, user.id, tag_id)
    logger.info("Deleted tag %s for user %s", tag_id, user.id)
    return Response(status_code=204)


# ── POST /api/receipts/{receipt_id}/tags ─────────────────────────────────
@router.post("/receipts/{receipt_id}/tags")
def add_tag_to_receipt(
    receipt_id: int,
    req: ReceiptTagAdd,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    get_owned_receipt(db, receipt_id, user)
    if tags.get_tag_by_id(db, user.id, req.tag_id) is None:
        raise HTTPException(status_code=404, detail="Tag not found")

    with transaction(db):
        receipt_tags.add_tags_to_receipt(db, receipt_id, [req.tag_id])
    return {"message": "Tag added to receipt"}


# ── DELETE /api/receipts/{receipt_id}/tags/{tag_id} ──────────────────────
@router.delete("/receipts/{receipt_id}/tags/{tag_id}")
def remove_tag_from_receipt(
    receipt_id: int,
    tag_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    get_owned_receipt(db, receipt_id, user)
    with transaction(db):
        receipt_tags.remove_tag_from_receipt(db, receipt_id, tag_id)
    return {"message": "Tag removed from receipt"}
