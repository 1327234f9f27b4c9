"""
Folders.

GET    /api/folder
POST   /api/folder
DELETE /api/folder/{id}
"""
import logging
from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.database import get_db, transaction
from app.repositories import folders
from app.schemas import Folder, FolderCreate, IdResponse, SuccessResponse, User
from app.session import get_current_user

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/folder", response_model=List[Folder])
def list_folders(
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return folders.get_folders_by_user_id(db, user.id)


@router.post("/folder", response_model=IdResponse)
def create_folder(
    req: FolderCreate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    with transaction(db):
        folder_id = folders.create_folder(db, user.id, req.name)
    logger.info("Created folder %s for user %s", folder_id, user.id)
    return IdResponse(id=folder_id)


@router.delete("/folder/{folder_id}", response_model=SuccessResponse)
def delete_folder(
    folder_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    with transaction(db):
        folders.delete_folder(db, user.id, folder_id)
    return SuccessResponse()
