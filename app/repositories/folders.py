from typing import List

from sqlalchemy.orm import Session

from app.errors import storage_operation
from app.models import FolderModel


@storage_operation("getting folders by user ID")
def get_folders_by_user_id(db: Session, user_id: int) -> List[FolderModel]:
    return (
        db.query(FolderModel)
        .filter(FolderModel.user_id == user_id)
        .order_by(FolderModel.name.asc())
        .all()
    )


@storage_operation("creating folder")
def create_folder(db: Session, user_id: int, name: str) -> int:
    folder = FolderModel(user_id=user_id, name=name)
    db.add(folder)
    db.flush()
    return folder.id


@storage_operation("deleting folder")
def delete_folder(db: Session, user_id: int, folder_id: int) -> None:
    db.query(FolderModel).filter(
        FolderModel.id == folder_id, FolderModel.user_id == user_id
    ).delete(synchronize_session="fetch")
