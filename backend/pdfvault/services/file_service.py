"""Local-only stored file operations."""

from sqlalchemy.orm import Session

from ..models.stored_file import StoredFile
from ..repositories.file_repository import FileRepository


class FileService:
    def __init__(self, db: Session):
        self.db = db
        self.file_repo = FileRepository(db)

    def get_file(self, owner_id: str, file_id: str) -> StoredFile:
        return self.file_repo.get_owned(file_id, owner_id)

    def rename_file(self, owner_id: str, file_id: str, name: str) -> StoredFile:
        """Change the display name. The remote object is not renamed."""
        record = self.file_repo.get_owned(file_id, owner_id)
        record.name = name
        self.db.commit()
        self.db.refresh(record)
        return record
