"""Local-only folder operations: listing, lookup, rename and visibility.

Anything that touches remote storage (create, delete) lives in
``MirrorService``. A rename changes the display name only; the remote
directory keeps the name it was created with.
"""

import logging
from typing import List, Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..exceptions import DuplicateNameError, ValidationError
from ..models.folder import Folder
from ..repositories.folder_repository import FolderRepository

logger = logging.getLogger(__name__)


class FolderService:
    """Owner-scoped folder reads and metadata edits.

    Public methods:
        list_folders  -- every folder, or the children of one parent
        get_folder    -- lookup by id (404 for foreign folders)
        update_folder -- rename and/or toggle is_public
        list_public   -- another owner's public folders, no auth needed
    """

    def __init__(self, db: Session):
        self.db = db
        self.folder_repo = FolderRepository(db)

    def list_folders(self, owner_id: str, parent_id: Optional[str] = None, by_parent: bool = False) -> List[Folder]:
        """All folders of *owner_id*, or only those directly under *parent_id*.

        With ``by_parent`` set, ``parent_id=None`` means root-level folders.
        """
        if not by_parent:
            return self.folder_repo.list_by_owner(owner_id)
        return self.folder_repo.list_children(owner_id, parent_id)

    def get_folder(self, owner_id: str, folder_id: str) -> Folder:
        return self.folder_repo.get_owned(folder_id, owner_id)

    def update_folder(
        self,
        owner_id: str,
        folder_id: str,
        name: Optional[str] = None,
        is_public: Optional[bool] = None,
    ) -> Folder:
        if name is None and is_public is None:
            raise ValidationError("Nothing to update: provide name or is_public")

        folder = self.folder_repo.get_owned(folder_id, owner_id)

        if name is not None and name != folder.name:
            clash = self.folder_repo.find_sibling(owner_id, folder.parent_id, name)
            if clash is not None:
                raise DuplicateNameError(name, folder.parent_id)
            folder.name = name
        if is_public is not None:
            folder.is_public = is_public

        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            raise DuplicateNameError(name or folder.name, folder.parent_id) from e
        self.db.refresh(folder)
        logger.info("Folder updated", extra={"folder_id": folder_id, "owner_id": owner_id})
        return folder

    def list_public(self, owner_id: str) -> List[Folder]:
        return self.folder_repo.list_public(owner_id)
