"""Repository for folder records."""

from typing import List, Optional

from .base import BaseRepository
from ..exceptions import FolderNotFoundError
from ..models.folder import Folder
from ..models.stored_file import StoredFile


class FolderRepository(BaseRepository[Folder]):
    model_class = Folder
    id_column = "folder_id"
    not_found_error = FolderNotFoundError

    def list_by_owner(self, owner_id: str) -> List[Folder]:
        return self._owned_query(owner_id).order_by(Folder.name).all()

    def list_children(self, owner_id: str, parent_id: Optional[str]) -> List[Folder]:
        """Folders directly under *parent_id* (None = root level)."""
        query = self._owned_query(owner_id)
        if parent_id is None:
            query = query.filter(Folder.parent_id.is_(None))
        else:
            query = query.filter(Folder.parent_id == parent_id)
        return query.order_by(Folder.name).all()

    def find_sibling(self, owner_id: str, parent_id: Optional[str], name: str) -> Optional[Folder]:
        """The folder occupying the (name, owner, parent) slot, if any."""
        query = self._owned_query(owner_id).filter(Folder.name == name)
        if parent_id is None:
            query = query.filter(Folder.parent_id.is_(None))
        else:
            query = query.filter(Folder.parent_id == parent_id)
        return query.first()

    def list_public(self, owner_id: str) -> List[Folder]:
        return (
            self._owned_query(owner_id)
            .filter(Folder.is_public.is_(True))
            .order_by(Folder.name)
            .all()
        )

    def collect_subtree_ids(self, owner_id: str, folder_id: str) -> List[str]:
        """Ids of *folder_id* and all of its descendants, parents first.

        Breadth-first with an explicit queue, one query per tree level.
        """
        ordered: List[str] = [folder_id]
        frontier = [folder_id]
        seen = {folder_id}
        while frontier:
            rows = (
                self.db.query(Folder.folder_id)
                .filter(Folder.user_id == owner_id, Folder.parent_id.in_(frontier))
                .all()
            )
            frontier = [r[0] for r in rows if r[0] not in seen]
            seen.update(frontier)
            ordered.extend(frontier)
        return ordered

    def delete_many(self, folder_ids: List[str]) -> int:
        """Remove folders and every file inside them. Returns folders removed."""
        if not folder_ids:
            return 0
        self.db.query(StoredFile).filter(StoredFile.folder_id.in_(folder_ids)).delete(
            synchronize_session=False
        )
        count = self.db.query(Folder).filter(Folder.folder_id.in_(folder_ids)).delete(
            synchronize_session=False
        )
        self.db.expire_all()
        return count

    def delete_all_for_owner(self, owner_id: str) -> int:
        self.db.query(StoredFile).filter(StoredFile.user_id == owner_id).delete(synchronize_session=False)
        count = self.db.query(Folder).filter(Folder.user_id == owner_id).delete(synchronize_session=False)
        self.db.expire_all()
        return count
