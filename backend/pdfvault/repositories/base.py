"""Base repository with shared owner-scoped lookups.

Subclasses specify model_class, id_column and not_found_error. Every record
in this application belongs to a user, so the base also provides the
owner-scoped variants that the services use for all reads and writes.
"""

from typing import TypeVar, Generic, Optional, Type
from sqlalchemy.orm import Session, Query

from ..database import Base
from ..exceptions import VaultException

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """Shared repository logic for SQLAlchemy models.

    Class variables to set in subclasses:
        model_class:     The SQLAlchemy model (e.g., Folder)
        id_column:       Name of the primary-key column
        owner_column:    Name of the owning user column
        not_found_error: Exception class to raise from get_owned
    """

    model_class: Type[ModelT]
    id_column: str = "id"
    owner_column: str = "user_id"
    not_found_error: Type[VaultException]

    def __init__(self, db: Session):
        self.db = db

    def _base_query(self) -> Query:
        return self.db.query(self.model_class)

    def _owned_query(self, owner_id: str) -> Query:
        col = getattr(self.model_class, self.owner_column)
        return self._base_query().filter(col == owner_id)

    def get_by_id_optional(self, entity_id: str) -> Optional[ModelT]:
        """Get entity by primary key, or None if not found."""
        col = getattr(self.model_class, self.id_column)
        return self._base_query().filter(col == entity_id).first()

    def get_owned_optional(self, entity_id: str, owner_id: str) -> Optional[ModelT]:
        """Get entity by primary key if it belongs to *owner_id*."""
        col = getattr(self.model_class, self.id_column)
        return self._owned_query(owner_id).filter(col == entity_id).first()

    def get_owned(self, entity_id: str, owner_id: str) -> ModelT:
        """Owner-scoped get. Raises not_found_error for missing and foreign records alike."""
        entity = self.get_owned_optional(entity_id, owner_id)
        if entity is None:
            raise self.not_found_error(entity_id)
        return entity
