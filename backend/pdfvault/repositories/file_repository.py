"""Repository for stored file records."""

from .base import BaseRepository
from ..exceptions import FileRecordNotFoundError
from ..models.stored_file import StoredFile


class FileRepository(BaseRepository[StoredFile]):
    model_class = StoredFile
    id_column = "file_id"
    not_found_error = FileRecordNotFoundError
