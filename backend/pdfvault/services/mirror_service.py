"""Deep module keeping local folder/file records mirrored in remote storage.

Every flow follows the same order: load the local record (owner-scoped),
open a remote session, resolve the remote location, perform the remote
mutation through the retry executor, and only then write the local record.
A failure therefore leaves at worst an orphaned remote object, never a local
record that points at nothing.

Public methods:
    create_folder          -- mkdir under the parent's remote node, then persist
    upload_file            -- upload into the folder's remote node, then persist
    delete_file            -- remove remote node (absence tolerated), then record
    download_file          -- fetch bytes of a stored file
    delete_folder          -- remove remote subtree, then local subtree + files
    delete_owner_namespace -- remove a user's whole remote namespace
"""

import logging
import time
import uuid
from contextlib import contextmanager
from typing import Callable, Iterator, Optional, Tuple, TypeVar

from fastapi import Depends
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.config import Settings, settings
from ..database import get_db
from ..exceptions import DatabaseError, DuplicateNameError, RemoteNodeNotFoundError, ValidationError
from ..models.folder import Folder
from ..models.stored_file import StoredFile
from ..remote.client import RemoteCredentials, RemoteNode, RemoteSession, RemoteTreeClient, get_remote_client
from ..remote.locator import format_locator, locate, parse_locator
from ..remote.provisioner import Namespace, ensure_namespace, find_namespace
from ..remote.retry import SINGLE_ATTEMPT, RetryPolicy, with_retry
from ..repositories.file_repository import FileRepository
from ..repositories.folder_repository import FolderRepository

logger = logging.getLogger(__name__)

T = TypeVar("T")

PDF_MAGIC = b"%PDF-"


def new_record_id(prefix: str) -> str:
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


def remote_object_name(display_name: str, now: float) -> str:
    """Collision-avoiding remote name: ``<unix-millis>-<display name>``."""
    return f"{int(now * 1000)}-{display_name}"


def validate_pdf(data: bytes, max_bytes: int) -> None:
    """Reject empty, oversized or non-PDF uploads before any remote call."""
    if not data:
        raise ValidationError("Uploaded file is empty", field="file")
    if len(data) > max_bytes:
        raise ValidationError(f"File exceeds the {max_bytes} byte upload limit", field="file")
    if not data.startswith(PDF_MAGIC):
        raise ValidationError("Only PDF files can be uploaded", field="file")


class MirrorService:
    """Coordinates the local metadata store with the remote tree."""

    def __init__(
        self,
        db: Session,
        remote: RemoteTreeClient,
        credentials: Optional[RemoteCredentials] = None,
        policy: Optional[RetryPolicy] = None,
        cfg: Settings = settings,
        clock: Callable[[], float] = time.time,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.db = db
        self.remote = remote
        self.credentials = credentials or RemoteCredentials.from_settings(cfg)
        self.policy = policy or RetryPolicy.from_settings(cfg)
        self.share_base_url = cfg.remote_share_base_url
        self.app_root_name = cfg.remote_app_root
        self.max_depth = cfg.locator_max_depth
        self.max_nodes = cfg.locator_max_nodes
        self.max_upload_bytes = cfg.max_upload_bytes
        self.folder_repo = FolderRepository(db)
        self.file_repo = FileRepository(db)
        self._clock = clock
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def create_folder(
        self,
        owner_id: str,
        name: str,
        parent_id: Optional[str] = None,
        is_public: bool = False,
    ) -> Folder:
        """Create a remote directory and the local folder that mirrors it.

        Raises:
            FolderNotFoundError: parent given but missing or owned by someone else.
            DuplicateNameError: (name, owner, parent) already taken.
            RemoteNodeNotFoundError: the parent's remote directory is gone.
        """
        parent = self.folder_repo.get_owned(parent_id, owner_id) if parent_id is not None else None

        # Checked before touching the remote tree so a rejected name leaves no orphan.
        if self.folder_repo.find_sibling(owner_id, parent_id, name) is not None:
            raise DuplicateNameError(name, parent_id)

        with self._session() as session:
            namespace = self._ensure_namespace(session, owner_id)
            if parent is None:
                remote_parent = namespace.owner_root
            else:
                remote_parent = self._resolve(session, namespace.owner_root, parent.remote_url)
            node = self._retry(
                lambda: session.make_directory(remote_parent, name),
                label=f"create folder {name!r}",
            )

        folder = Folder(
            folder_id=new_record_id("fld"),
            user_id=owner_id,
            name=name,
            parent_id=parent_id,
            is_public=is_public,
            remote_url=format_locator(self.share_base_url, node.id),
        )
        self.db.add(folder)
        try:
            self.db.commit()
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(
                "Folder lost a create race; remote directory left orphaned",
                extra={"owner_id": owner_id, "node_id": node.id, "name": name},
            )
            raise DuplicateNameError(name, parent_id) from e
        except SQLAlchemyError as e:
            self._persist_failed(e, node.id)
        self.db.refresh(folder)

        logger.info(
            "Folder mirrored",
            extra={"folder_id": folder.folder_id, "owner_id": owner_id, "node_id": node.id},
        )
        return folder

    def upload_file(self, owner_id: str, folder_id: str, name: str, data: bytes) -> StoredFile:
        """Upload *data* into the folder's remote directory and record it.

        Raises:
            ValidationError: empty, oversized or not a PDF.
            FolderNotFoundError: folder missing or not owned.
            RemoteNodeNotFoundError: the folder's remote directory is gone (drift);
                no local record is written.
        """
        validate_pdf(data, self.max_upload_bytes)
        folder = self.folder_repo.get_owned(folder_id, owner_id)
        remote_name = remote_object_name(name, self._clock())

        with self._session() as session:
            namespace = self._ensure_namespace(session, owner_id)
            remote_parent = self._resolve(session, namespace.owner_root, folder.remote_url)
            node = self._retry(
                lambda: session.upload(remote_parent, remote_name, data),
                label=f"upload {remote_name!r}",
            )

        record = StoredFile(
            file_id=new_record_id("file"),
            user_id=owner_id,
            folder_id=folder.folder_id,
            name=name,
            remote_url=format_locator(self.share_base_url, node.id),
            size=len(data),
        )
        self.db.add(record)
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self._persist_failed(e, node.id)
        self.db.refresh(record)

        logger.info(
            "File uploaded",
            extra={"file_id": record.file_id, "folder_id": folder_id, "node_id": node.id, "bytes": len(data)},
        )
        return record

    def delete_file(self, owner_id: str, file_id: str) -> None:
        """Delete the remote object (if still present) and the local record.

        A remote delete that fails for any reason other than absence
        propagates and the local record is kept.
        """
        record = self.file_repo.get_owned(file_id, owner_id)
        with self._session() as session:
            self._delete_remote(session, owner_id, record.remote_url)
        self.db.delete(record)
        self.db.commit()
        logger.info("File deleted", extra={"file_id": file_id, "owner_id": owner_id})

    def download_file(self, owner_id: str, file_id: str) -> Tuple[StoredFile, bytes]:
        record = self.file_repo.get_owned(file_id, owner_id)
        with self._session() as session:
            namespace = find_namespace(session, owner_id, self.app_root_name)
            if namespace is None:
                raise RemoteNodeNotFoundError(record.remote_url, "Remote storage namespace is missing")
            node = self._resolve(session, namespace.owner_root, record.remote_url)
            data = self._retry(lambda: session.download(node), label=f"download {node.id}")
        return record, data

    def delete_folder(self, owner_id: str, folder_id: str) -> int:
        """Delete a folder, every folder below it, and all their files.

        The remote directory goes first (taking its remote subtree with it);
        absence is tolerated. Returns the number of folder records removed.
        """
        folder = self.folder_repo.get_owned(folder_id, owner_id)
        with self._session() as session:
            self._delete_remote(session, owner_id, folder.remote_url)

        subtree = self.folder_repo.collect_subtree_ids(owner_id, folder.folder_id)
        count = self.folder_repo.delete_many(subtree)
        self.db.commit()
        logger.info(
            "Folder deleted",
            extra={"folder_id": folder_id, "owner_id": owner_id, "deleted_folders": count},
        )
        return count

    def delete_owner_namespace(self, owner_id: str) -> bool:
        """Remove the owner's remote container. Returns False if it was absent."""
        with self._session() as session:
            namespace = find_namespace(session, owner_id, self.app_root_name)
            if namespace is None:
                return False
            return self._delete_node(session, namespace.owner_root)

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    @contextmanager
    def _session(self) -> Iterator[RemoteSession]:
        """A fresh remote session per high-level operation."""
        session = self.remote.connect(self.credentials)
        try:
            yield session
        finally:
            session.close()

    def _retry(self, operation: Callable[[], T], label: str, policy: Optional[RetryPolicy] = None) -> T:
        return with_retry(operation, policy or self.policy, sleep=self._sleep, label=label)

    def _ensure_namespace(self, session: RemoteSession, owner_id: str) -> Namespace:
        return ensure_namespace(session, owner_id, self.app_root_name, self.policy, sleep=self._sleep)

    def _resolve(self, session: RemoteSession, root: RemoteNode, locator: str) -> RemoteNode:
        """Locate the node a stored locator names, or raise RemoteNodeNotFoundError."""
        try:
            node_id = parse_locator(locator)
        except ValueError as e:
            raise RemoteNodeNotFoundError(locator, "Stored remote locator is malformed") from e

        node = locate(session, root, node_id, max_depth=self.max_depth, max_nodes=self.max_nodes)
        if node is None:
            logger.warning("Remote node missing (drift)", extra={"node_id": node_id})
            raise RemoteNodeNotFoundError(node_id)
        return node

    def _delete_remote(self, session: RemoteSession, owner_id: str, locator: str) -> bool:
        """Best-effort delete of the node behind *locator*. False if already gone."""
        try:
            node_id = parse_locator(locator)
        except ValueError:
            logger.warning("Skipping remote delete of malformed locator", extra={"locator": locator})
            return False

        namespace = find_namespace(session, owner_id, self.app_root_name)
        node = None
        if namespace is not None:
            node = locate(session, namespace.owner_root, node_id, max_depth=self.max_depth, max_nodes=self.max_nodes)
        if node is None:
            logger.info("Remote node already absent", extra={"node_id": node_id})
            return False
        return self._delete_node(session, node)

    def _delete_node(self, session: RemoteSession, node: RemoteNode) -> bool:
        try:
            self._retry(lambda: session.delete(node), label=f"delete {node.id}", policy=SINGLE_ATTEMPT)
        except RemoteNodeNotFoundError:
            logger.info("Remote node vanished before delete", extra={"node_id": node.id})
            return False
        return True

    def _persist_failed(self, error: SQLAlchemyError, node_id: str) -> None:
        self.db.rollback()
        logger.error(
            "Local persist failed after remote success; remote node orphaned",
            extra={"node_id": node_id},
        )
        raise DatabaseError("Failed to save record", original_error=error) from error


def get_mirror_service(
    db: Session = Depends(get_db),
    remote: RemoteTreeClient = Depends(get_remote_client),
) -> MirrorService:
    """FastAPI dependency wiring a MirrorService to the request's DB session."""
    return MirrorService(db, remote)
