"""Folder model: a node of a user's tree, mirrored by a remote directory."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, Text, UniqueConstraint, text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base

FOLDER_NAME_MAX_LENGTH = 64


class Folder(Base):
    """A folder owned by one user.

    ``remote_url`` is the locator of the mirrored remote directory
    (``.../fm/<node_id>``); it is written once, after the remote directory exists.
    """

    __tablename__ = "folders"
    __table_args__ = (
        UniqueConstraint("name", "user_id", "parent_id", name="uq_folders_name_user_parent"),
        # NULL parent_ids never collide under the constraint above.
        Index(
            "uq_folders_root_name",
            "user_id",
            "name",
            unique=True,
            sqlite_where=text("parent_id IS NULL"),
            postgresql_where=text("parent_id IS NULL"),
        ),
        Index("ix_folders_user_id", "user_id"),
        Index("ix_folders_parent_id", "parent_id"),
    )

    folder_id = Column(String(50), primary_key=True)
    user_id = Column(String(50), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    name = Column(String(FOLDER_NAME_MAX_LENGTH), nullable=False)
    parent_id = Column(String(50), ForeignKey("folders.folder_id", ondelete="CASCADE"), nullable=True)
    is_public = Column(Boolean, nullable=False, default=False)
    remote_url = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    files = relationship(
        "StoredFile",
        back_populates="folder",
        passive_deletes=True,
        order_by="StoredFile.uploaded_at",
    )
