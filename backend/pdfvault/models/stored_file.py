"""Stored PDF metadata. The bytes live in remote storage only."""

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base

FILE_NAME_MAX_LENGTH = 128


class StoredFile(Base):
    __tablename__ = "files"
    __table_args__ = (
        Index("ix_files_user_id", "user_id"),
        Index("ix_files_folder_id", "folder_id"),
    )

    file_id = Column(String(50), primary_key=True)
    user_id = Column(String(50), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False)
    folder_id = Column(String(50), ForeignKey("folders.folder_id", ondelete="CASCADE"), nullable=False)
    name = Column(String(FILE_NAME_MAX_LENGTH), nullable=False)
    remote_url = Column(Text, nullable=False)  # .../fm/<node_id>
    size = Column(Integer, nullable=False)
    uploaded_at = Column(DateTime(timezone=True), server_default=func.now())

    folder = relationship("Folder", back_populates="files")
