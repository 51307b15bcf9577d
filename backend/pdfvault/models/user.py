"""User account model.

Users authenticate with email/password and receive JWT access and refresh
tokens. Folders and files are always queried through the owning user id.
"""

from sqlalchemy import Column, String, DateTime, Text
from sqlalchemy.sql import func
from ..database import Base


class User(Base):
    __tablename__ = "users"

    user_id = Column(String(50), primary_key=True)
    email = Column(String(255), unique=True, nullable=False)
    username = Column(String(16), unique=True, nullable=False)
    password_hash = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
