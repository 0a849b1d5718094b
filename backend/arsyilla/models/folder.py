"""Placement record model."""

from sqlalchemy import Column, String, Text, Integer, DateTime, ForeignKey, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from ..database import Base

MODE_SHARED = "shared"
MODE_DEDICATED = "dedicated"


class Folder(Base):
    """Maps a user's logical folder name to a GitHub repository.

    ``mode`` is ``"shared"`` for /api/db/save records, which live under
    ``db_path`` inside the shared database repository, and ``"dedicated"``
    for /api/folder records, which own a whole repository (``db_path`` is "").

    ``share_code`` and ``db_path`` are written once at creation.
    """

    __tablename__ = "folders"
    __table_args__ = (
        UniqueConstraint("user_id", "folder_name", "repo_name", name="uq_folder_owner_name_repo"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    folder_name = Column(String(255), nullable=False)
    repo_name = Column(String(255), nullable=False)
    share_code = Column(String(32), unique=True, nullable=False, index=True)
    db_path = Column(Text, nullable=False, default="")
    mode = Column(String(20), nullable=False, default=MODE_DEDICATED)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    owner = relationship("User", back_populates="folders")
