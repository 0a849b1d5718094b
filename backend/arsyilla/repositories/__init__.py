"""Data access layer."""

from .user_repository import UserRepository
from .folder_repository import FolderRepository

__all__ = ["UserRepository", "FolderRepository"]
