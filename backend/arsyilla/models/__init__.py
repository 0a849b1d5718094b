"""Database models."""

from .user import User
from .folder import Folder

__all__ = ["User", "Folder"]
