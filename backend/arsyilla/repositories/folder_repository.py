"""Repository for placement records."""

from typing import List, Optional

from ..models.folder import Folder, MODE_DEDICATED, MODE_SHARED
from .base import BaseRepository


class FolderRepository(BaseRepository[Folder]):
    """Data access layer for folders (placement records)."""

    model_class = Folder

    def get_shared(self, user_id: int, folder_name: str, repo_name: str) -> Optional[Folder]:
        """Shared-database record for this user and name in ``repo_name``."""
        return (
            self.db.query(Folder)
            .filter(
                Folder.user_id == user_id,
                Folder.folder_name == folder_name,
                Folder.repo_name == repo_name,
                Folder.mode == MODE_SHARED,
            )
            .first()
        )

    def get_dedicated(self, user_id: int, folder_name: str) -> Optional[Folder]:
        """Dedicated-repository record for this user and name."""
        return (
            self.db.query(Folder)
            .filter(
                Folder.user_id == user_id,
                Folder.folder_name == folder_name,
                Folder.mode == MODE_DEDICATED,
            )
            .first()
        )

    def get_by_share_code(self, share_code: str) -> Optional[Folder]:
        return self.db.query(Folder).filter(Folder.share_code == share_code).first()

    def share_code_exists(self, share_code: str) -> bool:
        return self.get_by_share_code(share_code) is not None

    def db_path_taken(self, repo_name: str, db_path: str) -> bool:
        """True if any record already writes under ``db_path`` in ``repo_name``."""
        return (
            self.db.query(Folder.id)
            .filter(Folder.repo_name == repo_name, Folder.db_path == db_path)
            .first()
            is not None
        )

    def list_for_user(self, user_id: int) -> List[Folder]:
        return (
            self.db.query(Folder)
            .filter(Folder.user_id == user_id)
            .order_by(Folder.id)
            .all()
        )
