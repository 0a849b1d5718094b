"""Placement service: where a user's logical folders live on GitHub.

Two placement modes share one table (see ``models.folder``):

- shared database: every ``/api/db/save`` caller writes into one public
  repository, under a sub-path seeded from the creation timestamp;
- dedicated folder: every ``/api/folder`` call gets its own repository.

The service owns the whole write flow (lookup, create-if-absent, remote
write) so route handlers stay thin. Share codes are written once and never
change; the redirect target for a share link is always derived from the
stored ``repo_name`` and ``db_path``.
"""

import logging
import re
import secrets
from datetime import datetime, timedelta, timezone
from typing import List, Optional, Union
from urllib.parse import quote

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..core.config import Settings
from ..exceptions import (
    FolderAlreadyExistsError,
    FolderNotFoundError,
    ShareCodeNotFoundError,
    ValidationError,
)
from ..models.folder import Folder, MODE_DEDICATED, MODE_SHARED
from ..models.user import User
from ..repositories.folder_repository import FolderRepository
from .github_client import GitHubClient

logger = logging.getLogger(__name__)

# Western Indonesia Time. Fixed offset, Indonesia observes no DST.
JAKARTA_TZ = timezone(timedelta(hours=7), "WIB")
INDONESIAN_WEEKDAYS = ("Senin", "Selasa", "Rabu", "Kamis", "Jumat", "Sabtu", "Minggu")

SHARED_SHARE_CODE_BYTES = 6
DEDICATED_SHARE_CODE_BYTES = 4
REPO_SUFFIX_BYTES = 3

SHARED_LINK_PREFIX = "/db"
DEDICATED_LINK_PREFIX = "/s"

_WHITESPACE = re.compile(r"\s+")
_REPO_NAME_INVALID = re.compile(r"[^a-z0-9._-]")
_REPO_NAME_WORD = re.compile(r"[a-z0-9]")


def format_timestamp(now: Optional[datetime] = None) -> str:
    """Render ``now`` as ``Sabtu-17-10-2026-21.05.09`` in Jakarta time.

    Indonesian weekday name, day-month-year, 24-hour clock with dots.
    Naive datetimes are taken to be UTC.
    """
    now = now or datetime.now(timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    local = now.astimezone(JAKARTA_TZ)
    weekday = INDONESIAN_WEEKDAYS[local.weekday()]
    return f"{weekday}-{local:%d-%m-%Y-%H.%M.%S}"


def slugify_repo_name(folder_name: str, suffix: bool = True) -> str:
    """Derive a GitHub repository name from a logical folder name.

    Whitespace runs become ``-`` and the result is lowercased. Characters
    GitHub does not accept in repository names are also replaced by ``-``.
    With ``suffix`` a short random hex tag is appended, since repository
    names are global per account while folder names are only per user.
    """
    slug = _WHITESPACE.sub("-", folder_name.strip()).lower()
    slug = _REPO_NAME_INVALID.sub("-", slug)
    if suffix:
        slug = f"{slug}-{secrets.token_hex(REPO_SUFFIX_BYTES)}"
    return slug


def share_url(prefix: str, share_code: str, file_name: str) -> str:
    return f"{prefix}/{share_code}/{file_name}"


class PlacementService:
    """All placement-registry operations behind a narrow interface.

    Public methods:
        save_database_file  -- shared mode; creates the record on first write
        create_folder       -- dedicated mode; one repository per folder
        upload_backup       -- write into an existing dedicated folder
        list_folders        -- every record the user owns
        resolve_share_link  -- share code + file name -> raw content URL
    """

    def __init__(self, db: Session, settings: Settings, github: GitHubClient):
        self.db = db
        self.settings = settings
        self.github = github
        self.folder_repo = FolderRepository(db)

    # ------------------------------------------------------------------
    # Shared database
    # ------------------------------------------------------------------

    def resolve_shared_database(self, user: User, db_name: str) -> Folder:
        """Return the user's shared-database record for ``db_name``, creating it if absent.

        The timestamped sub-path is fixed at creation and reused afterwards.
        It is unique within the shared repository, so two users who create
        the same database name in the same second never share files.
        """
        repo_name = self.settings.shared_repo_name
        folder = self.folder_repo.get_shared(user.id, db_name, repo_name)
        if folder is not None:
            return folder

        share_code = self._new_share_code(SHARED_SHARE_CODE_BYTES)
        db_path = self._new_db_path(repo_name, db_name, share_code)

        self.github.create_repository(repo_name)
        try:
            folder = self.folder_repo.add(Folder(
                user_id=user.id,
                folder_name=db_name,
                repo_name=repo_name,
                share_code=share_code,
                db_path=db_path,
                mode=MODE_SHARED,
            ))
        except IntegrityError as e:
            # A concurrent first save for the same name won the insert; use its record.
            self.db.rollback()
            folder = self.folder_repo.get_shared(user.id, db_name, repo_name)
            if folder is None:
                raise FolderAlreadyExistsError(db_name) from e
            return folder
        logger.info(
            "Shared database placement created",
            extra={"user_id": user.id, "db_name": db_name, "db_path": db_path},
        )
        return folder

    def save_database_file(
        self, user: User, db_name: str, file_name: str, content: Union[str, bytes]
    ) -> str:
        """Write ``file_name`` into the user's shared database. Returns the share URL."""
        folder = self.resolve_shared_database(user, db_name)
        self.github.upsert_file(folder.repo_name, f"{folder.db_path}/{file_name}", content)
        return share_url(SHARED_LINK_PREFIX, folder.share_code, file_name)

    # ------------------------------------------------------------------
    # Dedicated folders
    # ------------------------------------------------------------------

    def create_folder(self, user: User, folder_name: str) -> Folder:
        """Create a dedicated repository for ``folder_name``.

        Raises FolderAlreadyExistsError, before any remote call, if the user
        already has a dedicated folder with this name, and ValidationError if
        the name has no letter or digit to build a repository name from.
        """
        if not _REPO_NAME_WORD.search(slugify_repo_name(folder_name, suffix=False)):
            raise ValidationError(
                "Folder name must contain at least one ASCII letter or digit",
                field="folderName",
            )
        if self.folder_repo.get_dedicated(user.id, folder_name) is not None:
            raise FolderAlreadyExistsError(folder_name)

        repo_name = slugify_repo_name(folder_name, suffix=self.settings.dedicated_repo_suffix)
        share_code = self._new_share_code(DEDICATED_SHARE_CODE_BYTES)

        self.github.create_repository(repo_name)
        try:
            folder = self.folder_repo.add(Folder(
                user_id=user.id,
                folder_name=folder_name,
                repo_name=repo_name,
                share_code=share_code,
                db_path="",
                mode=MODE_DEDICATED,
            ))
        except IntegrityError as e:
            self.db.rollback()
            raise FolderAlreadyExistsError(folder_name) from e
        logger.info(
            "Dedicated folder created",
            extra={"user_id": user.id, "folder_name": folder_name, "repo": repo_name},
        )
        return folder

    def upload_backup(
        self, user: User, folder_name: str, file_name: str, content: Union[str, bytes]
    ) -> tuple[Folder, str]:
        """Write ``file_name`` into an existing dedicated folder.

        Returns the folder and the share URL. Raises FolderNotFoundError,
        before any remote call, when the folder was never created.
        """
        folder = self.folder_repo.get_dedicated(user.id, folder_name)
        if folder is None:
            raise FolderNotFoundError(folder_name)

        self.github.upsert_file(folder.repo_name, file_name, content)
        return folder, share_url(DEDICATED_LINK_PREFIX, folder.share_code, file_name)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_folders(self, user: User) -> List[Folder]:
        return self.folder_repo.list_for_user(user.id)

    def resolve_share_link(self, share_code: str, file_name: str) -> str:
        """Map a share code and file name to the raw-content URL on GitHub."""
        folder = self.folder_repo.get_by_share_code(share_code)
        if folder is None:
            raise ShareCodeNotFoundError(share_code)
        return self.raw_url(folder, file_name)

    def raw_url(self, folder: Folder, file_name: str) -> str:
        path = "/".join(part for part in (folder.db_path, file_name) if part)
        return (
            f"{self.settings.github_raw_url}/{self.settings.github_owner}/"
            f"{folder.repo_name}/{self.settings.github_branch}/{quote(path, safe='/')}"
        )

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _new_share_code(self, nbytes: int) -> str:
        code = secrets.token_hex(nbytes)
        while self.folder_repo.share_code_exists(code):
            code = secrets.token_hex(nbytes)
        return code

    def _new_db_path(self, repo_name: str, db_name: str, share_code: str) -> str:
        stamp = format_timestamp()
        db_path = f"{stamp}/{db_name}"
        if self.folder_repo.db_path_taken(repo_name, db_path):
            # Same name created within the same second by someone else.
            db_path = f"{stamp}-{share_code}/{db_name}"
        return db_path
