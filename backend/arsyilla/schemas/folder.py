"""Folder, upload and share schemas.

Wire names are camelCase (``dbName``, ``fileName``, ``shareCode`` ...);
Python attributes are snake_case.
"""

from datetime import datetime
from typing import Annotated, List, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field


def _validate_name(v: str) -> str:
    """Folder and database names: non-empty, single path segment."""
    v = v.strip()
    if not v:
        raise ValueError("Name cannot be empty")
    if "/" in v or "\\" in v:
        raise ValueError("Name cannot contain path separators")
    if v in (".", ".."):
        raise ValueError("Name cannot be '.' or '..'")
    return v


def _validate_file_name(v: str) -> str:
    """File names may be nested (``dir/a.txt``) but must stay inside the folder."""
    v = v.strip()
    if not v:
        raise ValueError("File name cannot be empty")
    if v.startswith("/"):
        raise ValueError("File name cannot start with '/'")
    segments = v.split("/")
    if any(seg in ("", ".", "..") for seg in segments):
        raise ValueError("File name cannot contain empty, '.' or '..' segments")
    return v


Name = Annotated[str, AfterValidator(_validate_name)]
FileName = Annotated[str, AfterValidator(_validate_file_name)]


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class DatabaseSaveRequest(_CamelModel):
    """Body of POST /api/db/save."""
    db_name: Name = Field(..., alias="dbName")
    file_name: FileName = Field(..., alias="fileName")
    content: str


class FolderCreateRequest(_CamelModel):
    """Body of POST /api/folder."""
    folder_name: Name = Field(..., alias="folderName")


class BackupUploadRequest(_CamelModel):
    """Body of POST /api/backup/upload."""
    folder_name: Name = Field(..., alias="folderName")
    file_name: FileName = Field(..., alias="fileName")
    content: str


class SaveResponse(BaseModel):
    success: bool = True
    url: str


class UploadResponse(BaseModel):
    success: bool = True
    message: str
    url: str


class FolderCreatedResponse(_CamelModel):
    message: str
    share_code: str = Field(..., alias="shareCode")
    repo_name: str = Field(..., alias="repoName")


class FolderResponse(_CamelModel):
    """One placement record as listed by /api/my-folders."""
    id: int
    folder_name: str = Field(..., alias="folderName")
    repo_name: str = Field(..., alias="repoName")
    share_code: str = Field(..., alias="shareCode")
    db_path: str = Field("", alias="dbPath")
    mode: str
    created_at: Optional[datetime] = Field(None, alias="createdAt")


class FolderListResponse(BaseModel):
    success: bool = True
    folders: List[FolderResponse]
