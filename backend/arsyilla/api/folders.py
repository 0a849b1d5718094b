"""Backup API: shared database saves, dedicated folders, uploads and listing.

Every endpoint here requires the ``X-API-Key`` header. Handlers delegate to
PlacementService, which owns the registry lookups and the GitHub calls.
"""

import logging

from fastapi import APIRouter, Depends

from ..core.auth import get_placement_service, require_user
from ..models.user import User
from ..schemas.folder import (
    BackupUploadRequest,
    DatabaseSaveRequest,
    FolderCreateRequest,
    FolderCreatedResponse,
    FolderListResponse,
    FolderResponse,
    SaveResponse,
    UploadResponse,
)
from ..services.placement_service import PlacementService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["folders"])


# -- Shared database ---------------------------------------------------------

@router.post("/db/save", response_model=SaveResponse)
def save_database_file(
    body: DatabaseSaveRequest,
    user: User = Depends(require_user),
    service: PlacementService = Depends(get_placement_service),
):
    """Write a file into the caller's database inside the shared repository."""
    url = service.save_database_file(user, body.db_name, body.file_name, body.content)
    return SaveResponse(url=url)


# -- Dedicated folders ---------------------------------------------------------

@router.post("/folder", response_model=FolderCreatedResponse)
def create_folder(
    body: FolderCreateRequest,
    user: User = Depends(require_user),
    service: PlacementService = Depends(get_placement_service),
):
    """Create a folder backed by its own GitHub repository."""
    folder = service.create_folder(user, body.folder_name)
    return FolderCreatedResponse(
        message="Backup repository created",
        share_code=folder.share_code,
        repo_name=folder.repo_name,
    )


@router.post("/backup/upload", response_model=UploadResponse)
def upload_backup(
    body: BackupUploadRequest,
    user: User = Depends(require_user),
    service: PlacementService = Depends(get_placement_service),
):
    folder, url = service.upload_backup(user, body.folder_name, body.file_name, body.content)
    return UploadResponse(
        message=f"Backup saved to repository: {folder.repo_name}",
        url=url,
    )


@router.get("/my-folders", response_model=FolderListResponse)
def list_my_folders(
    user: User = Depends(require_user),
    service: PlacementService = Depends(get_placement_service),
):
    folders = service.list_folders(user)
    return FolderListResponse(
        folders=[
            FolderResponse(
                id=f.id,
                folder_name=f.folder_name,
                repo_name=f.repo_name,
                share_code=f.share_code,
                db_path=f.db_path or "",
                mode=f.mode,
                created_at=f.created_at,
            )
            for f in folders
        ],
    )
