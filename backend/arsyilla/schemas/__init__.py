"""Pydantic schemas for request/response validation."""

from .auth import RegisterRequest, LoginRequest, AuthResponse
from .folder import (
    DatabaseSaveRequest,
    FolderCreateRequest,
    BackupUploadRequest,
    SaveResponse,
    UploadResponse,
    FolderCreatedResponse,
    FolderResponse,
    FolderListResponse,
)

__all__ = [
    "RegisterRequest",
    "LoginRequest",
    "AuthResponse",
    "DatabaseSaveRequest",
    "FolderCreateRequest",
    "BackupUploadRequest",
    "SaveResponse",
    "UploadResponse",
    "FolderCreatedResponse",
    "FolderResponse",
    "FolderListResponse",
]
