"""Custom exception hierarchy for Arsyilla."""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(str, Enum):
    """Values of the ``error`` field in error responses."""

    # Authentication errors
    AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"
    AUTHENTICATION_INVALID = "AUTHENTICATION_INVALID"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"

    # Placement errors
    FOLDER_NOT_FOUND = "FOLDER_NOT_FOUND"
    SHARE_CODE_NOT_FOUND = "SHARE_CODE_NOT_FOUND"

    # Duplicate username or folder
    CONFLICT = "CONFLICT"

    # Validation errors
    VALIDATION_ERROR = "VALIDATION_ERROR"

    # Remote (GitHub) errors
    UPSTREAM_FAILURE = "UPSTREAM_FAILURE"


class ArsyillaException(Exception):
    """Base for every error the API reports to clients.

    Services raise subclasses; ``middleware.exception_handler`` turns them
    into the JSON envelope using ``status_code`` and ``to_dict()``.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode,
        status_code: int = 500,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for JSON response."""
        return {
            "error": self.error_code.value,
            "message": self.message,
            "details": self.details
        }


class AuthenticationRequiredError(ArsyillaException):
    """Protected call made without an access key."""

    def __init__(self, message: str = "API key required"):
        super().__init__(
            message,
            ErrorCode.AUTHENTICATION_REQUIRED,
            status_code=401,
        )


class AuthenticationInvalidError(ArsyillaException):
    """Access key does not belong to any user."""

    def __init__(self, message: str = "Invalid API key"):
        super().__init__(
            message,
            ErrorCode.AUTHENTICATION_INVALID,
            status_code=401,
        )


class InvalidCredentialsError(ArsyillaException):
    """Username/password pair did not match."""

    def __init__(self, message: str = "Invalid username or password"):
        super().__init__(
            message,
            ErrorCode.INVALID_CREDENTIALS,
            status_code=401,
        )


class UsernameTakenError(ArsyillaException):
    """Registration with a username that already exists."""

    def __init__(self, username: str):
        super().__init__(
            "Username already taken",
            ErrorCode.CONFLICT,
            status_code=400,
            details={"username": username}
        )


class FolderAlreadyExistsError(ArsyillaException):
    """The user already owns a folder with this name."""

    def __init__(self, folder_name: str):
        super().__init__(
            f"Folder {folder_name} already exists",
            ErrorCode.CONFLICT,
            status_code=400,
            details={"folder_name": folder_name}
        )


class FolderNotFoundError(ArsyillaException):
    """No placement record for this user and folder name."""

    def __init__(self, folder_name: str):
        super().__init__(
            f"Folder not found: {folder_name}. Create it via /api/folder first.",
            ErrorCode.FOLDER_NOT_FOUND,
            status_code=404,
            details={"folder_name": folder_name}
        )


class ShareCodeNotFoundError(ArsyillaException):
    """Share link points at no placement record."""

    def __init__(self, share_code: str):
        super().__init__(
            f"Share link not found: {share_code}",
            ErrorCode.SHARE_CODE_NOT_FOUND,
            status_code=404,
            details={"share_code": share_code}
        )


class ValidationError(ArsyillaException):
    """Validation failed for user input."""

    def __init__(self, message: str, field: Optional[str] = None):
        details = {"field": field} if field else {}
        super().__init__(
            message,
            ErrorCode.VALIDATION_ERROR,
            status_code=400,
            details=details
        )


class UpstreamError(ArsyillaException):
    """GitHub API call failed for a reason other than "already exists"."""

    def __init__(self, message: str, status: int = 0, operation: Optional[str] = None):
        details: Dict[str, Any] = {"upstream_status": status}
        if operation:
            details["operation"] = operation
        super().__init__(
            message,
            ErrorCode.UPSTREAM_FAILURE,
            status_code=500,
            details=details
        )
        self.upstream_status = status


class UpstreamConflictError(UpstreamError):
    """GitHub rejected a file write because the blob sha is stale."""

    def __init__(self, message: str = "File was modified concurrently", operation: Optional[str] = None):
        super().__init__(message, status=409, operation=operation)
