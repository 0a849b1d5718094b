"""Authentication and request-scoped dependencies.

Public interface:
    ``require_user``          — resolves ``X-API-Key`` to a User or raises 401.
    ``get_app_settings``      — the Settings the app was created with.
    ``get_github_client``     — the app's GitHubClient.
    ``get_placement_service`` — PlacementService bound to the request session.
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import APIKeyHeader
from sqlalchemy.orm import Session

from .config import Settings
from ..database import get_db
from ..models.user import User
from ..services import auth_service
from ..services.github_client import GitHubClient
from ..services.placement_service import PlacementService

logger = logging.getLogger(__name__)

ACCESS_KEY_HEADER = "X-API-Key"

_api_key_scheme = APIKeyHeader(name=ACCESS_KEY_HEADER, auto_error=False)


def require_user(
    access_key: Optional[str] = Depends(_api_key_scheme),
    db: Session = Depends(get_db),
) -> User:
    """Require a valid access key and return its owner.

    Missing header -> AuthenticationRequiredError; unknown key ->
    AuthenticationInvalidError. Both render as 401.
    """
    return auth_service.get_user_by_access_key(db, access_key)


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_github_client(request: Request) -> GitHubClient:
    return request.app.state.github


def get_placement_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
    github: GitHubClient = Depends(get_github_client),
) -> PlacementService:
    return PlacementService(db, settings, github)
