"""Service layer for business logic."""

from . import auth_service
from .github_client import GitHubClient
from .placement_service import PlacementService

__all__ = ["auth_service", "GitHubClient", "PlacementService"]
