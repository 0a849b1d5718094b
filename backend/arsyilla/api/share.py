"""Public share links: redirect to the raw file on GitHub.

    GET /db/{share_code}/{file_name}  — shared database files
    GET /s/{share_code}/{file_name}   — dedicated folder files

No authentication. The share code is a lookup key, not a secret.
"""

from fastapi import APIRouter, Depends
from fastapi.responses import RedirectResponse

from ..core.auth import get_placement_service
from ..services.placement_service import PlacementService

router = APIRouter(tags=["share"])


@router.get("/db/{share_code}/{file_name:path}", response_class=RedirectResponse, status_code=302)
def open_database_file(
    share_code: str,
    file_name: str,
    service: PlacementService = Depends(get_placement_service),
):
    return RedirectResponse(service.resolve_share_link(share_code, file_name), status_code=302)


@router.get("/s/{share_code}/{file_name:path}", response_class=RedirectResponse, status_code=302)
def open_shared_file(
    share_code: str,
    file_name: str,
    service: PlacementService = Depends(get_placement_service),
):
    return RedirectResponse(service.resolve_share_link(share_code, file_name), status_code=302)
