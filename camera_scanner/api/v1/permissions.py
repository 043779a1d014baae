"""
==============================================================================
Permission Endpoints
==============================================================================

Pending runtime permission requests and their answers. Answering a request
plays the part of the system permission dialog.

==============================================================================
"""

from fastapi import APIRouter, Depends

from camera_scanner.core import exceptions
from camera_scanner.core.dependencies import get_permission_store
from camera_scanner.schemas.camera import (
    PendingPermissionsResponse,
    PermissionRequestOut,
    PermissionResultRequest,
)
from camera_scanner.schemas.common import MessageResponse
from camera_scanner.screen.permissions import PermissionStore


router = APIRouter(prefix="/permissions", tags=["Permissions"])


@router.get("/pending", response_model=PendingPermissionsResponse)
async def list_pending_requests(store: PermissionStore = Depends(get_permission_store)):
    """Permission requests waiting for an answer."""
    return PendingPermissionsResponse(requests=[
        PermissionRequestOut(request_code=r.request_code, permissions=list(r.permissions))
        for r in store.pending_requests
    ])


@router.post("/{request_code}", response_model=MessageResponse)
async def answer_request(
    request_code: int,
    body: PermissionResultRequest,
    store: PermissionStore = Depends(get_permission_store)
):
    """Grant or deny the permissions of a pending request."""
    if len(body.permissions) != len(body.grant_results):
        raise exceptions.invalid_grant_results(body.permissions, body.grant_results)

    try:
        store.answer(request_code, body.permissions, body.grant_results)
    except KeyError:
        raise exceptions.permission_request_not_found(request_code)

    granted = all(body.grant_results)
    return MessageResponse(
        message=f"Request {request_code} {'granted' if granted else 'denied'}"
    )
