"""
==============================================================================
Permissions Module
==============================================================================

Runtime permission state and the camera screen's permission gate.

- PermissionStore: grant table plus pending requests answered asynchronously
- PermissionGate: checks the required permissions on screen entry and
  decides between binding the camera and finishing the screen

A request stays pending until someone answers it (the HTTP layer plays the
part of the system permission dialog). The answer is delivered to the
requester on the event loop.

==============================================================================
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Sequence, Set, Tuple

from camera_scanner.camera.executor import MainThreadExecutor
from camera_scanner.camera.source import device_accessible
from camera_scanner.config.settings import CAMERA_PERMISSION, ScreenConfig


# Module logger
logger = logging.getLogger(__name__)


PermissionResultListener = Callable[[int, List[str], List[bool]], None]


@dataclass(frozen=True)
class PermissionRequest:
    request_code: int
    permissions: Tuple[str, ...]


class PermissionStore:
    """
    Grant table for runtime permissions.

    An explicit denial wins over the device auto-grant, so a user who
    answered "deny" stays denied even when the camera node is usable.

    Attributes:
        _granted: Permissions granted explicitly
        _denied: Permissions denied explicitly
        _device_path: Camera device node checked when auto-granting
        _auto_grant: Grant the camera permission when the device is usable

    Example:
        >>> store = PermissionStore(granted=["camera"])
        >>> store.check_self_permission("camera")
        True
    """

    def __init__(
        self,
        granted: Iterable[str] = (),
        device_path: Optional[str] = None,
        auto_grant_accessible_devices: bool = False
    ) -> None:
        self._granted = set(granted)
        self._denied: Set[str] = set()
        self._device_path = device_path
        self._auto_grant = auto_grant_accessible_devices
        self._pending: Dict[int, Tuple[PermissionRequest, PermissionResultListener, MainThreadExecutor]] = {}

    def check_self_permission(self, permission: str) -> bool:
        """
        Check whether ``permission`` is currently granted.

        Args:
            permission: Permission name, e.g. "camera"

        Returns:
            True if granted explicitly, or auto-granted through an
            accessible camera device and never denied
        """
        if permission in self._denied:
            return False
        if permission in self._granted:
            return True
        if permission == CAMERA_PERMISSION and self._auto_grant:
            return device_accessible(self._device_path)
        return False

    def grant(self, permission: str) -> None:
        """Grant ``permission``, clearing an earlier denial."""
        self._denied.discard(permission)
        self._granted.add(permission)

    def revoke(self, permission: str) -> None:
        """Deny ``permission``; the denial overrides any auto-grant."""
        self._granted.discard(permission)
        self._denied.add(permission)

    # =========================================================================
    # REQUESTS
    # =========================================================================

    @property
    def pending_requests(self) -> List[PermissionRequest]:
        """Requests still waiting for an answer."""
        return [request for request, _, _ in self._pending.values()]

    def request_permissions(
        self,
        permissions: Sequence[str],
        request_code: int,
        listener: PermissionResultListener,
        executor: MainThreadExecutor
    ) -> PermissionRequest:
        """Queue a request; a later request with the same code replaces it."""
        request = PermissionRequest(request_code, tuple(permissions))
        self._pending[request_code] = (request, listener, executor)
        logger.info(f"🔐 Permission request {request_code}: {list(permissions)}")
        return request

    def answer(
        self,
        request_code: int,
        permissions: Sequence[str],
        grant_results: Sequence[bool]
    ) -> None:
        """
        Answer a pending request and notify its listener on the loop.

        Raises:
            KeyError: If no request with ``request_code`` is pending
            ValueError: If permissions and grant_results differ in length
        """
        if len(permissions) != len(grant_results):
            raise ValueError("permissions and grant_results must have the same length")

        request, listener, executor = self._pending.pop(request_code)

        for permission, granted in zip(permissions, grant_results):
            if granted:
                self.grant(permission)
            else:
                self.revoke(permission)

        logger.info(
            f"Permission request {request.request_code} answered: "
            f"{dict(zip(permissions, grant_results))}"
        )
        executor.execute(listener, request_code, list(permissions), list(grant_results))

    def cancel(self, request_code: int) -> None:
        """Drop a pending request; its listener is never called."""
        self._pending.pop(request_code, None)


class PermissionGate:
    """
    Gate in front of camera startup.

    Granted on entry: ``on_granted`` runs immediately. Otherwise a single
    request is issued; its result either runs ``on_granted`` or
    ``on_denied``. There is no second request.

    Args:
        store: Permission state the request is queued on
        config: Screen configuration (required permissions, request code)
        executor: Executor the request result is delivered on
        result_listener: Receives the request result; defaults to
            ``on_request_permissions_result`` so the owning screen can put
            its own callback in front of the gate
    """

    def __init__(
        self,
        store: PermissionStore,
        config: ScreenConfig,
        executor: MainThreadExecutor,
        result_listener: Optional[PermissionResultListener] = None
    ) -> None:
        self._store = store
        self._config = config
        self._executor = executor
        self._result_listener = result_listener or self.on_request_permissions_result
        self._on_granted: Optional[Callable[[], None]] = None
        self._on_denied: Optional[Callable[[], None]] = None

    def all_permissions_granted(self) -> bool:
        return all(
            self._store.check_self_permission(p) for p in self._config.required_permissions
        )

    def open(self, on_granted: Callable[[], None], on_denied: Callable[[], None]) -> bool:
        """
        Check permissions, requesting them if needed.

        Args:
            on_granted: Runs once every required permission is granted
            on_denied: Runs when the request is answered without them

        Returns:
            True if the permissions were already granted
        """
        self._on_granted = on_granted
        self._on_denied = on_denied

        if self.all_permissions_granted():
            on_granted()
            return True

        self._store.request_permissions(
            self._config.required_permissions,
            self._config.request_code,
            self._result_listener,
            self._executor
        )
        return False

    def on_request_permissions_result(
        self,
        request_code: int,
        permissions: List[str],
        grant_results: List[bool]
    ) -> None:
        """Re-check the required permissions once the request is answered."""
        if request_code != self._config.request_code:
            return
        if self._on_granted is None or self._on_denied is None:
            return

        if self.all_permissions_granted():
            self._on_granted()
        else:
            self._on_denied()

    def close(self) -> None:
        """Cancel the pending request and forget the callbacks."""
        self._store.cancel(self._config.request_code)
        self._on_granted = None
        self._on_denied = None
