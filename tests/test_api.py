"""
==============================================================================
API Integration Tests
==============================================================================

Tests for REST and WebSocket endpoints against the running camera screen.

==============================================================================
"""

from pathlib import Path

import pytest
from fastapi import WebSocketDisconnect
from fastapi.testclient import TestClient

from camera_scanner.main import Application


def _status(client: TestClient) -> dict:
    response = client.get("/api/v1/camera")
    assert response.status_code == 200
    return response.json()["screen"]


def _wait_bound(client: TestClient, poll) -> None:
    assert poll(lambda: len(_status(client)["bound_use_cases"]) == 2)


def _messages(client: TestClient) -> list:
    return [m["text"] for m in client.get("/api/v1/camera/messages").json()["messages"]]


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    def test_health_check(self, client: TestClient, poll):
        """Test health check reports the camera once the screen is bound."""
        _wait_bound(client, poll)
        response = client.get("/api/v1/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["components"]["camera"] == "healthy"
        assert data["details"]["bound_use_cases"] == 2

    def test_readiness_probe(self, client: TestClient):
        """Test readiness probe."""
        response = client.get("/api/v1/health/ready")
        assert response.status_code == 200
        assert response.json()["ready"] is True

    def test_liveness_probe(self, client: TestClient):
        """Test liveness probe."""
        response = client.get("/api/v1/health/live")
        assert response.status_code == 200
        assert response.json()["alive"] is True


class TestCameraEndpoints:
    """Tests for the camera screen endpoints."""

    def test_status_when_granted(self, client: TestClient, poll):
        """Test the screen binds preview and capture without asking."""
        _wait_bound(client, poll)
        screen = _status(client)
        assert screen["finished"] is False
        assert screen["permissions_granted"] is True
        assert screen["lifecycle"] == "RESUMED"
        assert screen["lens_facing"] == "back"
        assert sorted(screen["bound_use_cases"]) == ["ImageCapture", "Preview"]

    def test_capture_writes_photo(self, client: TestClient, poll):
        """Test the capture button writes a JPEG and shows a message."""
        _wait_bound(client, poll)

        response = client.post("/api/v1/camera/capture")
        assert response.status_code == 202
        photo = response.json()["photo"]
        assert photo is not None
        assert photo.endswith(".jpg")

        assert poll(lambda: any("Photo capture succeeded" in m for m in _messages(client)))
        assert Path(photo).is_file()
        assert _status(client)["last_photo"] == photo

    def test_consecutive_captures_use_distinct_names(self, client: TestClient, poll):
        """Test each capture gets its own file."""
        _wait_bound(client, poll)

        photos = [client.post("/api/v1/camera/capture").json()["photo"] for _ in range(3)]
        assert len(set(photos)) == 3
        assert photos == sorted(photos)
        assert poll(lambda: all(Path(p).is_file() for p in photos))

    def test_preview_frame(self, client: TestClient, poll):
        """Test the viewfinder serves the latest frame as JPEG."""
        _wait_bound(client, poll)
        assert poll(lambda: client.get("/api/v1/camera/preview").status_code == 200)

        response = client.get("/api/v1/camera/preview")
        assert response.headers["content-type"] == "image/jpeg"
        assert response.content[:2] == b"\xff\xd8"

    def test_preview_unavailable_before_binding(self, ungranted_client: TestClient):
        """Test no preview frame exists while permission is pending."""
        response = ungranted_client.get("/api/v1/camera/preview")
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "PREVIEW_UNAVAILABLE"

    def test_capture_without_binding_is_noop(self, ungranted_client: TestClient):
        """Test the capture button does nothing while nothing is bound."""
        response = ungranted_client.post("/api/v1/camera/capture")
        assert response.status_code == 202
        assert response.json()["photo"] is None

    def test_response_models_are_described(self, client: TestClient):
        """Test the OpenAPI schema carries a description for every response model."""
        schemas = client.get("/openapi.json").json()["components"]["schemas"]
        for name in (
            "ScreenStatusResponse",
            "UserMessageOut",
            "MessagesResponse",
            "PermissionRequestOut",
            "PendingPermissionsResponse",
        ):
            assert schemas[name].get("description"), name


class TestPermissionEndpoints:
    """Tests for runtime permission requests."""

    def test_pending_request_listed(self, ungranted_client: TestClient):
        """Test the screen requests the camera permission on entry."""
        response = ungranted_client.get("/api/v1/permissions/pending")
        assert response.status_code == 200
        requests = response.json()["requests"]
        assert requests == [{"request_code": 10, "permissions": ["camera"]}]
        assert _status(ungranted_client)["bound_use_cases"] == []

    def test_no_pending_request_when_granted(self, client: TestClient):
        """Test no request is issued when the permission is granted."""
        response = client.get("/api/v1/permissions/pending")
        assert response.json()["requests"] == []

    def test_grant_binds_camera(self, ungranted_client: TestClient, poll):
        """Test granting the request binds the camera."""
        response = ungranted_client.post(
            "/api/v1/permissions/10",
            json={"permissions": ["camera"], "grant_results": [True]}
        )
        assert response.status_code == 200
        assert response.json()["message"] == "Request 10 granted"

        _wait_bound(ungranted_client, poll)
        assert ungranted_client.get("/api/v1/permissions/pending").json()["requests"] == []

    def test_deny_finishes_screen(self, ungranted_client: TestClient, poll):
        """Test denying the request shows a message and finishes the screen."""
        response = ungranted_client.post(
            "/api/v1/permissions/10",
            json={"permissions": ["camera"], "grant_results": [False]}
        )
        assert response.status_code == 200
        assert response.json()["message"] == "Request 10 denied"

        assert poll(lambda: _status(ungranted_client)["finished"])
        screen = _status(ungranted_client)
        assert screen["bound_use_cases"] == []
        assert screen["lifecycle"] == "DESTROYED"
        assert "Permissions not granted by the user." in _messages(ungranted_client)

        response = ungranted_client.post("/api/v1/camera/capture")
        assert response.status_code == 409
        assert response.json()["error"]["code"] == "SCREEN_FINISHED"

    def test_unknown_request_code(self, ungranted_client: TestClient):
        """Test answering a request that is not pending."""
        response = ungranted_client.post(
            "/api/v1/permissions/99",
            json={"permissions": ["camera"], "grant_results": [True]}
        )
        assert response.status_code == 404
        assert response.json()["error"]["code"] == "PERMISSION_REQUEST_NOT_FOUND"

    def test_mismatched_grant_results(self, ungranted_client: TestClient):
        """Test permissions and grant results must line up."""
        response = ungranted_client.post(
            "/api/v1/permissions/10",
            json={"permissions": ["camera"], "grant_results": [True, False]}
        )
        assert response.status_code == 422
        assert response.json()["error"]["code"] == "INVALID_GRANT_RESULTS"


class TestPreviewWebSocket:
    """Tests for the viewfinder WebSocket."""

    def test_streams_frames(self, client: TestClient, poll):
        """Test frames are pushed as base64 JPEG."""
        _wait_bound(client, poll)

        with client.websocket_connect("/ws/preview") as websocket:
            message = websocket.receive_json()
            assert message["type"] == "frame"
            assert message["frame_id"] > 0
            assert message["frame"]
            websocket.send_json({"type": "stop"})

    def test_finished_screen(self, ungranted_client: TestClient, poll):
        """Test a finished screen ends the stream."""
        ungranted_client.post(
            "/api/v1/permissions/10",
            json={"permissions": ["camera"], "grant_results": [False]}
        )
        assert poll(lambda: _status(ungranted_client)["finished"])

        with ungranted_client.websocket_connect("/ws/preview") as websocket:
            assert websocket.receive_json() == {"type": "finished"}

    def test_ignores_non_json_messages(self, client: TestClient, poll):
        """Test malformed client input does not stop the stream from honouring stop."""
        _wait_bound(client, poll)

        with client.websocket_connect("/ws/preview") as websocket:
            websocket.send_text("not json")
            websocket.send_json(["not", "an", "object"])
            websocket.send_json({"type": "stop"})
            with pytest.raises(WebSocketDisconnect):
                while True:
                    websocket.receive_json()


class TestApplicationLifespan:
    """Tests for startup and shutdown of the application."""

    def test_shutdown_releases_camera_off_loop(self, settings, camera_source, poll):
        """Test the camera is released on a worker thread when the app stops."""
        application = Application(settings=settings, camera_source=camera_source)
        with TestClient(application.app) as test_client:
            _wait_bound(test_client, poll)
            assert camera_source.is_opened

        assert camera_source.released
        assert not camera_source.is_opened
        assert camera_source.release_thread.startswith("asyncio")
        assert application.app.state.screen is None
