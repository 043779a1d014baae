"""
==============================================================================
API v1 Endpoints
==============================================================================

Version 1 of the REST API.

Routers:
--------
- health: Health check endpoints
- camera: Camera screen status, capture, preview, messages
- permissions: Pending permission requests and answers

==============================================================================
"""

from . import camera, health, permissions

__all__ = ["camera", "health", "permissions"]
