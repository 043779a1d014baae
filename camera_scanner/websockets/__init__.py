"""
==============================================================================
WebSocket Package
==============================================================================

Handlers:
---------
- preview: Live viewfinder frames

==============================================================================
"""

from .preview import router as preview_router

__all__ = ["preview_router"]
