"""
==============================================================================
Core Package
==============================================================================

Error handling shared by the HTTP layer.

Usage:
------
    from camera_scanner.core import exceptions
    raise exceptions.screen_finished()

==============================================================================
"""

from .exceptions import AppException, register_exception_handlers

__all__ = [
    "AppException",
    "register_exception_handlers",
]
