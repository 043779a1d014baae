"""
==============================================================================
Utilities Package
==============================================================================

Modules:
--------
- photo_files: Output directory resolution and photo file naming

==============================================================================
"""

from .photo_files import PhotoFileFactory, resolve_output_directory

__all__ = [
    "PhotoFileFactory",
    "resolve_output_directory",
]
