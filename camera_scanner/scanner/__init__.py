"""
==============================================================================
Scanner Package - Barcode Detection
==============================================================================

Barcode detection with OpenCV and pyzbar.

Classes:
--------
- BarcodeScannerClient: Asynchronous detection client
- InputImage: Frame plus rotation submitted for detection
- Barcode: One detected barcode

==============================================================================
"""

from .core import Barcode, BarcodeScannerClient, DetectionError, InputImage, get_client

__all__ = ["Barcode", "BarcodeScannerClient", "DetectionError", "InputImage", "get_client"]
