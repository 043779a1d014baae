"""Camera preview, still capture and barcode scanning service."""

__version__ = "1.0.0"
