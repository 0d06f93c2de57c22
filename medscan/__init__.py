"""OCR-assisted pharmaceutical batch verification."""

__version__ = "0.3.0"
