"""Voice and text to structured business-record extraction service."""

__version__ = "1.0.0"
