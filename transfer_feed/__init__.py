"""Live transfer feed server."""

__version__ = "0.1.0"
