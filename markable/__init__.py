"""Flask service for staff authentication and patient record management."""

__version__ = "0.1.0"