"""
Custom exceptions for the application.
"""

from typing import Any, Optional


class TesseraError(Exception):
    """Base exception for tessera."""

    def __init__(self, message: str, details: Optional[Any] = None):
        self.message = message
        self.details = details
        super().__init__(message)


class NotFoundError(TesseraError):
    """Resource not found."""

    pass


class ValidationError(TesseraError):
    """Validation error."""

    pass


class InvalidTimeError(ValidationError):
    """Unparsable or inverted time input."""

    pass


class LockedBlockOverlapError(ValidationError):
    """Edited range overlaps a meeting or lunch block."""

    def __init__(self, message: str, locked_block_id: str):
        super().__init__(message, details={"locked_block_id": locked_block_id})
        self.locked_block_id = locked_block_id


class InfrastructureError(TesseraError):
    """Infrastructure-related error (DB, external services, etc.)."""

    pass
