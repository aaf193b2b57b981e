"""Application services."""

from .extraction import ExtractionService, get_extraction_service, reset_extraction_state

__all__ = [
    "ExtractionService",
    "get_extraction_service",
    "reset_extraction_state",
]
