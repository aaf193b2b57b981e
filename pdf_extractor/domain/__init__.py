"""Domain layer definitions."""

from .extraction import BatchState, BatchStatus, Document, ExtractionItem, FieldValue, ItemStatus, Role

__all__ = [
    "BatchState",
    "BatchStatus",
    "Document",
    "ExtractionItem",
    "FieldValue",
    "ItemStatus",
    "Role",
]
