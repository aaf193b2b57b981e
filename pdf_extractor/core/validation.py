from __future__ import annotations

from typing import Sequence

from pdf_extractor.domain import Document


class BatchConfigurationError(ValueError):
    """Raised when a batch is started without documents or fields."""


class FieldSetError(ValueError):
    """Raised when a field set operation is not allowed."""


class NothingToExportError(LookupError):
    """Raised when no extracted item qualifies for export."""


class ItemNotFoundError(KeyError):
    """Raised when an item id is not part of the current batch."""


class ItemStateError(ValueError):
    """Raised when an item cannot be edited in its current status."""


def validate_batch(documents: Sequence[Document], fields: Sequence[str]) -> None:
    if not documents:
        raise BatchConfigurationError("at least one document is required")
    if not fields:
        raise BatchConfigurationError("at least one field is required")
    names = [doc.filename for doc in documents]
    if any(not name for name in names):
        raise BatchConfigurationError("every document must have a filename")
