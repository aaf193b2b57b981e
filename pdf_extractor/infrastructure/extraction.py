"""Extraction service integration hooks.

The orchestrator only needs something that turns one document plus the
requested field names into a flat record.  The production client talks to
Gemini (see :mod:`pdf_extractor.infrastructure.gemini`); until one is
configured every call fails with the same message the front end shows when
the API key is missing.
"""
from __future__ import annotations

from typing import Protocol, Sequence

from pdf_extractor.domain import Document, FieldValue


class ExtractionError(RuntimeError):
    """Raised when a document could not be extracted."""


class ExtractionClient(Protocol):
    """Contract for extraction integrations."""

    def extract(self, document: Document, fields: Sequence[str]) -> dict[str, FieldValue]:
        """Return one value (or ``None``) per requested field."""


class UnconfiguredExtractionClient:
    """Fallback client used when no API key is configured."""

    def extract(self, document: Document, fields: Sequence[str]) -> dict[str, FieldValue]:
        raise ExtractionError("API Key is missing")


_client: ExtractionClient = UnconfiguredExtractionClient()


def configure_extraction_client(client: ExtractionClient) -> None:
    """Install the extraction client used by new batches."""

    global _client
    _client = client


def get_extraction_client() -> ExtractionClient:
    """Return the currently configured extraction client."""

    return _client


def reset_extraction_client() -> None:
    configure_extraction_client(UnconfiguredExtractionClient())
