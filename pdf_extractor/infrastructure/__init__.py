"""Infrastructure layer exports."""

from .extraction import (
    ExtractionClient,
    ExtractionError,
    UnconfiguredExtractionClient,
    configure_extraction_client,
    get_extraction_client,
    reset_extraction_client,
)
from .gemini import GeminiError, GeminiExtractionClient
from .items import InMemoryItemRepository, ItemRepository

__all__ = [
    "ExtractionClient",
    "ExtractionError",
    "GeminiError",
    "GeminiExtractionClient",
    "InMemoryItemRepository",
    "ItemRepository",
    "UnconfiguredExtractionClient",
    "configure_extraction_client",
    "get_extraction_client",
    "reset_extraction_client",
]
