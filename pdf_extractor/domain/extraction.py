"""Domain entities for document extraction batches."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Union

FieldValue = Union[str, int, float, None]


class ItemStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SUCCESS = "success"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (ItemStatus.SUCCESS, ItemStatus.ERROR)


class BatchStatus(str, Enum):
    IDLE = "idle"
    EXTRACTING = "extracting"
    COMPLETED = "completed"


class Role(str, Enum):
    """Semantic columns understood by the summary regardless of field naming."""

    CUSTOMER = "customer"
    JOB_NUMBER = "job_number"
    ADVANCE_TOTAL = "advance_total"
    PAYMENT_TERMS = "payment_terms"
    INVOICE_DATE = "invoice_date"
    GRAND_TOTAL = "grand_total"


@dataclass(frozen=True, slots=True)
class Document:
    """A single uploaded document waiting to be extracted."""

    filename: str
    content: bytes
    content_type: str = "application/pdf"


@dataclass(frozen=True, slots=True)
class ExtractionItem:
    """Processing record for one document of a batch.

    Items are replaced wholesale on every transition so readers never see a
    partially updated record.
    """

    id: str
    file_name: str
    status: ItemStatus = ItemStatus.PENDING
    data: dict[str, FieldValue] | None = None
    error: str | None = None

    def as_dict(self) -> dict[str, object]:
        return {
            "id": self.id,
            "file_name": self.file_name,
            "status": self.status.value,
            "data": dict(self.data) if self.data is not None else None,
            "error": self.error,
        }


@dataclass(slots=True)
class BatchState:
    """Items of the current batch together with its generation tag."""

    generation: int = 0
    status: BatchStatus = BatchStatus.IDLE
    items: list[ExtractionItem] = field(default_factory=list)
