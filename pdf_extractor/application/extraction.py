"""Application service layer for extraction batches and summaries."""
from __future__ import annotations

import logging
from typing import Collection, Sequence

from pdf_extractor.core import fields as field_config
from pdf_extractor.core.fields import FieldSet
from pdf_extractor.core.grouping import GroupRecord, summarize
from pdf_extractor.domain import Document, ExtractionItem, FieldValue
from pdf_extractor.exporters import spreadsheet
from pdf_extractor.infrastructure import (
    ExtractionClient,
    InMemoryItemRepository,
    ItemRepository,
    get_extraction_client,
)
from pdf_extractor.settings import Settings, load_settings
from pdf_extractor.workers.orchestrator import ExtractionOrchestrator

logger = logging.getLogger(__name__)


class ExtractionService:
    """Coordinates field configuration, batches, summaries and exports."""

    def __init__(self, repository: ItemRepository, settings: Settings | None = None) -> None:
        self._repository = repository
        self._settings = settings
        self._fields = FieldSet()
        self._annotations: dict[str, dict[str, str]] = {}

    # ------------------------------------------------------------------
    # field configuration
    # ------------------------------------------------------------------
    def list_fields(self) -> list[str]:
        return self._fields.as_list()

    def add_field(self, name: str) -> bool:
        return self._fields.add(name)

    def remove_field(self, name: str) -> bool:
        return self._fields.remove(name)

    def reorder_fields(self, new_order: Sequence[str]) -> None:
        self._fields.reorder(new_order)

    def list_templates(self) -> list[dict[str, object]]:
        return field_config.list_templates()

    def apply_template(self, template_id: str) -> list[str]:
        self._fields.replace(field_config.get_template_fields(template_id))
        return self._fields.as_list()

    # ------------------------------------------------------------------
    # batch orchestration
    # ------------------------------------------------------------------
    def build_orchestrator(self, client: ExtractionClient | None = None) -> ExtractionOrchestrator:
        settings = self._settings or load_settings()
        client = client or get_extraction_client()
        return ExtractionOrchestrator(
            self._repository,
            client.extract,
            concurrency=settings.extraction_concurrency,
            max_retries=settings.extraction_max_retries,
            retry_delay=settings.extraction_retry_delay,
        )

    async def run_batch(
        self,
        documents: Sequence[Document],
        client: ExtractionClient | None = None,
    ) -> list[ExtractionItem]:
        orchestrator = self.build_orchestrator(client)
        return await orchestrator.run(documents, self._fields.as_list())

    def get_batch_overview(self) -> dict[str, object]:
        overview = self._repository.get_batch_overview()
        overview["fields"] = self._fields.as_list()
        return overview

    def list_items(self) -> list[ExtractionItem]:
        return self._repository.snapshot()

    def get_item(self, item_id: str) -> ExtractionItem:
        return self._repository.get_item(item_id)

    def update_item_value(self, item_id: str, field: str, value: FieldValue) -> ExtractionItem:
        return self._repository.update_value(item_id, field, value)

    # ------------------------------------------------------------------
    # summary
    # ------------------------------------------------------------------
    def summarize(self, selection: Collection[str]) -> list[GroupRecord]:
        return summarize(self._repository.snapshot(), set(selection), self._fields.as_list())

    def get_summary_rows(self, selection: Collection[str]) -> list[dict[str, object]]:
        rows: list[dict[str, object]] = []
        for record in self.summarize(selection):
            row = record.as_row()
            note = self._annotations.get(record.key, {})
            row["verified_total"] = note.get("verified_total", "")
            row["notes"] = note.get("notes", "")
            rows.append(row)
        return rows

    def annotate(self, key: str, *, verified_total: str = "", notes: str = "") -> dict[str, str]:
        note = {"verified_total": verified_total, "notes": notes}
        self._annotations[key] = note
        return dict(note)

    def get_annotations(self) -> dict[str, dict[str, str]]:
        return {key: dict(note) for key, note in self._annotations.items()}

    # ------------------------------------------------------------------
    # export
    # ------------------------------------------------------------------
    def export_items(
        self,
        target: spreadsheet.ExportTarget,
        selection: Collection[str] | None = None,
        fmt: str = "xlsx",
    ) -> spreadsheet.ExportTarget:
        selected = set(selection) if selection is not None else None
        items = self._repository.snapshot()
        if fmt == "csv":
            return spreadsheet.export_items_csv(target, items, self._fields.as_list(), selected)
        return spreadsheet.export_items_xlsx(target, items, self._fields.as_list(), selected)

    def export_summary(
        self,
        target: spreadsheet.ExportTarget,
        selection: Collection[str],
    ) -> spreadsheet.ExportTarget:
        return spreadsheet.export_summary_xlsx(target, self.summarize(selection), self._annotations)

    # ------------------------------------------------------------------
    # lifecycle
    # ------------------------------------------------------------------
    def clear_batch(self) -> None:
        self._repository.reset()
        self._annotations.clear()
        logger.info("Extraction state cleared")

    def reset(self) -> None:
        self.clear_batch()
        self._fields = FieldSet()


_repository = InMemoryItemRepository()
_service = ExtractionService(_repository)


def get_extraction_service() -> ExtractionService:
    """Return the singleton extraction service for the process."""

    return _service


def reset_extraction_state() -> None:
    """Reset the in-memory store (used in tests)."""

    _service.reset()
