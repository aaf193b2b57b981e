from __future__ import annotations

import asyncio
import inspect
import json
import logging
from collections import Counter
from typing import Any, Awaitable, Callable, Mapping, Sequence, Union

from pdf_extractor.core.validation import validate_batch
from pdf_extractor.domain import Document, ExtractionItem, FieldValue
from pdf_extractor.infrastructure import ItemRepository

logger = logging.getLogger(__name__)

ExtractResult = Union[Mapping[str, Any], Any]
ExtractFn = Callable[[Document, Sequence[str]], Union[ExtractResult, Awaitable[ExtractResult]]]

DEFAULT_ERROR_MESSAGE = "Extraction failed"


def _coerce_value(value: Any) -> FieldValue:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    if isinstance(value, (bool, dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


def normalise_record(record: Any, fields: Sequence[str]) -> dict[str, FieldValue]:
    """Project an extraction response onto the requested fields.

    Missing keys become ``None``; a response that is not a mapping counts as
    an empty record.
    """

    source = record if isinstance(record, Mapping) else {}
    return {field: _coerce_value(source.get(field)) for field in fields}


class ExtractionOrchestrator:
    """Drive a batch of documents through pending, processing, success/error.

    With the default ``concurrency=1`` documents are extracted strictly one
    after another in input order.  Each result is committed to the repository
    before the next call starts.
    """

    def __init__(
        self,
        repository: ItemRepository,
        extract: ExtractFn,
        *,
        concurrency: int = 1,
        max_retries: int = 0,
        retry_delay: float = 0.0,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self._repository = repository
        self._extract = extract
        self._concurrency = concurrency
        self._max_retries = max(0, max_retries)
        self._retry_delay = retry_delay

    async def run(self, documents: Sequence[Document], fields: Sequence[str]) -> list[ExtractionItem]:
        validate_batch(documents, fields)
        requested = list(fields)

        generation, items = self._repository.start_batch([doc.filename for doc in documents])
        logger.info("Batch %s started: %d document(s), fields=%s", generation, len(items), requested)
        pairs = list(zip(items, documents))

        if self._concurrency == 1:
            for item, document in pairs:
                if not await self._process(generation, item, document, requested):
                    break
        else:
            semaphore = asyncio.Semaphore(self._concurrency)

            async def worker(item: ExtractionItem, document: Document) -> None:
                async with semaphore:
                    if self._repository.is_current(generation):
                        await self._process(generation, item, document, requested)

            await asyncio.gather(*(worker(item, document) for item, document in pairs))

        if not self._repository.complete_batch(generation):
            logger.info("Batch %s was superseded before completion", generation)
            return []

        snapshot = self._repository.snapshot()
        counts = Counter(item.status.value for item in snapshot)
        logger.info(
            "Batch %s completed: %d succeeded, %d failed",
            generation,
            counts.get("success", 0),
            counts.get("error", 0),
        )
        return snapshot

    async def _process(
        self,
        generation: int,
        item: ExtractionItem,
        document: Document,
        fields: list[str],
    ) -> bool:
        """Extract one document; return ``False`` once the batch is stale."""

        if self._repository.mark_processing(generation, item.id) is None:
            return False

        try:
            record = await self._call_with_retries(document, fields)
        except Exception as exc:  # noqa: BLE001 - failures are recorded on the item
            message = str(exc) or DEFAULT_ERROR_MESSAGE
            logger.warning("Extraction failed for %s: %s", document.filename, message)
            committed = self._repository.commit_error(generation, item.id, message)
        else:
            committed = self._repository.commit_success(generation, item.id, normalise_record(record, fields))
        return committed is not None

    async def _call_with_retries(self, document: Document, fields: list[str]) -> ExtractResult:
        attempt = 0
        while True:
            try:
                return await self._invoke(document, fields)
            except Exception as exc:
                if attempt >= self._max_retries:
                    raise
                attempt += 1
                logger.info(
                    "Retrying %s (%d/%d) after error: %s",
                    document.filename,
                    attempt,
                    self._max_retries,
                    exc,
                )
                await asyncio.sleep(self._retry_delay)

    async def _invoke(self, document: Document, fields: list[str]) -> ExtractResult:
        if inspect.iscoroutinefunction(self._extract):
            return await self._extract(document, list(fields))
        result = await asyncio.to_thread(self._extract, document, list(fields))
        if inspect.isawaitable(result):
            result = await result
        return result
