from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from pdf_extractor.core.validation import BatchConfigurationError
from pdf_extractor.domain import BatchStatus, Document, ItemStatus
from pdf_extractor.infrastructure import InMemoryItemRepository
from pdf_extractor.workers.orchestrator import ExtractionOrchestrator, normalise_record


FIELDS = ["Customer", "Grand Total"]


def _documents(*names: str) -> list[Document]:
    return [Document(filename=name, content=name.encode("utf-8")) for name in names]


def test_batch_ends_with_every_item_terminal_in_input_order():
    repository = InMemoryItemRepository()

    def extract(document, fields):
        if document.filename == "broken.pdf":
            raise RuntimeError("could not parse document")
        return {"Customer": document.filename.upper(), "Grand Total": "10"}

    orchestrator = ExtractionOrchestrator(repository, extract)
    items = asyncio.run(orchestrator.run(_documents("a.pdf", "broken.pdf", "c.pdf"), FIELDS))

    assert [item.file_name for item in items] == ["a.pdf", "broken.pdf", "c.pdf"]
    assert [item.status for item in items] == [ItemStatus.SUCCESS, ItemStatus.ERROR, ItemStatus.SUCCESS]
    assert items[1].data is None
    assert items[1].error == "could not parse document"
    assert items[2].data == {"Customer": "C.PDF", "Grand Total": "10"}
    assert repository.get_batch_overview()["status"] == BatchStatus.COMPLETED.value


def test_items_are_processed_one_at_a_time():
    repository = InMemoryItemRepository()
    observed: list[list[str]] = []

    async def extract(document, fields):
        observed.append([item.status.value for item in repository.snapshot()])
        await asyncio.sleep(0)
        return {"Customer": "x"}

    orchestrator = ExtractionOrchestrator(repository, extract)
    asyncio.run(orchestrator.run(_documents("1.pdf", "2.pdf", "3.pdf"), FIELDS))

    assert observed == [
        ["processing", "pending", "pending"],
        ["success", "processing", "pending"],
        ["success", "success", "processing"],
    ]


def test_empty_error_message_gets_default_text():
    repository = InMemoryItemRepository()

    def extract(document, fields):
        raise ValueError()

    items = asyncio.run(ExtractionOrchestrator(repository, extract).run(_documents("a.pdf"), FIELDS))

    assert items[0].status is ItemStatus.ERROR
    assert items[0].error == "Extraction failed"


def test_malformed_responses_are_successful_with_null_values():
    repository = InMemoryItemRepository()
    responses = iter([{}, ["not", "an", "object"], {"Customer": "Acme", "Extra": "ignored"}])

    def extract(document, fields):
        return next(responses)

    items = asyncio.run(ExtractionOrchestrator(repository, extract).run(_documents("a.pdf", "b.pdf", "c.pdf"), FIELDS))

    assert [item.status for item in items] == [ItemStatus.SUCCESS] * 3
    assert items[0].data == {"Customer": None, "Grand Total": None}
    assert items[1].data == {"Customer": None, "Grand Total": None}
    assert items[2].data == {"Customer": "Acme", "Grand Total": None}


def test_normalise_record_keeps_field_order_and_coerces_values():
    record = normalise_record({"b": True, "a": {"x": 1}, "c": 2.5}, ["a", "b", "c", "d"])
    assert list(record) == ["a", "b", "c", "d"]
    assert record == {"a": '{"x": 1}', "b": "true", "c": 2.5, "d": None}


@pytest.mark.parametrize(
    ("documents", "fields"),
    [
        ([], FIELDS),
        (_documents("a.pdf"), []),
    ],
)
def test_invalid_configuration_fails_fast(documents, fields):
    repository = InMemoryItemRepository()
    asyncio.run(
        ExtractionOrchestrator(repository, lambda doc, f: {}).run(_documents("keep.pdf"), FIELDS)
    )

    with pytest.raises(BatchConfigurationError):
        asyncio.run(ExtractionOrchestrator(repository, lambda doc, f: {}).run(documents, fields))

    assert [item.file_name for item in repository.snapshot()] == ["keep.pdf"]


def test_new_run_discards_previous_items():
    repository = InMemoryItemRepository()
    orchestrator = ExtractionOrchestrator(repository, lambda doc, fields: {"Customer": doc.filename})

    first = asyncio.run(orchestrator.run(_documents("a.pdf", "b.pdf"), FIELDS))
    second = asyncio.run(orchestrator.run(_documents("c.pdf"), FIELDS))

    assert [item.file_name for item in second] == ["c.pdf"]
    assert [item.file_name for item in repository.snapshot()] == ["c.pdf"]
    assert {item.id for item in first}.isdisjoint(item.id for item in second)


def test_stale_completion_is_dropped():
    repository = InMemoryItemRepository()

    async def scenario():
        release = asyncio.Event()
        started = asyncio.Event()

        async def slow_extract(document, fields):
            started.set()
            await release.wait()
            return {"Customer": "stale"}

        async def fast_extract(document, fields):
            return {"Customer": "fresh"}

        old_run = asyncio.create_task(
            ExtractionOrchestrator(repository, slow_extract).run(_documents("old-1.pdf", "old-2.pdf"), FIELDS)
        )
        await started.wait()
        new_items = await ExtractionOrchestrator(repository, fast_extract).run(_documents("new.pdf"), FIELDS)
        release.set()
        old_items = await old_run
        return old_items, new_items

    old_items, new_items = asyncio.run(scenario())

    assert old_items == []
    assert [item.data for item in new_items] == [{"Customer": "fresh", "Grand Total": None}]
    snapshot = repository.snapshot()
    assert [item.file_name for item in snapshot] == ["new.pdf"]
    assert snapshot[0].data == {"Customer": "fresh", "Grand Total": None}
    assert repository.get_batch_overview()["status"] == "completed"


def test_bounded_concurrency_matches_sequential_result():
    def extract(document, fields):
        if document.filename.startswith("bad"):
            raise RuntimeError(f"failed {document.filename}")
        return {"Customer": document.filename, "Grand Total": "1"}

    names = ("a.pdf", "bad-1.pdf", "b.pdf", "c.pdf", "bad-2.pdf")

    sequential = InMemoryItemRepository()
    asyncio.run(ExtractionOrchestrator(sequential, extract).run(_documents(*names), FIELDS))
    parallel = InMemoryItemRepository()
    asyncio.run(ExtractionOrchestrator(parallel, extract, concurrency=3).run(_documents(*names), FIELDS))

    def strip(items):
        return [(item.file_name, item.status, item.data, item.error) for item in items]

    assert strip(parallel.snapshot()) == strip(sequential.snapshot())


def test_retries_recover_from_transient_failures():
    repository = InMemoryItemRepository()
    attempts: list[str] = []

    def flaky(document, fields):
        attempts.append(document.filename)
        if len(attempts) < 3:
            raise RuntimeError("rate limited")
        return {"Customer": "Acme"}

    orchestrator = ExtractionOrchestrator(repository, flaky, max_retries=2, retry_delay=0)
    items = asyncio.run(orchestrator.run(_documents("a.pdf"), FIELDS))

    assert attempts == ["a.pdf", "a.pdf", "a.pdf"]
    assert items[0].status is ItemStatus.SUCCESS


def test_retries_exhausted_records_last_error():
    repository = InMemoryItemRepository()

    def always_fails(document, fields):
        raise RuntimeError("still down")

    orchestrator = ExtractionOrchestrator(repository, always_fails, max_retries=1, retry_delay=0)
    items = asyncio.run(orchestrator.run(_documents("a.pdf", "b.pdf"), FIELDS))

    assert [item.error for item in items] == ["still down", "still down"]


def test_repository_notifies_listeners_with_updated_items():
    repository = InMemoryItemRepository()
    seen: list[tuple[str, str]] = []
    unsubscribe = repository.subscribe(lambda item: seen.append((item.file_name, item.status.value)))

    asyncio.run(ExtractionOrchestrator(repository, lambda doc, f: {"Customer": "x"}).run(_documents("a.pdf"), FIELDS))
    unsubscribe()
    repository.update_value(repository.snapshot()[0].id, "Customer", "y")

    assert seen == [("a.pdf", "processing"), ("a.pdf", "success")]


def test_failing_listener_does_not_stop_the_batch():
    repository = InMemoryItemRepository()

    def listener(item):
        if item.file_name == "b.pdf" and item.status is ItemStatus.SUCCESS:
            raise RuntimeError("listener bug")

    repository.subscribe(listener)
    orchestrator = ExtractionOrchestrator(repository, lambda doc, f: {"Customer": doc.filename})
    items = asyncio.run(orchestrator.run(_documents("a.pdf", "b.pdf", "c.pdf"), FIELDS))

    assert [item.status for item in items] == [ItemStatus.SUCCESS] * 3
    assert repository.get_batch_overview()["status"] == BatchStatus.COMPLETED.value
