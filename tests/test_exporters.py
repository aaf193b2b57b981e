from __future__ import annotations

import io
import sys
from pathlib import Path

import pandas as pd
import pytest

sys.path.append(str(Path(__file__).resolve().parents[1]))

from pdf_extractor.core.grouping import summarize
from pdf_extractor.core.validation import NothingToExportError
from pdf_extractor.domain import ExtractionItem, ItemStatus
from pdf_extractor.exporters.spreadsheet import (
    build_items_frame,
    export_items_csv,
    export_items_xlsx,
    export_summary_xlsx,
)


FIELDS = ["Customer", "Job No", "Grand Total"]


@pytest.fixture()
def items() -> list[ExtractionItem]:
    return [
        ExtractionItem(
            id="a",
            file_name="a.pdf",
            status=ItemStatus.SUCCESS,
            data={"Grand Total": "100", "Customer": "Acme", "Job No": "J1"},
        ),
        ExtractionItem(id="b", file_name="b.pdf", status=ItemStatus.ERROR, error="boom"),
        ExtractionItem(
            id="c",
            file_name="c.pdf",
            status=ItemStatus.SUCCESS,
            data={"Customer": "acme", "Job No": "J2", "Grand Total": "100"},
        ),
    ]


def test_items_frame_uses_file_name_then_field_order(items):
    df = build_items_frame(items, FIELDS)
    assert list(df.columns) == ["FileName", "Customer", "Job No", "Grand Total"]
    assert df["FileName"].tolist() == ["a.pdf", "c.pdf"]


def test_items_frame_respects_selection(items):
    df = build_items_frame(items, FIELDS, {"c", "b"})
    assert df["FileName"].tolist() == ["c.pdf"]


def test_nothing_to_export_is_an_error(items):
    with pytest.raises(NothingToExportError, match="No data available to export."):
        build_items_frame(items, FIELDS, {"b"})
    with pytest.raises(NothingToExportError):
        build_items_frame([], FIELDS)


def test_export_items_xlsx_round_trip(tmp_path, items):
    path = export_items_xlsx(tmp_path / "out" / "extracted_data.xlsx", items, FIELDS)

    df = pd.read_excel(path, sheet_name="Extracted Data", dtype=str)
    assert list(df.columns) == ["FileName", "Customer", "Job No", "Grand Total"]
    assert df.iloc[0].tolist() == ["a.pdf", "Acme", "J1", "100"]


def test_export_items_csv_to_buffer(items):
    buffer = io.BytesIO()
    export_items_csv(buffer, items, FIELDS, {"a"})
    lines = buffer.getvalue().decode("utf-8").splitlines()
    assert lines == ["FileName,Customer,Job No,Grand Total", "a.pdf,Acme,J1,100"]


def test_export_summary_includes_annotations(tmp_path, items):
    records = summarize(items, {"a", "c"}, FIELDS)
    path = export_summary_xlsx(
        tmp_path / "summary.xlsx",
        records,
        {"acme": {"verified_total": "200.00", "notes": "checked"}},
    )

    df = pd.read_excel(path, sheet_name="Summary", dtype=str)
    row = df.iloc[0].to_dict()
    assert row["Customer"] == "Acme"
    assert row["Job No"] == "J1, J2"
    assert row["Grand Total"] == "100"
    assert row["Advance Total"] == "-"
    assert row["Files"] == "2"
    assert row["Verified Total"] == "200.00"
    assert row["Notes"] == "checked"


def test_export_summary_without_records_is_an_error(tmp_path):
    with pytest.raises(NothingToExportError):
        export_summary_xlsx(tmp_path / "summary.xlsx", [])
