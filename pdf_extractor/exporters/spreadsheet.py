from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, Collection, Iterable, Mapping, Sequence, Union

import pandas as pd

from pdf_extractor.core.grouping import GroupRecord
from pdf_extractor.core.validation import NothingToExportError
from pdf_extractor.domain import ExtractionItem, ItemStatus, Role

ExportTarget = Union[Path, BinaryIO]

NOTHING_TO_EXPORT = "No data available to export."
ITEMS_SHEET = "Extracted Data"
SUMMARY_SHEET = "Summary"

SELECTED_FILENAME = "extracted_data.xlsx"
ALL_FILENAME = "all_extracted_data.xlsx"
SUMMARY_FILENAME = "summary.xlsx"

SUMMARY_COLUMNS: list[tuple[str, Role]] = [
    ("Customer", Role.CUSTOMER),
    ("Job No", Role.JOB_NUMBER),
    ("Advance Total", Role.ADVANCE_TOTAL),
    ("Payment Terms", Role.PAYMENT_TERMS),
    ("Invoice Date", Role.INVOICE_DATE),
    ("Grand Total", Role.GRAND_TOTAL),
]


def _prepare(target: ExportTarget) -> ExportTarget:
    if isinstance(target, Path):
        target.parent.mkdir(parents=True, exist_ok=True)
    return target


def build_items_frame(
    items: Iterable[ExtractionItem],
    fields: Sequence[str],
    selection: Collection[str] | None = None,
) -> pd.DataFrame:
    """Tabulate successful items: ``FileName`` first, then one column per field."""

    records = []
    for item in items:
        if item.status is not ItemStatus.SUCCESS or item.data is None:
            continue
        if selection is not None and item.id not in selection:
            continue
        row: dict[str, object] = {"FileName": item.file_name}
        for name in fields:
            row[name] = item.data.get(name)
        records.append(row)

    if not records:
        raise NothingToExportError(NOTHING_TO_EXPORT)
    return pd.DataFrame(records, columns=["FileName", *fields])


def export_items_xlsx(
    target: ExportTarget,
    items: Iterable[ExtractionItem],
    fields: Sequence[str],
    selection: Collection[str] | None = None,
) -> ExportTarget:
    df = build_items_frame(items, fields, selection)
    df.to_excel(_prepare(target), sheet_name=ITEMS_SHEET, index=False, engine="openpyxl")
    return target


def export_items_csv(
    target: ExportTarget,
    items: Iterable[ExtractionItem],
    fields: Sequence[str],
    selection: Collection[str] | None = None,
) -> ExportTarget:
    df = build_items_frame(items, fields, selection)
    df.to_csv(_prepare(target), index=False)
    return target


def build_summary_frame(
    records: Sequence[GroupRecord],
    annotations: Mapping[str, Mapping[str, str]] | None = None,
) -> pd.DataFrame:
    if not records:
        raise NothingToExportError(NOTHING_TO_EXPORT)

    annotations = annotations or {}
    rows = []
    for record in records:
        row: dict[str, object] = {}
        for column, role in SUMMARY_COLUMNS:
            row[column] = record.customer_name if role is Role.CUSTOMER else record.display(role)
        note = annotations.get(record.key, {})
        row["Files"] = record.file_count
        row["Verified Total"] = note.get("verified_total", "")
        row["Notes"] = note.get("notes", "")
        rows.append(row)
    return pd.DataFrame(rows)


def export_summary_xlsx(
    target: ExportTarget,
    records: Sequence[GroupRecord],
    annotations: Mapping[str, Mapping[str, str]] | None = None,
) -> ExportTarget:
    df = build_summary_frame(records, annotations)
    df.to_excel(_prepare(target), sheet_name=SUMMARY_SHEET, index=False, engine="openpyxl")
    return target
