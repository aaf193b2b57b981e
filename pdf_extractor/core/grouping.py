"""Consolidate extracted items into one summary row per customer."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Collection, Generic, Hashable, Iterable, Iterator, Sequence, TypeVar

from pdf_extractor.core.field_matcher import resolve_roles
from pdf_extractor.core.name_normalize import customer_key, value_text
from pdf_extractor.domain import ExtractionItem, ItemStatus, Role

T = TypeVar("T", bound=Hashable)

EMPTY_DISPLAY = "-"
VALUE_SEPARATOR = ", "

SUMMARY_ROLES: tuple[Role, ...] = (
    Role.JOB_NUMBER,
    Role.ADVANCE_TOTAL,
    Role.PAYMENT_TERMS,
    Role.INVOICE_DATE,
    Role.GRAND_TOTAL,
)

ROLE_COLUMNS: dict[Role, str] = {
    Role.JOB_NUMBER: "job_nos",
    Role.ADVANCE_TOTAL: "advance_total",
    Role.PAYMENT_TERMS: "payment_terms",
    Role.INVOICE_DATE: "invoice_date",
    Role.GRAND_TOTAL: "grand_total",
}


class OrderedSet(Generic[T]):
    """Insertion ordered set with exact membership checks."""

    def __init__(self, values: Iterable[T] = ()) -> None:
        self._items: dict[T, None] = {}
        for value in values:
            self.add(value)

    def add(self, value: T) -> bool:
        if value in self._items:
            return False
        self._items[value] = None
        return True

    def __contains__(self, value: object) -> bool:
        return value in self._items

    def __iter__(self) -> Iterator[T]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __bool__(self) -> bool:
        return bool(self._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OrderedSet):
            return NotImplemented
        return list(self) == list(other)

    def __repr__(self) -> str:
        return f"OrderedSet({list(self._items)!r})"


@dataclass
class GroupRecord:
    key: str
    customer_name: str
    values: dict[Role, OrderedSet[str]] = field(
        default_factory=lambda: {role: OrderedSet() for role in SUMMARY_ROLES}
    )
    member_ids: list[str] = field(default_factory=list)
    file_names: list[str] = field(default_factory=list)

    @property
    def file_count(self) -> int:
        return len(self.member_ids)

    def display(self, role: Role) -> str:
        values = self.values.get(role)
        if not values:
            return EMPTY_DISPLAY
        return VALUE_SEPARATOR.join(values)

    def as_row(self) -> dict[str, object]:
        row: dict[str, object] = {"key": self.key, "customer_name": self.customer_name}
        for role, column in ROLE_COLUMNS.items():
            row[column] = self.display(role)
        row["file_count"] = self.file_count
        row["ids"] = list(self.member_ids)
        row["file_names"] = list(self.file_names)
        return row


def summarize(
    items: Iterable[ExtractionItem],
    selection: Collection[str],
    fields: Sequence[str],
) -> list[GroupRecord]:
    """Group the selected successful items by normalised customer.

    Unselected items and items without data are skipped.  Output order is the
    order in which customer keys are first seen.
    """

    selected = [
        item
        for item in items
        if item.id in selection and item.status is ItemStatus.SUCCESS and item.data is not None
    ]
    if not selected:
        return []

    role_fields = resolve_roles(list(fields))
    customer_field = role_fields[Role.CUSTOMER]

    groups: dict[str, GroupRecord] = {}
    for item in selected:
        data = item.data or {}
        raw_customer = data.get(customer_field) if customer_field else None
        key, display_name = customer_key(raw_customer)

        group = groups.get(key)
        if group is None:
            group = GroupRecord(key=key, customer_name=display_name)
            groups[key] = group

        for role in SUMMARY_ROLES:
            role_field = role_fields[role]
            if role_field is None:
                continue
            value = data.get(role_field)
            if value is None or value == "":
                continue
            group.values[role].add(value_text(value))

        group.member_ids.append(item.id)
        group.file_names.append(item.file_name)

    return list(groups.values())


def summary_rows(records: Iterable[GroupRecord]) -> list[dict[str, object]]:
    return [record.as_row() for record in records]


__all__ = ["GroupRecord", "OrderedSet", "summarize", "summary_rows"]
