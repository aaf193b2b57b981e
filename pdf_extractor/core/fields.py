"""Ordered, duplicate free list of the field names requested from documents."""
from __future__ import annotations

from pathlib import Path
from typing import Iterable, Iterator, Sequence

import yaml

from pdf_extractor.core.validation import FieldSetError

CONFIG_DIR = Path(__file__).resolve().parent.parent / "config"

DEFAULT_FIELDS = ["Invoice Number", "Total Amount", "Date"]


class FieldSet:
    def __init__(self, fields: Iterable[str] | None = None) -> None:
        self._fields: list[str] = []
        for name in DEFAULT_FIELDS if fields is None else fields:
            self.add(name)

    def __iter__(self) -> Iterator[str]:
        return iter(self._fields)

    def __len__(self) -> int:
        return len(self._fields)

    def __contains__(self, name: object) -> bool:
        return name in self._fields

    def as_list(self) -> list[str]:
        return list(self._fields)

    def add(self, name: str) -> bool:
        """Append ``name``; blank or already present names are ignored."""

        cleaned = (name or "").strip()
        if not cleaned or cleaned in self._fields:
            return False
        self._fields.append(cleaned)
        return True

    def remove(self, name: str) -> bool:
        if name not in self._fields:
            return False
        self._fields.remove(name)
        return True

    def reorder(self, new_order: Sequence[str]) -> None:
        if len(new_order) != len(self._fields) or sorted(new_order) != sorted(self._fields):
            raise FieldSetError("new order must be a permutation of the current fields")
        self._fields = list(new_order)

    def replace(self, fields: Iterable[str]) -> None:
        self._fields = []
        for name in fields:
            self.add(name)


def _load_templates() -> dict[str, dict]:
    path = CONFIG_DIR / "field_templates.yaml"
    if not path.exists():
        return {}
    with path.open("r", encoding="utf-8") as fp:
        return yaml.safe_load(fp) or {}


FIELD_TEMPLATES = _load_templates()


def list_templates() -> list[dict[str, object]]:
    return [
        {"id": template_id, "label": template.get("label", template_id), "fields": list(template.get("fields", []))}
        for template_id, template in FIELD_TEMPLATES.items()
    ]


def get_template_fields(template_id: str) -> list[str]:
    template = FIELD_TEMPLATES.get(template_id)
    if template is None:
        raise FieldSetError(f"unknown field template: {template_id}")
    return [str(name) for name in template.get("fields", [])]
