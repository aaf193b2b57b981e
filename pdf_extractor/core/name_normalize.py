from __future__ import annotations

from pdf_extractor.domain import FieldValue

UNKNOWN_CUSTOMER = "Unknown"


def value_text(value: FieldValue) -> str:
    """Render a field value as text; integral floats drop their trailing ``.0``."""

    if value is None:
        return ""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def display_value(value: FieldValue) -> str:
    return value_text(value).strip()


def normalize(name: str) -> str:
    return name.strip().casefold()


def customer_key(value: FieldValue) -> tuple[str, str]:
    """Return ``(group_key, display_name)`` for a raw customer value."""

    if display_value(value):
        raw = value_text(value)
        return normalize(raw), raw
    return normalize(UNKNOWN_CUSTOMER), UNKNOWN_CUSTOMER
