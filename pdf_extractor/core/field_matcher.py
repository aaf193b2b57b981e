"""Map user chosen field names onto the semantic roles of the summary.

Users name their columns freely ("Client Name", "Job No", "Total Amount").
Each role owns an ordered list of patterns.  Patterns are tried in priority
order and each one is matched against the fields in field set order, so
"Grand Total" beats an earlier "Advance Total" for the grand total role.
Only the customer role falls back to the first field so every summary row
still has something to group on.
"""

from __future__ import annotations

import re
from typing import Sequence

from pdf_extractor.domain import Role


ROLE_PATTERNS: dict[Role, tuple[re.Pattern[str], ...]] = {
    Role.CUSTOMER: (re.compile(r"customer"), re.compile(r"name"), re.compile(r"client")),
    Role.JOB_NUMBER: (re.compile(r"job no"), re.compile(r"job"), re.compile(r"number")),
    Role.ADVANCE_TOTAL: (re.compile(r"advance total"), re.compile(r"advance")),
    Role.PAYMENT_TERMS: (re.compile(r"payment terms"), re.compile(r"terms"), re.compile(r"payment")),
    Role.INVOICE_DATE: (re.compile(r"invoice date"), re.compile(r"date")),
    Role.GRAND_TOTAL: (
        re.compile(r"grand total"),
        re.compile(r"total amount"),
        re.compile(r"total"),
        re.compile(r"amount"),
    ),
}

FALLBACK_TO_FIRST_FIELD = frozenset({Role.CUSTOMER})


def resolve_role(fields: Sequence[str], role: Role) -> str | None:
    lowered = [(field, field.lower()) for field in fields]
    for pattern in ROLE_PATTERNS[role]:
        for field, name in lowered:
            if pattern.search(name):
                return field
    if role in FALLBACK_TO_FIRST_FIELD and fields:
        return fields[0]
    return None


def resolve_roles(fields: Sequence[str]) -> dict[Role, str | None]:
    return {role: resolve_role(fields, role) for role in Role}
