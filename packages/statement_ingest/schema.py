"""Header → column-role detection.

Each role has a fixed set of accepted spellings. Header cells are trimmed and
lowercased before matching (a leading UTF-8 BOM is dropped as well, since
spreadsheet exports commonly prepend one to the first cell).

The first column that matches a role wins it. A later column that would also
match is ignored, even if it looks like a better fit; there is no tie-break.
"""

from __future__ import annotations

import unicodedata
from collections.abc import Mapping, Sequence

from .errors import SchemaIncomplete
from .logging_setup import get_logger
from .models import SchemaMapping

_log = get_logger("statement_ingest.schema")

MANDATORY_ROLES: tuple[str, ...] = ("date", "amount", "description")

ROLE_VOCABULARY: Mapping[str, frozenset[str]] = {
    "date": frozenset({"data", "date"}),
    "amount": frozenset({"valor", "amount"}),
    "description": frozenset({"descrição", "descricao", "description"}),
    "identifier": frozenset({"identificador", "identifier"}),
}


def normalize_header_cell(cell: str) -> str:
    # NFC so a decomposed cedilla (c + U+0327) still matches "descri\u00e7\u00e3o".
    return unicodedata.normalize("NFC", cell.lstrip("\ufeff")).strip().lower()


def detect_schema(header: Sequence[str]) -> SchemaMapping:
    """Map roles to column indexes or raise :class:`SchemaIncomplete`."""

    positions: dict[str, int] = {}
    for idx, cell in enumerate(header):
        name = normalize_header_cell(cell)
        for role, spellings in ROLE_VOCABULARY.items():
            if role not in positions and name in spellings:
                positions[role] = idx

    missing = [role for role in MANDATORY_ROLES if role not in positions]
    if missing:
        raise SchemaIncomplete(missing, header)

    mapping = SchemaMapping(
        date=positions["date"],
        amount=positions["amount"],
        description=positions["description"],
        identifier=positions.get("identifier"),
    )
    _log.debug("detected schema %s from header %s", mapping, list(header))
    return mapping


__all__ = [
    "MANDATORY_ROLES",
    "ROLE_VOCABULARY",
    "normalize_header_cell",
    "detect_schema",
]
