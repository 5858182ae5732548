"""Row normalizer: one raw CSV row → :class:`CanonicalTransaction`.

Each step short-circuits with a :class:`~statement_ingest.errors.RowRejected`
subclass carrying the row number; the caller skips the row and moves on.

Steps
-----
1. Column-count guard on the mandatory columns (``RowTooShort``).
2. Date (``InvalidDate``).
3. Description, trimmed. Empty is accepted unless ``reject_empty_description``
   is set (``EmptyDescription``).
4. Amount (``InvalidAmount``), split into magnitude and direction.
5. Category from the identifier column, else ``"Uncategorized"``.
"""

from __future__ import annotations

from collections.abc import Sequence

from .errors import EmptyDescription, InvalidAmount, InvalidDate, RowTooShort
from .logging_setup import get_logger
from .models import DEFAULT_CATEGORY, CanonicalTransaction, SchemaMapping
from .parsers import AMOUNT_FORMATS, AmountFormat, parse_amount, parse_date, split_direction

_log = get_logger("statement_ingest.normalizer")


def _cell(row: Sequence[str], index: int | None) -> str:
    if index is None or index >= len(row):
        return ""
    return row[index].strip()


def normalize_row(
    row: Sequence[str],
    mapping: SchemaMapping,
    *,
    owner_id: str,
    source: str,
    row_number: int,
    amount_format: AmountFormat = AMOUNT_FORMATS["br"],
    reject_empty_description: bool = False,
) -> CanonicalTransaction:
    if len(row) < mapping.required_width:
        raise RowTooShort(
            f"expected at least {mapping.required_width} columns, got {len(row)}",
            row_number=row_number,
        )

    date_raw = _cell(row, mapping.date)
    try:
        occurred_on = parse_date(date_raw)
    except ValueError:
        raise InvalidDate(repr(date_raw), row_number=row_number) from None

    description = _cell(row, mapping.description)
    if not description and reject_empty_description:
        raise EmptyDescription("description column is blank", row_number=row_number)

    amount_raw = _cell(row, mapping.amount)
    try:
        signed = parse_amount(amount_raw, amount_format)
    except ValueError:
        raise InvalidAmount(repr(amount_raw), row_number=row_number) from None
    amount, direction = split_direction(signed)

    # Short rows may still lack the optional identifier column.
    category = _cell(row, mapping.identifier) or DEFAULT_CATEGORY

    tx = CanonicalTransaction(
        owner_id=owner_id,
        occurred_on=occurred_on,
        description=description,
        category=category,
        amount=amount,
        direction=direction,
        source=source,
    )
    _log.debug("row %d normalized: %s", row_number, tx)
    return tx


__all__ = ["normalize_row"]
