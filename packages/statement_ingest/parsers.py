"""Field parsers: locale-specific text → canonical values.

Pure functions, no I/O. Failures raise ``ValueError`` with the offending
input; the row normalizer converts them into row-level errors.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from .models import Direction

# ---------------------------------------------------------------------------
# Dates
# ---------------------------------------------------------------------------

# Primary locale format first (DD/MM/YYYY), then the fallbacks in order.
# The first format that parses wins; there is no ambiguity resolution, so
# "03/04/2024" is always 3 April.
DATE_FORMATS: tuple[str, ...] = ("%d/%m/%Y", "%Y-%m-%d", "%m/%d/%Y", "%d-%m-%Y")


def parse_date(raw: str, formats: Sequence[str] = DATE_FORMATS) -> date:
    s = raw.strip()
    if not s:
        raise ValueError("date is empty")
    for fmt in formats:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    raise ValueError(f"unrecognized date: {raw!r}")


# ---------------------------------------------------------------------------
# Amounts
# ---------------------------------------------------------------------------

_CENTS = Decimal("0.01")


@dataclass(frozen=True, slots=True)
class AmountFormat:
    """Separators and currency tokens used by one family of exports."""

    grouping: str = "."
    decimal: str = ","
    currency_symbols: tuple[str, ...] = ("R$",)

    def __post_init__(self) -> None:
        if not self.decimal:
            raise ValueError("decimal separator is required")
        if self.grouping == self.decimal:
            raise ValueError("grouping and decimal separators must differ")


AMOUNT_FORMATS: dict[str, AmountFormat] = {
    # Brazilian exports (Nubank and friends): "R$ 1.234,56"
    "br": AmountFormat(),
    # "$1,234.56"; longer tokens first so "US$" is not left as "US".
    "us": AmountFormat(grouping=",", decimal=".", currency_symbols=("US$", "$")),
}


def resolve_amount_format(name: str) -> AmountFormat:
    key = name.strip().lower()
    try:
        return AMOUNT_FORMATS[key]
    except KeyError:
        raise ValueError(
            f"unknown amount format: {name!r} (known: {', '.join(sorted(AMOUNT_FORMATS))})"
        ) from None


def parse_amount(raw: str, fmt: AmountFormat = AMOUNT_FORMATS["br"]) -> Decimal:
    """Parse a signed amount, rounded to cents.

    Transform order is fixed: strip currency tokens, drop grouping
    separators, turn the decimal separator into ``.``, trim, parse.
    """

    s = raw
    for symbol in fmt.currency_symbols:
        s = s.replace(symbol, "")
    if fmt.grouping:
        s = s.replace(fmt.grouping, "")
    if fmt.decimal != ".":
        s = s.replace(fmt.decimal, ".")
    s = s.strip()
    if not s:
        raise ValueError(f"amount is empty: {raw!r}")

    try:
        d = Decimal(s)
        if not d.is_finite():
            raise ValueError(f"invalid amount: {raw!r}")
        # Quantizing an out-of-range exponent raises InvalidOperation too.
        return d.quantize(_CENTS, rounding=ROUND_HALF_UP)
    except InvalidOperation as exc:
        raise ValueError(f"invalid amount: {raw!r}") from exc


def split_direction(raw: Decimal) -> tuple[Decimal, Direction]:
    """Return ``(magnitude, direction)``; zero and negatives are debits."""

    direction = Direction.CREDIT if raw > 0 else Direction.DEBIT
    return abs(raw), direction


__all__ = [
    "DATE_FORMATS",
    "AmountFormat",
    "AMOUNT_FORMATS",
    "resolve_amount_format",
    "parse_date",
    "parse_amount",
    "split_direction",
]
