from datetime import date
from decimal import Decimal

import pytest

from statement_ingest.models import Direction
from statement_ingest.parsers import (
    AMOUNT_FORMATS,
    AmountFormat,
    parse_amount,
    parse_date,
    resolve_amount_format,
    split_direction,
)

# ---- Dates -------------------------------------------------------------------


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("15/03/2024", date(2024, 3, 15)),
        ("2024-03-15", date(2024, 3, 15)),
        # Day-first wins when both readings are valid.
        ("03/04/2024", date(2024, 4, 3)),
        # Only valid month-first: falls through to %m/%d/%Y.
        ("03/15/2024", date(2024, 3, 15)),
        ("15-03-2024", date(2024, 3, 15)),
        ("  15/03/2024  ", date(2024, 3, 15)),
    ],
)
def test_parse_date_accepts_known_formats(raw, expected):
    assert parse_date(raw) == expected


@pytest.mark.parametrize("raw", ["", "   ", "2024/13/45", "31/02/2024", "yesterday"])
def test_parse_date_rejects_garbage(raw):
    with pytest.raises(ValueError):
        parse_date(raw)


def test_parse_date_honours_custom_format_list():
    assert parse_date("2024.03.15", formats=("%Y.%m.%d",)) == date(2024, 3, 15)
    with pytest.raises(ValueError):
        parse_date("15/03/2024", formats=("%Y.%m.%d",))


# ---- Amounts -----------------------------------------------------------------


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("R$ 1.234,56", Decimal("1234.56")),
        ("-150,50", Decimal("-150.50")),
        ("-150", Decimal("-150.00")),
        ("R$-9,99", Decimal("-9.99")),
        (" 1.000.000 ", Decimal("1000000.00")),
        ("0,005", Decimal("0.01")),  # half-up to cents
        ("+12,3", Decimal("12.30")),
    ],
)
def test_parse_amount_brazilian_notation(raw, expected):
    assert parse_amount(raw) == expected


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("$1,234.56", Decimal("1234.56")),
        ("US$ -20.00", Decimal("-20.00")),
        ("-0.5", Decimal("-0.50")),
    ],
)
def test_parse_amount_us_notation(raw, expected):
    assert parse_amount(raw, AMOUNT_FORMATS["us"]) == expected


@pytest.mark.parametrize("raw", ["", "R$", "abc", "12,34,56x", "NaN", "Infinity", "1e999999999"])
def test_parse_amount_rejects_invalid(raw):
    with pytest.raises(ValueError):
        parse_amount(raw)


def test_parse_amount_custom_currency_token():
    fmt = AmountFormat(grouping=".", decimal=",", currency_symbols=("EUR",))
    assert parse_amount("EUR 2.500,00", fmt) == Decimal("2500.00")


def test_amount_format_validation():
    with pytest.raises(ValueError):
        AmountFormat(grouping=",", decimal=",")
    with pytest.raises(ValueError):
        AmountFormat(decimal="")


def test_resolve_amount_format():
    assert resolve_amount_format(" US ") is AMOUNT_FORMATS["us"]
    with pytest.raises(ValueError, match="unknown amount format"):
        resolve_amount_format("eu")


# ---- Direction ---------------------------------------------------------------


@pytest.mark.parametrize(
    ("signed", "magnitude", "direction"),
    [
        (Decimal("10.00"), Decimal("10.00"), Direction.CREDIT),
        (Decimal("-10.00"), Decimal("10.00"), Direction.DEBIT),
        (Decimal("0.00"), Decimal("0.00"), Direction.DEBIT),
    ],
)
def test_split_direction(signed, magnitude, direction):
    assert split_direction(signed) == (magnitude, direction)
