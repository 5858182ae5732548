from datetime import date
from decimal import Decimal

import pytest

from statement_ingest.errors import (
    EmptyDescription,
    InvalidAmount,
    InvalidDate,
    RowRejected,
    RowTooShort,
)
from statement_ingest.models import DEFAULT_CATEGORY, CanonicalTransaction, Direction, SchemaMapping
from statement_ingest.normalizer import normalize_row
from statement_ingest.parsers import AMOUNT_FORMATS

MAPPING = SchemaMapping(date=0, description=1, amount=2, identifier=3)


def _normalize(row, mapping=MAPPING, **kwargs):
    kwargs.setdefault("owner_id", "u1")
    kwargs.setdefault("source", "nubank")
    kwargs.setdefault("row_number", 7)
    return normalize_row(row, mapping, **kwargs)


def test_debit_row_with_identifier():
    tx = _normalize(["15/03/2024", "Grocery Store", "-150,50", "Food"])
    assert tx == CanonicalTransaction(
        owner_id="u1",
        occurred_on=date(2024, 3, 15),
        description="Grocery Store",
        category="Food",
        amount=Decimal("150.50"),
        direction=Direction.DEBIT,
        source="nubank",
    )
    assert tx.signed_amount == Decimal("-150.50")
    assert tx.natural_key == ("u1", "Grocery Store", date(2024, 3, 15), Decimal("150.50"))


def test_credit_row_trims_cells():
    tx = _normalize(["  2024-01-02 ", "  Salary  ", " R$ 5.000,00 ", "  "])
    assert tx.description == "Salary"
    assert tx.amount == Decimal("5000.00")
    assert tx.direction is Direction.CREDIT
    # Blank identifier falls back to the default category.
    assert tx.category == DEFAULT_CATEGORY


def test_missing_identifier_column_uses_default_category():
    tx = _normalize(["15/03/2024", "Coffee", "-4,50"])
    assert tx.category == DEFAULT_CATEGORY

    no_identifier = SchemaMapping(date=0, description=1, amount=2)
    tx = _normalize(["15/03/2024", "Coffee", "-4,50", "ignored"], no_identifier)
    assert tx.category == DEFAULT_CATEGORY


def test_zero_amount_is_debit():
    tx = _normalize(["15/03/2024", "Fee waived", "0,00"])
    assert tx.amount == Decimal("0.00")
    assert tx.direction is Direction.DEBIT


def test_us_amount_format():
    tx = _normalize(["03/15/2024", "Refund", "$1,234.56"], amount_format=AMOUNT_FORMATS["us"])
    assert tx.amount == Decimal("1234.56")
    assert tx.direction is Direction.CREDIT


def test_short_row_is_rejected_before_parsing():
    with pytest.raises(RowTooShort) as excinfo:
        _normalize(["15/03/2024", "Only two"])
    assert excinfo.value.row_number == 7
    assert str(excinfo.value).startswith("Row 7: insufficient columns")


def test_guard_only_counts_mandatory_columns():
    # Amount is the last mandatory column; identifier sits beyond it.
    mapping = SchemaMapping(date=0, description=1, amount=2, identifier=5)
    tx = _normalize(["15/03/2024", "Taxi", "-30"], mapping)
    assert tx.amount == Decimal("30.00")


def test_invalid_date():
    with pytest.raises(InvalidDate) as excinfo:
        _normalize(["32/13/2024", "Bad", "10,00"], row_number=2)
    assert "Row 2" in str(excinfo.value)
    assert "invalid date format" in str(excinfo.value)
    assert "32/13/2024" in str(excinfo.value)


def test_invalid_amount():
    with pytest.raises(InvalidAmount) as excinfo:
        _normalize(["15/03/2024", "Bad", "ten reais"])
    assert isinstance(excinfo.value, RowRejected)
    assert "invalid amount format" in str(excinfo.value)


def test_empty_description_accepted_by_default():
    tx = _normalize(["15/03/2024", "   ", "10,00"])
    assert tx.description == ""


def test_empty_description_rejected_when_requested():
    with pytest.raises(EmptyDescription):
        _normalize(["15/03/2024", "", "10,00"], reject_empty_description=True)


def test_date_is_checked_before_amount():
    with pytest.raises(InvalidDate):
        _normalize(["nope", "Both bad", "nope"])
