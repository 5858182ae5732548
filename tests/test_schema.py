import pytest

from statement_ingest.errors import SchemaIncomplete
from statement_ingest.models import SchemaMapping
from statement_ingest.schema import detect_schema, normalize_header_cell


def test_portuguese_header_maps_every_role():
    mapping = detect_schema(["Data", "Descrição", "Valor", "Identificador"])
    assert mapping == SchemaMapping(date=0, description=1, amount=2, identifier=3)


def test_detection_ignores_case_and_surrounding_whitespace():
    mapping = detect_schema(["  VALOR ", "dAtA", "\tDESCRIÇÃO\t"])
    assert (mapping.date, mapping.amount, mapping.description) == (1, 0, 2)
    assert mapping.identifier is None


def test_english_and_unaccented_spellings():
    mapping = detect_schema(["identifier", "descricao", "amount", "date"])
    assert mapping == SchemaMapping(date=3, amount=2, description=1, identifier=0)


def test_first_matching_column_wins():
    mapping = detect_schema(["Date", "Data", "Amount", "Description", "Valor"])
    assert mapping.date == 0
    assert mapping.amount == 2


def test_bom_and_decomposed_accents_are_normalized():
    # Excel exports prepend a BOM; some tools emit "c" + combining cedilla.
    header = ["\ufeffData", "Descric\u0327a\u0303o", "Valor"]
    mapping = detect_schema(header)
    assert (mapping.date, mapping.description, mapping.amount) == (0, 1, 2)
    assert normalize_header_cell("\ufeff  Data ") == "data"


def test_unknown_columns_are_ignored():
    mapping = detect_schema(["Conta", "Data", "Histórico", "Descrição", "Saldo", "Valor"])
    assert (mapping.date, mapping.description, mapping.amount) == (1, 3, 5)
    assert mapping.required_width == 6


def test_missing_mandatory_role_raises_with_missing_names():
    with pytest.raises(SchemaIncomplete) as excinfo:
        detect_schema(["Data", "Identificador", "Memo"])
    assert excinfo.value.missing == ("amount", "description")
    assert excinfo.value.header == ("Data", "Identificador", "Memo")
    assert "CSV format not recognized" in str(excinfo.value)


def test_empty_header_is_incomplete():
    with pytest.raises(SchemaIncomplete):
        detect_schema([])
