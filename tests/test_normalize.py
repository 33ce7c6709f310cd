import pytest

from roster_sync.application.normalize import CsvMappings, normalize_row, normalize_rows
from roster_sync.domain.errors import MalformedInputError


def test_normalize_row_maps_default_columns():
    record = normalize_row({"firstName": "Ada", "lastName": "Lovelace", "email": "ada@example.com"}, CsvMappings())

    assert record.first_name == "Ada"
    assert record.last_name == "Lovelace"
    assert record.email == "ada@example.com"
    assert not record.is_guest


def test_normalize_row_trims_whitespace_and_treats_blank_email_as_guest():
    record = normalize_row({"firstName": "  Ada ", "lastName": "Lovelace\t", "email": "   "}, CsvMappings())

    assert record.first_name == "Ada"
    assert record.last_name == "Lovelace"
    assert record.email is None
    assert record.is_guest


def test_normalize_row_without_email_column_is_guest():
    record = normalize_row({"firstName": "Grace", "lastName": "Hopper"}, CsvMappings())

    assert record.email is None


def test_normalize_row_uses_custom_mappings():
    mappings = CsvMappings(first_name="First", last_name="Last", email="E-mail")

    record = normalize_row({"First": "Alan", "Last": "Turing", "E-mail": "alan@example.com"}, mappings)

    assert record.display_name == "Alan Turing"
    assert record.email == "alan@example.com"


@pytest.mark.parametrize(
    "row",
    [
        {"firstName": "", "lastName": "Lovelace", "email": "ada@example.com"},
        {"firstName": "Ada", "lastName": "  ", "email": "ada@example.com"},
        {"first": "Ada", "last": "Lovelace"},
    ],
)
def test_normalize_row_rejects_rows_without_names(row):
    with pytest.raises(MalformedInputError) as excinfo:
        normalize_row(row, CsvMappings(), row_number=7)

    assert excinfo.value.row_number == 7
    assert excinfo.value.row == row


def test_normalize_rows_numbers_rows_and_stops_at_first_bad_row():
    rows = [
        {"firstName": "Ada", "lastName": "Lovelace", "email": ""},
        {"firstName": "Grace", "lastName": "", "email": ""},
        {"firstName": "Alan", "lastName": "Turing", "email": ""},
    ]

    with pytest.raises(MalformedInputError) as excinfo:
        normalize_rows(rows, CsvMappings())

    assert excinfo.value.row_number == 2


def test_mappings_round_trip_to_output_row_order():
    mappings = CsvMappings()
    record = normalize_row({"firstName": "Ada", "lastName": "Lovelace", "email": ""}, mappings)

    assert mappings.header() == ["firstName", "lastName", "email"]
    assert mappings.to_row(record) == {"firstName": "Ada", "lastName": "Lovelace", "email": ""}
