"""
Unit tests for CSV text parsing.
"""
import pandas as pd
import pytest

from core.exceptions import ParsingError
from core.parsing import parse_csv_text


def test_parse_rows_keyed_by_header():
    rows = parse_csv_text("date,description,amount\n2026-01-01,STARBUCKS,-190\n")

    assert rows == [{"date": "2026-01-01", "description": "STARBUCKS", "amount": "-190"}]


def test_parse_keeps_cells_as_strings():
    rows = parse_csv_text("date,amount\n2026-01-01,0012.50\n")

    assert rows[0]["amount"] == "0012.50"


def test_parse_skips_blank_lines():
    rows = parse_csv_text("a,b\n\n1,2\n\n3,4\n")

    assert rows == [{"a": "1", "b": "2"}, {"a": "3", "b": "4"}]


def test_parse_trims_headers_and_cells():
    rows = parse_csv_text(" Date , Description \n 2026-01-01 ,  JOLLIBEE  \n")

    assert rows == [{"Date": "2026-01-01", "Description": "JOLLIBEE"}]


def test_parse_quoted_cells():
    rows = parse_csv_text('date,description,amount\n2026-01-01,"JOLLIBEE, MAKATI","1,250.00"\n')

    assert rows[0]["description"] == "JOLLIBEE, MAKATI"
    assert rows[0]["amount"] == "1,250.00"


def test_parse_short_row_padded_with_empty_cells():
    rows = parse_csv_text("a,b,c\n1,2\n")

    assert rows == [{"a": "1", "b": "2", "c": ""}]


def test_parse_long_row_extra_cells_ignored():
    rows = parse_csv_text("a,b\n1,2,3\n4,5\n")

    assert rows == [{"a": "1", "b": "2"}, {"a": "4", "b": "5"}]


def test_parse_header_only():
    assert parse_csv_text("date,description,amount\n") == []


@pytest.mark.parametrize("text", ["", "   ", "\n\n"])
def test_parse_empty_text(text):
    assert parse_csv_text(text) == []


def test_parse_error_raises_parsing_error(monkeypatch):
    """Structural parser failures surface as a single ParsingError."""
    def broken_reader(*args, **kwargs):
        raise pd.errors.ParserError("unexpected end of data")

    monkeypatch.setattr(pd, "read_csv", broken_reader)

    with pytest.raises(ParsingError) as exc_info:
        parse_csv_text("a,b\n1,2\n")

    assert "unexpected end of data" in exc_info.value.message
    assert exc_info.value.details["error"] == "unexpected end of data"


def test_unterminated_quote_raises_parsing_error():
    with pytest.raises(ParsingError) as exc_info:
        parse_csv_text('date,description,amount\n2026-01-01,"OPEN QUOTE,-1\n')

    assert exc_info.value.message.startswith("Malformed CSV:")
    assert "error" in exc_info.value.details
