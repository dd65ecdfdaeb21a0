from __future__ import annotations

import pytest

from eligibility.csv_parser import parse_records, rows_to_records, split_rows, split_rows_simple


def test_split_rows_basic():
    assert split_rows("a,b\n1,2\n") == [["a", "b"], ["1", "2"]]


def test_split_rows_last_row_without_newline():
    assert split_rows("a,b\n1,2") == [["a", "b"], ["1", "2"]]


def test_split_rows_trailing_empty_field_without_newline():
    # "1," has collected a field, so the row is still emitted
    assert split_rows("a,b\n1,") == [["a", "b"], ["1", ""]]


def test_split_rows_empty_input():
    assert split_rows("") == []


def test_split_rows_quoted_delimiter_and_newline():
    text = 'name,note\n"Smith, J","line1\nline2"\n'
    assert split_rows(text) == [["name", "note"], ["Smith, J", "line1\nline2"]]


def test_split_rows_doubled_quote_is_literal():
    assert split_rows('"say ""hi"""\n') == [['say "hi"']]


def test_split_rows_quote_toggles_mid_field():
    assert split_rows('ab"c,d"e,f\n') == [["abc,de", "f"]]


def test_split_rows_crlf_is_same_as_lf():
    assert split_rows("a,b\r\n1,2\r\n") == split_rows("a,b\n1,2\n")


def test_split_rows_unterminated_quote_does_not_raise():
    assert split_rows('a,"b\n1,2') == [["a", "b\n1,2"]]


def test_split_rows_custom_delimiter():
    assert split_rows("a;b\n1;2", delimiter=";") == [["a", "b"], ["1", "2"]]


def test_split_rows_simple_ignores_quotes_and_blank_lines():
    text = 'a,b\r\n\r\n"x,y",z\r1,2'
    assert split_rows_simple(text) == [["a", "b"], ['"x', 'y"', "z"], ["1", "2"]]


def test_rows_to_records_trims_header_and_pads_short_rows():
    records = rows_to_records([[" email ", "ChargeAL "], ["x@y.com"]])
    assert records == [{"email": "x@y.com", "ChargeAL": ""}]


def test_rows_to_records_ignores_extra_cells():
    records = rows_to_records([["email"], ["x@y.com", "extra", "more"]])
    assert records == [{"email": "x@y.com"}]


def test_rows_to_records_skips_blank_rows():
    rows = [["email", "flag"], ["", "  "], ["a@b.com", "1"], [""]]
    assert rows_to_records(rows) == [{"email": "a@b.com", "flag": "1"}]


def test_rows_to_records_header_is_first_non_blank_row():
    rows = [[""], ["email"], ["a@b.com"]]
    assert rows_to_records(rows) == [{"email": "a@b.com"}]


def test_records_are_read_only():
    record = parse_records("email\na@b.com")[0]
    with pytest.raises(TypeError):
        record["email"] = "other"


def test_parse_records_counts_non_blank_data_rows():
    text = "email,flag\na,1\n,\nb,0\n \nc,\n"
    records = parse_records(text)
    assert [r["email"] for r in records] == ["a", "b", "c"]
    assert all(set(r) == {"email", "flag"} for r in records)


def test_parse_records_header_only():
    assert parse_records("email,flag\n") == []


def test_parse_records_empty():
    assert parse_records("") == []


def test_parse_records_simple_grammar():
    records = parse_records("email,flag\r\na@b.com,yes\r\n", grammar="simple")
    assert records == [{"email": "a@b.com", "flag": "yes"}]


def test_parse_records_unknown_grammar():
    with pytest.raises(ValueError):
        parse_records("a\n1", grammar="fancy")


def test_split_rows_quoted_field_with_delimiter_and_escaped_quote():
    assert split_rows('a,"x, ""y"""\n') == [["a", 'x, "y"']]
