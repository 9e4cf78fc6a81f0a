import csv
import io

import pytest

from src.errors import NoDataError
from src.extraction_result import TableResult, TextResult
from src.table_formatting import (
    classify_response,
    clipboard_text,
    compute_headers,
    result_to_csv,
    rows_to_csv,
    rows_to_frame,
    text_to_csv,
)


def _parse_csv(text):
    return list(csv.reader(io.StringIO(text, newline="")))


def test_headers_follow_first_row_order():
    assert compute_headers([{"a": 1, "b": 2}]) == ["a", "b"]


def test_headers_are_union_in_first_seen_order():
    rows = [{"b": 1}, {"a": 2, "b": 3}, {"c": 4, "a": 5}]
    assert compute_headers(rows) == ["b", "a", "c"]


def test_headers_are_stable_between_calls():
    rows = [{"z": 1, "y": 2}, {"x": 3}]
    assert compute_headers(rows) == compute_headers(rows) == ["z", "y", "x"]


def test_array_of_objects_is_a_table():
    result = classify_response('[{"Name":"A","Qty":"3"},{"Name":"B","Qty":4,"Note":null}]')

    assert isinstance(result, TableResult)
    assert result.kind == "table"
    assert result.columns == ["Name", "Qty", "Note"]
    assert result.rows[1] == {"Name": "B", "Qty": 4, "Note": None}


def test_plain_string_is_text_without_raising():
    result = classify_response("not json")

    assert isinstance(result, TextResult)
    assert result.value == "not json"
    assert result.raw == "not json"


@pytest.mark.parametrize("raw", ["", "42", '"just a string"', '{"a": 1}', '[1, 2]', '[{"a": 1}, null]', "[{"])
def test_anything_else_falls_back_to_verbatim_text(raw):
    result = classify_response(raw)

    assert isinstance(result, TextResult)
    assert result.value == raw


def test_text_object_is_unwrapped():
    result = classify_response('{"text": "Hello\\nWorld"}')

    assert isinstance(result, TextResult)
    assert result.value == "Hello\nWorld"
    assert result.raw == '{"text": "Hello\\nWorld"}'


def test_code_fenced_json_is_parsed():
    raw = '```json\n[{"a": "1"}]\n```'
    result = classify_response(raw)

    assert isinstance(result, TableResult)
    assert result.rows == [{"a": "1"}]
    assert clipboard_text(result) == raw


def test_empty_array_is_an_empty_table():
    result = classify_response("[]")

    assert isinstance(result, TableResult)
    assert result.rows == []
    assert result.columns == []


def test_csv_matches_expected_layout():
    assert rows_to_csv([{"Name": "A", "Qty": "3"}]) == "Name,Qty\nA,3"


def test_csv_escapes_commas_and_quotes():
    assert rows_to_csv([{"a": 'x"y', "b": "p,q"}]) == 'a,b\n"x""y","p,q"'


def test_csv_round_trip_keeps_special_characters():
    rows = [
        {"name": 'Smith, "J"', "note": "line1\nline2", "qty": 3},
        {"name": "plain", "note": "", "qty": 4.5},
        {"name": "x\ry", "note": "a\r\nb", "qty": 5},
    ]

    parsed = _parse_csv(rows_to_csv(rows))

    assert parsed == [
        ["name", "note", "qty"],
        ['Smith, "J"', "line1\nline2", "3"],
        ["plain", "", "4.5"],
        ["x\ry", "a\r\nb", "5"],
    ]


def test_bare_carriage_return_is_quoted():
    csv_text = rows_to_csv([{"a": "x\ry", "b": "1"}])

    assert csv_text == '"a","b"\n"x\ry","1"'
    assert _parse_csv(csv_text) == [["a", "b"], ["x\ry", "1"]]


def test_carriage_return_in_header_is_quoted():
    parsed = _parse_csv(rows_to_csv([{"left\rright": "1"}]))

    assert parsed == [["left\rright"], ["1"]]


def test_csv_uses_given_header_order_and_blanks_missing_cells():
    rows = [{"a": "1", "b": None}, {"b": "2"}]

    assert rows_to_csv(rows, ["b", "a"]) == "b,a\n,1\n2,"


def test_csv_has_no_trailing_newline():
    assert not rows_to_csv([{"a": "1"}, {"a": "2"}]).endswith("\n")


def test_header_only_csv_is_never_produced():
    with pytest.raises(NoDataError, match="No data"):
        rows_to_csv([])
    with pytest.raises(NoDataError):
        rows_to_csv([{}])


def test_nested_cells_are_written_as_json():
    parsed = _parse_csv(rows_to_csv([{"a": {"b": 1}, "c": True}]))

    assert parsed[1] == ['{"b": 1}', "true"]


def test_text_csv_has_one_row_per_line():
    assert text_to_csv("first line\n\nsecond, line\n") == 'text\nfirst line\n"second, line"'


def test_result_to_csv_dispatches_on_kind():
    assert result_to_csv(classify_response('[{"a": "1"}]')) == "a\n1"
    assert result_to_csv(classify_response("hello")) == "text\nhello"


def test_frame_is_string_typed_for_display():
    df = rows_to_frame([{"a": 1, "b": None}])

    assert list(df.columns) == ["a", "b"]
    assert df.iloc[0].tolist() == ["1", ""]
