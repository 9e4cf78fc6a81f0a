"""
Turn raw model output into something the UI can show and export.

The model is only *asked* to answer with JSON, so every function here treats
its input defensively: anything that is not a list of row objects is free
text, and nothing in this module raises on malformed output.
"""
from __future__ import annotations

import csv
import json
import re
from typing import Any, Iterable

import pandas as pd

from src.errors import NoDataError
from src.extraction_result import ExtractionResult, TableResult, TableRow, TextResult

FORMAT_ERROR_MESSAGE = "The extracted text is not in the expected format."
NO_DATA_MESSAGE = "No data to download."

_CODE_FENCE_RE = re.compile(r"^```[a-zA-Z0-9_-]*\s*\n(?P<body>.*?)\n?```$", re.DOTALL)


def _strip_code_fence(raw: str) -> str:
    cleaned = raw.strip()
    match = _CODE_FENCE_RE.match(cleaned)
    if match:
        return match.group("body").strip()
    return cleaned


def _stringify(value) -> str:  # type: ignore[no-untyped-def]
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, ensure_ascii=False)


def _is_table_payload(payload: Any) -> bool:
    return isinstance(payload, list) and all(isinstance(item, dict) for item in payload)


def compute_headers(rows: Iterable[TableRow]) -> list[str]:
    """Union of keys across all rows, in the order they are first seen."""
    headers: list[str] = []
    seen: set[str] = set()
    for row in rows:
        for key in row:
            name = str(key)
            if name not in seen:
                seen.add(name)
                headers.append(name)
    return headers


def classify_response(raw: str | None) -> ExtractionResult:
    raw = raw or ""
    try:
        payload = json.loads(_strip_code_fence(raw))
    except json.JSONDecodeError:
        return TextResult(value=raw, raw=raw)

    if _is_table_payload(payload):
        rows = [{str(key): value for key, value in item.items()} for item in payload]
        return TableResult(columns=compute_headers(rows), rows=rows, raw=raw)

    if isinstance(payload, dict) and isinstance(payload.get("text"), str):
        return TextResult(value=payload["text"], raw=raw)

    return TextResult(value=raw, raw=raw)


def rows_to_frame(rows: list[TableRow], headers: list[str] | None = None) -> pd.DataFrame:
    columns = headers if headers is not None else compute_headers(rows)
    records = [[_stringify(row.get(column)) for column in columns] for row in rows]
    return pd.DataFrame(records, columns=columns, dtype=str)


def _has_carriage_return(df: pd.DataFrame) -> bool:
    if any("\r" in str(column) for column in df.columns):
        return True
    return any(df.iloc[:, index].str.contains("\r", regex=False).any() for index in range(df.shape[1]))


def _frame_to_csv(df: pd.DataFrame) -> str:
    # QUOTE_MINIMAL only quotes characters of the "\n" terminator; a bare "\r" needs quoting too.
    quoting = csv.QUOTE_ALL if _has_carriage_return(df) else csv.QUOTE_MINIMAL
    csv_text = df.to_csv(index=False, lineterminator="\n", quoting=quoting)
    # One record per line, no terminator after the last one.
    if csv_text.endswith("\n"):
        csv_text = csv_text[:-1]
    return csv_text


def rows_to_csv(rows: list[TableRow], headers: list[str] | None = None) -> str:
    columns = headers if headers else compute_headers(rows)
    if not rows or not columns:
        raise NoDataError(NO_DATA_MESSAGE)
    return _frame_to_csv(rows_to_frame(rows, columns))


def text_to_csv(value: str) -> str:
    lines = [line for line in value.splitlines() if line.strip()]
    if not lines:
        raise NoDataError(NO_DATA_MESSAGE)
    return _frame_to_csv(pd.DataFrame({"text": lines}, dtype=str))


def result_to_csv(result: ExtractionResult) -> str:
    if isinstance(result, TableResult):
        return rows_to_csv(result.rows, result.columns)
    return text_to_csv(result.value)


def clipboard_text(result: ExtractionResult) -> str:
    return result.raw
