"""Spreadsheet reading for uploaded import files."""

from __future__ import annotations

import csv
import io
import zipfile
import zlib
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Any

import openpyxl
from openpyxl.utils.exceptions import InvalidFileException

from ledger.services.import_analysis.cells import parse_number
from ledger.services.import_analysis.errors import WorkbookParseError


EXCEL_SUFFIXES = {".xlsx", ".xlsm"}
CSV_SUFFIXES = {".csv"}
SUPPORTED_SUFFIXES = EXCEL_SUFFIXES | CSV_SUFFIXES

# xml ParseError (stdlib and lxml) subclasses SyntaxError; sheet xml is only parsed while rows are read
_EXCEL_READ_ERRORS = (InvalidFileException, zipfile.BadZipFile, zlib.error, KeyError, OSError, ValueError, SyntaxError)


@dataclass
class Workbook:
    sheet_names: list[str] = field(default_factory=list)
    sheets: dict[str, list[list[Any]]] = field(default_factory=dict)


def file_suffix(file_name: str) -> str:
    return PurePath(file_name or "").suffix.lower()


def is_supported_file(file_name: str) -> bool:
    return file_suffix(file_name) in SUPPORTED_SUFFIXES


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _trim_row(row: list[Any]) -> list[Any]:
    end = len(row)
    while end and _is_blank(row[end - 1]):
        end -= 1
    return row[:end]


def _clean_rows(rows: list[list[Any]]) -> list[list[Any]]:
    """Drop fully blank rows and trailing blank cells."""

    out: list[list[Any]] = []
    for row in rows:
        trimmed = _trim_row(list(row))
        if trimmed:
            out.append(trimmed)
    return out


def _decode_csv_bytes(content: bytes) -> str:
    try:
        return content.decode("utf-8-sig")
    except UnicodeDecodeError:
        return content.decode("latin-1")


def _csv_value(raw: str) -> Any:
    number = parse_number(raw)
    if number is None:
        return raw
    return int(number) if number.is_integer() else number


def _read_csv(content: bytes, file_name: str) -> Workbook:
    text = _decode_csv_bytes(content)
    rows = [[_csv_value(v) for v in r] for r in csv.reader(io.StringIO(text))]
    name = PurePath(file_name).stem or "Sheet1"
    return Workbook(sheet_names=[name], sheets={name: _clean_rows(rows)})


def _read_excel(content: bytes) -> Workbook:
    try:
        wb = openpyxl.load_workbook(io.BytesIO(content), read_only=True, data_only=True)
    except _EXCEL_READ_ERRORS as exc:
        raise WorkbookParseError(f"Unable to read workbook: {exc}") from exc

    book = Workbook()
    try:
        for ws in wb.worksheets:
            rows = [list(r) for r in ws.iter_rows(values_only=True)]
            book.sheet_names.append(ws.title)
            book.sheets[ws.title] = _clean_rows(rows)
    except _EXCEL_READ_ERRORS as exc:
        raise WorkbookParseError(f"Unable to read sheet data: {exc}") from exc
    finally:
        wb.close()
    return book


def read_workbook(content: bytes, file_name: str) -> Workbook:
    """Parse uploaded bytes into sheets of rows.

    Excel files keep their sheet order; a CSV becomes a single sheet named
    after the file. Unsupported or corrupt input raises WorkbookParseError.
    """

    suffix = file_suffix(file_name)
    if suffix in CSV_SUFFIXES:
        return _read_csv(content, file_name)
    if suffix in EXCEL_SUFFIXES:
        return _read_excel(content)
    raise WorkbookParseError(f"Unsupported file type: {suffix or file_name!r}")


def header_row(rows: list[list[Any]]) -> list[str]:
    if not rows:
        return []
    return ["" if v is None else str(v).strip() for v in rows[0]]


def rows_as_records(headers: list[str], rows: list[list[Any]]) -> list[dict[str, Any]]:
    """Key data rows by header; cells past the end of a row are left out."""

    records: list[dict[str, Any]] = []
    for row in rows:
        record: dict[str, Any] = {}
        for idx, header in enumerate(headers):
            if not header:
                continue
            value = row[idx] if idx < len(row) else None
            if value is None or (isinstance(value, str) and not value.strip()):
                continue
            record.setdefault(header, value)
        records.append(record)
    return records


__all__ = [
    "SUPPORTED_SUFFIXES",
    "Workbook",
    "file_suffix",
    "header_row",
    "is_supported_file",
    "read_workbook",
    "rows_as_records",
]
