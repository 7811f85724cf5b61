from __future__ import annotations

import math
import re
from dataclasses import dataclass
from datetime import date, datetime, time
from typing import Any, Union


DATE_FORMATS = [
    "%Y-%m-%d",
    "%d/%m/%Y",
    "%m/%d/%Y",
    "%Y/%m/%d",
    "%d-%m-%Y",
    "%m-%d-%Y",
    "%Y-%m-%d %H:%M:%S",
    "%d/%m/%Y %H:%M",
    "%m/%d/%Y %H:%M",
]

_NUMBER_RE = re.compile(r"^[-+]?(\d+(\.\d*)?|\.\d+)([eE][-+]?\d+)?$")


@dataclass(frozen=True)
class Absent:
    pass


@dataclass(frozen=True)
class Numeric:
    value: float


@dataclass(frozen=True)
class Text:
    value: str


@dataclass(frozen=True)
class DateValue:
    value: datetime
    raw: str | None = None


Cell = Union[Absent, Numeric, Text, DateValue]

ABSENT = Absent()


def parse_number(raw: str) -> float | None:
    cleaned = raw.strip().replace(",", "").replace(" ", "")
    if not cleaned or not _NUMBER_RE.match(cleaned):
        return None
    value = float(cleaned)
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def parse_date(raw: str) -> datetime | None:
    s = raw.strip()
    if not s:
        return None
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(s, fmt)
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(s.replace("Z", "").replace("T", " "))
    except ValueError:
        return None


def classify_cell(value: Any) -> Cell:
    """Turn a raw spreadsheet value into one of the closed cell variants."""

    if value is None:
        return ABSENT
    if isinstance(value, bool):
        return Text("true" if value else "false")
    if isinstance(value, datetime):
        return DateValue(value)
    if isinstance(value, date):
        return DateValue(datetime.combine(value, time()))
    if isinstance(value, (int, float)):
        number = float(value)
        if math.isnan(number):
            return ABSENT
        return Numeric(number)
    text = str(value).strip()
    if not text:
        return ABSENT
    number = parse_number(text)
    if number is not None:
        return Numeric(number)
    parsed = parse_date(text)
    if parsed is not None:
        return DateValue(parsed, raw=text)
    return Text(text)


def is_present(cell: Cell) -> bool:
    return not isinstance(cell, Absent)


def is_positive(cell: Cell) -> bool:
    return isinstance(cell, Numeric) and cell.value > 0


def as_number(cell: Cell) -> float | None:
    if isinstance(cell, Numeric):
        return cell.value
    return None


def as_text(cell: Cell) -> str | None:
    if isinstance(cell, Absent):
        return None
    if isinstance(cell, Text):
        return cell.value
    if isinstance(cell, Numeric):
        if cell.value.is_integer():
            return str(int(cell.value))
        return str(cell.value)
    if isinstance(cell, DateValue):
        return cell.raw or cell.value.date().isoformat()
    raise TypeError(f"unsupported cell variant: {cell!r}")


def as_datetime(cell: Cell) -> datetime | None:
    if isinstance(cell, DateValue):
        return cell.value
    return None
