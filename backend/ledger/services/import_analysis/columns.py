from __future__ import annotations

import re
from typing import Any


_NON_WORD = re.compile(r"[^a-z0-9\s]")


def normalize_column_name(header: Any) -> str:
    """Lowercase a header, drop punctuation and trim it.

    Applied to sheet headers and alias entries alike so substring checks
    compare like with like. Never raises.
    """

    if header is None:
        return ""
    return _NON_WORD.sub("", str(header).lower()).strip()


def normalize_columns(headers: list[Any]) -> list[str]:
    return [normalize_column_name(h) for h in headers]


def find_column(normalized: list[str], original: list[str], variant: str) -> str | None:
    """Return the original header of the first column containing ``variant``."""

    needle = normalize_column_name(variant)
    if not needle:
        return None
    for idx, col in enumerate(normalized):
        if needle in col:
            return original[idx]
    return None
