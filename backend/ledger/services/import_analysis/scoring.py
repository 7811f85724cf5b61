from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Mapping

from ledger.services.import_analysis.columns import find_column, normalize_columns
from ledger.services.import_analysis.patterns import (
    COLUMN_ALIASES,
    DETECTION_THRESHOLD,
    KEYWORD_WEIGHT,
    PATTERNS,
    REQUIRED_FIELDS_WEIGHT,
    UNKNOWN_PATTERN,
    PatternDefinition,
    aliases_for,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PatternMatch:
    pattern: str
    confidence: float
    mapping: dict[str, str] = field(default_factory=dict)


def _resolve_field(normalized: list[str], columns: list[str], field_name: str) -> str | None:
    for variant in aliases_for(field_name):
        column = find_column(normalized, columns, variant)
        if column is not None:
            return column
    return None


def score_pattern(
    pattern: PatternDefinition,
    columns: list[str],
    normalized: list[str] | None = None,
) -> tuple[float, dict[str, str]]:
    """Score one pattern against a sheet's headers.

    Keyword hits add 0.1 each, required-field coverage adds up to 0.7, and the
    total is clamped to 1.0. The returned mapping also carries every optional
    field that could be resolved; those do not change the score.
    """

    if normalized is None:
        normalized = normalize_columns(columns)

    score = 0.0
    for keyword in pattern.keywords:
        matches = sum(1 for col in normalized if keyword in col)
        score += matches * KEYWORD_WEIGHT

    mapping: dict[str, str] = {}
    found = 0
    for required in pattern.required_fields:
        column = _resolve_field(normalized, columns, required)
        if column is not None:
            mapping[required] = column
            found += 1

    if pattern.required_fields:
        score += (found / len(pattern.required_fields)) * REQUIRED_FIELDS_WEIGHT

    for target in COLUMN_ALIASES:
        if target in mapping:
            continue
        column = _resolve_field(normalized, columns, target)
        if column is not None:
            mapping[target] = column

    return min(score, 1.0), mapping


def detect_pattern(
    columns: list[Any],
    sample_rows: list[dict[str, Any]] | None = None,
    patterns: Mapping[str, PatternDefinition] = PATTERNS,
) -> PatternMatch:
    """Pick the best matching record type for a sheet.

    ``sample_rows`` is accepted for parity with the sheet analyzer; detection
    currently works on headers only.
    """

    headers = ["" if c is None else str(c) for c in columns]
    normalized = normalize_columns(headers)

    best_name: str | None = None
    best_score = 0.0
    best_mapping: dict[str, str] = {}
    for name, pattern in patterns.items():
        score, mapping = score_pattern(pattern, headers, normalized)
        # strict comparison: the first pattern reaching the top score keeps it
        if best_name is None or score > best_score:
            best_name, best_score, best_mapping = name, score, mapping

    if best_name is None:
        return PatternMatch(pattern=UNKNOWN_PATTERN, confidence=0.0)

    logger.debug("import.detect_pattern best=%s score=%.3f columns=%d", best_name, best_score, len(headers))

    if best_score > DETECTION_THRESHOLD:
        return PatternMatch(pattern=best_name, confidence=best_score, mapping=best_mapping)
    # below threshold the winning raw score is still reported
    return PatternMatch(pattern=UNKNOWN_PATTERN, confidence=best_score)
