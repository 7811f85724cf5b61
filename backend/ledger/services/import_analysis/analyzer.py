from __future__ import annotations

import logging

from ledger.schemas.imports import ImportAnalysis, SheetAnalysis
from ledger.services.import_analysis.patterns import MIXED_PATTERN, UNKNOWN_PATTERN
from ledger.services.import_analysis.scoring import detect_pattern
from ledger.services.import_analysis.workbook import Workbook, header_row, read_workbook, rows_as_records

logger = logging.getLogger(__name__)

SAMPLE_ROW_LIMIT = 5
LOW_CONFIDENCE_THRESHOLD = 0.5

NO_SHEETS_WARNING = "No valid sheets found in the file"
LOW_CONFIDENCE_WARNING = "Low confidence in pattern detection. Please review the mapping carefully."
UNKNOWN_PATTERN_WARNING = "Could not automatically detect the data pattern. Manual mapping may be required."


def empty_sheet_warning(sheet_name: str) -> str:
    return f'Sheet "{sheet_name}" is empty'


def analyze_sheet(name: str, rows: list[list]) -> SheetAnalysis | None:
    """Score a single sheet; ``None`` when it has no data rows."""

    headers = header_row(rows)
    data_rows = rows[1:]
    if not data_rows:
        return None

    sample_rows = rows_as_records(headers, data_rows[:SAMPLE_ROW_LIMIT])
    match = detect_pattern(headers, sample_rows)
    return SheetAnalysis(
        name=name,
        row_count=len(data_rows),
        column_count=len(headers),
        columns=headers,
        sample_rows=sample_rows,
        detected_pattern=match.pattern,
        confidence=match.confidence,
        mapping=match.mapping,
    )


def aggregate_sheets(sheets: list[SheetAnalysis]) -> tuple[str, float]:
    """Combine per-sheet detections into one overall pattern and confidence."""

    if not sheets:
        return UNKNOWN_PATTERN, 0.0
    if len(sheets) == 1:
        return sheets[0].detected_pattern, sheets[0].confidence

    distinct: list[str] = []
    for sheet in sheets:
        if sheet.detected_pattern != UNKNOWN_PATTERN and sheet.detected_pattern not in distinct:
            distinct.append(sheet.detected_pattern)

    if not distinct:
        return UNKNOWN_PATTERN, 0.0

    # unknown sheets stay in the average and pull it down
    mean = sum(s.confidence for s in sheets) / len(sheets)
    if len(distinct) == 1:
        return distinct[0], mean
    return MIXED_PATTERN, mean


def analyze_parsed_workbook(book: Workbook, file_name: str, file_size: int) -> ImportAnalysis:
    sheets: list[SheetAnalysis] = []
    warnings: list[str] = []

    for name in book.sheet_names:
        result = analyze_sheet(name, book.sheets.get(name) or [])
        if result is None:
            warnings.append(empty_sheet_warning(name))
            continue
        sheets.append(result)

    if not sheets:
        warnings.append(NO_SHEETS_WARNING)

    overall, confidence = aggregate_sheets(sheets)

    if confidence < LOW_CONFIDENCE_THRESHOLD:
        warnings.append(LOW_CONFIDENCE_WARNING)
    if overall == UNKNOWN_PATTERN:
        warnings.append(UNKNOWN_PATTERN_WARNING)

    return ImportAnalysis(
        file_name=file_name,
        file_size=file_size,
        sheets=sheets,
        overall_pattern=overall,
        confidence=confidence,
        warnings=warnings,
    )


def analyze_workbook(content: bytes, file_name: str) -> ImportAnalysis:
    """Parse an uploaded workbook and detect what each sheet contains.

    Parse failures propagate as WorkbookParseError; everything below the
    workbook level is reported through warnings.
    """

    book = read_workbook(content, file_name)
    analysis = analyze_parsed_workbook(book, file_name, len(content))
    logger.info(
        "import.analyze.done file=%s sheets=%d pattern=%s confidence=%.3f warnings=%d",
        file_name,
        len(analysis.sheets),
        analysis.overall_pattern,
        analysis.confidence,
        len(analysis.warnings),
    )
    return analysis
