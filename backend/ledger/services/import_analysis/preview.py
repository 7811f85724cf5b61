from __future__ import annotations

import logging
from typing import Any, Mapping

from ledger.schemas.imports import EstimatedChanges, ImportAnalysis, ImportPreview, MappedSheetResult
from ledger.services.import_analysis.mapping import PREVIEW_ROW_LIMIT, map_and_validate
from ledger.services.import_analysis.workbook import Workbook, header_row, read_workbook, rows_as_records

logger = logging.getLogger(__name__)

# detected pattern -> EstimatedChanges counter; payments/unknown/mixed count nothing here
PATTERN_COUNTERS: Mapping[str, str] = {
    "sales": "new_sales",
    "purchases": "new_purchases",
    "companies": "new_companies",
    "suppliers": "new_suppliers",
    "hotels": "new_hotels",
}


def sheet_records(book: Workbook) -> dict[str, list[dict[str, Any]]]:
    """Data rows of every sheet keyed by header, as the row mapper expects."""

    out: dict[str, list[dict[str, Any]]] = {}
    for name in book.sheet_names:
        rows = book.sheets.get(name) or []
        out[name] = rows_as_records(header_row(rows), rows[1:])
    return out


def build_preview(
    analysis: ImportAnalysis,
    sheet_rows: Mapping[str, list[Mapping[str, Any]]],
    row_limit: int = PREVIEW_ROW_LIMIT,
) -> ImportPreview:
    counts = {field: 0 for field in EstimatedChanges.model_fields}
    mapped_data: list[MappedSheetResult] = []

    for sheet in analysis.sheets:
        result = map_and_validate(sheet, list(sheet_rows.get(sheet.name) or []), row_limit=row_limit)
        mapped_data.append(result)

        counter = PATTERN_COUNTERS.get(sheet.detected_pattern)
        if counter is not None:
            counts[counter] += result.valid_records

    return ImportPreview(
        analysis=analysis,
        mapped_data=mapped_data,
        estimated_changes=EstimatedChanges(**counts),
    )


def generate_import_preview(
    analysis: ImportAnalysis,
    content: bytes,
    row_limit: int = PREVIEW_ROW_LIMIT,
) -> ImportPreview:
    """Re-read the uploaded workbook and build the reviewable preview."""

    book = read_workbook(content, analysis.file_name)
    preview = build_preview(analysis, sheet_records(book), row_limit=row_limit)
    logger.info(
        "import.preview.done file=%s sheets=%d sales=%d purchases=%d companies=%d suppliers=%d hotels=%d",
        analysis.file_name,
        len(preview.mapped_data),
        preview.estimated_changes.new_sales,
        preview.estimated_changes.new_purchases,
        preview.estimated_changes.new_companies,
        preview.estimated_changes.new_suppliers,
        preview.estimated_changes.new_hotels,
    )
    return preview
