from __future__ import annotations

from typing import Any, Callable, Mapping

from ledger.schemas.imports import MappedSheetResult, RowValidationError, SheetAnalysis
from ledger.services.import_analysis.cells import ABSENT, Cell, classify_cell, is_positive, is_present


PREVIEW_ROW_LIMIT = 100
SAMPLE_RECORD_LIMIT = 5
VALIDATION_ERROR_LIMIT = 10


def map_row(row: Mapping[str, Any], mapping: Mapping[str, str]) -> dict[str, Any]:
    """Copy mapped source columns onto their canonical field names."""

    mapped: dict[str, Any] = {}
    for target, source in mapping.items():
        if not source:
            continue
        value = row.get(source)
        if value is None:
            continue
        mapped[target] = value
    return mapped


def _cells(record: Mapping[str, Any]) -> dict[str, Cell]:
    return {k: classify_cell(v) for k, v in record.items()}


def _field(cells: Mapping[str, Cell], name: str) -> Cell:
    return cells.get(name, ABSENT)


def _validate_amounts(cells: Mapping[str, Cell], errors: list[str]) -> None:
    if not is_positive(_field(cells, "quantity")):
        errors.append("Valid quantity is required")
    if not is_positive(_field(cells, "ratePerKg")):
        errors.append("Valid rate per kg is required")
    if not is_positive(_field(cells, "totalAmount")):
        errors.append("Valid total amount is required")


def _validate_sales(cells: Mapping[str, Cell]) -> list[str]:
    errors: list[str] = []
    if not is_present(_field(cells, "hotelName")):
        errors.append("Hotel name is required")
    _validate_amounts(cells, errors)
    if not is_present(_field(cells, "date")):
        errors.append("Date is required")
    return errors


def _validate_purchases(cells: Mapping[str, Cell]) -> list[str]:
    errors: list[str] = []
    if not is_present(_field(cells, "supplierName")):
        errors.append("Supplier name is required")
    _validate_amounts(cells, errors)
    return errors


def _validate_companies(cells: Mapping[str, Cell]) -> list[str]:
    errors: list[str] = []
    if not is_present(_field(cells, "name")):
        errors.append("Company name is required")
    if not is_present(_field(cells, "code")):
        errors.append("Company code is required")
    return errors


VALIDATORS: Mapping[str, Callable[[Mapping[str, Cell]], list[str]]] = {
    "sales": _validate_sales,
    "purchases": _validate_purchases,
    "companies": _validate_companies,
}


def validate_record(pattern: str, record: Mapping[str, Any]) -> list[str]:
    """Return the validation messages for a mapped record (empty when valid)."""

    validator = VALIDATORS.get(pattern)
    if validator is None:
        return []
    return validator(_cells(record))


def map_and_validate(
    sheet: SheetAnalysis,
    rows: list[Mapping[str, Any]],
    row_limit: int = PREVIEW_ROW_LIMIT,
) -> MappedSheetResult:
    """Map and validate the first ``row_limit`` rows of a sheet for preview."""

    considered = rows[:row_limit]
    valid = 0
    invalid = 0
    samples: list[dict[str, Any]] = []
    errors: list[RowValidationError] = []

    for idx, row in enumerate(considered):
        mapped = map_row(row, sheet.mapping)
        problems = validate_record(sheet.detected_pattern, mapped)
        if problems:
            invalid += 1
            if len(errors) < VALIDATION_ERROR_LIMIT:
                errors.append(RowValidationError(row=idx + 1, errors=problems))
        else:
            valid += 1

        if len(samples) < SAMPLE_RECORD_LIMIT:
            samples.append(mapped)

    return MappedSheetResult(
        sheet_name=sheet.name,
        target_table=sheet.detected_pattern,
        record_count=len(considered),
        valid_records=valid,
        invalid_records=invalid,
        sample_mapped_records=samples,
        validation_errors=errors,
    )
