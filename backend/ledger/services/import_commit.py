from __future__ import annotations

import logging
import re
from typing import Any, Callable, Mapping

from sqlalchemy.exc import SQLAlchemyError

from ledger.schemas.imports import ImportAnalysis, ImportCommitResult, ImportRowError
from ledger.services.import_analysis.cells import (
    Cell,
    Numeric,
    Text,
    as_datetime,
    as_number,
    as_text,
    classify_cell,
)
from ledger.services.import_analysis.mapping import map_row, validate_record
from ledger.services.import_analysis.preview import sheet_records
from ledger.services.import_analysis.workbook import read_workbook
from ledger.services.ledger_store import LedgerStore

logger = logging.getLogger(__name__)

_CODE_STRIP = re.compile(r"[^A-Z0-9]")
_INACTIVE_VALUES = {"false", "no", "n", "inactive", "disabled", "0"}

COMMIT_COUNTERS = ("new_companies", "new_suppliers", "new_hotels", "new_sales", "new_purchases", "new_payments")


class RowImportError(ValueError):
    pass


def generate_entity_code(store: LedgerStore, entity_type: str, name: str) -> str:
    """Build a unique code from a name: first six alphanumerics plus a 3-digit suffix."""

    base = _CODE_STRIP.sub("", (name or "").upper())[:6] or "ITEM"
    for n in range(1, 1000):
        code = f"{base}{n:03d}"
        if not store.code_exists(entity_type, code):
            return code
    raise RowImportError(f"No free code left for {name!r}")


def _text(cells: Mapping[str, Cell], name: str) -> str | None:
    cell = cells.get(name)
    return as_text(cell) if cell is not None else None


def _number(cells: Mapping[str, Cell], name: str) -> float | None:
    cell = cells.get(name)
    return as_number(cell) if cell is not None else None


def _is_active(cells: Mapping[str, Cell]) -> bool:
    cell = cells.get("isActive")
    if isinstance(cell, Numeric):
        return cell.value != 0
    if isinstance(cell, Text):
        return cell.value.strip().lower() not in _INACTIVE_VALUES
    return True


def _contact_fields(cells: Mapping[str, Cell]) -> dict[str, Any]:
    return {
        "contact_person": _text(cells, "contactPerson"),
        "phone": _text(cells, "phone"),
        "email": _text(cells, "email"),
        "address": _text(cells, "address"),
    }


def _find_or_create_hotel(store: LedgerStore, name: str, counts: dict[str, int]) -> Any:
    hotel = store.find_by_natural_key("hotels", name, field="name")
    if hotel is None:
        hotel = store.create(
            "hotels",
            {"name": name, "code": generate_entity_code(store, "hotels", name), "is_active": True},
        )
        counts["new_hotels"] += 1
    return hotel


def _find_or_create_supplier(store: LedgerStore, name: str, counts: dict[str, int]) -> Any:
    supplier = store.find_by_natural_key("suppliers", name, field="name")
    if supplier is None:
        supplier = store.create(
            "suppliers",
            {"name": name, "code": generate_entity_code(store, "suppliers", name), "is_active": True},
        )
        counts["new_suppliers"] += 1
    return supplier


def _import_sale(store: LedgerStore, cells: Mapping[str, Cell], company_id: int | None, counts: dict[str, int]) -> None:
    sale_date = as_datetime(cells["date"])
    if sale_date is None:
        raise RowImportError("Invalid date format")

    hotel = _find_or_create_hotel(store, _text(cells, "hotelName") or "", counts)
    total = _number(cells, "totalAmount")
    sale = store.create(
        "sales",
        {
            "company_id": company_id,
            "hotel_id": hotel.id,
            "date": sale_date,
            "quantity": _number(cells, "quantity"),
            "rate_per_kg": _number(cells, "ratePerKg"),
            "total_amount": total,
            "notes": _text(cells, "notes"),
        },
    )
    counts["new_sales"] += 1

    payment_date = as_datetime(cells["paymentDate"]) if "paymentDate" in cells else None
    payment_amount = _number(cells, "paymentAmount")
    status = (_text(cells, "paymentStatus") or "").strip().lower()
    if payment_date is not None and payment_amount:
        store.create(
            "payments",
            {"sale_id": sale.id, "amount": payment_amount, "payment_date": payment_date, "notes": "Imported from Excel"},
        )
        counts["new_payments"] += 1
    elif status == "paid":
        store.create(
            "payments",
            {"sale_id": sale.id, "amount": total, "payment_date": sale_date, "notes": "Imported from Excel - Full payment"},
        )
        counts["new_payments"] += 1


def _import_purchase(store: LedgerStore, cells: Mapping[str, Cell], company_id: int | None, counts: dict[str, int]) -> None:
    purchase_date = None
    if "date" in cells:
        purchase_date = as_datetime(cells["date"])
        if purchase_date is None:
            raise RowImportError("Invalid date format")

    supplier = _find_or_create_supplier(store, _text(cells, "supplierName") or "", counts)
    store.create(
        "purchases",
        {
            "company_id": company_id,
            "supplier_id": supplier.id,
            "date": purchase_date,
            "quantity": _number(cells, "quantity"),
            "rate_per_kg": _number(cells, "ratePerKg"),
            "total_amount": _number(cells, "totalAmount"),
            "invoice_number": _text(cells, "invoiceNumber"),
            "notes": _text(cells, "notes"),
        },
    )
    counts["new_purchases"] += 1


def _import_company(store: LedgerStore, cells: Mapping[str, Cell], company_id: int | None, counts: dict[str, int]) -> None:
    code = _text(cells, "code") or ""
    if store.code_exists("companies", code):
        raise RowImportError("Company code already exists")
    store.create(
        "companies",
        {
            "name": _text(cells, "name"),
            "code": code,
            "tax_id": _text(cells, "taxId"),
            "is_active": _is_active(cells),
            **_contact_fields(cells),
        },
    )
    counts["new_companies"] += 1


def _import_supplier(store: LedgerStore, cells: Mapping[str, Cell], company_id: int | None, counts: dict[str, int]) -> None:
    name = _text(cells, "name")
    if not name:
        raise RowImportError("Supplier name is required")
    code = _text(cells, "code")
    if code and store.code_exists("suppliers", code):
        raise RowImportError("Supplier code already exists")
    store.create(
        "suppliers",
        {
            "name": name,
            "code": code or generate_entity_code(store, "suppliers", name),
            "tax_id": _text(cells, "taxId"),
            "is_active": _is_active(cells),
            **_contact_fields(cells),
        },
    )
    counts["new_suppliers"] += 1


def _import_hotel(store: LedgerStore, cells: Mapping[str, Cell], company_id: int | None, counts: dict[str, int]) -> None:
    name = _text(cells, "name")
    if not name:
        raise RowImportError("Hotel name is required")
    if store.find_by_natural_key("hotels", name, field="name") is not None:
        raise RowImportError("Hotel already exists")
    code = _text(cells, "code")
    if code and store.code_exists("hotels", code):
        raise RowImportError("Hotel code already exists")
    store.create(
        "hotels",
        {
            "name": name,
            "code": code or generate_entity_code(store, "hotels", name),
            "is_active": _is_active(cells),
            **_contact_fields(cells),
        },
    )
    counts["new_hotels"] += 1


ROW_IMPORTERS: Mapping[str, Callable[[LedgerStore, Mapping[str, Cell], int | None, dict[str, int]], None]] = {
    "sales": _import_sale,
    "purchases": _import_purchase,
    "companies": _import_company,
    "suppliers": _import_supplier,
    "hotels": _import_hotel,
}


def commit_import(
    store: LedgerStore,
    analysis: ImportAnalysis,
    content: bytes,
    company_id: int | None = None,
) -> ImportCommitResult:
    """Persist every valid row of an analyzed workbook.

    Rows are validated with the preview rules, then written one at a time; a
    failing row is rolled back and reported without stopping the import.
    """

    book = read_workbook(content, analysis.file_name)
    records = sheet_records(book)

    totals = {name: 0 for name in COMMIT_COUNTERS}
    success = 0
    skipped: list[str] = []
    errors: list[ImportRowError] = []

    for sheet in analysis.sheets:
        importer = ROW_IMPORTERS.get(sheet.detected_pattern)
        if importer is None:
            skipped.append(sheet.name)
            logger.info("import.commit.skip_sheet sheet=%s pattern=%s", sheet.name, sheet.detected_pattern)
            continue

        for idx, row in enumerate(records.get(sheet.name) or []):
            row_number = idx + 1
            mapped = map_row(row, sheet.mapping)
            problems = validate_record(sheet.detected_pattern, mapped)
            if problems:
                errors.append(ImportRowError(sheet=sheet.name, row=row_number, error="; ".join(problems)))
                continue

            cells = {k: classify_cell(v) for k, v in mapped.items()}
            counts = {name: 0 for name in COMMIT_COUNTERS}
            try:
                importer(store, cells, company_id, counts)
                store.commit()
            except (RowImportError, SQLAlchemyError) as exc:
                store.rollback()
                errors.append(ImportRowError(sheet=sheet.name, row=row_number, error=str(exc)))
                continue

            success += 1
            for name, value in counts.items():
                totals[name] += value

    logger.info(
        "import.commit.done file=%s success=%d errors=%d skipped=%d",
        analysis.file_name,
        success,
        len(errors),
        len(skipped),
    )
    return ImportCommitResult(
        success=success,
        skipped_sheets=skipped,
        errors=errors,
        company_id=company_id,
        **totals,
    )
