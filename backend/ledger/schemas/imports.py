from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _ImportModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class SheetAnalysis(_ImportModel):
    name: str
    row_count: int
    column_count: int
    columns: List[str]
    sample_rows: List[Dict[str, Any]] = Field(default_factory=list)
    detected_pattern: str
    confidence: float
    mapping: Dict[str, str] = Field(default_factory=dict)


class ImportAnalysis(_ImportModel):
    file_name: str
    file_size: int
    sheets: List[SheetAnalysis] = Field(default_factory=list)
    overall_pattern: str = "unknown"
    confidence: float = 0.0
    warnings: List[str] = Field(default_factory=list)


class RowValidationError(_ImportModel):
    row: int
    errors: List[str]


class MappedSheetResult(_ImportModel):
    sheet_name: str
    target_table: str
    record_count: int
    valid_records: int
    invalid_records: int
    sample_mapped_records: List[Dict[str, Any]] = Field(default_factory=list)
    validation_errors: List[RowValidationError] = Field(default_factory=list)


class EstimatedChanges(_ImportModel):
    new_companies: int = 0
    new_suppliers: int = 0
    new_hotels: int = 0
    new_sales: int = 0
    new_purchases: int = 0
    new_payments: int = 0


class ImportPreview(_ImportModel):
    analysis: ImportAnalysis
    mapped_data: List[MappedSheetResult] = Field(default_factory=list)
    estimated_changes: EstimatedChanges = Field(default_factory=EstimatedChanges)


class ImportRowError(_ImportModel):
    sheet: str
    row: int
    error: str


class ImportCommitResult(_ImportModel):
    success: int = 0
    new_companies: int = 0
    new_suppliers: int = 0
    new_hotels: int = 0
    new_sales: int = 0
    new_purchases: int = 0
    new_payments: int = 0
    skipped_sheets: List[str] = Field(default_factory=list)
    errors: List[ImportRowError] = Field(default_factory=list)
    company_id: Optional[int] = None
