import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.orm import Session

from ledger.core.database import get_db
from ledger.core.settings import settings
from ledger.models.company import Company
from ledger.schemas.imports import ImportAnalysis, ImportCommitResult, ImportPreview
from ledger.services.import_analysis.analyzer import analyze_workbook
from ledger.services.import_analysis.errors import WorkbookParseError
from ledger.services.import_analysis.preview import generate_import_preview
from ledger.services.import_analysis.workbook import SUPPORTED_SUFFIXES, is_supported_file
from ledger.services.import_commit import commit_import
from ledger.services.ledger_store import LedgerStore

logger = logging.getLogger(__name__)

router = APIRouter()


async def _read_upload(file: UploadFile) -> bytes:
    if not file.filename or not is_supported_file(file.filename):
        allowed = ", ".join(sorted(SUPPORTED_SUFFIXES))
        raise HTTPException(status_code=400, detail=f"Only {allowed} files are allowed")

    content = await file.read()
    if not content:
        raise HTTPException(status_code=400, detail="The uploaded file is empty")
    if len(content) > settings.import_max_file_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File too large (> {settings.import_max_file_mb:g} MB)",
        )
    return content


def _analyze(content: bytes, filename: str) -> ImportAnalysis:
    try:
        return analyze_workbook(content, filename)
    except WorkbookParseError as exc:
        raise HTTPException(status_code=400, detail=str(exc))


@router.post("/import/analyze", response_model=ImportAnalysis)
async def analyze_import(file: UploadFile = File(...)):
    content = await _read_upload(file)
    try:
        return _analyze(content, file.filename)
    except HTTPException:
        raise
    except Exception as e:
        logger.exception("import.analyze.error file=%s", file.filename)
        raise HTTPException(status_code=500, detail=f"Error analyzing file: {str(e)}")


@router.post("/import/preview", response_model=ImportPreview)
async def preview_import(file: UploadFile = File(...)):
    content = await _read_upload(file)
    try:
        analysis = _analyze(content, file.filename)
        return generate_import_preview(analysis, content, row_limit=settings.import_preview_row_limit)
    except HTTPException:
        raise
    except WorkbookParseError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception as e:
        logger.exception("import.preview.error file=%s", file.filename)
        raise HTTPException(status_code=500, detail=f"Error building import preview: {str(e)}")


@router.post("/import/commit", response_model=ImportCommitResult)
async def commit_import_file(
    file: UploadFile = File(...),
    company_id: Optional[int] = Form(None),
    db: Session = Depends(get_db),
):
    content = await _read_upload(file)
    if company_id is not None and db.query(Company).filter(Company.id == company_id).first() is None:
        raise HTTPException(status_code=404, detail="Company not found")

    try:
        analysis = _analyze(content, file.filename)
        return commit_import(LedgerStore(db), analysis, content, company_id=company_id)
    except HTTPException:
        raise
    except WorkbookParseError as exc:
        raise HTTPException(status_code=400, detail=str(exc))
    except Exception as e:
        logger.exception("import.commit.error file=%s", file.filename)
        raise HTTPException(status_code=500, detail=f"Error importing file: {str(e)}")
