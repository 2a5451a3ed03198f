"""
CSV import API endpoints.

WHAT: Bulk import customers and deals from spreadsheet exports.

WHY: The CSV can arrive either pasted into the UI (JSON body) or as an
uploaded file; both go through the same CsvImportService and return the
same {"success_count", "errors"} shape. Rejected rows never fail the
request: they are listed in "errors" with their spreadsheet row number.

HOW: FastAPI router. The upload variant reads the file, enforces
CSV_IMPORT_MAX_BYTES and decodes UTF-8 (a leading BOM is allowed).
"""

from fastapi import APIRouter, Depends, File, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.exceptions import ValidationError
from app.db.session import get_db
from app.schemas.imports import CsvImportRequest, ImportResultResponse
from app.services.csv_import import CsvImportService, ImportResult


router = APIRouter(prefix="/imports", tags=["imports"])


def _check_size(size: int) -> None:
    if size > settings.CSV_IMPORT_MAX_BYTES:
        raise ValidationError(
            message=f"CSV file exceeds {settings.CSV_IMPORT_MAX_BYTES} bytes",
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            max_bytes=settings.CSV_IMPORT_MAX_BYTES,
        )


async def _read_upload(file: UploadFile) -> str:
    raw = await file.read(settings.CSV_IMPORT_MAX_BYTES + 1)
    _check_size(len(raw))
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError as e:
        raise ValidationError(
            message="CSV file must be UTF-8 encoded",
            filename=file.filename,
        ) from e


def _to_response(result: ImportResult) -> ImportResultResponse:
    return ImportResultResponse(success_count=result.success_count, errors=result.errors)


@router.post(
    "/customers",
    response_model=ImportResultResponse,
    summary="Import customers (JSON)",
    description="Columns: name, email, phone, company, address; name and email required",
)
async def import_customers(
    data: CsvImportRequest,
    db: AsyncSession = Depends(get_db),
) -> ImportResultResponse:
    _check_size(len(data.csv_text.encode("utf-8")))
    result = await CsvImportService(db).import_customers(data.csv_text)
    return _to_response(result)


@router.post(
    "/customers/upload",
    response_model=ImportResultResponse,
    summary="Import customers (file)",
)
async def upload_customers(
    file: UploadFile = File(..., description="CSV file"),
    db: AsyncSession = Depends(get_db),
) -> ImportResultResponse:
    text = await _read_upload(file)
    result = await CsvImportService(db).import_customers(text)
    return _to_response(result)


@router.post(
    "/deals",
    response_model=ImportResultResponse,
    summary="Import deals (JSON)",
    description=(
        "Columns: title, customerEmail, value, probability, stage, type, description; "
        "title, customerEmail and value required"
    ),
)
async def import_deals(
    data: CsvImportRequest,
    db: AsyncSession = Depends(get_db),
) -> ImportResultResponse:
    _check_size(len(data.csv_text.encode("utf-8")))
    result = await CsvImportService(db).import_deals(data.csv_text)
    return _to_response(result)


@router.post(
    "/deals/upload",
    response_model=ImportResultResponse,
    summary="Import deals (file)",
)
async def upload_deals(
    file: UploadFile = File(..., description="CSV file"),
    db: AsyncSession = Depends(get_db),
) -> ImportResultResponse:
    text = await _read_upload(file)
    result = await CsvImportService(db).import_deals(text)
    return _to_response(result)
