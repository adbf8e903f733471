"""
Records router - health record CRUD and search endpoints.

Architecture:
    HTTP Request → Router (this file) → RecordService → RecordStore → Repositories

Dependency Injection:
    RecordService is injected via FastAPI's Depends() mechanism.
    The DI chain is defined in core/dependencies.py.

Errors raised by the service (RecordNotFoundError, RecordValidationError,
InsertionFailedError) are turned into JSON responses by the handlers
registered in main.py via setup_exception_handlers().
"""
import logging
from typing import List

from fastapi import APIRouter, Depends, Path, Query

from schemas import HealthRecordPayload, HealthRecordResponse, IndexRebuildResponse
from services import RecordService
from core.dependencies import get_record_service

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/api/v1/records",
    tags=["Health Records"],
)

# Record ids are unsigned 64-bit integers
RECORD_ID_MAX = 2 ** 64 - 1


# =============================================================================
# SEARCH
# =============================================================================
# Declared before /{record_id} so the static paths win.

@router.get(
    "/search/symptom",
    response_model=List[HealthRecordResponse],
    summary="Search records by symptom",
    description="Return every record whose comma-separated symptoms contain the exact token. "
                "Tokens are not trimmed: ' fever' does not match 'fever'."
)
async def search_by_symptom(
    token: str = Query(..., description="Exact symptom token", example="fever"),
    record_service: RecordService = Depends(get_record_service)
):
    """
    Search health records by symptom token.

    Returns an empty list when nothing matches; never an error.
    """
    return record_service.search_by_symptom(token)


@router.get(
    "/search/diagnosis",
    response_model=List[HealthRecordResponse],
    summary="Search records by diagnosis",
    description="Return every record whose comma-separated diagnosis contains the exact token."
)
async def search_by_diagnosis(
    token: str = Query(..., description="Exact diagnosis token", example="flu"),
    record_service: RecordService = Depends(get_record_service)
):
    """
    Search health records by diagnosis token.

    Returns an empty list when nothing matches; never an error.
    """
    return record_service.search_by_diagnosis(token)


# =============================================================================
# MAINTENANCE
# =============================================================================

@router.post(
    "/reindex",
    response_model=IndexRebuildResponse,
    summary="Rebuild secondary indexes",
    description="Discard the symptom and diagnosis indexes and re-derive them from the primary store."
)
async def rebuild_indexes(
    record_service: RecordService = Depends(get_record_service)
):
    stats = record_service.rebuild_indexes()
    return IndexRebuildResponse(**stats)


# =============================================================================
# CRUD
# =============================================================================

@router.post(
    "",
    response_model=HealthRecordResponse,
    status_code=201,
    summary="Create a new health record",
    description="Add a health record. The service assigns the id and created_at timestamp."
)
async def add_health_record(
    payload: HealthRecordPayload,
    record_service: RecordService = Depends(get_record_service)
):
    """
    Create a new health record.

    - **patient_name**: Patient name (non-empty)
    - **symptoms**: Comma-separated symptom tokens (non-empty)
    - **diagnosis**: Comma-separated diagnosis tokens (non-empty)
    - **treatment**: Treatment (non-empty)

    Raises:
    - 400 Bad Request: If a field is empty (RecordValidationError)
    - 413 Content Too Large: If the record exceeds the size bound (RecordTooLargeError)
    - 500 Internal Server Error: If the store write fails (InsertionFailedError)
    """
    return record_service.create_record(
        patient_name=payload.patient_name,
        symptoms=payload.symptoms,
        diagnosis=payload.diagnosis,
        treatment=payload.treatment
    )


@router.get(
    "/{record_id}",
    response_model=HealthRecordResponse,
    summary="Get a health record",
    description="Retrieve a single health record by id."
)
async def get_health_record(
    record_id: int = Path(..., ge=0, le=RECORD_ID_MAX, description="Health record id", example=0),
    record_service: RecordService = Depends(get_record_service)
):
    return record_service.get_record(record_id)


@router.put(
    "/{record_id}",
    response_model=HealthRecordResponse,
    summary="Update a health record",
    description="Replace the content fields of an existing record. "
                "The id and created_at are kept; updated_at is set."
)
async def update_health_record(
    payload: HealthRecordPayload,
    record_id: int = Path(..., ge=0, le=RECORD_ID_MAX, description="Health record id", example=0),
    record_service: RecordService = Depends(get_record_service)
):
    """
    Update an existing health record.

    Raises:
    - 400 Bad Request: If a field is empty (checked before the record is looked up)
    - 404 Not Found: If no record exists with this id
    - 413 / 500: If the store write fails
    """
    return record_service.update_record(
        record_id=record_id,
        patient_name=payload.patient_name,
        symptoms=payload.symptoms,
        diagnosis=payload.diagnosis,
        treatment=payload.treatment
    )


@router.delete(
    "/{record_id}",
    response_model=HealthRecordResponse,
    summary="Delete a health record",
    description="Delete a health record and return it as it was before removal."
)
async def delete_health_record(
    record_id: int = Path(..., ge=0, le=RECORD_ID_MAX, description="Health record id", example=0),
    record_service: RecordService = Depends(get_record_service)
):
    return record_service.delete_record(record_id)
