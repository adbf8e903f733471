"""
Pydantic schemas for API request/response validation.

This module contains all Pydantic models used at API boundaries.
"""
from schemas.health_record import (
    HealthRecordPayload,
    HealthRecordResponse,
    IndexRebuildResponse,
)

__all__ = [
    "HealthRecordPayload",
    "HealthRecordResponse",
    "IndexRebuildResponse",
]
