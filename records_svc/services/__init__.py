"""
Service layer for business logic.

This module contains the record store aggregate, the secondary index manager,
and the record service that orchestrates them.
"""
from services.index_manager import TokenIndex, SecondaryIndexManager
from services.record_store import RecordStore
from services.record_service import RecordService

__all__ = [
    "TokenIndex",
    "SecondaryIndexManager",
    "RecordStore",
    "RecordService",
]
