"""
FastAPI Dependency Injection configuration for Health Records Service API.

Architecture Flow:
    API Layer (Routers)
         ↓ Depends()
    RecordService
         ↓ Injected
    RecordStore (process singleton: primary store + id counter + indexes + lock)
         ↓ Injected
    Repositories -> Database (SQLite) or in-memory backends

The RecordStore must be shared by every request: the secondary indexes live
in memory, so a store per request would start with empty indexes.

Usage in Routers:
    from core.dependencies import get_record_service

    @router.get("/{record_id}")
    async def get_record(record_id: int, service: RecordService = Depends(get_record_service)):
        return service.get_record(record_id)

Testing:
    app.dependency_overrides[get_record_service] = lambda: test_service
"""
import logging
from typing import Optional

from core.config import settings

logger = logging.getLogger(__name__)


# =============================================================================
# DATABASE DEPENDENCY
# =============================================================================

_database_instance: Optional["Database"] = None


def get_database() -> "Database":
    """
    Get the database instance (created once, then cached).

    Note:
        Import here to avoid circular imports with repositories.
    """
    global _database_instance

    if _database_instance is None:
        from repositories.base import Database

        logger.info(f"Initializing database: {settings.database_path}")
        _database_instance = Database(
            db_path=settings.database_path,
            busy_timeout=settings.records_svc_db_busy_timeout
        )

    return _database_instance


def reset_database() -> None:
    """
    Reset the database instance (for testing only).

    This allows tests to inject a fresh database instance.
    """
    global _database_instance
    _database_instance = None


# =============================================================================
# REPOSITORY DEPENDENCIES
# =============================================================================

def get_record_repository() -> "RecordStorage":
    """
    Get the primary store for the configured backend.

    Returns:
        HealthRecordRepository for "sqlite", InMemoryHealthRecordRepository for "memory".
    """
    from repositories import HealthRecordRepository, InMemoryHealthRecordRepository

    if settings.records_svc_storage_backend == "memory":
        return InMemoryHealthRecordRepository(max_record_size=settings.records_svc_max_record_size)
    return HealthRecordRepository(
        db=get_database(),
        max_record_size=settings.records_svc_max_record_size
    )


def get_id_counter() -> "IdCounter":
    """Get the identifier counter for the configured backend."""
    from repositories import SqliteIdCounter, InMemoryIdCounter

    if settings.records_svc_storage_backend == "memory":
        return InMemoryIdCounter()
    return SqliteIdCounter(db=get_database())


# =============================================================================
# RECORD STORE DEPENDENCY
# =============================================================================

_record_store_instance: Optional["RecordStore"] = None


def get_record_store() -> "RecordStore":
    """
    Get the process-wide RecordStore.

    On first use the secondary indexes are rebuilt from the primary store,
    since they are never persisted.
    """
    global _record_store_instance

    if _record_store_instance is None:
        from services.record_store import RecordStore

        store = RecordStore(records=get_record_repository(), id_counter=get_id_counter())
        stats = store.rebuild_indexes()
        logger.info(
            "Record store ready",
            extra={"backend": settings.records_svc_storage_backend, **stats}
        )
        _record_store_instance = store

    return _record_store_instance


def reset_record_store() -> None:
    """
    Drop the cached record store and database (for testing only).

    The next get_record_store() call rebuilds both from current settings.
    """
    global _record_store_instance
    _record_store_instance = None
    reset_database()


# =============================================================================
# SERVICE DEPENDENCIES
# =============================================================================

def get_event_sink() -> "EventSink":
    """Get the event sink that receives record mutation events."""
    from core.events import LoggingEventSink

    return LoggingEventSink()


def get_record_service() -> "RecordService":
    """
    Get a RecordService bound to the shared RecordStore.

    Returns:
        RecordService: Service for health record operations.
    """
    from services import RecordService

    return RecordService(store=get_record_store(), event_sink=get_event_sink())
