"""
Core module for application configuration, logging, and shared constants.

This module provides:
- Settings: Application configuration via pydantic-settings
- Dependency injection: FastAPI Depends() functions for the record store and service
- Exceptions: Domain-specific exception classes with HTTP status codes
- Datetime utilities: UTC-first datetime handling
"""
from core.config import settings, Settings

# Dependency injection - import functions for FastAPI Depends()
from core.dependencies import (
    get_database,
    get_record_repository,
    get_id_counter,
    get_record_store,
    reset_database,
    reset_record_store,
    get_event_sink,
    get_record_service,
)

# Exception classes for consistent error handling
from core.exceptions import (
    RecordServiceError,
    RecordNotFoundError,
    RecordValidationError,
    InsertionFailedError,
    RecordTooLargeError,
    DatabaseError,
    IdCounterError,
    setup_exception_handlers,
)

# UTC datetime utilities
from core.datetime_utils import (
    utc_now,
    to_utc,
    parse_datetime,
    format_iso,
    to_db_string,
    from_db_string,
)

__all__ = [
    # Settings
    "settings",
    "Settings",
    # Dependency injection
    "get_database",
    "get_record_repository",
    "get_id_counter",
    "get_record_store",
    "reset_database",
    "reset_record_store",
    "get_event_sink",
    "get_record_service",
    # Exceptions
    "RecordServiceError",
    "RecordNotFoundError",
    "RecordValidationError",
    "InsertionFailedError",
    "RecordTooLargeError",
    "DatabaseError",
    "IdCounterError",
    "setup_exception_handlers",
    # Datetime utilities
    "utc_now",
    "to_utc",
    "parse_datetime",
    "format_iso",
    "to_db_string",
    "from_db_string",
]
