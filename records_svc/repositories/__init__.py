"""
Repository layer for database access.

This module contains all database access operations, encapsulating SQL and data persistence logic.
"""
from repositories.base import Database
from repositories.health_record_repository import (
    RecordStorage,
    HealthRecordRepository,
    InMemoryHealthRecordRepository,
)
from repositories.id_counter import IdCounter, SqliteIdCounter, InMemoryIdCounter

__all__ = [
    "Database",
    "RecordStorage",
    "HealthRecordRepository",
    "InMemoryHealthRecordRepository",
    "IdCounter",
    "SqliteIdCounter",
    "InMemoryIdCounter",
]
