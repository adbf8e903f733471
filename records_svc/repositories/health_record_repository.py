"""
Repositories for the primary health record store.

The primary store is the source of truth: a mapping from record id to record.
Two interchangeable backends implement the RecordStorage protocol:

- HealthRecordRepository: SQLite-backed, survives restarts
- InMemoryHealthRecordRepository: dict-backed, for tests and ephemeral runs

Both enforce the encoded record size bound before any write, so a rejected
put never leaves a partial record behind.

Architecture:
    Repositories should be injected via core.dependencies.get_record_repository().

All SQL is encapsulated in this repository - no SQL in service or API layers.
"""
import logging
import sqlite3
from typing import Dict, List, Optional, Protocol

from repositories.base import Database
from models.health_record import HealthRecord
from core.config import MAX_RECORD_SIZE
from core.datetime_utils import to_db_string
from core.exceptions import DatabaseError, InsertionFailedError, RecordTooLargeError

logger = logging.getLogger(__name__)

# SQLite INTEGER is a signed 64-bit value; larger ids can never be stored
SQLITE_MAX_INTEGER = 2 ** 63 - 1


class RecordStorage(Protocol):
    """Capability interface of the primary store."""

    def get(self, record_id: int) -> Optional[HealthRecord]: ...

    def put(self, record: HealthRecord) -> None: ...

    def remove(self, record_id: int) -> Optional[HealthRecord]: ...

    def list_all(self) -> List[HealthRecord]: ...

    def count(self) -> int: ...


def check_record_size(record: HealthRecord, max_size: int) -> None:
    """
    Reject records whose canonical encoding exceeds max_size bytes.

    Raises:
        RecordTooLargeError: If the encoded record is too large.
        InsertionFailedError: If the record cannot be encoded as UTF-8.
    """
    try:
        size = len(record.encode())
    except UnicodeEncodeError as e:
        logger.warning(
            f"Cannot encode health record {record.id}: {e}",
            extra={"record_id": record.id}
        )
        raise InsertionFailedError(
            record_id=record.id,
            detail=f"couldn't encode a health record with id={record.id}: invalid UTF-8 text"
        ) from e
    if size > max_size:
        logger.warning(
            "Rejecting oversize health record",
            extra={"record_id": record.id, "size": size, "max_size": max_size}
        )
        raise RecordTooLargeError(record_id=record.id, size=size, max_size=max_size)


class HealthRecordRepository:
    """
    SQLite repository for health record CRUD operations.

    It should be instantiated via core.dependencies.get_record_repository().
    """

    def __init__(self, db: Database, max_record_size: Optional[int] = None):
        """
        Initialize the health record repository.

        Args:
            db: Database instance for data access.
            max_record_size: Maximum encoded record size in bytes.
                             Defaults to config MAX_RECORD_SIZE.
        """
        self._db = db
        self.max_record_size = max_record_size or MAX_RECORD_SIZE

    def get(self, record_id: int) -> Optional[HealthRecord]:
        if not 0 <= record_id <= SQLITE_MAX_INTEGER:
            return None

        conn = self._db.get_connection()
        try:
            cursor = conn.execute("""
                SELECT id, patient_name, symptoms, diagnosis, treatment, created_at, updated_at
                FROM health_records
                WHERE id = ?
            """, (record_id,))
            row = cursor.fetchone()
        finally:
            conn.close()

        return HealthRecord.from_row(row) if row else None

    def put(self, record: HealthRecord) -> None:
        """
        Insert or overwrite the record stored at record.id.

        Raises:
            RecordTooLargeError: If the record exceeds the size bound.
            InsertionFailedError: If the database write cannot complete.
        """
        check_record_size(record, self.max_record_size)

        conn = self._db.get_connection()
        try:
            conn.execute("""
                INSERT INTO health_records
                (id, patient_name, symptoms, diagnosis, treatment, created_at, updated_at)
                VALUES (?, ?, ?, ?, ?, ?, ?)
                ON CONFLICT(id) DO UPDATE SET
                    patient_name = excluded.patient_name,
                    symptoms = excluded.symptoms,
                    diagnosis = excluded.diagnosis,
                    treatment = excluded.treatment,
                    created_at = excluded.created_at,
                    updated_at = excluded.updated_at
            """, (
                record.id,
                record.patient_name,
                record.symptoms,
                record.diagnosis,
                record.treatment,
                to_db_string(record.created_at),
                to_db_string(record.updated_at) if record.updated_at is not None else None
            ))
            conn.commit()
        except sqlite3.Error as e:
            conn.rollback()
            logger.error(
                f"Error writing health record {record.id}: {e}. Transaction rolled back."
            )
            raise InsertionFailedError(record_id=record.id) from e
        finally:
            conn.close()

    def remove(self, record_id: int) -> Optional[HealthRecord]:
        """Delete the record and return its prior value, or None if absent."""
        if not 0 <= record_id <= SQLITE_MAX_INTEGER:
            return None

        conn = self._db.get_connection()
        cursor = conn.cursor()

        try:
            # Read and delete in one transaction so the returned value is exact
            cursor.execute("BEGIN IMMEDIATE")
            cursor.execute("""
                SELECT id, patient_name, symptoms, diagnosis, treatment, created_at, updated_at
                FROM health_records
                WHERE id = ?
            """, (record_id,))
            row = cursor.fetchone()
            if row is None:
                conn.rollback()
                return None

            cursor.execute("DELETE FROM health_records WHERE id = ?", (record_id,))
            conn.commit()
            return HealthRecord.from_row(row)
        except sqlite3.Error as e:
            conn.rollback()
            logger.error(
                f"Error deleting health record {record_id}: {e}. Transaction rolled back."
            )
            raise DatabaseError(operation="remove", record_id=record_id) from e
        finally:
            conn.close()

    def list_all(self) -> List[HealthRecord]:
        """Return every stored record ordered by id."""
        conn = self._db.get_connection()
        try:
            rows = conn.execute("""
                SELECT id, patient_name, symptoms, diagnosis, treatment, created_at, updated_at
                FROM health_records
                ORDER BY id
            """).fetchall()
        finally:
            conn.close()

        return [HealthRecord.from_row(row) for row in rows]

    def count(self) -> int:
        conn = self._db.get_connection()
        try:
            return conn.execute("SELECT COUNT(*) FROM health_records").fetchone()[0]
        finally:
            conn.close()


class InMemoryHealthRecordRepository:
    """
    Dict-backed primary store with the same contract as HealthRecordRepository.

    Records are copied on the way in and out so callers cannot mutate stored state.
    """

    def __init__(self, max_record_size: Optional[int] = None):
        self.max_record_size = max_record_size or MAX_RECORD_SIZE
        self._records: Dict[int, HealthRecord] = {}

    def get(self, record_id: int) -> Optional[HealthRecord]:
        record = self._records.get(record_id)
        return record.copy() if record is not None else None

    def put(self, record: HealthRecord) -> None:
        check_record_size(record, self.max_record_size)
        self._records[record.id] = record.copy()

    def remove(self, record_id: int) -> Optional[HealthRecord]:
        return self._records.pop(record_id, None)

    def list_all(self) -> List[HealthRecord]:
        return [self._records[record_id].copy() for record_id in sorted(self._records)]

    def count(self) -> int:
        return len(self._records)
