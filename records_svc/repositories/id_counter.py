"""
Identifier generators for health records.

Each call to next_id() returns the current counter value and advances the
counter by one, so identifiers start at 0 and are never reissued, not even
after the record that used them is deleted.
"""
import logging
import sqlite3
from typing import Protocol

from repositories.base import Database, RECORD_ID_COUNTER
from core.exceptions import IdCounterError

logger = logging.getLogger(__name__)


class IdCounter(Protocol):
    """Capability interface of the identifier generator."""

    def next_id(self) -> int: ...

    def peek(self) -> int: ...


class SqliteIdCounter:
    """
    Identifier counter persisted in the id_counters table.

    The read and the increment run inside one IMMEDIATE transaction, so two
    connections can never observe the same value.
    """

    def __init__(self, db: Database, name: str = RECORD_ID_COUNTER):
        self._db = db
        self.name = name

    def next_id(self) -> int:
        """
        Issue the next identifier.

        Raises:
            IdCounterError: If the persisted counter cannot be advanced.
        """
        conn = self._db.get_connection()
        cursor = conn.cursor()

        try:
            cursor.execute("BEGIN IMMEDIATE")
            cursor.execute("SELECT value FROM id_counters WHERE name = ?", (self.name,))
            row = cursor.fetchone()
            current = row[0] if row else 0
            cursor.execute(
                "INSERT OR REPLACE INTO id_counters (name, value) VALUES (?, ?)",
                (self.name, current + 1)
            )
            conn.commit()
            return current
        except sqlite3.Error as e:
            conn.rollback()
            logger.critical(f"Cannot increment id counter '{self.name}': {e}")
            raise IdCounterError(operation="next_id", counter=self.name) from e
        finally:
            conn.close()

    def peek(self) -> int:
        """Return the value the next call to next_id() will issue."""
        conn = self._db.get_connection()
        try:
            row = conn.execute(
                "SELECT value FROM id_counters WHERE name = ?", (self.name,)
            ).fetchone()
        finally:
            conn.close()
        return row[0] if row else 0


class InMemoryIdCounter:
    """Process-local identifier counter."""

    def __init__(self, start: int = 0):
        self._value = start

    def next_id(self) -> int:
        current = self._value
        self._value += 1
        return current

    def peek(self) -> int:
        return self._value
