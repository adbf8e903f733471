"""
The record store aggregate.

One RecordStore owns everything shared between operations: the primary
store, the identifier counter, the secondary indexes, and the lock that
serializes every operation over them. It is created once per process by the
DI layer (core.dependencies.get_record_store) and handed to the service.
"""
import logging
import threading
from typing import Dict

from repositories.health_record_repository import RecordStorage
from repositories.id_counter import IdCounter
from services.index_manager import SecondaryIndexManager

logger = logging.getLogger(__name__)


class RecordStore:
    """Primary store, id counter, and secondary indexes behind one lock."""

    def __init__(self, records: RecordStorage, id_counter: IdCounter):
        self.records = records
        self.id_counter = id_counter
        self.indexes = SecondaryIndexManager(records)
        self.lock = threading.RLock()

    def rebuild_indexes(self) -> Dict[str, int]:
        """Re-derive both secondary indexes from the primary store."""
        with self.lock:
            return self.indexes.rebuild(self.records.list_all())

    def stats(self) -> Dict[str, int]:
        with self.lock:
            stats = self.indexes.stats()
            stats["records"] = self.records.count()
            stats["next_id"] = self.id_counter.peek()
            return stats
