"""
Secondary indexes over the primary health record store.

Two inverted indexes map a symptom or diagnosis token to the ids of the
records containing it. They are derived data: never persisted, and always
rebuildable by scanning the primary store.

Tokenization is the raw comma split of the field. Tokens are neither trimmed
nor deduplicated, so "fever, cough" indexes "fever" and " cough", and a
record listing "cough,cough" appears twice under "cough".
"""
import logging
from typing import Dict, Iterable, List

from models.health_record import HealthRecord, TOKEN_DELIMITER
from repositories.health_record_repository import RecordStorage

logger = logging.getLogger(__name__)


class TokenIndex:
    """Inverted index from token to record ids, in insertion order."""

    def __init__(self, name: str):
        self.name = name
        self._entries: Dict[str, List[int]] = {}

    @staticmethod
    def tokenize(value: str) -> List[str]:
        return value.split(TOKEN_DELIMITER)

    def add(self, record_id: int, value: str) -> None:
        for token in self.tokenize(value):
            self._entries.setdefault(token, []).append(record_id)

    def discard(self, record_id: int, value: str) -> None:
        """Remove every occurrence of record_id from the tokens of value."""
        for token in set(self.tokenize(value)):
            ids = self._entries.get(token)
            if ids is None:
                continue
            remaining = [i for i in ids if i != record_id]
            if remaining:
                self._entries[token] = remaining
            else:
                del self._entries[token]

    def lookup(self, token: str) -> List[int]:
        return list(self._entries.get(token, ()))

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)


class SecondaryIndexManager:
    """
    Maintains the symptom and diagnosis indexes for one primary store.

    Callers hold the record store lock around every mutation, so an index
    change and the store write it mirrors are observed together.
    """

    def __init__(self, storage: RecordStorage):
        """
        Args:
            storage: Primary store used to resolve ids back to records.
        """
        self._storage = storage
        self.symptoms = TokenIndex("symptoms")
        self.diagnoses = TokenIndex("diagnosis")

    def index_record(self, record: HealthRecord) -> None:
        self.symptoms.add(record.id, record.symptoms)
        self.diagnoses.add(record.id, record.diagnosis)

    def unindex_record(self, record: HealthRecord) -> None:
        self.symptoms.discard(record.id, record.symptoms)
        self.diagnoses.discard(record.id, record.diagnosis)

    def reindex_record(self, old: HealthRecord, new: HealthRecord) -> None:
        """Drop the tokens of the old values, then index the new values."""
        self.unindex_record(old)
        self.index_record(new)

    def resolve(self, ids: Iterable[int]) -> List[HealthRecord]:
        """
        Map ids to records through the primary store.

        Ids that no longer resolve are dropped rather than reported.
        """
        records = []
        for record_id in ids:
            record = self._storage.get(record_id)
            if record is None:
                logger.debug(f"Dropping stale id {record_id} from search results")
                continue
            records.append(record)
        return records

    def search_by_symptom(self, token: str) -> List[HealthRecord]:
        return self.resolve(self.symptoms.lookup(token))

    def search_by_diagnosis(self, token: str) -> List[HealthRecord]:
        return self.resolve(self.diagnoses.lookup(token))

    def rebuild(self, records: Iterable[HealthRecord]) -> Dict[str, int]:
        """
        Discard both indexes and re-derive them from the given records.

        Args:
            records: Every live record, in id order.

        Returns:
            Dict with the number of indexed records and tokens per index.
        """
        self.symptoms.clear()
        self.diagnoses.clear()

        indexed = 0
        for record in records:
            self.index_record(record)
            indexed += 1

        stats = self.stats()
        stats["records"] = indexed
        logger.info("Secondary indexes rebuilt", extra=stats)
        return stats

    def stats(self) -> Dict[str, int]:
        return {
            "symptom_tokens": len(self.symptoms),
            "diagnosis_tokens": len(self.diagnoses),
        }
