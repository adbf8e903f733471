"""
Service layer for health record operations.

RecordService validates input and runs every operation against the shared
RecordStore: identifier issuance, the primary store write, secondary index
maintenance, and event reporting happen inside the store lock as one unit.

Architecture:
    API Layer (routers) -> RecordService -> RecordStore -> Repositories -> Database

Failure ordering:
    - Validation runs before any mutation, so a RecordValidationError has no side effects.
    - The primary store write runs before any index change, so an
      InsertionFailedError leaves the indexes untouched.
    - An id consumed by a failed create is not reissued.

Dependency Injection:
    Use core.dependencies.get_record_service() in routers with Depends().
"""
import logging
from typing import Dict, List

from models.health_record import HealthRecord
from schemas import HealthRecordResponse
from services.record_store import RecordStore
from core.datetime_utils import utc_now
from core.events import (
    EventSink,
    ADD_HEALTH_RECORD,
    UPDATE_HEALTH_RECORD,
    DELETE_HEALTH_RECORD,
)
from core.exceptions import RecordNotFoundError, RecordValidationError

logger = logging.getLogger(__name__)

# Checked in this order; the first empty field is the one reported
_REQUIRED_FIELDS = (
    ("patient_name", "Patient name cannot be empty"),
    ("symptoms", "Symptoms cannot be empty"),
    ("diagnosis", "Diagnosis cannot be empty"),
    ("treatment", "Treatment cannot be empty"),
)


def validate_payload(**fields: str) -> None:
    """
    Check that every required record field is non-empty.

    Raises:
        RecordValidationError: For the first empty field, in the order
            patient_name, symptoms, diagnosis, treatment.
    """
    for name, message in _REQUIRED_FIELDS:
        if not fields.get(name):
            raise RecordValidationError(field=name, detail=message)


def to_response(record: HealthRecord) -> HealthRecordResponse:
    return HealthRecordResponse.from_record(record)


class RecordService:
    """
    Service layer for health record operations.

    Exposes get, create, update, delete, symptom/diagnosis search, and
    index rebuild over a single RecordStore.
    """

    def __init__(self, store: RecordStore, event_sink: EventSink):
        """
        Initialize the record service.

        Args:
            store: The process-wide RecordStore.
            event_sink: Receiver of (operation_name, record_id) events.
                        Both are injected via core.dependencies.get_record_service().
        """
        self._store = store
        self._events = event_sink

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    def get_record(self, record_id: int) -> HealthRecordResponse:
        """
        Get a health record by id.

        Raises:
            RecordNotFoundError: If no record exists with this id.
        """
        with self._store.lock:
            record = self._store.records.get(record_id)
        if record is None:
            raise RecordNotFoundError(record_id=record_id)
        return to_response(record)

    def search_by_symptom(self, token: str) -> List[HealthRecordResponse]:
        """Records whose symptoms contain the exact token; empty if none."""
        with self._store.lock:
            records = self._store.indexes.search_by_symptom(token)
        return [to_response(r) for r in records]

    def search_by_diagnosis(self, token: str) -> List[HealthRecordResponse]:
        """Records whose diagnosis contains the exact token; empty if none."""
        with self._store.lock:
            records = self._store.indexes.search_by_diagnosis(token)
        return [to_response(r) for r in records]

    # -------------------------------------------------------------------------
    # Mutations
    # -------------------------------------------------------------------------

    def create_record(
        self,
        patient_name: str,
        symptoms: str,
        diagnosis: str,
        treatment: str
    ) -> HealthRecordResponse:
        """
        Create a health record.

        Returns:
            HealthRecordResponse: The stored record with its assigned id.

        Raises:
            RecordValidationError: If a required field is empty.
            InsertionFailedError: If the primary store rejects the write.
        """
        validate_payload(
            patient_name=patient_name,
            symptoms=symptoms,
            diagnosis=diagnosis,
            treatment=treatment
        )

        with self._store.lock:
            record = HealthRecord(
                id=self._store.id_counter.next_id(),
                patient_name=patient_name,
                symptoms=symptoms,
                diagnosis=diagnosis,
                treatment=treatment,
                created_at=utc_now(),
                updated_at=None,
            )
            self._store.records.put(record)
            self._store.indexes.index_record(record)
            self._report(ADD_HEALTH_RECORD, record.id)

        logger.info(f"Health record created (id={record.id})")
        return to_response(record)

    def update_record(
        self,
        record_id: int,
        patient_name: str,
        symptoms: str,
        diagnosis: str,
        treatment: str
    ) -> HealthRecordResponse:
        """
        Replace the content fields of an existing record.

        The record keeps its id and created_at; updated_at is set to now.
        Its old symptom and diagnosis tokens stop matching it.

        Raises:
            RecordValidationError: If a required field is empty.
            RecordNotFoundError: If no record exists with this id.
            InsertionFailedError: If the primary store rejects the write.
        """
        validate_payload(
            patient_name=patient_name,
            symptoms=symptoms,
            diagnosis=diagnosis,
            treatment=treatment
        )

        with self._store.lock:
            old = self._store.records.get(record_id)
            if old is None:
                raise RecordNotFoundError(
                    record_id=record_id,
                    detail=f"couldn't update a health record with id={record_id}. Record not found"
                )

            record = HealthRecord(
                id=old.id,
                patient_name=patient_name,
                symptoms=symptoms,
                diagnosis=diagnosis,
                treatment=treatment,
                created_at=old.created_at,
                updated_at=utc_now(),
            )
            self._store.records.put(record)
            self._store.indexes.reindex_record(old, record)
            self._report(UPDATE_HEALTH_RECORD, record_id)

        logger.info(f"Health record updated (id={record_id})")
        return to_response(record)

    def delete_record(self, record_id: int) -> HealthRecordResponse:
        """
        Delete a record and return it as it was before removal.

        Raises:
            RecordNotFoundError: If no record exists with this id.
        """
        with self._store.lock:
            record = self._store.records.remove(record_id)
            if record is None:
                raise RecordNotFoundError(
                    record_id=record_id,
                    detail=f"couldn't delete a health record with id={record_id}. Record not found."
                )
            self._store.indexes.unindex_record(record)
            self._report(DELETE_HEALTH_RECORD, record_id)

        logger.info(f"Health record deleted (id={record_id})")
        return to_response(record)

    def rebuild_indexes(self) -> Dict[str, int]:
        """Re-derive the symptom and diagnosis indexes from the primary store."""
        logger.info("Rebuilding secondary indexes from primary store")
        return self._store.rebuild_indexes()

    def _report(self, operation: str, record_id: int) -> None:
        # The mutation has already happened; a failing sink must not undo or fail it.
        try:
            self._events.report(operation, record_id)
        except Exception:
            logger.exception(
                "Event sink failed to report record event",
                extra={"event_type": operation, "record_id": record_id}
            )
