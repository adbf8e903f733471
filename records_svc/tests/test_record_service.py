"""
Tests for RecordService: validation, store/index consistency, and event reporting.
"""
import pytest

from core.exceptions import (
    InsertionFailedError,
    RecordNotFoundError,
    RecordTooLargeError,
    RecordValidationError,
)
from repositories import InMemoryHealthRecordRepository, InMemoryIdCounter
from services.record_service import RecordService, validate_payload
from services.record_store import RecordStore


def ids(records):
    return [r.id for r in records]


# Create

def test_create_ids_strictly_increase(record_service, alice_payload):
    issued = [record_service.create_record(**alice_payload).id for _ in range(5)]
    assert issued == sorted(issued)
    assert len(set(issued)) == 5
    assert issued[0] == 0


def test_create_then_get_returns_equal_record(record_service, alice_payload):
    created = record_service.create_record(**alice_payload)
    assert record_service.get_record(created.id) == created
    assert created.updated_at is None


def test_create_reports_event(record_service, event_sink, alice_payload):
    created = record_service.create_record(**alice_payload)
    assert event_sink.events == [("add_health_record", created.id)]


@pytest.mark.parametrize("field", ["patient_name", "symptoms", "diagnosis", "treatment"])
def test_create_with_empty_field_has_no_side_effects(
    record_service, record_store, event_sink, alice_payload, field
):
    before = record_store.stats()

    with pytest.raises(RecordValidationError) as exc_info:
        record_service.create_record(**{**alice_payload, field: ""})

    assert exc_info.value.context["field"] == field
    assert record_store.stats() == before
    assert event_sink.events == []


def test_validation_reports_first_failing_field():
    with pytest.raises(RecordValidationError) as exc_info:
        validate_payload(patient_name="Alice", symptoms="", diagnosis="", treatment="")
    assert exc_info.value.context["field"] == "symptoms"
    assert exc_info.value.detail == "Symptoms cannot be empty"


def test_whitespace_is_not_empty(record_service):
    record = record_service.create_record(
        patient_name=" ", symptoms=" ", diagnosis=" ", treatment=" "
    )
    assert record.patient_name == " "


def test_oversize_create_leaves_indexes_untouched(record_service, record_store, event_sink):
    with pytest.raises(RecordTooLargeError):
        record_service.create_record(
            patient_name="Bob", symptoms="fever", diagnosis="flu", treatment="x" * 5000
        )

    assert record_store.records.count() == 0
    assert record_service.search_by_symptom("fever") == []
    assert event_sink.events == []

    # The consumed id is not reissued
    assert record_service.create_record(
        patient_name="Bob", symptoms="fever", diagnosis="flu", treatment="rest"
    ).id == 1


# Search

def test_search_by_symptom_exact_tokens(record_service, alice_payload):
    created = record_service.create_record(**alice_payload)

    assert record_service.search_by_symptom("fever") == [created]
    assert record_service.search_by_symptom("cough") == [created]
    assert record_service.search_by_symptom("feverish") == []
    assert record_service.search_by_symptom("fever,cough") == []


def test_search_tokens_are_not_trimmed(record_service):
    created = record_service.create_record(
        patient_name="Carol", symptoms="fever, cough", diagnosis="flu", treatment="rest"
    )
    assert record_service.search_by_symptom("cough") == []
    assert record_service.search_by_symptom(" cough") == [created]


def test_search_returns_insertion_order(record_service):
    first = record_service.create_record(
        patient_name="A", symptoms="fever", diagnosis="flu", treatment="rest"
    )
    second = record_service.create_record(
        patient_name="B", symptoms="chills,fever", diagnosis="cold", treatment="tea"
    )
    assert ids(record_service.search_by_symptom("fever")) == [first.id, second.id]


def test_repeated_token_returns_record_twice(record_service):
    created = record_service.create_record(
        patient_name="Dan", symptoms="cough,cough", diagnosis="flu", treatment="rest"
    )
    assert ids(record_service.search_by_symptom("cough")) == [created.id, created.id]


# Update

def test_update_replaces_content_and_reindexes(record_service, alice_payload):
    created = record_service.create_record(**alice_payload)

    updated = record_service.update_record(
        created.id,
        patient_name="Alice",
        symptoms="rash",
        diagnosis="measles",
        treatment="isolation",
    )

    assert updated.id == created.id
    assert updated.created_at == created.created_at
    assert updated.updated_at is not None
    assert record_service.get_record(created.id) == updated

    assert record_service.search_by_symptom("fever") == []
    assert record_service.search_by_symptom("cough") == []
    assert record_service.search_by_diagnosis("flu") == []
    assert record_service.search_by_symptom("rash") == [updated]
    assert record_service.search_by_diagnosis("measles") == [updated]


def test_update_keeping_a_token_does_not_duplicate_it(record_service, alice_payload):
    created = record_service.create_record(**alice_payload)
    record_service.update_record(created.id, **{**alice_payload, "symptoms": "fever"})

    assert ids(record_service.search_by_symptom("fever")) == [created.id]
    assert record_service.search_by_symptom("cough") == []


def test_update_reports_event(record_service, event_sink, alice_payload):
    created = record_service.create_record(**alice_payload)
    record_service.update_record(created.id, **alice_payload)
    assert event_sink.events[-1] == ("update_health_record", created.id)


def test_update_missing_record_raises_not_found(record_service, record_store, event_sink, alice_payload):
    before = record_store.stats()

    with pytest.raises(RecordNotFoundError):
        record_service.update_record(99, **alice_payload)

    assert record_store.stats() == before
    assert event_sink.events == []


def test_oversize_update_keeps_old_record_and_tokens(record_service, alice_payload):
    created = record_service.create_record(**alice_payload)

    with pytest.raises(InsertionFailedError):
        record_service.update_record(created.id, **{**alice_payload, "treatment": "x" * 5000})

    assert record_service.get_record(created.id) == created
    assert record_service.search_by_symptom("fever") == [created]


# Delete

def test_delete_example_flow(record_service, event_sink, alice_payload):
    created = record_service.create_record(**alice_payload)
    assert created.id == 0
    assert record_service.search_by_symptom("fever") == [created]

    assert record_service.delete_record(0) == created

    with pytest.raises(RecordNotFoundError):
        record_service.get_record(0)
    assert record_service.search_by_symptom("fever") == []
    assert record_service.search_by_diagnosis("flu") == []
    assert event_sink.events[-1] == ("delete_health_record", 0)


def test_delete_missing_record_raises_not_found(record_service, record_store, event_sink):
    before = record_store.stats()

    with pytest.raises(RecordNotFoundError):
        record_service.delete_record(5)

    assert record_store.stats() == before
    assert event_sink.events == []


def test_delete_leaves_other_records_searchable(record_service, alice_payload):
    first = record_service.create_record(**alice_payload)
    second = record_service.create_record(**alice_payload)

    record_service.delete_record(first.id)

    assert record_service.search_by_symptom("fever") == [second]


# Event sink failures

class FailingEventSink:
    def report(self, operation, record_id):
        raise RuntimeError("sink unavailable")


def test_failing_event_sink_does_not_fail_mutation(alice_payload):
    store = RecordStore(records=InMemoryHealthRecordRepository(), id_counter=InMemoryIdCounter())
    service = RecordService(store=store, event_sink=FailingEventSink())

    created = service.create_record(**alice_payload)

    assert service.get_record(created.id) == created
    assert service.search_by_symptom("fever") == [created]


# Index rebuild

def test_rebuild_indexes_repairs_corrupted_index(record_service, record_store, alice_payload):
    created = record_service.create_record(**alice_payload)
    record_store.indexes.symptoms.clear()
    assert record_service.search_by_symptom("fever") == []

    stats = record_service.rebuild_indexes()

    assert stats == {"records": 1, "symptom_tokens": 2, "diagnosis_tokens": 1}
    assert record_service.search_by_symptom("fever") == [created]


# Restart

def test_state_survives_restart_with_sqlite(temp_db, record_service, event_sink, alice_payload):
    from repositories import HealthRecordRepository, SqliteIdCounter

    created = record_service.create_record(**alice_payload)

    restarted_store = RecordStore(
        records=HealthRecordRepository(db=temp_db),
        id_counter=SqliteIdCounter(db=temp_db)
    )
    restarted_store.rebuild_indexes()
    restarted = RecordService(store=restarted_store, event_sink=event_sink)

    assert restarted.get_record(created.id) == created
    assert restarted.search_by_symptom("cough") == [created]
    assert restarted.create_record(**alice_payload).id == created.id + 1
