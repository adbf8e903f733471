"""
Tests for health record endpoints.
"""
import pytest


def create(client, **overrides):
    payload = {
        "patient_name": "Alice",
        "symptoms": "fever,cough",
        "diagnosis": "flu",
        "treatment": "rest",
    }
    payload.update(overrides)
    return client.post("/api/v1/records", json=payload)


# Create

def test_create_record_success(client, alice_payload):
    """Test successful health record creation."""
    response = client.post("/api/v1/records", json=alice_payload)
    assert response.status_code == 201
    data = response.json()
    assert data["id"] == 0
    assert data["patient_name"] == "Alice"
    assert data["symptoms"] == "fever,cough"
    assert data["diagnosis"] == "flu"
    assert data["treatment"] == "rest"
    assert data["created_at"].endswith("Z")
    assert data["updated_at"] is None


def test_create_record_assigns_increasing_ids(client):
    ids = [create(client).json()["id"] for _ in range(3)]
    assert ids == [0, 1, 2]


@pytest.mark.parametrize("field, message", [
    ("patient_name", "Patient name cannot be empty"),
    ("symptoms", "Symptoms cannot be empty"),
    ("diagnosis", "Diagnosis cannot be empty"),
    ("treatment", "Treatment cannot be empty"),
])
def test_create_record_empty_field_returns_400(client, field, message):
    response = create(client, **{field: ""})
    assert response.status_code == 400
    body = response.json()
    assert body["detail"] == message
    assert body["context"]["field"] == field


def test_create_record_missing_field_fails_schema_validation(client):
    """Test record creation with a missing field fails request validation."""
    response = client.post(
        "/api/v1/records",
        json={"patient_name": "Alice", "symptoms": "fever", "diagnosis": "flu"}
    )
    assert response.status_code == 422


def test_create_record_too_large_returns_413(client):
    response = create(client, treatment="x" * 2000)
    assert response.status_code == 413
    assert response.json()["context"]["max_size"] == 1024

    # Nothing stored, nothing indexed
    assert client.get("/api/v1/records/search/symptom", params={"token": "fever"}).json() == []


# Get

def test_get_record(client, alice_payload):
    created = client.post("/api/v1/records", json=alice_payload).json()

    response = client.get(f"/api/v1/records/{created['id']}")
    assert response.status_code == 200
    assert response.json() == created


def test_get_record_not_found(client):
    response = client.get("/api/v1/records/42")
    assert response.status_code == 404
    assert "not found" in response.json()["detail"].lower()
    assert response.json()["context"]["record_id"] == 42


# Search

def test_search_by_symptom_matches_each_token(client, alice_payload):
    created = client.post("/api/v1/records", json=alice_payload).json()

    for token in ("fever", "cough"):
        response = client.get("/api/v1/records/search/symptom", params={"token": token})
        assert response.status_code == 200
        assert response.json() == [created]

    response = client.get("/api/v1/records/search/symptom", params={"token": "feverish"})
    assert response.status_code == 200
    assert response.json() == []


def test_search_by_diagnosis(client):
    flu = create(client, diagnosis="flu").json()
    create(client, diagnosis="cold")

    response = client.get("/api/v1/records/search/diagnosis", params={"token": "flu"})
    assert response.status_code == 200
    assert [r["id"] for r in response.json()] == [flu["id"]]


def test_search_requires_token(client):
    response = client.get("/api/v1/records/search/symptom")
    assert response.status_code == 422


# Update

def test_update_record(client, alice_payload):
    created = client.post("/api/v1/records", json=alice_payload).json()

    response = client.put(
        f"/api/v1/records/{created['id']}",
        json={
            "patient_name": "Alice Smith",
            "symptoms": "headache",
            "diagnosis": "migraine",
            "treatment": "ibuprofen",
        }
    )
    assert response.status_code == 200
    data = response.json()
    assert data["id"] == created["id"]
    assert data["created_at"] == created["created_at"]
    assert data["patient_name"] == "Alice Smith"
    assert data["updated_at"] is not None

    assert client.get(f"/api/v1/records/{created['id']}").json() == data
    assert client.get("/api/v1/records/search/symptom", params={"token": "fever"}).json() == []
    assert client.get("/api/v1/records/search/diagnosis", params={"token": "flu"}).json() == []
    assert client.get(
        "/api/v1/records/search/diagnosis", params={"token": "migraine"}
    ).json() == [data]


def test_update_record_not_found(client, alice_payload):
    response = client.put("/api/v1/records/7", json=alice_payload)
    assert response.status_code == 404


def test_update_record_validation_checked_before_lookup(client, alice_payload):
    response = client.put("/api/v1/records/7", json={**alice_payload, "treatment": ""})
    assert response.status_code == 400
    assert response.json()["context"]["field"] == "treatment"


# Delete

def test_delete_record_example_flow(client, alice_payload):
    """Create, search, delete, then confirm the record is gone everywhere."""
    created = client.post("/api/v1/records", json=alice_payload).json()
    assert created["id"] == 0

    assert client.get("/api/v1/records/search/symptom", params={"token": "fever"}).json() == [created]

    response = client.delete("/api/v1/records/0")
    assert response.status_code == 200
    assert response.json() == created

    assert client.get("/api/v1/records/0").status_code == 404
    assert client.get("/api/v1/records/search/symptom", params={"token": "fever"}).json() == []
    assert client.get("/api/v1/records/search/diagnosis", params={"token": "flu"}).json() == []


def test_delete_record_not_found(client):
    response = client.delete("/api/v1/records/3")
    assert response.status_code == 404


def test_ids_not_reused_after_delete(client):
    first = create(client).json()
    client.delete(f"/api/v1/records/{first['id']}")

    second = create(client).json()
    assert second["id"] == first["id"] + 1


# Reindex

def test_reindex_returns_stats(client):
    create(client, symptoms="fever,cough", diagnosis="flu")
    create(client, symptoms="fever", diagnosis="cold")

    response = client.post("/api/v1/records/reindex")
    assert response.status_code == 200
    assert response.json() == {"records": 2, "symptom_tokens": 2, "diagnosis_tokens": 2}


# Identifier range

MAX_U64 = 18446744073709551615


@pytest.mark.parametrize("method", ["get", "put", "delete"])
def test_largest_unsigned_id_returns_404(client, alice_payload, method):
    kwargs = {"json": alice_payload} if method == "put" else {}
    response = client.request(method.upper(), f"/api/v1/records/{MAX_U64}", **kwargs)
    assert response.status_code == 404
    assert response.json()["context"]["record_id"] == MAX_U64


@pytest.mark.parametrize("record_id", [-1, MAX_U64 + 1])
def test_out_of_range_id_fails_schema_validation(client, record_id):
    response = client.get(f"/api/v1/records/{record_id}")
    assert response.status_code == 422


# Encoding

def test_create_record_with_lone_surrogate_returns_500(client):
    body = (
        b'{"patient_name": "A\\ud800", "symptoms": "fever", '
        b'"diagnosis": "flu", "treatment": "rest"}'
    )
    response = client.post(
        "/api/v1/records",
        content=body,
        headers={"Content-Type": "application/json"},
    )

    assert response.status_code == 500
    assert response.json()["context"]["record_id"] == 0
    assert client.get("/api/v1/records/0").status_code == 404

    # The id consumed by the failed write is not reissued
    assert create(client).json()["id"] == 1
