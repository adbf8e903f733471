"""
Pydantic schemas for health record-related API operations.
"""
from typing import Optional

from pydantic import BaseModel, Field

from models.health_record import HealthRecord
from core.datetime_utils import format_iso


class HealthRecordPayload(BaseModel):
    """Schema for creating or updating a health record.

    All four fields are required. Emptiness is checked by the service layer
    so the error names the first empty field.
    Symptoms and diagnosis are comma-separated token lists; tokens are matched
    exactly as written, including any surrounding spaces.
    """
    patient_name: str = Field(
        ...,
        description="Patient full name",
        example="Alice"
    )
    symptoms: str = Field(
        ...,
        description="Comma-separated symptom tokens",
        example="fever,cough"
    )
    diagnosis: str = Field(
        ...,
        description="Comma-separated diagnosis tokens",
        example="flu"
    )
    treatment: str = Field(
        ...,
        description="Prescribed treatment",
        example="rest"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "patient_name": "Alice",
                "symptoms": "fever,cough",
                "diagnosis": "flu",
                "treatment": "rest"
            }
        }


class HealthRecordResponse(BaseModel):
    """Schema for health record response."""
    id: int = Field(..., description="Unique, never reused record identifier", example=0)
    patient_name: str = Field(..., description="Patient full name", example="Alice")
    symptoms: str = Field(..., description="Comma-separated symptom tokens", example="fever,cough")
    diagnosis: str = Field(..., description="Comma-separated diagnosis tokens", example="flu")
    treatment: str = Field(..., description="Prescribed treatment", example="rest")
    created_at: str = Field(..., description="ISO format UTC timestamp of creation", example="2025-01-01T10:00:00Z")
    updated_at: Optional[str] = Field(None, description="ISO format UTC timestamp of the last update, null until updated")

    class Config:
        from_attributes = True
        json_schema_extra = {
            "example": {
                "id": 0,
                "patient_name": "Alice",
                "symptoms": "fever,cough",
                "diagnosis": "flu",
                "treatment": "rest",
                "created_at": "2025-01-01T10:00:00Z",
                "updated_at": None
            }
        }

    @classmethod
    def from_record(cls, record: HealthRecord) -> "HealthRecordResponse":
        return cls(
            id=record.id,
            patient_name=record.patient_name,
            symptoms=record.symptoms,
            diagnosis=record.diagnosis,
            treatment=record.treatment,
            created_at=format_iso(record.created_at),
            updated_at=format_iso(record.updated_at) if record.updated_at is not None else None,
        )


class IndexRebuildResponse(BaseModel):
    """Result of rebuilding the secondary indexes."""
    records: int = Field(..., description="Number of records indexed", example=3)
    symptom_tokens: int = Field(..., description="Distinct symptom tokens after rebuild", example=5)
    diagnosis_tokens: int = Field(..., description="Distinct diagnosis tokens after rebuild", example=2)
