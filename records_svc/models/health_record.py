"""
Domain model for health records.
"""
import json
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, Optional

from core.datetime_utils import to_db_string, from_db_string

# Delimiter between symptom/diagnosis tokens
TOKEN_DELIMITER = ","


@dataclass
class HealthRecord:
    """Model representing a stored health record."""

    id: int
    patient_name: str
    symptoms: str
    diagnosis: str
    treatment: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    def copy(self) -> "HealthRecord":
        return replace(self)

    def to_dict(self) -> Dict[str, Any]:
        """Convert record to dictionary for storage."""
        return {
            "id": self.id,
            "patient_name": self.patient_name,
            "symptoms": self.symptoms,
            "diagnosis": self.diagnosis,
            "treatment": self.treatment,
            "created_at": to_db_string(self.created_at),
            "updated_at": to_db_string(self.updated_at) if self.updated_at is not None else None,
        }

    def encode(self) -> bytes:
        """Canonical serialized form, used for the record size bound."""
        return json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":")).encode("utf-8")

    @classmethod
    def from_row(cls, row: tuple) -> "HealthRecord":
        """
        Create a HealthRecord from a database row tuple.

        Args:
            row: Tuple of (id, patient_name, symptoms, diagnosis, treatment,
                 created_at, updated_at) from database query.
        """
        return cls(
            id=row[0],
            patient_name=row[1],
            symptoms=row[2],
            diagnosis=row[3],
            treatment=row[4],
            created_at=from_db_string(row[5]),
            updated_at=from_db_string(row[6]),
        )
