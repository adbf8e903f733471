"""
Domain models for the health records service.
"""
from models.health_record import HealthRecord, TOKEN_DELIMITER

__all__ = ["HealthRecord", "TOKEN_DELIMITER"]
