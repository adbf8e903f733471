"""
Configuration module for Health Records Service API.
Uses Pydantic BaseSettings for validation - app fails fast if config is invalid.
"""
import logging
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)

# Supported primary store backends
STORAGE_BACKENDS = ("sqlite", "memory")


class Settings(BaseSettings):
    """
    Application settings with validation.
    Invalid values cause the app to fail fast at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database Configuration
    records_svc_db_dir: str = Field(default="data", description="Database directory")
    records_svc_db_file: str = Field(default="health_records.db", description="Database filename")
    records_svc_db_busy_timeout: int = Field(default=5000, description="SQLite busy timeout in milliseconds")

    # Record Store Configuration
    records_svc_storage_backend: str = Field(
        default="sqlite",
        description="Primary store backend: 'sqlite' (durable) or 'memory' (ephemeral)"
    )
    records_svc_max_record_size: int = Field(
        default=1024,
        description="Maximum encoded size of a single record in bytes"
    )

    # API Configuration
    records_svc_host: str = Field(default="0.0.0.0", description="API host")
    records_svc_port: int = Field(default=8000, description="API port")
    records_svc_reload: bool = Field(default=False, description="Enable hot reload")

    @model_validator(mode="after")
    def validate_store_settings(self) -> "Settings":
        """
        Validate record store settings at startup and fail fast with clear error messages.
        """
        backend = self.records_svc_storage_backend.lower()
        if backend not in STORAGE_BACKENDS:
            raise ValueError(
                f"records_svc_storage_backend must be one of {STORAGE_BACKENDS}, got '{backend}'"
            )
        self.records_svc_storage_backend = backend

        if self.records_svc_max_record_size <= 0:
            raise ValueError("records_svc_max_record_size must be a positive number of bytes")

        if backend == "memory":
            logger.warning(
                "In-memory storage backend selected - records will not survive a restart"
            )

        return self

    @property
    def database_path(self) -> str:
        """Get the full database path."""
        return str(Path(self.records_svc_db_dir) / self.records_svc_db_file)

    def ensure_directories(self) -> None:
        """Ensure required directories exist."""
        if self.records_svc_storage_backend == "sqlite":
            Path(self.records_svc_db_dir).mkdir(parents=True, exist_ok=True)


# Create global settings instance - fails fast if config is invalid
settings = Settings()

# Ensure directories exist on import
settings.ensure_directories()

# Module-level exports for code that does not need the settings object
DATABASE_DIR = settings.records_svc_db_dir
DATABASE_FILE = settings.records_svc_db_file
DATABASE_PATH = settings.database_path
DATABASE_BUSY_TIMEOUT = settings.records_svc_db_busy_timeout

STORAGE_BACKEND = settings.records_svc_storage_backend
MAX_RECORD_SIZE = settings.records_svc_max_record_size

API_HOST = settings.records_svc_host
API_PORT = settings.records_svc_port
API_RELOAD = settings.records_svc_reload
