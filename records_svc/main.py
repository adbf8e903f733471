"""
FastAPI application entry point for Health Records Service API.

This module configures and creates the FastAPI application with:
- Structured JSON Logging with request ID propagation
- Dependency Injection: RecordService injected via Depends()
- Exception Handling: Consistent error responses via setup_exception_handlers()
- CORS Middleware
- Lifespan Management: record store initialization and index rebuild
- Metrics Collection: In-memory metrics for Prometheus scraping

Architecture Overview:
    ┌─────────────────────────────────────────────────────────────┐
    │                     FastAPI Application                     │
    ├─────────────────────────────────────────────────────────────┤
    │  Middleware: LoggingMiddleware -> CORSMiddleware            │
    ├─────────────────────────────────────────────────────────────┤
    │  Routers (api/routers/)                                     │
    │    ├── health.py     - /health, /ready, /metrics            │
    │    └── records.py    - record CRUD, search, reindex         │
    ├─────────────────────────────────────────────────────────────┤
    │  RecordService (services/record_service.py)                 │
    ├─────────────────────────────────────────────────────────────┤
    │  RecordStore: primary store + id counter + indexes + lock   │
    ├─────────────────────────────────────────────────────────────┤
    │  Repositories: SQLite or in-memory                          │
    └─────────────────────────────────────────────────────────────┘
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
import uvicorn

from core.config import API_HOST, API_PORT, API_RELOAD, STORAGE_BACKEND
from core.dependencies import get_record_store
from core.exceptions import setup_exception_handlers
from core.logging_config import setup_logging
from core.middleware import LoggingMiddleware
from api.routers import health_router, records_router


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Startup:
        - Configures structured JSON logging
        - Opens the record store and rebuilds the secondary indexes

    Shutdown:
        - Logs shutdown message
    """
    # Configure logging before anything else logs
    setup_logging(level="INFO", json_format=True)

    logger = logging.getLogger(__name__)
    logger.info("Starting Health Records Service API...")

    store = get_record_store()
    logger.info(
        "Record store initialized",
        extra={"backend": STORAGE_BACKEND, **store.stats()}
    )

    yield

    logger.info("Health Records Service API shutting down...")


app = FastAPI(
    title="Health Records Service API",
    description="REST API for health records with lookup by symptom and diagnosis.",
    version="1.0.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan
)

setup_exception_handlers(app)

# Middleware is executed in REVERSE order of registration.
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(LoggingMiddleware)

app.include_router(health_router)
app.include_router(records_router)


if __name__ == "__main__":
    uvicorn.run(
        "main:app",
        host=API_HOST,
        port=API_PORT,
        reload=API_RELOAD
    )
