"""
Event reporting for record mutations.

Every successful create, update, and delete reports (operation_name, record_id)
to an event sink. The default sink writes a structured log line and bumps the
per-operation counters exposed on /metrics.
"""
import logging
from typing import Optional, Protocol

from core.middleware import MetricsCollector, get_metrics_collector

logger = logging.getLogger(__name__)

# Operation names reported for record mutations
ADD_HEALTH_RECORD = "add_health_record"
UPDATE_HEALTH_RECORD = "update_health_record"
DELETE_HEALTH_RECORD = "delete_health_record"


class EventSink(Protocol):
    """Receiver of record mutation events."""

    def report(self, operation: str, record_id: int) -> None: ...


class LoggingEventSink:
    """Event sink that logs each event and counts it in the metrics collector."""

    def __init__(self, collector: Optional[MetricsCollector] = None):
        self._collector = collector or get_metrics_collector()

    def report(self, operation: str, record_id: int) -> None:
        logger.info(
            f"Event logged: Type={operation}, Record ID={record_id}",
            extra={"event_type": operation, "record_id": record_id}
        )
        self._collector.record_event(operation)
