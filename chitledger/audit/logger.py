"""
Audit Logger

DESIGN DECISION: Every mutation of the ledger is logged.
This provides:
1. Complete traceability of collections and allotments
2. Debugging capability
3. A recent-activity trail the UI can show

The audit logger:
- Writes one structured (JSON) log line per event
- Keeps a bounded in-memory trail of the most recent events
- Never raises into the caller
"""

import logging
from collections import deque
from typing import Optional

import structlog

from chitledger.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


def get_logger(name: Optional[str] = None):
    """Module-level structured logger, configured as above."""
    return structlog.get_logger(name)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An in-memory trail of the last `trail_size` events
    """

    def __init__(self, trail_size: int = 200):
        self._trail: deque[AuditEvent] = deque(maxlen=trail_size)
        self._logger = structlog.get_logger("chitledger.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always keeps the event in the trail.

        Returns True if the structured log line was written.
        """
        self._trail.append(event)
        log_dict = event.to_log_dict()

        try:
            if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
                self._logger.error("audit_event", **log_dict)
            elif event.severity == AuditSeverity.WARNING:
                self._logger.warning("audit_event", **log_dict)
            else:
                self._logger.info("audit_event", **log_dict)
        except Exception as e:
            # Log failure but don't raise
            logging.getLogger("chitledger.audit").error(
                "audit_log_failed event_id=%s error=%s", event.event_id, e
            )
            return False

        return True

    def recent_events(self, limit: int = 50) -> list[AuditEvent]:
        """Most recent events, newest first."""
        return list(reversed(self._trail))[:limit]

    def events_of_type(self, event_type: AuditEventType) -> list[AuditEvent]:
        """Events of one type, oldest first."""
        return [e for e in self._trail if e.event_type == event_type]

    def log_rejection(
        self,
        event_type: AuditEventType,
        error_code: str,
        error_message: str,
        entity_type: Optional[str] = None,
        entity_id: Optional[str] = None,
        details: Optional[dict] = None,
    ) -> None:
        """Log a business-rule rejection."""
        self.log(AuditEventBuilder.rejected(
            event_type=event_type,
            error_code=error_code,
            error_message=error_message,
            entity_type=entity_type,
            entity_id=entity_id,
            details=details,
        ))

    def log_storage_error(self, error_code: str, error_message: str) -> None:
        """Log a failed store write."""
        self.log(AuditEventBuilder.storage_error(
            error_code=error_code,
            error_message=error_message,
        ))
