"""
Audit Logger

DESIGN DECISION: Every line a user submits leaves a trail, from the raw
text through parsing and validation to the stored or settled records.
When a sentence is misread the trail shows which step read it wrong.

Events go to the JSON log first and to audit storage second. A failed
storage write is logged and reported as False; it never interrupts the
ledger operation that produced the event. One correlation id ties the
events of a single submission together.

The parser, validator and ledger never log; only the flows do.
"""

import logging
from typing import Optional
from uuid import UUID, uuid4

import structlog

from lendshark.config import get_settings
from lendshark.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from lendshark.services.storage import AuditStorageInterface


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


_LOG_LEVELS = {
    AuditSeverity.DEBUG: logging.DEBUG,
    AuditSeverity.INFO: logging.INFO,
    AuditSeverity.WARNING: logging.WARNING,
    AuditSeverity.ERROR: logging.ERROR,
    AuditSeverity.CRITICAL: logging.CRITICAL,
}


def configure_logging(level: Optional[str] = None) -> None:
    """Route stdlib logging (and so structlog) at the configured level."""
    logging.basicConfig(
        format="%(message)s",
        level=level or get_settings().ledger.log_level,
    )


class AuditLogger:
    """
    Writes ledger audit events to the JSON log and, when given one,
    to audit storage.
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Args:
            storage: Where events are kept for later review.
                     Without one, events only reach the log.
        """
        self._storage = storage
        self._logger = structlog.get_logger("lendshark.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Record one event.

        Returns:
            False only when audit storage rejected the event
        """
        level = _LOG_LEVELS.get(event.severity, logging.INFO)
        self._logger.log(level, "audit_event", **event.to_log_dict())

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_input_received(self, text: str, correlation_id: UUID) -> None:
        await self.log(AuditEventBuilder.input_received(text, correlation_id))

    async def log_parse_succeeded(
        self,
        action_kind: str,
        party: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.parse_succeeded(action_kind, party, correlation_id))

    async def log_parse_failed(
        self,
        error_type: str,
        message: str,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.parse_failed(error_type, message, correlation_id))

    async def log_validation_failed(
        self,
        transaction_id: UUID,
        error_type: str,
        message: str,
        correlation_id: UUID,
    ) -> None:
        """Log a record rejected by the validator."""
        event = AuditEventBuilder.validation_failed(
            transaction_id=transaction_id,
            error_type=error_type,
            message=message,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_transaction_saved(
        self,
        transaction_id: UUID,
        party: str,
        direction: str,
        amount: Optional[str],
        item: Optional[str],
        correlation_id: UUID,
    ) -> None:
        event = AuditEventBuilder.transaction_saved(
            transaction_id=transaction_id,
            party=party,
            direction=direction,
            amount=amount,
            item=item,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_transaction_updated(self, transaction_id: UUID, correlation_id: UUID) -> None:
        await self.log(AuditEventBuilder.transaction_updated(transaction_id, correlation_id))

    async def log_transaction_deleted(self, transaction_id: UUID, correlation_id: UUID) -> None:
        await self.log(AuditEventBuilder.transaction_deleted(transaction_id, correlation_id))

    async def log_party_settled(
        self,
        party: str,
        settled_count: int,
        correlation_id: UUID,
    ) -> None:
        await self.log(AuditEventBuilder.party_settled(party, settled_count, correlation_id))

    async def log_ledger_summarized(
        self,
        debtor_count: int,
        overdue_count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        await self.log(
            AuditEventBuilder.ledger_summarized(debtor_count, overdue_count, correlation_id)
        )

    async def log_storage_error(
        self,
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed storage call."""
        await self.log(AuditEventBuilder.storage_error(operation, error_message, correlation_id))

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """New id shared by every event of one submitted line."""
    return uuid4()
