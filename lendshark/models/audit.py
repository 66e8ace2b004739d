"""
Audit Models for LendShark

An audit event records one step of a ledger operation: the text that
came in, how it was read, what was stored or settled, and what failed.
After a settlement wipes a balance, the events still show who was
charged what and when.

DESIGN DECISION: The audit trail is append-only. Events are never
edited or removed, not even when the transaction they describe is.
"""

import json
from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from lendshark.utils.dates import utc_now


class AuditEventType(str, Enum):
    """
    Pipeline step an event belongs to.
    """
    # Input
    INPUT_RECEIVED = "input_received"
    PARSE_SUCCEEDED = "parse_succeeded"
    PARSE_FAILED = "parse_failed"

    # Validation
    VALIDATION_FAILED = "validation_failed"

    # Persistence
    TRANSACTION_SAVED = "transaction_saved"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"
    PARTY_SETTLED = "party_settled"

    # Reads
    LEDGER_SUMMARIZED = "ledger_summarized"

    # System events
    SYSTEM_ERROR = "system_error"
    STORAGE_ERROR = "storage_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    One step of one ledger operation.

    `correlation_id` groups the steps of a single submitted line.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Event id"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="Aware UTC instant the step happened"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Transaction, party or input the event is about
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transaction', 'party', 'input')"
    )
    entity_id: Optional[UUID] = None

    # Groups the events of one submission
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., all events of one submission)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="One line a person can read in the history view"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    # Failures only
    error_message: Optional[str] = None

    is_user_action: bool = False

    def to_log_dict(self) -> dict:
        """
        Keyword arguments for the structlog call; every value is JSON-safe.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": str(self.entity_id) if self.entity_id else None,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_row(self) -> list:
        """
        Flatten to a row for tabular audit storage.

        Columns: [event_id, timestamp, event_type, severity, entity_type,
        entity_id, correlation_id, description, details_json,
        error_message, is_user_action]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            str(self.entity_id) if self.entity_id else "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
            str(self.is_user_action),
        ]


class AuditEventBuilder:
    """
    One constructor per event type, so flows never assemble events by hand.

    Usage:
        event = AuditEventBuilder.input_received(text, correlation_id)
        event = AuditEventBuilder.party_settled("bob", 3, correlation_id)
    """

    @staticmethod
    def input_received(
        text: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INPUT_RECEIVED,
            entity_type="input",
            correlation_id=correlation_id,
            description="Ledger entry submitted",
            details={"length": len(text)},
            is_user_action=True,
        )

    @staticmethod
    def parse_succeeded(
        action_kind: str,
        party: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PARSE_SUCCEEDED,
            entity_type="input",
            correlation_id=correlation_id,
            description=f"Parsed as {action_kind} for {party}",
            details={"action": action_kind, "party": party},
        )

    @staticmethod
    def parse_failed(
        error_type: str,
        message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PARSE_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="input",
            correlation_id=correlation_id,
            description="Entry could not be parsed",
            details={"error_type": error_type},
            error_message=message,
        )

    @staticmethod
    def validation_failed(
        transaction_id: UUID,
        error_type: str,
        message: str,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.VALIDATION_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description="Transaction failed validation",
            details={"error_type": error_type},
            error_message=message,
        )

    @staticmethod
    def transaction_saved(
        transaction_id: UUID,
        party: str,
        direction: str,
        amount: Optional[str],
        item: Optional[str],
        correlation_id: UUID
    ) -> AuditEvent:
        what = amount if amount is not None else (item or "item")
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_SAVED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description=f"Transaction saved: {direction} {what} ({party})",
            details={
                "party": party,
                "direction": direction,
                "amount": amount,
                "item": item,
            },
        )

    @staticmethod
    def transaction_updated(
        transaction_id: UUID,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_UPDATED,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description="Transaction updated",
            is_user_action=True,
        )

    @staticmethod
    def transaction_deleted(
        transaction_id: UUID,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TRANSACTION_DELETED,
            severity=AuditSeverity.WARNING,
            entity_type="transaction",
            entity_id=transaction_id,
            correlation_id=correlation_id,
            description="Transaction deleted",
            is_user_action=True,
        )

    @staticmethod
    def party_settled(
        party: str,
        settled_count: int,
        correlation_id: UUID
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PARTY_SETTLED,
            entity_type="party",
            correlation_id=correlation_id,
            description=f"Settled {settled_count} transactions with {party}",
            details={"party": party, "settled_count": settled_count},
            is_user_action=True,
        )

    @staticmethod
    def ledger_summarized(
        debtor_count: int,
        overdue_count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.LEDGER_SUMMARIZED,
            severity=AuditSeverity.DEBUG,
            entity_type="ledger",
            correlation_id=correlation_id,
            description=f"Ledger summarized: {debtor_count} parties, {overdue_count} overdue",
            details={"debtor_count": debtor_count, "overdue_count": overdue_count},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def storage_error(
        operation: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"Storage error during {operation}",
            error_message=error_message,
            details={"operation": operation},
            correlation_id=correlation_id,
        )
