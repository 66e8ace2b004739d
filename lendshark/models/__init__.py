"""
Data Models Package

This package contains the value types, result wrappers and errors used
across LendShark. Everything that crosses a component boundary is one
of these.
"""

from lendshark.models.transaction import (
    AddAction,
    BalanceOverview,
    BorrowedItem,
    DebtorSummary,
    Direction,
    FieldKind,
    ParsedAction,
    SettleAction,
    TransactionRecord,
)
from lendshark.models.errors import (
    ExcessiveLength,
    InjectionAttempt,
    InvalidAmount,
    InvalidFormat,
    InvalidItem,
    InvalidPartyName,
    LedgerError,
    MissingRequiredField,
    ParsingError,
    ValidationError,
)
from lendshark.models.result import Err, Ok, Result
from lendshark.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Transaction models
    "AddAction",
    "BalanceOverview",
    "BorrowedItem",
    "DebtorSummary",
    "Direction",
    "FieldKind",
    "ParsedAction",
    "SettleAction",
    "TransactionRecord",
    # Errors
    "ExcessiveLength",
    "InjectionAttempt",
    "InvalidAmount",
    "InvalidFormat",
    "InvalidItem",
    "InvalidPartyName",
    "LedgerError",
    "MissingRequiredField",
    "ParsingError",
    "ValidationError",
    # Results
    "Err",
    "Ok",
    "Result",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
