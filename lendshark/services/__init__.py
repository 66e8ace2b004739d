"""Services package."""

from lendshark.services.storage import (
    AuditStorageInterface,
    DuplicateError,
    InMemoryAuditStorage,
    InMemoryTransactionStorage,
    NotFoundError,
    StorageError,
    TransactionStorageInterface,
)

__all__ = [
    # Storage services
    "AuditStorageInterface",
    "DuplicateError",
    "InMemoryAuditStorage",
    "InMemoryTransactionStorage",
    "NotFoundError",
    "StorageError",
    "TransactionStorageInterface",
]
