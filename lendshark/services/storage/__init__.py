"""
Storage Services Package

Provides abstract interfaces and the in-memory reference implementation
for transaction and audit storage.
"""

from lendshark.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    NotFoundError,
    StorageError,
    TransactionStorageInterface,
)
from lendshark.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryTransactionStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "TransactionStorageInterface",
    # Exceptions
    "DuplicateError",
    "NotFoundError",
    "StorageError",
    # In-memory implementation
    "InMemoryAuditStorage",
    "InMemoryTransactionStorage",
]
