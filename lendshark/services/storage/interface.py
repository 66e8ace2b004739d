"""
Abstract Storage Interface

DESIGN DECISION: The ledger core never touches storage. Whatever keeps
the transactions (SQLite, a sync service, a spreadsheet) implements
this interface, and the flows in lendshark.orchestrator talk only to it.
This allows us to:
1. Swap the backend without touching parsing or balance logic
2. Use in-memory storage for testing
3. Hand the ledger a consistent snapshot on every read

The interface is intentionally small - just what the ledger needs.
"""

from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID

from lendshark.models.audit import AuditEvent
from lendshark.models.transaction import TransactionRecord


class TransactionStorageInterface(ABC):
    """
    Abstract interface for transaction storage operations.

    Implementations must return copies (snapshots), never live objects
    that a later write could change under a reader.
    """

    @abstractmethod
    async def save_transaction(self, record: TransactionRecord) -> TransactionRecord:
        """
        Save a new transaction.

        Args:
            record: A validated transaction

        Returns:
            The stored record (may carry a storage_record_id)

        Raises:
            DuplicateError: If a transaction with this id already exists
        """
        pass

    @abstractmethod
    async def get_transaction(self, transaction_id: UUID) -> Optional[TransactionRecord]:
        """
        Retrieve a transaction by its ID.

        Returns:
            The transaction if found, None otherwise
        """
        pass

    @abstractmethod
    async def update_transaction(self, record: TransactionRecord) -> TransactionRecord:
        """
        Replace an existing transaction.

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        pass

    @abstractmethod
    async def delete_transaction(self, transaction_id: UUID) -> None:
        """
        Delete a transaction by ID.

        Raises:
            NotFoundError: If the transaction doesn't exist
        """
        pass

    @abstractmethod
    async def list_transactions(
        self,
        party: Optional[str] = None,
        include_settled: bool = True,
    ) -> list[TransactionRecord]:
        """
        List transactions, newest first.

        Args:
            party: Only this party (case-insensitive)
            include_settled: Include settled transactions
        """
        pass

    @abstractmethod
    async def settle_party(self, party: str) -> int:
        """
        Mark every unsettled transaction with a party as settled.

        Party matching is case-insensitive.

        Returns:
            Number of transactions settled
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """
        Get all events for a correlation ID (e.g., one submission).

        Returns:
            List of related events in chronological order
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass
