"""
In-Memory Storage Implementation

Reference implementation of the storage interfaces. Used by tests and
as the default backend when nothing else is configured.

Records are frozen pydantic models, so handing them out directly is
already copy-on-read: nobody can mutate what the store holds.
"""

from typing import Optional
from uuid import UUID

from lendshark.models.audit import AuditEvent
from lendshark.models.transaction import TransactionRecord
from lendshark.services.storage.interface import (
    AuditStorageInterface,
    DuplicateError,
    NotFoundError,
    TransactionStorageInterface,
)


class InMemoryTransactionStorage(TransactionStorageInterface):
    """Transactions kept in a dict keyed by id."""

    def __init__(self, records: Optional[list[TransactionRecord]] = None):
        self._records: dict[UUID, TransactionRecord] = {}
        for record in records or []:
            self._records[record.id] = record

    async def save_transaction(self, record: TransactionRecord) -> TransactionRecord:
        if record.id in self._records:
            raise DuplicateError(f"Transaction {record.id} already exists")
        stored = record
        if stored.storage_record_id is None:
            stored = record.with_changes(storage_record_id=f"mem-{record.id.hex}")
        self._records[stored.id] = stored
        return stored

    async def get_transaction(self, transaction_id: UUID) -> Optional[TransactionRecord]:
        return self._records.get(transaction_id)

    async def update_transaction(self, record: TransactionRecord) -> TransactionRecord:
        existing = self._records.get(record.id)
        if existing is None:
            raise NotFoundError(f"Transaction {record.id} not found")
        # id, timestamp and storage id are fixed at creation
        updated = record.with_changes(
            timestamp=existing.timestamp,
            storage_record_id=existing.storage_record_id,
        )
        self._records[record.id] = updated
        return updated

    async def delete_transaction(self, transaction_id: UUID) -> None:
        if transaction_id not in self._records:
            raise NotFoundError(f"Transaction {transaction_id} not found")
        del self._records[transaction_id]

    async def list_transactions(
        self,
        party: Optional[str] = None,
        include_settled: bool = True,
    ) -> list[TransactionRecord]:
        records = list(self._records.values())
        if party is not None:
            wanted = party.casefold()
            records = [r for r in records if r.party.casefold() == wanted]
        if not include_settled:
            records = [r for r in records if not r.settled]
        return sorted(records, key=lambda r: r.timestamp, reverse=True)

    async def settle_party(self, party: str) -> int:
        wanted = party.casefold()
        open_ids = [
            record_id
            for record_id, record in self._records.items()
            if not record.settled and record.party.casefold() == wanted
        ]
        for record_id in open_ids:
            self._records[record_id] = self._records[record_id].with_changes(settled=True)
        return len(open_ids)


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only list of audit events."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        return [e for e in self._events if e.correlation_id == correlation_id]
