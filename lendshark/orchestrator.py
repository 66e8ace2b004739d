"""
Main Orchestrator for LendShark

This module ties together all the components and defines the
end-to-end flows for:
1. Submission (text → parse → validate → save, or → settle)
2. Direct record management (add / update / delete / settle)
3. Balances (stored snapshot → per-party summaries → totals)

DESIGN DECISION: The orchestrator enforces the boundaries:
- Nothing is stored without passing the validator
- Parse and validation errors are returned to the caller, never raised
- Storage failures are audited and then propagate
- Every step is audited

The parser, validator and ledger stay pure; all I/O happens here.
"""

from datetime import datetime
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel

from lendshark.audit import AuditLogger, configure_logging, create_correlation_id
from lendshark.config import LedgerSettings, get_settings
from lendshark.ledger import DebtLedger
from lendshark.models.errors import LedgerError
from lendshark.models.result import Err, Ok
from lendshark.models.transaction import (
    AddAction,
    BalanceOverview,
    DebtorSummary,
    FieldKind,
    SettleAction,
    TransactionRecord,
)
from lendshark.parsing import TransactionParser
from lendshark.services.storage import (
    InMemoryAuditStorage,
    InMemoryTransactionStorage,
    StorageError,
    TransactionStorageInterface,
)
from lendshark.validation import TransactionValidator


class SubmissionOutcome(BaseModel):
    """What happened to one submitted line of text."""

    success: bool
    action: Optional[Literal["add", "settle"]] = None
    record: Optional[TransactionRecord] = None
    party: Optional[str] = None
    settled_count: int = 0

    # Set when success is False; message is user-facing
    error_type: Optional[str] = None
    message: Optional[str] = None

    @classmethod
    def failed(cls, error: LedgerError) -> "SubmissionOutcome":
        return cls(success=False, error_type=type(error).__name__, message=error.message)


class LedgerFlow:
    """
    Orchestrates every operation that reads or changes the ledger.

    Flow for a submission:
    1. Parse → AddAction or SettleAction (or a ParsingError)
    2. Add → validate → save
    3. Settle → mark all of the party's open transactions settled
    """

    def __init__(
        self,
        storage: TransactionStorageInterface,
        parser: Optional[TransactionParser] = None,
        validator: Optional[TransactionValidator] = None,
        ledger: Optional[DebtLedger] = None,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[LedgerSettings] = None,
    ):
        settings = settings or get_settings().ledger
        self._storage = storage
        self._validator = validator or TransactionValidator(settings)
        self._parser = parser or TransactionParser(self._validator)
        self._ledger = ledger or DebtLedger(settings)
        self._audit_logger = audit_logger

    async def submit(
        self,
        text: str,
        correlation_id: Optional[UUID] = None,
    ) -> SubmissionOutcome:
        """
        Handle one line of user input end to end.

        Parsing and validation problems come back in the outcome
        with a message for the user. Storage errors are raised, and
        any other failure is audited as a system error and raised.
        """
        correlation_id = correlation_id or create_correlation_id()

        if self._audit_logger:
            await self._audit_logger.log_input_received(text, correlation_id)

        try:
            return await self._apply(text, correlation_id)
        except StorageError:
            raise
        except Exception as e:
            if self._audit_logger:
                await self._audit_logger.log_error(
                    error_type=type(e).__name__,
                    error_message=str(e),
                    details={"operation": "submit"},
                    correlation_id=correlation_id,
                )
            raise

    async def _apply(self, text: str, correlation_id: UUID) -> SubmissionOutcome:
        match self._parser.parse(text):
            case Err(error=error):
                if self._audit_logger:
                    await self._audit_logger.log_parse_failed(
                        error_type=type(error).__name__,
                        message=error.message,
                        correlation_id=correlation_id,
                    )
                return SubmissionOutcome.failed(error)

            case Ok(value=SettleAction(party=party)):
                if self._audit_logger:
                    await self._audit_logger.log_parse_succeeded("settle", party, correlation_id)
                count = await self.settle_party(party, correlation_id=correlation_id)
                return SubmissionOutcome(
                    success=True,
                    action="settle",
                    party=party,
                    settled_count=count,
                )

            case Ok(value=AddAction(record=record)):
                if self._audit_logger:
                    await self._audit_logger.log_parse_succeeded("add", record.party, correlation_id)
                try:
                    saved = await self.record_transaction(record, correlation_id=correlation_id)
                except LedgerError as e:
                    return SubmissionOutcome.failed(e)
                return SubmissionOutcome(
                    success=True,
                    action="add",
                    record=saved,
                    party=saved.party,
                )

        raise TypeError(f"Unexpected parse result for input of length {len(text)}")

    async def record_transaction(
        self,
        record: TransactionRecord,
        correlation_id: Optional[UUID] = None,
    ) -> TransactionRecord:
        """
        Validate and save a transaction.

        Raises:
            ValidationError: If the record breaks a ledger constraint
            StorageError: If the backend fails
        """
        correlation_id = correlation_id or create_correlation_id()
        validated = await self._validated(record, correlation_id)

        try:
            saved = await self._storage.save_transaction(validated)
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_storage_error("save_transaction", str(e), correlation_id)
            raise

        if self._audit_logger:
            await self._audit_logger.log_transaction_saved(
                transaction_id=saved.id,
                party=saved.party,
                direction=saved.direction.value,
                amount=str(saved.amount) if saved.amount is not None else None,
                item=saved.item,
                correlation_id=correlation_id,
            )
        return saved

    async def update_transaction(
        self,
        record: TransactionRecord,
        correlation_id: Optional[UUID] = None,
    ) -> TransactionRecord:
        """
        Validate and store an edited transaction.

        Raises:
            ValidationError: If the edit breaks a ledger constraint
            NotFoundError: If the transaction doesn't exist
        """
        correlation_id = correlation_id or create_correlation_id()
        validated = await self._validated(record, correlation_id)

        try:
            updated = await self._storage.update_transaction(validated)
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_storage_error("update_transaction", str(e), correlation_id)
            raise

        if self._audit_logger:
            await self._audit_logger.log_transaction_updated(updated.id, correlation_id)
        return updated

    async def delete_transaction(
        self,
        transaction_id: UUID,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        correlation_id = correlation_id or create_correlation_id()

        try:
            await self._storage.delete_transaction(transaction_id)
        except StorageError as e:
            if self._audit_logger:
                await self._audit_logger.log_storage_error("delete_transaction", str(e), correlation_id)
            raise

        if self._audit_logger:
            await self._audit_logger.log_transaction_deleted(transaction_id, correlation_id)

    async def settle_party(
        self,
        party: str,
        correlation_id: Optional[UUID] = None,
    ) -> int:
        """
        Settle every open transaction with a party.

        Returns:
            Number of transactions settled (0 if there were none)
        """
        correlation_id = correlation_id or create_correlation_id()
        name = self._validator.sanitize(party, FieldKind.PARTY_NAME)
        if not name:
            return 0

        count = await self._storage.settle_party(name)

        if self._audit_logger:
            await self._audit_logger.log_party_settled(name, count, correlation_id)
        return count

    async def get_debtors(self, as_of: Optional[datetime] = None) -> list[DebtorSummary]:
        """Per-party summaries in display order."""
        snapshot = await self._storage.list_transactions(include_settled=False)
        summaries = self._ledger.summarize(snapshot, as_of=as_of)

        if self._audit_logger:
            await self._audit_logger.log_ledger_summarized(
                debtor_count=len(summaries),
                overdue_count=sum(1 for s in summaries if s.is_overdue),
            )
        return summaries

    async def get_balance(self, as_of: Optional[datetime] = None) -> BalanceOverview:
        """Headline totals: owed to me, I owe, net."""
        return self._ledger.balance_overview(await self.get_debtors(as_of=as_of))

    async def _validated(
        self,
        record: TransactionRecord,
        correlation_id: UUID,
    ) -> TransactionRecord:
        result = self._validator.validate(record)
        if isinstance(result, Err) and self._audit_logger:
            await self._audit_logger.log_validation_failed(
                transaction_id=record.id,
                error_type=type(result.error).__name__,
                message=result.error.message,
                correlation_id=correlation_id,
            )
        return result.unwrap()


def create_app_components(
    storage: Optional[TransactionStorageInterface] = None,
    settings: Optional[LedgerSettings] = None,
) -> tuple[LedgerFlow, AuditLogger]:
    """
    Factory function to create all application components.

    Args:
        storage: Transaction backend. Defaults to in-memory storage.
        settings: Ledger rules. Defaults to the application settings.

    Returns:
        (ledger_flow, audit_logger)
    """
    settings = settings or get_settings().ledger
    configure_logging(settings.log_level)

    audit_logger = AuditLogger(InMemoryAuditStorage())
    ledger_flow = LedgerFlow(
        storage=storage or InMemoryTransactionStorage(),
        audit_logger=audit_logger,
        settings=settings,
    )
    return ledger_flow, audit_logger
