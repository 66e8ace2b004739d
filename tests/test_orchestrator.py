"""
Integration tests for LedgerFlow over in-memory storage.

Async flows are driven with asyncio.run, one event loop per test.
"""

import asyncio
from decimal import Decimal
from uuid import uuid4

import pytest

from lendshark.audit import AuditLogger, create_correlation_id
from lendshark.models import AuditEventType, Direction, InvalidAmount, TransactionRecord
from lendshark.orchestrator import LedgerFlow, SubmissionOutcome, create_app_components
from lendshark.services.storage import (
    InMemoryAuditStorage,
    InMemoryTransactionStorage,
    NotFoundError,
    StorageError,
)


class FailingStorage(InMemoryTransactionStorage):
    """Backend whose writes always fail."""

    async def save_transaction(self, record):
        raise StorageError("backend offline")


class BrokenStorage(InMemoryTransactionStorage):
    """Backend with a bug that raises something other than StorageError."""

    async def save_transaction(self, record):
        raise RuntimeError("unexpected backend state")


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def storage():
    return InMemoryTransactionStorage()


@pytest.fixture
def flow(storage, parser, validator, ledger, audit_storage, settings):
    return LedgerFlow(
        storage=storage,
        parser=parser,
        validator=validator,
        ledger=ledger,
        audit_logger=AuditLogger(audit_storage),
        settings=settings,
    )


def event_types(audit_storage, correlation_id):
    events = asyncio.run(audit_storage.get_events_by_correlation_id(correlation_id))
    return [e.event_type for e in events]


class TestSubmit:
    """Tests for end-to-end text submission."""

    def test_add_is_saved(self, flow, storage, now):
        """Test a lend sentence ends up in storage."""
        outcome = asyncio.run(flow.submit("lent 50 to john"))

        assert outcome.success
        assert outcome.action == "add"
        assert outcome.party == "john"
        assert outcome.record.amount == Decimal("50")
        assert outcome.record.storage_record_id is not None

        stored = asyncio.run(storage.list_transactions())
        assert [r.id for r in stored] == [outcome.record.id]

    def test_settle_marks_party_settled(self, flow, storage, now):
        """Test 'settle with john' settles every open transaction with john."""
        asyncio.run(flow.submit("lent 50 to john"))
        asyncio.run(flow.submit("borrowed 20 from john"))
        asyncio.run(flow.submit("lent 10 to sarah"))

        outcome = asyncio.run(flow.submit("settle with john"))

        assert outcome.success
        assert outcome.action == "settle"
        assert outcome.settled_count == 2
        debtors = asyncio.run(flow.get_debtors(as_of=now))
        assert [d.name for d in debtors] == ["sarah"]

    def test_settle_with_nobody_open(self, flow):
        """Test settling an unknown party succeeds with zero settled."""
        outcome = asyncio.run(flow.submit("settle with nobody"))

        assert outcome.success
        assert outcome.settled_count == 0

    def test_parse_failure_is_returned(self, flow, storage):
        """Test unparseable text comes back as a failed outcome."""
        outcome = asyncio.run(flow.submit(""))

        assert not outcome.success
        assert outcome.error_type == "InvalidFormat"
        assert "empty" in outcome.message.lower()
        assert asyncio.run(storage.list_transactions()) == []

    def test_validation_failure_is_returned(self, flow, storage):
        """Test a zero amount is rejected and nothing is stored."""
        outcome = asyncio.run(flow.submit("lent 0 to john"))

        assert not outcome.success
        assert outcome.error_type == "InvalidAmount"
        assert outcome.message.startswith("Invalid amount:")
        assert asyncio.run(storage.list_transactions()) == []

    def test_far_due_date_is_returned(self, flow, storage):
        """Test a due date beyond the calendar fails the submission without raising."""
        outcome = asyncio.run(flow.submit("lent 50 to john in 99999999 days"))

        assert not outcome.success
        assert outcome.error_type == "InvalidFormat"
        assert "too far" in outcome.message
        assert asyncio.run(storage.list_transactions()) == []

    def test_audit_trail_for_add(self, flow, audit_storage):
        """Test a successful add is traced under one correlation id."""
        correlation_id = create_correlation_id()
        asyncio.run(flow.submit("lent 50 to john", correlation_id))

        assert event_types(audit_storage, correlation_id) == [
            AuditEventType.INPUT_RECEIVED,
            AuditEventType.PARSE_SUCCEEDED,
            AuditEventType.TRANSACTION_SAVED,
        ]

    def test_audit_trail_for_rejections(self, flow, audit_storage):
        """Test parse and validation failures are audited."""
        parse_id = create_correlation_id()
        asyncio.run(flow.submit("hello there", parse_id))
        validation_id = create_correlation_id()
        asyncio.run(flow.submit("lent 0 to john", validation_id))

        assert event_types(audit_storage, parse_id)[-1] == AuditEventType.PARSE_FAILED
        assert event_types(audit_storage, validation_id)[-1] == AuditEventType.VALIDATION_FAILED

    def test_audit_trail_for_settle(self, flow, audit_storage):
        """Test a settlement is audited."""
        correlation_id = create_correlation_id()
        asyncio.run(flow.submit("settle with bob", correlation_id))

        assert event_types(audit_storage, correlation_id)[-1] == AuditEventType.PARTY_SETTLED

    def test_storage_failure_propagates(self, parser, validator, ledger, audit_storage, settings):
        """Test backend errors are audited and raised."""
        flow = LedgerFlow(
            storage=FailingStorage(),
            parser=parser,
            validator=validator,
            ledger=ledger,
            audit_logger=AuditLogger(audit_storage),
            settings=settings,
        )
        correlation_id = create_correlation_id()

        with pytest.raises(StorageError):
            asyncio.run(flow.submit("lent 50 to john", correlation_id))
        assert event_types(audit_storage, correlation_id)[-1] == AuditEventType.STORAGE_ERROR

    def test_unexpected_failure_is_audited(self, parser, validator, ledger, audit_storage, settings):
        """Test a non-storage exception is audited as a system error and raised."""
        flow = LedgerFlow(
            storage=BrokenStorage(),
            parser=parser,
            validator=validator,
            ledger=ledger,
            audit_logger=AuditLogger(audit_storage),
            settings=settings,
        )
        correlation_id = create_correlation_id()

        with pytest.raises(RuntimeError, match="unexpected backend state"):
            asyncio.run(flow.submit("lent 50 to john", correlation_id))

        events = asyncio.run(audit_storage.get_events_by_correlation_id(correlation_id))
        assert events[-1].event_type == AuditEventType.SYSTEM_ERROR
        assert events[-1].error_message == "unexpected backend state"
        assert events[-1].details == {"operation": "submit"}

    def test_works_without_audit_logger(self, storage, parser, validator, ledger, settings):
        """Test auditing is optional."""
        flow = LedgerFlow(storage=storage, parser=parser, validator=validator, ledger=ledger, settings=settings)
        assert asyncio.run(flow.submit("lent 50 to john")).success


class TestRecordManagement:
    """Tests for direct record operations."""

    def test_record_transaction_sanitizes(self, flow, make_record):
        """Test stored records carry the sanitized party."""
        saved = asyncio.run(flow.record_transaction(make_record("  Bob!!", 10)))
        assert saved.party == "Bob"

    def test_record_transaction_raises_on_invalid(self, flow, make_record):
        """Test invalid records raise the validation error."""
        with pytest.raises(InvalidAmount):
            asyncio.run(flow.record_transaction(make_record("bob", 0)))

    def test_update_keeps_timestamp(self, flow, storage, make_record):
        """Test edits change the fields but not the creation time."""
        original = asyncio.run(flow.record_transaction(make_record("bob", 10, days_ago=3)))
        edited = original.with_changes(amount=Decimal("15"), timestamp=original.timestamp.replace(year=2020))

        updated = asyncio.run(flow.update_transaction(edited))

        assert updated.amount == Decimal("15")
        assert updated.timestamp == original.timestamp
        assert asyncio.run(storage.get_transaction(original.id)).amount == Decimal("15")

    def test_update_missing_raises(self, flow, make_record):
        """Test updating an unknown transaction raises NotFoundError."""
        with pytest.raises(NotFoundError):
            asyncio.run(flow.update_transaction(make_record("bob", 10)))

    def test_delete(self, flow, storage, make_record):
        """Test deleted transactions are gone."""
        saved = asyncio.run(flow.record_transaction(make_record("bob", 10)))
        asyncio.run(flow.delete_transaction(saved.id))
        assert asyncio.run(storage.get_transaction(saved.id)) is None

    def test_delete_missing_raises(self, flow):
        """Test deleting an unknown transaction raises NotFoundError."""
        with pytest.raises(NotFoundError):
            asyncio.run(flow.delete_transaction(uuid4()))

    def test_settle_party_is_case_insensitive(self, flow, make_record):
        """Test settling matches party names regardless of case."""
        asyncio.run(flow.record_transaction(make_record("john", 10)))
        assert asyncio.run(flow.settle_party("JOHN")) == 1

    def test_settle_party_with_unusable_name(self, flow):
        """Test a name with no usable characters settles nothing."""
        assert asyncio.run(flow.settle_party("!!!")) == 0


class TestBalances:
    """Tests for summaries read through the flow."""

    def test_debtors_and_balance(self, flow, make_record, now):
        """Test summaries and totals over stored history."""
        asyncio.run(flow.record_transaction(make_record("john", 150, days_ago=10)))
        asyncio.run(flow.record_transaction(make_record("sue", 40, Direction.BORROWED)))

        debtors = asyncio.run(flow.get_debtors(as_of=now))
        balance = asyncio.run(flow.get_balance(as_of=now))

        assert [d.name for d in debtors] == ["john", "sue"]
        assert debtors[0].days_overdue == 3
        assert balance.owed_to_me == Decimal("150")
        assert balance.i_owe == Decimal("40")
        assert balance.net_balance == Decimal("110")
        assert balance.overdue_count == 1

    def test_partial_payment_reduces_debt(self, flow, now):
        """Test 'john paid 40' after 'john owes me 100' leaves 60 owed."""
        asyncio.run(flow.submit("john owes me 100"))
        asyncio.run(flow.submit("john paid 40"))

        [john] = asyncio.run(flow.get_debtors(as_of=now))
        assert john.name == "john"
        assert john.principal == Decimal("60")
        assert john.notes == "Partial payment"


class TestFactory:
    """Tests for component wiring."""

    def test_create_app_components(self, settings):
        """Test the factory returns a working flow and logger."""
        flow, audit_logger = create_app_components(settings=settings)

        assert isinstance(flow, LedgerFlow)
        assert isinstance(audit_logger, AuditLogger)
        assert asyncio.run(flow.submit("lent 5 to kim")).success

    def test_failed_outcome(self):
        """Test failed outcomes carry the error class and message."""
        outcome = SubmissionOutcome.failed(InvalidAmount("Amount must be greater than zero"))

        assert outcome.success is False
        assert outcome.error_type == "InvalidAmount"
        assert outcome.message == "Invalid amount: Amount must be greater than zero"


def test_record_round_trips_through_storage(flow, storage):
    """Test what is read back equals what was saved."""
    record = TransactionRecord(party="kim", direction=Direction.LENT, amount=Decimal("7.25"))
    saved = asyncio.run(flow.record_transaction(record))
    assert asyncio.run(storage.get_transaction(record.id)) == saved
