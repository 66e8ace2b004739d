"""
Shared fixtures.

Everything time-dependent runs against a fixed clock so results do
not drift with the wall clock.
"""

from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest

from lendshark.config import LedgerSettings
from lendshark.ledger import DebtLedger
from lendshark.models import Direction, TransactionRecord
from lendshark.parsing import TransactionParser
from lendshark.validation import TransactionValidator


NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now() -> datetime:
    return NOW


@pytest.fixture
def settings() -> LedgerSettings:
    return LedgerSettings()


@pytest.fixture
def validator(settings) -> TransactionValidator:
    return TransactionValidator(settings)


@pytest.fixture
def parser(validator) -> TransactionParser:
    return TransactionParser(validator, clock=lambda: NOW)


@pytest.fixture
def ledger(settings) -> DebtLedger:
    return DebtLedger(settings)


@pytest.fixture
def make_record():
    """Build a TransactionRecord created `days_ago` days before NOW."""

    def _make(
        party: str = "john",
        amount=None,
        direction: Direction = Direction.LENT,
        days_ago: int = 0,
        **fields,
    ) -> TransactionRecord:
        if amount is not None and not isinstance(amount, Decimal):
            amount = Decimal(str(amount))
        return TransactionRecord(
            party=party,
            direction=direction,
            amount=amount,
            timestamp=NOW - timedelta(days=days_ago),
            **fields,
        )

    return _make
