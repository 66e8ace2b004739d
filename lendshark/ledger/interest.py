"""
Interest Accrual

Centralised interest math so every screen agrees on the vig.

Rates are WEEKLY simple interest (0.10 = 10% per week).

CLOSED-TERM LOANS (due date after the start):
- The term is charged in whole weeks, rounded UP (a 9-day loan
  pays two weeks of interest)
- That total accrues linearly per day until the due date, then stops

OPEN-ENDED LOANS (no due date):
- amount * rate * days / 7, growing for as long as the loan is open

All arithmetic is Decimal.
"""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from lendshark.models.transaction import TransactionRecord
from lendshark.utils.dates import days_between, ensure_aware, utc_now

ZERO = Decimal("0")
DAYS_PER_WEEK = 7


class InterestCalculator:
    """Interest owed on a single transaction."""

    @staticmethod
    def weeks_charged(days: int) -> Decimal:
        """Loan-shark rounding: any partial week counts as a full week."""
        return Decimal(-(-days // DAYS_PER_WEEK))

    @staticmethod
    def _accrues(record: TransactionRecord) -> bool:
        return (
            record.interest_rate is not None
            and record.interest_rate > 0
            and record.amount is not None
            and record.amount > 0
            and record.timestamp is not None
        )

    @staticmethod
    def _is_closed_term(record: TransactionRecord) -> bool:
        return record.due_date is not None and record.due_date > record.timestamp

    @classmethod
    def interest_at_due_date(cls, record: TransactionRecord) -> Optional[Decimal]:
        """
        Total interest owed at the due date.

        Returns None for open-ended loans and for records that
        carry no interest.
        """
        if not cls._accrues(record) or not cls._is_closed_term(record):
            return None

        days_total = max(1, days_between(record.timestamp, record.due_date))
        return record.amount * record.interest_rate * cls.weeks_charged(days_total)

    @classmethod
    def interest_so_far(
        cls,
        record: TransactionRecord,
        as_of: Optional[datetime] = None,
    ) -> Decimal:
        """
        Interest accrued on a transaction as of the given instant.

        Args:
            record: The transaction
            as_of: Instant to evaluate at (defaults to now)
        """
        if not cls._accrues(record):
            return ZERO

        now = ensure_aware(as_of or utc_now())

        if cls._is_closed_term(record):
            at_due = cls.interest_at_due_date(record)
            # Compare instants; day counts truncate terms shorter than a day
            if now >= record.due_date:
                return at_due
            days_total = max(1, days_between(record.timestamp, record.due_date))
            days_so_far = max(0, min(days_between(record.timestamp, now), days_total))
            return at_due * days_so_far / days_total

        days_since = max(0, days_between(record.timestamp, now))
        return record.amount * record.interest_rate * days_since / DAYS_PER_WEEK
