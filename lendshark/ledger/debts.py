"""
Debt Ledger Aggregator

DESIGN DECISION: No balance is ever stored. Every summary is folded
from the raw transaction history on demand, so a settled or edited
transaction can never leave a stale balance behind.

FLOW:
1. Drop settled transactions and ones without a party
2. Items go into a per-party item list
3. Money is netted per party (+ lent, - borrowed), interest is
   added per transaction for money owed to the owner
4. Overdue days come from the earliest due date, or from the oldest
   transaction after a grace period
5. Overdue parties first, then largest balance first

The ledger is a pure function of (transactions, as_of).
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Iterable, Optional

from lendshark.config import LedgerSettings, get_settings
from lendshark.ledger.interest import InterestCalculator
from lendshark.models.transaction import (
    BalanceOverview,
    BorrowedItem,
    DebtorSummary,
    Direction,
    TransactionRecord,
)
from lendshark.utils.dates import add_days, days_between, utc_now


@dataclass
class _PartyTotals:
    principal: Decimal = Decimal("0")
    interest: Decimal = Decimal("0")
    due_date: Optional[datetime] = None
    oldest_date: Optional[datetime] = None
    notes: Optional[str] = None
    items: list[BorrowedItem] = field(default_factory=list)


class DebtLedger:
    """
    Folds a transaction history into one DebtorSummary per party.
    """

    def __init__(
        self,
        settings: Optional[LedgerSettings] = None,
        interest_calculator: type[InterestCalculator] = InterestCalculator,
    ):
        self._settings = settings or get_settings().ledger
        self._interest = interest_calculator

    def summarize(
        self,
        transactions: Iterable[TransactionRecord],
        as_of: Optional[datetime] = None,
    ) -> list[DebtorSummary]:
        """
        Summarize outstanding balances per party.

        Args:
            transactions: Snapshot of stored transactions, any order
            as_of: Instant to evaluate interest and overdue days at
                   (defaults to now)

        Returns:
            Summaries in display order
        """
        now = as_of or utc_now()
        totals: dict[str, _PartyTotals] = {}

        for record in transactions:
            if record.settled or not record.party:
                continue

            bucket = totals.setdefault(record.party, _PartyTotals())

            if record.is_item:
                bucket.items.append(self._to_item(record))
                continue

            contribution = record.signed_amount
            bucket.principal += contribution

            # Only money owed TO the owner earns interest
            if contribution > 0:
                bucket.interest += self._interest.interest_so_far(record, as_of=now)

            if bucket.oldest_date is None or record.timestamp < bucket.oldest_date:
                bucket.oldest_date = record.timestamp
            if record.due_date is not None and (
                bucket.due_date is None or record.due_date < bucket.due_date
            ):
                bucket.due_date = record.due_date
            if record.notes:
                bucket.notes = f"{bucket.notes}; {record.notes}" if bucket.notes else record.notes

        summaries = [
            DebtorSummary(
                name=party,
                principal=data.principal,
                accrued_interest=data.interest,
                days_overdue=self._days_overdue(data, now),
                notes=data.notes,
                items=tuple(data.items),
                as_of=now,
            )
            for party, data in totals.items()
            if data.principal != 0 or data.items
        ]
        summaries.sort(key=lambda s: (not s.is_overdue, -s.total_owed, s.name))
        return summaries

    def balance_overview(self, summaries: Iterable[DebtorSummary]) -> BalanceOverview:
        """Headline totals across all parties."""
        owed_to_me = Decimal("0")
        i_owe = Decimal("0")
        overdue_count = 0
        debtor_count = 0

        for summary in summaries:
            debtor_count += 1
            if summary.owes_me:
                owed_to_me += summary.total_owed
            elif summary.i_owe:
                i_owe -= summary.total_owed
            if summary.is_overdue:
                overdue_count += 1

        return BalanceOverview(
            owed_to_me=owed_to_me,
            i_owe=i_owe,
            overdue_count=overdue_count,
            debtor_count=debtor_count,
        )

    def _to_item(self, record: TransactionRecord) -> BorrowedItem:
        due_date = record.due_date or add_days(
            record.timestamp, self._settings.default_item_loan_days
        )
        return BorrowedItem(
            name=record.item or record.notes or "Item",
            due_date=due_date,
            owner_holds_item=record.direction is Direction.LENT,
        )

    def _days_overdue(self, data: _PartyTotals, now: datetime) -> int:
        if data.principal <= 0:
            return 0
        if data.due_date is not None:
            return max(0, days_between(data.due_date, now))
        if data.oldest_date is not None:
            return max(0, days_between(data.oldest_date, now) - self._settings.grace_period_days)
        return 0
