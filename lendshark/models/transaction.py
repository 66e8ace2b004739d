"""
Core Data Models for LendShark

These models define the contracts between the parser, the ledger
and whatever stores or displays the data.
They are designed to:
1. Be immutable value types (frozen) so snapshots stay consistent
2. Carry money as Decimal, never float
3. Be serializable for storage and logging

DESIGN DECISION: The models only enforce STRUCTURE (types, enums).
Business limits (positive amounts, field lengths, injection checks)
belong to TransactionValidator, which reports them as readable
ValidationError values instead of pydantic exceptions.
"""

from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Literal, Optional, Union
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
)

from lendshark.utils.dates import days_between, ensure_aware, utc_now


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class Direction(str, Enum):
    """
    Which way the value moved.

    LENT: from the ledger owner to the party (the party owes).
    BORROWED: from the party to the ledger owner (the owner owes).
    """
    LENT = "lent"
    BORROWED = "borrowed"

    @property
    def sign(self) -> int:
        return 1 if self is Direction.LENT else -1


class FieldKind(str, Enum):
    """Sanitizing rules differ per kind of text field."""
    PARTY_NAME = "party_name"
    ITEM_DESCRIPTION = "item_description"
    NOTES = "notes"
    AMOUNT = "amount"


# =============================================================================
# TRANSACTION RECORD
# =============================================================================

class TransactionRecord(BaseModel):
    """
    A single lending or borrowing event. The unit of truth.

    Exactly one of `amount`/`item` is meaningful, selected by `is_item`.
    `interest_rate` is a WEEKLY simple rate (0.10 = 10% per week) and
    only ever applies to money the party owes the owner.
    """
    model_config = ConfigDict(frozen=True, str_strip_whitespace=True)

    # Identity
    id: UUID = Field(
        default_factory=uuid4,
        description="Unique transaction ID"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the transaction was created"
    )

    # Who and which way
    party: str = Field(
        ...,
        description="Counterparty display name"
    )
    direction: Direction

    # What
    amount: Optional[Decimal] = Field(
        default=None,
        description="Money amount (money transactions only)"
    )
    item: Optional[str] = Field(
        default=None,
        description="Item description (item transactions only)"
    )
    is_item: bool = False

    # Terms
    due_date: Optional[datetime] = None
    interest_rate: Optional[Decimal] = Field(
        default=None,
        description="Weekly simple interest rate"
    )

    # Status
    settled: bool = False

    # Extras
    notes: Optional[str] = None
    phone_number: Optional[str] = None

    # Owned by the persistence layer, never read by the core
    storage_record_id: Optional[str] = None

    @field_validator('timestamp', 'due_date')
    @classmethod
    def make_timezone_aware(cls, v: Optional[datetime]) -> Optional[datetime]:
        """Naive datetimes are taken to be UTC."""
        return ensure_aware(v) if v is not None else None

    @property
    def signed_amount(self) -> Decimal:
        """Positive when the party owes the owner, negative when the owner owes."""
        if self.is_item or self.amount is None:
            return Decimal("0")
        return self.amount * self.direction.sign

    def with_changes(self, **changes) -> "TransactionRecord":
        """Return a copy with some fields replaced."""
        return self.model_copy(update=changes)


# =============================================================================
# PARSER OUTPUT
# =============================================================================

class AddAction(BaseModel):
    """Create this (unsaved) transaction."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["add"] = "add"
    record: TransactionRecord


class SettleAction(BaseModel):
    """Settle everything outstanding with this party."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["settle"] = "settle"
    party: str


ParsedAction = Annotated[
    Union[AddAction, SettleAction],
    Field(discriminator="kind"),
]


# =============================================================================
# LEDGER OUTPUT
# =============================================================================

class BorrowedItem(BaseModel):
    """A physical item on loan (not money)."""
    model_config = ConfigDict(frozen=True)

    name: str
    due_date: datetime
    owner_holds_item: bool = Field(
        ...,
        description="True if the other party currently has the owner's item"
    )

    def days_overdue(self, as_of: Optional[datetime] = None) -> int:
        return max(0, days_between(self.due_date, as_of or utc_now()))

    def is_overdue(self, as_of: Optional[datetime] = None) -> bool:
        return self.days_overdue(as_of) > 0

    def days_until_due(self, as_of: Optional[datetime] = None) -> int:
        return max(0, days_between(as_of or utc_now(), self.due_date))


class DebtorSummary(BaseModel):
    """
    Everything outstanding with one party.

    Recomputed on demand from transactions; never persisted.
    A positive `total_owed` means the party owes the owner,
    a negative one means the owner owes the party.
    """
    model_config = ConfigDict(frozen=True)

    name: str
    principal: Decimal = Field(
        ...,
        description="Signed net money balance, excluding interest"
    )
    accrued_interest: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        description="Interest accrued on money owed to the owner"
    )
    days_overdue: int = Field(default=0, ge=0)
    notes: Optional[str] = Field(
        default=None,
        description="Notes of the contributing transactions, '; ' separated"
    )
    items: tuple[BorrowedItem, ...] = ()
    as_of: datetime = Field(
        default_factory=utc_now,
        description="Instant the summary was computed for"
    )

    @property
    def total_owed(self) -> Decimal:
        return self.principal + self.accrued_interest

    @property
    def overdue_items(self) -> list[BorrowedItem]:
        return [item for item in self.items if item.is_overdue(self.as_of)]

    @property
    def is_overdue(self) -> bool:
        return self.days_overdue > 0 or bool(self.overdue_items)

    @property
    def owes_me(self) -> bool:
        return self.total_owed > 0

    @property
    def i_owe(self) -> bool:
        return self.total_owed < 0

    @property
    def has_interest(self) -> bool:
        return self.accrued_interest > 0

    @property
    def has_items(self) -> bool:
        return bool(self.items)


class BalanceOverview(BaseModel):
    """Totals across every party, for the headline numbers."""
    model_config = ConfigDict(frozen=True)

    owed_to_me: Decimal = Decimal("0")
    i_owe: Decimal = Decimal("0")
    overdue_count: int = 0
    debtor_count: int = 0

    @property
    def net_balance(self) -> Decimal:
        return self.owed_to_me - self.i_owe
