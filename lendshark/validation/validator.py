"""
Input Sanitizing and Validation

DESIGN DECISION: Two separate jobs live here.

SANITIZE (sanitize):
- Pure text transformation, one rule set per FieldKind
- Never fails, never rejects
- Idempotent: sanitizing a sanitized string changes nothing

VALIDATE (validate):
- Checks a whole TransactionRecord against the ledger's limits
- Returns Ok(sanitized copy) or Err(ValidationError)
- Checks run in a fixed order and the FIRST failure is reported

IMPORTANT: Validation NEVER raises. The error value is shown to the
user as-is and the caller decides what to do next.
"""

import re
import unicodedata
from typing import Optional

from lendshark.config import LedgerSettings, get_settings
from lendshark.models.errors import (
    ExcessiveLength,
    InjectionAttempt,
    InvalidAmount,
    InvalidItem,
    InvalidPartyName,
    ValidationError,
)
from lendshark.models.result import Err, Ok, Result
from lendshark.models.transaction import FieldKind, TransactionRecord


# Control, zero-width and BOM code points that break storage and display
INVISIBLE_CHARACTERS = frozenset(
    [chr(code) for code in range(0x00, 0x10)]
    + ["\u007f", "\u200b", "\u200c", "\u200d", "\ufeff"]
)

# Matched against the lowercase form of a field
INJECTION_PATTERNS = (
    "<script",
    "</script>",
    "javascript:",
    "eval(",
    "onclick=",
    "onerror=",
    "'; drop table",
    "1=1",
    "or 1=1",
    "' or '",
    '" or "',
    "../",
    "..\\",
    "%00",
    "\u0000",
)

_SCRIPT_FRAGMENTS = re.compile(r"</script>|<script|javascript:", re.IGNORECASE)
_PARTY_PUNCTUATION = frozenset(".-'")


def contains_injection_pattern(text: str) -> bool:
    lowered = text.lower()
    return any(pattern in lowered for pattern in INJECTION_PATTERNS)


class TransactionValidator:
    """
    Sanitizes free text and validates transaction records.

    Stateless apart from the configured limits, so one instance can be
    shared by every caller.
    """

    def __init__(self, settings: Optional[LedgerSettings] = None):
        """
        Initialize validator.

        Args:
            settings: Field limits to enforce. Defaults to the
                      application settings.
        """
        self._settings = settings or get_settings().ledger

    @property
    def settings(self) -> LedgerSettings:
        return self._settings

    def sanitize(self, text: str, kind: FieldKind) -> str:
        """
        Clean a piece of text according to the rules of its field kind.

        All kinds: drop invisible characters, trim, NFC-normalize.
        Then:
        - PARTY_NAME: letters, digits, whitespace and . - ' only
        - ITEM_DESCRIPTION: no angle brackets, double quotes become single
        - NOTES: script fragments removed, everything else kept
        - AMOUNT: digits and '.' only
        """
        cleaned = "".join(ch for ch in text if ch not in INVISIBLE_CHARACTERS)
        cleaned = unicodedata.normalize("NFC", cleaned.strip())

        limit = None
        if kind is FieldKind.PARTY_NAME:
            cleaned = "".join(
                ch for ch in cleaned
                if ch.isalnum() or ch.isspace() or ch in _PARTY_PUNCTUATION
            )
            limit = self._settings.max_party_length
        elif kind is FieldKind.ITEM_DESCRIPTION:
            cleaned = cleaned.replace("<", "").replace(">", "").replace('"', "'")
            limit = self._settings.max_item_length
        elif kind is FieldKind.NOTES:
            # Removing one fragment can expose another ("<scr<scriptipt")
            previous = None
            while previous != cleaned:
                previous = cleaned
                cleaned = _SCRIPT_FRAGMENTS.sub("", cleaned)
            limit = self._settings.max_notes_length
        elif kind is FieldKind.AMOUNT:
            cleaned = "".join(ch for ch in cleaned if ch.isdigit() or ch == ".")

        # Filtering can leave composable neighbours behind
        cleaned = unicodedata.normalize("NFC", cleaned)
        if limit is not None:
            cleaned = cleaned[:limit]
        return cleaned.strip()

    def validate(
        self,
        record: TransactionRecord,
    ) -> Result[TransactionRecord, ValidationError]:
        """
        Validate a transaction record.

        Check order: party → amount or item → notes → interest rate.

        Returns:
            Ok with a copy whose text fields are sanitized,
            or Err with the first constraint that failed.
        """
        settings = self._settings

        # Party name
        if not record.party or not record.party.strip():
            return Err(InvalidPartyName("Party name cannot be empty"))
        if len(record.party) > settings.max_party_length:
            return Err(ExcessiveLength("Party name", settings.max_party_length))
        if contains_injection_pattern(record.party):
            return Err(InjectionAttempt("Party name contains suspicious patterns"))

        # Money or item
        if not record.is_item:
            if record.amount is None:
                return Err(InvalidAmount("Amount is required for non-item transactions"))
            if not record.amount.is_finite() or record.amount <= 0:
                return Err(InvalidAmount("Amount must be greater than zero"))
            if record.amount > settings.max_amount:
                return Err(InvalidAmount("Amount exceeds maximum allowed value"))
        else:
            if record.item is None or not record.item.strip():
                return Err(InvalidItem("Item description is required for item loans"))
            if len(record.item) > settings.max_item_length:
                return Err(ExcessiveLength("Item description", settings.max_item_length))
            if contains_injection_pattern(record.item):
                return Err(InjectionAttempt("Item description contains suspicious patterns"))

        # Notes
        if record.notes is not None:
            if len(record.notes) > settings.max_notes_length:
                return Err(ExcessiveLength("Notes", settings.max_notes_length))
            if contains_injection_pattern(record.notes):
                return Err(InjectionAttempt("Notes contain suspicious patterns"))

        # Interest
        if record.interest_rate is not None and (
            not record.interest_rate.is_finite() or record.interest_rate < 0
        ):
            return Err(InvalidAmount("Interest rate cannot be negative"))

        party = self.sanitize(record.party, FieldKind.PARTY_NAME)
        if not party:
            return Err(InvalidPartyName("Party name has no usable characters"))

        item = record.item
        if item is not None:
            item = self.sanitize(item, FieldKind.ITEM_DESCRIPTION)
        notes = record.notes
        if notes is not None:
            notes = self.sanitize(notes, FieldKind.NOTES) or None

        return Ok(record.with_changes(party=party, item=item, notes=notes))
