"""
Natural-Language Transaction Parser

Turns a sentence like "lent 50 to john due next week" into a ledger action.

DESIGN DECISION: This is a rule-based extractor, not a grammar.
Each field is found by its own independent scan, in a fixed order:

    sanitize → settle? → direction → due date → amount → item
             → party → notes → modifiers (rate, phone)

The due-date phrase and phone number are blanked out before the
amount scan, so "in 3 days" never reads as an amount of 3.

Order is part of the contract:
- A settlement keyword beats everything ("paid, settle with bob")
- Within each scan the first hit wins, no scoring

The parser never raises and never logs. Failures come back as
Err(ParsingError) with a message meant for the user, including a due
date too far out to represent.
"""

import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Callable, Optional, Union

from lendshark.models.errors import InvalidFormat, MissingRequiredField, ParsingError
from lendshark.models.result import Err, Ok, Result
from lendshark.models.transaction import (
    AddAction,
    Direction,
    FieldKind,
    SettleAction,
    TransactionRecord,
)
from lendshark.parsing.vocabulary import (
    BORROW_KEYWORDS,
    BORROW_PREPOSITIONS,
    CURRENCY_SYMBOLS,
    ITEM_INDICATORS,
    LEND_KEYWORDS,
    LEND_PREPOSITIONS,
    NOTE_MARKERS,
    PARTIAL_PAYMENT_NOTE,
    SETTLE_KEYWORDS,
    STOP_WORDS,
    SUBJECT_PRONOUNS,
)
from lendshark.utils.dates import add_days, add_months, utc_now
from lendshark.validation import TransactionValidator


# Letters only, allowing inner apostrophes/dots/hyphens (o'brien, mary-jane)
_WORD = r"[^\W\d_]+(?:['.-][^\W\d_]+)*"
_WORD_RUN = rf"{_WORD}(?:\s+{_WORD})*"

_SETTLE_ALTERNATION = "|".join(re.escape(word) for word in SETTLE_KEYWORDS)
_SETTLE_KEYWORD = re.compile(rf"\b(?:{_SETTLE_ALTERNATION})\b")
_SETTLE_WITH_NAME = re.compile(rf"\b(?:{_SETTLE_ALTERNATION})\s+(?:up\s+)?with\s+(?P<run>{_WORD_RUN})")
_WITH_NAME_SETTLE = re.compile(
    rf"\bwith\s+(?P<run>{_WORD}(?:\s+{_WORD})*?)\s+(?:{_SETTLE_ALTERNATION})\b"
)

_AMOUNT = re.compile(
    rf"(?<![\d.])[{re.escape(CURRENCY_SYMBOLS)}]?(?P<number>\d+(?:\.\d+)?)(?!\d|\.\d|\s*%)"
)
_OWES_ME = re.compile(rf"\b(?P<name>{_WORD})\s+owes\s+me\b")
_PAID_BACK = re.compile(
    rf"\b(?P<name>{_WORD})\s+paid\s+(?:me\s+)?(?:back\s+)?(?=[{re.escape(CURRENCY_SYMBOLS)}]?\d)"
)
_WHITESPACE_CONTROLS = re.compile(r"[\t\n\r\v\f]+")

_INTEREST_RATE = re.compile(r"(?P<rate>\d+(?:\.\d+)?)\s*%")

_PHONE_PATTERNS = (
    re.compile(r"(?<!\d)\(?\d{3}\)?[-.\s]?\d{3}[-.\s]?\d{4}(?!\d)"),
    re.compile(r"(?<!\d)\d{3}[-.\s]\d{4}(?!\d)"),
    re.compile(r"(?<!\d)\d{10}(?!\d)"),
)

# (pattern, days, months) - first match wins
_DUE_DATE_RULES = (
    (re.compile(r"\btomorrow\b"), 1, 0),
    (re.compile(r"\bnext\s+week\b"), 7, 0),
    (re.compile(r"\bnext\s+month\b"), 0, 1),
    (re.compile(r"\bin\s+(?P<count>\d+)\s+days?\b"), 1, 0),
    (re.compile(r"\bin\s+(?P<count>\d+)\s+weeks?\b"), 7, 0),
)

_QUOTED_NOTE = re.compile(r'"(?P<note>[^"]+)"')
_MARKED_NOTE = re.compile(
    "(?:" + "|".join(re.escape(marker) for marker in NOTE_MARKERS) + r")\s*(?P<note>.+)$",
    re.IGNORECASE | re.DOTALL,
)
_PARENTHETICAL_NOTE = re.compile(r"\((?P<note>[^()]+)\)")


def _keyword_pattern(keyword: str) -> re.Pattern:
    return re.compile(r"\b" + r"\s+".join(re.escape(w) for w in keyword.split()) + r"\b")


_LEND_PATTERNS = tuple(_keyword_pattern(k) for k in LEND_KEYWORDS)
_BORROW_PATTERNS = tuple(_keyword_pattern(k) for k in BORROW_KEYWORDS)


def _leading_words(run: str) -> str:
    """Keep the words of a run up to the first grammar word."""
    kept = []
    for word in run.split():
        if word in STOP_WORDS:
            break
        kept.append(word)
    return " ".join(kept)


def format_phone_number(digits: str) -> str:
    """Format 10 digits as (555) 123-4567 and 7 digits as 555-1234."""
    if len(digits) == 10:
        return f"({digits[:3]}) {digits[3:6]}-{digits[6:]}"
    if len(digits) == 7:
        return f"{digits[:3]}-{digits[3:]}"
    return digits


class TransactionParser:
    """
    Parses free text into an AddAction or SettleAction.

    Supported shapes (keywords are interchangeable with their synonyms):
        lent 50 to john
        borrowed $25.50 from sarah in 3 days
        lent my drill to mike next week
        lent 100 to alex at 10% (has my watch) (555) 123-4567
        settle with bob / all square with bob
        john owes me 45 / john paid 20
    """

    def __init__(
        self,
        validator: Optional[TransactionValidator] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        """
        Initialize parser.

        Args:
            validator: Supplies the sanitizing rules.
            clock: Returns "now" for timestamps and relative due dates.
                   Defaults to the current UTC time.
        """
        self._validator = validator or TransactionValidator()
        self._clock = clock or utc_now

    def parse(
        self,
        raw_input: str,
    ) -> Result[Union[AddAction, SettleAction], ParsingError]:
        """
        Parse one line of user input.

        Returns:
            Ok(AddAction) for a new transaction, Ok(SettleAction) for a
            settlement, or Err(InvalidFormat / MissingRequiredField).
        """
        # Whitespace controls separate words; sanitizing would delete them
        text = self._validator.sanitize(_WHITESPACE_CONTROLS.sub(" ", raw_input), FieldKind.NOTES)
        if not text:
            return Err(InvalidFormat("Input is empty. Try 'lent 50 to john'."))

        lower = text.lower()

        # Settlement always wins over a new transaction
        settle_party = self._extract_settle_party(lower)
        if settle_party:
            return Ok(SettleAction(party=settle_party))

        # "john owes me 45" names the party before the verb
        subject_party = self._extract_subject(lower, _OWES_ME)
        direction = Direction.LENT if subject_party else self._detect_direction(lower)
        default_note = None
        if direction is None:
            # "john paid 20" is money coming back, which reduces what john owes
            subject_party = self._extract_subject(lower, _PAID_BACK)
            if subject_party:
                direction = Direction.BORROWED
                default_note = PARTIAL_PAYMENT_NOTE
        if direction is None:
            return Err(InvalidFormat(
                "Could not determine whether money was lent or borrowed. "
                "Try 'lent 50 to john' or 'borrowed 20 from sarah'."
            ))

        now = self._clock()
        try:
            due_date, due_span = self._extract_due_date(lower, now)
        except (OverflowError, ValueError):
            return Err(InvalidFormat("Due date is too far in the future."))

        phone_number, phone_span = self._extract_phone_number(lower)
        amount = self._extract_amount(self._blank_span(self._blank_span(lower, phone_span), due_span))

        item = None
        if amount is None:
            item = self._extract_item(lower)
        is_item = item is not None

        party = subject_party or self._extract_party(lower, direction)
        if not party:
            return Err(MissingRequiredField("party name"))

        if not is_item and amount is None:
            return Err(MissingRequiredField("amount or item description"))

        record = TransactionRecord(
            party=party,
            direction=direction,
            amount=amount,
            item=item,
            is_item=is_item,
            timestamp=now,
            due_date=due_date,
            interest_rate=self._extract_interest_rate(lower),
            notes=self._extract_notes(text) or default_note,
            phone_number=phone_number,
        )
        return Ok(AddAction(record=record))

    # -------------------------------------------------------------------------
    # Scans
    # -------------------------------------------------------------------------

    def _extract_settle_party(self, lower: str) -> Optional[str]:
        if not _SETTLE_KEYWORD.search(lower):
            return None

        for pattern in (_SETTLE_WITH_NAME, _WITH_NAME_SETTLE):
            match = pattern.search(lower)
            if match:
                name = self._validator.sanitize(
                    _leading_words(match.group("run")), FieldKind.PARTY_NAME
                )
                if name:
                    return name
        return None

    def _detect_direction(self, lower: str) -> Optional[Direction]:
        if any(pattern.search(lower) for pattern in _LEND_PATTERNS):
            return Direction.LENT
        if any(pattern.search(lower) for pattern in _BORROW_PATTERNS):
            return Direction.BORROWED
        return None

    def _extract_subject(self, lower: str, pattern: re.Pattern) -> Optional[str]:
        for match in pattern.finditer(lower):
            word = match.group("name")
            if word in STOP_WORDS or word in SUBJECT_PRONOUNS:
                continue
            name = self._validator.sanitize(word, FieldKind.PARTY_NAME)
            if name:
                return name
        return None

    def _extract_amount(self, lower: str) -> Optional[Decimal]:
        match = _AMOUNT.search(lower)
        if not match:
            return None
        cleaned = self._validator.sanitize(match.group("number"), FieldKind.AMOUNT)
        try:
            return Decimal(cleaned)
        except InvalidOperation:
            return None

    def _extract_item(self, lower: str) -> Optional[str]:
        """Item phrase after the earliest indicator word ("lent my drill to ...")."""
        earliest = None
        for indicator in ITEM_INDICATORS:
            match = re.search(rf"\b{indicator}\s+(?P<run>{_WORD_RUN})", lower)
            if match and (earliest is None or match.start() < earliest.start()):
                earliest = match
        if earliest is None:
            return None

        phrase = self._validator.sanitize(
            _leading_words(earliest.group("run")), FieldKind.ITEM_DESCRIPTION
        )
        return phrase or None

    def _extract_party(self, lower: str, direction: Direction) -> Optional[str]:
        prepositions = LEND_PREPOSITIONS if direction is Direction.LENT else BORROW_PREPOSITIONS

        for preposition in prepositions:
            # Lookahead keeps matches from swallowing later prepositions
            for match in re.finditer(rf"\b{preposition}\s+(?=(?P<run>{_WORD_RUN}))", lower):
                # "paid for" is a verb, not a preposition
                if preposition == "for" and re.search(r"\bpaid\s+$", lower[:match.start()]):
                    continue
                name = self._validator.sanitize(
                    _leading_words(match.group("run")), FieldKind.PARTY_NAME
                )
                if name:
                    return name

        # "i owe sarah 30"
        if direction is Direction.BORROWED:
            match = re.search(rf"\bowe\s+(?P<run>{_WORD_RUN})", lower)
            if match:
                name = self._validator.sanitize(
                    _leading_words(match.group("run")), FieldKind.PARTY_NAME
                )
                if name:
                    return name
        return None

    def _extract_due_date(
        self,
        lower: str,
        now: datetime,
    ) -> tuple[Optional[datetime], Optional[tuple[int, int]]]:
        """
        Due date and the span of the phrase that set it.

        Raises:
            OverflowError, ValueError: If the date can't be represented
        """
        for pattern, days, months in _DUE_DATE_RULES:
            match = pattern.search(lower)
            if not match:
                continue
            count = int(match.group("count")) if "count" in pattern.groupindex else 1
            if months:
                return add_months(now, months * count), match.span()
            return add_days(now, days * count), match.span()
        return None, None

    def _extract_notes(self, text: str) -> Optional[str]:
        """Quoted text, then a note:/memo:/// marker, then a parenthetical."""
        note = None

        quoted = _QUOTED_NOTE.search(text)
        marked = _MARKED_NOTE.search(text)
        if quoted:
            note = quoted.group("note")
        elif marked:
            note = marked.group("note")
        else:
            for match in _PARENTHETICAL_NOTE.finditer(text):
                candidate = match.group("note").strip()
                # "(555) 123-4567" is a phone number, not a note
                if candidate and not candidate.isdigit():
                    note = candidate
                    break

        if note is None:
            return None
        return self._validator.sanitize(note, FieldKind.NOTES) or None

    # -------------------------------------------------------------------------
    # Modifiers
    # -------------------------------------------------------------------------

    def _extract_interest_rate(self, lower: str) -> Optional[Decimal]:
        """'at 10%' → Decimal('0.10') weekly."""
        match = _INTEREST_RATE.search(lower)
        if not match:
            return None
        return Decimal(match.group("rate")) / 100

    def _extract_phone_number(self, text: str) -> tuple[Optional[str], Optional[tuple[int, int]]]:
        for pattern in _PHONE_PATTERNS:
            match = pattern.search(text)
            if not match:
                continue
            digits = "".join(ch for ch in match.group(0) if ch.isdigit())
            if len(digits) >= 7:
                return format_phone_number(digits), match.span()
        return None, None

    @staticmethod
    def _blank_span(text: str, span: Optional[tuple[int, int]]) -> str:
        if span is None:
            return text
        start, end = span
        return text[:start] + " " * (end - start) + text[end:]
