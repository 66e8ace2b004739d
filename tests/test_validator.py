"""
Tests for sanitizing and record validation.
"""

import unicodedata
from decimal import Decimal

import pytest

from lendshark.config import LedgerSettings
from lendshark.models import (
    Direction,
    Err,
    ExcessiveLength,
    FieldKind,
    InjectionAttempt,
    InvalidAmount,
    InvalidItem,
    InvalidPartyName,
    Ok,
    TransactionRecord,
)
from lendshark.validation import TransactionValidator, contains_injection_pattern


def money(party="john", amount="50", **fields) -> TransactionRecord:
    return TransactionRecord(
        party=party,
        direction=Direction.LENT,
        amount=Decimal(amount) if amount is not None else None,
        **fields,
    )


def item_loan(party="mike", item="drill", **fields) -> TransactionRecord:
    return TransactionRecord(
        party=party,
        direction=Direction.LENT,
        item=item,
        is_item=True,
        **fields,
    )


class TestSanitize:
    """Tests for per-kind text cleaning."""

    def test_party_name_keeps_letters_and_name_punctuation(self, validator):
        """Test apostrophes, hyphens and dots survive in names."""
        assert validator.sanitize("John O'Brien-Smith Jr.", FieldKind.PARTY_NAME) == "John O'Brien-Smith Jr."

    def test_party_name_drops_symbols(self, validator):
        """Test markup and punctuation are removed from names."""
        assert validator.sanitize("Jo<hn>;", FieldKind.PARTY_NAME) == "John"
        assert validator.sanitize("  Bob!!  ", FieldKind.PARTY_NAME) == "Bob"

    def test_item_description_drops_angle_brackets(self, validator):
        """Test items lose angle brackets and double quotes become single."""
        assert validator.sanitize('<b>"drill"</b>', FieldKind.ITEM_DESCRIPTION) == "b'drill'/b"

    def test_notes_strip_script_fragments(self, validator):
        """Test script tags are removed case-insensitively."""
        assert validator.sanitize("<SCRIPT>alert</script> hi", FieldKind.NOTES) == ">alert hi"

    def test_notes_strip_nested_script_fragments(self, validator):
        """Test removing one fragment cannot assemble a new one."""
        assert validator.sanitize("<scr<scriptipt>x", FieldKind.NOTES) == ">x"

    def test_notes_keep_ordinary_punctuation(self, validator):
        """Test everyday notes pass through untouched."""
        assert validator.sanitize("pizza & beer (friday)!", FieldKind.NOTES) == "pizza & beer (friday)!"

    def test_amount_keeps_digits_and_dot(self, validator):
        """Test currency symbols and separators are removed from amounts."""
        assert validator.sanitize("$1,234.50", FieldKind.AMOUNT) == "1234.50"

    def test_invisible_characters_removed(self, validator):
        """Test zero-width and control characters are dropped."""
        text = chr(0x200B) + "Bob" + chr(0x0000) + chr(0xFEFF)
        assert validator.sanitize(text, FieldKind.PARTY_NAME) == "Bob"

    def test_unicode_is_nfc_normalized(self, validator):
        """Test decomposed accents are composed."""
        decomposed = "Cafe" + chr(0x0301)
        assert validator.sanitize(decomposed, FieldKind.NOTES) == "Caf" + chr(0x00E9)

    def test_unicode_letters_allowed_in_names(self, validator):
        """Test non-ASCII names are kept."""
        name = unicodedata.normalize("NFC", "José Müller")
        assert validator.sanitize(name, FieldKind.PARTY_NAME) == name

    def test_truncates_to_field_limit(self, validator):
        """Test long text is cut to the configured maximum."""
        assert len(validator.sanitize("x" * 600, FieldKind.PARTY_NAME)) == 100
        assert len(validator.sanitize("x" * 600, FieldKind.ITEM_DESCRIPTION)) == 200
        assert len(validator.sanitize("x" * 600, FieldKind.NOTES)) == 500

    @pytest.mark.parametrize("kind", list(FieldKind))
    @pytest.mark.parametrize(
        "text",
        [
            "  Hello  World  ",
            "<scr<scriptipt>alert('x')</script>",
            chr(0x200B) + " $12.50 " + chr(0xFEFF),
            'He said "hi" <b>',
            "e" + chr(0x0301) + "!!",
            "x" * 600,
            "x" * 99 + " y",
            "",
        ],
    )
    def test_sanitize_is_idempotent(self, validator, kind, text):
        """Test sanitizing twice gives the same result as once."""
        once = validator.sanitize(text, kind)
        assert validator.sanitize(once, kind) == once


class TestInjectionPatterns:
    """Tests for the suspicious-pattern check."""

    @pytest.mark.parametrize(
        "text",
        [
            "<script>alert(1)</script>",
            "JavaScript:void(0)",
            "x' OR '1'='1",
            "'; DROP TABLE users",
            "../etc/passwd",
            "name%00",
            "eval(code)",
        ],
    )
    def test_detects(self, text):
        """Test known attack shapes are flagged."""
        assert contains_injection_pattern(text)

    @pytest.mark.parametrize("text", ["john", "Mary-Jane O'Neil", "lunch at 1pm"])
    def test_ignores_normal_text(self, text):
        """Test ordinary input is not flagged."""
        assert not contains_injection_pattern(text)


class TestValidateRecord:
    """Tests for whole-record validation."""

    @pytest.mark.parametrize("amount", ["0.01", "1", "50", "999999999"])
    def test_accepts_amounts_in_range(self, validator, amount):
        """Test amounts within (0, max] pass."""
        assert isinstance(validator.validate(money(amount=amount)), Ok)

    @pytest.mark.parametrize("amount", ["0", "-5", "999999999.01", "1000000000"])
    def test_rejects_amounts_out_of_range(self, validator, amount):
        """Test zero, negative and oversized amounts fail."""
        result = validator.validate(money(amount=amount))
        assert isinstance(result, Err)
        assert isinstance(result.error, InvalidAmount)

    def test_rejects_missing_amount(self, validator):
        """Test money transactions need an amount."""
        result = validator.validate(money(amount=None))
        assert isinstance(result.error, InvalidAmount)

    def test_max_amount_follows_settings(self):
        """Test the upper bound is configurable."""
        validator = TransactionValidator(LedgerSettings(max_amount=100))
        assert isinstance(validator.validate(money(amount="100")), Ok)
        assert isinstance(validator.validate(money(amount="101")).error, InvalidAmount)

    def test_rejects_empty_party(self, validator):
        """Test blank party names fail."""
        result = validator.validate(money(party="   "))
        assert isinstance(result.error, InvalidPartyName)
        assert result.error.message.startswith("Invalid party name:")

    def test_rejects_long_party(self, validator):
        """Test party names over the limit fail with the field and limit."""
        result = validator.validate(money(party="a" * 101))
        assert result.error == ExcessiveLength("Party name", 100)
        assert result.error.message == "Party name exceeds maximum length of 100"

    def test_rejects_injection_in_party(self, validator):
        """Test script markup in a name is reported as an attack."""
        result = validator.validate(money(party="bob<script>"))
        assert isinstance(result.error, InjectionAttempt)
        assert result.error.message.startswith("Security: Potential injection attempt detected")

    def test_rejects_party_without_usable_characters(self, validator):
        """Test a party made only of symbols fails after sanitizing."""
        result = validator.validate(money(party="!!!"))
        assert isinstance(result.error, InvalidPartyName)

    def test_item_loan_requires_description(self, validator):
        """Test item loans without an item fail."""
        result = validator.validate(item_loan(item=None))
        assert isinstance(result.error, InvalidItem)

    def test_item_loan_ignores_amount(self, validator):
        """Test item loans pass without an amount."""
        assert isinstance(validator.validate(item_loan()), Ok)

    def test_rejects_long_item(self, validator):
        """Test item descriptions over the limit fail."""
        result = validator.validate(item_loan(item="x" * 201))
        assert result.error == ExcessiveLength("Item description", 200)

    def test_rejects_injection_in_item(self, validator):
        """Test path traversal in an item is reported as an attack."""
        assert isinstance(validator.validate(item_loan(item="../secret")).error, InjectionAttempt)

    def test_rejects_long_notes(self, validator):
        """Test notes over the limit fail."""
        result = validator.validate(money(notes="n" * 501))
        assert result.error == ExcessiveLength("Notes", 500)

    def test_rejects_injection_in_notes(self, validator):
        """Test SQL injection in notes is reported as an attack."""
        result = validator.validate(money(notes="x' or '1'='1"))
        assert isinstance(result.error, InjectionAttempt)

    def test_rejects_negative_interest_rate(self, validator):
        """Test a negative rate fails."""
        result = validator.validate(money(interest_rate=Decimal("-0.1")))
        assert isinstance(result.error, InvalidAmount)

    def test_reports_first_failure(self, validator):
        """Test the party is checked before the amount."""
        result = validator.validate(money(party="", amount="0"))
        assert isinstance(result.error, InvalidPartyName)

    def test_success_returns_sanitized_copy(self, validator):
        """Test a valid record comes back with cleaned text fields."""
        record = money(party="  Bob!!  ", notes="  pizza  ")
        result = validator.validate(record)

        assert isinstance(result, Ok)
        assert result.value.party == "Bob"
        assert result.value.notes == "pizza"
        assert result.value.id == record.id
        assert result.value.amount == Decimal("50")
