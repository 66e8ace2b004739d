"""Natural-language parsing package."""

from lendshark.parsing.parser import TransactionParser, format_phone_number

__all__ = ["TransactionParser", "format_phone_number"]
