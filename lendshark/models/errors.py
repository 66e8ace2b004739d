"""
Error Taxonomy for LendShark

Every failure inside the core is an expected outcome of messy or
hostile input, so errors are RETURNED as values (wrapped in Err)
rather than raised. They still subclass Exception so the service
layer can raise them where its contract is "throw on bad input".

Each error carries a `message` that the UI shows to the user verbatim.
"""


class LedgerError(Exception):
    """Base class for all ledger errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __eq__(self, other: object) -> bool:
        return type(self) is type(other) and self.args == other.args

    def __hash__(self) -> int:
        return hash((type(self), self.args))


# =============================================================================
# VALIDATION ERRORS
# =============================================================================

class ValidationError(LedgerError):
    """A structured field broke one of the record constraints."""
    pass


class InvalidPartyName(ValidationError):
    def __init__(self, reason: str):
        super().__init__(f"Invalid party name: {reason}")
        self.reason = reason


class ExcessiveLength(ValidationError):
    def __init__(self, field: str, max_length: int):
        super().__init__(f"{field} exceeds maximum length of {max_length}")
        self.field = field
        self.max_length = max_length


class InjectionAttempt(ValidationError):
    def __init__(self, reason: str):
        super().__init__(f"Security: Potential injection attempt detected: {reason}")
        self.reason = reason


class InvalidAmount(ValidationError):
    def __init__(self, reason: str):
        super().__init__(f"Invalid amount: {reason}")
        self.reason = reason


class InvalidItem(ValidationError):
    def __init__(self, reason: str):
        super().__init__(f"Invalid item: {reason}")
        self.reason = reason


# =============================================================================
# PARSING ERRORS
# =============================================================================

class ParsingError(LedgerError):
    """Free text could not be turned into a ledger action."""
    pass


class InvalidFormat(ParsingError):
    def __init__(self, reason: str):
        super().__init__(f"Invalid format: {reason}")
        self.reason = reason


class MissingRequiredField(ParsingError):
    def __init__(self, field_name: str):
        super().__init__(f"Missing required field: {field_name}")
        self.field_name = field_name
