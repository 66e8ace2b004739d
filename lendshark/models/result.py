"""
Result values returned across the core boundary.

Usage:
    match parser.parse(text):
        case Ok(value=action):
            ...
        case Err(error=error):
            show(error.message)
"""

from dataclasses import dataclass
from typing import Generic, NoReturn, TypeVar, Union

from lendshark.models.errors import LedgerError

T = TypeVar("T")
E = TypeVar("E", bound=LedgerError)


@dataclass(frozen=True)
class Ok(Generic[T]):
    """Successful outcome carrying a value."""

    value: T

    @property
    def is_ok(self) -> bool:
        return True

    @property
    def is_err(self) -> bool:
        return False

    def unwrap(self) -> T:
        return self.value


@dataclass(frozen=True)
class Err(Generic[E]):
    """Failed outcome carrying the error to show the user."""

    error: E

    @property
    def is_ok(self) -> bool:
        return False

    @property
    def is_err(self) -> bool:
        return True

    def unwrap(self) -> NoReturn:
        raise self.error


Result = Union[Ok[T], Err[E]]
