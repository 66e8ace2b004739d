"""Interest and balance aggregation package."""

from lendshark.ledger.debts import DebtLedger
from lendshark.ledger.interest import InterestCalculator

__all__ = ["DebtLedger", "InterestCalculator"]
