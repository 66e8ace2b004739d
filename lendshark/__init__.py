"""
LendShark - Source Package

A personal ledger for informal lending and borrowing between two people.
Free text goes in, per-person balances come out.

DESIGN PRINCIPLES:
1. Parse → Validate → Store, never the other way around
2. Errors are values the user can read
3. Money math is exact (Decimal only)
4. Balances are always recomputed, never stored
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "LendShark Team"
