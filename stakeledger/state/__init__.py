"""
State management for the staking ledger
"""

from .balances import AllowanceTable, BalanceTable
from .positions import PositionTable

__all__ = [
    "AllowanceTable",
    "BalanceTable",
    "PositionTable",
]
