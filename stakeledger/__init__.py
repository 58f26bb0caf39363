"""
stakeledger: pro-rata staking reward ledger with O(1) accrual.
"""

__version__ = "0.1.0"
