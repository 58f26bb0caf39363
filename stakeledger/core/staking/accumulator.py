"""Fixed-point reward accumulator.

Every function is stateless and operates on plain Python ints.

The accumulator is "reward earned per unit of stake since inception", scaled
by ``SCALE``. A position's reward between two readings is

    principal * (reference_point - entry_point) // SCALE

Rounding is floor (Python ``//``) everywhere. Each accrual leaves at most
``total_staked - 1`` scaled units unattributed; that dust stays in the reward
source and is never paid out, which keeps payouts <= injected rewards.
"""

from __future__ import annotations

from .errors import EmptyPoolError, InvalidAmountError, LedgerInvariantError

SCALE: int = 10**18


def accrue(accumulator: int, delta: int, total_staked: int) -> int:
    """Return the accumulator after distributing *delta* over *total_staked*."""
    if total_staked <= 0:
        raise EmptyPoolError("cannot distribute rewards to an empty pool")
    if delta < 0:
        raise InvalidAmountError(f"reward delta must be non-negative: {delta}")
    return accumulator + (delta * SCALE) // total_staked


def accrual_increment(delta: int, total_staked: int) -> int:
    """Scaled increment a single accrual adds (0 for an empty pool)."""
    if total_staked <= 0:
        return 0
    return (delta * SCALE) // total_staked


def residual_dust(delta: int, total_staked: int) -> int:
    """Reward units of *delta* that floor division leaves unattributed."""
    if total_staked <= 0:
        return delta
    attributed = (accrual_increment(delta, total_staked) * total_staked) // SCALE
    return delta - attributed


def reward_owed(principal: int, entry_point: int, reference_point: int) -> int:
    """Reward earned by *principal* between two accumulator readings."""
    if reference_point < entry_point:
        raise LedgerInvariantError(["reference_point_before_entry_point"])
    return (principal * (reference_point - entry_point)) // SCALE
