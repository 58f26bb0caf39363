"""Shared guard helpers for the staking core.

Guards run against the PRE-state and raise before anything is built, so a
rejected call never yields a partial post-state.
"""

from __future__ import annotations

from typing import Any

from .accumulator import reward_owed
from .errors import InvalidAmountError
from .types import PoolState, PositionStatus, StakePosition


def require_amount(value: Any, *, name: str = "amount") -> int:
    """Return *value* if it is a positive int (bools rejected)."""
    if not isinstance(value, int) or isinstance(value, bool):
        raise InvalidAmountError(f"{name} must be an int")
    if value <= 0:
        raise InvalidAmountError(f"{name} must be positive: {value}")
    return value


def available_at(position: StakePosition, unstaking_delay: int) -> int:
    """Earliest timestamp at which a pending withdrawal can execute."""
    if not position.withdrawal_pending:
        return 0
    return position.initiated_at + unstaking_delay


def position_status(position: StakePosition, now: int, unstaking_delay: int) -> PositionStatus:
    if not position.exists:
        return PositionStatus.NONE
    if not position.withdrawal_pending:
        return PositionStatus.ACTIVE
    if now - position.initiated_at >= unstaking_delay:
        return PositionStatus.WITHDRAWABLE
    return PositionStatus.PENDING


def owed_reward(pool: PoolState, position: StakePosition) -> int:
    """Total unpaid reward of *position* at the pool's current accumulator.

    Pending positions are frozen at their exit point.
    """
    if not position.exists:
        return 0
    reference = position.exit_point if position.withdrawal_pending else pool.accumulator
    return position.carried_reward + reward_owed(position.principal, position.entry_point, reference)
