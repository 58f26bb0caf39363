"""Invariant checkers for the staking ledger.

Each function returns True when the invariant holds; the ``check_*`` helpers
return the list of violated invariant IDs (empty = all pass).

Pool and position invariants are local and O(1). ``check_conservation`` walks
every position and is meant for tests and audits, never for the hot path.
"""

from __future__ import annotations

from typing import Callable, Iterable

from .accumulator import reward_owed
from .types import PoolState, StakePosition


def inv_pool_nonneg(p: PoolState) -> bool:
    return min(
        p.total_staked,
        p.accumulator,
        p.distributed_total,
        p.withdrawn_since_last_distribution,
        p.lifetime_distributed,
        p.lifetime_withdrawn,
    ) >= 0


def inv_withdrawn_le_distributed(p: PoolState) -> bool:
    return p.lifetime_withdrawn <= p.lifetime_distributed


def inv_position_nonneg(s: StakePosition) -> bool:
    return min(
        s.principal,
        s.entry_point,
        s.exit_point,
        s.initiated_at,
        s.requested_amount,
        s.carried_reward,
        s.started_at,
    ) >= 0


def inv_active_markers_zeroed(s: StakePosition) -> bool:
    if s.withdrawal_pending:
        return True
    return s.exit_point == 0 and s.initiated_at == 0 and s.requested_amount == 0


def inv_exit_not_before_entry(s: StakePosition) -> bool:
    if not s.withdrawal_pending:
        return True
    return s.exit_point >= s.entry_point


def inv_requested_within_principal(s: StakePosition) -> bool:
    if not s.withdrawal_pending:
        return True
    return 0 < s.requested_amount <= s.principal


def inv_cleared_zeroed(s: StakePosition) -> bool:
    if s.exists:
        return True
    return s == StakePosition()


def inv_open_has_principal(s: StakePosition) -> bool:
    if not s.exists:
        return True
    return s.principal > 0


# ---------------------------------------------------------------------------
# Registries + check helpers
# ---------------------------------------------------------------------------

POOL_INVARIANTS: dict[str, Callable[[PoolState], bool]] = {
    "inv_pool_nonneg": inv_pool_nonneg,
    "inv_withdrawn_le_distributed": inv_withdrawn_le_distributed,
}

POSITION_INVARIANTS: dict[str, Callable[[StakePosition], bool]] = {
    "inv_position_nonneg": inv_position_nonneg,
    "inv_active_markers_zeroed": inv_active_markers_zeroed,
    "inv_exit_not_before_entry": inv_exit_not_before_entry,
    "inv_requested_within_principal": inv_requested_within_principal,
    "inv_cleared_zeroed": inv_cleared_zeroed,
    "inv_open_has_principal": inv_open_has_principal,
}


def check_pool(pool: PoolState) -> list[str]:
    return [inv_id for inv_id, fn in POOL_INVARIANTS.items() if not fn(pool)]


def check_position(position: StakePosition) -> list[str]:
    return [inv_id for inv_id, fn in POSITION_INVARIANTS.items() if not fn(position)]


def check_transition(before: PoolState, after: PoolState) -> list[str]:
    """Cross-state checks between a pre-state and its post-state."""
    violations = []
    if after.accumulator < before.accumulator:
        violations.append("inv_accumulator_monotone")
    if after.lifetime_distributed < before.lifetime_distributed:
        violations.append("inv_lifetime_distributed_monotone")
    if after.lifetime_withdrawn < before.lifetime_withdrawn:
        violations.append("inv_lifetime_withdrawn_monotone")
    return violations


def check_conservation(
    pool: PoolState,
    positions: Iterable[StakePosition],
    *,
    reward_source_balance: int | None = None,
) -> list[str]:
    """Global checks over every position.

    - ``total_staked`` equals the staked principal: all of an active position,
      the unrequested part of a pending one,
    - owed reward never exceeds what the reward source can still pay.
    """
    violations = []
    staked = 0
    owed = 0
    for position in positions:
        violations.extend(check_position(position))
        if not position.exists:
            continue
        if position.withdrawal_pending:
            reference = position.exit_point
            staked += position.principal - position.requested_amount
        else:
            reference = pool.accumulator
            staked += position.principal
        owed += position.carried_reward + reward_owed(
            position.principal, position.entry_point, reference
        )

    if staked != pool.total_staked:
        violations.append("inv_total_staked_matches_active")
    if reward_source_balance is not None and owed > reward_source_balance:
        violations.append("inv_reward_conservation")
    return violations
