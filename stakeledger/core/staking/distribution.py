"""Distribution controller: fold newly available reward into the accumulator.

The reward source is topped up at arbitrary times and in arbitrary amounts.
Each call distributes only the balance growth since the previous call:

    newly_added = pool_balance + withdrawn_since_last_distribution - distributed_total

``withdrawn_since_last_distribution`` adds back reward that left the source
after the last call, so paid-out reward is not mistaken for a shrinking pool.
"""

from __future__ import annotations

from dataclasses import replace

from .accumulator import accrue
from .errors import EmptyPoolError, NoRewardsError, RewardBalanceDecreasedError
from .types import Effect, Event, PoolState, Transition


def newly_added(pool: PoolState, pool_balance: int) -> int:
    return pool_balance + pool.withdrawn_since_last_distribution - pool.distributed_total


def apply_distribute(pool: PoolState, pool_balance: int) -> Transition:
    if pool.total_staked <= 0:
        raise EmptyPoolError("cannot distribute rewards to an empty pool")
    if pool_balance <= 0:
        raise NoRewardsError("reward source balance is zero")

    delta = newly_added(pool, pool_balance)
    if delta < 0:
        raise RewardBalanceDecreasedError(
            f"reward source balance {pool_balance} below undistributed baseline "
            f"{pool.distributed_total - pool.withdrawn_since_last_distribution}"
        )

    new_pool = replace(
        pool,
        accumulator=accrue(pool.accumulator, delta, pool.total_staked),
        distributed_total=pool_balance,
        withdrawn_since_last_distribution=0,
        lifetime_distributed=pool.lifetime_distributed + delta,
    )
    return Transition(
        pool=new_pool,
        position=None,
        effect=Effect(
            event=Event.REWARDS_DISTRIBUTED,
            amount=delta,
            accumulator_after=new_pool.accumulator,
            total_staked_after=new_pool.total_staked,
        ),
    )
