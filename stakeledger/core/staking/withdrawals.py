"""Two-phase withdrawal: initiate (snapshot), then execute after the delay.

Lifecycle per account::

    ACTIVE --snapshot_for_withdrawal--> PENDING --(delay)--> WITHDRAWABLE
    WITHDRAWABLE --settle_withdrawal--> NONE          (full amount)
                                    \\-> ACTIVE        (partial, remainder re-opens)

Initiating takes only the requested amount out of ``total_staked``. The rest of
a partially withdrawn position keeps counting, but its reward stays frozen at
``exit_point`` and its ``entry_point`` restarts at settlement, so it never
earns what was distributed while the withdrawal was pending.
"""

from __future__ import annotations

from dataclasses import replace

from .accumulator import reward_owed
from .errors import (
    AlreadyPendingError,
    DelayNotElapsedError,
    InvalidAmountError,
    NoPositionError,
    NotInitiatedError,
)
from .guards import available_at, owed_reward, require_amount
from .types import Effect, Event, PoolState, StakePosition, Transfer, TransferKind, Transition


def snapshot_for_withdrawal(
    pool: PoolState,
    position: StakePosition,
    *,
    account: str,
    amount: int | None,
    now: int,
) -> Transition:
    """Freeze the position's reward and request *amount* (default: everything)."""
    if not position.exists or position.principal <= 0:
        raise NoPositionError(f"no stake position for {account}")
    if position.withdrawal_pending:
        raise AlreadyPendingError(f"withdrawal already initiated for {account}")

    requested = position.principal if amount is None else require_amount(amount)
    if requested > position.principal:
        raise InvalidAmountError(
            f"requested {requested} exceeds principal {position.principal}"
        )

    new_position = replace(
        position,
        withdrawal_pending=True,
        exit_point=pool.accumulator,
        initiated_at=now,
        requested_amount=requested,
    )
    new_pool = replace(pool, total_staked=pool.total_staked - requested)

    return Transition(
        pool=new_pool,
        position=new_position,
        effect=Effect(
            event=Event.WITHDRAW_INITIATED,
            amount=requested,
            reward=owed_reward(new_pool, new_position),
            accumulator_after=new_pool.accumulator,
            total_staked_after=new_pool.total_staked,
        ),
    )


def settle_withdrawal(
    pool: PoolState,
    position: StakePosition,
    *,
    account: str,
    now: int,
    unstaking_delay: int,
    reward_source: str,
) -> Transition:
    """Pay out the requested principal plus its reward once the delay has passed.

    A partial request re-opens the remainder with ``entry_point`` at the live
    accumulator; it already counts toward ``total_staked``. What the remainder
    earned up to ``exit_point`` is kept as ``carried_reward`` and paid with the
    next settlement (or compounded by the next deposit).
    """
    if not position.exists:
        raise NoPositionError(f"no stake position for {account}")
    if not position.withdrawal_pending:
        raise NotInitiatedError(f"withdrawal not initiated for {account}")
    ready_at = available_at(position, unstaking_delay)
    if now < ready_at:
        raise DelayNotElapsedError(ready_at)

    requested = position.requested_amount
    paid_reward = position.carried_reward + reward_owed(
        requested, position.entry_point, position.exit_point
    )
    remainder = position.principal - requested

    new_position: StakePosition | None
    if remainder == 0:
        new_position = None
    else:
        new_position = StakePosition(
            principal=remainder,
            entry_point=pool.accumulator,
            started_at=position.started_at,
            carried_reward=reward_owed(remainder, position.entry_point, position.exit_point),
            exists=True,
        )

    new_pool = replace(
        pool,
        withdrawn_since_last_distribution=pool.withdrawn_since_last_distribution + paid_reward,
        lifetime_withdrawn=pool.lifetime_withdrawn + paid_reward,
    )

    transfers = []
    if paid_reward:
        transfers.append(Transfer(TransferKind.INTO, reward_source, paid_reward))
    transfers.append(Transfer(TransferKind.OUT, account, requested + paid_reward))

    return Transition(
        pool=new_pool,
        position=new_position,
        effect=Effect(
            event=Event.WITHDRAW_EXECUTED,
            amount=requested,
            reward=paid_reward,
            accumulator_after=new_pool.accumulator,
            total_staked_after=new_pool.total_staked,
        ),
        transfers=tuple(transfers),
    )
