"""Stake position transitions: deposits and compounding top-ups.

One pure function per operation. Each evaluates against the PRE-state and
returns a ``Transition`` holding the post-states and the token legs the shell
must run after committing them.
"""

from __future__ import annotations

from dataclasses import replace

from .errors import CapExceededError, WithdrawalPendingError
from .guards import owed_reward, require_amount
from .types import Effect, Event, PoolState, StakePosition, Transfer, TransferKind, Transition


def apply_deposit(
    pool: PoolState,
    position: StakePosition,
    *,
    account: str,
    amount: int,
    now: int,
    max_staking_amount: int,
    reward_source: str,
) -> Transition:
    """Open a position or top up an active one.

    A top-up compounds: reward owed so far is added to principal (funded from
    the reward source) instead of being paid out, and ``entry_point`` resets to
    the live accumulator.
    """
    require_amount(amount)
    if position.withdrawal_pending:
        raise WithdrawalPendingError(f"withdrawal pending for {account}")

    compounded = owed_reward(pool, position)
    added = amount + compounded
    new_total = pool.total_staked + added
    if new_total > max_staking_amount:
        raise CapExceededError(
            f"deposit would raise total staked to {new_total} (cap {max_staking_amount})"
        )

    new_position = StakePosition(
        principal=position.principal + added,
        entry_point=pool.accumulator,
        started_at=position.started_at if position.exists else now,
        exists=True,
    )
    new_pool = replace(
        pool,
        total_staked=new_total,
        withdrawn_since_last_distribution=pool.withdrawn_since_last_distribution + compounded,
        lifetime_withdrawn=pool.lifetime_withdrawn + compounded,
    )

    transfers = [Transfer(TransferKind.INTO, account, amount)]
    if compounded:
        transfers.append(Transfer(TransferKind.INTO, reward_source, compounded))

    return Transition(
        pool=new_pool,
        position=new_position,
        effect=Effect(
            event=Event.STAKE_DEPOSITED,
            amount=amount,
            reward=compounded,
            accumulator_after=new_pool.accumulator,
            total_staked_after=new_pool.total_staked,
        ),
        transfers=tuple(transfers),
    )
