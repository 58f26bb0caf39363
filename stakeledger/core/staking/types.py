"""Data types for the staking ledger core.

All types are frozen dataclasses (immutable); transitions build new values with
``dataclasses.replace()``.

Units/conventions:
- amounts are integer token base units (no decimals, no floats),
- accumulator values are reward-per-unit-stake scaled by ``SCALE`` (1e18),
- timestamps are integer seconds.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, unique


@unique
class PositionStatus(Enum):
    NONE = "none"
    ACTIVE = "active"
    PENDING = "pending"
    WITHDRAWABLE = "withdrawable"


@unique
class Event(Enum):
    """One member per receipt kind the ledger emits."""
    STAKE_DEPOSITED = "StakeDeposited"
    WITHDRAW_INITIATED = "WithdrawInitiated"
    WITHDRAW_EXECUTED = "WithdrawExecuted"
    REWARDS_DISTRIBUTED = "RewardsDistributed"
    PAUSED = "Paused"
    UNPAUSED = "Unpaused"
    CONFIG_CHANGED = "ConfigChanged"
    ROLE_GRANTED = "RoleGranted"
    ROLE_REVOKED = "RoleRevoked"


@unique
class TransferKind(Enum):
    INTO = "into"   # counterparty -> ledger
    OUT = "out"     # ledger -> counterparty


@dataclass(frozen=True)
class StakePosition:
    """Per-account stake record. The default instance is "no position"."""

    principal: int = 0
    entry_point: int = 0
    started_at: int = 0

    # Withdrawal request (zeroed while active)
    withdrawal_pending: bool = False
    exit_point: int = 0
    initiated_at: int = 0
    requested_amount: int = 0

    # Earned by principal that stayed staked through a partial withdrawal
    carried_reward: int = 0

    exists: bool = False


@dataclass(frozen=True)
class PoolState:
    """Process-wide pool state of a single ledger."""

    total_staked: int = 0
    accumulator: int = 0

    # Distribution bookkeeping
    distributed_total: int = 0
    withdrawn_since_last_distribution: int = 0

    # Lifetime counters
    lifetime_distributed: int = 0
    lifetime_withdrawn: int = 0


@dataclass(frozen=True)
class Transfer:
    """One token movement requested by a transition, relative to the ledger."""

    kind: TransferKind
    counterparty: str
    amount: int


@dataclass(frozen=True)
class Effect:
    """Observables of a successful transition."""

    event: Event
    amount: int = 0
    reward: int = 0
    accumulator_after: int = 0
    total_staked_after: int = 0


@dataclass(frozen=True)
class Transition:
    """Result of a pure core operation: the post-states plus token legs to run."""

    pool: PoolState
    position: StakePosition | None
    effect: Effect
    transfers: tuple[Transfer, ...] = ()


@dataclass(frozen=True)
class PositionView:
    """Read-only projection returned by ``position_of``."""

    principal: int
    started_at: int
    pending_since: int
    owed_reward: int
    status: PositionStatus
    requested_amount: int = 0
    available_at: int = 0
