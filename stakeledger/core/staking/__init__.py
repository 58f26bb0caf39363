"""`staking`: pure-Python core of the reward-distribution ledger.

- deterministic, integer-only transitions (floor rounding, no floats),
- immutable state (frozen dataclasses),
- O(1) per operation: no transition iterates over participants.

Public API:
- `apply_deposit(...)`, `snapshot_for_withdrawal(...)`, `settle_withdrawal(...)`,
  `apply_distribute(...)` -> `Transition`
- `accrue(...)`, `reward_owed(...)` fixed-point helpers
"""

from .accumulator import SCALE, accrue, residual_dust, reward_owed
from .distribution import apply_distribute, newly_added
from .errors import (
    AccessError,
    AlreadyPendingError,
    CapExceededError,
    CollaboratorError,
    DelayNotElapsedError,
    EmptyPoolError,
    InvalidAmountError,
    InvalidConfigError,
    LedgerInvariantError,
    NoPositionError,
    NoRewardsError,
    NotInitiatedError,
    NotPausedError,
    PausedError,
    ReentrantCallError,
    RewardBalanceDecreasedError,
    StakingError,
    TemporalError,
    TransferFailedError,
    UnauthorizedError,
    ValidationError,
    WithdrawalPendingError,
)
from .guards import owed_reward, position_status
from .positions import apply_deposit
from .state import initial_pool_state
from .types import (
    Effect,
    Event,
    PoolState,
    PositionStatus,
    PositionView,
    StakePosition,
    Transfer,
    TransferKind,
    Transition,
)
from .withdrawals import settle_withdrawal, snapshot_for_withdrawal

__all__ = [
    "SCALE",
    "accrue",
    "residual_dust",
    "reward_owed",
    "apply_distribute",
    "newly_added",
    "apply_deposit",
    "snapshot_for_withdrawal",
    "settle_withdrawal",
    "owed_reward",
    "position_status",
    "initial_pool_state",
    "Effect",
    "Event",
    "PoolState",
    "PositionStatus",
    "PositionView",
    "StakePosition",
    "Transfer",
    "TransferKind",
    "Transition",
    "StakingError",
    "ValidationError",
    "TemporalError",
    "AccessError",
    "CollaboratorError",
    "InvalidAmountError",
    "NoPositionError",
    "CapExceededError",
    "WithdrawalPendingError",
    "AlreadyPendingError",
    "NotInitiatedError",
    "EmptyPoolError",
    "NoRewardsError",
    "RewardBalanceDecreasedError",
    "InvalidConfigError",
    "DelayNotElapsedError",
    "PausedError",
    "NotPausedError",
    "UnauthorizedError",
    "ReentrantCallError",
    "TransferFailedError",
    "LedgerInvariantError",
]
