"""
Core staking algorithms
"""

from .staking import (
    SCALE,
    PoolState,
    PositionStatus,
    PositionView,
    StakePosition,
    Transition,
    accrue,
    apply_deposit,
    apply_distribute,
    reward_owed,
    settle_withdrawal,
    snapshot_for_withdrawal,
)

__all__ = [
    "SCALE",
    "PoolState",
    "PositionStatus",
    "PositionView",
    "StakePosition",
    "Transition",
    "accrue",
    "apply_deposit",
    "apply_distribute",
    "reward_owed",
    "settle_withdrawal",
    "snapshot_for_withdrawal",
]
