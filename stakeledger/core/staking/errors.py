"""Exception types for the staking ledger.

Every rejected operation raises a distinct class with a stable ``code`` so
integrators can branch on it. The four families mirror how a caller recovers:

- ``ValidationError``: fix the input and retry (raised before any mutation),
- ``TemporalError``: wait and retry,
- ``AccessError``: pause state, roles or re-entrancy refused the call,
- ``CollaboratorError``: the token transfer failed and the operation was rolled back.

``LedgerInvariantError`` is not part of that hierarchy: it signals corrupted
state and is never expected in normal operation.
"""

from __future__ import annotations


class StakingError(Exception):
    """Base class for every recoverable ledger rejection."""

    code = "staking_error"


class ValidationError(StakingError):
    code = "validation"


class InvalidAmountError(ValidationError):
    """Amount is zero, negative, not an int, or larger than allowed."""

    code = "invalid_amount"


class NoPositionError(ValidationError):
    """The account has no stake position (or none with principal)."""

    code = "no_position"


class CapExceededError(ValidationError):
    """The deposit would push total staked above the configured cap."""

    code = "cap_exceeded"


class WithdrawalPendingError(ValidationError):
    """Deposit attempted while a withdrawal is pending for the account."""

    code = "withdrawal_pending"


class AlreadyPendingError(ValidationError):
    """A withdrawal has already been initiated for the account."""

    code = "already_pending"


class NotInitiatedError(ValidationError):
    """Execute attempted without a pending withdrawal."""

    code = "not_initiated"


class EmptyPoolError(ValidationError):
    """Rewards cannot be distributed while nothing is staked."""

    code = "empty_pool"


class NoRewardsError(ValidationError):
    """The reward source holds no balance."""

    code = "no_rewards"


class RewardBalanceDecreasedError(ValidationError):
    """The reward source balance shrank below what was already distributed."""

    code = "reward_balance_decreased"


class InvalidConfigError(ValidationError):
    code = "invalid_config"


class TemporalError(StakingError):
    code = "temporal"


class DelayNotElapsedError(TemporalError):
    """The unstaking delay has not passed since initiation."""

    code = "delay_not_elapsed"

    def __init__(self, available_at: int) -> None:
        self.available_at = available_at
        super().__init__(f"withdrawal available at {available_at}")


class AccessError(StakingError):
    code = "access"


class PausedError(AccessError):
    code = "paused"


class NotPausedError(AccessError):
    code = "not_paused"


class UnauthorizedError(AccessError):
    code = "unauthorized"


class ReentrantCallError(AccessError):
    """A ledger operation was invoked while another one is still executing."""

    code = "reentrant_call"


class CollaboratorError(StakingError):
    code = "collaborator"


class TransferFailedError(CollaboratorError):
    """The token collaborator rejected a transfer; no state was changed."""

    code = "transfer_failed"


class LedgerInvariantError(Exception):
    """Raised when a post-state violates one or more ledger invariants."""

    def __init__(self, violations: list[str]) -> None:
        self.violations = violations
        super().__init__(f"invariant violations: {', '.join(violations)}")
