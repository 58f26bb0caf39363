"""
Staking ledger: the imperative shell around the functional core.

`StakingLedger` owns the single mutable copy of the pool state and the
position table and is the only place that talks to the token collaborator.
Every public operation:

1. takes the ledger-wide single-writer guard (re-entry raises `ReentrantCallError`),
2. checks pause state and roles,
3. runs the pure core transition (which raises before any mutation on bad input),
4. checks invariants on the post-state and commits it,
5. runs the token legs; on failure it compensates completed legs, restores the
   pre-operation state and raises `TransferFailedError`.

State is committed before any token transfer, so a collaborator that calls back
into the ledger can never observe a half-updated position.
"""

from __future__ import annotations

import logging
import threading
import time
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Callable, Iterator, Optional, Sequence

from ..core.staking.distribution import apply_distribute
from ..core.staking.errors import (
    InvalidConfigError,
    LedgerInvariantError,
    NotPausedError,
    PausedError,
    ReentrantCallError,
    StakingError,
    TransferFailedError,
)
from ..core.staking.guards import available_at, owed_reward, position_status
from ..core.staking.invariants import check_pool, check_position, check_transition
from ..core.staking.positions import apply_deposit
from ..core.staking.state import initial_pool_state
from ..core.staking.types import (
    Event,
    PoolState,
    PositionView,
    StakePosition,
    Transfer,
    TransferKind,
    Transition,
)
from ..core.staking.withdrawals import settle_withdrawal, snapshot_for_withdrawal
from ..state.positions import PositionTable
from .access import Role, RoleRegistry
from .config import LedgerConfig
from .structured_logging import log_event
from .token import TokenCollaborator, TokenTransferError

logger = logging.getLogger(__name__)

Clock = Callable[[], int]


def _system_clock() -> int:
    return int(time.time())


@dataclass(frozen=True)
class Receipt:
    """Record of one committed ledger operation."""

    event: Event
    account: str = ""
    amount: int = 0
    reward: int = 0
    accumulator_after: int = 0
    total_staked_after: int = 0
    timestamp: int = 0


@dataclass(frozen=True)
class LedgerState:
    """Everything a snapshot needs, read in one guarded step."""

    pool: PoolState
    positions: tuple[tuple[str, StakePosition], ...]
    config: LedgerConfig
    paused: bool
    roles: dict[str, list[str]]


class _SingleWriterGuard:
    """Serializes ledger operations and rejects same-thread re-entry.

    Other threads block until the running operation finishes; a call made from
    inside a running operation (e.g. a token callback) fails immediately.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._owner: Optional[int] = None
        self._running: str = ""

    @contextmanager
    def hold(self, op: str) -> Iterator[None]:
        if self._owner == threading.get_ident():
            raise ReentrantCallError(f"{op} called while {self._running} is executing")
        with self._lock:
            self._owner = threading.get_ident()
            self._running = op
            try:
                yield
            finally:
                self._owner = None
                self._running = ""


class StakingLedger:
    def __init__(
        self,
        token: TokenCollaborator,
        config: LedgerConfig,
        *,
        admin: Optional[str] = None,
        roles: Optional[RoleRegistry] = None,
        clock: Optional[Clock] = None,
        pool: Optional[PoolState] = None,
        positions: Optional[PositionTable] = None,
        paused: bool = False,
    ) -> None:
        if not isinstance(token, TokenCollaborator):
            raise TypeError("token must implement transfer_into/transfer_out/balance_of")
        if not isinstance(config, LedgerConfig):
            raise TypeError("config must be a LedgerConfig")
        if roles is None:
            if admin is None:
                raise ValueError("either admin or roles is required")
            roles = RoleRegistry.with_admin(admin)

        self._token = token
        self._config = config
        self._roles = roles
        self._clock: Clock = clock or _system_clock
        self._pool = pool if pool is not None else initial_pool_state()
        self._positions = positions if positions is not None else PositionTable()
        self._paused = bool(paused)
        self._guard = _SingleWriterGuard()
        self._receipts: list[Receipt] = []

    # ------------------------------------------------------------------
    # Staking operations
    # ------------------------------------------------------------------

    def deposit(self, account: str, amount: int) -> Receipt:
        """Stake *amount* (a top-up compounds the reward owed so far)."""
        with self._operation("deposit", account=account):
            self._require_not_paused()
            now = self._now()
            position = self._positions.get(account)
            transition = apply_deposit(
                self._pool,
                position,
                account=account,
                amount=amount,
                now=now,
                max_staking_amount=self._config.max_staking_amount,
                reward_source=self._config.reward_source,
            )
            return self._execute(account, position, transition, now)

    def initiate_withdrawal(self, account: str, amount: Optional[int] = None) -> Receipt:
        """Start the unstaking delay for *amount* (default: the whole principal)."""
        with self._operation("initiate_withdrawal", account=account):
            self._require_not_paused()
            now = self._now()
            position = self._positions.get(account)
            transition = snapshot_for_withdrawal(
                self._pool, position, account=account, amount=amount, now=now
            )
            return self._execute(account, position, transition, now)

    def execute_withdrawal(self, account: str) -> Receipt:
        """Pay out the pending withdrawal once the unstaking delay has passed."""
        with self._operation("execute_withdrawal", account=account):
            self._require_not_paused()
            now = self._now()
            position = self._positions.get(account)
            transition = settle_withdrawal(
                self._pool,
                position,
                account=account,
                now=now,
                unstaking_delay=self._config.unstaking_delay,
                reward_source=self._config.reward_source,
            )
            return self._execute(account, position, transition, now)

    def distribute(self, caller: str) -> Receipt:
        """Fold reward-source growth since the last call into the accumulator."""
        with self._operation("distribute", caller=caller):
            self._require_not_paused()
            self._roles.require(Role.REWARDS_DISTRIBUTOR, caller)
            now = self._now()
            pool_balance = self._token.balance_of(self._config.reward_source)
            transition = apply_distribute(self._pool, pool_balance)
            receipt = self._execute(None, None, transition, now)
            if transition.effect.amount == 0:
                logger.debug("distribute found no new reward (balance=%d)", pool_balance)
            return receipt

    # ------------------------------------------------------------------
    # Administration
    # ------------------------------------------------------------------

    def pause(self, caller: str) -> Receipt:
        with self._operation("pause", caller=caller):
            self._roles.require(Role.PAUSER, caller)
            if self._paused:
                raise PausedError("ledger is already paused")
            self._paused = True
            return self._record(Receipt(event=Event.PAUSED, account=caller, timestamp=self._now()))

    def unpause(self, caller: str) -> Receipt:
        with self._operation("unpause", caller=caller):
            self._roles.require(Role.PAUSER, caller)
            if not self._paused:
                raise NotPausedError("ledger is not paused")
            self._paused = False
            return self._record(Receipt(event=Event.UNPAUSED, account=caller, timestamp=self._now()))

    def set_reward_source(self, caller: str, reward_source: str) -> Receipt:
        """Point reward payouts at a new account.

        The reward balance held by the old source is not migrated; the operator
        moves it before unpausing so distribution bookkeeping stays aligned.
        """
        with self._operation("set_reward_source", caller=caller):
            self._require_config_change(caller)
            if not isinstance(reward_source, str) or not reward_source.strip():
                raise InvalidConfigError("reward_source must be a non-empty str")
            if reward_source == self._config.reward_source:
                raise InvalidConfigError(f"reward_source is already set to {reward_source}")
            return self._change_config(caller, replace(self._config, reward_source=reward_source))

    def set_max_staking_amount(self, caller: str, max_staking_amount: int) -> Receipt:
        """Change the staking cap. Lowering it below total staked only blocks deposits."""
        with self._operation("set_max_staking_amount", caller=caller):
            self._require_config_change(caller)
            return self._change_config(caller, replace(self._config, max_staking_amount=max_staking_amount))

    def set_unstaking_delay(self, caller: str, unstaking_delay: int) -> Receipt:
        """Change the delay. Pending withdrawals are measured against the new value."""
        with self._operation("set_unstaking_delay", caller=caller):
            self._require_config_change(caller)
            return self._change_config(caller, replace(self._config, unstaking_delay=unstaking_delay))

    def grant_role(self, caller: str, role: Role, account: str) -> Optional[Receipt]:
        with self._operation("grant_role", caller=caller):
            self._roles.require(Role.DEFAULT_ADMIN, caller)
            if not self._roles.grant(role, account):
                return None
            log_event(logger, Event.ROLE_GRANTED.value, role=role.value, account=account, caller=caller)
            return self._record(Receipt(event=Event.ROLE_GRANTED, account=account, timestamp=self._now()))

    def revoke_role(self, caller: str, role: Role, account: str) -> Optional[Receipt]:
        with self._operation("revoke_role", caller=caller):
            self._roles.require(Role.DEFAULT_ADMIN, caller)
            if not self._roles.revoke(role, account):
                return None
            log_event(logger, Event.ROLE_REVOKED.value, role=role.value, account=account, caller=caller)
            return self._record(Receipt(event=Event.ROLE_REVOKED, account=account, timestamp=self._now()))

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    def position_of(self, account: str) -> PositionView:
        with self._guard.hold("position_of"):
            position = self._positions.get(account)
            now = self._now()
            delay = self._config.unstaking_delay
            return PositionView(
                principal=position.principal,
                started_at=position.started_at,
                pending_since=position.initiated_at if position.withdrawal_pending else 0,
                owed_reward=owed_reward(self._pool, position),
                status=position_status(position, now, delay),
                requested_amount=position.requested_amount,
                available_at=available_at(position, delay),
            )

    def pool_state(self) -> PoolState:
        with self._guard.hold("pool_state"):
            return self._pool

    def positions(self) -> list[tuple[str, StakePosition]]:
        """All open positions, sorted by account id."""
        with self._guard.hold("positions"):
            return sorted(self._positions.items())

    def export_state(self) -> LedgerState:
        with self._guard.hold("export_state"):
            pool = self._pool
            positions = tuple(sorted(self._positions.items()))
            return LedgerState(
                pool=pool,
                positions=positions,
                config=self._config,
                paused=self._paused,
                roles=self._roles.to_dict(),
            )

    def current_total_stake(self) -> int:
        return self.pool_state().total_staked

    def rewards_distributed(self) -> int:
        return self.pool_state().lifetime_distributed

    def rewards_withdrawn(self) -> int:
        return self.pool_state().lifetime_withdrawn

    def receipts(self) -> list[Receipt]:
        with self._guard.hold("receipts"):
            return list(self._receipts)

    def has_role(self, role: Role, account: str) -> bool:
        return self._roles.has(role, account)

    def roles_dict(self) -> dict[str, list[str]]:
        return self._roles.to_dict()

    @property
    def config(self) -> LedgerConfig:
        return self._config

    @property
    def paused(self) -> bool:
        return self._paused

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @contextmanager
    def _operation(self, op: str, **fields: str) -> Iterator[None]:
        try:
            with self._guard.hold(op):
                yield
        except StakingError as exc:
            log_event(logger, "rejected", level=logging.DEBUG, op=op, code=exc.code, reason=str(exc), **fields)
            raise

    def _now(self) -> int:
        return int(self._clock())

    def _require_not_paused(self) -> None:
        if self._paused:
            raise PausedError("ledger is paused")

    def _require_config_change(self, caller: str) -> None:
        if not self._paused:
            raise NotPausedError("configuration changes require a paused ledger")
        self._roles.require(Role.OWNER, caller)

    def _change_config(self, caller: str, config: LedgerConfig) -> Receipt:
        previous = self._config
        self._config = config
        log_event(
            logger,
            Event.CONFIG_CHANGED.value,
            caller=caller,
            before=previous.to_dict(),
            after=config.to_dict(),
        )
        return self._record(Receipt(event=Event.CONFIG_CHANGED, account=caller, timestamp=self._now()))

    def _record(self, receipt: Receipt) -> Receipt:
        self._receipts.append(receipt)
        return receipt

    def _execute(
        self,
        account: Optional[str],
        prior_position: Optional[StakePosition],
        transition: Transition,
        now: int,
    ) -> Receipt:
        prior_pool = self._pool

        violations = check_transition(prior_pool, transition.pool) + check_pool(transition.pool)
        if transition.position is not None:
            violations += check_position(transition.position)
        if violations:
            raise LedgerInvariantError(violations)

        self._pool = transition.pool
        if account is not None:
            self._positions.set(account, transition.position)

        try:
            self._run_transfers(transition.transfers)
        except TokenTransferError as exc:
            self._restore(account, prior_pool, prior_position)
            log_event(
                logger,
                "rolled_back",
                level=logging.WARNING,
                op=transition.effect.event.value,
                account=account,
                reason=str(exc),
            )
            raise TransferFailedError(str(exc)) from exc
        except Exception:
            self._restore(account, prior_pool, prior_position)
            raise

        effect = transition.effect
        receipt = Receipt(
            event=effect.event,
            account=account or "",
            amount=effect.amount,
            reward=effect.reward,
            accumulator_after=effect.accumulator_after,
            total_staked_after=effect.total_staked_after,
            timestamp=now,
        )
        log_event(
            logger,
            effect.event.value,
            account=account,
            amount=effect.amount,
            reward=effect.reward,
            accumulator=effect.accumulator_after,
            total_staked=effect.total_staked_after,
        )
        return self._record(receipt)

    def _restore(
        self,
        account: Optional[str],
        prior_pool: PoolState,
        prior_position: Optional[StakePosition],
    ) -> None:
        self._pool = prior_pool
        if account is not None:
            self._positions.set(account, prior_position)

    def _run_transfers(self, transfers: Sequence[Transfer]) -> None:
        done: list[Transfer] = []
        try:
            for leg in transfers:
                self._transfer(leg)
                done.append(leg)
        except Exception:
            self._compensate(done)
            raise

    def _transfer(self, leg: Transfer) -> None:
        if leg.kind is TransferKind.INTO:
            self._token.transfer_into(leg.counterparty, leg.amount)
        else:
            self._token.transfer_out(leg.counterparty, leg.amount)

    def _compensate(self, done: Sequence[Transfer]) -> None:
        """Reverse completed legs, newest first."""
        for leg in reversed(done):
            reverse = Transfer(
                TransferKind.OUT if leg.kind is TransferKind.INTO else TransferKind.INTO,
                leg.counterparty,
                leg.amount,
            )
            try:
                self._transfer(reverse)
            except TokenTransferError as exc:
                log_event(
                    logger,
                    "compensation_failed",
                    level=logging.ERROR,
                    counterparty=leg.counterparty,
                    amount=leg.amount,
                    reason=str(exc),
                )
                raise LedgerInvariantError(["transfer_compensation_failed"]) from exc
