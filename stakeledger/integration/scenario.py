"""
Scenario runner: replay a sequence of ledger operations against an in-memory token.

A scenario is a mapping (usually loaded from YAML)::

    config: {reward_source: rewards, max_staking_amount: 50000000, unstaking_period_days: 7}
    admin: owner
    start_time: 0
    balances: {alice: 1000000, bob: 2000000}
    approvals: {alice: 1000000, bob: 2000000, rewards: 100000000}
    steps:
      - {op: deposit, account: alice, amount: 1000000}
      - {op: fund_rewards, amount: 1000000}
      - {op: distribute}
      - {op: initiate_withdrawal, account: alice}
      - {op: advance, days: 7}
      - {op: execute_withdrawal, account: alice}
      - {op: deposit, account: carol, amount: 1, expect_error: cap_exceeded}

Each step may carry `expect_error: <code>`; the step must then fail with a
`StakingError` of that code. The result holds the final pool state, positions,
token balances, receipts and the snapshot commitment.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Callable, Dict, Mapping

from ..core.staking.errors import StakingError
from ..core.staking.state import pool_to_dict
from .config import SECONDS_PER_DAY, config_from_mapping
from .ledger import StakingLedger
from .ledger_snapshot import snapshot_from_ledger
from .token import InMemoryToken

logger = logging.getLogger(__name__)

Json = Dict[str, Any]


class ScenarioError(Exception):
    """Raised when a scenario is malformed or a step does not behave as declared."""


class ManualClock:
    """Deterministic clock for simulations; time only moves via `advance`."""

    def __init__(self, start: int = 0) -> None:
        self.now = int(start)

    def __call__(self) -> int:
        return self.now

    def advance(self, seconds: int) -> None:
        if seconds < 0:
            raise ValueError("time cannot move backwards")
        self.now += seconds


class _Run:
    def __init__(self, ledger: StakingLedger, token: InMemoryToken, clock: ManualClock, admin: str) -> None:
        self.ledger = ledger
        self.token = token
        self.clock = clock
        self.admin = admin


def _int_field(step: Mapping[str, Any], name: str, default: Any = None) -> int:
    value = step.get(name, default)
    if not isinstance(value, int) or isinstance(value, bool):
        raise ScenarioError(f"step field {name!r} must be an int, got {value!r}")
    return value


def _str_field(step: Mapping[str, Any], name: str, default: Any = None) -> str:
    value = step.get(name, default)
    if not isinstance(value, str) or not value:
        raise ScenarioError(f"step field {name!r} must be a non-empty str, got {value!r}")
    return value


def _op_deposit(run: _Run, step: Mapping[str, Any]) -> None:
    run.ledger.deposit(_str_field(step, "account"), _int_field(step, "amount"))


def _op_initiate_withdrawal(run: _Run, step: Mapping[str, Any]) -> None:
    amount = step.get("amount")
    run.ledger.initiate_withdrawal(
        _str_field(step, "account"),
        None if amount is None else _int_field(step, "amount"),
    )


def _op_execute_withdrawal(run: _Run, step: Mapping[str, Any]) -> None:
    run.ledger.execute_withdrawal(_str_field(step, "account"))


def _op_distribute(run: _Run, step: Mapping[str, Any]) -> None:
    run.ledger.distribute(_str_field(step, "caller", run.admin))


def _op_fund_rewards(run: _Run, step: Mapping[str, Any]) -> None:
    amount = _int_field(step, "amount")
    source = run.ledger.config.reward_source
    donor = step.get("from")
    if donor is None:
        run.token.mint(source, amount)
    else:
        run.token.transfer(_str_field(step, "from"), source, amount)


def _op_mint(run: _Run, step: Mapping[str, Any]) -> None:
    run.token.mint(_str_field(step, "account"), _int_field(step, "amount"))


def _op_approve(run: _Run, step: Mapping[str, Any]) -> None:
    run.token.approve(_str_field(step, "account"), run.token.ledger_account, _int_field(step, "amount"))


def _op_advance(run: _Run, step: Mapping[str, Any]) -> None:
    seconds = _int_field(step, "seconds", 0) + _int_field(step, "days", 0) * SECONDS_PER_DAY
    run.clock.advance(seconds)


def _op_pause(run: _Run, step: Mapping[str, Any]) -> None:
    run.ledger.pause(_str_field(step, "caller", run.admin))


def _op_unpause(run: _Run, step: Mapping[str, Any]) -> None:
    run.ledger.unpause(_str_field(step, "caller", run.admin))


StepFn = Callable[[_Run, Mapping[str, Any]], None]

_DISPATCH: dict[str, StepFn] = {
    "deposit": _op_deposit,
    "initiate_withdrawal": _op_initiate_withdrawal,
    "execute_withdrawal": _op_execute_withdrawal,
    "distribute": _op_distribute,
    "fund_rewards": _op_fund_rewards,
    "mint": _op_mint,
    "approve": _op_approve,
    "advance": _op_advance,
    "pause": _op_pause,
    "unpause": _op_unpause,
}


def run_scenario(scenario: Mapping[str, Any]) -> Json:
    if not isinstance(scenario, Mapping):
        raise ScenarioError("scenario must be a mapping")

    config = config_from_mapping(scenario.get("config") or {})
    admin = scenario.get("admin", "owner")
    clock = ManualClock(scenario.get("start_time", 0))
    token = InMemoryToken(scenario.get("ledger_account", "stake-ledger"))
    for account, amount in sorted((scenario.get("balances") or {}).items()):
        token.mint(account, amount)
    for account, amount in sorted((scenario.get("approvals") or {}).items()):
        token.approve(account, token.ledger_account, amount)

    ledger = StakingLedger(token, config, admin=admin, clock=clock)
    run = _Run(ledger, token, clock, admin)

    steps = scenario.get("steps") or []
    if not isinstance(steps, list):
        raise ScenarioError("steps must be a list")
    for index, step in enumerate(steps):
        if not isinstance(step, Mapping):
            raise ScenarioError(f"step {index} must be a mapping")
        op = step.get("op")
        fn = _DISPATCH.get(op)  # type: ignore[arg-type]
        if fn is None:
            raise ScenarioError(f"step {index}: unknown op {op!r}")
        expected = step.get("expect_error")
        try:
            fn(run, step)
        except StakingError as exc:
            if expected != exc.code:
                raise ScenarioError(f"step {index} ({op}) failed: {exc.code}: {exc}") from exc
            logger.debug("step %d (%s) rejected as expected: %s", index, op, exc.code)
            continue
        if expected is not None:
            raise ScenarioError(f"step {index} ({op}) succeeded but expected {expected}")

    accounts = sorted({account for account, _ in ledger.positions()} | set(scenario.get("balances") or {}))
    positions: Json = {}
    for account in accounts:
        view = ledger.position_of(account)
        positions[account] = {**asdict(view), "status": view.status.value}

    return {
        "time": clock.now,
        "pool": pool_to_dict(ledger.pool_state()),
        "positions": positions,
        "balances": token.balances(),
        "receipts": [
            {**asdict(r), "event": r.event.value} for r in ledger.receipts()
        ],
        "snapshot_commitment": snapshot_from_ledger(ledger).commitment(),
    }
