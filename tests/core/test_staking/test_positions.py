"""Tests for stakeledger/core/staking/positions.py: deposits and compounding top-ups."""

import pytest
from dataclasses import replace

from stakeledger.core.staking import (
    SCALE,
    CapExceededError,
    Event,
    InvalidAmountError,
    PoolState,
    StakePosition,
    Transfer,
    TransferKind,
    WithdrawalPendingError,
    apply_deposit,
    initial_pool_state,
)

CAP = 50_000_000


def _deposit(pool, position, amount, *, now=100, cap=CAP, account="alice"):
    return apply_deposit(
        pool,
        position,
        account=account,
        amount=amount,
        now=now,
        max_staking_amount=cap,
        reward_source="rewards",
    )


class TestFirstDeposit:
    def test_opens_position(self):
        t = _deposit(initial_pool_state(), StakePosition(), 1_000)
        assert t.position == StakePosition(principal=1_000, entry_point=0, started_at=100, exists=True)
        assert t.pool.total_staked == 1_000
        assert t.transfers == (Transfer(TransferKind.INTO, "alice", 1_000),)

    def test_entry_point_is_live_accumulator(self):
        pool = replace(initial_pool_state(), accumulator=5 * SCALE, total_staked=10)
        t = _deposit(pool, StakePosition(), 1_000)
        assert t.position.entry_point == 5 * SCALE

    def test_effect(self):
        t = _deposit(initial_pool_state(), StakePosition(), 1_000)
        assert t.effect.event == Event.STAKE_DEPOSITED
        assert t.effect.amount == 1_000
        assert t.effect.reward == 0
        assert t.effect.total_staked_after == 1_000

    @pytest.mark.parametrize("amount", [0, -1, True, 1.5, "10"])
    def test_invalid_amount(self, amount):
        with pytest.raises(InvalidAmountError):
            _deposit(initial_pool_state(), StakePosition(), amount)


class TestCap:
    def test_exactly_at_cap_accepted(self):
        t = _deposit(initial_pool_state(), StakePosition(), CAP)
        assert t.pool.total_staked == CAP

    def test_over_cap_rejected(self):
        pool = replace(initial_pool_state(), total_staked=CAP - 10)
        with pytest.raises(CapExceededError):
            _deposit(pool, StakePosition(), 11)

    def test_compounded_reward_counts_toward_cap(self):
        pool = PoolState(total_staked=1_000, accumulator=SCALE)
        position = StakePosition(principal=1_000, exists=True)
        # owed reward 1_000 + deposit 1 -> 2_001 > cap 2_000
        with pytest.raises(CapExceededError):
            _deposit(pool, position, 1, cap=2_000)


class TestTopUp:
    def test_compounds_owed_reward(self):
        pool = PoolState(total_staked=1_000, accumulator=SCALE, distributed_total=1_000, lifetime_distributed=1_000)
        position = StakePosition(principal=1_000, entry_point=0, started_at=7, exists=True)
        t = _deposit(pool, position, 500, now=200)
        assert t.position.principal == 2_500
        assert t.position.entry_point == SCALE
        assert t.position.started_at == 7
        assert t.pool.total_staked == 2_500
        assert t.pool.withdrawn_since_last_distribution == 1_000
        assert t.pool.lifetime_withdrawn == 1_000
        assert t.effect.reward == 1_000
        assert t.transfers == (
            Transfer(TransferKind.INTO, "alice", 500),
            Transfer(TransferKind.INTO, "rewards", 1_000),
        )

    def test_no_reward_leg_when_nothing_owed(self):
        pool = PoolState(total_staked=1_000, accumulator=SCALE)
        position = StakePosition(principal=1_000, entry_point=SCALE, exists=True)
        t = _deposit(pool, position, 1)
        assert len(t.transfers) == 1

    def test_carried_reward_is_compounded(self):
        pool = PoolState(total_staked=600, accumulator=2 * SCALE, lifetime_distributed=10_000)
        position = StakePosition(principal=600, entry_point=2 * SCALE, carried_reward=300, exists=True)
        t = _deposit(pool, position, 100)
        assert t.position.principal == 1_000
        assert t.position.carried_reward == 0

    def test_pending_withdrawal_blocks_deposit(self):
        position = StakePosition(
            principal=1_000, withdrawal_pending=True, initiated_at=5, requested_amount=1_000, exists=True
        )
        with pytest.raises(WithdrawalPendingError):
            _deposit(initial_pool_state(), position, 1)

    def test_input_states_untouched(self):
        pool = PoolState(total_staked=1_000, accumulator=SCALE)
        position = StakePosition(principal=1_000, exists=True)
        _deposit(pool, position, 10)
        assert pool == PoolState(total_staked=1_000, accumulator=SCALE)
        assert position == StakePosition(principal=1_000, exists=True)
