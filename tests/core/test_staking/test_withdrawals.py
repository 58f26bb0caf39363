"""Tests for stakeledger/core/staking/withdrawals.py: initiate/execute lifecycle."""

import pytest

from stakeledger.core.staking import (
    SCALE,
    AlreadyPendingError,
    DelayNotElapsedError,
    Event,
    InvalidAmountError,
    NoPositionError,
    NotInitiatedError,
    PoolState,
    StakePosition,
    Transfer,
    TransferKind,
    settle_withdrawal,
    snapshot_for_withdrawal,
)

DELAY = 7 * 86_400
X = 3 * SCALE


def _active(principal=1_000_000, entry=0):
    return StakePosition(principal=principal, entry_point=entry, started_at=1, exists=True)


def _initiate(pool, position, amount=None, now=1_000):
    return snapshot_for_withdrawal(pool, position, account="alice", amount=amount, now=now)


def _settle(pool, position, now):
    return settle_withdrawal(
        pool, position, account="alice", now=now, unstaking_delay=DELAY, reward_source="rewards"
    )


class TestInitiate:
    def test_full_by_default(self):
        pool = PoolState(total_staked=1_000_000, accumulator=X)
        t = _initiate(pool, _active())
        assert t.position.withdrawal_pending
        assert t.position.exit_point == X
        assert t.position.initiated_at == 1_000
        assert t.position.requested_amount == 1_000_000
        assert t.pool.total_staked == 0
        assert t.transfers == ()

    def test_effect_reports_frozen_reward(self):
        pool = PoolState(total_staked=1_000_000, accumulator=X)
        t = _initiate(pool, _active())
        assert t.effect.event == Event.WITHDRAW_INITIATED
        assert t.effect.reward == 3_000_000

    def test_partial_removes_only_requested_amount(self):
        pool = PoolState(total_staked=1_500_000, accumulator=X)
        t = _initiate(pool, _active(), amount=400_000)
        assert t.position.requested_amount == 400_000
        assert t.pool.total_staked == 1_500_000 - 400_000

    def test_settle_does_not_re_add_remainder(self):
        pool = PoolState(total_staked=1_500_000, accumulator=X)
        t = _initiate(pool, _active(), amount=400_000)
        settled = _settle(t.pool, t.position, now=1_000 + DELAY)
        assert settled.pool.total_staked == 1_100_000
        assert settled.position.principal == 600_000

    def test_no_position(self):
        with pytest.raises(NoPositionError):
            _initiate(PoolState(), StakePosition())

    def test_already_pending(self):
        pool = PoolState(total_staked=1_000_000, accumulator=X)
        t = _initiate(pool, _active())
        with pytest.raises(AlreadyPendingError):
            _initiate(t.pool, t.position)

    def test_amount_over_principal(self):
        pool = PoolState(total_staked=1_000_000)
        with pytest.raises(InvalidAmountError):
            _initiate(pool, _active(), amount=1_000_001)

    @pytest.mark.parametrize("amount", [0, -5])
    def test_non_positive_amount(self, amount):
        with pytest.raises(InvalidAmountError):
            _initiate(PoolState(total_staked=1_000_000), _active(), amount=amount)


class TestExecute:
    def _pending(self, amount=None):
        pool = PoolState(total_staked=1_000_000, accumulator=X, lifetime_distributed=10**9)
        t = _initiate(pool, _active(), amount=amount)
        return t.pool, t.position

    def test_not_initiated(self):
        with pytest.raises(NotInitiatedError):
            _settle(PoolState(total_staked=1_000_000), _active(), now=10**9)

    def test_no_position(self):
        with pytest.raises(NoPositionError):
            _settle(PoolState(), StakePosition(), now=10**9)

    def test_one_second_early(self):
        pool, position = self._pending()
        with pytest.raises(DelayNotElapsedError) as ei:
            _settle(pool, position, now=1_000 + DELAY - 1)
        assert ei.value.available_at == 1_000 + DELAY

    def test_exactly_at_boundary(self):
        pool, position = self._pending()
        t = _settle(pool, position, now=1_000 + DELAY)
        assert t.position is None

    def test_full_payout(self):
        pool, position = self._pending()
        t = _settle(pool, position, now=1_000 + DELAY)
        assert t.effect.event == Event.WITHDRAW_EXECUTED
        assert t.effect.amount == 1_000_000
        assert t.effect.reward == 3_000_000
        assert t.transfers == (
            Transfer(TransferKind.INTO, "rewards", 3_000_000),
            Transfer(TransferKind.OUT, "alice", 4_000_000),
        )
        assert t.pool.lifetime_withdrawn == 3_000_000
        assert t.pool.withdrawn_since_last_distribution == 3_000_000
        assert t.pool.total_staked == 0

    def test_reward_ignores_later_growth(self):
        pool, position = self._pending()
        grown = PoolState(
            total_staked=pool.total_staked,
            accumulator=pool.accumulator + 50 * SCALE,
            lifetime_distributed=pool.lifetime_distributed,
        )
        t = _settle(grown, position, now=1_000 + DELAY)
        assert t.effect.reward == 3_000_000

    def test_partial(self):
        pool, position = self._pending(amount=400_000)
        t = _settle(pool, position, now=1_000 + DELAY)
        assert t.effect.reward == 400_000 * X // SCALE
        assert t.position.principal == 600_000
        assert t.position.entry_point == X
        assert t.position.carried_reward == 600_000 * X // SCALE
        assert not t.position.withdrawal_pending
        assert t.pool.total_staked == 600_000
        assert t.transfers[-1] == Transfer(TransferKind.OUT, "alice", 400_000 + 1_200_000)

    def test_no_reward_leg_without_reward(self):
        pool = PoolState(total_staked=10)
        t = _initiate(pool, _active(principal=10))
        settled = _settle(t.pool, t.position, now=1_000 + DELAY)
        assert settled.transfers == (Transfer(TransferKind.OUT, "alice", 10),)
