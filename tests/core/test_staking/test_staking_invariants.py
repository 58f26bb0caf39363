"""Tests for stakeledger/core/staking/invariants.py."""

from stakeledger.core.staking import SCALE, PoolState, StakePosition
from stakeledger.core.staking.invariants import (
    POOL_INVARIANTS,
    POSITION_INVARIANTS,
    check_conservation,
    check_pool,
    check_position,
    check_transition,
)


class TestPoolInvariants:
    def test_initial_state_passes(self):
        assert check_pool(PoolState()) == []

    def test_negative_total(self):
        assert "inv_pool_nonneg" in check_pool(PoolState(total_staked=-1))

    def test_withdrawn_above_distributed(self):
        assert check_pool(PoolState(lifetime_withdrawn=2, lifetime_distributed=1)) == [
            "inv_withdrawn_le_distributed"
        ]

    def test_registry_names_match_functions(self):
        for inv_id, fn in {**POOL_INVARIANTS, **POSITION_INVARIANTS}.items():
            assert fn.__name__ == inv_id


class TestPositionInvariants:
    def test_empty_position_passes(self):
        assert check_position(StakePosition()) == []

    def test_active_with_exit_marker(self):
        s = StakePosition(principal=1, exit_point=5, exists=True)
        assert check_position(s) == ["inv_active_markers_zeroed"]

    def test_pending_exit_before_entry(self):
        s = StakePosition(
            principal=1, entry_point=10, withdrawal_pending=True, exit_point=5, requested_amount=1, exists=True
        )
        assert check_position(s) == ["inv_exit_not_before_entry"]

    def test_pending_request_over_principal(self):
        s = StakePosition(principal=1, withdrawal_pending=True, requested_amount=2, exists=True)
        assert check_position(s) == ["inv_requested_within_principal"]

    def test_cleared_position_with_leftovers(self):
        assert check_position(StakePosition(carried_reward=1)) == ["inv_cleared_zeroed"]

    def test_open_without_principal(self):
        assert check_position(StakePosition(exists=True)) == ["inv_open_has_principal"]


class TestTransition:
    def test_monotone_ok(self):
        assert check_transition(PoolState(accumulator=1), PoolState(accumulator=2)) == []

    def test_accumulator_decrease(self):
        assert check_transition(PoolState(accumulator=2), PoolState(accumulator=1)) == [
            "inv_accumulator_monotone"
        ]

    def test_lifetime_counters(self):
        before = PoolState(lifetime_distributed=5, lifetime_withdrawn=5)
        assert check_transition(before, PoolState()) == [
            "inv_lifetime_distributed_monotone",
            "inv_lifetime_withdrawn_monotone",
        ]


class TestConservation:
    def test_total_matches_active(self):
        pool = PoolState(total_staked=30, accumulator=SCALE)
        positions = [
            StakePosition(principal=10, exists=True),
            StakePosition(principal=20, exists=True),
            StakePosition(
                principal=5, withdrawal_pending=True, exit_point=SCALE, requested_amount=5, exists=True
            ),
        ]
        assert check_conservation(pool, positions, reward_source_balance=35) == []

    def test_total_mismatch(self):
        pool = PoolState(total_staked=31)
        assert check_conservation(pool, [StakePosition(principal=30, exists=True)]) == [
            "inv_total_staked_matches_active"
        ]

    def test_owed_exceeds_reward_source(self):
        pool = PoolState(total_staked=10, accumulator=SCALE)
        positions = [StakePosition(principal=10, exists=True)]
        assert check_conservation(pool, positions, reward_source_balance=9) == ["inv_reward_conservation"]

    def test_pending_remainder_still_counts(self):
        pool = PoolState(total_staked=6)
        pending = StakePosition(principal=10, withdrawal_pending=True, requested_amount=4, exists=True)
        assert check_conservation(pool, [pending]) == []
        assert check_conservation(PoolState(total_staked=0), [pending]) == ["inv_total_staked_matches_active"]
