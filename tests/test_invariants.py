"""
Tests for lfwpool_core.invariants.
"""

from conftest import LOCK_TICKS
from lfwpool_core.invariants import check_pool_invariants, collect_violations


class TestPoolInvariants:
    def test_fresh_pool_passes(self, live_pool, token):
        assert check_pool_invariants(live_pool, token) == (True, "")

    def test_passes_through_lifecycle(self, live_pool, token, clock):
        live_pool.stake("alice", 10_000)
        live_pool.stake("bob", 5_000)
        assert check_pool_invariants(live_pool, token)[0]
        clock.advance(LOCK_TICKS)
        live_pool.claim("bob")
        live_pool.unstake("alice", 4_000)
        assert check_pool_invariants(live_pool, token)[0]
        live_pool.unstake("alice", 6_000)
        assert check_pool_invariants(live_pool, token)[0]

    def test_detects_total_mismatch(self, live_pool):
        live_pool.stake("alice", 100)
        live_pool.total_staked += 1
        ok, msg = check_pool_invariants(live_pool)
        assert not ok
        assert "total_staked" in msg

    def test_detects_underfunded_pool(self, live_pool, token):
        live_pool.stake("alice", 100)
        token.balances["lfw-pool"] = 50
        report = collect_violations(live_pool, token)
        assert not report
        assert any("does not cover" in e for e in report.errors)

    def test_detects_future_checkpoint(self, live_pool, clock):
        live_pool.stake("alice", 100)
        live_pool._stakes["alice"].checkpoint_tick = clock.now() + 5
        ok, msg = check_pool_invariants(live_pool)
        assert not ok
        assert "checkpoint" in msg
