"""
Ledger invariant checks for a staking pool.

  - Every stored record has positive principal
  - No checkpoint or stake origin lies in the future
  - Sum of principals equals the pool's ``total_staked``
  - The pool's token balance covers all staked principal (when the pool
    knows its own address)

Intended for tests and for hosts that want to audit a pool after each
operation.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class InvariantReport:
    passed: bool
    errors: list[str]

    def __bool__(self) -> bool:
        return self.passed


def check_pool_invariants(pool, token=None) -> tuple[bool, str]:
    """
    Verify all invariants against the pool's current state.
    Returns (passed, error_message).
    """
    report = collect_violations(pool, token)
    return report.passed, "; ".join(report.errors)


def collect_violations(pool, token=None) -> InvariantReport:
    errors: list[str] = []
    now = pool.current_tick()
    principal_sum = 0
    for record in pool.records():
        if record.principal <= 0:
            errors.append(f"{record.address}: stored record with principal {record.principal}")
        if record.checkpoint_tick > now:
            errors.append(
                f"{record.address}: checkpoint {record.checkpoint_tick} is after tick {now}"
            )
        if record.stake_origin_tick > now:
            errors.append(
                f"{record.address}: stake origin {record.stake_origin_tick} is after tick {now}"
            )
        principal_sum += record.principal

    if principal_sum != pool.total_staked:
        errors.append(
            f"Sum of principals {principal_sum} != total_staked {pool.total_staked}"
        )
    if pool.total_staked < 0:
        errors.append(f"total_staked is negative: {pool.total_staked}")

    if token is not None and pool.address:
        balance = token.balance_of(pool.address)
        if balance < pool.total_staked:
            errors.append(
                f"Pool balance {balance} does not cover staked principal {pool.total_staked}"
            )
    return InvariantReport(passed=not errors, errors=errors)
