"""
Reward accrual for the LFW staking pool.

Reward accrues linearly on principal at an integer annual percentage
yield, measured in block ticks rather than wall-clock seconds:

    reward = principal × apy × elapsed_ticks // (100 × ticks_per_year)

All arithmetic is on Python ``int`` (arbitrary precision) and the
division floors, so splitting one interval into many small claims can
never pay out more than a single claim over the whole interval.

Tick rate
─────────
The pool's clock is the host chain's block height.  Nominal rate is one
block every 3 seconds:

    TICKS_PER_DAY  = 86_400 / 3     = 28_800
    TICKS_PER_YEAR = 365 × 28_800   = 10_512_000
"""

from __future__ import annotations

# ── Tick-rate constants ─────────────────────────────────────────────────

SECONDS_PER_TICK: int = 3
TICKS_PER_DAY: int = 86_400 // SECONDS_PER_TICK  # 28_800
DAYS_PER_YEAR: int = 365
TICKS_PER_YEAR: int = DAYS_PER_YEAR * TICKS_PER_DAY  # 10_512_000

# APY is an integer percentage: 10 == 10 % per year
APY_SCALE: int = 100


def _require_int(name: str, value: int) -> None:
    # bool is an int subclass; a True principal is always a caller bug
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"{name} must be an int, got {type(value).__name__}")


def compute_reward(
    principal: int,
    apy: int,
    elapsed_ticks: int,
    ticks_per_year: int = TICKS_PER_YEAR,
) -> int:
    """
    Reward owed on *principal* held for *elapsed_ticks* at *apy* percent.

    Floors toward zero.  Returns exactly 0 when any of principal, apy
    or elapsed_ticks is zero.

    >>> compute_reward(1_000, 10, TICKS_PER_YEAR)
    100
    >>> compute_reward(1_000, 10, 0)
    0
    """
    for name, value in (
        ("principal", principal),
        ("apy", apy),
        ("elapsed_ticks", elapsed_ticks),
        ("ticks_per_year", ticks_per_year),
    ):
        _require_int(name, value)
    if principal < 0 or apy < 0 or elapsed_ticks < 0:
        raise ValueError("principal, apy and elapsed_ticks must be non-negative")
    if ticks_per_year <= 0:
        raise ValueError("ticks_per_year must be positive")

    if principal == 0 or apy == 0 or elapsed_ticks == 0:
        return 0
    return (principal * apy * elapsed_ticks) // (APY_SCALE * ticks_per_year)


def lock_period_to_ticks(days: int, ticks_per_day: int = TICKS_PER_DAY) -> int:
    """Convert the initialize lock-period parameter (whole days) to ticks."""
    _require_int("lock period", days)
    _require_int("ticks_per_day", ticks_per_day)
    if days < 0:
        raise ValueError("Lock period cannot be negative")
    if ticks_per_day <= 0:
        raise ValueError("ticks_per_day must be positive")
    return days * ticks_per_day
