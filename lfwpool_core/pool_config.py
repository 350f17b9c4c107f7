"""
Per-pool configuration.

One ``PoolConfig`` belongs to each ``StakingPool`` instance; there is no
module-level pool state, so any number of pools can coexist.
"""

from __future__ import annotations

from dataclasses import dataclass, replace

from lfwpool_core.accrual import TICKS_PER_DAY, TICKS_PER_YEAR


@dataclass
class PoolConfig:
    """Administrator-controlled pool parameters."""
    ticks_per_day: int = TICKS_PER_DAY
    ticks_per_year: int = TICKS_PER_YEAR
    reward_token: str = ""
    separate_reward_token: bool = False
    apy: int = 0                 # integer percent per year
    lock_period_days: int = 0
    lock_period_ticks: int = 0
    administrator: str = ""
    initialized: bool = False

    def __post_init__(self) -> None:
        if self.ticks_per_day <= 0 or self.ticks_per_year <= 0:
            raise ValueError("Tick rates must be positive")

    def snapshot(self) -> PoolConfig:
        """Detached copy, for reporting and before/after comparisons."""
        return replace(self)

    def to_dict(self) -> dict:
        return {
            "reward_token": self.reward_token,
            "separate_reward_token": self.separate_reward_token,
            "apy": self.apy,
            "apy_pct": f"{self.apy}%",
            "lock_period_days": self.lock_period_days,
            "lock_period_ticks": self.lock_period_ticks,
            "ticks_per_day": self.ticks_per_day,
            "ticks_per_year": self.ticks_per_year,
            "administrator": self.administrator,
            "initialized": self.initialized,
        }
