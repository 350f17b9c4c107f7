"""
TOML-based configuration for LFW staking pools.

Loads settings from a TOML file and/or environment variables.
Environment variables take precedence over file values.

Usage:
    from lfwpool_core.config import load_config
    cfg = load_config("lfwpool.toml")
    pool = StakingPool.from_settings(cfg.pool, token, access, clock)
"""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

from lfwpool_core.accrual import DAYS_PER_YEAR, TICKS_PER_DAY
from lfwpool_core.units import DEFAULT_SYMBOL, TOKEN_DECIMALS


@dataclass
class PoolSettings:
    """Clock rate and token units shared by every pool built from this config."""
    ticks_per_day: int = TICKS_PER_DAY     # 3-second blocks
    days_per_year: int = DAYS_PER_YEAR
    token_decimals: int = TOKEN_DECIMALS
    token_symbol: str = DEFAULT_SYMBOL

    @property
    def ticks_per_year(self) -> int:
        return self.ticks_per_day * self.days_per_year


@dataclass
class LoggingConfig:
    """Logging settings."""
    level: str = "INFO"
    format: str = "human"   # "human" or "json"
    file: str | None = None


@dataclass
class LFWPoolConfig:
    """Top-level configuration container."""
    pool: PoolSettings = field(default_factory=PoolSettings)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _merge(dc: Any, raw: dict[str, Any]) -> None:
    """Merge a raw dict into a dataclass instance (in-place)."""
    for key, value in raw.items():
        key_under = key.replace("-", "_")
        if hasattr(dc, key_under):
            setattr(dc, key_under, value)


def _validate(cfg: LFWPoolConfig) -> None:
    pool = cfg.pool
    for name in ("ticks_per_day", "days_per_year"):
        value = getattr(pool, name)
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            raise ValueError(f"pool.{name} must be a positive integer, got {value!r}")
    if not isinstance(pool.token_decimals, int) or pool.token_decimals < 0:
        raise ValueError(f"pool.token_decimals must be >= 0, got {pool.token_decimals!r}")
    if cfg.logging.format not in ("human", "json"):
        raise ValueError(f"logging.format must be 'human' or 'json', got {cfg.logging.format!r}")


def load_config(path: str | None = None) -> LFWPoolConfig:
    """
    Load configuration from a TOML file, then overlay environment variables.

    Env-var mapping:
        LFWPOOL_TICKS_PER_DAY   -> pool.ticks_per_day
        LFWPOOL_DAYS_PER_YEAR   -> pool.days_per_year
        LFWPOOL_TOKEN_DECIMALS  -> pool.token_decimals
        LFWPOOL_TOKEN_SYMBOL    -> pool.token_symbol
        LFWPOOL_LOG_LEVEL       -> logging.level
        LFWPOOL_LOG_FMT         -> logging.format
        LFWPOOL_LOG_FILE        -> logging.file
    """
    cfg = LFWPoolConfig()

    # ── TOML file ────────────────────────────────────────────────
    if path is not None:
        p = Path(path)
        if p.exists():
            with open(p, "rb") as f:
                data = tomllib.load(f)
            for section_name, section_dc in [
                ("pool", cfg.pool),
                ("logging", cfg.logging),
            ]:
                if section_name in data:
                    _merge(section_dc, data[section_name])

    # ── Environment variable overrides ───────────────────────────
    if v := os.environ.get("LFWPOOL_TICKS_PER_DAY"):
        cfg.pool.ticks_per_day = int(v)
    if v := os.environ.get("LFWPOOL_DAYS_PER_YEAR"):
        cfg.pool.days_per_year = int(v)
    if v := os.environ.get("LFWPOOL_TOKEN_DECIMALS"):
        cfg.pool.token_decimals = int(v)
    if v := os.environ.get("LFWPOOL_TOKEN_SYMBOL"):
        cfg.pool.token_symbol = v
    if v := os.environ.get("LFWPOOL_LOG_LEVEL"):
        cfg.logging.level = v.upper()
    if v := os.environ.get("LFWPOOL_LOG_FMT"):
        cfg.logging.format = v
    if v := os.environ.get("LFWPOOL_LOG_FILE"):
        cfg.logging.file = v

    _validate(cfg)
    return cfg
