"""
Tests for lfwpool_core.config — TOML configuration and environment overrides.

Covers:
  - Default values for all dataclass sections
  - TOML parsing and section merging
  - Environment variable overrides (precedence over TOML)
  - _merge helper edge cases
  - Missing TOML files
  - Hyphenated key handling
  - Validation of tick rates and log format
"""

from __future__ import annotations

import os
import tempfile
import textwrap
import unittest
from unittest.mock import patch

from lfwpool_core.config import (
    LFWPoolConfig,
    LoggingConfig,
    PoolSettings,
    _merge,
    load_config,
)

_CLEAN_ENV = {k: v for k, v in os.environ.items() if not k.startswith("LFWPOOL_")}


def _write_toml(body: str) -> str:
    fd, path = tempfile.mkstemp(suffix=".toml")
    with os.fdopen(fd, "w") as f:
        f.write(textwrap.dedent(body))
    return path


# ═══════════════════════════════════════════════════════════════════
#  Defaults
# ═══════════════════════════════════════════════════════════════════

class TestDefaults(unittest.TestCase):

    def test_pool_defaults(self):
        p = PoolSettings()
        self.assertEqual(p.ticks_per_day, 28_800)
        self.assertEqual(p.days_per_year, 365)
        self.assertEqual(p.ticks_per_year, 10_512_000)
        self.assertEqual(p.token_decimals, 18)
        self.assertEqual(p.token_symbol, "LFW")

    def test_logging_defaults(self):
        lg = LoggingConfig()
        self.assertEqual(lg.level, "INFO")
        self.assertEqual(lg.format, "human")
        self.assertIsNone(lg.file)

    def test_top_level_sections(self):
        cfg = LFWPoolConfig()
        self.assertIsInstance(cfg.pool, PoolSettings)
        self.assertIsInstance(cfg.logging, LoggingConfig)


# ═══════════════════════════════════════════════════════════════════
#  TOML loading
# ═══════════════════════════════════════════════════════════════════

@patch.dict(os.environ, _CLEAN_ENV, clear=True)
class TestTomlLoading(unittest.TestCase):

    def setUp(self):
        self._paths: list[str] = []

    def tearDown(self):
        for p in self._paths:
            os.unlink(p)

    def _toml(self, body: str) -> str:
        path = _write_toml(body)
        self._paths.append(path)
        return path

    def test_no_path_gives_defaults(self):
        cfg = load_config()
        self.assertEqual(cfg.pool, PoolSettings())
        self.assertEqual(cfg.logging, LoggingConfig())

    def test_missing_file_gives_defaults(self):
        cfg = load_config("/nonexistent/lfwpool.toml")
        self.assertEqual(cfg.pool.ticks_per_day, 28_800)

    def test_sections_merged(self):
        path = self._toml("""
            [pool]
            ticks_per_day = 17280
            token_symbol = "sLFW"

            [logging]
            level = "DEBUG"
            format = "json"
        """)
        cfg = load_config(path)
        self.assertEqual(cfg.pool.ticks_per_day, 17_280)
        self.assertEqual(cfg.pool.ticks_per_year, 17_280 * 365)
        self.assertEqual(cfg.pool.token_symbol, "sLFW")
        self.assertEqual(cfg.logging.level, "DEBUG")
        self.assertEqual(cfg.logging.format, "json")

    def test_hyphenated_keys(self):
        path = self._toml("""
            [pool]
            days-per-year = 360
            token-decimals = 9
        """)
        cfg = load_config(path)
        self.assertEqual(cfg.pool.days_per_year, 360)
        self.assertEqual(cfg.pool.token_decimals, 9)

    def test_unknown_sections_and_keys_ignored(self):
        path = self._toml("""
            [pool]
            not_a_setting = 1

            [api]
            port = 8080
        """)
        cfg = load_config(path)
        self.assertFalse(hasattr(cfg.pool, "not_a_setting"))
        self.assertFalse(hasattr(cfg, "api"))

    def test_non_positive_tick_rate_rejected(self):
        path = self._toml("""
            [pool]
            ticks_per_day = 0
        """)
        with self.assertRaises(ValueError):
            load_config(path)

    def test_bad_log_format_rejected(self):
        path = self._toml("""
            [logging]
            format = "xml"
        """)
        with self.assertRaises(ValueError):
            load_config(path)


# ═══════════════════════════════════════════════════════════════════
#  Environment overrides
# ═══════════════════════════════════════════════════════════════════

class TestEnvOverrides(unittest.TestCase):

    def test_env_beats_toml(self):
        path = _write_toml("""
            [pool]
            ticks_per_day = 100
        """)
        try:
            env = dict(_CLEAN_ENV, LFWPOOL_TICKS_PER_DAY="200")
            with patch.dict(os.environ, env, clear=True):
                cfg = load_config(path)
        finally:
            os.unlink(path)
        self.assertEqual(cfg.pool.ticks_per_day, 200)

    def test_all_env_vars(self):
        env = dict(
            _CLEAN_ENV,
            LFWPOOL_DAYS_PER_YEAR="360",
            LFWPOOL_TOKEN_DECIMALS="6",
            LFWPOOL_TOKEN_SYMBOL="USDT",
            LFWPOOL_LOG_LEVEL="debug",
            LFWPOOL_LOG_FMT="json",
            LFWPOOL_LOG_FILE="/tmp/lfwpool.log",
        )
        with patch.dict(os.environ, env, clear=True):
            cfg = load_config()
        self.assertEqual(cfg.pool.days_per_year, 360)
        self.assertEqual(cfg.pool.token_decimals, 6)
        self.assertEqual(cfg.pool.token_symbol, "USDT")
        self.assertEqual(cfg.logging.level, "DEBUG")
        self.assertEqual(cfg.logging.format, "json")
        self.assertEqual(cfg.logging.file, "/tmp/lfwpool.log")

    def test_non_numeric_env_rejected(self):
        env = dict(_CLEAN_ENV, LFWPOOL_TICKS_PER_DAY="fast")
        with patch.dict(os.environ, env, clear=True):
            with self.assertRaises(ValueError):
                load_config()


# ═══════════════════════════════════════════════════════════════════
#  _merge helper
# ═══════════════════════════════════════════════════════════════════

class TestMerge(unittest.TestCase):

    def test_merge_sets_known_fields(self):
        p = PoolSettings()
        _merge(p, {"ticks_per_day": 5, "token-symbol": "X"})
        self.assertEqual(p.ticks_per_day, 5)
        self.assertEqual(p.token_symbol, "X")

    def test_merge_ignores_unknown(self):
        p = PoolSettings()
        _merge(p, {"bogus": 1})
        self.assertEqual(p, PoolSettings())

    def test_merge_empty(self):
        lg = LoggingConfig()
        _merge(lg, {})
        self.assertEqual(lg, LoggingConfig())


if __name__ == "__main__":
    unittest.main()
