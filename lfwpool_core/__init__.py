"""
LFW staking pool - single-token staking with lock period and linear APY.

Key features:
- Integer, floor-rounded reward accrual measured in block ticks
- Administrator-controlled APY and one-shot initialization
- Lock period restarted by every stake
- Reward always settled before principal leaves the pool
- Token, access control and clock injected as ports
"""

__version__ = "1.0.0"
__all__ = [
    "accrual",
    "address",
    "config",
    "errors",
    "events",
    "invariants",
    "logging_config",
    "pool_config",
    "ports",
    "staking",
    "units",
]
