"""
Error kinds raised by the LFW staking pool.

Every failed operation raises one of these synchronously and leaves the
pool state exactly as it was before the call.  Nothing is retried.
"""

from __future__ import annotations


class PoolError(Exception):
    """Base class for all staking-pool failures."""


class AlreadyInitialized(PoolError):
    """``initialize`` was called on a pool that is already initialized."""


class NotInitialized(PoolError):
    """An operation other than ``initialize`` ran before initialization."""


class Unauthorized(PoolError, PermissionError):
    """The caller is not the pool administrator."""


class NothingStaked(PoolError):
    """claim / unstake from an account with no active stake."""


class InsufficientStake(PoolError):
    """Unstake amount is zero or exceeds the caller's principal."""


class InvalidAmount(PoolError, ValueError):
    """Stake amount must be a positive integer."""


class LockPeriodActive(PoolError):
    """Principal is still inside its lock window."""

    def __init__(self, account: str, unlock_tick: int, now: int) -> None:
        self.account = account
        self.unlock_tick = unlock_tick
        self.now = now
        super().__init__(
            f"Stake of {account} is locked until tick {unlock_tick} "
            f"({unlock_tick - now} ticks remaining)"
        )


class TransferFailure(PoolError):
    """The token port could not complete a pull or push."""

    def __init__(self, direction: str, account: str, amount: int, reason: str = "") -> None:
        self.direction = direction  # "pull" or "push"
        self.account = account
        self.amount = amount
        self.reason = reason
        msg = f"Token {direction} of {amount} for {account} failed"
        if reason:
            msg += f": {reason}"
        super().__init__(msg)


class ClockRegression(PoolError):
    """The block clock reported a tick behind a stored checkpoint."""
