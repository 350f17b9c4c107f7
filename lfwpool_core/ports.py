"""
Collaborator interfaces consumed by the staking pool.

The pool never owns token balances or identity rules itself.  It is
handed three capabilities at construction:

  * **TokenTransferPort** — pull tokens from a user into the pool, push
    tokens from the pool to a user, query any balance.
  * **AccessControlPort** — answer "is this caller the administrator".
  * **BlockClock** — current block height (tick).

``OwnableAccessControl`` and ``ManualClock`` are small concrete
implementations good enough for hosts with a single owner key and for
deterministic tests.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from lfwpool_core.address import normalize_account


@runtime_checkable
class TokenTransferPort(Protocol):
    """Moves value in the external token system.

    ``pull`` and ``push`` must either complete fully or raise
    :class:`~lfwpool_core.errors.TransferFailure`.
    """

    def pull(self, account: str, amount: int) -> None: ...

    def push(self, account: str, amount: int) -> None: ...

    def balance_of(self, account: str) -> int: ...


@runtime_checkable
class AccessControlPort(Protocol):
    def is_administrator(self, caller: str) -> bool: ...


@runtime_checkable
class BlockClock(Protocol):
    def now(self) -> int: ...


class OwnableAccessControl:
    """
    Single-owner access control.

    Gates ``initialize``: only the deployer key may set the pool up.  After
    that the pool enforces its own configured administrator.
    """

    def __init__(self, owner: str) -> None:
        self._owner = normalize_account(owner)

    @property
    def owner(self) -> str:
        return self._owner

    def is_administrator(self, caller: str) -> bool:
        return normalize_account(caller) == self._owner

    def __repr__(self) -> str:
        return f"OwnableAccessControl(owner={self._owner!r})"


class ManualClock:
    """Block clock that only moves when told to."""

    def __init__(self, start: int = 0) -> None:
        if start < 0:
            raise ValueError("Block height cannot be negative")
        self._tick = start

    def now(self) -> int:
        return self._tick

    def advance(self, ticks: int = 1) -> int:
        """Move forward *ticks* blocks and return the new height."""
        if ticks < 0:
            raise ValueError("Clock cannot move backwards")
        self._tick += ticks
        return self._tick

    def set(self, tick: int) -> None:
        if tick < self._tick:
            raise ValueError(f"Clock cannot move backwards ({tick} < {self._tick})")
        self._tick = tick

    def __repr__(self) -> str:
        return f"ManualClock(tick={self._tick})"
