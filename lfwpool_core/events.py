"""
Event records emitted by the staking pool.

Every successful stake / claim / unstake appends events to the pool's
``EventLog`` in emission order.  Subscribers are called synchronously as
each event is appended; an exception raised by a subscriber propagates
to the caller of the pool operation.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterator, Optional

log = logging.getLogger("lfwpool.events")

STAKE = "Stake"
CLAIM = "Claim"
UNSTAKE = "Unstake"

EVENT_NAMES = (STAKE, CLAIM, UNSTAKE)


@dataclass(frozen=True)
class PoolEvent:
    """A single emitted event: ``name(user, amount)`` at block ``tick``."""
    name: str
    user: str
    amount: int
    tick: int

    def to_dict(self) -> dict:
        return {
            "event": self.name,
            "user": self.user,
            "amount": self.amount,
            "tick": self.tick,
        }


def stake_event(user: str, amount: int, tick: int) -> PoolEvent:
    return PoolEvent(STAKE, user, amount, tick)


def claim_event(user: str, reward: int, tick: int) -> PoolEvent:
    return PoolEvent(CLAIM, user, reward, tick)


def unstake_event(user: str, amount: int, tick: int) -> PoolEvent:
    return PoolEvent(UNSTAKE, user, amount, tick)


Subscriber = Callable[[PoolEvent], None]


class EventLog:
    """Ordered event history plus synchronous subscribers."""

    def __init__(self) -> None:
        self._events: list[PoolEvent] = []
        self._subscribers: list[Subscriber] = []

    def subscribe(self, callback: Subscriber) -> None:
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: Subscriber) -> None:
        try:
            self._subscribers.remove(callback)
        except ValueError:
            pass

    def emit(self, event: PoolEvent) -> None:
        if event.name not in EVENT_NAMES:
            raise ValueError(f"Unknown event: {event.name}")
        self._events.append(event)
        log.debug("%s(%s, %d) @%d", event.name, event.user, event.amount, event.tick)
        for callback in list(self._subscribers):
            callback(event)

    def filter(
        self,
        name: Optional[str] = None,
        user: Optional[str] = None,
    ) -> list[PoolEvent]:
        return [
            e for e in self._events
            if (name is None or e.name == name)
            and (user is None or e.user == user)
        ]

    @property
    def last(self) -> Optional[PoolEvent]:
        return self._events[-1] if self._events else None

    def __iter__(self) -> Iterator[PoolEvent]:
        return iter(self._events)

    def __len__(self) -> int:
        return len(self._events)
