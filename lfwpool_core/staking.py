"""
Single-token staking pool with lock period and linear APY reward.

Users stake the pool token, earn reward every block at the pool's APY,
and may withdraw principal once the lock period has passed since their
most recent stake.

Per-user lifecycle
──────────────────
    NoStake ──stake──▶ Active ──unstake(all)──▶ NoStake
                        │  ▲
                        └──┘  stake / claim / partial unstake

  * ``stake``   — settles any pending reward, pulls the new amount and
                  restarts the lock window for the *whole* principal.
  * ``claim``   — pays reward for [checkpoint, now] and moves the
                  checkpoint.  A zero reward is a successful no-op.
  * ``unstake`` — only after ``stake_origin + lock_period``; always
                  settles reward first, so unstaking never forfeits
                  accrued reward.  Emits Claim then Unstake.

Reward
──────
    reward = principal × apy × (now − checkpoint) // (100 × ticks_per_year)

The APY in force *at settlement* applies to the whole unsettled
interval; ``change_apy`` does not settle open positions.

Atomicity
─────────
Every precondition (including pool solvency for outgoing transfers) is
checked before the first token movement.  Stake records, totals and
events are only touched after all transfers succeeded.  If a stake's
reward push fails after its principal was pulled, the principal is
pushed back before the error propagates.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from typing import Optional

from lfwpool_core.accrual import (
    DAYS_PER_YEAR,
    TICKS_PER_DAY,
    compute_reward,
    lock_period_to_ticks,
)
from lfwpool_core.address import normalize_account
from lfwpool_core.errors import (
    AlreadyInitialized,
    ClockRegression,
    InsufficientStake,
    InvalidAmount,
    LockPeriodActive,
    NotInitialized,
    NothingStaked,
    TransferFailure,
    Unauthorized,
)
from lfwpool_core.events import EventLog, claim_event, stake_event, unstake_event
from lfwpool_core.pool_config import PoolConfig
from lfwpool_core.ports import AccessControlPort, BlockClock, TokenTransferPort
from lfwpool_core.units import DEFAULT_SYMBOL, TOKEN_DECIMALS, format_amount

log = logging.getLogger("lfwpool.staking")


def _is_int(value: object) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


# ── StakeRecord ─────────────────────────────────────────────────────────

@dataclass
class StakeRecord:
    """
    One user's position.  Exists only while ``principal > 0``.

    ``checkpoint_tick``   — where reward was last settled.
    ``stake_origin_tick`` — most recent stake; the lock window starts here.
    """
    address: str
    principal: int
    checkpoint_tick: int
    stake_origin_tick: int
    total_claimed: int = 0

    def pending_reward(self, apy: int, now: int, ticks_per_year: int) -> int:
        """Reward accrued since the checkpoint at *apy*."""
        elapsed = now - self.checkpoint_tick
        if elapsed < 0:
            raise ClockRegression(
                f"Clock at {now} is behind checkpoint {self.checkpoint_tick} "
                f"of {self.address}"
            )
        return compute_reward(self.principal, apy, elapsed, ticks_per_year)

    def unlock_tick(self, lock_period_ticks: int) -> int:
        return self.stake_origin_tick + lock_period_ticks

    def is_locked(self, lock_period_ticks: int, now: int) -> bool:
        return now < self.unlock_tick(lock_period_ticks)

    def to_dict(
        self,
        apy: int,
        now: int,
        ticks_per_year: int,
        lock_period_ticks: int,
    ) -> dict:
        return {
            "address": self.address,
            "principal": self.principal,
            "checkpoint_tick": self.checkpoint_tick,
            "stake_origin_tick": self.stake_origin_tick,
            "unlock_tick": self.unlock_tick(lock_period_ticks),
            "pending_reward": self.pending_reward(apy, now, ticks_per_year),
            "total_claimed": self.total_claimed,
            "status": "Locked" if self.is_locked(lock_period_ticks, now) else "Unlocked",
        }


# ── StakingPool ─────────────────────────────────────────────────────────

class StakingPool:
    """
    Staking ledger for one pool.

    Collaborators are injected:
      ``token``      — TokenTransferPort for the staked token
      ``access``     — AccessControlPort gating ``initialize``
      ``clock``      — BlockClock
      ``reward_port`` — optional TokenTransferPort for a distinct reward
                       token (used when initialized with
                       ``separate_reward_token=True``)
      ``address``    — the pool's own account in the token system; when
                       given, outgoing transfers are checked against the
                       pool balance before anything moves
    """

    def __init__(
        self,
        token: TokenTransferPort,
        access: AccessControlPort,
        clock: BlockClock,
        *,
        address: str = "",
        reward_port: Optional[TokenTransferPort] = None,
        ticks_per_day: int = TICKS_PER_DAY,
        ticks_per_year: Optional[int] = None,
        symbol: str = DEFAULT_SYMBOL,
        decimals: int = TOKEN_DECIMALS,
        events: Optional[EventLog] = None,
    ) -> None:
        if ticks_per_year is None:
            ticks_per_year = ticks_per_day * DAYS_PER_YEAR
        self._token = token
        self._access = access
        self._clock = clock
        self._reward_port = reward_port
        self.address: str = normalize_account(address) if address else ""
        self._config = PoolConfig(ticks_per_day=ticks_per_day, ticks_per_year=ticks_per_year)
        self._stakes: dict[str, StakeRecord] = {}
        self.total_staked: int = 0
        self.total_reward_paid: int = 0
        self.symbol = symbol
        self.decimals = decimals
        self.events: EventLog = events if events is not None else EventLog()

    @classmethod
    def from_settings(
        cls,
        settings,
        token: TokenTransferPort,
        access: AccessControlPort,
        clock: BlockClock,
        **kwargs,
    ) -> StakingPool:
        """Build a pool using the tick rate and units of a ``PoolSettings``."""
        return cls(
            token,
            access,
            clock,
            ticks_per_day=settings.ticks_per_day,
            ticks_per_year=settings.ticks_per_day * settings.days_per_year,
            symbol=settings.token_symbol,
            decimals=settings.token_decimals,
            **kwargs,
        )

    # ── configuration ───────────────────────────────────────────────

    @property
    def config(self) -> PoolConfig:
        return self._config.snapshot()

    @property
    def initialized(self) -> bool:
        return self._config.initialized

    @property
    def apy(self) -> int:
        return self._config.apy

    @property
    def reward_token(self) -> str:
        return self._config.reward_token

    @property
    def administrator(self) -> str:
        return self._config.administrator

    @property
    def lock_period_ticks(self) -> int:
        return self._config.lock_period_ticks

    def initialize(
        self,
        caller: str,
        token: str,
        separate_reward_token: bool,
        lock_period_days: int,
        administrator: str,
    ) -> None:
        """
        One-shot pool setup.

        ``lock_period_days`` is converted to ticks at the pool's
        ``ticks_per_day``.  ``administrator`` becomes the only identity
        allowed to change the APY.
        """
        if self._config.initialized:
            raise self._rejected("initialize", AlreadyInitialized("Pool already initialized"))
        caller = normalize_account(caller)
        if not self._access.is_administrator(caller):
            raise self._rejected(
                "initialize", Unauthorized(f"{caller} may not initialize this pool"),
            )
        if not isinstance(token, str) or not token.strip():
            raise self._rejected("initialize", ValueError("Token reference cannot be empty"))
        if separate_reward_token and self._reward_port is None:
            raise self._rejected(
                "initialize", ValueError("separate_reward_token requires a reward_port"),
            )
        try:
            lock_ticks = lock_period_to_ticks(lock_period_days, self._config.ticks_per_day)
        except (TypeError, ValueError) as exc:
            raise self._rejected("initialize", exc)
        admin = normalize_account(administrator)

        cfg = self._config
        cfg.reward_token = token.strip()
        cfg.separate_reward_token = bool(separate_reward_token)
        cfg.lock_period_days = lock_period_days
        cfg.lock_period_ticks = lock_ticks
        cfg.administrator = admin
        cfg.initialized = True
        log.info(
            "Pool initialized: token=%s lock=%d days (%d ticks) admin=%s",
            cfg.reward_token, lock_period_days, lock_ticks, admin,
        )

    def change_apy(self, caller: str, new_apy: int) -> None:
        """
        Set the APY (integer percent).  Effective immediately.

        Open positions are not settled: each user's next accrual applies
        the new rate to their whole unsettled interval.
        """
        self._require_initialized("change_apy")
        caller = normalize_account(caller)
        if caller != self._config.administrator:
            raise self._rejected(
                "change_apy", Unauthorized(f"{caller} is not the pool administrator"),
            )
        if not _is_int(new_apy):
            raise self._rejected(
                "change_apy", TypeError(f"APY must be an int, got {type(new_apy).__name__}"),
            )
        if new_apy < 0:
            raise self._rejected("change_apy", ValueError("APY cannot be negative"))
        old = self._config.apy
        self._config.apy = new_apy
        log.info("APY changed %d%% -> %d%% by %s", old, new_apy, caller)

    # ── core operations ─────────────────────────────────────────────

    def stake(self, caller: str, amount: int) -> StakeRecord:
        """
        Deposit *amount* and restart the caller's lock window.

        Pending reward on an existing position is paid out first.
        Returns a copy of the updated record.
        """
        self._require_initialized("stake")
        user = normalize_account(caller)
        if not _is_int(amount) or amount <= 0:
            raise self._rejected(
                "stake", InvalidAmount(f"Stake amount must be a positive int, got {amount!r}"),
            )

        now = self._now()
        record = self._stakes.get(user)
        reward = self._accrued(record, now) if record is not None else 0
        if reward:
            self._ensure_payable(user, reward)

        self._token.pull(user, amount)
        if reward:
            try:
                self._payout_port().push(user, reward)
            except Exception as exc:
                self._return_principal(user, amount, now, exc)
                raise

        if record is None:
            record = StakeRecord(
                address=user, principal=0, checkpoint_tick=now, stake_origin_tick=now,
            )
            self._stakes[user] = record
        record.principal += amount
        record.checkpoint_tick = now
        record.stake_origin_tick = now
        record.total_claimed += reward
        self.total_staked += amount
        self.total_reward_paid += reward

        log.info(
            "Stake %s by %s @%d (principal now %s, settled %s)",
            self._fmt(amount), user, now, self._fmt(record.principal), self._fmt(reward),
            extra={"op": "stake", "user": user, "amount": amount, "reward": reward, "tick": now},
        )
        self.events.emit(stake_event(user, amount, now))
        return replace(record)

    def claim(self, caller: str) -> int:
        """Pay out reward accrued since the caller's checkpoint."""
        self._require_initialized("claim")
        user = normalize_account(caller)
        record = self._active_record("claim", user)

        now = self._now()
        reward = self._accrued(record, now)
        if reward:
            port = self._payout_port()
            self._ensure_payable(user, reward)
            port.push(user, reward)

        record.checkpoint_tick = now
        record.total_claimed += reward
        self.total_reward_paid += reward

        log.info(
            "Claim %s by %s @%d", self._fmt(reward), user, now,
            extra={"op": "claim", "user": user, "reward": reward, "tick": now},
        )
        self.events.emit(claim_event(user, reward, now))
        return reward

    def unstake(self, caller: str, amount: int) -> int:
        """
        Withdraw *amount* of principal once the lock period has passed.

        Reward is settled first.  Returns the settled reward.
        """
        self._require_initialized("unstake")
        user = normalize_account(caller)
        record = self._active_record("unstake", user)
        if not _is_int(amount):
            raise self._rejected(
                "unstake",
                TypeError(f"Unstake amount must be an int, got {type(amount).__name__}"),
            )
        if amount <= 0 or amount > record.principal:
            raise self._rejected(
                "unstake",
                InsufficientStake(
                    f"Cannot unstake {amount}: {user} has {record.principal} staked"
                ),
            )

        now = self._now()
        unlock = record.unlock_tick(self._config.lock_period_ticks)
        if now < unlock:
            raise self._rejected("unstake", LockPeriodActive(user, unlock, now))

        reward = self._accrued(record, now)
        reward_port = self._payout_port()
        self._ensure_payable(user, reward, amount)
        if reward:
            reward_port.push(user, reward)
        try:
            self._token.push(user, amount)
        except Exception:
            if reward:
                self._reclaim_reward(record, reward, now)
            raise

        record.checkpoint_tick = now
        record.total_claimed += reward
        record.principal -= amount
        if record.principal == 0:
            del self._stakes[user]
        self.total_staked -= amount
        self.total_reward_paid += reward

        log.info(
            "Unstake %s by %s @%d (principal now %s, settled %s)",
            self._fmt(amount), user, now, self._fmt(record.principal), self._fmt(reward),
            extra={"op": "unstake", "user": user, "amount": amount, "reward": reward, "tick": now},
        )
        self.events.emit(claim_event(user, reward, now))
        self.events.emit(unstake_event(user, amount, now))
        return reward

    # ── queries ─────────────────────────────────────────────────────

    def staked_of(self, account: str) -> int:
        record = self._stakes.get(normalize_account(account))
        return record.principal if record is not None else 0

    def get_stake(self, account: str) -> Optional[StakeRecord]:
        """Copy of the account's record, or None when it has no stake."""
        record = self._stakes.get(normalize_account(account))
        return replace(record) if record is not None else None

    def pending_reward(self, account: str) -> int:
        record = self._stakes.get(normalize_account(account))
        if record is None:
            return 0
        return self._accrued(record, self._now())

    def lock_expires_at(self, account: str) -> Optional[int]:
        record = self._stakes.get(normalize_account(account))
        if record is None:
            return None
        return record.unlock_tick(self._config.lock_period_ticks)

    def can_unstake(self, account: str) -> bool:
        record = self._stakes.get(normalize_account(account))
        if record is None or not self._config.initialized:
            return False
        return not record.is_locked(self._config.lock_period_ticks, self._now())

    def current_tick(self) -> int:
        return self._now()

    def stakers(self) -> list[str]:
        return list(self._stakes)

    def records(self) -> list[StakeRecord]:
        return [replace(r) for r in self._stakes.values()]

    def get_pool_summary(self) -> dict:
        now = self._now()
        cfg = self._config
        pending = sum(self._accrued(r, now) for r in self._stakes.values())
        return {
            **cfg.to_dict(),
            "tick": now,
            "total_staked": self.total_staked,
            "total_staked_fmt": self._fmt(self.total_staked),
            "total_reward_paid": self.total_reward_paid,
            "total_pending_reward": pending,
            "stakers": len(self._stakes),
            "events": len(self.events),
        }

    # ── internals ───────────────────────────────────────────────────

    def _now(self) -> int:
        tick = self._clock.now()
        if not _is_int(tick) or tick < 0:
            raise ClockRegression(f"Invalid block height from clock: {tick!r}")
        return tick

    def _accrued(self, record: StakeRecord, now: int) -> int:
        reward = record.pending_reward(self._config.apy, now, self._config.ticks_per_year)
        log.debug(
            "accrue %s: principal=%d apy=%d ticks=%d -> %d",
            record.address, record.principal, self._config.apy,
            now - record.checkpoint_tick, reward,
        )
        return reward

    def _payout_port(self) -> TokenTransferPort:
        if self._config.separate_reward_token and self._reward_port is not None:
            return self._reward_port
        return self._token

    def _ensure_payable(self, user: str, reward: int, principal: int = 0) -> None:
        """
        Fail before anything moves if the pool cannot cover the pushes.

        With a single token, reward is paid only from the balance above
        the total staked principal.
        """
        if not self.address:
            return
        reward_port = self._payout_port()
        if reward_port is self._token:
            needed = self.total_staked + reward
            balance = self._token.balance_of(self.address)
            if balance < needed:
                raise self._rejected(
                    "payout",
                    TransferFailure(
                        "push", user, reward + principal,
                        f"pool balance {balance} cannot cover reward {reward} "
                        f"on top of staked principal {self.total_staked}",
                    ),
                )
            return

        for port, amount in ((reward_port, reward), (self._token, principal)):
            if amount <= 0:
                continue
            balance = port.balance_of(self.address)
            if balance < amount:
                raise self._rejected(
                    "payout",
                    TransferFailure(
                        "push", user, amount,
                        f"pool balance {balance} is below {amount}",
                    ),
                )

    def _return_principal(self, user: str, amount: int, now: int, failure: Exception) -> None:
        """Push a stake's pulled principal back after its reward payout failed."""
        try:
            self._token.push(user, amount)
        except Exception as exc:
            log.error(
                "Stake by %s aborted but %s could not be returned; it stays in the pool",
                user, self._fmt(amount),
                extra={"op": "stake", "user": user, "amount": amount, "tick": now},
            )
            raise failure from exc

    def _reclaim_reward(self, record: StakeRecord, reward: int, now: int) -> None:
        """
        Undo an unstake's reward push after its principal push failed.

        If the reward cannot be pulled back it stays paid, and the record
        is settled up to *now* so the same interval is never paid twice.
        """
        user = record.address
        try:
            self._payout_port().pull(user, reward)
            return
        except Exception as exc:
            log.error(
                "Unstake by %s failed after reward %s was paid and could not be "
                "reclaimed (%s); keeping the settlement",
                user, self._fmt(reward), exc,
                extra={"op": "unstake", "user": user, "reward": reward, "tick": now},
            )
        record.checkpoint_tick = now
        record.total_claimed += reward
        self.total_reward_paid += reward
        self.events.emit(claim_event(user, reward, now))

    def _require_initialized(self, op: str) -> None:
        if not self._config.initialized:
            raise self._rejected(op, NotInitialized("Pool is not initialized"))

    def _active_record(self, op: str, user: str) -> StakeRecord:
        record = self._stakes.get(user)
        if record is None or record.principal == 0:
            raise self._rejected(op, NothingStaked(f"{user} has nothing staked"))
        return record

    def _rejected(self, op: str, exc: Exception) -> Exception:
        log.warning("%s rejected: %s", op, exc, extra={"op": op})
        return exc

    def _fmt(self, amount: int) -> str:
        return format_amount(amount, self.symbol, self.decimals)

    def __repr__(self) -> str:
        return (
            f"StakingPool(token={self._config.reward_token!r}, apy={self._config.apy}, "
            f"stakers={len(self._stakes)}, total_staked={self.total_staked})"
        )
