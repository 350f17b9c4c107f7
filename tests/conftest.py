"""
Shared pytest fixtures for the LFW staking pool test suite.
"""

import pytest

from lfwpool_core.errors import TransferFailure
from lfwpool_core.ports import ManualClock, OwnableAccessControl
from lfwpool_core.staking import StakingPool

POOL = "lfw-pool"
DEPLOYER = "deployer"
ADMIN = "admin"

# Small tick rate keeps expected rewards readable: 1 day = 100 ticks
TICKS_PER_DAY = 100
TICKS_PER_YEAR = 365 * TICKS_PER_DAY
LOCK_DAYS = 7
LOCK_TICKS = LOCK_DAYS * TICKS_PER_DAY


class InMemoryToken:
    """ERC20-mock style token implementing the TokenTransferPort."""

    def __init__(self, pool_address: str = POOL) -> None:
        self.pool_address = pool_address
        self.balances: dict[str, int] = {}
        self.allowances: dict[str, int] = {}
        self.pulls: list[tuple[str, int]] = []
        self.pushes: list[tuple[str, int]] = []
        self.fail_pushes = 0   # number of upcoming pushes to fail

    def mint(self, account: str, amount: int) -> None:
        self.balances[account] = self.balances.get(account, 0) + amount

    def approve(self, owner: str, amount: int) -> None:
        self.allowances[owner] = amount

    def balance_of(self, account: str) -> int:
        return self.balances.get(account, 0)

    def pull(self, account: str, amount: int) -> None:
        if self.allowances.get(account, 0) < amount:
            raise TransferFailure("pull", account, amount, "insufficient allowance")
        if self.balance_of(account) < amount:
            raise TransferFailure("pull", account, amount, "insufficient balance")
        self.allowances[account] -= amount
        self.balances[account] -= amount
        self.mint(self.pool_address, amount)
        self.pulls.append((account, amount))

    def push(self, account: str, amount: int) -> None:
        if self.fail_pushes:
            self.fail_pushes -= 1
            raise TransferFailure("push", account, amount, "token paused")
        if self.balance_of(self.pool_address) < amount:
            raise TransferFailure("push", account, amount, "insufficient pool balance")
        self.balances[self.pool_address] -= amount
        self.mint(account, amount)
        self.pushes.append((account, amount))


@pytest.fixture
def clock():
    return ManualClock(start=1_000)


@pytest.fixture
def token():
    """Token with two funded, approved users and a reward reserve in the pool."""
    t = InMemoryToken()
    for user in ("alice", "bob"):
        t.mint(user, 10_000_000)
        t.approve(user, 10_000_000)
    t.mint(POOL, 500_000)
    return t


@pytest.fixture
def access():
    return OwnableAccessControl(DEPLOYER)


@pytest.fixture
def pool(token, access, clock):
    """Pool that has not been initialized yet."""
    return StakingPool(
        token, access, clock,
        address=POOL,
        ticks_per_day=TICKS_PER_DAY,
        ticks_per_year=TICKS_PER_YEAR,
    )


@pytest.fixture
def live_pool(pool):
    """Initialized pool at 10 % APY with a 7-day lock."""
    pool.initialize(DEPLOYER, "LFW", False, LOCK_DAYS, ADMIN)
    pool.change_apy(ADMIN, 10)
    return pool
