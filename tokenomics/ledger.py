"""Account balances the engine debits and credits.

The engine never holds user funds itself. It computes amounts, validates
them against the ledger, and only then issues debits and credits.
"""

from __future__ import annotations

from collections import defaultdict
from enum import Enum
from typing import Protocol, runtime_checkable

from tokenomics.errors import InsufficientAmount, InsufficientBalance
from tokenomics.math.fixed_point import to_amount


class Asset(str, Enum):
    """The two assets the engine settles."""

    NATIVE = "native"
    FOREIGN = "foreign"


@runtime_checkable
class Ledger(Protocol):
    """Debit/credit capability over account balances."""

    def balance_of(self, account: str, asset: Asset) -> int: ...

    def debit(self, account: str, asset: Asset, amount: int) -> None: ...

    def credit(self, account: str, asset: Asset, amount: int) -> None: ...


class InMemoryLedger:
    """Dictionary-backed ledger for simulations and tests."""

    def __init__(self) -> None:
        self._balances: dict[Asset, defaultdict[str, int]] = {
            asset: defaultdict(int) for asset in Asset
        }

    def balance_of(self, account: str, asset: Asset) -> int:
        return self._balances[asset].get(account, 0)

    def debit(self, account: str, asset: Asset, amount: int) -> None:
        if amount < 0:
            raise InsufficientAmount(f"Debit amount cannot be negative: {amount}")
        balance = self.balance_of(account, asset)
        if balance < amount:
            raise InsufficientBalance(
                f"Account {account} holds {balance} {asset.value}, cannot debit {amount}"
            )
        self._balances[asset][account] = balance - amount

    def credit(self, account: str, asset: Asset, amount: int) -> None:
        if amount < 0:
            raise InsufficientAmount(f"Credit amount cannot be negative: {amount}")
        self._balances[asset][account] = to_amount(self.balance_of(account, asset) + amount)

    def total(self, asset: Asset) -> int:
        return sum(self._balances[asset].values())


class LedgerBatch:
    """Debits and credits that land together or not at all.

    Movements are queued during an operation and applied once its component
    work has succeeded. ``apply`` checks every resulting balance before
    touching the ledger, then moves debits ahead of credits. A movement the
    ledger still rejects causes the ones already made to be reversed before
    the error propagates.
    """

    def __init__(self, ledger: Ledger) -> None:
        self._ledger = ledger
        self._debits: list[tuple[str, Asset, int]] = []
        self._credits: list[tuple[str, Asset, int]] = []

    def debit(self, account: str, asset: Asset, amount: int) -> None:
        if amount < 0:
            raise InsufficientAmount(f"Debit amount cannot be negative: {amount}")
        self._debits.append((account, asset, amount))

    def credit(self, account: str, asset: Asset, amount: int) -> None:
        if amount < 0:
            raise InsufficientAmount(f"Credit amount cannot be negative: {amount}")
        self._credits.append((account, asset, amount))

    def check(self) -> None:
        """Verify every queued movement fits without changing anything.

        Raises:
            InsufficientBalance: If a debit exceeds the account's balance
            Overflow: If a credit would exceed the amount width
        """
        balances: dict[tuple[str, Asset], int] = {}
        for account, asset, amount in self._debits:
            key = (account, asset)
            balance = balances.get(key, self._ledger.balance_of(account, asset))
            if balance < amount:
                raise InsufficientBalance(
                    f"Account {account} holds {balance} {asset.value}, cannot debit {amount}"
                )
            balances[key] = balance - amount
        for account, asset, amount in self._credits:
            key = (account, asset)
            balance = balances.get(key, self._ledger.balance_of(account, asset))
            balances[key] = to_amount(balance + amount)

    def apply(self) -> None:
        """Check, then perform every queued movement."""
        self.check()
        done: list[tuple[bool, str, Asset, int]] = []
        try:
            for account, asset, amount in self._debits:
                self._ledger.debit(account, asset, amount)
                done.append((False, account, asset, amount))
            for account, asset, amount in self._credits:
                self._ledger.credit(account, asset, amount)
                done.append((True, account, asset, amount))
        except Exception:
            for credited, account, asset, amount in reversed(done):
                if credited:
                    self._ledger.debit(account, asset, amount)
                else:
                    self._ledger.credit(account, asset, amount)
            raise
        self._debits.clear()
        self._credits.clear()
