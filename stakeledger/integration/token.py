"""
Fungible-token collaborator interface.

The ledger never implements token semantics; it calls a collaborator bound to
the ledger's own holding account:

- `transfer_into(from_account, amount)`: pull `amount` from `from_account` into the ledger,
- `transfer_out(to_account, amount)`: push `amount` from the ledger to `to_account`,
- `balance_of(account)`: current balance of any account.

Each call either completes or raises `TokenTransferError` with no effect.

`InMemoryToken` is an allowance-based reference collaborator for simulations
and tests (approve-then-pull, like an ERC-20 `transferFrom`).
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from ..state.balances import AllowanceTable, BalanceTable


class TokenTransferError(Exception):
    """Raised by a token collaborator when a transfer cannot be made."""


@runtime_checkable
class TokenCollaborator(Protocol):
    def transfer_into(self, from_account: str, amount: int) -> None: ...

    def transfer_out(self, to_account: str, amount: int) -> None: ...

    def balance_of(self, account: str) -> int: ...


class InMemoryToken:
    """Single-asset token with balances and allowances held in memory."""

    def __init__(self, ledger_account: str = "stake-ledger") -> None:
        if not isinstance(ledger_account, str) or not ledger_account:
            raise ValueError("ledger_account must be a non-empty str")
        self.ledger_account = ledger_account
        self._balances = BalanceTable()
        self._allowances = AllowanceTable()

    # -- account-side operations --------------------------------------------

    def mint(self, account: str, amount: int) -> None:
        _require_amount(amount)
        self._balances.add(account, amount)

    def transfer(self, sender: str, recipient: str, amount: int) -> None:
        _require_amount(amount)
        self._move(sender, recipient, amount)

    def approve(self, owner: str, spender: str, amount: int) -> None:
        if not isinstance(amount, int) or isinstance(amount, bool) or amount < 0:
            raise TokenTransferError(f"invalid allowance: {amount!r}")
        self._allowances.set(owner, spender, amount)

    def increase_allowance(self, owner: str, spender: str, amount: int) -> None:
        self.approve(owner, spender, self._allowances.get(owner, spender) + amount)

    def decrease_allowance(self, owner: str, spender: str, amount: int) -> None:
        current = self._allowances.get(owner, spender)
        if amount > current:
            raise TokenTransferError("decreased allowance below zero")
        self.approve(owner, spender, current - amount)

    def allowance(self, owner: str, spender: str) -> int:
        return self._allowances.get(owner, spender)

    # -- collaborator protocol ----------------------------------------------

    def balance_of(self, account: str) -> int:
        return self._balances.get(account)

    def transfer_into(self, from_account: str, amount: int) -> None:
        _require_amount(amount)
        allowed = self._allowances.get(from_account, self.ledger_account)
        if amount > allowed:
            raise TokenTransferError("transfer amount exceeds allowance")
        self._move(from_account, self.ledger_account, amount)
        self._allowances.set(from_account, self.ledger_account, allowed - amount)

    def transfer_out(self, to_account: str, amount: int) -> None:
        _require_amount(amount)
        self._move(self.ledger_account, to_account, amount)

    def total_supply(self) -> int:
        return self._balances.total()

    def balances(self) -> dict[str, int]:
        return self._balances.get_all_balances()

    def _move(self, sender: str, recipient: str, amount: int) -> None:
        if self._balances.get(sender) < amount:
            raise TokenTransferError("transfer amount exceeds balance")
        self._balances.subtract(sender, amount)
        self._balances.add(recipient, amount)

    def __repr__(self) -> str:
        return f"InMemoryToken(ledger_account={self.ledger_account!r}, {self._balances!r})"


def _require_amount(amount: int) -> None:
    if not isinstance(amount, int) or isinstance(amount, bool) or amount <= 0:
        raise TokenTransferError(f"invalid transfer amount: {amount!r}")
