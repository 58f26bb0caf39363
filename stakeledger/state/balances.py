"""
Single-asset balance and allowance tracking.

Backs the in-memory token collaborator used by simulations and tests.
"""

from typing import Dict, Tuple


# Type aliases
AccountId = str
Amount = int  # Non-negative integer (arbitrary precision)


class BalanceTable:
    """
    Balance table mapping account -> amount.

    Zero balances are omitted to keep the table sparse.
    """

    def __init__(self):
        self._balances: Dict[AccountId, Amount] = {}

    def get(self, account: AccountId) -> Amount:
        """Get balance for *account*. Returns 0 if not found."""
        return self._balances.get(account, 0)

    def set(self, account: AccountId, amount: Amount) -> None:
        """
        Set balance for *account*.

        Raises:
            ValueError: If amount is negative
        """
        if amount < 0:
            raise ValueError(f"Balance cannot be negative: {amount}")
        if amount == 0:
            self._balances.pop(account, None)
        else:
            self._balances[account] = amount

    def add(self, account: AccountId, delta: Amount) -> None:
        """
        Add delta to balance (delta may be negative).

        Raises:
            ValueError: If resulting balance would be negative
        """
        current = self.get(account)
        new_balance = current + delta
        if new_balance < 0:
            raise ValueError(
                f"Insufficient balance: {current} + {delta} = {new_balance} < 0"
            )
        self.set(account, new_balance)

    def subtract(self, account: AccountId, delta: Amount) -> None:
        """
        Subtract a non-negative delta from a balance.

        Raises:
            ValueError: If delta is negative or insufficient balance
        """
        if delta < 0:
            raise ValueError(f"Delta must be non-negative: {delta}")
        self.add(account, -delta)

    def total(self) -> Amount:
        return sum(self._balances.values())

    def get_all_balances(self) -> Dict[AccountId, Amount]:
        return dict(self._balances)

    def __repr__(self) -> str:
        return f"BalanceTable({len(self._balances)} entries)"


class AllowanceTable:
    """Allowance table mapping (owner, spender) -> amount."""

    def __init__(self):
        self._allowances: Dict[Tuple[AccountId, AccountId], Amount] = {}

    def get(self, owner: AccountId, spender: AccountId) -> Amount:
        return self._allowances.get((owner, spender), 0)

    def set(self, owner: AccountId, spender: AccountId, amount: Amount) -> None:
        if amount < 0:
            raise ValueError(f"Allowance cannot be negative: {amount}")
        if amount == 0:
            self._allowances.pop((owner, spender), None)
        else:
            self._allowances[(owner, spender)] = amount

    def __repr__(self) -> str:
        return f"AllowanceTable({len(self._allowances)} entries)"
