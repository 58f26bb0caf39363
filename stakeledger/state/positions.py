"""
Per-account stake position table.

Positions are keyed by account id. Cleared positions are removed so the table
only holds open positions; `get` returns the default (non-existent) position
for unknown accounts.
"""

from __future__ import annotations

from typing import Dict, Iterator, Optional, Tuple

from ..core.staking.types import StakePosition

# Type alias
AccountId = str

_NO_POSITION = StakePosition()


class PositionTable:
    """
    Mapping account -> StakePosition.

    Note: like every dict, iteration follows insertion order. Callers that hash
    or serialize positions sort by account id explicitly
    (see `stakeledger/integration/ledger_snapshot.py`).
    """

    def __init__(self) -> None:
        self._positions: Dict[AccountId, StakePosition] = {}

    def get(self, account: AccountId) -> StakePosition:
        """Get the position for *account*. Returns the empty position if not found."""
        return self._positions.get(account, _NO_POSITION)

    def set(self, account: AccountId, position: Optional[StakePosition]) -> None:
        """
        Store *position* for *account*.

        `None` or a non-existent position clears the entry.
        """
        if position is None or not position.exists:
            self._positions.pop(account, None)
        else:
            self._positions[account] = position

    def __contains__(self, account: object) -> bool:
        return account in self._positions

    def __len__(self) -> int:
        return len(self._positions)

    def items(self) -> Iterator[Tuple[AccountId, StakePosition]]:
        return iter(list(self._positions.items()))

    def values(self) -> Iterator[StakePosition]:
        return iter(list(self._positions.values()))

    def __repr__(self) -> str:
        return f"PositionTable({len(self._positions)} entries)"
