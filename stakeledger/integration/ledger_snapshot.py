"""
Ledger snapshot encoding.

Goals:
- Deterministic JSON serialization for hashing / persistence.
- Round-trippable into a new `StakingLedger` bound to a token collaborator.
- Explicit versioning.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional

from ..core.staking.invariants import check_conservation, check_pool
from ..core.staking.errors import LedgerInvariantError
from ..core.staking.state import pool_from_dict, pool_to_dict, position_from_dict, position_to_dict
from ..state.canonical import canonical_json_bytes, domain_sep_bytes, sha256_hex
from ..state.positions import PositionTable
from .access import RoleRegistry
from .config import config_from_mapping
from .ledger import Clock, StakingLedger
from .token import TokenCollaborator


LEDGER_SNAPSHOT_VERSION = 1


@dataclass(frozen=True)
class LedgerSnapshot:
    """
    Deterministic, versioned snapshot of a ledger.

    The commitment is *not* included inside `data` to avoid self-reference.
    """

    version: int
    data: Dict[str, Any]

    def canonical_bytes(self) -> bytes:
        return canonical_json_bytes(self.data)

    def commitment(self) -> str:
        return sha256_hex(domain_sep_bytes("ledger_snapshot", version=self.version) + self.canonical_bytes())

    def to_dict(self) -> Dict[str, Any]:
        return {"version": self.version, "data": self.data, "commitment": self.commitment()}


def snapshot_from_ledger(ledger: StakingLedger) -> LedgerSnapshot:
    state = ledger.export_state()
    data: Dict[str, Any] = {
        "config": state.config.to_dict(),
        "paused": state.paused,
        "pool": pool_to_dict(state.pool),
        "positions": [
            {"account": account, **position_to_dict(position)}
            for account, position in state.positions
        ],
        "roles": state.roles,
    }
    return LedgerSnapshot(version=LEDGER_SNAPSHOT_VERSION, data=data)


def snapshot_from_dict(obj: Mapping[str, Any]) -> LedgerSnapshot:
    """Parse `LedgerSnapshot.to_dict()` output, verifying version and commitment."""
    if not isinstance(obj, Mapping):
        raise TypeError("snapshot must be a mapping")
    version = obj.get("version")
    if version != LEDGER_SNAPSHOT_VERSION:
        raise ValueError(f"unsupported snapshot version: {version!r}")
    data = obj.get("data")
    if not isinstance(data, dict):
        raise TypeError("snapshot data must be an object")
    snapshot = LedgerSnapshot(version=version, data=data)
    expected = obj.get("commitment")
    if expected is not None and expected != snapshot.commitment():
        raise ValueError("snapshot commitment mismatch")
    return snapshot


def ledger_from_snapshot(
    snapshot: LedgerSnapshot,
    token: TokenCollaborator,
    *,
    clock: Optional[Clock] = None,
) -> StakingLedger:
    data = snapshot.data
    pool = pool_from_dict(data["pool"])

    positions = PositionTable()
    for entry in data["positions"]:
        account = entry["account"]
        if not isinstance(account, str) or not account:
            raise ValueError("position account must be a non-empty str")
        if account in positions:
            raise ValueError(f"duplicate position for {account}")
        positions.set(account, position_from_dict({k: v for k, v in entry.items() if k != "account"}))

    violations = check_pool(pool) + check_conservation(pool, positions.values())
    if violations:
        raise LedgerInvariantError(violations)

    return StakingLedger(
        token,
        config_from_mapping(data["config"]),
        roles=RoleRegistry.from_dict(data["roles"]),
        clock=clock,
        pool=pool,
        positions=positions,
        paused=bool(data["paused"]),
    )
