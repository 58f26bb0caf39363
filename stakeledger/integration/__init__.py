"""
Integration layer: the stateful ledger shell and its collaborators.
"""

from .access import Role, RoleRegistry
from .config import LedgerConfig, config_from_mapping, load_config
from .ledger import LedgerState, Receipt, StakingLedger
from .ledger_snapshot import LedgerSnapshot, ledger_from_snapshot, snapshot_from_dict, snapshot_from_ledger
from .token import InMemoryToken, TokenCollaborator, TokenTransferError

__all__ = [
    "Role",
    "RoleRegistry",
    "LedgerConfig",
    "config_from_mapping",
    "load_config",
    "LedgerState",
    "Receipt",
    "StakingLedger",
    "LedgerSnapshot",
    "ledger_from_snapshot",
    "snapshot_from_dict",
    "snapshot_from_ledger",
    "InMemoryToken",
    "TokenCollaborator",
    "TokenTransferError",
]
