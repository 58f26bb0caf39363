"""
Ledger configuration.

The configuration surface is small and set once at construction:

- `reward_source`: account the reward pool is held in (rewards are pulled from it),
- `max_staking_amount`: cap on total active stake,
- `unstaking_delay`: seconds between initiating and executing a withdrawal.

After construction it changes only through the ledger's owner-gated setters,
and only while the ledger is paused.

YAML files are read with PyYAML `safe_load`. The delay may be given either as
`unstaking_delay` (seconds) or as `unstaking_period_days`.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from ..core.staking.errors import InvalidConfigError

SECONDS_PER_DAY = 86_400
DEFAULT_UNSTAKING_PERIOD_DAYS = 7
CONFIG_ENV_VAR = "STAKELEDGER_CONFIG"

_KNOWN_KEYS = frozenset({"reward_source", "max_staking_amount", "unstaking_delay", "unstaking_period_days"})


def _is_int(v: Any) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


@dataclass(frozen=True)
class LedgerConfig:
    reward_source: str
    max_staking_amount: int
    unstaking_delay: int = DEFAULT_UNSTAKING_PERIOD_DAYS * SECONDS_PER_DAY

    def __post_init__(self) -> None:
        if not isinstance(self.reward_source, str) or not self.reward_source.strip():
            raise InvalidConfigError("reward_source must be a non-empty str")
        if not _is_int(self.max_staking_amount) or self.max_staking_amount <= 0:
            raise InvalidConfigError(f"max_staking_amount must be a positive int: {self.max_staking_amount!r}")
        if not _is_int(self.unstaking_delay) or self.unstaking_delay < 0:
            raise InvalidConfigError(f"unstaking_delay must be a non-negative int: {self.unstaking_delay!r}")

    def to_dict(self) -> dict[str, Any]:
        return {
            "reward_source": self.reward_source,
            "max_staking_amount": self.max_staking_amount,
            "unstaking_delay": self.unstaking_delay,
        }


def config_from_mapping(obj: Mapping[str, Any]) -> LedgerConfig:
    if not isinstance(obj, Mapping):
        raise InvalidConfigError("config must be a mapping")
    unknown = sorted(set(obj) - _KNOWN_KEYS)
    if unknown:
        raise InvalidConfigError(f"unknown config keys: {', '.join(map(str, unknown))}")
    if "unstaking_delay" in obj and "unstaking_period_days" in obj:
        raise InvalidConfigError("set either unstaking_delay or unstaking_period_days, not both")

    if "unstaking_period_days" in obj:
        days = obj["unstaking_period_days"]
        if not _is_int(days) or days < 0:
            raise InvalidConfigError(f"unstaking_period_days must be a non-negative int: {days!r}")
        delay = days * SECONDS_PER_DAY
    else:
        delay = obj.get("unstaking_delay", DEFAULT_UNSTAKING_PERIOD_DAYS * SECONDS_PER_DAY)

    return LedgerConfig(
        reward_source=obj.get("reward_source"),  # type: ignore[arg-type]
        max_staking_amount=obj.get("max_staking_amount"),  # type: ignore[arg-type]
        unstaking_delay=delay,
    )


def load_config(path: Optional[str | Path] = None) -> LedgerConfig:
    """Load a YAML config file (default: the path in $STAKELEDGER_CONFIG)."""
    if path is None:
        path = os.environ.get(CONFIG_ENV_VAR, "").strip()
        if not path:
            raise InvalidConfigError(f"no config path given and {CONFIG_ENV_VAR} is not set")
    p = Path(path)
    try:
        obj = yaml.safe_load(p.read_text(encoding="utf-8"))
    except OSError as exc:
        raise InvalidConfigError(f"cannot read config {p}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise InvalidConfigError(f"invalid YAML in {p}: {exc}") from exc
    return config_from_mapping(obj)
