"""State construction and serialization for the staking core.

`initial_pool_state()` returns the state of a freshly created ledger.

Round-trip property (tested): `pool_from_dict(pool_to_dict(p)) == p` and
`position_from_dict(position_to_dict(s)) == s` for all valid states.
"""

from __future__ import annotations

from typing import Any, Mapping

from .types import PoolState, StakePosition

# Auto-derived from the dataclass field definitions (single source of truth).
POOL_VAR_NAMES: tuple[str, ...] = tuple(PoolState.__dataclass_fields__)
POSITION_VAR_NAMES: tuple[str, ...] = tuple(StakePosition.__dataclass_fields__)


def initial_pool_state() -> PoolState:
    """All dataclass defaults are zero, so ``PoolState()`` is the initial state."""
    return PoolState()


def _to_dict(obj: Any, names: tuple[str, ...]) -> dict[str, bool | int]:
    return {name: getattr(obj, name) for name in names}


def _kwargs_from_dict(d: Mapping[str, Any], names: tuple[str, ...]) -> dict[str, Any]:
    kwargs: dict[str, Any] = {}
    for name in names:
        val = d[name]
        if isinstance(val, bool):
            kwargs[name] = val
        elif isinstance(val, int):
            kwargs[name] = int(val)
        else:
            raise TypeError(f"state var {name!r} must be bool|int, got {type(val).__name__}")
    return kwargs


def pool_to_dict(pool: PoolState) -> dict[str, bool | int]:
    return _to_dict(pool, POOL_VAR_NAMES)


def pool_from_dict(d: Mapping[str, Any]) -> PoolState:
    """Deserialize a dict to a PoolState. Raises KeyError on missing fields."""
    return PoolState(**_kwargs_from_dict(d, POOL_VAR_NAMES))


def position_to_dict(position: StakePosition) -> dict[str, bool | int]:
    return _to_dict(position, POSITION_VAR_NAMES)


def position_from_dict(d: Mapping[str, Any]) -> StakePosition:
    """Deserialize a dict to a StakePosition. Raises KeyError on missing fields."""
    return StakePosition(**_kwargs_from_dict(d, POSITION_VAR_NAMES))
