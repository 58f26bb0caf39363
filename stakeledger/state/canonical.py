"""
Deterministic canonical encoding for ledger snapshots.

Snapshots are hashed into a commitment, so the byte encoding of a given state
must be unique. Floats are rejected outright: every ledger quantity is an int.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any


def _reject_floats(value: Any) -> None:
    if isinstance(value, float):
        raise TypeError("floats are not allowed in canonical encoding")
    if isinstance(value, dict):
        for k in value.keys():
            if not isinstance(k, str):
                raise TypeError("dict keys must be str for canonical encoding")
        for v in value.values():
            _reject_floats(v)
        return
    if isinstance(value, (list, tuple)):
        for item in value:
            _reject_floats(item)


def canonical_json_bytes(value: Any) -> bytes:
    """
    Canonical JSON encoding for hashing.

    Rules:
    - UTF-8
    - sort_keys=True
    - separators=(',', ':') (no whitespace)
    - allow_nan=False
    - floats rejected (to avoid representation ambiguity)
    """
    _reject_floats(value)
    text = json.dumps(
        value,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )
    return text.encode("utf-8")


def sha256_hex(data: bytes) -> str:
    """Hex digest used as a snapshot commitment ("0x"-prefixed, 66 chars)."""
    return "0x" + hashlib.sha256(data).hexdigest()


def domain_sep_bytes(label: str, version: int = 1) -> bytes:
    """
    Prefix hashed ahead of a snapshot body, e.g. `stakeledger:ledger_snapshot:v1\\0`.

    Binding the label and version into the commitment keeps a snapshot of one
    format from ever matching the commitment of another. NUL terminates the label.
    """
    if not isinstance(label, str) or not label:
        raise TypeError("label must be a non-empty str")
    if not label.isascii() or "\x00" in label:
        raise ValueError(f"snapshot label must be ASCII without NUL: {label!r}")
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError(f"snapshot version must be a positive int: {version!r}")
    return f"stakeledger:{label}:v{version}\x00".encode("ascii")
