"""Structured (JSON-lines) logging helpers.

Ledger modules log through stdlib loggers (`logging.getLogger(__name__)`);
`log_event` renders one JSON object per event so receipts can be grepped and
replayed from log files.
"""

from __future__ import annotations

import json
import logging
import os
import time
from typing import Any, Dict

Json = Dict[str, Any]

LOG_LEVEL_ENV_VAR = "STAKELEDGER_LOG_LEVEL"


def _now_ms() -> int:
    return int(time.time() * 1000)


def configure_logging() -> None:
    """Configure the `stakeledger` logger for JSON-lines output on stderr.

    - Level from STAKELEDGER_LOG_LEVEL (default INFO).
    - Safe to call multiple times.
    """
    level_name = (os.environ.get(LOG_LEVEL_ENV_VAR) or "INFO").strip().upper()
    level = getattr(logging, level_name, logging.INFO)

    root = logging.getLogger("stakeledger")
    if getattr(root, "_stakeledger_configured", False):  # type: ignore[attr-defined]
        root.setLevel(level)
        return

    handler = logging.StreamHandler()
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter("%(message)s"))

    root.handlers = [handler]
    root.setLevel(level)
    root.propagate = False
    setattr(root, "_stakeledger_configured", True)  # type: ignore[attr-defined]


def log_event(logger: logging.Logger, event: str, *, level: int = logging.INFO, **fields: Any) -> None:
    if not logger.isEnabledFor(level):
        return
    payload: Json = {"ts_ms": _now_ms(), "event": event}
    payload.update(fields)
    logger.log(level, json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False, default=str))
