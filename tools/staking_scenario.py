#!/usr/bin/env python3
"""
Replay a staking scenario (YAML) against an in-memory ledger and print the result as JSON.

Example:
  python3 tools/staking_scenario.py tools/scenarios/two_stakers.yaml
  STAKELEDGER_LOG_LEVEL=DEBUG python3 tools/staking_scenario.py tools/scenarios/two_stakers.yaml --compact
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import yaml

from stakeledger.core.staking.errors import StakingError
from stakeledger.integration.scenario import ScenarioError, run_scenario
from stakeledger.integration.structured_logging import configure_logging


def main(argv: list[str] | None = None) -> int:
    p = argparse.ArgumentParser(description="Replay a staking ledger scenario and print the final state.")
    p.add_argument("scenario", type=Path, help="Path to a scenario YAML file")
    p.add_argument("--compact", action="store_true", help="Print single-line JSON")
    p.add_argument("--commitment-only", action="store_true", help="Print only the final snapshot commitment")
    args = p.parse_args(argv)

    configure_logging()

    try:
        scenario = yaml.safe_load(args.scenario.read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as exc:
        print(f"[staking-scenario] cannot load {args.scenario}: {exc}", file=sys.stderr)
        return 2

    try:
        result = run_scenario(scenario)
    except (ScenarioError, StakingError) as exc:
        print(f"[staking-scenario] FAIL: {exc}", file=sys.stderr)
        return 1

    if args.commitment_only:
        print(result["snapshot_commitment"])
        return 0
    if args.compact:
        print(json.dumps(result, sort_keys=True, separators=(",", ":")))
    else:
        print(json.dumps(result, sort_keys=True, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
