#!/usr/bin/env python3
"""CLI entry-point: compute trades for one group from a snapshot or a generated scenario."""
from __future__ import annotations

import argparse
import json
import logging
import os
import sys
import time

# Ensure project root is importable
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tradecycles.core.config import RunConfig, load_config  # noqa: E402
from tradecycles.market.runner import ExchangeRunner  # noqa: E402


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        description="Compute top-trading-cycles trades for one trading group."
    )
    p.add_argument("--config", type=str, default=None,
                   help="Path to YAML config file")
    p.add_argument("--snapshot", type=str, default=None,
                   help="YAML/JSON snapshot of owners, items and wants")
    p.add_argument("--group_id", type=str, default=None,
                   help="Only trade items of this group")
    p.add_argument("--group_name", type=str, default=None)
    p.add_argument("--seed", type=int, default=None)
    p.add_argument("--num_owners", type=int, default=None,
                   help="Generated scenario: number of owners")
    p.add_argument("--max_items", type=int, default=None,
                   help="Generated scenario: max items per owner")
    p.add_argument("--max_wants", type=int, default=None,
                   help="Generated scenario: max wants per item")
    p.add_argument("--output_dir", type=str, default=None)
    p.add_argument("--label", type=str, default=None)
    p.add_argument("--no_events", action="store_true",
                   help="Skip events.jsonl")
    p.add_argument("--no_report", action="store_true",
                   help="Skip report.txt")
    p.add_argument("--log_level", type=str, default="WARNING",
                   choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    return p


def _parse_group_id(value: str):
    return int(value) if value.lstrip("-").isdigit() else value


def _apply_overrides(cfg: RunConfig, args: argparse.Namespace) -> None:
    """Mutate *cfg* in-place with any non-None CLI overrides."""
    if args.snapshot is not None:
        cfg.snapshot_path = args.snapshot
    if args.group_id is not None:
        cfg.group_id = _parse_group_id(args.group_id)
    if args.group_name is not None:
        cfg.group_name = args.group_name
    if args.seed is not None:
        cfg.seed = args.seed
    if args.num_owners is not None:
        cfg.scenario.num_owners = args.num_owners
    if args.max_items is not None:
        cfg.scenario.items_per_owner_max = args.max_items
    if args.max_wants is not None:
        cfg.scenario.wants_per_item_max = args.max_wants
    if args.output_dir is not None:
        cfg.output_dir = args.output_dir
    if args.label is not None:
        cfg.label = args.label
    if args.no_events:
        cfg.output.write_events = False
    if args.no_report:
        cfg.output.write_report = False


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # load config
    if args.config:
        cfg = load_config(args.config)
    else:
        cfg = RunConfig()
    _apply_overrides(cfg, args)

    source = cfg.snapshot_path or f"generated(seed={cfg.seed}, owners={cfg.scenario.num_owners})"
    print(f"Computing trades: source={source}  group={cfg.group_id}")

    t0 = time.time()
    runner = ExchangeRunner(cfg)
    result = runner.run()
    elapsed = time.time() - t0

    summary_path = os.path.join(runner.run_dir, "summary.json")
    with open(summary_path) as f:
        summary = json.load(f)

    print(
        f"Done in {elapsed:.2f}s  |  {summary['total_items']} items  |  "
        f"{summary['rounds']} rounds  |  {summary['trades']} trades "
        f"({summary['direct_trades']} direct, {summary['circular_trades']} circular)  |  "
        f"{summary['items_traded']} items change hands"
    )
    for trade in result.trades:
        print(
            f"  trade {trade.trade_id} [{trade.trade_type.value}] "
            f"{len(trade.chain)} steps, owners {', '.join(str(o) for o in trade.participants)}"
        )
    if not summary.get("checks_passed", True):
        print("WARNING: property checks failed, see log output")
    print(f"Results → {runner.run_dir}")


if __name__ == "__main__":
    main()
