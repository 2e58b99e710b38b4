#!/usr/bin/env python3
"""Scenario sweep: run a grid of generated groups, verify properties, aggregate results."""
from __future__ import annotations

import argparse
import copy
import csv
import os
import sys
import time
from itertools import product

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from tradecycles.core.config import RunConfig, load_config  # noqa: E402
from tradecycles.core.rng import SeededRNG  # noqa: E402
from tradecycles.evaluation.checks import check_exchange  # noqa: E402
from tradecycles.evaluation.metrics import compute_metrics  # noqa: E402
from tradecycles.market.exchange import compute_trades  # noqa: E402
from tradecycles.market.scenario import generate_snapshot  # noqa: E402


def main() -> None:
    p = argparse.ArgumentParser(description="Run a scenario sweep.")
    p.add_argument("--config", type=str, default=None,
                   help="Base YAML config file")
    p.add_argument("--seeds", type=int, nargs="+", default=[42, 123, 456])
    p.add_argument("--owners_list", type=int, nargs="+", default=[4, 8, 16])
    p.add_argument("--max_wants_list", type=int, nargs="+", default=[1, 3, 6])
    p.add_argument("--output", type=str, default="outputs/sweep_results.csv")
    args = p.parse_args()

    base_cfg = load_config(args.config) if args.config else RunConfig()

    grid = list(product(args.seeds, args.owners_list, args.max_wants_list))
    rows: list[dict] = []
    failures = 0

    print(f"Sweep: {len(grid)} configurations")
    for i, (seed, owners, max_wants) in enumerate(grid, 1):
        scenario = copy.deepcopy(base_cfg.scenario)
        scenario.num_owners = owners
        scenario.wants_per_item_max = max_wants
        scenario.wants_per_item_min = min(scenario.wants_per_item_min, max_wants)

        print(
            f"  [{i}/{len(grid)}] seed={seed}  owners={owners}  "
            f"max_wants={max_wants} ...",
            end="",
            flush=True,
        )
        t0 = time.time()
        snap = generate_snapshot(SeededRNG(seed), scenario)
        result = compute_trades(snap.items, snap.wants)
        check = check_exchange(result)
        elapsed = time.time() - t0

        row = compute_metrics(result)
        row["seed"] = seed
        row["num_owners"] = owners
        row["max_wants"] = max_wants
        row["checks_passed"] = check.valid
        rows.append(row)
        if not check.valid:
            failures += 1
            print(f"  FAILED: {'; '.join(check.violations)}")
        else:
            print(f"  {row['trades']} trades  {elapsed * 1000:.1f}ms")

    # write aggregated CSV
    os.makedirs(os.path.dirname(os.path.abspath(args.output)), exist_ok=True)
    if rows:
        with open(args.output, "w", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=list(rows[0].keys()))
            writer.writeheader()
            writer.writerows(rows)

    print(f"\nSweep complete: {len(rows)} runs, {failures} failed checks → {args.output}")
    if failures:
        sys.exit(1)


if __name__ == "__main__":
    main()
