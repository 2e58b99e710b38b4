"""Run one exchange computation and write its outputs.

A run loads a group snapshot (or generates one from the scenario config),
computes the trades and writes into a fresh run directory:
  - ``events.jsonl``: dropped wants, per-round pointer graphs, trades, summary
  - ``summary.json``: aggregate metrics plus property-check status
  - ``trades.csv``: one row per chain step
  - ``report.txt``: human-readable trade report
"""
from __future__ import annotations

import logging
import os
import time
from typing import Optional

from tradecycles.core.config import RunConfig
from tradecycles.core.logging import EventLogger, NullTraceSink, TraceSink
from tradecycles.core.rng import SeededRNG
from tradecycles.evaluation.checks import CheckResult, check_exchange
from tradecycles.evaluation.metrics import compute_metrics
from tradecycles.evaluation.reports import (
    render_report,
    write_report,
    write_summary,
    write_trades_csv,
)
from tradecycles.market.exchange import ExchangeResult, compute_trades
from tradecycles.market.scenario import generate_snapshot
from tradecycles.market.snapshot import Snapshot, load_snapshot

logger = logging.getLogger(__name__)


class ExchangeRunner:
    """Owns the run directory and output writers for one computation."""

    def __init__(self, config: RunConfig, snapshot: Optional[Snapshot] = None):
        self.config = config

        # snapshot: explicit > file > generated
        if snapshot is None:
            if config.snapshot_path:
                snapshot = load_snapshot(config.snapshot_path)
            else:
                snapshot = generate_snapshot(SeededRNG(config.seed), config.scenario)
        self.snapshot = snapshot
        self.group_id = config.group_id if config.group_id is not None else snapshot.group_id

        # run directory
        timestamp = time.strftime("%Y%m%d_%H%M%S")
        label = config.label or (
            f"g{self.group_id}" if self.group_id is not None else f"s{config.seed}"
        )
        self.run_dir = _make_run_dir(config.output_dir, f"{timestamp}_{label}")

        self.result: Optional[ExchangeResult] = None
        self.check: Optional[CheckResult] = None
        self.metrics: dict = {}

    def run(self) -> ExchangeResult:
        cfg = self.config
        snap = self.snapshot

        event_logger: Optional[EventLogger] = None
        trace: TraceSink = NullTraceSink()
        if cfg.output.write_events:
            event_logger = EventLogger(self.run_dir)
            trace = event_logger

        try:
            self.result = compute_trades(
                snap.items, snap.wants, trace=trace, group_id=self.group_id,
            )
            self.check = check_exchange(self.result)
            if not self.check.valid:
                # unreachable unless the allocator itself is broken
                for v in self.check.violations:
                    logger.error("Property check failed: %s", v)

            self.metrics = compute_metrics(self.result)
            self.metrics["group_id"] = self.group_id
            self.metrics["checks_passed"] = self.check.valid
            if event_logger:
                event_logger.log_summary(self.metrics)
        finally:
            if event_logger:
                event_logger.close()

        # ── outputs ──────────────────────────────────────────────────────
        owner_names = snap.owner_names()
        item_names = snap.item_names()
        write_summary(self.metrics, self.run_dir)
        if cfg.output.write_trades_csv:
            write_trades_csv(self.result.trades, self.run_dir, owner_names, item_names)
        if cfg.output.write_report:
            group_name = cfg.group_name or snap.group_name or str(self.group_id)
            report = render_report(
                self.result.trades, group_name, time.strftime("%Y-%m-%d"),
                owner_names, item_names,
            )
            write_report(report, self.run_dir)

        logger.info(
            "Run complete: %d trades over %d items -> %s",
            len(self.result.trades), len(self.result.graph), self.run_dir,
        )
        return self.result


def _make_run_dir(output_dir: str, name: str) -> str:
    """Create a fresh run directory, suffixing ``_2``, ``_3``... on collision."""
    os.makedirs(output_dir, exist_ok=True)
    candidate = os.path.join(output_dir, name)
    n = 1
    while True:
        try:
            os.makedirs(candidate)
            return candidate
        except FileExistsError:
            n += 1
            candidate = os.path.join(output_dir, f"{name}_{n}")
