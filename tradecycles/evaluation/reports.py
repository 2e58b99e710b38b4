"""Write summary JSON, trades CSV and a human-readable trade report."""
from __future__ import annotations

import csv
import json
import os
from typing import Any, Optional

from tradecycles.core.types import ItemId, OwnerId, Trade, TradeType


def write_summary(metrics: dict[str, Any], run_dir: str) -> str:
    """Write aggregate metrics as ``summary.json``."""
    path = os.path.join(run_dir, "summary.json")
    with open(path, "w") as f:
        json.dump(metrics, f, indent=2)
    return path


_STEP_FIELDS = [
    "trade_id",
    "trade_type",
    "round",
    "step",
    "giver_id",
    "giver_name",
    "item_id",
    "item_name",
    "receiver_id",
    "receiver_name",
    "receiver_item_id",
]


def write_trades_csv(
    trades: list[Trade],
    run_dir: str,
    owner_names: Optional[dict[OwnerId, str]] = None,
    item_names: Optional[dict[ItemId, str]] = None,
) -> str:
    """Write one row per chain step as ``trades.csv``."""
    owner_names = owner_names or {}
    item_names = item_names or {}
    path = os.path.join(run_dir, "trades.csv")
    with open(path, "w", newline="", encoding="utf-8") as f:
        writer = csv.DictWriter(f, fieldnames=_STEP_FIELDS)
        writer.writeheader()
        for t in trades:
            for n, s in enumerate(t.chain, 1):
                writer.writerow({
                    "trade_id": t.trade_id,
                    "trade_type": t.trade_type.value,
                    "round": t.round_number,
                    "step": n,
                    "giver_id": s.giver.raw,
                    "giver_name": owner_names.get(s.giver, ""),
                    "item_id": s.item.raw,
                    "item_name": item_names.get(s.item, ""),
                    "receiver_id": s.receiver.raw,
                    "receiver_name": owner_names.get(s.receiver, ""),
                    "receiver_item_id": s.receiver_item.raw,
                })
    return path


# ── text report ──────────────────────────────────────────────────────────────

_RULE = "=" * 60


def render_report(
    trades: list[Trade],
    group_name: str,
    date: str,
    owner_names: Optional[dict[OwnerId, str]] = None,
    item_names: Optional[dict[ItemId, str]] = None,
) -> str:
    """Plain-text trade report; unnamed owners and items fall back to their ids."""
    owner_names = owner_names or {}
    item_names = item_names or {}

    def owner(o: OwnerId) -> str:
        return owner_names.get(o) or str(o)

    def item(i: ItemId) -> str:
        return item_names.get(i) or str(i)

    lines = [
        "MATH TRADE RESULTS",
        f"Group: {group_name}",
        f"Date: {date}",
        f"Total Trades: {len(trades)}",
        "",
        _RULE,
        "",
    ]
    for t in trades:
        label = (
            "Direct Swap" if t.trade_type == TradeType.DIRECT
            else f"{len(t.chain)}-Way Chain"
        )
        lines.append(f"TRADE #{t.trade_id}: {label}")
        lines.append("-" * 60)
        for n, s in enumerate(t.chain, 1):
            lines.append(
                f'{n}. {owner(s.giver)} gives "{item(s.item)}" '
                f"→ {owner(s.receiver)} receives it"
            )
        lines.append("")
    lines.append(_RULE)
    lines.append("End of Report")
    return "\n".join(lines) + "\n"


def write_report(report: str, run_dir: str) -> str:
    path = os.path.join(run_dir, "report.txt")
    with open(path, "w", encoding="utf-8") as f:
        f.write(report)
    return path
