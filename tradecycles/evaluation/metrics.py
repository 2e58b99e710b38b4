"""Compute aggregate metrics from an exchange computation."""
from __future__ import annotations

import statistics
from typing import Any

from tradecycles.core.types import TradeType
from tradecycles.market.exchange import ExchangeResult


def compute_metrics(result: ExchangeResult) -> dict[str, Any]:
    """Return a flat dict of summary metrics suitable for JSON serialisation."""
    graph = result.graph
    total_items = len(graph)
    if total_items == 0:
        metrics = _empty_metrics()
        metrics["dropped_wants"] = len(graph.dropped_edges)
        return metrics

    trades = result.trades
    direct = sum(1 for t in trades if t.trade_type == TradeType.DIRECT)
    chain_lengths = [len(t) for t in trades]
    traded_items = sum(chain_lengths)
    owners = graph.owners()
    no_trade = result.owners_without_trade()

    # rank actually obtained by each traded item (1 = first choice)
    ranks_won = [
        graph[item].preferences.index(got) + 1
        for item, got in result.allocation.items()
        if item != got
    ]

    return {
        "total_items": total_items,
        "total_owners": len(owners),
        "total_wants": sum(len(n.preferences) for n in graph),
        "dropped_wants": len(graph.dropped_edges),
        "rounds": result.round_count,
        "trades": len(trades),
        "direct_trades": direct,
        "circular_trades": len(trades) - direct,
        "items_traded": traded_items,
        "items_kept": total_items - traded_items,
        "trade_rate": round(traded_items / total_items, 4),
        "owners_trading": len(owners) - len(no_trade),
        "owners_without_trade": len(no_trade),
        "longest_chain": max(chain_lengths) if chain_lengths else 0,
        "mean_chain_length": (
            round(statistics.mean(chain_lengths), 2) if chain_lengths else 0
        ),
        "first_choice_rate": (
            round(sum(1 for r in ranks_won if r == 1) / len(ranks_won), 4)
            if ranks_won else 0
        ),
        "mean_rank_received": (
            round(statistics.mean(ranks_won), 2) if ranks_won else 0
        ),
    }


def _empty_metrics() -> dict[str, Any]:
    return {
        "total_items": 0,
        "total_owners": 0,
        "total_wants": 0,
        "dropped_wants": 0,
        "rounds": 0,
        "trades": 0,
        "direct_trades": 0,
        "circular_trades": 0,
        "items_traded": 0,
        "items_kept": 0,
        "trade_rate": 0,
        "owners_trading": 0,
        "owners_without_trade": 0,
        "longest_chain": 0,
        "mean_chain_length": 0,
        "first_choice_rate": 0,
        "mean_rank_received": 0,
    }
