"""One exchange computation: graph builder -> TTC allocator -> materializer.

Usage:
    result = compute_trades(items, wants)
    for trade in result.trades:
        ...
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Optional

from tradecycles.core.logging import NullTraceSink, TraceSink
from tradecycles.core.types import (
    AllocationResult,
    ItemRecord,
    OwnerId,
    PreferenceEdge,
    RawId,
    Trade,
)
from tradecycles.market.allocator import run_top_trading_cycles
from tradecycles.market.graph import PreferenceGraph, build_preference_graph
from tradecycles.market.materializer import materialize_trades

logger = logging.getLogger(__name__)


@dataclass
class ExchangeResult:
    graph: PreferenceGraph
    allocation_result: AllocationResult
    trades: list[Trade] = field(default_factory=list)

    @property
    def allocation(self):
        return self.allocation_result.allocation

    @property
    def round_count(self) -> int:
        return self.allocation_result.round_count

    def owners_without_trade(self) -> list[OwnerId]:
        trading = {o for t in self.trades for o in t.participants}
        return [o for o in self.graph.owners() if o not in trading]


def compute_trades(
    items: Iterable[ItemRecord],
    wants: Iterable[PreferenceEdge],
    trace: Optional[TraceSink] = None,
    group_id: Optional[RawId] = None,
) -> ExchangeResult:
    """Compute the trades for one trading group.

    When *group_id* is given, items of other groups (and their wants) are
    ignored. The call is pure: identical inputs give identical results.
    """
    trace = trace or NullTraceSink()
    items = list(items)
    if group_id is not None:
        total = len(items)
        items = [i for i in items if i.group_id == group_id]
        if total and not items:
            logger.warning(
                "Group %r matches none of %d items; nothing to trade",
                group_id, total,
            )
        in_group = {i.item_id for i in items}
        wants = [w for w in wants if w.source in in_group]

    graph = build_preference_graph(items, wants, trace)
    allocation = run_top_trading_cycles(graph, trace)
    trades = materialize_trades(allocation, graph, trace)
    return ExchangeResult(graph, allocation, trades)
