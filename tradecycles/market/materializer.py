"""Turn allocation cycles into caller-facing trade chains."""
from __future__ import annotations

import logging
from typing import Optional

from tradecycles.core.logging import NullTraceSink, TraceSink
from tradecycles.core.types import (
    AllocationResult,
    ItemId,
    OwnerId,
    Trade,
    TradeStep,
    TradeType,
)
from tradecycles.market.graph import PreferenceGraph

logger = logging.getLogger(__name__)


def materialize_trades(
    result: AllocationResult,
    graph: PreferenceGraph,
    trace: Optional[TraceSink] = None,
) -> list[Trade]:
    """Return one :class:`Trade` per non-trivial cycle, numbered from 1.

    Cycles are taken in round order, then in discovery order, so the same
    allocation always yields the same trade list. Within a trade, each step
    hands one cycle member to the owner of the item pointing at it.
    """
    trace = trace or NullTraceSink()
    trades: list[Trade] = []

    for record in result.rounds:
        for cycle in record.cycles:
            if len(cycle) == 1 and result.allocation[cycle[0]] == cycle[0]:
                continue
            trade = _build_trade(
                len(trades) + 1, cycle, result.allocation, graph,
                record.round_number,
            )
            trades.append(trade)
            trace.record_trade(trade)

    direct = sum(1 for t in trades if t.trade_type == TradeType.DIRECT)
    logger.info(
        "Materialized %d trade(s): %d direct, %d circular",
        len(trades), direct, len(trades) - direct,
    )
    return trades


def _build_trade(
    trade_id: int,
    cycle: tuple[ItemId, ...],
    allocation: dict[ItemId, ItemId],
    graph: PreferenceGraph,
    round_number: int,
) -> Trade:
    # received item -> member that receives it
    taker = {allocation[member]: member for member in cycle}

    chain: list[TradeStep] = []
    participants: list[OwnerId] = []
    for item_id in cycle:
        receiver_item = taker[item_id]
        step = TradeStep(
            giver=graph.owner_of(item_id),
            item=item_id,
            receiver=graph.owner_of(receiver_item),
            receiver_item=receiver_item,
        )
        chain.append(step)
        for owner in (step.giver, step.receiver):
            if owner not in participants:
                participants.append(owner)

    return Trade(
        trade_id=trade_id,
        trade_type=TradeType.DIRECT if len(cycle) == 2 else TradeType.CIRCULAR,
        chain=tuple(chain),
        participants=tuple(participants),
        round_number=round_number,
    )
