"""Top Trading Cycles over item nodes.

Every item is its own trading agent. Each round, every active item points
at the first still-active item on its preference list (or at itself), all
cycles of that functional graph are executed at once, and their members
leave the market. The loop ends when no item is active.

Usage:
    result = TopTradingCycles(graph, trace=sink).run()
    result.allocation[item_id]   # the item that item_id's owner receives
"""
from __future__ import annotations

import logging
from typing import Optional

from tradecycles.core.logging import NullTraceSink, TraceSink
from tradecycles.core.types import AllocationResult, ItemId, RoundRecord
from tradecycles.market.graph import PreferenceGraph

logger = logging.getLogger(__name__)


class AllocationInvariantError(RuntimeError):
    """Internal inconsistency in pointer construction or cycle detection."""


class TopTradingCycles:
    """Runs TTC rounds over a :class:`PreferenceGraph` until every item is allocated.

    Attributes:
        active: item ids not yet allocated.
        allocation: item id -> item id it receives.
        rounds: one :class:`RoundRecord` per completed round.
    """

    def __init__(self, graph: PreferenceGraph, trace: Optional[TraceSink] = None):
        self.graph = graph
        self.trace = trace or NullTraceSink()

        # ── allocation state ──────────────────────────────────────────────
        self.active: set[ItemId] = set(graph.item_ids())
        self.allocation: dict[ItemId, ItemId] = {}
        self.rounds: list[RoundRecord] = []

    # ── main loop ─────────────────────────────────────────────────────────

    def run(self) -> AllocationResult:
        """Execute rounds to completion and return the allocation."""
        limit = len(self.graph)
        while self.active:
            if len(self.rounds) >= limit:
                raise AllocationInvariantError(
                    f"Exceeded {limit} rounds with {len(self.active)} items still active"
                )
            self._run_round(len(self.rounds) + 1)

        self._check_bijection()
        result = AllocationResult(dict(self.allocation), list(self.rounds))
        logger.info(
            "TTC complete: %d items, %d rounds, %d kept",
            len(self.allocation), result.round_count, len(result.kept_items),
        )
        return result

    def _run_round(self, round_number: int) -> RoundRecord:
        order = sorted(self.active)
        pointers = self.build_pointers(order)
        cycles = self.find_cycles(order, pointers)
        if not cycles:
            raise AllocationInvariantError(
                f"Round {round_number}: no cycle among {len(order)} active items"
            )

        for cycle in cycles:
            self._validate_cycle(cycle, pointers, round_number)

        # execute simultaneously, then retire
        for cycle in cycles:
            for item_id in cycle:
                self.allocation[item_id] = pointers[item_id]
        for cycle in cycles:
            self.active.difference_update(cycle)

        record = RoundRecord(
            round_number=round_number,
            active=tuple(order),
            pointers=pointers,
            cycles=tuple(cycles),
        )
        self.rounds.append(record)
        self.trace.record_round(record)
        logger.debug(
            "Round %d: %d active, %d cycle(s), %d remaining",
            round_number, len(order), len(cycles), len(self.active),
        )
        return record

    # ── round steps ───────────────────────────────────────────────────────

    def build_pointers(self, order: list[ItemId]) -> dict[ItemId, ItemId]:
        """Map each active item to its first active preference, else itself."""
        pointers: dict[ItemId, ItemId] = {}
        for item_id in order:
            target = item_id
            for preferred in self.graph[item_id].preferences:
                if preferred in self.active:
                    target = preferred
                    break
            pointers[item_id] = target
        return pointers

    @staticmethod
    def find_cycles(
        order: list[ItemId], pointers: dict[ItemId, ItemId],
    ) -> list[tuple[ItemId, ...]]:
        """Return every node-disjoint cycle of the functional graph *pointers*.

        Walks start at each unvisited item in *order*. A walk that re-enters
        its own path closes a cycle (the path suffix); a walk that reaches a
        node seen by an earlier walk ends without one.
        """
        cycles: list[tuple[ItemId, ...]] = []
        visited: set[ItemId] = set()

        for start in order:
            if start in visited:
                continue
            path: list[ItemId] = []
            on_path: dict[ItemId, int] = {}
            current = start
            while True:
                if current in on_path:
                    cycles.append(tuple(path[on_path[current]:]))
                    break
                if current in visited:
                    break
                on_path[current] = len(path)
                path.append(current)
                current = pointers[current]
            visited.update(path)

        return cycles

    def _validate_cycle(
        self,
        cycle: tuple[ItemId, ...],
        pointers: dict[ItemId, ItemId],
        round_number: int,
    ) -> None:
        for item_id in cycle:
            target = pointers[item_id]
            if target == item_id:
                if len(cycle) != 1:
                    raise AllocationInvariantError(
                        f"Round {round_number}: self-loop {item_id} inside a "
                        f"{len(cycle)}-item cycle"
                    )
                continue
            if target not in self.graph[item_id].preferences:
                raise AllocationInvariantError(
                    f"Round {round_number}: {item_id} would receive {target}, "
                    "which is not on its preference list"
                )

    def _check_bijection(self) -> None:
        ids = set(self.graph.item_ids())
        if set(self.allocation) != ids or set(self.allocation.values()) != ids:
            raise AllocationInvariantError(
                "Final allocation is not a permutation of the item set"
            )


def run_top_trading_cycles(
    graph: PreferenceGraph, trace: Optional[TraceSink] = None,
) -> AllocationResult:
    return TopTradingCycles(graph, trace).run()
