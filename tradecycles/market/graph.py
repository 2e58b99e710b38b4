"""Preference graph construction from raw item and want records."""
from __future__ import annotations

import logging
from collections import defaultdict
from typing import Iterable, Iterator, Optional

from tradecycles.core.logging import NullTraceSink, TraceSink
from tradecycles.core.types import (
    DroppedEdge,
    Item,
    ItemId,
    ItemRecord,
    OwnerId,
    PreferenceEdge,
)

logger = logging.getLogger(__name__)


class PreferenceGraph:
    """Immutable node set, ascending by item id.

    Attributes:
        dropped_edges: edges left out during construction, in the order found.
    """

    def __init__(self, nodes: Iterable[Item], dropped_edges: Iterable[DroppedEdge] = ()):
        self._nodes: dict[ItemId, Item] = {
            n.item_id: n for n in sorted(nodes, key=lambda n: n.item_id)
        }
        self.dropped_edges: tuple[DroppedEdge, ...] = tuple(dropped_edges)

    @property
    def nodes(self) -> list[Item]:
        return list(self._nodes.values())

    def item_ids(self) -> list[ItemId]:
        return list(self._nodes)

    def owner_of(self, item_id: ItemId) -> OwnerId:
        return self._nodes[item_id].owner_id

    def owners(self) -> list[OwnerId]:
        return sorted({n.owner_id for n in self._nodes.values()})

    def __getitem__(self, item_id: ItemId) -> Item:
        return self._nodes[item_id]

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._nodes

    def __iter__(self) -> Iterator[Item]:
        return iter(self._nodes.values())

    def __len__(self) -> int:
        return len(self._nodes)


def build_preference_graph(
    items: Iterable[ItemRecord],
    edges: Iterable[PreferenceEdge],
    trace: Optional[TraceSink] = None,
) -> PreferenceGraph:
    """Build one :class:`Item` node per item record.

    Each node's preferences are its edges sorted ascending by rank, keeping
    only targets that exist and belong to a different owner. Bad edges are
    dropped with a warning, never raised. Duplicate item ids raise
    ``ValueError``.
    """
    trace = trace or NullTraceSink()

    owners: dict[ItemId, OwnerId] = {}
    for rec in items:
        if rec.item_id in owners:
            raise ValueError(f"Duplicate item id: {rec.item_id}")
        owners[rec.item_id] = rec.owner_id

    by_source: dict[ItemId, list[PreferenceEdge]] = defaultdict(list)
    dropped: list[DroppedEdge] = []

    def _drop(edge: PreferenceEdge, reason: str) -> None:
        logger.warning(
            "Dropping want %s -> %s (rank %d): %s",
            edge.source, edge.target, edge.rank, reason,
        )
        d = DroppedEdge(edge, reason)
        dropped.append(d)
        trace.record_dropped_edge(d)

    for edge in edges:
        if edge.source not in owners:
            _drop(edge, "unknown_source")
        elif edge.target not in owners:
            _drop(edge, "unknown_target")
        elif owners[edge.target] == owners[edge.source]:
            _drop(edge, "same_owner")
        else:
            by_source[edge.source].append(edge)

    nodes: list[Item] = []
    for item_id, owner_id in owners.items():
        # stable: equal ranks keep the caller's order
        ranked = sorted(by_source.get(item_id, []), key=lambda e: e.rank)
        prefs: list[ItemId] = []
        seen: set[ItemId] = set()
        last_rank: Optional[int] = None
        for edge in ranked:
            if edge.target in seen:
                _drop(edge, "duplicate")
                continue
            if edge.rank == last_rank:
                logger.warning(
                    "Item %s has tied rank %d; keeping supplied order",
                    item_id, edge.rank,
                )
            seen.add(edge.target)
            prefs.append(edge.target)
            last_rank = edge.rank
        nodes.append(Item(item_id, owner_id, tuple(prefs)))

    graph = PreferenceGraph(nodes, dropped)
    logger.debug(
        "Built preference graph: %d items, %d kept edges, %d dropped",
        len(graph), sum(len(n.preferences) for n in graph), len(dropped),
    )
    return graph
