"""Trace sinks for allocation diagnostics and JSONL run output.

The allocator never writes log text for tracing; it hands structured
records to a :class:`TraceSink`. Tests use :class:`RecordingTraceSink`,
runs use :class:`EventLogger`.
"""
from __future__ import annotations

import json
import os
from abc import ABC, abstractmethod
from typing import Any

from tradecycles.core.types import DroppedEdge, RoundRecord, Trade


class TraceSink(ABC):
    """Receives structured events from the builder, allocator and materializer."""

    @abstractmethod
    def record_dropped_edge(self, dropped: DroppedEdge) -> None:
        ...

    @abstractmethod
    def record_round(self, record: RoundRecord) -> None:
        ...

    @abstractmethod
    def record_trade(self, trade: Trade) -> None:
        ...


class NullTraceSink(TraceSink):
    """Discards everything."""

    def record_dropped_edge(self, dropped: DroppedEdge) -> None:
        pass

    def record_round(self, record: RoundRecord) -> None:
        pass

    def record_trade(self, trade: Trade) -> None:
        pass


class RecordingTraceSink(TraceSink):
    """Keeps every event in memory, in arrival order."""

    def __init__(self):
        self.dropped_edges: list[DroppedEdge] = []
        self.rounds: list[RoundRecord] = []
        self.trades: list[Trade] = []

    def record_dropped_edge(self, dropped: DroppedEdge) -> None:
        self.dropped_edges.append(dropped)

    def record_round(self, record: RoundRecord) -> None:
        self.rounds.append(record)

    def record_trade(self, trade: Trade) -> None:
        self.trades.append(trade)

    @property
    def cycles(self) -> list[tuple]:
        return [c for r in self.rounds for c in r.cycles]


# ── JSONL writer ─────────────────────────────────────────────────────────────

class EventLogger(TraceSink):
    """Writes structured events as newline-delimited JSON."""

    def __init__(self, run_dir: str, filename: str = "events.jsonl"):
        self.run_dir = run_dir
        os.makedirs(run_dir, exist_ok=True)
        self.events_path = os.path.join(run_dir, filename)
        self._file = open(self.events_path, "w")

    def _write(self, event: dict[str, Any]) -> None:
        self._file.write(json.dumps(event) + "\n")

    def record_dropped_edge(self, dropped: DroppedEdge) -> None:
        self._write({
            "event": "dropped_edge",
            "source": dropped.edge.source.raw,
            "target": dropped.edge.target.raw,
            "rank": dropped.edge.rank,
            "reason": dropped.reason,
        })

    def record_round(self, record: RoundRecord) -> None:
        self._write({
            "event": "round",
            "round": record.round_number,
            "active": [i.raw for i in record.active],
            "pointers": [[k.raw, v.raw] for k, v in record.pointers.items()],
            "cycles": [[i.raw for i in cycle] for cycle in record.cycles],
        })

    def record_trade(self, trade: Trade) -> None:
        self._write({
            "event": "trade",
            "trade_id": trade.trade_id,
            "type": trade.trade_type.value,
            "round": trade.round_number,
            "participants": [o.raw for o in trade.participants],
            "chain": [
                {
                    "giver": s.giver.raw,
                    "item": s.item.raw,
                    "receiver": s.receiver.raw,
                    "receiver_item": s.receiver_item.raw,
                }
                for s in trade.chain
            ],
        })

    def log_summary(self, metrics: dict[str, Any]) -> None:
        record = dict(metrics)
        record["event"] = "summary"
        self._write(record)

    def close(self) -> None:
        self._file.flush()
        self._file.close()
