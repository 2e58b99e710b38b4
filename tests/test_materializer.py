"""Tests for trade materialization and the full exchange pipeline."""
import unittest

from tradecycles.core.logging import RecordingTraceSink
from tradecycles.core.types import (
    ItemId,
    ItemRecord,
    OwnerId,
    PreferenceEdge,
    TradeStep,
    TradeType,
)
from tradecycles.market.allocator import run_top_trading_cycles
from tradecycles.market.exchange import compute_trades
from tradecycles.market.graph import build_preference_graph
from tradecycles.market.materializer import materialize_trades


def _records(owners, prefs, group_id=None):
    items = [ItemRecord(ItemId(i), OwnerId(o), group_id=group_id) for i, o in owners.items()]
    wants = [
        PreferenceEdge(ItemId(src), ItemId(tgt), rank)
        for src, targets in prefs.items()
        for rank, tgt in enumerate(targets, 1)
    ]
    return items, wants


def _step(giver, item, receiver, receiver_item):
    return TradeStep(OwnerId(giver), ItemId(item), OwnerId(receiver), ItemId(receiver_item))


class TestTradeScenarios(unittest.TestCase):

    def test_direct_swap_chain(self):
        items, wants = _records({"A": "U1", "B": "U2"}, {"A": ["B"], "B": ["A"]})
        result = compute_trades(items, wants)
        self.assertEqual(len(result.trades), 1)
        trade = result.trades[0]
        self.assertEqual(trade.trade_id, 1)
        self.assertEqual(trade.trade_type, TradeType.DIRECT)
        self.assertEqual(
            trade.chain,
            (_step("U1", "A", "U2", "B"), _step("U2", "B", "U1", "A")),
        )
        self.assertEqual(trade.participants, (OwnerId("U1"), OwnerId("U2")))

    def test_three_way_circular(self):
        items, wants = _records(
            {"A": "U1", "B": "U2", "C": "U3"},
            {"A": ["B"], "B": ["C"], "C": ["A"]},
        )
        result = compute_trades(items, wants)
        self.assertEqual(len(result.trades), 1)
        trade = result.trades[0]
        self.assertEqual(trade.trade_type, TradeType.CIRCULAR)
        self.assertEqual(len(trade.chain), 3)
        self.assertEqual(set(trade.participants), {OwnerId("U1"), OwnerId("U2"), OwnerId("U3")})
        # A wants B, so U2 hands B to U1
        self.assertIn(_step("U2", "B", "U1", "A"), trade.chain)

    def test_self_loop_produces_no_trade(self):
        items, wants = _records({"A": "U1", "B": "U2", "C": "U3"}, {"A": ["C"], "B": ["C"]})
        result = compute_trades(items, wants)
        self.assertEqual(result.trades, [])
        self.assertEqual(len(result.owners_without_trade()), 3)

    def test_contended_item_single_trade(self):
        items, wants = _records(
            {"A": "U1", "B": "U2", "C": "U3"},
            {"A": ["C"], "B": ["C"], "C": ["B"]},
        )
        result = compute_trades(items, wants)
        self.assertEqual(len(result.trades), 1)
        self.assertEqual(set(result.trades[0].participants), {OwnerId("U2"), OwnerId("U3")})
        self.assertNotIn(ItemId("A"), result.trades[0].items)

    def test_ten_items_pair_and_four_cycle(self):
        owners = {i: f"U{i}" for i in range(1, 11)}
        prefs = {1: [2], 2: [1], 3: [4], 4: [5], 5: [6], 6: [3]}
        items, wants = _records(owners, prefs)
        result = compute_trades(items, wants)
        self.assertEqual(
            [(t.trade_type, len(t.chain)) for t in result.trades],
            [(TradeType.DIRECT, 2), (TradeType.CIRCULAR, 4)],
        )
        self.assertEqual(
            result.owners_without_trade(),
            [OwnerId("U10"), OwnerId("U7"), OwnerId("U8"), OwnerId("U9")],
        )

    def test_one_owner_twice_in_a_cycle(self):
        items, wants = _records(
            {"a1": "U1", "b1": "U2", "a2": "U1", "b2": "U2"},
            {"a1": ["b1"], "b1": ["a2"], "a2": ["b2"], "b2": ["a1"]},
        )
        result = compute_trades(items, wants)
        trade = result.trades[0]
        self.assertEqual(trade.trade_type, TradeType.CIRCULAR)
        self.assertEqual(len(trade.chain), 4)
        self.assertEqual(trade.participants, (OwnerId("U1"), OwnerId("U2")))

    def test_empty_input(self):
        result = compute_trades([], [])
        self.assertEqual(result.trades, [])
        self.assertEqual(result.round_count, 0)


class TestMaterializeTrades(unittest.TestCase):

    def _result(self):
        owners = {i: i for i in range(1, 9)}
        # round 1: (1 2) and (3 4 5); round 2: (6 7) once 3 is gone; 8 keeps
        prefs = {1: [2], 2: [1], 3: [4], 4: [5], 5: [3], 6: [3, 7], 7: [6]}
        items, wants = _records(owners, prefs)
        graph = build_preference_graph(items, wants)
        return graph, run_top_trading_cycles(graph)

    def test_numbering_follows_rounds(self):
        graph, allocation = self._result()
        trades = materialize_trades(allocation, graph)
        self.assertEqual([t.trade_id for t in trades], [1, 2, 3])
        self.assertEqual([t.round_number for t in trades], [1, 1, 2])
        self.assertEqual(trades[2].items, (ItemId(6), ItemId(7)))

    def test_rematerialization_is_stable(self):
        graph, allocation = self._result()
        self.assertEqual(
            materialize_trades(allocation, graph),
            materialize_trades(allocation, graph),
        )

    def test_every_step_is_wanted(self):
        graph, allocation = self._result()
        for trade in materialize_trades(allocation, graph):
            for step in trade.chain:
                self.assertIn(step.item, graph[step.receiver_item].preferences)
                self.assertEqual(graph.owner_of(step.item), step.giver)

    def test_trace_receives_trades(self):
        graph, allocation = self._result()
        sink = RecordingTraceSink()
        trades = materialize_trades(allocation, graph, sink)
        self.assertEqual(sink.trades, trades)


class TestGroupFilter(unittest.TestCase):

    def test_only_requested_group_trades(self):
        g1_items, g1_wants = _records({"A": 1, "B": 2}, {"A": ["B"], "B": ["A"]}, group_id=1)
        g2_items, g2_wants = _records({"C": 3, "D": 4}, {"C": ["D"], "D": ["C"]}, group_id=2)
        result = compute_trades(g1_items + g2_items, g1_wants + g2_wants, group_id=2)
        self.assertEqual(result.graph.item_ids(), [ItemId("C"), ItemId("D")])
        self.assertEqual(len(result.trades), 1)
        self.assertEqual(result.trades[0].participants, (OwnerId(3), OwnerId(4)))

    def test_cross_group_want_dropped(self):
        g1_items, _ = _records({"A": 1}, {}, group_id=1)
        g2_items, _ = _records({"C": 3}, {}, group_id=2)
        wants = [PreferenceEdge(ItemId("C"), ItemId("A"), 1)]
        with self.assertLogs("tradecycles.market.graph", level="WARNING"):
            result = compute_trades(g1_items + g2_items, wants, group_id=2)
        self.assertEqual(result.graph[ItemId("C")].preferences, ())


if __name__ == "__main__":
    unittest.main()
