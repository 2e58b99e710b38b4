"""Property checks over generated trading groups."""
import unittest

from tradecycles.core.config import ScenarioConfig
from tradecycles.core.rng import SeededRNG
from tradecycles.core.types import (
    ItemId,
    ItemRecord,
    OwnerId,
    PreferenceEdge,
    Trade,
    TradeType,
)
from tradecycles.evaluation.checks import check_exchange
from tradecycles.market.exchange import compute_trades
from tradecycles.market.scenario import generate_snapshot


def _run(seed, **overrides):
    cfg = ScenarioConfig(**overrides)
    snap = generate_snapshot(SeededRNG(seed), cfg)
    return snap, compute_trades(snap.items, snap.wants)


class TestScenarioGenerator(unittest.TestCase):

    def test_same_seed_same_snapshot(self):
        a = generate_snapshot(SeededRNG(7), ScenarioConfig())
        b = generate_snapshot(SeededRNG(7), ScenarioConfig())
        self.assertEqual(a.items, b.items)
        self.assertEqual(a.wants, b.wants)

    def test_bounds_respected(self):
        cfg = ScenarioConfig(num_owners=5, items_per_owner_min=2, items_per_owner_max=2,
                             wants_per_item_min=1, wants_per_item_max=3)
        snap = generate_snapshot(SeededRNG(3), cfg)
        self.assertEqual(len(snap.owners), 5)
        self.assertEqual(len(snap.items), 10)
        per_source = {}
        for w in snap.wants:
            per_source[w.source] = per_source.get(w.source, 0) + 1
        self.assertTrue(all(1 <= n <= 3 for n in per_source.values()))

    def test_invalid_bounds_rejected(self):
        with self.assertRaises(ValueError):
            generate_snapshot(SeededRNG(1), ScenarioConfig(items_per_owner_min=3,
                                                           items_per_owner_max=1))


class TestExchangeProperties(unittest.TestCase):

    SEEDS = range(25)

    def test_all_properties_hold(self):
        for seed in self.SEEDS:
            for owners, max_wants in ((3, 2), (8, 4), (15, 6)):
                with self.subTest(seed=seed, owners=owners, max_wants=max_wants):
                    _, result = _run(
                        seed, num_owners=owners, wants_per_item_max=max_wants,
                        rank_gap_max=3,
                    )
                    check = check_exchange(result)
                    self.assertTrue(check.valid, check.violations)

    def test_properties_hold_with_stale_wants(self):
        for seed in self.SEEDS:
            with self.subTest(seed=seed):
                with self.assertLogs("tradecycles.market.graph", level="WARNING"):
                    _, result = _run(seed, num_owners=6, stale_edge_probability=1.0)
                self.assertTrue(check_exchange(result).valid)
                self.assertGreater(len(result.graph.dropped_edges), 0)

    def test_deterministic_trades(self):
        for seed in (1, 2, 3):
            _, a = _run(seed, num_owners=10)
            _, b = _run(seed, num_owners=10)
            self.assertEqual(a.trades, b.trades)
            self.assertEqual(list(a.allocation.items()), list(b.allocation.items()))

    def test_input_order_does_not_matter(self):
        snap, a = _run(11, num_owners=10)
        b = compute_trades(list(reversed(snap.items)), list(reversed(snap.wants)))
        self.assertEqual(a.trades, b.trades)

    def test_no_owner_worse_off(self):
        # every item either stays home or lands on something it ranked
        for seed in range(10):
            _, result = _run(seed, num_owners=9)
            for item, got in result.allocation.items():
                if item != got:
                    self.assertIn(got, result.graph[item].preferences)


class TestCheckDetectsViolations(unittest.TestCase):

    def test_tampered_trade_flagged(self):
        items = [ItemRecord(ItemId(1), OwnerId(1)), ItemRecord(ItemId(2), OwnerId(2))]
        wants = [PreferenceEdge(ItemId(1), ItemId(2), 1), PreferenceEdge(ItemId(2), ItemId(1), 1)]
        result = compute_trades(items, wants)
        bad = result.trades[0]
        result.trades[0] = Trade(
            bad.trade_id, TradeType.DIRECT, bad.chain[:1], bad.participants,
        )
        check = check_exchange(result)
        self.assertFalse(check.valid)
        self.assertTrue(any("1 step" in v for v in check.violations))

    def test_broken_allocation_flagged(self):
        items = [ItemRecord(ItemId(1), OwnerId(1)), ItemRecord(ItemId(2), OwnerId(2))]
        result = compute_trades(items, [])
        result.allocation[ItemId(1)] = ItemId(2)
        check = check_exchange(result)
        self.assertFalse(check.valid)


if __name__ == "__main__":
    unittest.main()
