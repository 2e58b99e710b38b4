"""Tests for opaque identifiers and input record validation."""
import unittest

from tradecycles.core.types import (
    ItemId,
    OwnerId,
    PreferenceEdge,
    Trade,
    TradeStep,
    TradeType,
    as_item_id,
)


class TestOpaqueIds(unittest.TestCase):

    def test_equal_and_hashable(self):
        self.assertEqual(ItemId(7), ItemId(7))
        self.assertEqual(len({ItemId(7), ItemId(7), ItemId(8)}), 2)

    def test_int_and_str_are_distinct(self):
        self.assertNotEqual(ItemId(1), ItemId("1"))

    def test_item_and_owner_never_equal(self):
        self.assertNotEqual(ItemId(1), OwnerId(1))

    def test_ints_sort_numerically_before_strings(self):
        ids = [ItemId("b"), ItemId(10), ItemId("a"), ItemId(2)]
        self.assertEqual(
            sorted(ids), [ItemId(2), ItemId(10), ItemId("a"), ItemId("b")],
        )

    def test_str_is_raw_value(self):
        self.assertEqual(str(ItemId(42)), "42")
        self.assertEqual(str(OwnerId("u-1")), "u-1")

    def test_rejects_other_types(self):
        for bad in (1.5, None, True, (1,)):
            with self.assertRaises(TypeError):
                ItemId(bad)

    def test_as_item_id_passthrough(self):
        i = ItemId(3)
        self.assertIs(as_item_id(i), i)
        self.assertEqual(as_item_id(3), i)


class TestPreferenceEdge(unittest.TestCase):

    def test_valid_rank(self):
        e = PreferenceEdge(ItemId(1), ItemId(2), 5)
        self.assertEqual(e.rank, 5)

    def test_non_positive_rank_rejected(self):
        with self.assertRaises(ValueError):
            PreferenceEdge(ItemId(1), ItemId(2), 0)
        with self.assertRaises(ValueError):
            PreferenceEdge(ItemId(1), ItemId(2), -3)

    def test_non_int_rank_rejected(self):
        with self.assertRaises(ValueError):
            PreferenceEdge(ItemId(1), ItemId(2), 1.0)
        with self.assertRaises(ValueError):
            PreferenceEdge(ItemId(1), ItemId(2), True)


class TestTrade(unittest.TestCase):

    def test_items_and_len(self):
        chain = (
            TradeStep(OwnerId(1), ItemId("a"), OwnerId(2), ItemId("b")),
            TradeStep(OwnerId(2), ItemId("b"), OwnerId(1), ItemId("a")),
        )
        t = Trade(1, TradeType.DIRECT, chain, (OwnerId(1), OwnerId(2)))
        self.assertEqual(len(t), 2)
        self.assertEqual(t.items, (ItemId("a"), ItemId("b")))
        self.assertEqual(TradeType.DIRECT.value, "direct")


if __name__ == "__main__":
    unittest.main()
