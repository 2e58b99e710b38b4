"""Seeded generation of synthetic trading groups."""
from __future__ import annotations

from tradecycles.core.config import ScenarioConfig, validate_scenario
from tradecycles.core.rng import SeededRNG
from tradecycles.core.types import (
    ItemId,
    ItemRecord,
    Owner,
    OwnerId,
    PreferenceEdge,
)
from tradecycles.market.snapshot import Snapshot

_OWNER_NAMES = [
    "Alex", "Jordan", "Sam", "Taylor", "Morgan",
    "Casey", "Riley", "Jamie", "Quinn", "Avery",
]

_ITEM_NAMES = [
    "Catan", "Pandemic", "Azul", "Wingspan", "Splendor",
    "Dominion", "Carcassonne", "Scythe", "Everdell", "Agricola",
]


def generate_snapshot(
    rng: SeededRNG, cfg: ScenarioConfig, group_id: int = 1,
) -> Snapshot:
    """Draw owners, items and ranked wants from *cfg*.

    With ``stale_edge_probability`` > 0 some wants point at deleted items or
    at the source owner's own items, exercising the builder's drop path.
    """
    validate_scenario(cfg)
    owner_rng = rng.fork("owners")
    want_rng = rng.fork("wants")

    owners: list[Owner] = []
    items: list[ItemRecord] = []
    for o in range(1, cfg.num_owners + 1):
        owner_id = OwnerId(o)
        base = _OWNER_NAMES[(o - 1) % len(_OWNER_NAMES)]
        owners.append(Owner(owner_id, f"{base} {o}"))
        count = owner_rng.randint(cfg.items_per_owner_min, cfg.items_per_owner_max)
        for _ in range(count):
            n = len(items) + 1
            items.append(
                ItemRecord(
                    item_id=ItemId(n),
                    owner_id=owner_id,
                    name=f"{_ITEM_NAMES[(n - 1) % len(_ITEM_NAMES)]} #{n}",
                    group_id=group_id,
                )
            )

    wants: list[PreferenceEdge] = []
    for item in items:
        others = [i.item_id for i in items if i.owner_id != item.owner_id]
        k = want_rng.randint(cfg.wants_per_item_min, cfg.wants_per_item_max)
        rank = 0
        for target in want_rng.sample(others, k):
            rank += want_rng.randint(1, cfg.rank_gap_max)
            wants.append(PreferenceEdge(item.item_id, target, rank))

        if cfg.stale_edge_probability and want_rng.random() < cfg.stale_edge_probability:
            own = [i.item_id for i in items
                   if i.owner_id == item.owner_id and i.item_id != item.item_id]
            stale = own[0] if own and want_rng.random() < 0.5 else ItemId(len(items) + 1000)
            rank += 1
            wants.append(PreferenceEdge(item.item_id, stale, rank))

    # wants arrive in no particular order from a store
    want_rng.shuffle(wants)
    return Snapshot(
        owners=owners,
        items=items,
        wants=wants,
        group_id=group_id,
        group_name=f"Generated group (seed {rng.seed})",
    )
