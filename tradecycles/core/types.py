"""Core domain types for item-level top trading cycles."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Union

RawId = Union[int, str]


@dataclass(frozen=True, order=True)
class _OpaqueId:
    """Hashable, totally-ordered identifier over an int or str value.

    Integers sort before strings; within a kind the natural order applies.
    Subclasses never compare equal to each other.
    """
    kind: int = field(init=False, repr=False)
    raw: RawId

    def __post_init__(self) -> None:
        if isinstance(self.raw, bool) or not isinstance(self.raw, (int, str)):
            raise TypeError(
                f"{type(self).__name__} must wrap an int or str, "
                f"got {type(self.raw).__name__}"
            )
        object.__setattr__(self, "kind", 0 if isinstance(self.raw, int) else 1)

    def __str__(self) -> str:
        return str(self.raw)


@dataclass(frozen=True, order=True)
class ItemId(_OpaqueId):
    pass


@dataclass(frozen=True, order=True)
class OwnerId(_OpaqueId):
    pass


def as_item_id(value: Union[ItemId, RawId]) -> ItemId:
    return value if isinstance(value, ItemId) else ItemId(value)


def as_owner_id(value: Union[OwnerId, RawId]) -> OwnerId:
    return value if isinstance(value, OwnerId) else OwnerId(value)


# ── input records ───────────────────────────────────────────────────────────

@dataclass(frozen=True)
class ItemRecord:
    """One tradeable item as supplied by the caller."""
    item_id: ItemId
    owner_id: OwnerId
    name: str = ""
    group_id: Optional[RawId] = None


@dataclass(frozen=True)
class PreferenceEdge:
    """*source* would accept *target*; rank 1 is most preferred."""
    source: ItemId
    target: ItemId
    rank: int

    def __post_init__(self) -> None:
        if isinstance(self.rank, bool) or not isinstance(self.rank, int):
            raise ValueError(f"rank must be an int, got {self.rank!r}")
        if self.rank < 1:
            raise ValueError(f"rank must be positive, got {self.rank}")


@dataclass(frozen=True)
class Owner:
    owner_id: OwnerId
    name: str


# ── graph / allocation ──────────────────────────────────────────────────────

@dataclass(frozen=True)
class Item:
    """A trading agent: one node of the preference graph."""
    item_id: ItemId
    owner_id: OwnerId
    preferences: tuple[ItemId, ...] = ()


@dataclass(frozen=True)
class DroppedEdge:
    edge: PreferenceEdge
    reason: str       # "unknown_source" | "unknown_target" | "same_owner" | "duplicate"


@dataclass(frozen=True)
class RoundRecord:
    """Pointer graph and cycles of one allocation round.

    Each cycle is in walk order: ``pointers[cycle[k]] == cycle[k + 1]``.
    """
    round_number: int
    active: tuple[ItemId, ...]
    pointers: dict[ItemId, ItemId]
    cycles: tuple[tuple[ItemId, ...], ...]

    @property
    def resolved(self) -> tuple[ItemId, ...]:
        return tuple(item for cycle in self.cycles for item in cycle)


@dataclass
class AllocationResult:
    allocation: dict[ItemId, ItemId]
    rounds: list[RoundRecord] = field(default_factory=list)

    @property
    def round_count(self) -> int:
        return len(self.rounds)

    @property
    def kept_items(self) -> list[ItemId]:
        """Items whose owner keeps them (self-loops), ascending."""
        return sorted(k for k, v in self.allocation.items() if k == v)


# ── trades ──────────────────────────────────────────────────────────────────

class TradeType(str, Enum):
    DIRECT = "direct"
    CIRCULAR = "circular"


@dataclass(frozen=True)
class TradeStep:
    """*giver* hands *item* to *receiver*, who gives up *receiver_item*."""
    giver: OwnerId
    item: ItemId
    receiver: OwnerId
    receiver_item: ItemId


@dataclass(frozen=True)
class Trade:
    trade_id: int
    trade_type: TradeType
    chain: tuple[TradeStep, ...]
    participants: tuple[OwnerId, ...]
    round_number: int = 0

    @property
    def items(self) -> tuple[ItemId, ...]:
        return tuple(step.item for step in self.chain)

    def __len__(self) -> int:
        return len(self.chain)
