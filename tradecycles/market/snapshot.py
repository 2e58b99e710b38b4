"""Load a trading-group snapshot (owners, items, wants) from YAML or JSON.

Document shape::

    group: {id: 1, name: "Board Game Meetup"}     # optional
    owners:
      - {id: 1, name: Alex}
    items:
      - {id: 1, owner: 1, name: Catan}            # group defaults to group.id
    wants:
      - {source: 1, target: 4, rank: 1}
"""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any, Optional

import yaml

from tradecycles.core.types import (
    ItemId,
    ItemRecord,
    Owner,
    OwnerId,
    PreferenceEdge,
    RawId,
    as_item_id,
    as_owner_id,
)


class SnapshotError(ValueError):
    """The snapshot document is malformed."""


@dataclass
class Snapshot:
    owners: list[Owner] = field(default_factory=list)
    items: list[ItemRecord] = field(default_factory=list)
    wants: list[PreferenceEdge] = field(default_factory=list)
    group_id: Optional[RawId] = None
    group_name: Optional[str] = None

    def owner_names(self) -> dict[OwnerId, str]:
        return {o.owner_id: o.name for o in self.owners}

    def item_names(self) -> dict[ItemId, str]:
        return {i.item_id: i.name for i in self.items if i.name}


def load_snapshot(path: str) -> Snapshot:
    with open(path, "r") as f:
        raw = f.read()
    try:
        if os.path.splitext(path)[1].lower() == ".json":
            data = json.loads(raw)
        else:
            data = yaml.safe_load(raw)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise SnapshotError(f"Cannot parse snapshot {path}: {exc}") from exc
    return snapshot_from_dict(data or {})


def snapshot_from_dict(data: dict[str, Any]) -> Snapshot:
    if not isinstance(data, dict):
        raise SnapshotError("Snapshot root must be a mapping")

    group = data.get("group") or {}
    if not isinstance(group, dict):
        raise SnapshotError("'group' must be a mapping")
    group_id = group.get("id")

    try:
        owners = [
            Owner(as_owner_id(_require(o, "id", "owner")), str(o.get("name", "")))
            for o in _section(data, "owners")
        ]
        items = [
            ItemRecord(
                item_id=as_item_id(_require(i, "id", "item")),
                owner_id=as_owner_id(_require(i, "owner", "item")),
                name=str(i.get("name", "")),
                group_id=i.get("group", group_id),
            )
            for i in _section(data, "items")
        ]
        wants = [
            PreferenceEdge(
                source=as_item_id(_require(w, "source", "want")),
                target=as_item_id(_require(w, "target", "want")),
                rank=_require(w, "rank", "want"),
            )
            for w in _section(data, "wants")
        ]
    except (TypeError, ValueError) as exc:
        if isinstance(exc, SnapshotError):
            raise
        raise SnapshotError(str(exc)) from exc

    return Snapshot(
        owners=owners,
        items=items,
        wants=wants,
        group_id=group_id,
        group_name=group.get("name"),
    )


def _section(data: dict[str, Any], key: str) -> list[dict[str, Any]]:
    rows = data.get(key) or []
    if not isinstance(rows, list) or not all(isinstance(r, dict) for r in rows):
        raise SnapshotError(f"'{key}' must be a list of mappings")
    return rows


def _require(row: dict[str, Any], key: str, kind: str) -> Any:
    if key not in row:
        raise SnapshotError(f"{kind} entry missing '{key}': {row!r}")
    return row[key]
