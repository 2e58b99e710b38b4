"""Configuration loading and defaults."""
from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from typing import Any, Optional

import yaml


@dataclass
class ScenarioConfig:
    """Shape of a generated trading group (used when no snapshot is given)."""
    num_owners: int = 6
    items_per_owner_min: int = 1
    items_per_owner_max: int = 3
    wants_per_item_min: int = 0
    wants_per_item_max: int = 5
    rank_gap_max: int = 1            # >1 produces non-contiguous ranks
    stale_edge_probability: float = 0.0


@dataclass
class OutputConfig:
    write_events: bool = True
    write_trades_csv: bool = True
    write_report: bool = True


@dataclass
class RunConfig:
    snapshot_path: Optional[str] = None
    group_id: Any = None              # int | str | None
    group_name: Optional[str] = None
    seed: int = 42
    output_dir: str = "outputs/runs"
    label: Optional[str] = None
    scenario: ScenarioConfig = field(default_factory=ScenarioConfig)
    output: OutputConfig = field(default_factory=OutputConfig)


def load_config(path: str) -> RunConfig:
    """Load configuration from a YAML (or JSON) file."""
    with open(path, "r") as f:
        raw = f.read()

    if os.path.splitext(path)[1].lower() == ".json":
        data = json.loads(raw)
    else:
        data = yaml.safe_load(raw) or {}

    if not isinstance(data, dict):
        raise ValueError(f"Config root must be a mapping: {path}")
    return _dict_to_config(data)


_NESTED = {
    "scenario": ScenarioConfig,
    "output": OutputConfig,
}

_TOP_SCALARS = (
    "snapshot_path", "group_id", "group_name",
    "seed", "output_dir", "label",
)


def _dict_to_config(data: dict[str, Any]) -> RunConfig:
    cfg = RunConfig()
    for key in _TOP_SCALARS:
        if key in data:
            setattr(cfg, key, data[key])
    for section in _NESTED:
        if section in data and isinstance(data[section], dict):
            obj = getattr(cfg, section)
            for k, v in data[section].items():
                if hasattr(obj, k):
                    setattr(obj, k, v)
    validate_scenario(cfg.scenario)
    return cfg


def validate_scenario(sc: ScenarioConfig) -> None:
    """Raise ValueError for scenario bounds that cannot be sampled."""
    if sc.num_owners < 0:
        raise ValueError(f"num_owners must be >= 0, got {sc.num_owners}")
    if not 0 <= sc.items_per_owner_min <= sc.items_per_owner_max:
        raise ValueError(
            "items_per_owner bounds must satisfy 0 <= min <= max, got "
            f"[{sc.items_per_owner_min}, {sc.items_per_owner_max}]"
        )
    if not 0 <= sc.wants_per_item_min <= sc.wants_per_item_max:
        raise ValueError(
            "wants_per_item bounds must satisfy 0 <= min <= max, got "
            f"[{sc.wants_per_item_min}, {sc.wants_per_item_max}]"
        )
    if sc.rank_gap_max < 1:
        raise ValueError(f"rank_gap_max must be >= 1, got {sc.rank_gap_max}")
    if not 0.0 <= sc.stale_edge_probability <= 1.0:
        raise ValueError(
            "stale_edge_probability must be in [0, 1], got "
            f"{sc.stale_edge_probability}"
        )
