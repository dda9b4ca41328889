from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from functools import lru_cache
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import yaml

from .models import Item, OrderLineEntry
from .selector import PackingConstants
from .signature import line_key
from .units import parse_float

logger = logging.getLogger(__name__)

SETTINGS_ENV = "CARTONIZER_SETTINGS"

DEFAULT_SETTINGS: Dict[str, Optional[float]] = {
    "side_margin": 0.0,
    "front_margin": 0.0,
    "top_margin": 0.0,
    "gap_xy": 0.0,
    "gap_z": 0.0,
    "max_stack_layers": None,
    "unit_weight_kg": 0.0,
    "box_padding": 0.0,
    "packaging_material_weight_multiplier": 0.01,
}


@dataclass(frozen=True)
class PackingDefaults:
    """General packing settings applied where a SKU has no override."""

    side_margin: float = 0.0
    front_margin: float = 0.0
    top_margin: float = 0.0
    gap_xy: float = 0.0
    gap_z: float = 0.0
    max_stack_layers: Optional[int] = None
    unit_weight_kg: float = 0.0
    box_padding: float = 0.0
    packaging_material_weight_multiplier: float = 0.01

    def constants(self) -> PackingConstants:
        return PackingConstants(
            packaging_material_weight_multiplier=self.packaging_material_weight_multiplier,
            box_padding=self.box_padding,
        )


def settings_path() -> str:
    env_path = os.getenv(SETTINGS_ENV)
    if env_path:
        return os.path.expanduser(env_path)
    return os.path.join(os.path.dirname(__file__), "settings.yaml")


def _coerce(key: str, value) -> Optional[float]:
    if value is None:
        return None
    if key == "max_stack_layers":
        number = int(value)
        if number < 0:
            raise ValueError(f"{key} must not be negative")
        return number
    number = parse_float(str(value))
    if number < 0:
        raise ValueError(f"{key} must not be negative")
    return number


def parse_settings(data: Mapping) -> PackingDefaults:
    values = dict(DEFAULT_SETTINGS)
    for key in DEFAULT_SETTINGS:
        if key not in data:
            continue
        try:
            values[key] = _coerce(key, data[key])
        except (TypeError, ValueError):
            logger.warning("Ignoring invalid setting %s=%r", key, data[key])
    return PackingDefaults(**values)


@lru_cache(maxsize=None)
def load_settings(path: Optional[str] = None) -> PackingDefaults:
    """Load packing defaults from ``settings.yaml`` when available."""
    path = path or settings_path()
    data: Mapping = {}
    if os.path.exists(path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError):
            logger.exception("Failed to read settings from %s", path)
            loaded = {}
        if isinstance(loaded, dict):
            data = loaded
        else:
            logger.warning("Settings file %s does not hold a mapping", path)
    return parse_settings(data)


def resolve_item(
    item_id: str,
    dims: Tuple[float, float, float],
    *,
    name: str = "",
    overrides: Optional[Mapping] = None,
    defaults: Optional[PackingDefaults] = None,
) -> Item:
    """Build an item profile: SKU overrides first, general defaults second."""
    if defaults is None:
        defaults = load_settings()
    overrides = overrides or {}
    values = {}
    for field_ in fields(Item):
        if field_.name in ("id", "w", "d", "h", "name", "keep_upright"):
            continue
        value = overrides.get(field_.name)
        values[field_.name] = value if value is not None else getattr(defaults, field_.name)
    w, d, h = dims
    return Item(
        id=item_id,
        w=w,
        d=d,
        h=h,
        name=name,
        keep_upright=bool(overrides.get("keep_upright", False)),
        **values,
    )


def aggregate_entries(entries: Sequence[OrderLineEntry]) -> List[OrderLineEntry]:
    """Merge entries with identical profiles and unit weights, keeping first-seen order."""
    merged: Dict[tuple, OrderLineEntry] = {}
    for entry in entries:
        key = line_key(entry.item)
        existing = merged.get(key)
        if existing is None:
            merged[key] = entry
        else:
            merged[key] = OrderLineEntry(existing.item, existing.quantity + entry.quantity)
    return list(merged.values())
