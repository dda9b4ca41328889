from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from .units import KG, MM, format_ratio

# Orientation is (a, b, c): extents along box width, depth and height.
Orientation = Tuple[float, float, float]


@dataclass(frozen=True)
class Dims:
    """Width, depth and height in millimeters."""

    w: MM
    d: MM
    h: MM

    @property
    def volume(self) -> float:
        return self.w * self.d * self.h

    def as_tuple(self) -> Tuple[float, float, float]:
        return (self.w, self.d, self.h)


@dataclass(frozen=True)
class Box:
    """Shipping box definition from the catalog."""

    id: str
    inner: Dims
    outer: Optional[Dims] = None
    max_weight_kg: Optional[KG] = None
    box_weight_kg: Optional[KG] = None
    name: str = ""

    @property
    def inner_volume(self) -> float:
        return self.inner.volume


@dataclass(frozen=True)
class Item:
    """Packing profile of a single SKU."""

    id: str
    w: MM
    d: MM
    h: MM
    name: str = ""
    unit_weight_kg: KG = 0.0
    keep_upright: bool = False
    side_margin: MM = 0.0
    front_margin: MM = 0.0
    top_margin: MM = 0.0
    gap_xy: MM = 0.0
    gap_z: MM = 0.0
    max_stack_layers: Optional[int] = None

    @property
    def dims(self) -> Tuple[float, float, float]:
        return (self.w, self.d, self.h)

    @property
    def unit_volume(self) -> float:
        return self.w * self.d * self.h


@dataclass(frozen=True)
class OrderLineEntry:
    item: Item
    quantity: int


class LayerType(str, Enum):
    UNIFORM = "uniform"
    MIXED = "mixed"


class PackingStatus(str, Enum):
    NONE = "none"
    PENDING = "pending"
    SUCCESS = "success"
    FAILED = "failed"


class FailureReason(str, Enum):
    NO_FITTING_ORIENTATION = "no_fitting_orientation"
    WEIGHT_EXCEEDED = "weight_exceeded"
    NO_CANDIDATE_BOXES = "no_candidate_boxes"
    INSUFFICIENT_CAPACITY = "insufficient_capacity"


@dataclass(frozen=True)
class LayerColumn:
    """Block of ``count`` x ``rows`` units of one entry in one orientation."""

    entry_index: int
    item_id: str
    orientation: Orientation
    count: int
    rows: int
    placed: int = 0

    @property
    def capacity(self) -> int:
        return self.count * self.rows

    def used_width(self, gap_xy: float = 0.0) -> float:
        if self.count <= 0:
            return 0.0
        return self.count * self.orientation[0] + (self.count - 1) * gap_xy

    def used_depth(self, gap_xy: float = 0.0) -> float:
        if self.rows <= 0:
            return 0.0
        return self.rows * self.orientation[1] + (self.rows - 1) * gap_xy


@dataclass(frozen=True)
class Layer:
    type: LayerType
    columns: Tuple[LayerColumn, ...]
    height: MM

    @property
    def capacity(self) -> int:
        return sum(column.capacity for column in self.columns)

    @property
    def placed(self) -> int:
        return sum(column.placed for column in self.columns)


@dataclass(frozen=True)
class WeightBreakdown:
    product_weight_kg: KG
    box_weight_kg: KG
    packaging_weight_kg: KG
    total_weight_kg: KG
    max_weight_kg: Optional[KG] = None

    @property
    def exceeded(self) -> bool:
        return self.max_weight_kg is not None and self.total_weight_kg > self.max_weight_kg


@dataclass(frozen=True)
class PackingSelection:
    """One box instance chosen for (part of) an order."""

    box_id: str
    layers: Tuple[Layer, ...]
    void_ratio: float
    weight: WeightBreakdown
    packed: Tuple[int, ...] = ()

    @property
    def packed_total(self) -> int:
        return sum(self.packed)

    @property
    def void_ratio_display(self) -> str:
        return format_ratio(self.void_ratio)


@dataclass(frozen=True)
class PackingSummary:
    selections: Tuple[PackingSelection, ...]
    leftover: int
    status: PackingStatus
    primary_box_id: Optional[str] = None
    leftover_by_entry: Tuple[int, ...] = ()
    requested: Tuple[int, ...] = ()
    failure_reasons: Tuple[FailureReason, ...] = field(default_factory=tuple)

    @property
    def packed_total(self) -> int:
        return sum(selection.packed_total for selection in self.selections)
