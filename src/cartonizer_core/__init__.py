"""Carton packing and shipping-box selection."""

from .engine import pack_order, remaining_entries, split_order
from .errors import InvalidDimensionError, InvalidInputError, InvalidTransitionError
from .layers import input_order, largest_footprint_first
from .models import (
    Box,
    Dims,
    FailureReason,
    Item,
    Layer,
    LayerColumn,
    LayerType,
    OrderLineEntry,
    PackingSelection,
    PackingStatus,
    PackingSummary,
    WeightBreakdown,
)
from .orientation import Clearance, resolve_orientations
from .selector import BoxSelector, PackingConstants, pack_box
from .status import PackingRecord
from .signature import order_signature
from .stacking import compute_num_layers, compute_stack_height

__all__ = [
    "Box",
    "BoxSelector",
    "Clearance",
    "Dims",
    "FailureReason",
    "InvalidDimensionError",
    "InvalidInputError",
    "InvalidTransitionError",
    "Item",
    "Layer",
    "LayerColumn",
    "LayerType",
    "OrderLineEntry",
    "PackingConstants",
    "PackingRecord",
    "PackingSelection",
    "PackingStatus",
    "PackingSummary",
    "WeightBreakdown",
    "compute_num_layers",
    "compute_stack_height",
    "input_order",
    "largest_footprint_first",
    "order_signature",
    "pack_box",
    "pack_order",
    "remaining_entries",
    "resolve_orientations",
    "split_order",
]
