from __future__ import annotations

from typing import Iterable, Sequence, Tuple

from .models import Box, Dims, Item, OrderLineEntry


def _round(value, eps: float = 1e-6):
    if value is None:
        return None
    return round(value / eps) * eps


def _dims_key(dims: Dims | None) -> tuple | None:
    if dims is None:
        return None
    return (_round(dims.w), _round(dims.d), _round(dims.h))


def item_key(item: Item) -> tuple:
    """Packing profile of an item; identical keys pack identically."""
    return (
        item.id,
        _round(item.w),
        _round(item.d),
        _round(item.h),
        _round(item.side_margin),
        _round(item.front_margin),
        _round(item.top_margin),
        _round(item.gap_xy),
        _round(item.gap_z),
        item.max_stack_layers,
        bool(item.keep_upright),
    )


def line_key(item: Item) -> tuple:
    """Packing profile plus unit weight; lines with equal keys may be merged."""
    return item_key(item) + (_round(item.unit_weight_kg),)


def box_key(box: Box) -> tuple:
    return (
        box.id,
        _dims_key(box.inner),
        _dims_key(box.outer),
        _round(box.max_weight_kg),
        _round(box.box_weight_kg),
    )


def order_signature(
    entries: Sequence[OrderLineEntry], boxes: Iterable[Box]
) -> Tuple[tuple, tuple]:
    """Canonical fingerprint of the inputs a packing summary depends on."""
    entry_part = tuple((line_key(entry.item), entry.quantity) for entry in entries)
    box_part = tuple(sorted(box_key(box) for box in boxes))
    return entry_part, box_part
