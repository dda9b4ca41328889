from __future__ import annotations

from dataclasses import dataclass
from typing import List, NamedTuple, Sequence, Tuple

from .models import Box, Layer, OrderLineEntry, PackingSelection
from .orientation import Clearance

LayerLayout = List[Tuple[float, float, float, float]]


class PlacedUnit(NamedTuple):
    entry_index: int
    x: float
    y: float
    z: float
    w: float
    d: float
    h: float


@dataclass(frozen=True)
class ArrangementOffsets:
    offset_x: float
    offset_y: float
    offset_z: float
    used_width: float
    used_depth: float
    used_height: float


def layer_extent(layer: Layer, gap_xy: float) -> Tuple[float, float]:
    """Width and depth covered by the columns of one layer."""
    width = 0.0
    depth = 0.0
    for position, column in enumerate(layer.columns):
        if position:
            width += gap_xy
        width += column.used_width(gap_xy)
        depth = max(depth, column.used_depth(gap_xy))
    return width, depth


def arrangement_offsets(
    selection: PackingSelection, clearance: Clearance, box: Box
) -> ArrangementOffsets:
    """Used extents of a selection and the offsets that center it in the box."""
    used_width = 0.0
    used_depth = 0.0
    used_height = 0.0
    for position, layer in enumerate(selection.layers):
        width, depth = layer_extent(layer, clearance.gap_xy)
        used_width = max(used_width, width)
        used_depth = max(used_depth, depth)
        if position:
            used_height += clearance.gap_z
        used_height += layer.height

    space = clearance.usable(box.inner)
    pad = clearance.box_padding
    return ArrangementOffsets(
        offset_x=clearance.side_margin + pad + max(0.0, space.w - used_width) / 2,
        offset_y=clearance.front_margin + pad + max(0.0, space.d - used_depth) / 2,
        offset_z=pad,
        used_width=used_width,
        used_depth=used_depth,
        used_height=used_height,
    )


def packed_positions(
    selection: PackingSelection,
    entries: Sequence[OrderLineEntry],
    box: Box,
    box_padding: float = 0.0,
) -> List[PlacedUnit]:
    """Corner coordinates of every placed unit, layer by layer."""
    clearance = Clearance.for_items([entry.item for entry in entries], box_padding)
    offsets = arrangement_offsets(selection, clearance, box)
    gap = clearance.gap_xy
    positions: List[PlacedUnit] = []
    z = offsets.offset_z
    for layer in selection.layers:
        x0 = offsets.offset_x
        for column in layer.columns:
            a, b, c = column.orientation
            placed = 0
            for col in range(column.count):
                for row in range(column.rows):
                    if placed >= column.placed:
                        break
                    positions.append(
                        PlacedUnit(
                            column.entry_index,
                            x0 + col * (a + gap),
                            offsets.offset_y + row * (b + gap),
                            z,
                            a,
                            b,
                            c,
                        )
                    )
                    placed += 1
            x0 += column.used_width(gap) + gap
        z += layer.height + clearance.gap_z
    return positions


def layer_layout(
    selection: PackingSelection,
    entries: Sequence[OrderLineEntry],
    box: Box,
    layer_index: int,
    box_padding: float = 0.0,
) -> LayerLayout:
    """2D rectangles ``(x, y, w, d)`` of one layer, for plan drawings."""
    positions = packed_positions(selection, entries, box, box_padding)
    if not 0 <= layer_index < len(selection.layers):
        raise IndexError(layer_index)
    start = sum(layer.placed for layer in selection.layers[:layer_index])
    count = selection.layers[layer_index].placed
    return [(unit.x, unit.y, unit.w, unit.d) for unit in positions[start:start + count]]
