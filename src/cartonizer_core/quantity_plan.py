from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional, Sequence

from .models import Box, Item, OrderLineEntry, Orientation
from .selector import PackingConstants, pack_box

# Large enough that no realistic box can hold it in one go.
FILL_QUANTITY = 10**9


@dataclass(frozen=True)
class BoxCapacity:
    box_id: str
    capacity: int
    layer_capacity: int
    layers: int
    orientation: Optional[Orientation]
    void_ratio: float


def box_capacity(
    item: Item, box: Box, constants: PackingConstants = PackingConstants()
) -> BoxCapacity:
    """How many units of ``item`` one ``box`` holds when filled completely."""
    result = pack_box([OrderLineEntry(item, FILL_QUANTITY)], box, constants)
    if result.selection is None:
        return BoxCapacity(box.id, 0, 0, 0, None, 1.0)
    first = result.layers[0]
    return BoxCapacity(
        box_id=box.id,
        capacity=result.packed_total,
        layer_capacity=first.placed,
        layers=len(result.layers),
        orientation=first.columns[0].orientation,
        void_ratio=result.selection.void_ratio,
    )


def capacity_table(
    item: Item, boxes: Sequence[Box], constants: PackingConstants = PackingConstants()
) -> List[BoxCapacity]:
    """Capacities of every box, smallest box first."""
    ordered = sorted(boxes, key=lambda box: box.inner_volume)
    return [box_capacity(item, box, constants) for box in ordered]


def box_for_quantity(
    item: Item,
    boxes: Sequence[Box],
    quantity: int,
    constants: PackingConstants = PackingConstants(),
) -> Optional[str]:
    """Smallest box that holds ``quantity`` units, or ``None``.

    Weight limits are not applied; this is a geometric capacity plan.
    """
    if quantity <= 0:
        raise ValueError("quantity must be positive")
    for row in capacity_table(item, boxes, constants):
        if row.capacity >= quantity:
            return row.box_id
    return None
