"""Single-layer arrangement of order entries inside a box footprint.

A layer is built from rectangular blocks placed side by side along the box
width. Each block holds ``count`` units across the width and ``rows`` units
along the depth, all of one entry in one orientation. The first block is the
primary entry's best orientation; the strip left over along the width is
offered to the same entry in another orientation and then to the following
entries in priority order.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .models import Dims, Item, Layer, LayerColumn, LayerType, Orientation
from .orientation import EPS, orientation_rank
from .stacking import compute_num_layers, plan_stack
from .subspace import Slack


@dataclass(frozen=True)
class EntryState:
    """An entry still waiting for placement in the box being packed."""

    index: int
    item: Item
    remaining: int
    orientations: Tuple[Orientation, ...]
    stack_left: Optional[int] = None

    @property
    def active(self) -> bool:
        return (
            self.remaining > 0
            and bool(self.orientations)
            and (self.stack_left is None or self.stack_left > 0)
        )


PriorityPolicy = Callable[[Sequence[EntryState]], List[EntryState]]


def input_order(states: Sequence[EntryState]) -> List[EntryState]:
    return sorted(states, key=lambda state: state.index)


def largest_footprint_first(states: Sequence[EntryState]) -> List[EntryState]:
    return sorted(
        states,
        key=lambda state: (-state.item.w * state.item.d, -state.item.h, state.index),
    )


@dataclass(frozen=True)
class Block:
    entry_index: int
    orientation: Orientation
    count: int
    rows: int

    @property
    def capacity(self) -> int:
        return self.count * self.rows


@dataclass(frozen=True)
class LayerDesign:
    """A layer arrangement together with its vertical repetitions."""

    blocks: Tuple[Block, ...]
    height: float
    repetitions: int
    gap_z: float = 0.0
    assigned: Dict[int, int] = field(default_factory=dict)

    @property
    def capacity(self) -> int:
        return sum(block.capacity for block in self.blocks)

    @property
    def stack_height(self) -> float:
        """Height consumed including the gap above the last layer."""
        return self.repetitions * (self.height + self.gap_z)

    @property
    def layer_type(self) -> LayerType:
        return LayerType.UNIFORM if len(self.blocks) == 1 else LayerType.MIXED

    def expand(
        self, remaining: Dict[int, int], item_ids: Dict[int, str]
    ) -> Tuple[Tuple[Layer, ...], Dict[int, int]]:
        """Fill the repeated layers in order and return the updated remainders."""
        remaining = dict(remaining)
        layers: List[Layer] = []
        for _ in range(self.repetitions):
            columns: List[LayerColumn] = []
            for block in self.blocks:
                placed = min(block.capacity, remaining.get(block.entry_index, 0))
                if placed <= 0:
                    continue
                remaining[block.entry_index] -= placed
                columns.append(
                    LayerColumn(
                        entry_index=block.entry_index,
                        item_id=item_ids[block.entry_index],
                        orientation=block.orientation,
                        count=block.count,
                        rows=block.rows,
                        placed=placed,
                    )
                )
            if not columns:
                break
            layer_type = LayerType.UNIFORM if len(columns) == 1 else LayerType.MIXED
            layers.append(Layer(type=layer_type, columns=tuple(columns), height=self.height))
        return tuple(layers), remaining


def uniform_block(
    width: float,
    depth: float,
    orientation: Orientation,
    gap_xy: float = 0.0,
    slack: Optional[Slack] = None,
) -> Tuple[int, int]:
    """Units across the width and rows along the depth for one orientation."""
    a, b, _ = orientation
    if width <= 0 or depth <= 0 or a <= 0 or b <= 0:
        return 0, 0
    count = int((width + gap_xy + EPS) // (a + gap_xy))
    rows = int((depth + gap_xy + EPS) // (b + gap_xy))
    if count <= 0 or rows <= 0:
        return 0, 0
    if slack is not None:
        slack.runs("w", width, a, gap_xy, count)
        slack.runs("d", depth, b, gap_xy, rows)
    return count, rows


@dataclass(frozen=True)
class UniformLayer:
    """One orientation repeated across the footprint and up the stack."""

    orientation: Orientation
    count: int
    rows: int
    layers: int

    @property
    def layer_capacity(self) -> int:
        return self.count * self.rows

    @property
    def capacity(self) -> int:
        return self.layer_capacity * self.layers


def _strip_fill(
    orientations: Sequence[Orientation],
    dims: Tuple[float, float, float],
    strip_width: float,
    depth: float,
    pitch: float,
    gap_xy: float,
    repetitions: int = 1,
    needed: Optional[int] = None,
    slack: Optional[Slack] = None,
) -> Optional[Tuple[Orientation, int, int]]:
    """Best single-orientation block for the strip left along the width.

    Orientations taller than ``pitch`` are skipped. With ``needed`` the block
    is narrowed to the columns those units take over ``repetitions`` layers.
    """
    best = None
    best_key = None
    for orientation in orientations:
        if orientation[2] > pitch + EPS:
            continue
        count, rows = uniform_block(strip_width, depth, orientation, gap_xy, slack)
        if count * rows <= 0:
            continue
        if needed is None:
            placed = count * rows * repetitions
        else:
            count = min(count, math.ceil(needed / (rows * repetitions)))
            placed = min(count * rows * repetitions, needed)
        width = count * orientation[0] + max(count - 1, 0) * gap_xy
        key = (-placed, width, orientation_rank(dims, orientation))
        if best_key is None or key < best_key:
            best_key = key
            best = (orientation, count, rows)
    return best


def best_uniform_layer(
    space: Dims,
    orientations: Sequence[Orientation],
    dims: Tuple[float, float, float],
    gap_xy: float = 0.0,
    gap_z: float = 0.0,
    max_stack_layers: Optional[int] = None,
    slack: Optional[Slack] = None,
) -> Optional[UniformLayer]:
    """Orientation with the largest capacity over the stack ``space`` allows.

    Ties go to the smaller unused footprint, counting the strip the same
    item fills in another orientation, and then to permutation order.
    """
    footprint = space.w * space.d
    best = None
    best_key = None
    for orientation in orientations:
        count, rows = uniform_block(space.w, space.d, orientation, gap_xy, slack)
        if count * rows <= 0:
            continue
        layers = compute_num_layers(
            space.h, orientation[2], gap_z, max_stack_layers, slack
        )
        if layers <= 0:
            continue
        used = count * rows * orientation[0] * orientation[1]
        strip = _strip_fill(
            orientations,
            dims,
            space.w - count * (orientation[0] + gap_xy),
            space.d,
            orientation[2],
            gap_xy,
            slack=slack,
        )
        if strip is not None:
            (a, b, _), strip_count, strip_rows = strip
            used += strip_count * strip_rows * a * b
        key = (-count * rows * layers, footprint - used, orientation_rank(dims, orientation))
        if best_key is None or key < best_key:
            best_key = key
            best = UniformLayer(orientation, count, rows, layers)
    return best


def _design_for(
    primary: EntryState,
    choice: UniformLayer,
    others: Sequence[EntryState],
    space: Dims,
    gap_xy: float,
    gap_z: float,
    slack: Optional[Slack] = None,
) -> LayerDesign:
    orientation = choice.orientation
    count, rows = choice.count, choice.rows
    pitch = orientation[2]
    repetitions = plan_stack(
        choice.layer_capacity, space.h, pitch, gap_z, choice.layers, needed=primary.remaining
    )
    if choice.capacity >= primary.remaining:
        count = math.ceil(primary.remaining / (rows * repetitions))

    blocks = [Block(primary.index, orientation, count, rows)]
    assigned = {primary.index: min(count * rows * repetitions, primary.remaining)}
    strip_width = space.w - count * (orientation[0] + gap_xy)

    candidates: List[EntryState] = []
    if assigned[primary.index] < primary.remaining:
        candidates.append(primary)
    candidates.extend(
        state
        for state in others
        if state.stack_left is None or state.stack_left >= repetitions
    )
    for state in candidates:
        if strip_width <= EPS:
            break
        unassigned = state.remaining - assigned.get(state.index, 0)
        if unassigned <= 0:
            continue
        strip = _strip_fill(
            state.orientations,
            state.item.dims,
            strip_width,
            space.d,
            pitch,
            gap_xy,
            repetitions,
            unassigned,
            slack,
        )
        if strip is None:
            continue
        block = Block(state.index, *strip)
        blocks.append(block)
        assigned[state.index] = assigned.get(state.index, 0) + min(
            block.capacity * repetitions, unassigned
        )
        strip_width -= block.count * (block.orientation[0] + gap_xy)

    return LayerDesign(
        blocks=tuple(blocks),
        height=pitch,
        repetitions=repetitions,
        gap_z=gap_z,
        assigned=assigned,
    )


def build_layer_design(
    states: Sequence[EntryState],
    space: Dims,
    gap_xy: float = 0.0,
    gap_z: float = 0.0,
    priority: PriorityPolicy = input_order,
    slack: Optional[Slack] = None,
) -> Optional[LayerDesign]:
    """Best layer design for the entries still to place, or ``None``.

    ``space`` is the margin-reduced footprint with the height still free.
    The first entry in priority order that can form a layer takes the
    uniform block; later entries only fill the strip beside it.
    """
    ordered = [state for state in priority(states) if state.active]
    for position, primary in enumerate(ordered):
        choice = best_uniform_layer(
            space,
            primary.orientations,
            primary.item.dims,
            gap_xy,
            gap_z,
            primary.stack_left,
            slack,
        )
        if choice is None:
            continue
        return _design_for(
            primary, choice, ordered[position + 1:], space, gap_xy, gap_z, slack
        )
    return None
