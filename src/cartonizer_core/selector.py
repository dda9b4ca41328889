from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .layers import EntryState, PriorityPolicy, build_layer_design, input_order
from .models import (
    Box,
    Dims,
    FailureReason,
    Layer,
    OrderLineEntry,
    Orientation,
    PackingSelection,
    PackingSummary,
)
from .orientation import EPS, Clearance, fits, resolve_orientations
from .subspace import Slack, axis_lengths, search_spaces
from .summary import build_selection, summarize
from .weights import compute_weights

logger = logging.getLogger(__name__)

DEFAULT_PACKAGING_MULTIPLIER = 0.01


@dataclass(frozen=True)
class PackingConstants:
    """Policy values threaded explicitly into every packing request."""

    packaging_material_weight_multiplier: float = DEFAULT_PACKAGING_MULTIPLIER
    box_padding: float = 0.0


@dataclass(frozen=True)
class BoxPacking:
    """Result of simulating the whole order in one box."""

    box: Box
    layers: Tuple[Layer, ...]
    packed: Tuple[int, ...]
    leftover_by_entry: Tuple[int, ...]
    selection: Optional[PackingSelection]
    fitting_entries: int

    @property
    def leftover(self) -> int:
        return sum(self.leftover_by_entry)

    @property
    def packed_total(self) -> int:
        return sum(self.packed)

    @property
    def weight_ok(self) -> bool:
        return self.selection is None or not self.selection.weight.exceeded

    @property
    def adequate(self) -> bool:
        return self.leftover == 0 and self.selection is not None and self.weight_ok


def _unit_bound(
    entries: Sequence[OrderLineEntry],
    orientations: Sequence[Tuple[Orientation, ...]],
    clearance: Clearance,
) -> Callable[[Dims], int]:
    """Upper limit on the units any plan can place in a space.

    Every unit claims its size plus one gap along each axis, so the space
    grown by one gap holds at most that many cells. Entries with a stack
    limit also hold no more than that many full layers.
    """
    gap_xy, gap_z = clearance.gap_xy, clearance.gap_z
    cell = None
    per_entry = []
    for entry, found in zip(entries, orientations):
        if not found:
            continue
        volume = min((a + gap_xy) * (b + gap_xy) * (c + gap_z) for a, b, c in found)
        cell = volume if cell is None else min(cell, volume)
        footprint = min((a + gap_xy) * (b + gap_xy) for a, b, _ in found)
        per_entry.append((entry.quantity, footprint, entry.item.max_stack_layers))

    def bound(space: Dims) -> int:
        if cell is None:
            return 0
        area = (space.w + gap_xy) * (space.d + gap_xy)
        limit = int(area * (space.h + gap_z) / cell + EPS)
        stacked = 0
        for quantity, footprint, max_layers in per_entry:
            if max_layers is None:
                stacked += quantity
            else:
                stacked += min(quantity, max_layers * int(area / footprint + EPS))
        return min(limit, stacked)

    return bound


def _fill_space(
    entries: Sequence[OrderLineEntry],
    space: Dims,
    orientations: Sequence[Tuple[Orientation, ...]],
    clearance: Clearance,
    priority: PriorityPolicy,
    slack: Optional[Slack] = None,
) -> Tuple[Tuple[Layer, ...], Dict[int, int]]:
    """Design layers bottom up inside ``space`` until nothing more fits."""
    items = [entry.item for entry in entries]
    remaining: Dict[int, int] = {index: entry.quantity for index, entry in enumerate(entries)}
    stack_used: Dict[int, int] = {index: 0 for index in range(len(entries))}
    item_ids = {index: item.id for index, item in enumerate(items)}
    height_left = space.h
    layers: List[Layer] = []

    while height_left > 0:
        states = []
        for index, item in enumerate(items):
            stack_left = None
            if item.max_stack_layers is not None:
                stack_left = item.max_stack_layers - stack_used[index]
            states.append(
                EntryState(
                    index=index,
                    item=item,
                    remaining=remaining[index],
                    orientations=orientations[index],
                    stack_left=stack_left,
                )
            )
        design = build_layer_design(
            states,
            Dims(space.w, space.d, height_left),
            gap_xy=clearance.gap_xy,
            gap_z=clearance.gap_z,
            priority=priority,
            slack=slack,
        )
        if design is None:
            break
        new_layers, remaining = design.expand(remaining, item_ids)
        if not new_layers:
            break
        for layer in new_layers:
            for index in {column.entry_index for column in layer.columns}:
                stack_used[index] += 1
        layers.extend(new_layers)
        height_left -= len(new_layers) * (design.height + design.gap_z)
    return tuple(layers), remaining


def pack_box(
    entries: Sequence[OrderLineEntry],
    box: Box,
    constants: PackingConstants = PackingConstants(),
    priority: PriorityPolicy = input_order,
) -> BoxPacking:
    """Simulate packing every entry into ``box``.

    Layers are designed bottom up. The same design is repeated inside every
    reduced space of the box and the plan placing the most units is kept, so
    a larger box never leaves more units behind than a smaller one.
    """
    items = [entry.item for entry in entries]
    clearance = Clearance.for_items(items, box_padding=constants.box_padding)
    space = clearance.usable(box.inner)
    orientations = [resolve_orientations(item, box, clearance) for item in items]

    requested = sum(entry.quantity for entry in entries)
    needed = sum(entry.quantity for entry, found in zip(entries, orientations) if found)
    layers: Tuple[Layer, ...] = ()
    remaining: Dict[int, int] = {index: entry.quantity for index, entry in enumerate(entries)}
    tried = 0
    if needed > 0:
        sizes = [size for item in items for size in item.dims]
        lengths = (
            axis_lengths(sizes, space.w, clearance.gap_xy),
            axis_lengths(sizes, space.d, clearance.gap_xy, combine=False),
            axis_lengths(sizes, space.h, clearance.gap_z),
        )

        def fill(reduced: Dims, slack: Slack):
            found = [
                tuple(orientation for orientation in options if fits(orientation, reduced))
                for options in orientations
            ]
            plan, left = _fill_space(entries, reduced, found, clearance, priority, slack)
            return requested - sum(left.values()), (plan, left)

        _, best, tried = search_spaces(
            lengths, _unit_bound(entries, orientations, clearance), fill, needed
        )
        if best is not None:
            layers, remaining = best

    packed = tuple(entry.quantity - remaining[index] for index, entry in enumerate(entries))
    leftover = tuple(remaining[index] for index in range(len(entries)))
    selection = None
    if sum(packed) > 0:
        weight = compute_weights(
            items, packed, box, constants.packaging_material_weight_multiplier
        )
        selection = build_selection(box, layers, packed, weight)
    fitting = sum(1 for found in orientations if found)
    logger.debug(
        "box %s: packed=%d leftover=%d layers=%d fitting_entries=%d spaces_tried=%d",
        box.id,
        sum(packed),
        sum(leftover),
        len(layers),
        fitting,
        tried,
    )
    return BoxPacking(
        box=box,
        layers=layers,
        packed=packed,
        leftover_by_entry=leftover,
        selection=selection,
        fitting_entries=fitting,
    )


class BoxSelector:
    """Choose a box for an order: smallest adequate box, or a named one."""

    def __init__(
        self,
        boxes: Sequence[Box],
        constants: PackingConstants = PackingConstants(),
        *,
        priority: PriorityPolicy = input_order,
    ) -> None:
        self.boxes = list(boxes)
        self.constants = constants
        self.priority = priority

    def candidates(self) -> List[Box]:
        """Boxes in ascending inner volume; catalog order breaks ties."""
        return sorted(self.boxes, key=lambda box: box.inner_volume)

    def evaluate(self, entries: Sequence[OrderLineEntry], box: Box) -> BoxPacking:
        return pack_box(entries, box, self.constants, self.priority)

    def manual(
        self,
        entries: Sequence[OrderLineEntry],
        box_id: str,
        *,
        provisional: bool = False,
    ) -> PackingSummary:
        box = next((box for box in self.boxes if box.id == box_id), None)
        if box is None:
            raise KeyError(box_id)
        requested = [entry.quantity for entry in entries]
        result = self.evaluate(entries, box)
        reasons: List[FailureReason] = []
        if result.fitting_entries < len(entries):
            reasons.append(FailureReason.NO_FITTING_ORIENTATION)
        if result.selection is None:
            reasons.append(FailureReason.NO_CANDIDATE_BOXES)
        selections = [result.selection] if result.selection is not None else []
        return summarize(
            selections,
            requested,
            primary_box_id=box.id,
            failure_reasons=reasons,
            provisional=provisional,
        )

    def auto(
        self,
        entries: Sequence[OrderLineEntry],
        *,
        provisional: bool = False,
    ) -> PackingSummary:
        requested = [entry.quantity for entry in entries]
        evaluated: List[Tuple[int, BoxPacking]] = []
        any_unfit = False
        for position, box in enumerate(self.candidates()):
            result = self.evaluate(entries, box)
            if result.fitting_entries < len(entries):
                any_unfit = True
            if result.selection is None:
                continue
            if result.adequate:
                logger.debug("AUTO selected box %s", box.id)
                return summarize([result.selection], requested, primary_box_id=box.id)
            evaluated.append((position, result))

        reasons: List[FailureReason] = []
        if any_unfit:
            reasons.append(FailureReason.NO_FITTING_ORIENTATION)
        if not evaluated:
            reasons.append(FailureReason.NO_CANDIDATE_BOXES)
            logger.debug("AUTO found no box able to hold any entry")
            return summarize([], requested, failure_reasons=reasons, provisional=provisional)

        position, best = min(
            evaluated,
            key=lambda pair: (pair[1].leftover, not pair[1].weight_ok, pair[0]),
        )
        logger.debug(
            "AUTO fallback to box %s with leftover %d", best.box.id, best.leftover
        )
        return summarize(
            [best.selection],
            requested,
            primary_box_id=best.box.id,
            failure_reasons=reasons,
            provisional=provisional,
        )
