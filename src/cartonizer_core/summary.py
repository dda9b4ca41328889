from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, List, Sequence, Tuple

from .models import (
    Box,
    FailureReason,
    Layer,
    PackingSelection,
    PackingStatus,
    PackingSummary,
    WeightBreakdown,
)
from .units import format_float, format_ratio


def occupied_volume(layers: Iterable[Layer]) -> float:
    """Useful volume of the placed units; margins and gaps are not counted."""
    total = 0.0
    for layer in layers:
        for column in layer.columns:
            a, b, c = column.orientation
            total += column.placed * a * b * c
    return total


def compute_void_ratio(box: Box, layers: Iterable[Layer]) -> float:
    volume = box.inner_volume
    if volume <= 0:
        return 0.0
    ratio = 1.0 - occupied_volume(layers) / volume
    return min(max(ratio, 0.0), 1.0)


def build_selection(
    box: Box,
    layers: Sequence[Layer],
    packed: Sequence[int],
    weight: WeightBreakdown,
) -> PackingSelection:
    return PackingSelection(
        box_id=box.id,
        layers=tuple(layers),
        void_ratio=compute_void_ratio(box, layers),
        weight=weight,
        packed=tuple(packed),
    )


def _dedupe(reasons: Iterable[FailureReason]) -> Tuple[FailureReason, ...]:
    seen: List[FailureReason] = []
    for reason in reasons:
        if reason not in seen:
            seen.append(reason)
    return tuple(seen)


def summarize(
    selections: Sequence[PackingSelection],
    requested: Sequence[int],
    *,
    primary_box_id: str | None = None,
    failure_reasons: Iterable[FailureReason] = (),
    provisional: bool = False,
) -> PackingSummary:
    """Fold per-box selections into the order-level summary."""
    selections = tuple(selection for selection in selections if selection.packed_total > 0)
    packed = [0] * len(requested)
    for selection in selections:
        for index, qty in enumerate(selection.packed):
            packed[index] += qty
    leftover_by_entry = tuple(req - qty for req, qty in zip(requested, packed))
    leftover = sum(leftover_by_entry)

    reasons = list(failure_reasons)
    overweight = any(selection.weight.exceeded for selection in selections)
    if overweight:
        reasons.append(FailureReason.WEIGHT_EXCEEDED)
    if leftover > 0 and selections:
        reasons.append(FailureReason.INSUFFICIENT_CAPACITY)

    if sum(requested) == 0:
        status = PackingStatus.PENDING
    elif leftover == 0 and selections and not overweight:
        status = PackingStatus.SUCCESS
    else:
        status = PackingStatus.PENDING if provisional else PackingStatus.FAILED

    if primary_box_id is None and selections:
        primary_box_id = selections[0].box_id

    return PackingSummary(
        selections=selections,
        leftover=leftover,
        status=status,
        primary_box_id=primary_box_id,
        leftover_by_entry=leftover_by_entry,
        requested=tuple(requested),
        failure_reasons=_dedupe(reasons) if status != PackingStatus.SUCCESS else (),
    )


def combine(summaries: Sequence[PackingSummary], *, provisional: bool = False) -> PackingSummary:
    """Merge summaries of consecutive packing rounds of one order.

    The first summary carries the requested quantities; later rounds are
    expected to pack the remainder of the earlier ones.
    """
    if not summaries:
        raise ValueError("no summaries to combine")
    selections: List[PackingSelection] = []
    reasons: List[FailureReason] = []
    for summary in summaries:
        selections.extend(summary.selections)
    last = summaries[-1]
    if last.leftover > 0:
        reasons.extend(
            reason
            for reason in last.failure_reasons
            if reason != FailureReason.INSUFFICIENT_CAPACITY
        )
    return summarize(
        selections,
        summaries[0].requested,
        primary_box_id=summaries[0].primary_box_id,
        failure_reasons=reasons,
        provisional=provisional,
    )


def overall_void_ratio(selections: Sequence[PackingSelection], boxes: Sequence[Box]) -> float:
    """Void ratio over all selected boxes, weighted by box volume."""
    volumes = {box.id: box.inner_volume for box in boxes}
    total = 0.0
    empty = 0.0
    for selection in selections:
        volume = volumes.get(selection.box_id, 0.0)
        total += volume
        empty += selection.void_ratio * volume
    if total <= 0:
        return 0.0
    return empty / total


@dataclass
class SelectionGroup:
    box_id: str
    start_index: int
    end_index: int
    selections: List[PackingSelection] = field(default_factory=list)

    @property
    def box_count(self) -> int:
        return len(self.selections)

    @property
    def packed_total(self) -> int:
        return sum(selection.packed_total for selection in self.selections)


def group_selections(selections: Sequence[PackingSelection]) -> List[SelectionGroup]:
    """Collapse consecutive selections of the same box into one group."""
    groups: List[SelectionGroup] = []
    for index, selection in enumerate(selections):
        if groups and groups[-1].box_id == selection.box_id:
            groups[-1].end_index = index
            groups[-1].selections.append(selection)
        else:
            groups.append(SelectionGroup(selection.box_id, index, index, [selection]))
    return groups


def describe_layer(layer: Layer) -> str:
    parts = []
    for column in layer.columns:
        a, b, c = column.orientation
        parts.append(
            f"{column.item_id} {a:g}x{b:g}x{c:g}: {column.count}x{column.rows} ({column.placed})"
        )
    return f"{layer.type.value} | " + ", ".join(parts)


def describe_summary(summary: PackingSummary) -> List[str]:
    lines = [
        f"status: {summary.status.value}",
        f"primary box: {summary.primary_box_id or '-'}",
        f"leftover: {summary.leftover}",
    ]
    for number, selection in enumerate(summary.selections, start=1):
        lines.append(
            f"box {number}: {selection.box_id} packed={selection.packed_total} "
            f"void={format_ratio(selection.void_ratio)} "
            f"weight={format_float(selection.weight.total_weight_kg, 3)} kg"
        )
        for layer_number, layer in enumerate(selection.layers, start=1):
            lines.append(f"  layer {layer_number}: {describe_layer(layer)}")
    if len(summary.selections) > 1:
        groups = group_selections(summary.selections)
        lines.append("boxes: " + ", ".join(f"{group.box_id} x{group.box_count}" for group in groups))
    if summary.failure_reasons:
        lines.append("reasons: " + ", ".join(reason.value for reason in summary.failure_reasons))
    return lines
