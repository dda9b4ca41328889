from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Optional, Sequence

from .layers import PriorityPolicy, input_order
from .models import Box, OrderLineEntry, PackingSummary
from .selector import BoxSelector, PackingConstants
from .summary import combine
from .validation import ensure_valid

logger = logging.getLogger(__name__)

DEFAULT_MAX_BOXES = 50


def pack_order(
    entries: Sequence[OrderLineEntry],
    candidate_boxes: Sequence[Box],
    manual_box_id: Optional[str] = None,
    constants: PackingConstants = PackingConstants(),
    *,
    provisional: bool = False,
    priority: PriorityPolicy = input_order,
) -> PackingSummary:
    """Pack one order into a single box.

    With ``manual_box_id`` the named box is evaluated; otherwise the smallest
    box holding every unit within its weight limit is chosen. Infeasibility
    is reported through the summary; malformed input raises
    :class:`~cartonizer_core.errors.InvalidInputError`.
    """
    ensure_valid(entries, candidate_boxes, manual_box_id)
    selector = BoxSelector(candidate_boxes, constants, priority=priority)
    if manual_box_id is not None:
        summary = selector.manual(entries, manual_box_id, provisional=provisional)
    else:
        summary = selector.auto(entries, provisional=provisional)
    logger.debug(
        "pack_order: status=%s box=%s leftover=%d",
        summary.status.value,
        summary.primary_box_id,
        summary.leftover,
    )
    return summary


def remaining_entries(
    entries: Sequence[OrderLineEntry], summary: PackingSummary
) -> List[OrderLineEntry]:
    """Line entries holding only the units ``summary`` left unplaced."""
    if len(summary.leftover_by_entry) != len(entries):
        raise ValueError("summary does not belong to these entries")
    return [
        replace(entry, quantity=leftover)
        for entry, leftover in zip(entries, summary.leftover_by_entry)
        if leftover > 0
    ]


def _expand_round(
    round_summary: PackingSummary, source: Sequence[int], size: int
) -> PackingSummary:
    """Re-index a round packed on a subset of entries to the full order."""
    selections = []
    for selection in round_summary.selections:
        packed = [0] * size
        for position, qty in zip(source, selection.packed):
            packed[position] = qty
        layers = tuple(
            replace(
                layer,
                columns=tuple(
                    replace(column, entry_index=source[column.entry_index])
                    for column in layer.columns
                ),
            )
            for layer in selection.layers
        )
        selections.append(replace(selection, packed=tuple(packed), layers=layers))
    return replace(round_summary, selections=tuple(selections))


def split_order(
    entries: Sequence[OrderLineEntry],
    candidate_boxes: Sequence[Box],
    constants: PackingConstants = PackingConstants(),
    *,
    max_boxes: int = DEFAULT_MAX_BOXES,
    provisional: bool = False,
    priority: PriorityPolicy = input_order,
) -> PackingSummary:
    """Pack an order into as many boxes as needed.

    Each round runs AUTO selection on the units the previous rounds left
    over. Stops when everything is placed, when a round places nothing or
    after ``max_boxes`` rounds.
    """
    ensure_valid(entries, candidate_boxes)
    if max_boxes <= 0:
        raise ValueError("max_boxes must be positive")
    requested = [entry.quantity for entry in entries]
    first = pack_order(
        entries, candidate_boxes, constants=constants, provisional=provisional, priority=priority
    )
    rounds = [first]
    leftover = list(first.leftover_by_entry)
    while sum(leftover) > 0 and len(rounds) < max_boxes:
        source = [index for index, qty in enumerate(leftover) if qty > 0]
        subset = [replace(entries[index], quantity=leftover[index]) for index in source]
        current = pack_order(
            subset, candidate_boxes, constants=constants, provisional=provisional, priority=priority
        )
        if not current.selections:
            rounds.append(_expand_round(current, source, len(entries)))
            break
        expanded = _expand_round(current, source, len(entries))
        rounds.append(expanded)
        for selection in expanded.selections:
            for index, qty in enumerate(selection.packed):
                leftover[index] -= qty
        logger.debug("split_order: round %d leftover=%d", len(rounds), sum(leftover))
    rounds[0] = replace(rounds[0], requested=tuple(requested))
    return combine(rounds, provisional=provisional)
