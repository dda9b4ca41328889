"""Reduced spaces inside a box in which a packing plan can be rebuilt.

A plan that fits a smaller space also fits every larger one, so keeping the
best plan over all reduced spaces of a box never loses units as the box
grows. Only lengths at which a run of units ends are tried: sums of unit
pitches along the width and the height, and multiples of a single pitch
along the depth, which every block spans in full.
"""

from __future__ import annotations

import heapq
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Sequence, Tuple

from .models import Dims

# Lengths are keyed in micrometers so that equal sums reached through
# different pitches collapse into one.
SCALE = 1000
EPS = 1e-6

AXES = ("w", "d", "h")


def _key(value: float) -> int:
    return int(round(value * SCALE))


def axis_lengths(
    sizes: Iterable[float], limit: float, gap: float = 0.0, combine: bool = True
) -> List[float]:
    """Lengths up to ``limit`` at which a run of units ends, longest first.

    ``k`` units of size ``s`` with ``gap`` between them take
    ``k * (s + gap) - gap``. With ``combine`` runs of different sizes are
    chained one after another.
    """
    top = limit + gap + EPS
    steps: Dict[int, float] = {}
    for size in sizes:
        if size > 0:
            steps.setdefault(_key(size + gap), size + gap)

    reach: Dict[int, float] = {0: 0.0}
    for step_key, step in sorted(steps.items()):
        if not combine:
            pos_key, pos = step_key, step
            while pos <= top:
                reach.setdefault(pos_key, pos)
                pos_key += step_key
                pos += step
            continue
        for base_key, base in sorted(reach.items()):
            pos_key, pos = base_key + step_key, base + step
            # a chain that meets a known length continues from there
            while pos <= top and pos_key not in reach:
                reach[pos_key] = pos
                pos_key += step_key
                pos += step
    del reach[0]
    return sorted((pos - gap for pos in reach.values()), reverse=True)


class Slack:
    """How far each length of a space may shrink before a layout changes.

    Layout code reports every run of units it fits into a length; the
    smallest room left over any run along an axis is that axis' slack.
    """

    def __init__(self) -> None:
        self.room = {axis: math.inf for axis in AXES}

    def runs(self, axis: str, length: float, size: float, gap: float, count: int) -> None:
        """Note that ``count`` units of ``size`` were fitted into ``length``."""
        if count <= 0:
            return
        room = max(length - (count * (size + gap) - gap), 0.0)
        if room < self.room[axis]:
            self.room[axis] = room

    def low(self, space: Dims) -> Tuple[float, float, float]:
        return tuple(getattr(space, axis) - self.room[axis] for axis in AXES)


@dataclass(frozen=True)
class _Region:
    """Spaces between ``low`` and ``high`` that share one plan."""

    low: Tuple[float, float, float]
    high: Tuple[float, float, float]

    def covers(self, point: Tuple[float, float, float]) -> bool:
        return all(
            low - EPS <= value <= high + EPS
            for low, value, high in zip(self.low, point, self.high)
        )


def search_spaces(
    lengths: Sequence[List[float]],
    bound: Callable[[Dims], int],
    fill: Callable[[Dims, Slack], Tuple[int, Any]],
    needed: int,
) -> Tuple[int, Any, int]:
    """Best ``fill`` result over every combination of width, depth and height.

    ``lengths`` holds the candidate widths, depths and heights, each longest
    first. ``fill(space, slack)`` returns ``(units, plan)`` and must build the
    same plan for every smaller space within the slack it records, so those
    spaces are not filled again. ``bound`` caps the units of a space and may
    not grow when a length shrinks; spaces that cannot beat the best plan are
    skipped together with everything inside them.

    Returns ``(units, plan, spaces_filled)``.
    """
    best_units, best_plan, filled = 0, None, 0
    if needed <= 0 or not all(lengths):
        return best_units, best_plan, filled

    heap: List[tuple] = []
    seen = set()
    regions: List[_Region] = []

    def push(index: Tuple[int, int, int]) -> None:
        if index in seen:
            return
        seen.add(index)
        space = Dims(*(values[i] for values, i in zip(lengths, index)))
        heapq.heappush(heap, (-bound(space), -space.volume, index, space))

    push((0, 0, 0))
    while heap:
        negative_bound, _, index, space = heapq.heappop(heap)
        if -negative_bound <= best_units:
            break
        point = space.as_tuple()
        region = next((region for region in regions if region.covers(point)), None)
        if region is None:
            slack = Slack()
            units, plan = fill(space, slack)
            filled += 1
            region = _Region(slack.low(space), point)
            regions.append(region)
            if units > best_units:
                best_units, best_plan = units, plan
                if best_units >= needed:
                    break
        for axis, values in enumerate(lengths):
            below = index[axis] + 1
            while below < len(values) and values[below] >= region.low[axis] - EPS:
                below += 1
            if below < len(values):
                push(index[:axis] + (below,) + index[axis + 1:])
    return best_units, best_plan, filled
