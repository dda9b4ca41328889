from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple

from .models import Box, Dims, Item, Orientation

# Index permutations of (w, d, h) onto (width, depth, height), in tie-break
# order. The first two keep the item's height vertical.
PERMUTATIONS: Tuple[Tuple[int, int, int], ...] = (
    (0, 1, 2),
    (1, 0, 2),
    (0, 2, 1),
    (2, 0, 1),
    (1, 2, 0),
    (2, 1, 0),
)
UPRIGHT_PERMUTATIONS = PERMUTATIONS[:2]

EPS = 1e-6


@dataclass(frozen=True)
class Clearance:
    """Wall margins and spacing applied inside one box."""

    side_margin: float = 0.0
    front_margin: float = 0.0
    top_margin: float = 0.0
    gap_xy: float = 0.0
    gap_z: float = 0.0
    box_padding: float = 0.0

    @classmethod
    def for_items(cls, items: Iterable[Item], box_padding: float = 0.0) -> "Clearance":
        """Most restrictive margins and gaps over ``items``."""
        items = list(items)
        if not items:
            return cls(box_padding=box_padding)
        return cls(
            side_margin=max(item.side_margin for item in items),
            front_margin=max(item.front_margin for item in items),
            top_margin=max(item.top_margin for item in items),
            gap_xy=max(item.gap_xy for item in items),
            gap_z=max(item.gap_z for item in items),
            box_padding=box_padding,
        )

    def usable(self, inner: Dims) -> Dims:
        """Inner dimensions minus margins; may be zero or negative."""
        pad = self.box_padding
        return Dims(
            inner.w - 2 * (self.side_margin + pad),
            inner.d - 2 * (self.front_margin + pad),
            inner.h - self.top_margin - 2 * pad,
        )


def all_orientations(dims: Tuple[float, float, float], keep_upright: bool = False) -> Tuple[Orientation, ...]:
    """Distinct permutations of ``dims`` in tie-break order."""
    perms = UPRIGHT_PERMUTATIONS if keep_upright else PERMUTATIONS
    seen = set()
    result = []
    for perm in perms:
        orientation = (dims[perm[0]], dims[perm[1]], dims[perm[2]])
        if orientation in seen:
            continue
        seen.add(orientation)
        result.append(orientation)
    return tuple(result)


def orientation_rank(dims: Tuple[float, float, float], orientation: Orientation) -> int:
    for index, perm in enumerate(PERMUTATIONS):
        if (dims[perm[0]], dims[perm[1]], dims[perm[2]]) == tuple(orientation):
            return index
    raise ValueError(f"{orientation!r} is not a permutation of {dims!r}")


def fits(orientation: Orientation, space: Dims) -> bool:
    a, b, c = orientation
    return a <= space.w + EPS and b <= space.d + EPS and c <= space.h + EPS


def resolve_orientations(
    item: Item,
    box: Box,
    clearance: Clearance | None = None,
) -> Tuple[Orientation, ...]:
    """Orientations of ``item`` that fit at least one unit into ``box``.

    An empty tuple means the item cannot be packed in this box.
    """
    if clearance is None:
        clearance = Clearance.for_items([item])
    space = clearance.usable(box.inner)
    if space.w <= 0 or space.d <= 0 or space.h <= 0:
        return ()
    return tuple(
        orientation
        for orientation in all_orientations(item.dims, item.keep_upright)
        if fits(orientation, space)
    )
