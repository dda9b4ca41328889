from __future__ import annotations

from typing import Iterable, List, Optional, Sequence, Tuple

from .errors import InvalidDimensionError, InvalidInputError
from .models import Box, Dims, OrderLineEntry
from .units import is_finite_number

ERROR_DIMENSION = "{owner}: dimension '{name}' must be a positive finite number (got {value!r})"
ERROR_NON_NEGATIVE = "{owner}: '{name}' must be a non-negative finite number (got {value!r})"
ERROR_QUANTITY = "{owner}: quantity must be a positive integer (got {value!r})"
ERROR_EMPTY_ID = "{owner}: id must be a non-empty string"

ItemErrors = Tuple[List[str], List[str]]


def _check_positive(owner: str, name: str, value, errors: List[str]) -> None:
    if not is_finite_number(value) or value <= 0:
        errors.append(ERROR_DIMENSION.format(owner=owner, name=name, value=value))


def _check_non_negative(owner: str, name: str, value, errors: List[str]) -> None:
    if value is None:
        return
    if not is_finite_number(value) or value < 0:
        errors.append(ERROR_NON_NEGATIVE.format(owner=owner, name=name, value=value))


def _check_dims(owner: str, prefix: str, dims: Optional[Dims], errors: List[str]) -> None:
    if dims is None:
        errors.append(f"{owner}: missing {prefix} dimensions")
        return
    for axis in ("w", "d", "h"):
        _check_positive(owner, f"{prefix}.{axis}", getattr(dims, axis), errors)


def _entry_errors(entries: Sequence[OrderLineEntry]) -> ItemErrors:
    geometry: List[str] = []
    other: List[str] = []
    for index, entry in enumerate(entries):
        item = entry.item
        owner = f"entry[{index}]"
        if not isinstance(item.id, str) or not item.id.strip():
            other.append(ERROR_EMPTY_ID.format(owner=owner))
        else:
            owner = f"entry[{index}] ({item.id})"
        for axis in ("w", "d", "h"):
            _check_positive(owner, axis, getattr(item, axis), geometry)
        for name in ("side_margin", "front_margin", "top_margin", "gap_xy", "gap_z"):
            _check_non_negative(owner, name, getattr(item, name), geometry)
        _check_non_negative(owner, "unit_weight_kg", item.unit_weight_kg, other)
        stack = item.max_stack_layers
        if stack is not None and (
            isinstance(stack, bool) or not isinstance(stack, int) or stack < 0
        ):
            other.append(
                f"{owner}: max_stack_layers must be a non-negative integer (got {stack!r})"
            )
        quantity = entry.quantity
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
            other.append(ERROR_QUANTITY.format(owner=owner, value=quantity))
    return geometry, other


def _box_errors(boxes: Iterable[Box]) -> ItemErrors:
    geometry: List[str] = []
    other: List[str] = []
    seen = set()
    for index, box in enumerate(boxes):
        owner = f"box[{index}]"
        if not isinstance(box.id, str) or not box.id.strip():
            other.append(ERROR_EMPTY_ID.format(owner=owner))
        else:
            owner = f"box[{index}] ({box.id})"
            if box.id in seen:
                other.append(f"{owner}: duplicate box id")
            seen.add(box.id)
        _check_dims(owner, "inner", box.inner, geometry)
        if box.outer is not None:
            _check_dims(owner, "outer", box.outer, geometry)
        _check_non_negative(owner, "max_weight_kg", box.max_weight_kg, other)
        _check_non_negative(owner, "box_weight_kg", box.box_weight_kg, other)
    return geometry, other


def validate_entries(entries: Sequence[OrderLineEntry]) -> List[str]:
    geometry, other = _entry_errors(entries)
    return geometry + other


def validate_boxes(boxes: Iterable[Box]) -> List[str]:
    geometry, other = _box_errors(boxes)
    return geometry + other


def ensure_valid(
    entries: Sequence[OrderLineEntry],
    boxes: Sequence[Box],
    manual_box_id: Optional[str] = None,
) -> None:
    """Raise on malformed input before any packing attempt."""
    entry_geometry, entry_other = _entry_errors(entries)
    box_geometry, box_other = _box_errors(boxes)
    geometry = entry_geometry + box_geometry
    other = entry_other + box_other
    if manual_box_id is not None:
        if not isinstance(manual_box_id, str) or not manual_box_id.strip():
            other.append("manual box id must be a non-empty string")
        elif manual_box_id not in {box.id for box in boxes}:
            other.append(f"manual box id {manual_box_id!r} is not in the candidate boxes")
    if geometry:
        raise InvalidDimensionError("; ".join(geometry + other))
    if other:
        raise InvalidInputError("; ".join(other))
