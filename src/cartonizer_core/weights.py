from __future__ import annotations

from typing import Sequence

from .models import Box, Item, WeightBreakdown
from .units import mm3_to_m3


def packaging_weight(box: Box, multiplier: float) -> float:
    """Estimated dunnage mass: inner volume in m³ times ``multiplier`` (kg/m³)."""
    return mm3_to_m3(box.inner_volume) * multiplier


def compute_weights(
    items: Sequence[Item],
    packed: Sequence[int],
    box: Box,
    packaging_material_weight_multiplier: float,
) -> WeightBreakdown:
    product = sum(item.unit_weight_kg * qty for item, qty in zip(items, packed))
    box_weight = box.box_weight_kg or 0.0
    packaging = packaging_weight(box, packaging_material_weight_multiplier)
    return WeightBreakdown(
        product_weight_kg=product,
        box_weight_kg=box_weight,
        packaging_weight_kg=packaging,
        total_weight_kg=product + box_weight + packaging,
        max_weight_kg=box.max_weight_kg,
    )


def validate_weight(breakdown: WeightBreakdown) -> bool:
    """``True`` when the box has no ceiling or the total stays within it."""
    return not breakdown.exceeded
