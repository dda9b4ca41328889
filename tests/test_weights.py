import pytest

from cartonizer_core import Box, Dims, Item
from cartonizer_core.weights import compute_weights, packaging_weight, validate_weight


def _box(**kwargs):
    return Box("B", Dims(600, 400, 400), **kwargs)


def test_packaging_weight_scales_with_volume():
    assert packaging_weight(_box(), 10) == pytest.approx(0.96)
    assert packaging_weight(_box(), 0) == 0


def test_compute_weights_breakdown():
    items = [Item("A", 100, 80, 50, unit_weight_kg=2.5), Item("B", 50, 50, 50, unit_weight_kg=1)]
    breakdown = compute_weights(items, [4, 3], _box(box_weight_kg=1.2, max_weight_kg=20), 10)

    assert breakdown.product_weight_kg == pytest.approx(13)
    assert breakdown.box_weight_kg == pytest.approx(1.2)
    assert breakdown.packaging_weight_kg == pytest.approx(0.96)
    assert breakdown.total_weight_kg == pytest.approx(15.16)
    assert not breakdown.exceeded
    assert validate_weight(breakdown)


def test_weight_limit_exceeded():
    items = [Item("A", 100, 80, 50, unit_weight_kg=5)]
    breakdown = compute_weights(items, [30], _box(box_weight_kg=1, max_weight_kg=100), 0.01)
    assert breakdown.total_weight_kg > 100
    assert breakdown.exceeded
    assert not validate_weight(breakdown)


def test_box_without_limit_never_exceeds():
    items = [Item("A", 100, 80, 50, unit_weight_kg=500)]
    breakdown = compute_weights(items, [30], _box(), 0.01)
    assert breakdown.max_weight_kg is None
    assert validate_weight(breakdown)
