from cartonizer_core import compute_num_layers, compute_stack_height
from cartonizer_core.stacking import plan_stack


def test_compute_num_layers_exact_fit():
    assert compute_num_layers(400, 50) == 8


def test_compute_num_layers_with_gap():
    # 6 * 50 + 5 * 10 = 350 fits, 7 layers would need 410
    assert compute_num_layers(400, 50, gap_z=10) == 6


def test_compute_num_layers_respects_stack_limit():
    assert compute_num_layers(400, 50, max_stack_layers=3) == 3
    assert compute_num_layers(400, 50, max_stack_layers=0) == 0


def test_compute_num_layers_too_tall():
    assert compute_num_layers(40, 50) == 0
    assert compute_num_layers(0, 50) == 0


def test_compute_stack_height():
    assert compute_stack_height(6, 50, 10) == 350
    assert compute_stack_height(0, 50, 10) == 0


def test_plan_stack_stops_when_needed_units_are_covered():
    assert plan_stack(30, 400, 50) == 8
    assert plan_stack(30, 400, 50, needed=100) == 4
    assert plan_stack(30, 400, 50, needed=1000) == 8
    assert plan_stack(0, 400, 50) == 0
