import pytest

from cartonizer_core import Box, Clearance, Dims, Item, resolve_orientations
from cartonizer_core.orientation import all_orientations, fits, orientation_rank


def test_all_orientations_in_tie_break_order():
    assert all_orientations((100, 80, 50)) == (
        (100, 80, 50),
        (80, 100, 50),
        (100, 50, 80),
        (50, 100, 80),
        (80, 50, 100),
        (50, 80, 100),
    )


def test_keep_upright_limits_to_vertical_height():
    assert all_orientations((100, 80, 50), keep_upright=True) == ((100, 80, 50), (80, 100, 50))


def test_duplicate_orientations_are_dropped():
    assert all_orientations((50, 50, 50)) == ((50, 50, 50),)
    assert len(all_orientations((50, 50, 200))) == 3


def test_orientation_rank():
    dims = (100, 80, 50)
    assert orientation_rank(dims, (100, 80, 50)) == 0
    assert orientation_rank(dims, (50, 80, 100)) == 5
    with pytest.raises(ValueError):
        orientation_rank(dims, (100, 100, 50))


def test_fits_is_inclusive():
    assert fits((100, 80, 50), Dims(100, 80, 50))
    assert not fits((100, 80, 50), Dims(99.9, 80, 50))


def test_oversized_item_has_no_orientation():
    box = Box("B", Dims(600, 400, 400))
    item = Item("X", 700, 100, 100)
    assert resolve_orientations(item, box) == ()


def test_keep_upright_item_too_tall():
    box = Box("B", Dims(600, 400, 150))
    upright = Item("T", 50, 50, 200, keep_upright=True)
    assert resolve_orientations(upright, box) == ()

    free = Item("T", 50, 50, 200)
    assert resolve_orientations(free, box) == ((50, 200, 50), (200, 50, 50))


def test_margins_reduce_usable_space():
    box = Box("B", Dims(220, 100, 100))
    item = Item("X", 100, 80, 50, side_margin=10)
    assert len(resolve_orientations(item, box)) == 6

    capped = Item("X", 100, 80, 50, side_margin=10, top_margin=10)
    found = resolve_orientations(capped, box)
    assert len(found) == 4
    assert all(orientation[2] <= 90 for orientation in found)


def test_clearance_usable_space():
    clearance = Clearance(side_margin=10, front_margin=5, top_margin=20, box_padding=5)
    assert clearance.usable(Dims(600, 400, 400)) == Dims(570, 380, 370)


def test_clearance_takes_most_restrictive_values():
    items = [
        Item("A", 10, 10, 10, side_margin=5, gap_xy=2),
        Item("B", 10, 10, 10, front_margin=3, gap_xy=4, gap_z=1),
    ]
    clearance = Clearance.for_items(items, box_padding=1)
    assert clearance == Clearance(
        side_margin=5, front_margin=3, top_margin=0, gap_xy=4, gap_z=1, box_padding=1
    )


def test_box_too_small_for_margins():
    box = Box("B", Dims(20, 100, 100))
    item = Item("X", 5, 5, 5, side_margin=10)
    assert resolve_orientations(item, box) == ()
