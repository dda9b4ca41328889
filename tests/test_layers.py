from cartonizer_core import Dims, Item, LayerType, largest_footprint_first
from cartonizer_core.layers import (
    Block,
    EntryState,
    LayerDesign,
    UniformLayer,
    best_uniform_layer,
    build_layer_design,
    uniform_block,
)
from cartonizer_core.orientation import all_orientations

SPACE = Dims(600, 400, 400)


def _state(index, item, remaining, stack_left=None):
    return EntryState(
        index=index,
        item=item,
        remaining=remaining,
        orientations=all_orientations(item.dims, item.keep_upright),
        stack_left=stack_left,
    )


def test_uniform_block_counts():
    assert uniform_block(600, 400, (100, 80, 50)) == (6, 5)


def test_uniform_block_with_gap():
    assert uniform_block(600, 400, (100, 80, 50), gap_xy=10) == (5, 4)
    # three units and two gaps fill 320 exactly
    assert uniform_block(320, 80, (100, 80, 50), gap_xy=10) == (3, 1)


def test_uniform_block_too_large():
    assert uniform_block(90, 400, (100, 80, 50)) == (0, 0)


def test_best_uniform_layer_prefers_capacity_over_the_stack():
    dims = (100, 80, 50)
    orientations = all_orientations(dims)
    # lying flat gives 30 per layer over eight layers; on end 60 over four
    assert best_uniform_layer(Dims(600, 400, 400), orientations, dims) == UniformLayer(
        (100, 80, 50), 6, 5, 8
    )
    assert best_uniform_layer(Dims(600, 400, 150), orientations, dims) == UniformLayer(
        (100, 80, 50), 6, 5, 3
    )
    on_end = best_uniform_layer(Dims(600, 400, 400), orientations, dims, max_stack_layers=1)
    assert on_end == UniformLayer((50, 80, 100), 12, 5, 1)
    assert on_end.capacity == 60


def test_best_uniform_layer_ties_follow_permutation_order():
    dims = (50, 20, 10)
    best = best_uniform_layer(Dims(100, 100, 10), [(20, 50, 10), (50, 20, 10)], dims)
    assert best == UniformLayer((50, 20, 10), 2, 5, 1)


def test_best_uniform_layer_counts_strip_in_unused_footprint():
    dims = (100, 80, 50)
    # both hold 12 in one layer; only the second leaves room for two more
    best = best_uniform_layer(Dims(290, 200, 100), all_orientations(dims), dims)
    assert best == UniformLayer((80, 50, 100), 3, 4, 1)


def test_best_uniform_layer_nothing_fits():
    assert best_uniform_layer(Dims(10, 10, 100), [(50, 20, 10)], (50, 20, 10)) is None
    assert best_uniform_layer(Dims(100, 100, 5), [(50, 20, 10)], (50, 20, 10)) is None


def test_full_box_design_for_single_item():
    item = Item("A", 100, 80, 50)
    design = build_layer_design([_state(0, item, 480)], SPACE)

    assert design.layer_type == LayerType.UNIFORM
    assert design.blocks == (Block(0, (100, 80, 50), 6, 5),)
    assert design.repetitions == 8
    assert design.assigned == {0: 240}
    assert design.stack_height == 400


def test_design_uses_only_needed_layers():
    item = Item("A", 100, 80, 50)
    design = build_layer_design([_state(0, item, 30)], SPACE)
    assert design.blocks == (Block(0, (100, 80, 50), 6, 5),)
    assert design.repetitions == 1


def test_partial_layer_shrinks_to_needed_columns():
    item = Item("A", 100, 80, 50)
    design = build_layer_design([_state(0, item, 12)], SPACE)
    assert design.blocks == (Block(0, (100, 80, 50), 3, 5),)
    assert design.assigned == {0: 12}


def test_few_units_keep_the_highest_capacity_orientation():
    item = Item("A", 100, 80, 50)
    # turned 80x100 the layer holds 28, lying as given it holds 30
    design = build_layer_design([_state(0, item, 10)], SPACE)
    assert design.blocks == (Block(0, (100, 80, 50), 2, 5),)
    assert design.assigned == {0: 10}


def test_mixed_layer_fills_strip_with_next_entry():
    first = Item("A", 100, 80, 50)
    second = Item("B", 60, 60, 40)
    design = build_layer_design([_state(0, first, 12), _state(1, second, 20)], SPACE)

    assert design.layer_type == LayerType.MIXED
    assert design.blocks == (
        Block(0, (100, 80, 50), 3, 5),
        Block(1, (60, 60, 40), 4, 6),
    )
    assert design.height == 50
    assert design.assigned == {0: 12, 1: 20}


def test_strip_skips_orientations_taller_than_layer():
    first = Item("A", 100, 80, 50)
    tall = Item("T", 60, 60, 120, keep_upright=True)
    design = build_layer_design([_state(0, first, 12), _state(1, tall, 5)], SPACE)
    assert [block.entry_index for block in design.blocks] == [0]


def test_priority_policy_selects_primary_entry():
    small = Item("B", 60, 60, 40)
    large = Item("A", 100, 80, 50)
    states = [_state(0, small, 20), _state(1, large, 12)]

    assert build_layer_design(states, SPACE).blocks[0].entry_index == 0
    by_footprint = build_layer_design(states, SPACE, priority=largest_footprint_first)
    assert by_footprint.blocks[0].entry_index == 1


def test_exhausted_stack_limit_makes_entry_inactive():
    item = Item("A", 100, 80, 50, keep_upright=True, max_stack_layers=2)
    assert build_layer_design([_state(0, item, 100, stack_left=0)], SPACE) is None

    design = build_layer_design([_state(0, item, 100, stack_left=2)], SPACE)
    assert design.repetitions == 2
    assert design.assigned == {0: 60}


def test_no_design_without_room():
    item = Item("A", 100, 80, 50)
    assert build_layer_design([_state(0, item, 10)], Dims(600, 400, 40)) is None


def test_expand_fills_layers_in_order():
    design = LayerDesign(
        blocks=(Block(0, (100, 80, 50), 6, 5),),
        height=50,
        repetitions=3,
    )
    layers, remaining = design.expand({0: 70}, {0: "A"})

    assert [layer.placed for layer in layers] == [30, 30, 10]
    assert remaining == {0: 0}
    assert all(layer.type == LayerType.UNIFORM for layer in layers)
    assert layers[0].columns[0].item_id == "A"
