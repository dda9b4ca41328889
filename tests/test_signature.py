from cartonizer_core import Box, Dims, Item, OrderLineEntry, order_signature
from cartonizer_core.signature import item_key


def test_signature_ignores_box_order():
    boxes = [Box("S", Dims(300, 200, 100)), Box("M", Dims(600, 400, 400))]
    entries = [OrderLineEntry(Item("A", 100, 80, 50), 5)]
    assert order_signature(entries, boxes) == order_signature(entries, list(reversed(boxes)))


def test_signature_tracks_quantity_and_profile():
    boxes = [Box("M", Dims(600, 400, 400))]
    base = order_signature([OrderLineEntry(Item("A", 100, 80, 50), 5)], boxes)
    assert base != order_signature([OrderLineEntry(Item("A", 100, 80, 50), 6)], boxes)
    assert base != order_signature(
        [OrderLineEntry(Item("A", 100, 80, 50, keep_upright=True), 5)], boxes
    )
    assert base != order_signature(
        [OrderLineEntry(Item("A", 100, 80, 50), 5)], [Box("M", Dims(600, 400, 401))]
    )


def test_item_key_ignores_float_noise_and_name():
    assert item_key(Item("A", 100, 80, 50, name="one")) == item_key(
        Item("A", 100.0000000001, 80, 50, name="two")
    )
