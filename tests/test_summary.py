import pytest

from cartonizer_core import (
    Box,
    Dims,
    FailureReason,
    Item,
    OrderLineEntry,
    PackingStatus,
    WeightBreakdown,
    pack_box,
)
from cartonizer_core.summary import (
    combine,
    compute_void_ratio,
    describe_summary,
    group_selections,
    overall_void_ratio,
    summarize,
)

BOX = Box("M", Dims(600, 400, 400))
OTHER = Box("S", Dims(300, 200, 100))


def _selection(qty, box=BOX):
    item = Item("A", 100, 80, 50)
    return pack_box([OrderLineEntry(item, qty)], box).selection


def test_void_ratio_of_full_and_empty_box():
    assert compute_void_ratio(BOX, _selection(240).layers) == pytest.approx(0.0)
    assert compute_void_ratio(BOX, ()) == 1.0
    assert _selection(120).void_ratio == pytest.approx(0.5)
    assert _selection(120).void_ratio_display == "50.0%"


def test_summarize_success():
    summary = summarize([_selection(30)], [30])
    assert summary.status == PackingStatus.SUCCESS
    assert summary.leftover == 0
    assert summary.primary_box_id == "M"
    assert summary.failure_reasons == ()


def test_summarize_partial_packing_fails():
    summary = summarize([_selection(240)], [300])
    assert summary.status == PackingStatus.FAILED
    assert summary.leftover_by_entry == (60,)
    assert summary.failure_reasons == (FailureReason.INSUFFICIENT_CAPACITY,)


def test_summarize_provisional_is_pending():
    summary = summarize([_selection(240)], [300], provisional=True)
    assert summary.status == PackingStatus.PENDING


def test_summarize_nothing_requested_is_pending():
    summary = summarize([], [])
    assert summary.status == PackingStatus.PENDING
    assert summary.leftover == 0


def test_summarize_drops_empty_selections_and_flags_weight():
    heavy = _selection(30)
    heavy = type(heavy)(
        box_id=heavy.box_id,
        layers=heavy.layers,
        void_ratio=heavy.void_ratio,
        weight=WeightBreakdown(150, 1, 0, 151, max_weight_kg=100),
        packed=heavy.packed,
    )
    empty = type(heavy)(box_id="X", layers=(), void_ratio=1.0, weight=heavy.weight, packed=(0,))
    summary = summarize([heavy, empty], [30])
    assert summary.selections == (heavy,)
    assert summary.status == PackingStatus.FAILED
    assert summary.failure_reasons == (FailureReason.WEIGHT_EXCEEDED,)


def test_combine_rounds():
    first = summarize([_selection(240)], [300])
    second = summarize([_selection(60)], [60])
    combined = combine([first, second])
    assert combined.status == PackingStatus.SUCCESS
    assert combined.requested == (300,)
    assert combined.packed_total == 300
    assert len(combined.selections) == 2

    with pytest.raises(ValueError):
        combine([])


def test_overall_void_ratio_weighted_by_volume():
    selections = [_selection(240), _selection(120)]
    assert overall_void_ratio(selections, [BOX]) == pytest.approx(0.25)
    assert overall_void_ratio([], [BOX]) == 0.0


def test_group_consecutive_boxes():
    full = _selection(240)
    small = _selection(6, OTHER)
    groups = group_selections([full, full, small, full])
    assert [(g.box_id, g.start_index, g.end_index, g.box_count) for g in groups] == [
        ("M", 0, 1, 2),
        ("S", 2, 2, 1),
        ("M", 3, 3, 1),
    ]
    assert groups[0].packed_total == 480


def test_describe_summary_lines():
    lines = describe_summary(summarize([_selection(30)], [30]))
    assert lines[0] == "status: success"
    assert lines[1] == "primary box: M"
    assert any("A 100x80x50: 6x5 (30)" in line for line in lines)
