import math

from cartonizer_core import Dims
from cartonizer_core.subspace import Slack, axis_lengths, search_spaces


def test_axis_lengths_chain_different_sizes():
    assert axis_lengths([50, 20], 100) == [100, 90, 80, 70, 60, 50, 40, 20]


def test_axis_lengths_without_combining_keep_single_sizes():
    assert axis_lengths([50, 20], 100, combine=False) == [100, 80, 60, 50, 40, 20]


def test_axis_lengths_leave_out_the_last_gap():
    assert axis_lengths([50], 100, gap=10) == [50]
    assert axis_lengths([50], 110, gap=10) == [110, 50]


def test_slack_keeps_smallest_room_per_axis():
    slack = Slack()
    slack.runs("w", 100, 30, 0, 3)
    slack.runs("w", 100, 45, 0, 2)
    slack.runs("d", 50, 20, 5, 2)
    slack.runs("h", 80, 90, 0, 0)
    assert slack.low(Dims(100, 50, 80)) == (90, 45, -math.inf)


def _fill_by_width(size):
    def fill(space, slack):
        count = int(space.w // size)
        slack.runs("w", space.w, size, 0, count)
        return count, space

    return fill


def test_search_skips_spaces_sharing_a_plan():
    lengths = ([100, 95, 90, 50], [50], [50])
    units, plan, filled = search_spaces(lengths, lambda space: 100, _fill_by_width(45), 10)
    assert units == 2
    assert plan == Dims(100, 50, 50)
    # 95 and 90 hold the same two units as 100
    assert filled == 2


def test_search_stops_when_bound_cannot_beat_best():
    lengths = ([100, 50], [100, 50], [100, 50])
    units, _, filled = search_spaces(
        lengths, lambda space: int(space.w // 50), _fill_by_width(50), 10
    )
    assert (units, filled) == (2, 1)


def test_search_stops_once_everything_is_placed():
    lengths = ([100, 95, 50], [50], [50])
    units, _, filled = search_spaces(lengths, lambda space: 100, _fill_by_width(50), 2)
    assert (units, filled) == (2, 1)


def test_search_without_lengths_finds_nothing():
    assert search_spaces(([], [50], [50]), lambda space: 1, _fill_by_width(50), 1) == (0, None, 0)
