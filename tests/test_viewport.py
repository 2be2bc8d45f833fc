import pytest

from dioscuri.viewport import ViewportScroller, wrap_lines


@pytest.mark.parametrize("line_count, height, max_offset", [
    (0, 10, 0),
    (5, 10, 0),
    (10, 10, 0),
    (15, 10, 5),
    (20, 10, 10),
    (25, 10, 15),
    (1, 1, 0),
    (3, 1, 2),
])
def test_recompute_bounds(line_count, height, max_offset):
    scroller = ViewportScroller()
    scroller.recompute_bounds(line_count, height)
    assert scroller.max_offset == max_offset


def test_recompute_bounds_rejects_empty_viewport():
    with pytest.raises(ValueError):
        ViewportScroller().recompute_bounds(10, 0)


@pytest.mark.parametrize("line_count", [0, 1, 9, 10, 11, 37, 100])
@pytest.mark.parametrize("height", [1, 3, 10, 24])
def test_scrolling_converges_to_bounds(line_count, height):
    scroller = ViewportScroller()
    scroller.recompute_bounds(line_count, height)
    assert scroller.max_offset >= 0

    for _ in range(line_count + 5):
        scroller.scroll_down()
        assert scroller.offset <= scroller.max_offset
    assert scroller.offset == scroller.max_offset

    for _ in range(line_count + 5):
        scroller.scroll_up()
        assert scroller.offset >= 0
    assert scroller.offset == 0


def test_shrinking_content_clamps_offset():
    scroller = ViewportScroller()
    scroller.recompute_bounds(50, 10)
    for _ in range(40):
        scroller.scroll_down()
    assert scroller.offset == 40

    scroller.recompute_bounds(15, 10)

    assert scroller.offset == 5


def test_reset():
    scroller = ViewportScroller()
    scroller.recompute_bounds(50, 10)
    scroller.scroll_down()

    scroller.reset()

    assert scroller.offset == 0


def test_wrap_lines_wraps_long_lines():
    assert wrap_lines("the quick brown fox", 10) == ["the quick ", "brown fox"]


def test_wrap_lines_keeps_blank_lines():
    assert wrap_lines("# Title\n\nText\n", 20) == ["# Title", "", "Text"]


def test_wrap_lines_turns_tabs_into_single_spaces():
    assert wrap_lines("a\tb", 20) == ["a b"]


def test_wrap_lines_of_empty_body():
    assert wrap_lines("", 20) == []


def test_wrap_lines_never_exceed_width():
    text = "supercalifragilisticexpialidocious " * 5
    assert all(len(line) <= 8 for line in wrap_lines(text, 8))
