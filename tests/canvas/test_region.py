import pytest
from artforge.canvas.region import (
    CORNER_RESIZE_HANDLES,
    MIDDLE_RESIZE_HANDLES,
    RESIZE_HANDLES,
    ElementRegion,
    HandleDirection,
    check_region_hit,
    get_region_rect,
)


def test_handle_direction_edges():
    assert HandleDirection.NE.north and HandleDirection.NE.east
    assert not HandleDirection.NE.south and not HandleDirection.NE.west
    assert HandleDirection.S.south and not HandleDirection.S.east
    assert HandleDirection("sw") is HandleDirection.SW


def test_handle_sets():
    assert len(RESIZE_HANDLES) == 8
    assert CORNER_RESIZE_HANDLES | MIDDLE_RESIZE_HANDLES == RESIZE_HANDLES
    assert ElementRegion.BODY.direction is None
    assert ElementRegion.ROTATE.direction is None
    assert ElementRegion.TOP_LEFT.direction is HandleDirection.NW


def test_get_region_rect():
    assert get_region_rect(ElementRegion.BOTTOM_RIGHT, 100, 50, 8) == (
        96, 46, 8, 8
    )
    assert get_region_rect(ElementRegion.ROTATE, 100, 50, 8) == (
        46, -24, 8, 8
    )
    assert get_region_rect(ElementRegion.BODY, 100, 50, 8) == (0, 0, 100, 50)
    assert get_region_rect(ElementRegion.NONE, 100, 50, 8) == (0, 0, 0, 0)


@pytest.mark.parametrize(
    "x, y, expected",
    [
        (0, 0, ElementRegion.TOP_LEFT),
        (50, 0, ElementRegion.TOP_MIDDLE),
        (100, 0, ElementRegion.TOP_RIGHT),
        (0, 25, ElementRegion.MIDDLE_LEFT),
        (100, 25, ElementRegion.MIDDLE_RIGHT),
        (0, 50, ElementRegion.BOTTOM_LEFT),
        (50, 50, ElementRegion.BOTTOM_MIDDLE),
        (99, 49, ElementRegion.BOTTOM_RIGHT),
        (50, -20, ElementRegion.ROTATE),
        (30, 30, ElementRegion.BODY),
        (150, 30, ElementRegion.NONE),
        (50, -10, ElementRegion.NONE),
    ],
)
def test_check_region_hit(x, y, expected):
    assert check_region_hit(x, y, 100, 50, 8) is expected
