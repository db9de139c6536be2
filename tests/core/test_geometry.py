import pytest
from artforge.canvas.region import HandleDirection
from artforge.core.geometry import (
    Point,
    Rect,
    bounding_box,
    compute_angle,
    intersecting,
    normalize_angle,
    rect_intersects,
    resize_from_handle,
    snap_angle,
    snap_size,
    snap_to_grid,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (25, 20),
        (35, 40),
        (0, 0),
        (10, 20),  # halves round up
        (30, 40),
        (-10, 0),
        (-11, -20),
        (19.9, 20),
    ],
)
def test_snap_to_grid(value, expected):
    assert snap_to_grid(value) == expected


def test_snap_to_grid_custom_size():
    assert snap_to_grid(14, 10) == 10
    assert snap_to_grid(15, 10) == 20


@pytest.mark.parametrize("value", [-123.4, -5, 0, 7.5, 33, 1001.2])
def test_snap_to_grid_is_idempotent(value):
    once = snap_to_grid(value)
    assert snap_to_grid(once) == once
    assert once % 20 == 0


def test_snap_size_never_collapses():
    assert snap_size((3, 45)) == (20, 40)
    assert snap_size((0, 0)) == (20, 20)


def test_normalize_angle():
    assert normalize_angle(370) == 10
    assert normalize_angle(-90) == 270
    assert normalize_angle(360) == 0
    assert 0 <= normalize_angle(-1e-14) < 360


@pytest.mark.parametrize(
    "angle, expected",
    [(0, 0), (7, 0), (8, 15), (44, 45), (359, 0), (-10, 345), (720, 0)],
)
def test_snap_angle(angle, expected):
    assert snap_angle(angle) == expected


@pytest.mark.parametrize("angle", [-725.3, -1, 0, 3.3, 187.5, 352.6, 1000])
def test_snap_angle_in_range_and_multiple_of_step(angle):
    snapped = snap_angle(angle)
    assert 0 <= snapped < 360
    assert snapped % 15 == 0


def test_compute_angle_zero_points_up():
    center = (50, 50)
    assert compute_angle(center, (50, 0)) == pytest.approx(0)
    assert compute_angle(center, (100, 50)) == pytest.approx(90)
    assert compute_angle(center, (50, 100)) == pytest.approx(180)
    assert compute_angle(center, (0, 50)) == pytest.approx(270)


def test_rect_from_points_any_order():
    assert Rect.from_points((200, 150), (0, 10)) == Rect(0, 10, 200, 140)
    r = Rect(10, 20, 30, 40)
    assert r.right == 40
    assert r.bottom == 60
    assert r.center == Point(25, 40)


class TestResizeFromHandle:
    original = Rect(100, 100, 100, 50)

    def test_east_grows_width_only(self):
        pos, size = resize_from_handle(HandleDirection.E, self.original, (50, 10))
        assert pos == Point(100, 100)
        assert size == (150, 50)

    def test_east_with_aspect_lock(self):
        pos, size = resize_from_handle(
            HandleDirection.E, self.original, (50, 0), aspect_locked=True
        )
        assert pos == Point(100, 100)
        assert size == pytest.approx((150, 75))

    def test_west_keeps_right_edge(self):
        pos, size = resize_from_handle(HandleDirection.W, self.original, (30, 0))
        assert size == (70, 50)
        assert pos.x + size[0] == self.original.right

    def test_north_keeps_bottom_edge(self):
        pos, size = resize_from_handle(HandleDirection.N, self.original, (0, -20))
        assert size == (100, 70)
        assert pos == Point(100, 80)

    def test_south_east_corner(self):
        pos, size = resize_from_handle(
            HandleDirection.SE, self.original, (10, 20)
        )
        assert pos == Point(100, 100)
        assert size == (110, 70)

    def test_north_west_corner(self):
        pos, size = resize_from_handle(
            HandleDirection.NW, self.original, (10, 10)
        )
        assert size == (90, 40)
        assert pos == Point(110, 110)

    def test_min_size_is_enforced(self):
        pos, size = resize_from_handle(
            HandleDirection.SE, self.original, (-500, -500)
        )
        assert size == (20, 20)
        pos, size = resize_from_handle(
            HandleDirection.W, self.original, (500, 0)
        )
        assert size[0] == 20
        assert pos.x == self.original.right - 20

    def test_locked_north_west_keeps_opposite_corner(self):
        pos, size = resize_from_handle(
            HandleDirection.NW, self.original, (0, -50), aspect_locked=True
        )
        assert size == pytest.approx((200, 100))
        assert pos.x + size[0] == pytest.approx(self.original.right)
        assert pos.y + size[1] == pytest.approx(self.original.bottom)


def test_rect_intersects_strict_and_symmetric():
    a = Rect(0, 0, 100, 100)
    b = Rect(50, 50, 100, 100)
    touching = Rect(100, 0, 50, 50)
    far = Rect(300, 300, 10, 10)

    assert rect_intersects(a, b) and rect_intersects(b, a)
    assert not rect_intersects(a, touching)
    assert not rect_intersects(touching, a)
    assert not rect_intersects(a, far)
    assert not rect_intersects(far, a)


def test_bounding_box():
    box = bounding_box([(0, 0, 100, 50), (150, 0, 100, 50), (20, 80, 10, 10)])
    assert box == Rect(0, 0, 250, 90)


def test_bounding_box_empty_raises():
    with pytest.raises(ValueError):
        bounding_box([])


def test_intersecting_matches_rect_intersects():
    marquee = Rect(0, 0, 200, 200)
    rects = [(10, 10, 100, 50), (150, 150, 100, 50), (300, 300, 100, 50)]
    assert intersecting(marquee, rects) == [0, 1]
    assert intersecting(marquee, []) == []
    for i, r in enumerate(rects):
        assert (i in intersecting(marquee, rects)) == rect_intersects(
            marquee, Rect(*r)
        )
