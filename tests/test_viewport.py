"""Tests for screen/world mapping, anchored panning and zooming."""

import pytest

from neurograph import ViewTransform
from neurograph.config import MAX_SCALE, MIN_SCALE
from neurograph.viewport import pan_from_anchor, screen_to_world, visible_center, world_to_screen, zoom_at


class TestMapping:

    def test_world_to_screen(self):
        view = ViewTransform(pan_x=10, pan_y=20, scale=2)
        assert world_to_screen(view, (5, 5)) == (20, 30)

    def test_screen_to_world_inverts(self):
        view = ViewTransform(pan_x=10, pan_y=20, scale=2)
        assert screen_to_world(view, (20, 30)) == (5, 5)

    def test_visible_center(self):
        assert visible_center(ViewTransform(), 800, 600) == (400, 300)
        assert visible_center(ViewTransform(pan_x=-100, pan_y=0), 800, 600) == (500, 300)


class TestPan:

    def test_pan_follows_pointer_from_anchor(self):
        view = pan_from_anchor(ViewTransform(), (10, 10), (100, 100), (130, 90))
        assert (view.pan_x, view.pan_y) == (40, 0)

    def test_repeated_moves_do_not_drift(self):
        view = ViewTransform()
        for _ in range(5):
            view = pan_from_anchor(view, (0, 0), (100, 100), (150, 120))
        assert (view.pan_x, view.pan_y) == (50, 20)

    def test_pan_keeps_scale(self):
        view = pan_from_anchor(ViewTransform(scale=3), (0, 0), (0, 0), (5, 5))
        assert view.scale == 3


class TestZoom:

    def test_point_under_cursor_stays_put(self):
        view = zoom_at(ViewTransform(pan_x=30, pan_y=-10), 2, (100, 100))
        assert view.scale == 2
        world = screen_to_world(ViewTransform(pan_x=30, pan_y=-10), (100, 100))
        assert world_to_screen(view, world) == pytest.approx((100, 100))

    @pytest.mark.parametrize("factor,expected", [(100, MAX_SCALE), (0.0001, MIN_SCALE)])
    def test_scale_is_clamped(self, factor, expected):
        assert zoom_at(ViewTransform(), factor, (0, 0)).scale == expected

    def test_non_positive_factor_is_ignored(self):
        view = ViewTransform(pan_x=5, scale=2)
        assert zoom_at(view, 0, (10, 10)) is view
        assert zoom_at(view, -1, (10, 10)) is view
