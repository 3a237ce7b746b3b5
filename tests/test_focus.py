"""Tests for camera focus computation."""

import pytest

from conftest import make_record
from routeglobe.focus import DEFAULT_FOCUS, ViewFocusController, wrap_longitude
from routeglobe.models import Focus


class TestComputeFocus:
    """Test cases for ViewFocusController.compute_focus."""

    def test_midpoint_for_complete_route(self):
        """Test focus is halfway between origin and destination."""
        controller = ViewFocusController()
        focus = controller.compute_focus(make_record(1, (10, 20), (30, 60)))
        assert focus == Focus(lat=20, lng=40)

    def test_midpoint_with_string_coordinates(self):
        """Test numeric strings are used for the midpoint."""
        controller = ViewFocusController()
        focus = controller.compute_focus(
            make_record(1, ("-10", "100"), ("10", "120"))
        )
        assert focus.lat == pytest.approx(0)
        assert focus.lng == pytest.approx(110)

    def test_midpoint_across_antimeridian(self):
        """Test routes crossing ±180 focus near the date line."""
        controller = ViewFocusController()

        focus = controller.compute_focus(make_record(1, (0, 179), (0, -179)))
        assert focus.lat == pytest.approx(0)
        assert abs(focus.lng) == pytest.approx(180)

        focus = controller.compute_focus(make_record(1, (10, -170), (20, 160)))
        assert focus.lat == pytest.approx(15)
        assert focus.lng == pytest.approx(175)

    def test_wrap_longitude(self):
        """Test longitudes are wrapped into (-180, 180]."""
        assert wrap_longitude(0) == 0
        assert wrap_longitude(190) == pytest.approx(-170)
        assert wrap_longitude(-190) == pytest.approx(170)
        assert wrap_longitude(-180) == 180
        assert wrap_longitude(540) == 180

    def test_origin_when_destination_invalid(self):
        """Test origin-only events focus on the origin."""
        controller = ViewFocusController()
        focus = controller.compute_focus(make_record(1, (10, 20), ("abc", 30)))
        assert focus == Focus(lat=10, lng=20)

    def test_default_when_origin_invalid(self):
        """Test the documented fallback coordinate."""
        controller = ViewFocusController()
        focus = controller.compute_focus(make_record(1, ("NaN", 5), (1, 2)))
        assert focus == Focus(lat=20, lng=100)
        assert focus == DEFAULT_FOCUS

    def test_default_when_no_record(self):
        """Test a missing record also falls back to the default."""
        assert ViewFocusController().compute_focus(None) == DEFAULT_FOCUS

    def test_custom_default(self):
        """Test the fallback coordinate is configurable."""
        controller = ViewFocusController(default_focus=Focus(0, 0))
        focus = controller.compute_focus(make_record(1, (None, None)))
        assert focus == Focus(0, 0)

    def test_default_is_not_shared(self):
        """Test callers cannot mutate the controller default."""
        controller = ViewFocusController()
        focus = controller.compute_focus(None)
        focus.lat = -45
        assert controller.compute_focus(None).lat == 20


class TestFocusRequest:
    """Test cases for ViewFocusController.focus_request."""

    def test_defaults(self):
        """Test altitude and transition defaults."""
        request = ViewFocusController().focus_request(make_record(1, (10, 20)))
        assert (request.lat, request.lng) == (10, 20)
        assert request.altitude == 0.8
        assert request.transition_ms == 1500

    def test_custom_camera(self):
        """Test configured altitude and transition are passed through."""
        controller = ViewFocusController(altitude=2.0, transition_ms=500)
        request = controller.focus_request(make_record(1, (10, 20), (20, 40)))
        assert (request.lat, request.lng) == (15, 30)
        assert request.altitude == 2.0
        assert request.transition_ms == 500
