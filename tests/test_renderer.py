"""Tests for the globe render surface."""

import json

import numpy as np
import pytest

from routeglobe.models import ArcVisual, PointVisual
from routeglobe.renderer import GlobeRenderer, arc_path, latlng_to_xyz


class TestGeometry:
    """Test cases for globe geometry helpers."""

    def test_latlng_to_xyz(self):
        """Test reference points on the unit sphere."""
        np.testing.assert_allclose(latlng_to_xyz(0, 0), [1, 0, 0], atol=1e-12)
        np.testing.assert_allclose(latlng_to_xyz(0, 90), [0, 1, 0], atol=1e-12)
        np.testing.assert_allclose(latlng_to_xyz(90, 0), [0, 0, 1], atol=1e-12)

    def test_latlng_to_xyz_vectorized(self):
        """Test arrays of coordinates convert in one call."""
        xyz = latlng_to_xyz(np.array([0, 0]), np.array([0, 180]), 2.0)
        assert xyz.shape == (2, 3)
        np.testing.assert_allclose(xyz[1], [-2, 0, 0], atol=1e-12)

    def test_arc_endpoints_on_surface(self):
        """Test arcs start and end on the globe surface."""
        path = arc_path(52.52, 13.405, 40.71, -74.0, altitude=0.3, steps=21)

        assert path.shape == (21, 3)
        np.testing.assert_allclose(path[0], latlng_to_xyz(52.52, 13.405))
        np.testing.assert_allclose(path[-1], latlng_to_xyz(40.71, -74.0))

    def test_arc_peaks_at_altitude(self):
        """Test the arc midpoint is lifted by the requested altitude."""
        path = arc_path(0, 0, 0, 90, altitude=0.25, steps=21)
        radii = np.linalg.norm(path, axis=1)

        assert radii.max() == pytest.approx(1.25)
        assert radii.argmax() == 10

    def test_degenerate_arcs(self):
        """Test identical and antipodal endpoints produce finite paths."""
        same = arc_path(10, 10, 10, 10)
        opposite = arc_path(0, 0, 0, 180)

        assert np.isfinite(same).all()
        assert np.isfinite(opposite).all()
        np.testing.assert_allclose(
            opposite[-1], latlng_to_xyz(0, 180), atol=1e-9
        )


class TestGlobeRenderer:
    """Test cases for GlobeRenderer."""

    def test_set_arcs_copies_entries(self):
        """Test later mutation of the source does not leak into the surface."""
        renderer = GlobeRenderer()
        arc = ArcVisual(0, 0, 10, 10, 1)
        renderer.set_arcs([arc])

        arc.visible = False

        assert renderer.state()["arcs"][0]["visible"] is True

    def test_state_after_updates(self):
        """Test arcs, points, camera and width are reflected in state."""
        renderer = GlobeRenderer(width=640)
        renderer.set_points([PointVisual(10, 20, 1)])
        renderer.point_of_view(10, 20, 0.8, 1500)
        renderer.set_width(1024)

        state = renderer.state()
        assert state["points"] == [
            {"lat": 10, "lng": 20, "index": 1, "visible": True}
        ]
        assert state["camera"] == {
            "lat": 10,
            "lng": 20,
            "altitude": 0.8,
            "transition_ms": 1500,
        }
        assert state["width"] == 1024

    def test_empty_figure(self):
        """Test an empty surface draws only the globe."""
        fig = GlobeRenderer().figure()

        assert len(fig.data) == 1
        assert fig.data[0].type == "surface"

    def test_figure_traces(self):
        """Test visible and dimmed arcs get separate traces."""
        renderer = GlobeRenderer(color="#F86A28")
        renderer.set_arcs(
            [
                ArcVisual(0, 0, 10, 10, 1),
                ArcVisual(5, 5, 20, 20, 2, visible=False),
            ]
        )
        renderer.set_points([PointVisual(10, 20, 3, visible=False)])

        fig = renderer.figure()

        names = [trace.name for trace in fig.data[1:]]
        assert names == ["Routes", "Routes (dimmed)", "Route origins"]
        assert fig.data[1].line.color == "#F86A28"
        assert fig.data[2].line.color == "rgba(248,106,40,0.3)"
        assert list(fig.data[3].marker.color) == ["rgba(248,106,40,0.3)"]
        assert fig.data[3].text[0].startswith("Route Origin 3")

    def test_camera_and_width_in_layout(self):
        """Test the camera request and width reach the figure layout."""
        renderer = GlobeRenderer(width=700, height=500)
        renderer.point_of_view(0, 0, 0.8, 1500)

        fig = renderer.figure()

        assert fig.layout.width == 700
        assert fig.layout.height == 500
        assert fig.layout.scene.camera.eye.x == pytest.approx(1.8 * 1.25)
        assert fig.layout.scene.camera.eye.y == pytest.approx(0, abs=1e-9)
        assert fig.layout.transition.duration == 1500

    def test_to_json(self):
        """Test the figure serializes to plotly JSON."""
        renderer = GlobeRenderer()
        renderer.set_arcs([ArcVisual(0, 0, 10, 10, 1)])

        payload = json.loads(renderer.to_json())

        assert "data" in payload
        assert "layout" in payload
        assert len(payload["data"]) == 2
