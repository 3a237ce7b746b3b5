"""
3D globe render surface.
Holds the arcs, points and camera target pushed by the sync engine and
builds a plotly figure from them.
"""

import dataclasses
import math
import threading
from typing import Any, Dict, List, Optional

import numpy as np
import plotly.graph_objects as go  # type: ignore

from routeglobe.models import ArcVisual, CameraRequest, PointVisual
from routeglobe.utils import log

# Plotly scene units per globe radius at the default camera distance
EYE_SCALE = 1.25


def latlng_to_xyz(lat, lng, radius=1.0) -> np.ndarray:
    """
    Convert latitude/longitude in degrees to Cartesian coordinates.

    Args:
        lat: Latitude(s) in degrees
        lng: Longitude(s) in degrees
        radius: Sphere radius (scalar or array)

    Returns:
        Array with x, y, z along the last axis
    """
    phi = np.radians(lat)
    lam = np.radians(lng)
    return np.stack(
        [
            radius * np.cos(phi) * np.cos(lam),
            radius * np.cos(phi) * np.sin(lam),
            radius * np.sin(phi),
        ],
        axis=-1,
    )


def arc_path(
    start_lat: float,
    start_lng: float,
    end_lat: float,
    end_lng: float,
    altitude: float = 0.2,
    steps: int = 48,
) -> np.ndarray:
    """
    Sample a great-circle arc lifted above the globe surface.

    The arc leaves and lands on the surface and peaks at ``altitude``
    globe radii halfway along.

    Returns:
        Array of shape (steps, 3)
    """
    a = latlng_to_xyz(start_lat, start_lng)
    b = latlng_to_xyz(end_lat, end_lng)
    t = np.linspace(0.0, 1.0, steps)

    omega = math.acos(float(np.clip(np.dot(a, b), -1.0, 1.0)))
    if omega < 1e-9:
        path = np.outer(np.ones_like(t), a)
    elif math.pi - omega < 1e-9:
        # Antipodal endpoints: pass through a point 90 degrees from start
        mid = np.cross(a, [0.0, 0.0, 1.0])
        if np.linalg.norm(mid) < 1e-9:
            mid = np.array([1.0, 0.0, 0.0])
        mid = mid / np.linalg.norm(mid)
        first = _slerp(a, mid, np.linspace(0.0, 1.0, steps // 2))
        second = _slerp(mid, b, np.linspace(0.0, 1.0, steps - steps // 2))
        path = np.vstack([first, second])
    else:
        path = _slerp(a, b, t, omega)

    lift = 1.0 + altitude * np.sin(np.pi * t)
    return path * lift[:, np.newaxis]


def _slerp(a: np.ndarray, b: np.ndarray, t: np.ndarray, omega=None):
    if omega is None:
        omega = math.acos(float(np.clip(np.dot(a, b), -1.0, 1.0)))
    if omega < 1e-9:
        return np.outer(np.ones_like(t), a)
    s = math.sin(omega)
    w_a = np.sin((1.0 - t) * omega) / s
    w_b = np.sin(t * omega) / s
    return np.outer(w_a, a) + np.outer(w_b, b)


class GlobeRenderer:
    """Thread-safe globe render surface backed by a plotly figure."""

    def __init__(
        self,
        width: int = 800,
        height: int = 500,
        color: str = "#F86A28",
        dimmed_color: str = "rgba(248,106,40,0.3)",
        arc_altitude: float = 0.2,
    ):
        self._lock = threading.Lock()
        self._arcs: List[ArcVisual] = []
        self._points: List[PointVisual] = []
        self._camera: Optional[CameraRequest] = None
        self.width = width
        self.height = height
        self.color = color
        self.dimmed_color = dimmed_color
        self.arc_altitude = arc_altitude

    def set_arcs(self, arcs: List[ArcVisual]):
        """Replace the arc array (entries are copied)."""
        with self._lock:
            self._arcs = [dataclasses.replace(arc) for arc in arcs]

    def set_points(self, points: List[PointVisual]):
        """Replace the point array (entries are copied)."""
        with self._lock:
            self._points = [dataclasses.replace(p) for p in points]

    def point_of_view(
        self,
        lat: float,
        lng: float,
        altitude: float,
        transition_ms: Optional[int] = None,
    ):
        """Request a camera move towards lat/lng."""
        with self._lock:
            self._camera = CameraRequest(lat, lng, altitude, transition_ms)
        log("VIEW", f"Camera target {lat:.4f}, {lng:.4f} (alt {altitude})")

    def set_width(self, width: int):
        """Resize the render surface width."""
        with self._lock:
            self.width = width

    def state(self) -> Dict[str, Any]:
        """Get a copy of the current surface state."""
        with self._lock:
            return {
                "arcs": [dataclasses.asdict(a) for a in self._arcs],
                "points": [dataclasses.asdict(p) for p in self._points],
                "camera": (
                    dataclasses.asdict(self._camera) if self._camera else None
                ),
                "width": self.width,
                "height": self.height,
            }

    def figure(self) -> go.Figure:
        """Build a plotly figure of the globe and current visuals."""
        with self._lock:
            arcs = list(self._arcs)
            points = list(self._points)
            camera = self._camera
            width = self.width
            height = self.height

        fig = go.Figure()
        fig.add_trace(self._sphere_trace())

        for visible in (True, False):
            trace = self._arc_trace([a for a in arcs if a.visible == visible])
            if trace is not None:
                trace.line.color = self.color if visible else self.dimmed_color
                trace.name = "Routes" if visible else "Routes (dimmed)"
                fig.add_trace(trace)

        if points:
            xyz = latlng_to_xyz(
                np.array([p.lat for p in points]),
                np.array([p.lng for p in points]),
                1.005,
            )
            fig.add_trace(
                go.Scatter3d(
                    name="Route origins",
                    mode="markers",
                    x=xyz[:, 0],
                    y=xyz[:, 1],
                    z=xyz[:, 2],
                    text=[p.label for p in points],
                    hoverinfo="text",
                    marker={
                        "symbol": "circle",
                        "size": 4,
                        "color": [
                            self.color if p.visible else self.dimmed_color
                            for p in points
                        ],
                    },
                )
            )

        layout = {
            "template": "plotly_dark",
            "width": width,
            "height": height,
            "margin": {"t": 0, "b": 0, "l": 0, "r": 0},
            "showlegend": False,
            "paper_bgcolor": "rgba(0,0,0,0)",
            "plot_bgcolor": "rgba(0,0,0,0)",
            "scene": {
                "xaxis": {"visible": False},
                "yaxis": {"visible": False},
                "zaxis": {"visible": False},
                "aspectmode": "data",
                "dragmode": "orbit",
                "bgcolor": "rgba(0,0,0,0)",
            },
        }
        if camera is not None:
            eye = latlng_to_xyz(
                camera.lat, camera.lng, (1.0 + camera.altitude) * EYE_SCALE
            )
            layout["scene"]["camera"] = {
                "eye": {"x": eye[0], "y": eye[1], "z": eye[2]},
                "center": {"x": 0, "y": 0, "z": 0},
            }
            if camera.transition_ms:
                layout["transition"] = {
                    "duration": camera.transition_ms,
                    "easing": "cubic-in-out",
                }
        fig.update_layout(**layout)
        return fig

    def to_json(self) -> str:
        """Serialize the current figure to plotly JSON."""
        return self.figure().to_json()

    def _sphere_trace(self) -> go.Surface:
        lat = np.linspace(-90, 90, 37)
        lng = np.linspace(-180, 180, 73)
        lng_grid, lat_grid = np.meshgrid(lng, lat)
        xyz = latlng_to_xyz(lat_grid, lng_grid)
        return go.Surface(
            x=xyz[..., 0],
            y=xyz[..., 1],
            z=xyz[..., 2],
            colorscale=[[0, "#0b1d3a"], [1, "#16365f"]],
            surfacecolor=lat_grid,
            showscale=False,
            hoverinfo="skip",
            opacity=1.0,
        )

    def _arc_trace(self, arcs: List[ArcVisual]) -> Optional[go.Scatter3d]:
        if not arcs:
            return None
        xs: List[Optional[float]] = []
        ys: List[Optional[float]] = []
        zs: List[Optional[float]] = []
        labels: List[Optional[str]] = []
        for arc in arcs:
            path = arc_path(
                arc.start_lat,
                arc.start_lng,
                arc.end_lat,
                arc.end_lng,
                self.arc_altitude,
            )
            # None breaks the line between consecutive arcs
            xs.extend(path[:, 0].tolist() + [None])
            ys.extend(path[:, 1].tolist() + [None])
            zs.extend(path[:, 2].tolist() + [None])
            labels.extend([arc.label] * len(path) + [None])
        return go.Scatter3d(
            mode="lines",
            x=xs,
            y=ys,
            z=zs,
            text=labels,
            hoverinfo="text",
            line={"width": 3},
        )
