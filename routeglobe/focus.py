"""
Camera focus for the newest route event.
"""

from typing import Optional

from routeglobe.classifier import parse_pair
from routeglobe.models import CameraRequest, Focus, RouteRecord

DEFAULT_FOCUS = Focus(lat=20, lng=100)
DEFAULT_ALTITUDE = 0.8
DEFAULT_TRANSITION_MS = 1500


def wrap_longitude(lng: float) -> float:
    """Wrap a longitude into the range (-180, 180]."""
    wrapped = (lng + 180) % 360 - 180
    return 180.0 if wrapped == -180 else wrapped


class ViewFocusController:
    """Compute where the globe camera should look."""

    def __init__(
        self,
        default_focus: Focus = DEFAULT_FOCUS,
        altitude: float = DEFAULT_ALTITUDE,
        transition_ms: int = DEFAULT_TRANSITION_MS,
    ):
        self.default_focus = default_focus
        self.altitude = altitude
        self.transition_ms = transition_ms

    def compute_focus(self, record: Optional[RouteRecord]) -> Focus:
        """
        Compute the camera target for a record.

        Args:
            record: Newest record of the batch

        Returns:
            Midpoint of origin and destination for complete routes, the
            origin for origin-only events, the default focus otherwise
        """
        if record is None:
            return Focus(self.default_focus.lat, self.default_focus.lng)

        origin = parse_pair(record.origin_lat, record.origin_lng)
        if origin is None:
            return Focus(self.default_focus.lat, self.default_focus.lng)

        destination = parse_pair(record.dest_lat, record.dest_lng)
        if destination is None:
            return Focus(lat=origin[0], lng=origin[1])

        # Longitude midpoint along the shorter span, across ±180 if needed
        span = wrap_longitude(destination[1] - origin[1])
        return Focus(
            lat=(origin[0] + destination[0]) / 2,
            lng=wrap_longitude(origin[1] + span / 2),
        )

    def focus_request(self, record: Optional[RouteRecord]) -> CameraRequest:
        """Wrap the focus for a record into a camera request."""
        focus = self.compute_focus(record)
        return CameraRequest(
            lat=focus.lat,
            lng=focus.lng,
            altitude=self.altitude,
            transition_ms=self.transition_ms,
        )
