"""
Data model for route events and their globe visuals.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class RouteRecord:
    """One route event as read from the backend store.

    Coordinate fields keep whatever the backend returned (number, string
    or None); the classifier decides whether they are usable.
    """

    origin_lat: Any
    origin_lng: Any
    dest_lat: Any = None
    dest_lng: Any = None
    timestamp: Any = None
    sequence_index: int = 0

    @classmethod
    def from_document(
        cls, fields: Dict[str, Any], sequence_index: int
    ) -> "RouteRecord":
        """Build a record from decoded backend document fields."""
        return cls(
            origin_lat=fields.get("origin_lat"),
            origin_lng=fields.get("origin_long"),
            dest_lat=fields.get("destination_lat"),
            dest_lng=fields.get("destination_long"),
            timestamp=fields.get("timestamp"),
            sequence_index=sequence_index,
        )


@dataclass
class ArcVisual:
    """A route with a usable origin and destination."""

    start_lat: float
    start_lng: float
    end_lat: float
    end_lng: float
    index: int
    visible: bool = True

    @property
    def label(self) -> str:
        return (
            f"Route {self.index}<br>"
            f"From: {self.start_lat:.4f}, {self.start_lng:.4f}<br>"
            f"To: {self.end_lat:.4f}, {self.end_lng:.4f}"
        )


@dataclass
class PointVisual:
    """A route event with a usable origin only."""

    lat: float
    lng: float
    index: int
    visible: bool = True

    @property
    def label(self) -> str:
        return (
            f"Route Origin {self.index}<br>"
            f"Lat: {self.lat:.4f}, Lng: {self.lng:.4f}"
        )


@dataclass
class VisualSet:
    """Arcs and points produced by one refresh cycle.

    All visuals in a set share a single visibility state; the animator
    is the only component that mutates it.
    """

    arcs: List[ArcVisual] = field(default_factory=list)
    points: List[PointVisual] = field(default_factory=list)
    generation: int = 0

    def __len__(self) -> int:
        return len(self.arcs) + len(self.points)

    def visuals(self) -> List[Any]:
        """Return arcs followed by points."""
        return [*self.arcs, *self.points]

    def set_visible(self, visible: bool):
        """Set visibility on every visual in the set."""
        for visual in self.visuals():
            visual.visible = visible

    def toggle(self):
        """Flip visibility on every visual in the set."""
        for visual in self.visuals():
            visual.visible = not visual.visible

    def all_visible(self) -> bool:
        return all(visual.visible for visual in self.visuals())


@dataclass
class Focus:
    """Camera target on the globe."""

    lat: float
    lng: float


@dataclass
class CameraRequest:
    """Camera move handed to the render surface."""

    lat: float
    lng: float
    altitude: float
    transition_ms: Optional[int] = None
