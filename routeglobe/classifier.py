"""
Route classification.
Maps raw route records onto arcs, points, or drops them.
"""

import math
from typing import Any, Iterable, Optional, Tuple, Union

from routeglobe.models import ArcVisual, PointVisual, RouteRecord, VisualSet
from routeglobe.utils import log

# Outcome for records whose origin cannot be placed on the globe
DROPPED = None

Classification = Union[ArcVisual, PointVisual, None]


def parse_coordinate(value: Any) -> Optional[float]:
    """
    Parse a single coordinate component.

    Args:
        value: Raw value from the backend (number, string or None)

    Returns:
        Finite float, or None if the value is missing or not a number
    """
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def parse_pair(lat: Any, lng: Any) -> Optional[Tuple[float, float]]:
    """Parse a lat/lng pair; valid only if both components parse."""
    parsed_lat = parse_coordinate(lat)
    parsed_lng = parse_coordinate(lng)
    if parsed_lat is None or parsed_lng is None:
        return None
    return parsed_lat, parsed_lng


def classify(record: RouteRecord) -> Classification:
    """
    Classify a route record.

    Args:
        record: Route record to classify

    Returns:
        ArcVisual if origin and destination are valid, PointVisual if
        only the origin is valid, DROPPED otherwise
    """
    origin = parse_pair(record.origin_lat, record.origin_lng)
    if origin is None:
        log(
            "WARN",
            f"Dropping record #{record.sequence_index}: invalid origin "
            f"({record.origin_lat!r}, {record.origin_lng!r})",
        )
        return DROPPED

    destination = parse_pair(record.dest_lat, record.dest_lng)
    if destination is None:
        return PointVisual(
            lat=origin[0], lng=origin[1], index=record.sequence_index
        )

    return ArcVisual(
        start_lat=origin[0],
        start_lng=origin[1],
        end_lat=destination[0],
        end_lng=destination[1],
        index=record.sequence_index,
    )


def classify_batch(
    records: Iterable[RouteRecord], generation: int = 0
) -> VisualSet:
    """
    Classify a fetched batch into a fresh visual set.

    Input order is preserved within arcs and within points.
    """
    visual_set = VisualSet(generation=generation)
    dropped = 0

    for record in records:
        outcome = classify(record)
        if isinstance(outcome, ArcVisual):
            visual_set.arcs.append(outcome)
        elif isinstance(outcome, PointVisual):
            visual_set.points.append(outcome)
        else:
            dropped += 1

    log(
        "CLASSIFY",
        f"{len(visual_set.arcs)} arcs, {len(visual_set.points)} points, "
        f"{dropped} dropped",
    )
    return visual_set
