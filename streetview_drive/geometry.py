"""Route geometry: midpoint densification and travel bearings.

Midpoints are the arithmetic mean of latitude and longitude taken separately.
This is a planar approximation; the error is negligible over the short gaps
between recorded track points, but it is not a geodesic midpoint.

Bearings convert degree inputs to radians before the forward-azimuth formula.
Older renders fed degrees straight into the trig functions and averaged the
two neighbor bearings arithmetically; ``legacy=True`` reproduces that output.
"""
from __future__ import annotations

import math
from collections.abc import Sequence

from .models import TrackPoint


def midpoint(p1: TrackPoint, p2: TrackPoint) -> TrackPoint:
    """Return the planar midpoint of two points."""
    return TrackPoint((p1.lat + p2.lat) / 2, (p1.lon + p2.lon) / 2)


def interpolated_points(points: Sequence[TrackPoint]) -> list[TrackPoint]:
    """Insert one midpoint between every adjacent pair, keeping originals in order."""
    if len(points) < 2:
        return list(points)
    dense: list[TrackPoint] = []
    for current, following in zip(points, points[1:]):
        dense.append(current)
        dense.append(midpoint(current, following))
    dense.append(points[-1])
    return dense


def densify(points: Sequence[TrackPoint], iterations: int) -> list[TrackPoint]:
    """Apply ``iterations`` midpoint passes; N points become (N-1)*2**K + 1."""
    if iterations < 0:
        raise ValueError("iterations cannot be negative.")
    dense = list(points)
    for _ in range(iterations):
        dense = interpolated_points(dense)
    return dense


def bearing(p1: TrackPoint | None, p2: TrackPoint | None, *, legacy: bool = False) -> float | None:
    """Initial compass bearing in [0, 360) from p1 to p2, or None when undefined."""
    if p1 is None or p2 is None:
        return None
    if p1 == p2:
        return None
    if legacy:
        lat1, lon1, lat2, lon2 = p1.lat, p1.lon, p2.lat, p2.lon
    else:
        lat1, lon1, lat2, lon2 = map(math.radians, (p1.lat, p1.lon, p2.lat, p2.lon))
    d_lon = lon2 - lon1
    x = math.cos(lat2) * math.sin(d_lon)
    y = math.cos(lat1) * math.sin(lat2) - math.sin(lat1) * math.cos(lat2) * math.cos(d_lon)
    result = math.degrees(math.atan2(x, y)) % 360.0
    # A tiny negative angle wraps to exactly 360.0 under float modulo.
    return 0.0 if result >= 360.0 else result


def average_bearing(b1: float | None, b2: float | None, *, legacy: bool = False) -> float | None:
    """Average two bearings, falling back to whichever one is defined."""
    if b1 is None:
        return b2
    if b2 is None:
        return b1
    if legacy:
        return (b1 + b2) / 2
    sin_sum = math.sin(math.radians(b1)) + math.sin(math.radians(b2))
    cos_sum = math.cos(math.radians(b1)) + math.cos(math.radians(b2))
    if abs(sin_sum) < 1e-12 and abs(cos_sum) < 1e-12:
        # Opposite headings (a U-turn): keep the incoming direction.
        return b1
    result = math.degrees(math.atan2(sin_sum, cos_sum)) % 360.0
    return 0.0 if result >= 360.0 else result


def request_bearing(points: Sequence[TrackPoint], index: int, *, legacy: bool = False) -> float | None:
    """Heading for the panorama request at ``points[index]``."""
    point = points[index]
    previous = points[index - 1] if index > 0 else None
    following = points[index + 1] if index + 1 < len(points) else None
    return average_bearing(
        bearing(previous, point, legacy=legacy),
        bearing(point, following, legacy=legacy),
        legacy=legacy,
    )
