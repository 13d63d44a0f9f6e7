"""
Geographic utility functions for sequence processing.
Planar distance, initial bearing, centroids and linear increments on GeoPoints.

All averaging happens in plain signed-degree space. Points on both sides of
the antimeridian average to a longitude near 0 instead of near +/-180.
"""

import numpy as np
from typing import Sequence, Tuple

from ..core.geo_point import GeoPoint
from ..errors import MathDomainError


# Earth radius in meters
EARTH_RADIUS_M = 6371000.0


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate great-circle distance between two GPS points using Haversine formula.

    Args:
        lat1: Latitude of first point (degrees)
        lon1: Longitude of first point (degrees)
        lat2: Latitude of second point (degrees)
        lon2: Longitude of second point (degrees)

    Returns:
        Distance in meters
    """
    # Convert to radians
    phi1 = np.radians(lat1)
    phi2 = np.radians(lat2)
    dphi = np.radians(lat2 - lat1)
    dlambda = np.radians(lon2 - lon1)

    # Haversine formula
    a = np.sin(dphi / 2) ** 2 + np.cos(phi1) * np.cos(phi2) * np.sin(dlambda / 2) ** 2
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))

    return float(EARTH_RADIUS_M * c)


def normalize_degrees(value: float) -> float:
    """Wrap an angle into [0, 360)."""
    result = value % 360.0
    # (-tiny) % 360 rounds up to exactly 360.0
    return result if result < 360.0 else 0.0


def distance(a: GeoPoint, b: GeoPoint) -> float:
    """
    Planar distance between two points in degree units.

    This is a flat-earth approximation, not a great-circle distance.

    Returns:
        Euclidean norm of (delta latitude, delta longitude)
    """
    return float(np.hypot(a.latitude - b.latitude, a.longitude - b.longitude))


def greatest_distance(point: GeoPoint, points: Sequence[GeoPoint]) -> float:
    """Largest planar distance from point to any of points (0.0 if empty)."""
    return max((distance(point, p) for p in points), default=0.0)


def bearing(a: GeoPoint, b: GeoPoint) -> float:
    """
    Calculate initial bearing from a facing b.

    Args:
        a: Point looking from
        b: Point looking at

    Returns:
        Bearing in degrees true north (0-360); 0.0 when a equals b
    """
    phi1 = np.radians(a.latitude)
    phi2 = np.radians(b.latitude)
    dlambda = np.radians(b.longitude - a.longitude)

    x = np.sin(dlambda) * np.cos(phi2)
    y = np.cos(phi1) * np.sin(phi2) - np.sin(phi1) * np.cos(phi2) * np.cos(dlambda)

    return normalize_degrees(float(np.degrees(np.arctan2(x, y))))


def weighted_centroid(points: Sequence[GeoPoint], weights: Sequence[float]) -> GeoPoint:
    """
    Weighted arithmetic mean of latitudes and longitudes.

    The result carries no altitude.

    Raises:
        MathDomainError: If points is empty or the weights do not sum to a positive value
    """
    if len(points) == 0:
        raise MathDomainError("Cannot compute the centroid of an empty point set")
    if len(weights) != len(points):
        raise MathDomainError(
            f"Expected {len(points)} weights, got {len(weights)}"
        )

    w = np.asarray(weights, dtype=float)
    if w.sum() <= 0:
        raise MathDomainError("Centroid weights must sum to a positive value")

    coords = np.array([(p.latitude, p.longitude) for p in points], dtype=float)
    # TODO: Average longitudes on the circle once callers agree on antimeridian handling
    lat, lon = np.average(coords, axis=0, weights=w)

    return GeoPoint(float(lat), float(lon))


def centroid(points: Sequence[GeoPoint]) -> GeoPoint:
    """
    Arithmetic mean position of a set of points.

    Raises:
        MathDomainError: If points is empty
    """
    if len(points) == 1:
        return points[0]
    return weighted_centroid(points, np.ones(len(points)))


def linear_increment(start: GeoPoint, end: GeoPoint, steps: int) -> Tuple[float, float]:
    """
    Per-step increment of an evenly spaced path from start to end.

    The increment does not account for the distance on the surface.

    Args:
        start: First point of the path
        end: Last point of the path
        steps: Number of points on the path, endpoints included

    Returns:
        Tuple of (latitude_increment, longitude_increment)

    Raises:
        MathDomainError: If steps is less than 2
    """
    if steps <= 1:
        raise MathDomainError(
            f"Linear interpolation needs at least 2 points, got {steps}"
        )
    return (
        (end.latitude - start.latitude) / (steps - 1),
        (end.longitude - start.longitude) / (steps - 1),
    )
