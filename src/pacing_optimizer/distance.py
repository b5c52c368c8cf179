"""Spherical-earth geodesy for route segmentation.

Haversine on a sphere is well within GPS error at route-segment scale, so no
ellipsoidal correction is applied.
"""

import math

# Earth's mean radius in meters
EARTH_RADIUS_M = 6_371_000


def haversine_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in meters between two points given in degrees."""
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dphi = math.radians(lat2 - lat1)
    dlambda = math.radians(lon2 - lon1)

    a = math.sin(dphi / 2) ** 2 + math.cos(phi1) * math.cos(phi2) * math.sin(dlambda / 2) ** 2
    a = min(a, 1.0)  # rounding near antipodes
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_M * c


def calculate_bearing(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Initial compass bearing from point 1 to point 2.

    Args:
        lat1, lon1: Start point in degrees
        lat2, lon2: End point in degrees

    Returns:
        Bearing in degrees (0-360, where 0=North, 90=East)
    """
    phi1 = math.radians(lat1)
    phi2 = math.radians(lat2)
    dlambda = math.radians(lon2 - lon1)

    east = math.sin(dlambda) * math.cos(phi2)
    north = math.cos(phi1) * math.sin(phi2) - math.sin(phi1) * math.cos(phi2) * math.cos(dlambda)

    return normalize_bearing(math.degrees(math.atan2(east, north)))


def normalize_bearing(degrees: float) -> float:
    """Wrap an angle in degrees into [0, 360)."""
    bearing = (degrees + 360) % 360
    # float % returns 360.0 for tiny negative remainders
    return 0.0 if bearing >= 360 else bearing


def bearing_from_components(north: float, east: float) -> float:
    """Bearing of a summed direction vector, for circular averaging of headings."""
    return normalize_bearing(math.degrees(math.atan2(east, north)))
