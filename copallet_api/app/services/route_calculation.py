"""
Route estimation between two points.

The estimate is deliberately simple: the great-circle (haversine)
distance is multiplied by a detour factor that depends on the route
type, and the duration follows from a fixed average speed.  A route is
considered to cross water when both endpoints lie inside the same
rough bounding box (North Sea, English Channel, Mediterranean).

Everything here is a pure function of its inputs.
"""

import math
from typing import Dict, List, Optional, Tuple

from ..schemas.calculator import RouteEstimate, Waypoint


EARTH_RADIUS_KM = 6371

# Amsterdam; used when a point has no coordinates.
DEFAULT_LOCATION = (52.3676, 4.9041)

DETOUR_FACTORS: Dict[str, float] = {"road": 1.3, "ferry": 1.5, "combined": 1.4}
AVERAGE_SPEEDS_KMH: Dict[str, float] = {"road": 65, "ferry": 30, "combined": 55}

# (name, (lat_min, lat_max), (lng_min, lng_max)); bounds are exclusive
WATER_BODIES: List[Tuple[str, Tuple[float, float], Tuple[float, float]]] = [
    ("North Sea", (51, 60), (-2, 8)),
    ("English Channel", (50, 51), (-2, 2)),
    ("Mediterranean", (35, 45), (-5, 35)),
]

FERRY_MIN_DISTANCE_KM = 100
WAYPOINT_MIN_DISTANCE_KM = 50
MAX_WAYPOINTS = 5

ROUTE_LABELS = {"road": "Road route", "ferry": "Ferry route", "combined": "Combined route"}

Point = Tuple[float, float]


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up."""
    return int(math.floor(value + 0.5))


def haversine_km(origin: Point, destination: Point) -> float:
    """Great-circle distance in kilometres between two (lat, lng) points."""
    lat1, lng1 = origin
    lat2, lng2 = destination
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lng = math.radians(lng2 - lng1)
    a = (
        math.sin(delta_lat / 2) ** 2
        + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(delta_lng / 2) ** 2
    )
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def _inside(point: Point, lat_range: Tuple[float, float], lng_range: Tuple[float, float]) -> bool:
    lat, lng = point
    return lat_range[0] < lat < lat_range[1] and lng_range[0] < lng < lng_range[1]


def crosses_major_water_body(origin: Point, destination: Point) -> Optional[str]:
    """Name of the water body both points lie in, or ``None``."""
    for name, lat_range, lng_range in WATER_BODIES:
        if _inside(origin, lat_range, lng_range) and _inside(destination, lat_range, lng_range):
            return name
    return None


def determine_route_type(origin: Point, destination: Point) -> str:
    if crosses_major_water_body(origin, destination) is None:
        return "road"
    if haversine_km(origin, destination) > FERRY_MIN_DISTANCE_KM:
        return "ferry"
    return "combined"


def generate_waypoints(origin: Point, destination: Point) -> List[Waypoint]:
    """Pickup, up to five interpolated points along a gentle curve, delivery."""
    waypoints = [Waypoint(lat=origin[0], lng=origin[1], type="pickup")]
    direct = haversine_km(origin, destination)
    if direct > WAYPOINT_MIN_DISTANCE_KM:
        count = min(int(direct // 100), MAX_WAYPOINTS)
        for i in range(1, count + 1):
            t = i / (count + 1)
            lat = origin[0] + (destination[0] - origin[0]) * t
            lng = origin[1] + (destination[1] - origin[1]) * t
            waypoints.append(Waypoint(lat=lat + math.sin(t * math.pi) * 0.01, lng=lng, type="waypoint"))
    waypoints.append(Waypoint(lat=destination[0], lng=destination[1], type="delivery"))
    return waypoints


def route_summary(route_type: str, distance: int, duration: int) -> str:
    """Human readable one-liner, e.g. ``"Road route: 72 km, 1h 6m"``."""
    hours, minutes = divmod(duration, 60)
    return f"{ROUTE_LABELS[route_type]}: {distance} km, {hours}h {minutes}m"


def _resolve(
    from_lat: Optional[float],
    from_lng: Optional[float],
    to_lat: Optional[float],
    to_lng: Optional[float],
) -> Tuple[Point, Point]:
    # A single missing coordinate means the pair cannot be trusted, so both
    # ends fall back to the default location.
    if None in (from_lat, from_lng, to_lat, to_lng):
        return DEFAULT_LOCATION, DEFAULT_LOCATION
    return (from_lat, from_lng), (to_lat, to_lng)


def calculate_route(
    from_lat: Optional[float],
    from_lng: Optional[float],
    to_lat: Optional[float],
    to_lng: Optional[float],
) -> RouteEstimate:
    """Estimate distance, duration and route type between two points.

    Parameters
    ----------
    from_lat, from_lng, to_lat, to_lng : Optional[float]
        Coordinates in decimal degrees.  If any is missing both points
        fall back to ``DEFAULT_LOCATION``.

    Returns
    -------
    RouteEstimate
        Distance in km and duration in minutes (both rounded), the
        route type, waypoints and a summary line.
    """
    origin, destination = _resolve(from_lat, from_lng, to_lat, to_lng)
    route_type = determine_route_type(origin, destination)
    distance = haversine_km(origin, destination) * DETOUR_FACTORS[route_type]
    duration = distance / AVERAGE_SPEEDS_KMH[route_type] * 60
    rounded_distance = round_half_up(distance)
    rounded_duration = round_half_up(duration)
    return RouteEstimate(
        distance=rounded_distance,
        duration=rounded_duration,
        route_type=route_type,
        waypoints=generate_waypoints(origin, destination),
        summary=route_summary(route_type, rounded_distance, rounded_duration),
    )


def route_between(origin: dict, destination: dict) -> RouteEstimate:
    """Convenience wrapper for address dicts with ``latitude``/``longitude`` keys."""
    return calculate_route(
        origin.get("latitude"),
        origin.get("longitude"),
        destination.get("latitude"),
        destination.get("longitude"),
    )
