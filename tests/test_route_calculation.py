"""
Unit tests for the haversine route estimator.
"""

from __future__ import annotations

import pytest

from copallet_api.app.services.route_calculation import (
    DEFAULT_LOCATION,
    calculate_route,
    crosses_major_water_body,
    determine_route_type,
    generate_waypoints,
    haversine_km,
    round_half_up,
    route_between,
    route_summary,
)

BERLIN = (52.52, 13.405)
MUNICH = (48.1351, 11.582)
AMSTERDAM = (52.3676, 4.9041)
ROTTERDAM = (51.9244, 4.4777)
LONDON = (51.5074, -0.1278)


class TestHaversine:
    def test_zero_distance(self) -> None:
        assert haversine_km(BERLIN, BERLIN) == 0

    def test_symmetric(self) -> None:
        assert haversine_km(BERLIN, MUNICH) == pytest.approx(haversine_km(MUNICH, BERLIN))

    def test_berlin_munich(self) -> None:
        assert haversine_km(BERLIN, MUNICH) == pytest.approx(504, abs=5)

    def test_round_half_up(self) -> None:
        assert round_half_up(2.5) == 3
        assert round_half_up(3.5) == 4
        assert round_half_up(2.49) == 2


class TestRouteType:
    def test_inland_route_is_road(self) -> None:
        assert crosses_major_water_body(BERLIN, MUNICH) is None
        assert determine_route_type(BERLIN, MUNICH) == "road"

    def test_short_hop_inside_water_box_is_combined(self) -> None:
        # Both cities sit inside the North Sea bounding box.
        assert crosses_major_water_body(AMSTERDAM, ROTTERDAM) == "North Sea"
        assert determine_route_type(AMSTERDAM, ROTTERDAM) == "combined"

    def test_long_crossing_is_ferry(self) -> None:
        aberdeen = (57.1497, -2.0943 + 0.2)
        assert determine_route_type(AMSTERDAM, aberdeen) == "ferry"

    def test_one_point_outside_box_is_road(self) -> None:
        assert determine_route_type(AMSTERDAM, BERLIN) == "road"

    def test_london_counts_as_north_sea(self) -> None:
        assert determine_route_type(AMSTERDAM, LONDON) == "ferry"


class TestWaypoints:
    def test_short_route_has_only_endpoints(self) -> None:
        waypoints = generate_waypoints(AMSTERDAM, (52.37, 4.95))
        assert [w.type for w in waypoints] == ["pickup", "delivery"]

    def test_long_route_is_capped_at_five_intermediate_points(self) -> None:
        waypoints = generate_waypoints(BERLIN, MUNICH)
        assert len(waypoints) == 7
        assert waypoints[0].type == "pickup"
        assert waypoints[-1].type == "delivery"
        assert all(w.type == "waypoint" for w in waypoints[1:-1])

    def test_intermediate_points_lie_between_endpoints(self) -> None:
        for waypoint in generate_waypoints(BERLIN, MUNICH)[1:-1]:
            assert MUNICH[0] < waypoint.lat < BERLIN[0] + 0.011
            assert MUNICH[1] < waypoint.lng < BERLIN[1]


class TestCalculateRoute:
    def test_road_distance_applies_detour_factor(self) -> None:
        route = calculate_route(*BERLIN, *MUNICH)
        assert route.route_type == "road"
        assert route.distance == round_half_up(haversine_km(BERLIN, MUNICH) * 1.3)
        assert route.duration == round_half_up(haversine_km(BERLIN, MUNICH) * 1.3 / 65 * 60)

    def test_missing_coordinate_falls_back_to_default_for_both_points(self) -> None:
        route = calculate_route(None, 13.405, *MUNICH)
        assert route.distance == 0
        assert route.duration == 0
        assert (route.waypoints[0].lat, route.waypoints[0].lng) == DEFAULT_LOCATION
        assert (route.waypoints[-1].lat, route.waypoints[-1].lng) == DEFAULT_LOCATION

    def test_summary_format(self) -> None:
        assert route_summary("road", 72, 66) == "Road route: 72 km, 1h 6m"
        route = calculate_route(*BERLIN, *MUNICH)
        assert route.summary.startswith(f"Road route: {route.distance} km, ")

    def test_route_between_reads_address_dicts(self) -> None:
        origin = {"city": "Berlin", "latitude": BERLIN[0], "longitude": BERLIN[1]}
        destination = {"city": "Munich", "latitude": MUNICH[0], "longitude": MUNICH[1]}
        assert route_between(origin, destination) == calculate_route(*BERLIN, *MUNICH)
