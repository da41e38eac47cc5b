"""Unit tests for location metrics."""

from datetime import datetime

import pytest

from voicejournal.location import (
    exploration_score,
    mobility_score,
    time_at_home_percent,
    total_distance_km,
)
from voicejournal.location.metrics import round_half_up
from voicejournal.models import GeoPoint, LocationCluster

ONE_DEGREE_KM = 111.195


def _cluster(count: int) -> LocationCluster:
    return LocationCluster(
        center_lat=40.0, center_lng=-74.0, radius_meters=0.0, entry_count=count, label="x"
    )


class TestRoundHalfUp:
    def test_half_rounds_up(self):
        assert round_half_up(0.5) == 1
        assert round_half_up(2.5) == 3

    def test_digits(self):
        assert round_half_up(0.125, 2) == 0.13
        assert round_half_up(3.14159, 2) == 3.14


class TestTotalDistance:
    """Tests for total_distance_km."""

    def test_fewer_than_two_points(self):
        assert total_distance_km([]) == 0.0
        assert total_distance_km([GeoPoint(latitude=1.0, longitude=1.0)]) == 0.0

    def test_sorted_by_recorded_at(self):
        """Hops are summed in time order, not input order."""
        points = [
            GeoPoint(latitude=0.0, longitude=0.0, recorded_at=datetime(2024, 3, 11, 8)),
            GeoPoint(latitude=2.0, longitude=0.0, recorded_at=datetime(2024, 3, 13, 8)),
            GeoPoint(latitude=1.0, longitude=0.0, recorded_at=datetime(2024, 3, 12, 8)),
        ]

        assert total_distance_km(points) == pytest.approx(2 * ONE_DEGREE_KM, abs=0.01)

    def test_points_without_coordinates_are_skipped(self):
        points = [
            GeoPoint(latitude=0.0, longitude=0.0, recorded_at=datetime(2024, 3, 11, 8)),
            GeoPoint(recorded_at=datetime(2024, 3, 12, 8)),
            GeoPoint(latitude=1.0, longitude=0.0, recorded_at=datetime(2024, 3, 13, 8)),
        ]

        assert total_distance_km(points) == pytest.approx(ONE_DEGREE_KM, abs=0.01)


class TestMobilityScore:
    def test_zero(self):
        assert mobility_score(0, 0.0) == 0

    def test_components(self):
        # min(3*10, 50) + min(10*2, 50)
        assert mobility_score(3, 10.0) == 50

    def test_capped_at_100(self):
        assert mobility_score(10, 500.0) == 100

    def test_location_component_capped(self):
        assert mobility_score(8, 0.0) == 50

    def test_rounds_half_up(self):
        assert mobility_score(0, 0.25) == 1


class TestExplorationScore:
    def test_no_clusters(self):
        assert exploration_score([], 0) == 0
        assert exploration_score([_cluster(1)], 0) == 0

    def test_single_cluster(self):
        # diversity 0 + one cluster bonus 5
        assert exploration_score([_cluster(4)], 4) == 5

    def test_spread_entries(self):
        # (1 - 3/4) * 100 + 2 * 5
        assert exploration_score([_cluster(3), _cluster(1)], 4) == 35

    def test_location_bonus_capped(self):
        clusters = [_cluster(1) for _ in range(10)]
        # (1 - 1/10) * 100 + min(50, 30) = 120, capped
        assert exploration_score(clusters, 10) == 100


class TestTimeAtHomePercent:
    def test_no_entries(self):
        assert time_at_home_percent(0, 0) == 0

    def test_share(self):
        assert time_at_home_percent(3, 4) == 75

    def test_rounds_half_up(self):
        assert time_at_home_percent(1, 8) == 13
