"""Distance, mobility, exploration and time-at-home metrics."""

import math
from datetime import datetime
from typing import Any, Sequence

from voicejournal.location.clustering import has_coordinates
from voicejournal.location.distance import distance_km
from voicejournal.models.location import LocationCluster


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with .5 going up, unlike Python's banker's rounding."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def total_distance_km(points: Sequence[Any]) -> float:
    """Sum of consecutive great-circle hops, in recording-time order.

    Points without coordinates are dropped; points are sorted by
    ``recorded_at`` (missing timestamps sort first) before summing.
    """
    located = sorted(
        (p for p in points if has_coordinates(p)),
        key=lambda p: getattr(p, "recorded_at", None) or datetime.min,
    )
    if len(located) < 2:
        return 0.0

    total = 0.0
    for prev, curr in zip(located, located[1:]):
        total += distance_km(prev.latitude, prev.longitude, curr.latitude, curr.longitude)
    return total


def mobility_score(unique_locations: int, distance_traveled_km: float) -> int:
    """0-100: up to 50 points for distinct places, up to 50 for distance."""
    location_points = min(unique_locations * 10, 50)
    distance_points = min(distance_traveled_km * 2, 50)
    return min(int(round_half_up(location_points + distance_points)), 100)


def exploration_score(clusters: Sequence[LocationCluster], total_entries: int) -> int:
    """0-100: how spread out entries are beyond the primary cluster."""
    if not clusters or total_entries == 0:
        return 0

    primary_ratio = clusters[0].entry_count / total_entries
    diversity = (1 - primary_ratio) * 100
    location_bonus = min(len(clusters) * 5, 30)
    return min(int(round_half_up(diversity + location_bonus)), 100)


def time_at_home_percent(primary_entry_count: int, total_located_entries: int) -> int:
    """Share of located entries recorded at the primary cluster."""
    if total_located_entries == 0:
        return 0
    return int(round_half_up(primary_entry_count / total_located_entries * 100))
