"""Aggregate a week's located entries into a single LocationInsights record."""

from typing import Any, Sequence

from voicejournal.location.clustering import DEFAULT_RADIUS_METERS, cluster_locations, has_coordinates
from voicejournal.location.metrics import (
    exploration_score,
    mobility_score,
    round_half_up,
    time_at_home_percent,
    total_distance_km,
)
from voicejournal.models.location import LocationInsights, PrimaryLocation


def analyze_week(
    entries: Sequence[Any],
    radius_meters: float = DEFAULT_RADIUS_METERS,
) -> LocationInsights | None:
    """Build location insights for a week, or None when nothing is located.

    Args:
        entries: Entries (or ``GeoPoint``s) with ``latitude``, ``longitude``
            and ``recorded_at`` attributes.
        radius_meters: Clustering radius.

    Returns:
        LocationInsights, or None when no entry carries coordinates.
    """
    located = [e for e in entries if has_coordinates(e)]
    if not located:
        return None

    clusters = cluster_locations(located, radius_meters)
    distance = total_distance_km(located)
    primary = clusters[0]

    return LocationInsights(
        total_unique_locations=len(clusters),
        primary_location=PrimaryLocation(
            latitude=primary.center_lat,
            longitude=primary.center_lng,
            address=None,
            entry_count=primary.entry_count,
        ),
        mobility_score=mobility_score(len(clusters), distance),
        distance_traveled_km=round_half_up(distance, 2),
        location_clusters=clusters,
        time_at_home_percent=time_at_home_percent(primary.entry_count, len(located)),
        exploration_score=exploration_score(clusters, len(located)),
    )
