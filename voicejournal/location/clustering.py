"""Seed-anchored radius clustering of located entries."""

from typing import Any, Sequence

from voicejournal.location.distance import distance_km
from voicejournal.models.location import LocationCluster

DEFAULT_RADIUS_METERS = 100.0


def has_coordinates(point: Any) -> bool:
    """True when the point carries both a latitude and a longitude."""
    return (
        getattr(point, "latitude", None) is not None
        and getattr(point, "longitude", None) is not None
    )


def cluster_locations(
    points: Sequence[Any],
    radius_meters: float = DEFAULT_RADIUS_METERS,
) -> list[LocationCluster]:
    """Group points into clusters of radius ``radius_meters`` around a seed point.

    Points are scanned in input order. Each unassigned point seeds a new
    cluster and absorbs every later unassigned point within the radius of
    the seed (not of the evolving centroid), so the grouping depends on
    input order.

    Args:
        points: Objects with ``latitude`` and ``longitude`` attributes
            (entries or ``GeoPoint``). Points missing either are ignored.
        radius_meters: Clustering radius in meters.

    Returns:
        Clusters sorted by member count, largest first.
    """
    located = [p for p in points if has_coordinates(p)]
    if not located:
        return []

    radius_km = radius_meters / 1000
    assigned: set[int] = set()
    groups: list[list[Any]] = []

    for i, seed in enumerate(located):
        if i in assigned:
            continue
        assigned.add(i)
        members = [seed]

        for j in range(i + 1, len(located)):
            if j in assigned:
                continue
            other = located[j]
            if distance_km(seed.latitude, seed.longitude, other.latitude, other.longitude) <= radius_km:
                members.append(other)
                assigned.add(j)

        groups.append(members)

    # (discovery index, members); sorted() is stable so ties keep discovery order
    ranked = sorted(enumerate(groups), key=lambda item: len(item[1]), reverse=True)

    clusters = []
    for rank, (discovery_index, members) in enumerate(ranked):
        center_lat = sum(m.latitude for m in members) / len(members)
        center_lng = sum(m.longitude for m in members) / len(members)
        max_distance_km = max(
            distance_km(center_lat, center_lng, m.latitude, m.longitude) for m in members
        )
        clusters.append(
            LocationCluster(
                center_lat=center_lat,
                center_lng=center_lng,
                radius_meters=max_distance_km * 1000,
                entry_count=len(members),
                label=_cluster_label(rank, discovery_index, len(members)),
            )
        )

    return clusters


def _cluster_label(rank: int, discovery_index: int, size: int) -> str:
    if size == 1:
        return f"Location {discovery_index + 1}"
    if rank == 0:
        return "Home"
    if rank == 1:
        return "Work"
    return f"Location {rank + 1}"
