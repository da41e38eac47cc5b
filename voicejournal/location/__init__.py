"""Geospatial analysis of journal entries."""

from voicejournal.location.clustering import cluster_locations, has_coordinates
from voicejournal.location.distance import distance_km
from voicejournal.location.insights import analyze_week
from voicejournal.location.metrics import (
    exploration_score,
    mobility_score,
    time_at_home_percent,
    total_distance_km,
)

__all__ = [
    "analyze_week",
    "cluster_locations",
    "distance_km",
    "exploration_score",
    "has_coordinates",
    "mobility_score",
    "time_at_home_percent",
    "total_distance_km",
]
