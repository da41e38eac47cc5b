"""Data models for voicejournal."""

from voicejournal.models.entry import Entry
from voicejournal.models.location import (
    GeoPoint,
    Location,
    LocationCluster,
    LocationInsights,
    PrimaryLocation,
)
from voicejournal.models.reflection import WeeklyReflection
from voicejournal.models.user import User
from voicejournal.models.week import Week, WeekStatus

__all__ = [
    "Entry",
    "GeoPoint",
    "Location",
    "LocationCluster",
    "LocationInsights",
    "PrimaryLocation",
    "User",
    "Week",
    "WeekStatus",
    "WeeklyReflection",
]
