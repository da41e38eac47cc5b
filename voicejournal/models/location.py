"""Location value types used by entry ingestion and location analysis."""

from datetime import datetime
from typing import Any
from uuid import UUID

from sqlmodel import Field, SQLModel


class Location(SQLModel):
    """A GPS fix attached to an entry, validated on construction."""

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    accuracy: float | None = Field(default=None, ge=0.0)
    timestamp: datetime | None = Field(default=None)

    # Reverse-geocoded address fields (populated outside the analysis core)
    address: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    neighborhood: str | None = None
    formatted_address: str | None = None


class GeoPoint(SQLModel):
    """A point fed to clustering; coordinates may be missing."""

    id: UUID | str | None = None
    latitude: float | None = Field(default=None, ge=-90.0, le=90.0)
    longitude: float | None = Field(default=None, ge=-180.0, le=180.0)
    recorded_at: datetime | None = None

    @property
    def has_coordinates(self) -> bool:
        return self.latitude is not None and self.longitude is not None


class LocationCluster(SQLModel):
    """A group of nearby entries treated as one place."""

    center_lat: float = Field(ge=-90.0, le=90.0)
    center_lng: float = Field(ge=-180.0, le=180.0)
    radius_meters: float = Field(ge=0.0)
    entry_count: int = Field(ge=1)
    label: str


class PrimaryLocation(SQLModel):
    """Center of the most visited cluster."""

    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)
    address: str | None = None
    entry_count: int = Field(ge=1)


class LocationInsights(SQLModel):
    """Mobility statistics for one week of entries."""

    total_unique_locations: int = Field(ge=0)
    primary_location: PrimaryLocation | None = None
    mobility_score: int = Field(ge=0, le=100)
    distance_traveled_km: float = Field(ge=0.0)
    location_clusters: list[LocationCluster] = Field(default_factory=list)
    time_at_home_percent: int = Field(ge=0, le=100)
    exploration_score: int = Field(ge=0, le=100)

    def to_dict(self) -> dict[str, Any]:
        """Convert insights to a JSON-safe dictionary."""
        return self.model_dump(mode="json")
