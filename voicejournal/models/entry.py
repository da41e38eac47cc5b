"""Entry model: one recorded audio diary entry."""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel

from voicejournal.models.location import GeoPoint, Location


class Entry(SQLModel, table=True):
    """An audio diary entry, optionally tagged with where it was recorded."""

    __tablename__ = "entries"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(index=True, foreign_key="users.id")
    week_id: UUID = Field(index=True, foreign_key="weeks.id")

    audio_ref: str = Field(max_length=1024)
    duration: float = Field(ge=0.0)
    recorded_at: datetime = Field(default_factory=datetime.utcnow, index=True)

    # Location (all optional)
    latitude: float | None = Field(default=None, ge=-90.0, le=90.0)
    longitude: float | None = Field(default=None, ge=-180.0, le=180.0)
    accuracy: float | None = Field(default=None, ge=0.0)
    location_timestamp: datetime | None = Field(default=None)
    address: str | None = Field(default=None)
    city: str | None = Field(default=None)
    state: str | None = Field(default=None)
    country: str | None = Field(default=None)
    neighborhood: str | None = Field(default=None)
    formatted_address: str | None = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def has_location(self) -> bool:
        return self.latitude is not None and self.longitude is not None

    @property
    def location(self) -> Location | None:
        """The entry's location as a value object, or None."""
        if not self.has_location:
            return None
        return Location(
            latitude=self.latitude,
            longitude=self.longitude,
            accuracy=self.accuracy,
            timestamp=self.location_timestamp,
            address=self.address,
            city=self.city,
            state=self.state,
            country=self.country,
            neighborhood=self.neighborhood,
            formatted_address=self.formatted_address,
        )

    def to_geo_point(self) -> GeoPoint:
        return GeoPoint(
            id=self.id,
            latitude=self.latitude,
            longitude=self.longitude,
            recorded_at=self.recorded_at,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert entry to dictionary for API responses."""
        location = self.location
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "week_id": str(self.week_id),
            "audio_ref": self.audio_ref,
            "duration": self.duration,
            "recorded_at": self.recorded_at.isoformat(),
            "location": location.model_dump(mode="json") if location else None,
            "created_at": self.created_at.isoformat(),
        }
