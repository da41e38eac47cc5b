"""User model with the weekly reflection schedule preference."""

from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

from sqlmodel import Field, SQLModel


class User(SQLModel, table=True):
    """A journaling user and the schedule their weekly reflection runs on."""

    __tablename__ = "users"

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    email: str = Field(index=True, unique=True, max_length=320)
    name: str = Field(max_length=200)

    # Schedule preference
    timezone: str = Field(default="America/New_York")
    reflection_weekday: int = Field(default=0, ge=0, le=6)  # 0 = Sunday
    reflection_time: str = Field(default="18:00", max_length=5)
    next_reflection_at: datetime = Field(index=True)

    location_enabled: bool = Field(default=True)
    created_at: datetime = Field(default_factory=datetime.utcnow)

    def schedule_to_dict(self) -> dict[str, Any]:
        """Convert the schedule preference to a dictionary for API responses."""
        return {
            "timezone": self.timezone,
            "reflection_weekday": self.reflection_weekday,
            "reflection_time": self.reflection_time,
            "next_reflection_at": self.next_reflection_at.isoformat(),
            "location_enabled": self.location_enabled,
        }

    def to_dict(self) -> dict[str, Any]:
        """Convert user to dictionary for API responses."""
        return {
            "id": str(self.id),
            "email": self.email,
            "name": self.name,
            **self.schedule_to_dict(),
            "created_at": self.created_at.isoformat(),
        }
