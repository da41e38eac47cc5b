"""Week model: one recording period and its reflection."""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from sqlalchemy import JSON, UniqueConstraint
from sqlmodel import Column, Field, SQLModel


class WeekStatus(str, Enum):
    """Lifecycle states for a week's reflection."""

    RECORDING = "recording"
    PROCESSING = "processing"
    COMPLETE = "complete"
    ERROR = "error"


class Week(SQLModel, table=True):
    """A 7-day recording period ending at the user's reflection instant."""

    __tablename__ = "weeks"
    __table_args__ = (
        UniqueConstraint("user_id", "year", "week_number", name="uq_weeks_user_year_week"),
    )

    id: UUID = Field(default_factory=uuid4, primary_key=True)
    user_id: UUID = Field(index=True, foreign_key="users.id")

    # ISO week-year and week of the reflection date, in the user's timezone
    week_number: int = Field(ge=1, le=53)
    year: int

    week_start: datetime
    week_end: datetime
    reflection_date: datetime = Field(index=True)

    status: WeekStatus = Field(default=WeekStatus.RECORDING, index=True)

    # Reflection output
    transcriptions: list[dict] = Field(default_factory=list, sa_column=Column(JSON))
    summary: str | None = Field(default=None)
    insights: dict | None = Field(default=None, sa_column=Column(JSON))
    processed_at: datetime | None = Field(default=None)

    created_at: datetime = Field(default_factory=datetime.utcnow)

    @property
    def location_insights(self) -> dict | None:
        """Location section of the stored insights, if the week had any."""
        if not self.insights:
            return None
        return self.insights.get("location_insights")

    def to_dict(self) -> dict[str, Any]:
        """Convert week to dictionary for API responses."""
        return {
            "id": str(self.id),
            "user_id": str(self.user_id),
            "week_number": self.week_number,
            "year": self.year,
            "week_start": self.week_start.isoformat(),
            "week_end": self.week_end.isoformat(),
            "reflection_date": self.reflection_date.isoformat(),
            "status": self.status.value,
            "transcriptions": self.transcriptions or [],
            "summary": self.summary,
            "insights": self.insights,
            "processed_at": self.processed_at.isoformat() if self.processed_at else None,
            "created_at": self.created_at.isoformat(),
        }
