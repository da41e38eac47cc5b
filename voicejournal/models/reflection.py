"""Structured weekly reflection produced by the summarization service."""

from typing import Any

from sqlmodel import Field, SQLModel

from voicejournal.models.location import LocationInsights


class WeeklyReflection(SQLModel):
    """Summary, mood, themes and highlights for one week."""

    summary: str | None = None
    mood_trend: str = ""
    key_themes: list[str] = Field(default_factory=list)
    highlights: list[str] = Field(default_factory=list)
    location_insight: str | None = None
    location_insights: LocationInsights | None = None

    def insights_payload(self) -> dict[str, Any]:
        """The JSON stored on ``Week.insights`` (the summary is stored separately)."""
        return {
            "mood_trend": self.mood_trend,
            "key_themes": list(self.key_themes),
            "highlights": list(self.highlights),
            "location_insight": self.location_insight,
            "location_insights": (
                self.location_insights.to_dict() if self.location_insights else None
            ),
        }
