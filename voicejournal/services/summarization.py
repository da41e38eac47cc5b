"""Weekly reflection summarization service backed by Anthropic."""

from datetime import datetime, timezone
from zoneinfo import ZoneInfo

from anthropic import AnthropicError, AsyncAnthropic

from voicejournal.config import settings
from voicejournal.errors import SummarizationError
from voicejournal.models.location import LocationInsights
from voicejournal.models.reflection import WeeklyReflection
from voicejournal.services.reflection_parser import parse_reflection


SUMMARY_SYSTEM_PROMPT = """You are a thoughtful, empathetic assistant helping someone reflect on their week through their voice diary entries. Provide insightful, supportive analysis that helps them understand patterns in their thoughts, emotions, and experiences. When location data is available, consider how physical movement and places might relate to their mental and emotional states."""


def _mobility_band(score: int) -> str:
    if score < 30:
        return "stayed mostly in one place"
    if score < 70:
        return "moderate movement"
    return "high mobility, moved around a lot"


def _exploration_band(score: int) -> str:
    if score < 30:
        return "stuck to familiar places"
    if score < 70:
        return "some variety in locations"
    return "explored new places"


def _local_time(recorded_at: str | datetime, tz: ZoneInfo) -> datetime:
    if isinstance(recorded_at, str):
        recorded_at = datetime.fromisoformat(recorded_at)
    if recorded_at.tzinfo is None:
        recorded_at = recorded_at.replace(tzinfo=timezone.utc)
    return recorded_at.astimezone(tz)


def build_summary_prompt(
    transcriptions: list[dict],
    location_insights: LocationInsights | None = None,
    tz_name: str = "UTC",
) -> str:
    """Build the user prompt listing the week's entries and movement summary."""
    tz = ZoneInfo(tz_name)
    lines = ["Here are the diary entries from this person's week:", ""]

    for idx, item in enumerate(transcriptions):
        local = _local_time(item["recorded_at"], tz)
        lines.append(f"Entry {idx + 1} ({local:%A} at {local:%I:%M %p}):")
        lines.append(item["text"])
        lines.append("")

    if location_insights is not None:
        count = location_insights.total_unique_locations
        lines.extend([
            "--- Movement & Location Summary ---",
            f"- Recorded from {count} unique location{'s' if count != 1 else ''}",
            f"- Traveled approximately {location_insights.distance_traveled_km:.1f}km this week",
            f"- {location_insights.time_at_home_percent}% of entries from primary location (likely home)",
            f"- Mobility score: {location_insights.mobility_score}/100 "
            f"({_mobility_band(location_insights.mobility_score)})",
            f"- Exploration score: {location_insights.exploration_score}/100 "
            f"({_exploration_band(location_insights.exploration_score)})",
            "",
        ])

    lines.extend([
        "Please analyze this week and provide:",
        "",
        "1. SUMMARY: A thoughtful 2-3 paragraph summary of their week",
        '2. MOOD: Overall mood trend (e.g., "positive", "mixed", "stressed", "reflective")',
        "3. THEMES: 3-5 key themes or topics that came up repeatedly",
        "4. HIGHLIGHTS: 2-3 specific moments or insights worth remembering",
    ])
    if location_insights is not None:
        lines.append(
            "5. LOCATION_INSIGHT: How their movement patterns might relate to their emotional state or experiences"
        )

    lines.extend([
        "",
        "Format your response as:",
        "SUMMARY:",
        "[Your 2-3 paragraph summary]",
        "",
        "MOOD: [mood trend]",
        "",
        "THEMES: [theme 1], [theme 2], [theme 3]",
        "",
        "HIGHLIGHTS:",
        "- [highlight 1]",
        "- [highlight 2]",
        "- [highlight 3]",
    ])
    if location_insights is not None:
        lines.extend(["", "LOCATION_INSIGHT: [brief insight about movement and mood]"])

    return "\n".join(lines)


class SummarizationService:
    """Service for generating a week's reflection from its transcriptions."""

    def __init__(self):
        self._client: AsyncAnthropic | None = None

    @property
    def client(self) -> AsyncAnthropic:
        """Lazily initialize the Anthropic client."""
        if self._client is None:
            self._client = AsyncAnthropic(api_key=settings.anthropic_api_key)
        return self._client

    async def summarize(
        self,
        transcriptions: list[dict],
        location_insights: LocationInsights | None = None,
        tz_name: str = "UTC",
    ) -> WeeklyReflection:
        """Generate the weekly reflection.

        Args:
            transcriptions: ``{entry_id, text, recorded_at}`` records in recording order.
            location_insights: The week's location insights, if any.
            tz_name: User timezone used to label entry days and times.

        Returns:
            Parsed WeeklyReflection (location insights attached when present).

        Raises:
            SummarizationError: If the API call fails.
        """
        prompt = build_summary_prompt(transcriptions, location_insights, tz_name)

        try:
            response = await self.client.messages.create(
                model=settings.summarization_model,
                max_tokens=settings.summarization_max_tokens,
                temperature=settings.summarization_temperature,
                system=SUMMARY_SYSTEM_PROMPT,
                messages=[{"role": "user", "content": prompt}],
            )
        except AnthropicError as exc:
            raise SummarizationError(str(exc)) from exc

        text = "".join(
            block.text for block in response.content if getattr(block, "type", None) == "text"
        )
        reflection = parse_reflection(text)
        if location_insights is not None:
            reflection.location_insights = location_insights
        return reflection


# Global singleton instance
summarization_service = SummarizationService()
