"""Unit tests for the summarization prompt and service."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest
from anthropic import AnthropicError

from voicejournal.errors import SummarizationError
from voicejournal.location import analyze_week
from voicejournal.models import GeoPoint
from voicejournal.services.summarization import SummarizationService, build_summary_prompt

TRANSCRIPTIONS = [
    {"entry_id": "a", "text": "Rough start to the week.", "recorded_at": "2024-03-12T12:00:00"},
    {"entry_id": "b", "text": "Dinner with my sister.", "recorded_at": "2024-03-15T23:30:00"},
]

RESPONSE = """SUMMARY:
A week that started rough and ended warmly.

MOOD: improving

THEMES: work, family

HIGHLIGHTS:
- Dinner with your sister
"""


def _insights():
    return analyze_week(
        [
            GeoPoint(id="1", latitude=40.7128, longitude=-74.0060),
            GeoPoint(id="2", latitude=40.7128, longitude=-74.0060),
            GeoPoint(id="3", latitude=40.7218, longitude=-74.0060),
        ]
    )


class TestBuildSummaryPrompt:
    """Tests for build_summary_prompt."""

    def test_entries_labeled_with_local_day_and_time(self):
        prompt = build_summary_prompt(TRANSCRIPTIONS, tz_name="America/New_York")

        assert "Entry 1 (Tuesday at 08:00 AM):\nRough start to the week." in prompt
        assert "Entry 2 (Friday at 07:30 PM):\nDinner with my sister." in prompt

    def test_without_location(self):
        prompt = build_summary_prompt(TRANSCRIPTIONS)

        assert "Movement & Location Summary" not in prompt
        assert "LOCATION_INSIGHT" not in prompt
        assert "THEMES: [theme 1], [theme 2], [theme 3]" in prompt

    def test_with_location(self):
        prompt = build_summary_prompt(TRANSCRIPTIONS, _insights())

        assert "--- Movement & Location Summary ---" in prompt
        assert "- Recorded from 2 unique locations" in prompt
        assert "- Traveled approximately 1.0km this week" in prompt
        assert "- 67% of entries from primary location (likely home)" in prompt
        # 2 * 10 + 1.0 * 2 = 22
        assert "- Mobility score: 22/100 (stayed mostly in one place)" in prompt
        # (1 - 2/3) * 100 + 10 = 43
        assert "- Exploration score: 43/100 (some variety in locations)" in prompt
        assert "5. LOCATION_INSIGHT:" in prompt
        assert prompt.rstrip().endswith("LOCATION_INSIGHT: [brief insight about movement and mood]")


class TestSummarizationService:
    """Tests for SummarizationService with a mocked Anthropic client."""

    @pytest.fixture
    def service(self):
        service = SummarizationService()
        service._client = MagicMock()
        service._client.messages.create = AsyncMock(
            return_value=SimpleNamespace(content=[SimpleNamespace(type="text", text=RESPONSE)])
        )
        return service

    async def test_summarize_parses_response(self, service):
        reflection = await service.summarize(TRANSCRIPTIONS)

        assert reflection.summary == "A week that started rough and ended warmly."
        assert reflection.mood_trend == "improving"
        assert reflection.key_themes == ["work", "family"]
        assert reflection.highlights == ["Dinner with your sister"]
        assert reflection.location_insights is None

        kwargs = service._client.messages.create.call_args.kwargs
        assert kwargs["messages"][0]["role"] == "user"
        assert "Rough start to the week." in kwargs["messages"][0]["content"]
        assert kwargs["system"]

    async def test_attaches_location_insights(self, service):
        insights = _insights()

        reflection = await service.summarize(TRANSCRIPTIONS, insights)

        assert reflection.location_insights == insights

    async def test_api_error(self, service):
        service._client.messages.create = AsyncMock(side_effect=AnthropicError("overloaded"))

        with pytest.raises(SummarizationError, match="overloaded"):
            await service.summarize(TRANSCRIPTIONS)
