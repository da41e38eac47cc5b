"""Unit tests for data models."""

from datetime import datetime

import pytest
from pydantic import ValidationError as PydanticValidationError

from voicejournal.models import (
    Location,
    LocationCluster,
    LocationInsights,
    WeekStatus,
    WeeklyReflection,
)

from tests.factories import EntryFactory, UserFactory, WeekFactory


class TestUserModel:
    """Tests for the User model."""

    def test_schedule_to_dict(self):
        user = UserFactory(next_reflection_at=datetime(2024, 3, 17, 22, 0))

        assert user.schedule_to_dict() == {
            "timezone": "America/New_York",
            "reflection_weekday": 0,
            "reflection_time": "18:00",
            "next_reflection_at": "2024-03-17T22:00:00",
            "location_enabled": True,
        }

    def test_to_dict_includes_schedule(self):
        user = UserFactory()
        result = user.to_dict()

        assert result["id"] == str(user.id)
        assert result["email"] == user.email
        assert result["reflection_time"] == "18:00"


class TestWeekModel:
    """Tests for the Week model."""

    def test_status_enum(self):
        assert WeekStatus.RECORDING.value == "recording"
        assert WeekStatus.PROCESSING.value == "processing"
        assert WeekStatus.COMPLETE.value == "complete"
        assert WeekStatus.ERROR.value == "error"

    def test_to_dict(self):
        week = WeekFactory()
        result = week.to_dict()

        assert result["status"] == "recording"
        assert result["transcriptions"] == []
        assert result["processed_at"] is None
        assert (result["year"], result["week_number"]) == (2024, 11)

    def test_location_insights(self):
        week = WeekFactory()
        assert week.location_insights is None

        week.insights = {"mood_trend": "calm", "location_insights": {"mobility_score": 10}}
        assert week.location_insights == {"mobility_score": 10}


class TestEntryModel:
    """Tests for the Entry model."""

    def test_without_location(self):
        entry = EntryFactory()

        assert not entry.has_location
        assert entry.location is None
        assert entry.to_dict()["location"] is None

    def test_zero_coordinates_are_a_location(self):
        entry = EntryFactory(latitude=0.0, longitude=0.0)

        assert entry.has_location
        assert entry.location.latitude == 0.0

    def test_to_geo_point(self):
        entry = EntryFactory(latitude=40.7, longitude=-74.0)
        point = entry.to_geo_point()

        assert point.id == entry.id
        assert (point.latitude, point.longitude) == (40.7, -74.0)
        assert point.recorded_at == entry.recorded_at

    def test_to_dict_location(self):
        entry = EntryFactory(latitude=40.7, longitude=-74.0, accuracy=12.0, city="New York")
        location = entry.to_dict()["location"]

        assert location["latitude"] == 40.7
        assert location["city"] == "New York"


class TestLocationValueTypes:
    """Location value types validate on construction."""

    @pytest.mark.parametrize(
        "fields",
        [
            {"latitude": 91.0, "longitude": 0.0},
            {"latitude": 0.0, "longitude": -181.0},
            {"latitude": 0.0, "longitude": 0.0, "accuracy": -1.0},
        ],
    )
    def test_location_bounds(self, fields):
        with pytest.raises(PydanticValidationError):
            Location(**fields)

    def test_cluster_needs_a_member(self):
        with pytest.raises(PydanticValidationError):
            LocationCluster(center_lat=0.0, center_lng=0.0, radius_meters=0.0, entry_count=0, label="x")

    def test_scores_bounded(self):
        with pytest.raises(PydanticValidationError):
            LocationInsights(
                total_unique_locations=1,
                mobility_score=101,
                distance_traveled_km=0.0,
                time_at_home_percent=100,
                exploration_score=5,
            )


class TestWeeklyReflection:
    def test_insights_payload(self, sample_reflection):
        payload = sample_reflection.insights_payload()

        assert payload == {
            "mood_trend": "reflective",
            "key_themes": ["work", "family", "sleep"],
            "highlights": ["Dinner with my sister", "Shipped the release"],
            "location_insight": None,
            "location_insights": None,
        }
        assert "summary" not in payload

    def test_empty_defaults(self):
        reflection = WeeklyReflection()

        assert reflection.summary is None
        assert reflection.mood_trend == ""
        assert reflection.key_themes == []
