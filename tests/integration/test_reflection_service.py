"""Integration tests for the reflection-week state machine."""

import asyncio
from datetime import datetime, timedelta
from uuid import uuid4

import pytest

from voicejournal.errors import (
    AlreadyCompleteError,
    AlreadyProcessingError,
    InErrorStateError,
    NotFoundError,
    SummarizationError,
    TranscriptionError,
)
from voicejournal.models import LocationInsights, Week, WeekStatus
from voicejournal.services.reflection import ReflectionService
from voicejournal.services.weeks import WeekService

from tests.factories import EntryFactory, LocatedEntryFactory, WeekFactory
from tests.utils import reload


async def _add_entries(db_session, week, *recorded_at, factory=EntryFactory):
    entries = [
        factory(user_id=week.user_id, week_id=week.id, recorded_at=when) for when in recorded_at
    ]
    db_session.add_all(entries)
    await db_session.commit()
    return entries


class TestProcessWeek:
    """Tests for ReflectionService.process_week."""

    async def test_completes_week(self, reflection, db_session, recording_week, mock_summarization):
        """Entries are transcribed in recording order, summarized and stored."""
        monday, wednesday, friday = (datetime(2024, 3, 11, 13) + timedelta(days=d) for d in (0, 2, 4))
        friday_entry, monday_entry, wednesday_entry = await _add_entries(
            db_session, recording_week, friday, monday, wednesday
        )

        week = await reflection.process_week(recording_week.id)

        assert week.status == WeekStatus.COMPLETE
        assert week.processed_at is not None

        stored = await reload(Week, recording_week.id)
        assert stored.status == WeekStatus.COMPLETE
        assert [t["entry_id"] for t in stored.transcriptions] == [
            str(monday_entry.id),
            str(wednesday_entry.id),
            str(friday_entry.id),
        ]
        assert stored.transcriptions[0] == {
            "entry_id": str(monday_entry.id),
            "text": f"text for {monday_entry.audio_ref}",
            "recorded_at": monday.isoformat(),
        }
        assert stored.summary == "A steady week with a few late nights."
        assert stored.insights["mood_trend"] == "reflective"
        assert stored.insights["key_themes"] == ["work", "family", "sleep"]
        assert stored.insights["location_insights"] is None

        transcriptions, location_insights, tz_name = mock_summarization.summarize.call_args.args
        assert len(transcriptions) == 3
        assert location_insights is None
        assert tz_name == "America/New_York"

    async def test_no_entries(self, reflection, recording_week, mock_transcription, mock_summarization):
        week = await reflection.process_week(recording_week.id)

        assert week.status == WeekStatus.COMPLETE
        stored = await reload(Week, recording_week.id)
        assert stored.status == WeekStatus.COMPLETE
        assert stored.processed_at is not None
        assert stored.transcriptions == []
        assert stored.insights is None
        assert stored.summary is None
        mock_transcription.transcribe.assert_not_called()
        mock_summarization.summarize.assert_not_called()

    async def test_failed_transcription_becomes_placeholder(
        self, reflection, db_session, recording_week, mock_transcription
    ):
        entries = await _add_entries(
            db_session,
            recording_week,
            datetime(2024, 3, 11, 13),
            datetime(2024, 3, 12, 13),
            datetime(2024, 3, 13, 13),
        )
        broken = entries[1].audio_ref

        async def transcribe(audio_ref):
            if audio_ref == broken:
                raise TranscriptionError("Audio file not found")
            return f"text for {audio_ref}"

        mock_transcription.transcribe.side_effect = transcribe

        await reflection.process_week(recording_week.id)

        stored = await reload(Week, recording_week.id)
        assert stored.status == WeekStatus.COMPLETE
        texts = [t["text"] for t in stored.transcriptions]
        assert texts == [
            f"text for {entries[0].audio_ref}",
            "[Transcription failed: Audio file not found]",
            f"text for {entries[2].audio_ref}",
        ]

    async def test_transcription_timeout_becomes_placeholder(
        self, session_factory, db_session, recording_week, mock_transcription, mock_summarization
    ):
        await _add_entries(db_session, recording_week, datetime(2024, 3, 11, 13))

        async def hang(audio_ref):
            await asyncio.sleep(5)

        mock_transcription.transcribe.side_effect = hang
        service = ReflectionService(
            transcription=mock_transcription,
            summarization=mock_summarization,
            session_factory=session_factory,
            weeks=WeekService(),
            transcription_timeout_seconds=0.05,
        )

        await service.process_week(recording_week.id)

        stored = await reload(Week, recording_week.id)
        assert stored.status == WeekStatus.COMPLETE
        assert stored.transcriptions[0]["text"] == "[Transcription failed: timed out after 0.05s]"

    async def test_location_insights_stored(
        self, reflection, db_session, recording_week, mock_summarization
    ):
        await _add_entries(
            db_session,
            recording_week,
            datetime(2024, 3, 11, 13),
            datetime(2024, 3, 12, 13),
            factory=LocatedEntryFactory,
        )

        await reflection.process_week(recording_week.id)

        _, location_insights, _ = mock_summarization.summarize.call_args.args
        assert isinstance(location_insights, LocationInsights)
        assert location_insights.total_unique_locations == 1

        stored = await reload(Week, recording_week.id)
        assert stored.insights["location_insights"]["total_unique_locations"] == 1
        assert stored.insights["location_insights"]["location_clusters"][0]["label"] == "Home"

    async def test_summarization_failure_marks_error(
        self, reflection, db_session, recording_week, mock_summarization
    ):
        await _add_entries(db_session, recording_week, datetime(2024, 3, 11, 13))
        mock_summarization.summarize.side_effect = SummarizationError("overloaded")

        with pytest.raises(SummarizationError):
            await reflection.process_week(recording_week.id)

        stored = await reload(Week, recording_week.id)
        assert stored.status == WeekStatus.ERROR
        # Transcriptions were persisted before the summary step
        assert len(stored.transcriptions) == 1
        assert stored.summary is None
        assert stored.processed_at is None

    async def test_summarization_timeout_marks_error(
        self, session_factory, db_session, recording_week, mock_transcription, mock_summarization
    ):
        await _add_entries(db_session, recording_week, datetime(2024, 3, 11, 13))

        async def hang(*args):
            await asyncio.sleep(5)

        mock_summarization.summarize.side_effect = hang
        service = ReflectionService(
            transcription=mock_transcription,
            summarization=mock_summarization,
            session_factory=session_factory,
            weeks=WeekService(),
            summarization_timeout_seconds=0.05,
        )

        with pytest.raises(SummarizationError, match="timed out"):
            await service.process_week(recording_week.id)

        stored = await reload(Week, recording_week.id)
        assert stored.status == WeekStatus.ERROR

    async def test_missing_week(self, reflection, db_engine):
        with pytest.raises(NotFoundError):
            await reflection.process_week(uuid4())


class TestProcessWeekRejections:
    """Weeks outside ``recording`` are rejected without being modified."""

    @pytest.mark.parametrize(
        "status, error",
        [
            (WeekStatus.COMPLETE, AlreadyCompleteError),
            (WeekStatus.PROCESSING, AlreadyProcessingError),
            (WeekStatus.ERROR, InErrorStateError),
        ],
    )
    async def test_rejected(self, reflection, db_session, user, mock_transcription, status, error):
        processed_at = datetime(2024, 3, 17, 22, 5)
        week = WeekFactory(
            user_id=user.id,
            status=status,
            summary="Earlier summary",
            processed_at=processed_at,
            transcriptions=[{"entry_id": "x", "text": "old", "recorded_at": "2024-03-11T13:00:00"}],
        )
        db_session.add(week)
        await db_session.commit()

        with pytest.raises(error) as exc_info:
            await reflection.process_week(week.id)

        assert exc_info.value.reason == status_reason(status)
        stored = await reload(Week, week.id)
        assert stored.status == status
        assert stored.summary == "Earlier summary"
        assert stored.processed_at == processed_at
        assert stored.transcriptions[0]["text"] == "old"
        mock_transcription.transcribe.assert_not_called()

    async def test_second_caller_rejected_while_processing(
        self, reflection, db_session, recording_week, mock_transcription
    ):
        """Once claimed, a concurrent trigger sees the week as processing."""
        await _add_entries(db_session, recording_week, datetime(2024, 3, 11, 13))
        started = asyncio.Event()
        release = asyncio.Event()

        async def slow(audio_ref):
            started.set()
            await release.wait()
            return "done"

        mock_transcription.transcribe.side_effect = slow

        first = asyncio.create_task(reflection.process_week(recording_week.id))
        await started.wait()

        with pytest.raises(AlreadyProcessingError):
            await reflection.process_week(recording_week.id)

        release.set()
        week = await first
        assert week.status == WeekStatus.COMPLETE
        assert mock_transcription.transcribe.call_count == 1


def status_reason(status: WeekStatus) -> str:
    return {
        WeekStatus.COMPLETE: "already_complete",
        WeekStatus.PROCESSING: "already_processing",
        WeekStatus.ERROR: "in_error_state",
    }[status]
