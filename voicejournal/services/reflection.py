"""Reflection service: drives a week through recording -> processing -> complete/error."""

import asyncio
import logging
from typing import Any, AsyncContextManager, Callable
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from voicejournal.config import settings
from voicejournal.db import get_session
from voicejournal.errors import (
    AlreadyCompleteError,
    AlreadyProcessingError,
    InErrorStateError,
    SummarizationError,
)
from voicejournal.location import analyze_week
from voicejournal.models import Entry, User, Week, WeekStatus, WeeklyReflection
from voicejournal.models.location import LocationInsights
from voicejournal.services.schedule import utcnow
from voicejournal.services.summarization import SummarizationService, summarization_service
from voicejournal.services.transcription import TranscriptionService, transcription_service
from voicejournal.services.weeks import WeekService, week_service

logger = logging.getLogger(__name__)

SessionFactory = Callable[[], AsyncContextManager[AsyncSession]]

TRANSCRIPTION_FAILED = "[Transcription failed: {reason}]"


def ensure_recording(week: Week) -> None:
    """Raise the matching conflict error unless the week is still recording."""
    if week.status == WeekStatus.COMPLETE:
        raise AlreadyCompleteError(f"Week {week.id} reflection already complete")
    if week.status == WeekStatus.PROCESSING:
        raise AlreadyProcessingError(f"Week {week.id} reflection is already being processed")
    if week.status == WeekStatus.ERROR:
        raise InErrorStateError(f"Week {week.id} reflection is in error state")


class ReflectionService:
    """Service for processing a week's entries into its weekly reflection."""

    def __init__(
        self,
        transcription: TranscriptionService = transcription_service,
        summarization: SummarizationService = summarization_service,
        session_factory: SessionFactory = get_session,
        weeks: WeekService = week_service,
        transcription_timeout_seconds: float = settings.transcription_timeout_seconds,
        summarization_timeout_seconds: float = settings.summarization_timeout_seconds,
        transcription_concurrency: int = settings.transcription_concurrency,
        cluster_radius_meters: float = settings.location_cluster_radius_meters,
    ):
        self.transcription = transcription
        self.summarization = summarization
        self.session_factory = session_factory
        self.weeks = weeks
        self._transcription_timeout = transcription_timeout_seconds
        self._summarization_timeout = summarization_timeout_seconds
        self._transcription_concurrency = max(1, transcription_concurrency)
        self._cluster_radius_meters = cluster_radius_meters

    async def process_week(self, week_id: UUID) -> Week:
        """Transcribe, analyze and summarize a recording week.

        The ``processing`` status is committed before any external call, so
        a concurrent caller for the same week is rejected. Per-entry
        transcription failures become placeholder text. Any later failure
        marks the week ``error`` and is re-raised.

        Args:
            week_id: Week identifier.

        Returns:
            The completed Week.

        Raises:
            NotFoundError: If the week does not exist.
            StateConflictError: If the week is not in ``recording``.
        """
        await self._claim(week_id)

        try:
            return await self._run(week_id)
        except Exception:
            logger.exception("Reflection failed for week %s", week_id)
            await self._mark_error(week_id)
            raise

    async def _claim(self, week_id: UUID) -> None:
        """Move the week from recording to processing, or raise a conflict."""
        async with self.session_factory() as session:
            week = await self.weeks.get_week(session, week_id)
            ensure_recording(week)

            result = await session.execute(
                update(Week)
                .where(Week.id == week_id, Week.status == WeekStatus.RECORDING)
                .values(status=WeekStatus.PROCESSING)
            )
            if result.rowcount == 0:
                # Another caller claimed it between our read and the update
                await session.refresh(week)
                ensure_recording(week)

        logger.info("Processing reflection for week %s", week_id)

    async def _run(self, week_id: UUID) -> Week:
        async with self.session_factory() as session:
            week = await self.weeks.get_week(session, week_id)
            entries = await self.weeks.list_entries(session, week_id)
            user = await session.get(User, week.user_id)
            tz_name = user.timezone if user is not None else "UTC"

        if not entries:
            logger.info("Week %s has no entries; completing without a reflection", week_id)
            return await self._complete(week_id, None)

        logger.info("Transcribing %d entries for week %s", len(entries), week_id)
        transcriptions = await self.transcribe_entries(entries)

        # Persist transcriptions on their own so they survive a later failure
        async with self.session_factory() as session:
            week = await self.weeks.get_week(session, week_id)
            week.transcriptions = transcriptions

        location_insights = analyze_week(entries, self._cluster_radius_meters)

        logger.info("Generating summary for week %s", week_id)
        reflection = await self._summarize(transcriptions, location_insights, tz_name)
        if location_insights is not None and reflection.location_insights is None:
            reflection.location_insights = location_insights

        return await self._complete(week_id, reflection)

    async def transcribe_entries(self, entries: list[Entry]) -> list[dict[str, Any]]:
        """Transcribe entries concurrently, keeping recording order in the result."""
        semaphore = asyncio.Semaphore(self._transcription_concurrency)

        async def _transcribe(entry: Entry) -> dict[str, Any]:
            async with semaphore:
                try:
                    text = await asyncio.wait_for(
                        self.transcription.transcribe(entry.audio_ref),
                        timeout=self._transcription_timeout,
                    )
                except asyncio.TimeoutError:
                    reason = f"timed out after {self._transcription_timeout:g}s"
                    logger.warning("Transcription of entry %s %s", entry.id, reason)
                    text = TRANSCRIPTION_FAILED.format(reason=reason)
                except Exception as exc:  # noqa: BLE001
                    logger.warning("Transcription of entry %s failed: %s", entry.id, exc)
                    text = TRANSCRIPTION_FAILED.format(reason=exc)

            return {
                "entry_id": str(entry.id),
                "text": text,
                "recorded_at": entry.recorded_at.isoformat(),
            }

        return list(await asyncio.gather(*(_transcribe(entry) for entry in entries)))

    async def _summarize(
        self,
        transcriptions: list[dict[str, Any]],
        location_insights: LocationInsights | None,
        tz_name: str,
    ) -> WeeklyReflection:
        try:
            return await asyncio.wait_for(
                self.summarization.summarize(transcriptions, location_insights, tz_name),
                timeout=self._summarization_timeout,
            )
        except asyncio.TimeoutError as exc:
            raise SummarizationError(
                f"Summarization timed out after {self._summarization_timeout:g}s"
            ) from exc

    async def _complete(self, week_id: UUID, reflection: WeeklyReflection | None) -> Week:
        async with self.session_factory() as session:
            week = await self.weeks.get_week(session, week_id)
            if reflection is not None:
                week.summary = reflection.summary
                week.insights = reflection.insights_payload()
            week.status = WeekStatus.COMPLETE
            week.processed_at = utcnow()
            await session.flush()

        logger.info("Week %s reflection complete", week_id)
        return week

    async def _mark_error(self, week_id: UUID) -> None:
        """Force the week into the terminal error state after a failure."""
        try:
            async with self.session_factory() as session:
                week = await session.get(Week, week_id)
                if week is not None:
                    week.status = WeekStatus.ERROR
        except Exception:  # noqa: BLE001
            # The original failure is re-raised by the caller
            logger.exception("Could not mark week %s as error", week_id)


# Global singleton instance
reflection_service = ReflectionService()
