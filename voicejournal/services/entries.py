"""Entry ingestion: attach recorded audio entries to the user's open week."""

import logging
from datetime import datetime
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from voicejournal.errors import NotFoundError, ValidationError
from voicejournal.models import Entry, Location
from voicejournal.services.schedule import next_reflection_at, to_naive_utc, utcnow
from voicejournal.services.users import UserService, user_service
from voicejournal.services.weeks import WeekService, week_service

logger = logging.getLogger(__name__)


class EntryService:
    """Service for recording and reading diary entries."""

    def __init__(self, users: UserService = user_service, weeks: WeekService = week_service):
        self.users = users
        self.weeks = weeks

    async def record_entry(
        self,
        session: AsyncSession,
        user_id: UUID,
        audio_ref: str,
        duration: float,
        recorded_at: datetime | None = None,
        location: Location | dict | None = None,
    ) -> Entry:
        """Store a new entry in the week whose window contains ``recorded_at``.

        The entry joins the earliest recording week that has not yet reached
        its reflection instant. If there is none, the week ending at the next
        reflection after ``recorded_at`` is created.

        Args:
            session: Database session.
            user_id: Owner of the entry.
            audio_ref: Reference to the stored audio file.
            duration: Length in seconds.
            recorded_at: When it was recorded (defaults to now).
            location: Optional GPS fix; dropped if the user disabled location.

        Returns:
            The created Entry.
        """
        if not audio_ref:
            raise ValidationError("audio_ref is required")
        if duration is None or duration < 0:
            raise ValidationError(f"Invalid duration {duration!r}")

        fix = self._parse_location(location)
        user = await self.users.get_user(session, user_id)
        recorded_at = to_naive_utc(recorded_at) if recorded_at else utcnow()

        week = await self.weeks.find_week_for_instant(session, user.id, recorded_at)
        if week is None:
            reflection_at = next_reflection_at(
                user.reflection_weekday, user.reflection_time, user.timezone, now=recorded_at
            )
            week = await self.weeks.get_or_create_week(session, user, reflection_at)

        entry = Entry(user_id=user.id, week_id=week.id, audio_ref=audio_ref, duration=duration, recorded_at=recorded_at)
        if fix is not None and user.location_enabled:
            entry.latitude = fix.latitude
            entry.longitude = fix.longitude
            entry.accuracy = fix.accuracy
            entry.location_timestamp = to_naive_utc(fix.timestamp) if fix.timestamp else recorded_at
            entry.address = fix.address
            entry.city = fix.city
            entry.state = fix.state
            entry.country = fix.country
            entry.neighborhood = fix.neighborhood
            entry.formatted_address = fix.formatted_address

        session.add(entry)
        await session.flush()

        logger.info(
            "Recorded entry %s for user %s in week %s (location=%s)",
            entry.id,
            user.id,
            week.id,
            entry.has_location,
        )
        return entry

    def _parse_location(self, location: Location | dict | None) -> Location | None:
        if location is None or isinstance(location, Location):
            return location
        if location.get("latitude") is None or location.get("longitude") is None:
            return None
        try:
            return Location.model_validate(location)
        except PydanticValidationError as exc:
            raise ValidationError(f"Invalid location: {exc.errors()[0]['msg']}") from exc

    async def get_entry(self, session: AsyncSession, entry_id: UUID) -> Entry:
        """Load an entry or raise NotFoundError."""
        entry = await session.get(Entry, entry_id)
        if entry is None:
            raise NotFoundError(f"Entry not found: {entry_id}")
        return entry

    async def list_entries(
        self,
        session: AsyncSession,
        user_id: UUID,
        week_id: UUID | None = None,
    ) -> list[Entry]:
        """A user's entries, newest first, optionally limited to one week."""
        query = select(Entry).where(Entry.user_id == user_id)
        if week_id is not None:
            query = query.where(Entry.week_id == week_id)
        result = await session.execute(query.order_by(Entry.recorded_at.desc()))
        return list(result.scalars().all())

    async def delete_entry(self, session: AsyncSession, entry_id: UUID) -> None:
        entry = await self.get_entry(session, entry_id)
        await session.delete(entry)
        await session.flush()


# Global singleton instance
entry_service = EntryService()
