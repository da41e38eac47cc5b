"""User registration and schedule preference management."""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from voicejournal.config import settings
from voicejournal.errors import NotFoundError, ValidationError
from voicejournal.models import User, Week
from voicejournal.services.schedule import (
    describe_schedule,
    end_of_local_day,
    next_reflection_at,
    parse_reflection_time,
    resolve_timezone,
    utcnow,
    validate_weekday,
    week_window,
)
from voicejournal.services.weeks import WeekService, week_service

logger = logging.getLogger(__name__)


class UserService:
    """Service for users and their weekly reflection schedule."""

    def __init__(self, weeks: WeekService = week_service):
        self.weeks = weeks

    async def get_user(self, session: AsyncSession, user_id: UUID) -> User:
        """Load a user or raise NotFoundError."""
        user = await session.get(User, user_id)
        if user is None:
            raise NotFoundError(f"User not found: {user_id}")
        return user

    async def register_user(
        self,
        session: AsyncSession,
        email: str,
        name: str,
        timezone: str | None = None,
        reflection_weekday: int | None = None,
        reflection_time: str | None = None,
        now: datetime | None = None,
    ) -> User:
        """Create a user, compute their first reflection and open their first week.

        Args:
            session: Database session.
            email: Unique email address (stored lowercase).
            name: Display name.
            timezone: IANA timezone (defaults to settings).
            reflection_weekday: 0-6, 0 = Sunday (defaults to settings).
            reflection_time: "HH:MM" local (defaults to settings).
            now: Reference instant for the first schedule computation.

        Returns:
            The created User.
        """
        email = (email or "").strip().lower()
        if not email or not (name or "").strip():
            raise ValidationError("email and name are required")

        timezone = timezone if timezone is not None else settings.default_timezone
        if reflection_weekday is None:
            reflection_weekday = settings.default_reflection_weekday
        reflection_time = reflection_time if reflection_time is not None else settings.default_reflection_time

        validate_weekday(reflection_weekday)
        parse_reflection_time(reflection_time)
        resolve_timezone(timezone)

        existing = await session.execute(select(User).where(User.email == email))
        if existing.scalar_one_or_none() is not None:
            raise ValidationError(f"User already exists: {email}")

        user = User(
            email=email,
            name=name.strip(),
            timezone=timezone,
            reflection_weekday=reflection_weekday,
            reflection_time=reflection_time,
            next_reflection_at=next_reflection_at(
                reflection_weekday, reflection_time, timezone, now=now or utcnow()
            ),
        )
        session.add(user)
        await session.flush()

        await self.weeks.get_or_create_week(session, user, user.next_reflection_at)

        logger.info(
            "Registered user %s; reflections on %s, first at %s",
            user.id,
            describe_schedule(user.reflection_weekday, user.reflection_time, user.timezone),
            user.next_reflection_at.isoformat(),
        )
        return user

    def recompute_next_reflection(self, user: User, now: datetime | None = None) -> datetime:
        """Set ``user.next_reflection_at`` to the next occurrence after ``now``."""
        user.next_reflection_at = next_reflection_at(
            user.reflection_weekday,
            user.reflection_time,
            user.timezone,
            now=now or utcnow(),
        )
        return user.next_reflection_at

    async def update_schedule_preference(
        self,
        session: AsyncSession,
        user_id: UUID,
        reflection_weekday: int | None = None,
        reflection_time: str | None = None,
        timezone: str | None = None,
        location_enabled: bool | None = None,
        now: datetime | None = None,
    ) -> dict:
        """Apply a settings update, moving the open week's boundary if the schedule changed.

        Every provided field is validated before anything is modified. When
        the weekday, time or timezone actually changes, ``next_reflection_at``
        is recomputed immediately and the user's recording week (if any) gets
        its ``reflection_date`` and ``week_end`` moved to the new instant. The
        week's start and its entries stay where they are.

        Args:
            session: Database session.
            user_id: User identifier.
            reflection_weekday: New weekday, 0-6 (0 = Sunday).
            reflection_time: New "HH:MM" local time.
            timezone: New IANA timezone.
            location_enabled: Toggle location capture for new entries.
            now: Reference instant for the schedule computation.

        Returns:
            Dict with the updated schedule and whether the open week moved.
        """
        if reflection_weekday is not None:
            validate_weekday(reflection_weekday)
        if reflection_time is not None:
            parse_reflection_time(reflection_time)
        if timezone is not None:
            resolve_timezone(timezone)

        user = await self.get_user(session, user_id)

        schedule_changed = (
            (reflection_weekday is not None and reflection_weekday != user.reflection_weekday)
            or (reflection_time is not None and reflection_time != user.reflection_time)
            or (timezone is not None and timezone != user.timezone)
        )

        if location_enabled is not None:
            user.location_enabled = location_enabled

        adjusted_week_id = None
        if schedule_changed:
            if reflection_weekday is not None:
                user.reflection_weekday = reflection_weekday
            if reflection_time is not None:
                user.reflection_time = reflection_time
            if timezone is not None:
                user.timezone = timezone

            self.recompute_next_reflection(user, now=now)
            logger.info(
                "Schedule changed for user %s to %s; next reflection at %s",
                user.id,
                describe_schedule(user.reflection_weekday, user.reflection_time, user.timezone),
                user.next_reflection_at.isoformat(),
            )

            open_week = await self.weeks.find_open_week(session, user.id)
            if open_week is not None:
                await self._move_open_week(session, user, open_week)
                adjusted_week_id = str(open_week.id)

        await session.flush()

        return {
            "status": "updated",
            "user_id": str(user.id),
            "schedule_changed": schedule_changed,
            "schedule": user.schedule_to_dict(),
            "adjusted_week_id": adjusted_week_id,
        }

    async def _move_open_week(self, session: AsyncSession, user: User, week: Week) -> None:
        # Start and entries stay put; the closing instant and, when it lands in
        # another ISO week that is still free, the identity follow the schedule.
        week.reflection_date = user.next_reflection_at
        week.week_end = end_of_local_day(user.next_reflection_at, user.timezone)

        window = week_window(user.next_reflection_at, user.timezone)
        if (window.year, window.week_number) != (week.year, week.week_number):
            holder = await self.weeks.find_week_by_period(session, user.id, window.year, window.week_number)
            if holder is None:
                week.year = window.year
                week.week_number = window.week_number
            else:
                logger.warning(
                    "Week %s-W%02d of user %s is taken by week %s; week %s keeps %s-W%02d",
                    window.year,
                    window.week_number,
                    user.id,
                    holder.id,
                    week.id,
                    week.year,
                    week.week_number,
                )

        logger.info(
            "Moved open week %s (%s-W%02d) to end at %s",
            week.id,
            week.year,
            week.week_number,
            week.reflection_date.isoformat(),
        )


# Global singleton instance
user_service = UserService()
