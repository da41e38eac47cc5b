"""Week lookup and creation."""

import logging
from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from voicejournal.errors import NotFoundError
from voicejournal.models import Entry, User, Week, WeekStatus
from voicejournal.services.schedule import add_local_weeks, week_window

logger = logging.getLogger(__name__)


class WeekService:
    """Service for locating, creating and reading weeks."""

    async def get_week(self, session: AsyncSession, week_id: UUID) -> Week:
        """Load a week or raise NotFoundError."""
        week = await session.get(Week, week_id)
        if week is None:
            raise NotFoundError(f"Week not found: {week_id}")
        return week

    async def find_week_by_period(
        self,
        session: AsyncSession,
        user_id: UUID,
        year: int,
        week_number: int,
    ) -> Week | None:
        """The user's week with the given ISO week-year and week, if any."""
        result = await session.execute(
            select(Week).where(
                Week.user_id == user_id,
                Week.year == year,
                Week.week_number == week_number,
            )
        )
        return result.scalar_one_or_none()

    async def get_or_create_week(
        self,
        session: AsyncSession,
        user: User,
        reflection_at: datetime,
    ) -> Week:
        """Return the user's recording week ending at ``reflection_at``, creating it if needed.

        Week identity is (user, ISO week-year, ISO week) of the reflection
        instant in the user's timezone, so calling this twice for the same
        period returns the same row. A period whose week has already left
        ``recording`` (processed early, or re-dated by a schedule edit) is
        never handed back: the following local week is used instead.

        Args:
            session: Database session.
            user: Owner of the week.
            reflection_at: Naive UTC reflection instant closing the week.

        Returns:
            The existing or newly created recording Week.
        """
        window = week_window(reflection_at, user.timezone)
        existing = await self.find_week_by_period(session, user.id, window.year, window.week_number)
        while existing is not None and existing.status != WeekStatus.RECORDING:
            logger.info(
                "Week %s-W%02d of user %s is %s; opening the following week",
                window.year,
                window.week_number,
                user.id,
                existing.status.value,
            )
            reflection_at = add_local_weeks(reflection_at, user.timezone)
            window = week_window(reflection_at, user.timezone)
            existing = await self.find_week_by_period(session, user.id, window.year, window.week_number)

        if existing is not None:
            return existing

        week = Week(
            user_id=user.id,
            week_number=window.week_number,
            year=window.year,
            week_start=window.week_start,
            week_end=window.week_end,
            reflection_date=window.reflection_date,
            status=WeekStatus.RECORDING,
        )
        session.add(week)
        await session.flush()

        logger.info(
            "Created week %s for user %s (%s-W%02d, reflects at %s)",
            week.id,
            user.id,
            week.year,
            week.week_number,
            week.reflection_date.isoformat(),
        )
        return week

    async def find_due_week(
        self,
        session: AsyncSession,
        user_id: UUID,
        now: datetime,
    ) -> Week | None:
        """Most recent recording week whose reflection instant has passed."""
        result = await session.execute(
            select(Week)
            .where(
                Week.user_id == user_id,
                Week.status == WeekStatus.RECORDING,
                Week.reflection_date <= now,
            )
            .order_by(Week.reflection_date.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def find_open_week(self, session: AsyncSession, user_id: UUID) -> Week | None:
        """The user's latest recording week, if any."""
        result = await session.execute(
            select(Week)
            .where(Week.user_id == user_id, Week.status == WeekStatus.RECORDING)
            .order_by(Week.reflection_date.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def find_week_for_instant(
        self,
        session: AsyncSession,
        user_id: UUID,
        instant: datetime,
    ) -> Week | None:
        """Earliest recording week that is still open at ``instant``."""
        result = await session.execute(
            select(Week)
            .where(
                Week.user_id == user_id,
                Week.status == WeekStatus.RECORDING,
                Week.reflection_date > instant,
            )
            .order_by(Week.reflection_date)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def list_weeks(self, session: AsyncSession, user_id: UUID) -> list[Week]:
        """All of a user's weeks, newest first."""
        result = await session.execute(
            select(Week)
            .where(Week.user_id == user_id)
            .order_by(Week.year.desc(), Week.week_number.desc())
        )
        return list(result.scalars().all())

    async def list_entries(self, session: AsyncSession, week_id: UUID) -> list[Entry]:
        """A week's entries in recording order."""
        result = await session.execute(
            select(Entry).where(Entry.week_id == week_id).order_by(Entry.recorded_at)
        )
        return list(result.scalars().all())


# Global singleton instance
week_service = WeekService()
