"""Background scheduler that runs each user's weekly reflection when it comes due."""

import asyncio
import contextlib
import logging
from datetime import datetime
from typing import Any
from uuid import UUID

from sqlalchemy import select

from voicejournal.config import settings
from voicejournal.db import get_session
from voicejournal.errors import StateConflictError
from voicejournal.models import User, WeekStatus
from voicejournal.services.reflection import ReflectionService, SessionFactory, reflection_service
from voicejournal.services.schedule import add_local_weeks, to_naive_utc, utcnow
from voicejournal.services.users import UserService, user_service
from voicejournal.services.weeks import WeekService, week_service

logger = logging.getLogger(__name__)


class ReflectionScheduler:
    """Periodically finds users whose reflection is due and processes their week."""

    def __init__(
        self,
        reflection: ReflectionService = reflection_service,
        users: UserService = user_service,
        weeks: WeekService = week_service,
        session_factory: SessionFactory = get_session,
        interval_seconds: float = settings.reflection_check_interval_seconds,
    ):
        self.reflection = reflection
        self.users = users
        self.weeks = weeks
        self.session_factory = session_factory
        self._interval_seconds = interval_seconds
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the ticker task once."""
        if self.running:
            return
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run_loop(), name="voicejournal-reflection-scheduler")
        logger.info("Reflection scheduler started (every %gs)", self._interval_seconds)

    async def stop(self) -> None:
        """Cancel the ticker task and wait for it to finish."""
        if self._task is None:
            return
        self._task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._task
        self._task = None
        logger.info("Reflection scheduler stopped")

    async def _run_loop(self) -> None:
        while True:
            try:
                await self.tick()
            except Exception:  # noqa: BLE001
                logger.exception("Reflection scheduler tick failed")
            await asyncio.sleep(self._interval_seconds)

    async def tick(self, now: datetime | None = None) -> dict[str, int]:
        """Process every user whose next reflection is at or before ``now``.

        One user's failure is logged and counted; the others still run.

        Returns:
            ``{"due": n, "processed": n, "failed": n}``
        """
        now = to_naive_utc(now) if now else utcnow()

        async with self.session_factory() as session:
            result = await session.execute(
                select(User.id)
                .where(User.next_reflection_at <= now)
                .order_by(User.next_reflection_at)
            )
            due_user_ids = list(result.scalars().all())

        processed = failed = 0
        for user_id in due_user_ids:
            try:
                outcome = await self.process_user_reflection(user_id, now)
            except Exception:  # noqa: BLE001
                logger.exception("Scheduled reflection failed for user %s", user_id)
                failed += 1
                continue

            if outcome["status"] == WeekStatus.COMPLETE.value:
                processed += 1
            elif outcome["status"] == WeekStatus.ERROR.value:
                failed += 1

        if due_user_ids:
            logger.info(
                "Reflection tick: %d due, %d processed, %d failed",
                len(due_user_ids),
                processed,
                failed,
            )
        return {"due": len(due_user_ids), "processed": processed, "failed": failed}

    async def process_user_reflection(self, user_id: UUID, now: datetime | None = None) -> dict[str, Any]:
        """Run one user's reflection cycle.

        Processes the most recent recording week whose reflection instant has
        passed, opens the following week, then moves ``next_reflection_at``
        past ``now``. Users without a due week only get the recompute.

        Args:
            user_id: User identifier.
            now: Reference instant (defaults to the current time).

        Returns:
            Dict with the processed week id (or None) and its resulting status:
            ``complete``, ``error``, ``skipped``, or the conflict reason
            (e.g. ``already_processing``) when the week could not be claimed.
        """
        now = to_naive_utc(now) if now else utcnow()

        async with self.session_factory() as session:
            due_week = await self.weeks.find_due_week(session, user_id, now)
            due_week_id = due_week.id if due_week is not None else None

        status = "skipped"
        if due_week_id is not None:
            try:
                week = await self.reflection.process_week(due_week_id)
                status = week.status.value
            except StateConflictError as exc:
                # Claimed elsewhere (e.g. a manual run) or already finished
                logger.warning("Week %s of user %s not processed: %s", due_week_id, user_id, exc.message)
                status = exc.reason
            except Exception:  # noqa: BLE001
                # process_week has already moved the week to error
                logger.exception("Reflection for week %s of user %s failed", due_week_id, user_id)
                status = WeekStatus.ERROR.value

        async with self.session_factory() as session:
            user = await self.users.get_user(session, user_id)
            if due_week_id is not None:
                await self.weeks.get_or_create_week(
                    session, user, add_local_weeks(user.next_reflection_at, user.timezone)
                )
            self.users.recompute_next_reflection(user, now=now)
            await session.flush()
            next_at = user.next_reflection_at

        logger.info(
            "User %s reflection cycle %s; next reflection at %s",
            user_id,
            status,
            next_at.isoformat(),
        )
        return {
            "user_id": str(user_id),
            "week_id": str(due_week_id) if due_week_id is not None else None,
            "status": status,
            "next_reflection_at": next_at.isoformat(),
        }


# Global singleton instance
reflection_scheduler = ReflectionScheduler()
