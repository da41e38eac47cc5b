"""User registration and schedule preference tools."""

from voicejournal.db import get_session
from voicejournal.errors import JournalError
from voicejournal.services import user_service
from voicejournal.services.schedule import describe_schedule
from voicejournal.tools.responses import error_response, parse_uuid


async def register_user(
    email: str,
    name: str,
    timezone: str | None = None,
    reflection_weekday: int | None = None,
    reflection_time: str | None = None,
) -> dict:
    """Register a journaling user and open their first week.

    Args:
        email: Unique email address.
        name: Display name.
        timezone: IANA timezone, e.g. "America/New_York".
        reflection_weekday: Day the weekly reflection runs, 0-6 (0 = Sunday).
        reflection_time: Local time of the reflection, "HH:MM" 24h.

    Returns:
        dict with status "created" and the user, including next_reflection_at.

    Example:
        >>> register_user(email="ada@example.com", name="Ada", reflection_weekday=0)
        {"status": "created", "user": {"id": "...", "next_reflection_at": "..."}}
    """
    try:
        async with get_session() as session:
            user = await user_service.register_user(
                session=session,
                email=email,
                name=name,
                timezone=timezone,
                reflection_weekday=reflection_weekday,
                reflection_time=reflection_time,
            )
            return {"status": "created", "user": user.to_dict()}
    except JournalError as exc:
        return error_response(exc)


async def get_schedule(user_id: str) -> dict:
    """Get a user's reflection schedule and the next time it runs."""
    try:
        uid = parse_uuid(user_id, "user_id")
        async with get_session() as session:
            user = await user_service.get_user(session, uid)
            return {
                "status": "ok",
                "user_id": str(user.id),
                "schedule": user.schedule_to_dict(),
                "description": describe_schedule(
                    user.reflection_weekday, user.reflection_time, user.timezone
                ),
            }
    except JournalError as exc:
        return error_response(exc)


async def update_schedule(
    user_id: str,
    reflection_weekday: int | None = None,
    reflection_time: str | None = None,
    timezone: str | None = None,
    location_enabled: bool | None = None,
) -> dict:
    """Change when a user's weekly reflection runs.

    Only the provided fields change. When the schedule moves, the week
    currently recording is re-targeted to the new reflection instant; its
    entries stay in it.

    Args:
        user_id: User UUID.
        reflection_weekday: New weekday, 0-6 (0 = Sunday).
        reflection_time: New local time, "HH:MM" 24h.
        timezone: New IANA timezone.
        location_enabled: Whether new entries keep their location.

    Returns:
        dict with status "updated", the schedule and the adjusted week id.
    """
    try:
        uid = parse_uuid(user_id, "user_id")
        async with get_session() as session:
            return await user_service.update_schedule_preference(
                session=session,
                user_id=uid,
                reflection_weekday=reflection_weekday,
                reflection_time=reflection_time,
                timezone=timezone,
                location_enabled=location_enabled,
            )
    except JournalError as exc:
        return error_response(exc)
