"""Diary entry tools."""

from datetime import datetime

from voicejournal.db import get_session
from voicejournal.errors import JournalError, ValidationError
from voicejournal.services import entry_service
from voicejournal.tools.responses import error_response, parse_uuid


async def record_entry(
    user_id: str,
    audio_ref: str,
    duration: float,
    recorded_at: str | None = None,
    location: dict | None = None,
) -> dict:
    """Record a voice diary entry into the user's current week.

    Args:
        user_id: User UUID.
        audio_ref: Reference to the uploaded audio file, e.g. "/uploads/a.webm".
        duration: Length of the recording in seconds.
        recorded_at: ISO-8601 time of recording (defaults to now).
        location: Optional fix with latitude, longitude, accuracy and
            address fields. Ignored when the user disabled location.

    Returns:
        dict with status "created" and the entry.
    """
    try:
        uid = parse_uuid(user_id, "user_id")
        when = None
        if recorded_at:
            try:
                when = datetime.fromisoformat(recorded_at)
            except ValueError as exc:
                raise ValidationError(f"Invalid recorded_at: {recorded_at}") from exc

        async with get_session() as session:
            entry = await entry_service.record_entry(
                session=session,
                user_id=uid,
                audio_ref=audio_ref,
                duration=duration,
                recorded_at=when,
                location=location,
            )
            return {"status": "created", "entry": entry.to_dict()}
    except JournalError as exc:
        return error_response(exc)


async def list_entries(user_id: str, week_id: str | None = None) -> dict:
    """List a user's entries, newest first, optionally for a single week."""
    try:
        uid = parse_uuid(user_id, "user_id")
        wid = parse_uuid(week_id, "week_id") if week_id else None
        async with get_session() as session:
            entries = await entry_service.list_entries(session, uid, week_id=wid)
            return {
                "status": "ok",
                "count": len(entries),
                "entries": [entry.to_dict() for entry in entries],
            }
    except JournalError as exc:
        return error_response(exc)


async def delete_entry(entry_id: str) -> dict:
    try:
        eid = parse_uuid(entry_id, "entry_id")
        async with get_session() as session:
            await entry_service.delete_entry(session, eid)
            return {"status": "deleted", "entry_id": str(eid)}
    except JournalError as exc:
        return error_response(exc)
