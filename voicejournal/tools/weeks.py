"""Week reading tools."""

from voicejournal.db import get_session
from voicejournal.errors import JournalError
from voicejournal.services import user_service, week_service
from voicejournal.tools.responses import error_response, parse_uuid


async def list_weeks(user_id: str) -> dict:
    """List a user's weeks, newest first, without transcriptions."""
    try:
        uid = parse_uuid(user_id, "user_id")
        async with get_session() as session:
            await user_service.get_user(session, uid)
            weeks = await week_service.list_weeks(session, uid)

            items = []
            for week in weeks:
                data = week.to_dict()
                data.pop("transcriptions")
                items.append(data)
            return {"status": "ok", "count": len(items), "weeks": items}
    except JournalError as exc:
        return error_response(exc)


async def get_week(week_id: str) -> dict:
    """Get one week with its reflection insights and entries.

    Read-only: this never triggers processing.

    Args:
        week_id: Week UUID.

    Returns:
        dict with the week (status, transcriptions, summary, insights) and
        its entries in recording order.
    """
    try:
        wid = parse_uuid(week_id, "week_id")
        async with get_session() as session:
            week = await week_service.get_week(session, wid)
            entries = await week_service.list_entries(session, wid)
            return {
                "status": "ok",
                "week": week.to_dict(),
                "entries": [entry.to_dict() for entry in entries],
            }
    except JournalError as exc:
        return error_response(exc)
