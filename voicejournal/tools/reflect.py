"""generate_reflection tool for processing a week's reflection on demand."""

from voicejournal.errors import JournalError
from voicejournal.services import reflection_service
from voicejournal.tools.responses import error_response, parse_uuid


async def generate_reflection(week_id: str) -> dict:
    """Process a recording week now instead of waiting for its scheduled time.

    Transcribes the week's entries, analyzes where they were recorded and
    generates the weekly summary. Only weeks still in "recording" are
    accepted.

    Args:
        week_id: Week UUID.

    Returns:
        dict with status "complete" and the processed week, or an error with
        reason "already_complete", "already_processing", "in_error_state",
        "not_found", "invalid" or the failed collaborator.

    Example:
        >>> generate_reflection(week_id="...")
        {"status": "complete", "week": {"summary": "...", "insights": {...}}}
    """
    try:
        wid = parse_uuid(week_id, "week_id")
        week = await reflection_service.process_week(wid)
    except JournalError as exc:
        return error_response(exc)

    return {"status": week.status.value, "week": week.to_dict()}
