"""MCP tool implementations for voicejournal."""

from voicejournal.tools.entries import delete_entry, list_entries, record_entry
from voicejournal.tools.reflect import generate_reflection
from voicejournal.tools.users import get_schedule, register_user, update_schedule
from voicejournal.tools.weeks import get_week, list_weeks

__all__ = [
    "register_user",
    "get_schedule",
    "update_schedule",
    "record_entry",
    "list_entries",
    "delete_entry",
    "list_weeks",
    "get_week",
    "generate_reflection",
]
