"""Shared helpers for shaping tool results."""

from uuid import UUID

from voicejournal.errors import JournalError, ValidationError


def parse_uuid(value: str, field: str) -> UUID:
    """Parse a tool's string identifier, raising ValidationError if malformed."""
    try:
        return UUID(str(value))
    except ValueError as exc:
        raise ValidationError(f"Invalid {field} format: {value}") from exc


def error_response(exc: JournalError) -> dict:
    return {
        "status": "error",
        "reason": exc.reason,
        "message": exc.message,
    }
