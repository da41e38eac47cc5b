"""Helpers shared by integration tests."""

from datetime import datetime

from voicejournal.db.connection import async_session_factory

# Sunday 2024-03-17 18:00 America/New_York (EDT, UTC-4)
REFLECTION_AT = datetime(2024, 3, 17, 22, 0)


async def reload(model, obj_id):
    """Read a row back in a fresh session."""
    async with async_session_factory() as session:
        return await session.get(model, obj_id)
