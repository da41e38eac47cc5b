"""FastMCP server for voicejournal - weekly reflections over voice diary entries."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastmcp import FastMCP
from fastmcp.server.auth.providers.github import GitHubProvider
from starlette.requests import Request
from starlette.responses import PlainTextResponse

from voicejournal.config import settings
from voicejournal.db import close_db
from voicejournal.services import reflection_scheduler

# Suppress noisy MCP streamable_http ClosedResourceError logs (known issue with stateless mode)
logging.getLogger("mcp.server.streamable_http").setLevel(logging.CRITICAL)
from voicejournal import tools

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(server: FastMCP) -> AsyncIterator[None]:
    """Run the reflection scheduler for as long as the server is up."""
    reflection_scheduler.start()
    try:
        yield
    finally:
        await reflection_scheduler.stop()
        await close_db()


# Configure GitHub OAuth when credentials are present
auth = None
if settings.github_client_id:
    auth = GitHubProvider(
        client_id=settings.github_client_id,
        client_secret=settings.github_client_secret,
        base_url=f"http://localhost:{settings.voicejournal_port}",
    )

# Initialize FastMCP server (stateless for HMR compatibility)
mcp = FastMCP(
    "voicejournal",
    auth=auth,
    lifespan=lifespan,
    stateless_http=True,
    json_response=True,
)


# Health check endpoint
@mcp.custom_route("/health", methods=["GET"])
async def health_check(request: Request) -> PlainTextResponse:
    """Health check endpoint for container orchestration."""
    return PlainTextResponse("OK")


# Register MCP tools
@mcp.tool()
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
        dict with status "created" and the user.
    """
    return await tools.register_user(
        email=email,
        name=name,
        timezone=timezone,
        reflection_weekday=reflection_weekday,
        reflection_time=reflection_time,
    )


@mcp.tool()
async def get_schedule(user_id: str) -> dict:
    """Get a user's reflection schedule and the next time it runs."""
    return await tools.get_schedule(user_id=user_id)


@mcp.tool()
async def update_schedule(
    user_id: str,
    reflection_weekday: int | None = None,
    reflection_time: str | None = None,
    timezone: str | None = None,
    location_enabled: bool | None = None,
) -> dict:
    """Change when a user's weekly reflection runs.

    The week currently recording is re-targeted to the new reflection time.

    Args:
        user_id: User UUID.
        reflection_weekday: New weekday, 0-6 (0 = Sunday).
        reflection_time: New local time, "HH:MM" 24h.
        timezone: New IANA timezone.
        location_enabled: Whether new entries keep their location.

    Returns:
        dict with status "updated", the schedule and the adjusted week id.
    """
    return await tools.update_schedule(
        user_id=user_id,
        reflection_weekday=reflection_weekday,
        reflection_time=reflection_time,
        timezone=timezone,
        location_enabled=location_enabled,
    )


@mcp.tool()
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
        audio_ref: Reference to the uploaded audio file.
        duration: Length of the recording in seconds.
        recorded_at: ISO-8601 time of recording (defaults to now).
        location: Optional fix with latitude, longitude, accuracy and address fields.

    Returns:
        dict with status "created" and the entry.
    """
    return await tools.record_entry(
        user_id=user_id,
        audio_ref=audio_ref,
        duration=duration,
        recorded_at=recorded_at,
        location=location,
    )


@mcp.tool()
async def list_entries(user_id: str, week_id: str | None = None) -> dict:
    """List a user's entries, newest first, optionally for a single week."""
    return await tools.list_entries(user_id=user_id, week_id=week_id)


@mcp.tool()
async def delete_entry(entry_id: str) -> dict:
    """Delete a diary entry."""
    return await tools.delete_entry(entry_id=entry_id)


@mcp.tool()
async def list_weeks(user_id: str) -> dict:
    """List a user's weeks, newest first."""
    return await tools.list_weeks(user_id=user_id)


@mcp.tool()
async def get_week(week_id: str) -> dict:
    """Get one week with its reflection insights and entries (read-only)."""
    return await tools.get_week(week_id=week_id)


@mcp.tool()
async def generate_reflection(week_id: str) -> dict:
    """Process a recording week's reflection now.

    Args:
        week_id: Week UUID.

    Returns:
        dict with the processed week, or an error whose reason is one of
        already_complete, already_processing, in_error_state or not_found.
    """
    return await tools.generate_reflection(week_id=week_id)


# ASGI app for uvicorn
app = mcp.http_app()

if __name__ == "__main__":
    logging.basicConfig(
        level=logging.DEBUG if settings.voicejournal_debug else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    mcp.run(
        transport="http",
        host=settings.voicejournal_host,
        port=settings.voicejournal_port,
        stateless_http=True,
    )
