"""MCP resource definitions: read-only context documents for the agent."""

from __future__ import annotations

from types import MappingProxyType
from typing import Awaitable, Callable, Mapping

from .client import JournalOwlClient
from .errors import UnknownResourceError
from .models import format_date

PROFILE_URI = "journalowl://user/profile"
RECENT_ENTRIES_URI = "journalowl://user/recent-entries"
RECENT_ENTRIES_LIMIT = 5
MIME_TYPE = "text/plain"


def make_resources() -> dict[str, dict]:
    """Create MCP resource definitions.

    Returns:
        Dict mapping resource URIs to their definitions.
    """
    return {
        PROFILE_URI: {
            "uri": PROFILE_URI,
            "name": "User Profile",
            "description": "User journaling profile with stats, preferences, and context for AI personalization",
            "mimeType": MIME_TYPE,
        },
        RECENT_ENTRIES_URI: {
            "uri": RECENT_ENTRIES_URI,
            "name": "Recent Journal Entries",
            "description": f"Metadata about the {RECENT_ENTRIES_LIMIT} most recent journal entries for conversation context",
            "mimeType": MIME_TYPE,
        },
    }


async def read_profile(client: JournalOwlClient) -> str:
    profile = await client.get_user_profile()

    return f"""JournalOwl User Profile
=======================

Username: {profile.username}
Email: {profile.email}
Timezone: {profile.timezone}

Journaling Stats:
- Journaling since: {format_date(profile.journaling_since)}
- Total entries: {profile.total_entries}
- Current streak: {profile.current_streak} days

Preferences:
- Writing style: {profile.preferred_writing_style or 'Default'}

Use this context to personalize your responses when helping with journaling."""


async def read_recent_entries(client: JournalOwlClient) -> str:
    page = await client.list_entries(limit=RECENT_ENTRIES_LIMIT)

    if not page.items:
        return "No recent journal entries found. The user may be new to journaling."

    entries = "\n\n".join(
        f"- {entry.title} ({format_date(entry.date)})\n"
        f"  Mood: {entry.mood or 'Not specified'}\n"
        f"  Tags: {', '.join(entry.tags) or 'None'}\n"
        f"  ID: {entry.id}"
        for entry in page.items
    )

    return f"""Recent Journal Entries (Last {len(page.items)})
========================================

{entries}

Use these entries as context when helping the user with their journaling.
You can use journal_get_entry with an ID to read the full content."""


READERS: Mapping[str, Callable[[JournalOwlClient], Awaitable[str]]] = MappingProxyType({
    PROFILE_URI: read_profile,
    RECENT_ENTRIES_URI: read_recent_entries,
})


async def read_resource(client: JournalOwlClient, uri: str) -> str:
    """Read a resource by URI.

    Raises:
        UnknownResourceError: If the URI is not a declared resource
    """
    reader = READERS.get(uri)
    if reader is None:
        raise UnknownResourceError(uri)
    return await reader(client)
