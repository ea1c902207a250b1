"""Tests for MCP resource definitions and reads."""

import pytest

from journalowl_mcp.errors import UnknownResourceError
from journalowl_mcp.resources import (
    PROFILE_URI,
    READERS,
    RECENT_ENTRIES_URI,
    make_resources,
    read_resource,
)


class TestMakeResources:
    def test_declared_resources(self):
        resources = make_resources()

        assert list(resources) == [PROFILE_URI, RECENT_ENTRIES_URI]
        for uri, resource in resources.items():
            assert resource["uri"] == uri
            assert resource["mimeType"] == "text/plain"
            assert resource["name"]
            assert resource["description"]

    def test_every_resource_has_a_reader(self):
        assert set(make_resources()) == set(READERS)


class TestReadResource:
    @pytest.mark.asyncio
    async def test_profile(self, client, backend):
        text = await read_resource(client, PROFILE_URI)

        assert text.startswith("JournalOwl User Profile")
        assert "Username: owl" in text
        assert "Timezone: Europe/Berlin" in text
        assert "- Journaling since: 2023-03-01" in text
        assert "- Total entries: 42" in text
        assert "- Current streak: 7 days" in text
        assert "- Writing style: reflective" in text
        assert len(backend.requests) == 1

    @pytest.mark.asyncio
    async def test_profile_default_style(self, client, backend):
        backend.profile["preferredWritingStyle"] = None

        text = await read_resource(client, PROFILE_URI)
        assert "- Writing style: Default" in text

    @pytest.mark.asyncio
    async def test_recent_entries(self, client, backend):
        for _ in range(8):
            backend.add_entry(mood="calm", tags=["daily"])

        text = await read_resource(client, RECENT_ENTRIES_URI)

        assert text.startswith("Recent Journal Entries (Last 5)")
        assert "- Entry 1 (2024-01-01)" in text
        assert "  Mood: calm" in text
        assert "  Tags: daily" in text
        assert "  ID: entry-5" in text
        assert "entry-6" not in text
        assert "journal_get_entry" in text

        assert len(backend.requests) == 1
        assert backend.last_request.url.params["limit"] == "5"

    @pytest.mark.asyncio
    async def test_recent_entries_empty(self, client):
        text = await read_resource(client, RECENT_ENTRIES_URI)
        assert text == "No recent journal entries found. The user may be new to journaling."

    @pytest.mark.asyncio
    async def test_unknown_resource_makes_no_call(self, client, backend):
        with pytest.raises(UnknownResourceError, match="Unknown resource: journalowl://user/secrets"):
            await read_resource(client, "journalowl://user/secrets")
        assert backend.requests == []
