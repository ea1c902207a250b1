"""Shared pytest fixtures for journalowl-mcp tests."""

import json
from typing import Any, Optional

import httpx
import pytest
import pytest_asyncio

from journalowl_mcp.client import JournalOwlClient

BASE_URL = "https://journalowl.test/api/v1"
API_KEY = "test-api-key"

MIN_FINALIZE_LENGTH = 100


def envelope(data: Any) -> dict:
    return {"status": "success", "data": data}


def error_envelope(message: str) -> dict:
    return {"status": "error", "message": message}


class FakeBackend:
    """In-memory stand-in for the JournalOwl API.

    Mimics the real service closely enough for the adapter: default and
    maximum limits, the finalize length check, and error envelopes.
    """

    def __init__(self):
        self.entries: list[dict] = []
        self.reviews: list[dict] = []
        self.profile = {
            "id": "user-1",
            "username": "owl",
            "email": "owl@example.com",
            "timezone": "Europe/Berlin",
            "journalingSince": "2023-03-01T08:00:00.000Z",
            "totalEntries": 42,
            "currentStreak": 7,
            "preferredWritingStyle": "reflective",
        }
        self.style = {
            "currentStyle": "Reflective",
            "styleDescription": "Thoughtful, introspective writing",
            "voiceTone": "Calm",
            "suggestions": ["Write at the same time each day", "Note one gratitude"],
        }
        self.requests: list[httpx.Request] = []
        self.forced: Optional[httpx.Response] = None

    # ---------- seeding ----------

    def add_entry(self, **fields: Any) -> dict:
        n = len(self.entries) + 1
        entry = {
            "id": f"entry-{n}",
            "title": f"Entry {n}",
            "content": f"Content of entry {n}",
            "mood": None,
            "tags": [],
            "status": "in_progress",
            "date": f"2024-01-{n:02d}T09:00:00.000Z" if n <= 28 else "2024-02-01T09:00:00.000Z",
            "createdAt": "2024-01-01T09:00:00.000Z",
            "updatedAt": "2024-01-01T09:00:00.000Z",
        }
        entry.update(fields)
        self.entries.append(entry)
        return entry

    def add_review(self, **fields: Any) -> dict:
        n = len(self.reviews) + 1
        review = {
            "id": f"review-{n}",
            "weekStart": "2024-01-01",
            "weekEnd": "2024-01-07",
            "summary": f"Summary {n}",
            "themes": ["work", "rest"],
            "emotionalTrend": "Steadily improving",
            "insights": ["Sleep matters"],
            "entriesCount": 5,
            "createdAt": "2024-01-08T00:00:00.000Z",
        }
        review.update(fields)
        self.reviews.append(review)
        return review

    # ---------- helpers ----------

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self) -> Any:
        return json.loads(self.last_request.content)

    def _find(self, entry_id: str) -> Optional[dict]:
        return next((e for e in self.entries if e["id"] == entry_id), None)

    @staticmethod
    def _page(items: list, key: str, params: httpx.QueryParams, default: int, cap: int) -> dict:
        limit = min(int(params.get("limit", default)), cap)
        offset = int(params.get("offset", 0))
        chunk = items[offset:offset + limit]
        return {
            key: chunk,
            "pagination": {
                "total": len(items),
                "limit": limit,
                "offset": offset,
                "hasMore": offset + len(chunk) < len(items),
            },
        }

    # ---------- routing ----------

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.forced is not None:
            return self.forced

        path = request.url.path.removeprefix("/api/v1")
        parts = [p for p in path.split("/") if p]
        method = request.method

        if parts[:2] == ["mcp", "entries"]:
            return self._entries(method, parts[2:], request)
        if parts[:3] == ["mcp", "reviews", "weekly"]:
            return self._reviews(parts[3:], request)
        if parts == ["mcp", "user", "profile"]:
            return httpx.Response(200, json=envelope({"profile": self.profile}))
        if parts == ["mcp", "user", "style"]:
            return httpx.Response(200, json=envelope({"style": self.style}))

        return httpx.Response(404, json=error_envelope("Route not found"))

    def _entries(self, method: str, rest: list[str], request: httpx.Request) -> httpx.Response:
        if method == "GET" and not rest:
            params = request.url.params
            items = self.entries
            if "status" in params:
                items = [e for e in items if e["status"] == params["status"]]
            if "tags" in params:
                wanted = set(params["tags"].split(","))
                items = [e for e in items if wanted & set(e["tags"])]
            return httpx.Response(200, json=envelope(self._page(items, "entries", params, 20, 50)))

        if method == "POST" and not rest:
            body = json.loads(request.content)
            content = body["content"]
            entry = self.add_entry(
                title=content.split(".")[0][:40],
                content=content,
                mood=body.get("mood"),
                tags=body.get("tags") or [],
                date=body.get("date", "2024-01-15"),
                status="in_progress",
            )
            metadata = {"timezone": "Europe/Berlin", "language": "en", "writingStyle": "reflective"}
            return httpx.Response(201, json=envelope({"entry": entry, "metadata": metadata}))

        if method == "POST" and rest == ["search"]:
            body = json.loads(request.content)
            query = body["query"].lower()
            limit = min(int(body.get("limit", 10)), 20)
            results = [e for e in self.entries if query in e["content"].lower()][:limit]
            return httpx.Response(
                200, json=envelope({"query": body["query"], "results": results, "count": len(results)})
            )

        entry = self._find(rest[0]) if rest else None
        if entry is None:
            return httpx.Response(404, json=error_envelope("Entry not found"))

        if method == "GET" and len(rest) == 1:
            shown = dict(entry)
            if request.url.params.get("include_analysis") == "false":
                shown.pop("analysis", None)
            return httpx.Response(200, json=envelope({"entry": shown}))

        if method == "POST" and rest[1:] == ["finalize"]:
            if len(entry["content"]) < MIN_FINALIZE_LENGTH:
                return httpx.Response(
                    400,
                    json=error_envelope(
                        f"Entry content must be at least {MIN_FINALIZE_LENGTH} characters to finalize"
                    ),
                )
            entry["status"] = "completed"
            entry["analysis"] = {
                "sentiment": 0.62,
                "themes": ["growth", "work"],
                "insights": ["You write more on weekends"],
            }
            mini_review = {
                "mainTopic": "Career growth",
                "sentiment": {"label": "Positive", "score": 0.62},
                "themes": ["growth", "work"],
                "keyInsight": "Progress feels steadier than last month.",
            }
            return httpx.Response(200, json=envelope({"entry": entry, "miniReview": mini_review}))

        return httpx.Response(405, json=error_envelope("Method not allowed"))

    def _reviews(self, rest: list[str], request: httpx.Request) -> httpx.Response:
        if not rest:
            params = request.url.params
            return httpx.Response(200, json=envelope(self._page(self.reviews, "reviews", params, 10, 50)))

        if rest[0] == "latest":
            review = self.reviews[-1] if self.reviews else None
        else:
            review = next((r for r in self.reviews if r["id"] == rest[0]), None)
        if review is None:
            return httpx.Response(404, json=error_envelope("Weekly review not found"))
        return httpx.Response(200, json=envelope({"review": review}))


@pytest.fixture
def backend():
    """A fresh fake backend."""
    return FakeBackend()


@pytest.fixture
def transport(backend):
    return httpx.MockTransport(backend.handler)


@pytest_asyncio.fixture
async def client(transport):
    """A JournalOwlClient wired to the fake backend."""
    async with JournalOwlClient(API_KEY, base_url=BASE_URL, transport=transport) as c:
        yield c


@pytest.fixture
def long_content():
    return (
        "Today I finally finished the migration at work. It took three weeks "
        "of careful planning, and I am proud of how calmly the team handled it."
    )
