"""HTTP client for the JournalOwl REST API."""

from __future__ import annotations

import logging
from typing import Any, Callable, Optional, TypeVar
from urllib.parse import quote

import httpx

from .config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, VERSION, ServerConfig
from .errors import APIError, ConfigurationError, RequestFailedError, UnreachableError
from .models import (
    CreatedEntry,
    FinalizedEntry,
    JournalEntry,
    Page,
    SearchResults,
    UserProfile,
    WeeklyReview,
    WritingStyle,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

USER_AGENT = f"journalowl-mcp/{VERSION}"
LATEST_REVIEW = "latest"


def _drop_none(values: dict[str, Any]) -> dict[str, Any]:
    return {k: v for k, v in values.items() if v is not None}


def _error_message(response: httpx.Response) -> str:
    """Pull the backend's error message out of a failed response."""
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return response.reason_phrase or f"HTTP {response.status_code}"


class JournalOwlClient:
    """Async client for the JournalOwl MCP endpoints.

    Every method performs exactly one HTTP call and returns the unwrapped
    `data` payload of the backend's `{status, data, message}` envelope,
    parsed into a model. Failures raise:

    - APIError: the backend answered with an error status or error envelope
    - UnreachableError: no response was received
    - RequestFailedError: anything else went wrong forming or reading the request
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the client.

        Args:
            api_key: JournalOwl API key (required)
            base_url: API base URL, including the version prefix
            timeout: Per-request timeout in seconds
            transport: Optional httpx transport, used by tests

        Raises:
            ConfigurationError: If api_key is empty
        """
        if not api_key:
            raise ConfigurationError(
                "API key is required. Set JOURNALOWL_API_KEY environment variable."
            )

        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            headers={
                "X-API-Key": api_key,
                "Content-Type": "application/json",
                "User-Agent": USER_AGENT,
            },
            transport=transport,
        )

    @classmethod
    def from_config(
        cls, config: ServerConfig, transport: Optional[httpx.AsyncBaseTransport] = None
    ) -> "JournalOwlClient":
        return cls(
            api_key=config.api_key,
            base_url=config.base_url,
            timeout=config.timeout,
            transport=transport,
        )

    async def close(self) -> None:
        """Close the HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "JournalOwlClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Send one request and return the envelope's `data` payload.

        Args:
            method: HTTP method
            path: API path relative to the base URL
            params: Query parameters; None values are dropped
            json: JSON body; None values are dropped

        Returns:
            The `data` member of a success envelope
        """
        logger.debug(f"{method} {path}")

        try:
            response = await self._client.request(
                method,
                path,
                params=_drop_none(params) if params else None,
                json=_drop_none(json) if json is not None else None,
            )
            response.raise_for_status()

        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            message = _error_message(e.response)
            logger.warning(f"{method} {path} failed with {status}: {message}")
            raise APIError(status, message) from e

        except (httpx.UnsupportedProtocol, httpx.LocalProtocolError, httpx.InvalidURL) as e:
            logger.warning(f"{method} {path} could not be sent: {e}")
            raise RequestFailedError(str(e), e) from e

        except httpx.TransportError as e:
            logger.warning(f"{method} {path} got no response: {e}")
            raise UnreachableError(e) from e

        except httpx.HTTPError as e:
            logger.warning(f"{method} {path} failed: {e}")
            raise RequestFailedError(str(e), e) from e

        try:
            body = response.json()
        except ValueError as e:
            raise RequestFailedError(f"Invalid JSON in response from {path}", e) from e

        if not isinstance(body, dict):
            raise RequestFailedError(f"Unexpected response body from {path}")

        if body.get("status") == "error" or body.get("data") is None:
            message = body.get("message") or "Response contained no data"
            logger.warning(f"{method} {path} returned an error envelope: {message}")
            raise APIError(response.status_code, message)

        return body["data"]

    @staticmethod
    def _parse(data: Any, parse: Callable[[Any], T], what: str) -> T:
        try:
            return parse(data)
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            raise RequestFailedError(f"Unexpected {what} payload: {e!r}", e) from e

    # ========== ENTRIES ==========

    async def list_entries(
        self,
        limit: Optional[int] = None,
        offset: Optional[int] = None,
        from_date: Optional[str] = None,
        to_date: Optional[str] = None,
        status: Optional[str] = None,
        tags: Optional[str] = None,
    ) -> Page[JournalEntry]:
        """List journal entries, newest first, with optional filters.

        `tags` is a comma-separated list. The backend defaults limit to 20
        and caps it at 50.
        """
        data = await self._request(
            "GET",
            "/mcp/entries",
            params={
                "limit": limit,
                "offset": offset,
                "from_date": from_date,
                "to_date": to_date,
                "status": status,
                "tags": tags,
            },
        )
        return self._parse(
            data, lambda d: Page.from_dict(d, "entries", JournalEntry.from_dict), "entries"
        )

    async def get_entry(self, entry_id: str, include_analysis: bool = True) -> JournalEntry:
        data = await self._request(
            "GET",
            f"/mcp/entries/{quote(entry_id, safe='')}",
            params={"include_analysis": include_analysis},
        )
        return self._parse(data, lambda d: JournalEntry.from_dict(d["entry"]), "entry")

    async def create_entry(
        self,
        content: str,
        mood: Optional[str] = None,
        tags: Optional[list[str]] = None,
        date: Optional[str] = None,
    ) -> CreatedEntry:
        """Create an entry. The backend always creates it as in_progress."""
        data = await self._request(
            "POST",
            "/mcp/entries",
            json={"content": content, "mood": mood, "tags": tags, "date": date},
        )
        return self._parse(data, CreatedEntry.from_dict, "created entry")

    async def finalize_entry(self, entry_id: str) -> FinalizedEntry:
        """Generate AI analysis for an entry and mark it completed.

        The backend rejects entries with less than 100 characters of content.
        """
        data = await self._request("POST", f"/mcp/entries/{quote(entry_id, safe='')}/finalize")
        return self._parse(data, FinalizedEntry.from_dict, "finalized entry")

    async def search_entries(self, query: str, limit: Optional[int] = None) -> SearchResults:
        data = await self._request(
            "POST",
            "/mcp/entries/search",
            json={"query": query, "limit": limit},
        )
        return self._parse(data, SearchResults.from_dict, "search")

    # ========== REVIEWS ==========

    async def list_weekly_reviews(
        self, limit: Optional[int] = None, offset: Optional[int] = None
    ) -> Page[WeeklyReview]:
        data = await self._request(
            "GET",
            "/mcp/reviews/weekly",
            params={"limit": limit, "offset": offset},
        )
        return self._parse(
            data, lambda d: Page.from_dict(d, "reviews", WeeklyReview.from_dict), "reviews"
        )

    async def get_weekly_review(self, review_id: str = LATEST_REVIEW) -> WeeklyReview:
        """Get a weekly review by ID, or the most recent one with "latest"."""
        data = await self._request("GET", f"/mcp/reviews/weekly/{quote(review_id, safe='')}")
        return self._parse(data, lambda d: WeeklyReview.from_dict(d["review"]), "review")

    # ========== USER ==========

    async def get_user_profile(self) -> UserProfile:
        data = await self._request("GET", "/mcp/user/profile")
        return self._parse(data, lambda d: UserProfile.from_dict(d["profile"]), "profile")

    async def get_writing_style(self) -> WritingStyle:
        data = await self._request("GET", "/mcp/user/style")
        return self._parse(data, lambda d: WritingStyle.from_dict(d["style"]), "style")
