"""Transfer shapes for JournalOwl records and the text helpers used to render them."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar

T = TypeVar("T")

PREVIEW_LENGTH = 150
SENTIMENT_THRESHOLD = 0.3


class EntryStatus(Enum):
    """Lifecycle status of a journal entry."""
    DRAFT = "draft"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"


def format_date(value: Optional[str]) -> str:
    """Render an ISO 8601 date or timestamp as YYYY-MM-DD.

    Values that do not parse are returned unchanged.
    """
    if not value:
        return ""
    try:
        return datetime.fromisoformat(value).date().isoformat()
    except ValueError:
        return value


def sentiment_label(score: float) -> str:
    """Map a sentiment score in [-1, 1] to a label.

    Thresholds are strict: exactly 0.3 or -0.3 is Neutral.
    """
    if score > SENTIMENT_THRESHOLD:
        return "Positive"
    if score < -SENTIMENT_THRESHOLD:
        return "Negative"
    return "Neutral"


def content_preview(content: str, length: int = PREVIEW_LENGTH) -> str:
    """First `length` characters of content followed by an ellipsis.

    The ellipsis is appended even when content is shorter than `length`.
    """
    return f"{content[:length]}..."


def bullet_list(items: list[str] | tuple[str, ...]) -> str:
    return "\n".join(f"- {item}" for item in items)


def _strings(value: Any) -> tuple[str, ...]:
    if not value:
        return ()
    return tuple(str(v) for v in value)


@dataclass(frozen=True)
class EntryAnalysis:
    """AI analysis attached to an entry once it has been finalized."""
    sentiment: Optional[float] = None
    themes: tuple[str, ...] = ()
    insights: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EntryAnalysis":
        sentiment = data.get("sentiment")
        return cls(
            sentiment=float(sentiment) if sentiment is not None else None,
            themes=_strings(data.get("themes")),
            insights=_strings(data.get("insights")),
        )


@dataclass(frozen=True)
class JournalEntry:
    """A single journal entry as stored by the backend."""
    id: str
    title: str
    content: str
    status: EntryStatus
    date: str
    created_at: str = ""
    updated_at: str = ""
    mood: Optional[str] = None
    tags: tuple[str, ...] = ()
    analysis: Optional[EntryAnalysis] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JournalEntry":
        analysis = data.get("analysis")
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "",
            content=data.get("content") or "",
            status=EntryStatus(data.get("status", EntryStatus.DRAFT.value)),
            date=data.get("date") or "",
            created_at=data.get("createdAt") or "",
            updated_at=data.get("updatedAt") or "",
            mood=data.get("mood") or None,
            tags=_strings(data.get("tags")),
            analysis=EntryAnalysis.from_dict(analysis) if analysis else None,
        )


@dataclass(frozen=True)
class EntryMetadata:
    """Settings the backend applied when creating an entry."""
    timezone: str = ""
    language: str = ""
    writing_style: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EntryMetadata":
        return cls(
            timezone=data.get("timezone") or "",
            language=data.get("language") or "",
            writing_style=data.get("writingStyle") or "",
        )


@dataclass(frozen=True)
class MiniReview:
    """Short analysis returned by the finalize operation."""
    main_topic: str
    sentiment_label: str
    sentiment_score: float
    themes: tuple[str, ...] = ()
    key_insight: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "MiniReview":
        sentiment = data.get("sentiment") or {}
        return cls(
            main_topic=data.get("mainTopic") or "",
            sentiment_label=sentiment.get("label") or "",
            sentiment_score=float(sentiment.get("score") or 0.0),
            themes=_strings(data.get("themes")),
            key_insight=data.get("keyInsight") or None,
        )


@dataclass(frozen=True)
class CreatedEntry:
    entry: JournalEntry
    metadata: Optional[EntryMetadata] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CreatedEntry":
        metadata = data.get("metadata")
        return cls(
            entry=JournalEntry.from_dict(data["entry"]),
            metadata=EntryMetadata.from_dict(metadata) if metadata else None,
        )


@dataclass(frozen=True)
class FinalizedEntry:
    entry: JournalEntry
    mini_review: Optional[MiniReview] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "FinalizedEntry":
        mini_review = data.get("miniReview")
        return cls(
            entry=JournalEntry.from_dict(data["entry"]),
            mini_review=MiniReview.from_dict(mini_review) if mini_review else None,
        )


@dataclass(frozen=True)
class WeeklyReview:
    """Backend-generated summary of one week of journaling."""
    id: str
    week_start: str
    week_end: str
    summary: str = ""
    emotional_trend: str = ""
    themes: tuple[str, ...] = ()
    insights: tuple[str, ...] = ()
    entries_count: int = 0
    created_at: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WeeklyReview":
        return cls(
            id=str(data["id"]),
            week_start=data.get("weekStart") or "",
            week_end=data.get("weekEnd") or "",
            summary=data.get("summary") or "",
            emotional_trend=data.get("emotionalTrend") or "",
            themes=_strings(data.get("themes")),
            insights=_strings(data.get("insights")),
            entries_count=int(data.get("entriesCount") or 0),
            created_at=data.get("createdAt") or "",
        )


@dataclass(frozen=True)
class UserProfile:
    id: str
    username: str
    email: str
    timezone: str
    journaling_since: str
    total_entries: int = 0
    current_streak: int = 0
    preferred_writing_style: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "UserProfile":
        return cls(
            id=str(data.get("id", "")),
            username=data.get("username") or "",
            email=data.get("email") or "",
            timezone=data.get("timezone") or "",
            journaling_since=data.get("journalingSince") or "",
            total_entries=int(data.get("totalEntries") or 0),
            current_streak=int(data.get("currentStreak") or 0),
            preferred_writing_style=data.get("preferredWritingStyle") or None,
        )


@dataclass(frozen=True)
class WritingStyle:
    current_style: str
    style_description: str
    voice_tone: str
    suggestions: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WritingStyle":
        return cls(
            current_style=data.get("currentStyle") or "",
            style_description=data.get("styleDescription") or "",
            voice_tone=data.get("voiceTone") or "",
            suggestions=_strings(data.get("suggestions")),
        )


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a paginated backend collection."""
    items: tuple[T, ...]
    total: int
    limit: int
    offset: int

    @property
    def has_more(self) -> bool:
        """True when records remain beyond this page."""
        return self.offset + len(self.items) < self.total

    @property
    def next_offset(self) -> int:
        return self.offset + len(self.items)

    @classmethod
    def from_dict(
        cls,
        data: dict[str, Any],
        key: str,
        parse: Callable[[dict[str, Any]], T],
    ) -> "Page[T]":
        """Build a page from `{<key>: [...], pagination: {...}}`."""
        items = tuple(parse(item) for item in data.get(key) or [])
        pagination = data.get("pagination") or {}
        return cls(
            items=items,
            total=int(pagination.get("total", len(items))),
            limit=int(pagination.get("limit", len(items))),
            offset=int(pagination.get("offset", 0)),
        )


@dataclass(frozen=True)
class SearchResults:
    query: str
    results: tuple[JournalEntry, ...] = field(default_factory=tuple)
    count: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SearchResults":
        results = tuple(JournalEntry.from_dict(r) for r in data.get("results") or [])
        return cls(
            query=data.get("query") or "",
            results=results,
            count=int(data.get("count", len(results))),
        )
