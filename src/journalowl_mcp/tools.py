"""MCP tool definitions wrapping the JournalOwl client."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .client import LATEST_REVIEW, JournalOwlClient
from .errors import InvalidArgumentsError, UnknownToolError
from .models import bullet_list, content_preview, format_date, sentiment_label

ENTRY_STATUSES = ["draft", "in_progress", "completed"]


def make_tools() -> dict[str, dict]:
    """Create MCP tool definitions for the JournalOwl API.

    Returns:
        Dict mapping tool names to their definitions.
    """

    tools = {}

    # ========== journal_create_entry ==========
    tools["journal_create_entry"] = {
        "name": "journal_create_entry",
        "description": "Create a new journal entry in JournalOwl. Entry is created with status \"in_progress\". Use journal_finalize_entry to generate AI analysis and complete the entry.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "content": {
                    "type": "string",
                    "description": "The content of the journal entry. Write freely about thoughts, feelings, or experiences.",
                },
                "mood": {
                    "type": "string",
                    "description": "Optional current mood (e.g., \"happy\", \"anxious\", \"peaceful\")",
                },
                "tags": {
                    "type": "array",
                    "items": {"type": "string"},
                    "description": "Optional tags to categorize the entry (e.g., [\"work\", \"gratitude\"])",
                },
                "date": {
                    "type": "string",
                    "description": "Optional entry date in ISO 8601 format (e.g., \"2024-01-15\"). Defaults to today in the user's timezone.",
                },
            },
            "required": ["content"],
        },
    }

    # ========== journal_finalize_entry ==========
    tools["journal_finalize_entry"] = {
        "name": "journal_finalize_entry",
        "description": "Finalize a journal entry and generate AI analysis: sentiment, themes, and insights. Entry must have at least 100 characters.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "entry_id": {
                    "type": "string",
                    "description": "The ID of the journal entry to finalize",
                },
            },
            "required": ["entry_id"],
        },
    }

    # ========== journal_list_entries ==========
    tools["journal_list_entries"] = {
        "name": "journal_list_entries",
        "description": "List journal entries from JournalOwl. Use filters to find entries by date, status, or tags.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "limit": {
                    "type": "integer",
                    "description": "Maximum number of entries to return (default: 20, max: 50)",
                },
                "offset": {
                    "type": "integer",
                    "description": "Number of entries to skip for pagination",
                },
                "from_date": {
                    "type": "string",
                    "description": "Start date filter (ISO 8601, e.g., \"2024-01-01\")",
                },
                "to_date": {
                    "type": "string",
                    "description": "End date filter (ISO 8601)",
                },
                "status": {
                    "type": "string",
                    "enum": ENTRY_STATUSES,
                    "description": "Filter by entry status",
                },
                "tags": {
                    "type": "string",
                    "description": "Comma-separated list of tags to filter by",
                },
            },
        },
    }

    # ========== journal_get_entry ==========
    tools["journal_get_entry"] = {
        "name": "journal_get_entry",
        "description": "Get a journal entry by ID, including its AI analysis and insights.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "entry_id": {
                    "type": "string",
                    "description": "The ID of the journal entry to retrieve",
                },
                "include_analysis": {
                    "type": "boolean",
                    "description": "Whether to include AI analysis (default: true)",
                    "default": True,
                },
            },
            "required": ["entry_id"],
        },
    }

    # ========== journal_search ==========
    tools["journal_search"] = {
        "name": "journal_search",
        "description": "Search journal entries by text. Find entries about specific topics, emotions, or events.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "query": {
                    "type": "string",
                    "description": "Search query",
                },
                "limit": {
                    "type": "integer",
                    "description": "Maximum number of results (default: 10, max: 20)",
                },
            },
            "required": ["query"],
        },
    }

    # ========== journal_get_weekly_review ==========
    tools["journal_get_weekly_review"] = {
        "name": "journal_get_weekly_review",
        "description": "Get a weekly review summarizing journaling activity, emotional trends, and insights. Use \"latest\" for the most recent review.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "week": {
                    "type": "string",
                    "description": "\"latest\" for the most recent review, or a specific review ID",
                    "default": LATEST_REVIEW,
                },
            },
        },
    }

    # ========== journal_list_weekly_reviews ==========
    tools["journal_list_weekly_reviews"] = {
        "name": "journal_list_weekly_reviews",
        "description": "List available weekly reviews with their periods and IDs. Pass an ID to journal_get_weekly_review to read one.",
        "inputSchema": {
            "type": "object",
            "properties": {
                "limit": {
                    "type": "integer",
                    "description": "Maximum number of reviews to return",
                },
                "offset": {
                    "type": "integer",
                    "description": "Number of reviews to skip for pagination",
                },
            },
        },
    }

    # ========== journal_get_writing_style ==========
    tools["journal_get_writing_style"] = {
        "name": "journal_get_writing_style",
        "description": "Get the user's preferred writing style, tone, and personalized journaling suggestions.",
        "inputSchema": {
            "type": "object",
            "properties": {},
        },
    }

    return tools


# ========== Arguments ==========


class ToolArguments(BaseModel):
    """Base for per-tool argument models. Unknown keys are ignored."""

    model_config = ConfigDict(extra="ignore", frozen=True)


class CreateEntryArgs(ToolArguments):
    content: str = Field(..., min_length=1)
    mood: Optional[str] = None
    tags: Optional[list[str]] = None
    date: Optional[str] = None


class EntryIdArgs(ToolArguments):
    entry_id: str = Field(..., min_length=1)


class ListEntriesArgs(ToolArguments):
    limit: Optional[int] = Field(default=None, ge=1)
    offset: Optional[int] = Field(default=None, ge=0)
    from_date: Optional[str] = None
    to_date: Optional[str] = None
    status: Optional[Literal["draft", "in_progress", "completed"]] = None
    tags: Optional[str] = None

    @field_validator("tags", mode="before")
    @classmethod
    def join_tag_list(cls, v: Any) -> Any:
        if isinstance(v, (list, tuple)):
            return ",".join(str(tag) for tag in v)
        return v


class GetEntryArgs(EntryIdArgs):
    include_analysis: bool = True


class SearchArgs(ToolArguments):
    query: str = Field(..., min_length=1)
    limit: Optional[int] = Field(default=None, ge=1)


class WeeklyReviewArgs(ToolArguments):
    week: Optional[str] = None


class ListReviewsArgs(ToolArguments):
    limit: Optional[int] = Field(default=None, ge=1)
    offset: Optional[int] = Field(default=None, ge=0)


class NoArgs(ToolArguments):
    pass


def validate_arguments(
    name: str, model: type[ToolArguments], arguments: Optional[Mapping[str, Any]]
) -> ToolArguments:
    """Validate raw tool arguments against the tool's argument model.

    Raises:
        InvalidArgumentsError: If the arguments do not validate
    """
    try:
        return model.model_validate(dict(arguments or {}))
    except ValidationError as e:
        detail = "; ".join(
            f"{'.'.join(str(part) for part in err['loc']) or 'arguments'}: {err['msg']}"
            for err in e.errors()
        )
        raise InvalidArgumentsError(name, detail) from e


# ========== Handlers ==========


async def handle_create_entry(client: JournalOwlClient, args: CreateEntryArgs) -> str:
    result = await client.create_entry(
        content=args.content,
        mood=args.mood,
        tags=args.tags,
        date=args.date,
    )
    entry = result.entry

    lines = [
        "Journal entry created!",
        "",
        f"**ID:** {entry.id}",
        f"**Title:** {entry.title}",
        f"**Status:** {entry.status.value} (use journal_finalize_entry to generate AI analysis)",
        f"**Date:** {format_date(entry.date)}",
        f"**Mood:** {entry.mood or 'Not specified'}",
        f"**Tags:** {', '.join(entry.tags) if entry.tags else 'None'}",
    ]

    if result.metadata:
        lines.extend([
            "",
            "**Settings used:**",
            f"- Timezone: {result.metadata.timezone}",
            f"- Language: {result.metadata.language}",
            f"- Writing Style: {result.metadata.writing_style}",
        ])

    return "\n".join(lines)


async def handle_finalize_entry(client: JournalOwlClient, args: EntryIdArgs) -> str:
    result = await client.finalize_entry(args.entry_id)
    entry = result.entry
    review = result.mini_review

    text = (
        "Entry finalized with AI analysis!\n\n"
        f"**ID:** {entry.id}\n"
        f"**Title:** {entry.title}\n"
        f"**Status:** {entry.status.value}"
    )

    if review:
        text += (
            "\n\n**AI Analysis:**\n"
            f"- **Main Topic:** {review.main_topic}\n"
            f"- **Sentiment:** {review.sentiment_label} ({review.sentiment_score:.2f})\n"
            f"- **Themes:** {', '.join(review.themes)}"
        )
        if review.key_insight:
            text += f"\n\n**Key Insight:**\n{review.key_insight}"

    if entry.analysis and entry.analysis.insights:
        text += f"\n\n**Insights:**\n{bullet_list(entry.analysis.insights)}"

    return text


async def handle_list_entries(client: JournalOwlClient, args: ListEntriesArgs) -> str:
    page = await client.list_entries(
        limit=args.limit,
        offset=args.offset,
        from_date=args.from_date,
        to_date=args.to_date,
        status=args.status,
        tags=args.tags,
    )

    if not page.items:
        return "No journal entries found matching your criteria."

    entries = "\n\n".join(
        f"- **{entry.title}** ({format_date(entry.date)})\n"
        f"  ID: {entry.id} | Status: {entry.status.value} | Tags: {', '.join(entry.tags) or 'none'}"
        for entry in page.items
    )

    text = f"Found {page.total} entries (showing {len(page.items)}):\n\n{entries}"
    if page.has_more:
        next_offset = (args.offset or 0) + len(page.items)
        text += f"\n\nMore entries available. Use offset={next_offset} to see more."
    return text


async def handle_get_entry(client: JournalOwlClient, args: GetEntryArgs) -> str:
    entry = await client.get_entry(args.entry_id, include_analysis=args.include_analysis)

    text = (
        f"# {entry.title}\n\n"
        f"**Date:** {format_date(entry.date)}\n"
        f"**Mood:** {entry.mood or 'Not specified'}\n"
        f"**Tags:** {', '.join(entry.tags) or 'None'}\n"
        f"**Status:** {entry.status.value}\n\n"
        f"---\n\n{entry.content}"
    )

    analysis = entry.analysis
    if analysis:
        text += "\n\n---\n\n## AI Analysis\n\n"
        if analysis.sentiment is not None:
            text += f"**Sentiment:** {sentiment_label(analysis.sentiment)} ({analysis.sentiment:.2f})\n\n"
        if analysis.themes:
            text += f"**Themes:** {', '.join(analysis.themes)}\n\n"
        if analysis.insights:
            text += f"**Insights:**\n{bullet_list(analysis.insights)}"

    return text


async def handle_search_entries(client: JournalOwlClient, args: SearchArgs) -> str:
    result = await client.search_entries(args.query, limit=args.limit)

    if result.count == 0:
        return f'No entries found matching "{args.query}".'

    entries = "\n\n".join(
        f"- **{entry.title}** ({format_date(entry.date)})\n"
        f"  ID: {entry.id}\n"
        f"  Preview: {content_preview(entry.content)}"
        for entry in result.results
    )
    return f'Found {result.count} entries for "{args.query}":\n\n{entries}'


async def handle_get_weekly_review(client: JournalOwlClient, args: WeeklyReviewArgs) -> str:
    review = await client.get_weekly_review(args.week or LATEST_REVIEW)

    return (
        "# Weekly Review\n\n"
        f"**Period:** {format_date(review.week_start)} - {format_date(review.week_end)}\n"
        f"**Entries:** {review.entries_count}\n\n"
        f"## Summary\n\n{review.summary}\n\n"
        f"## Emotional Trend\n\n{review.emotional_trend}\n\n"
        f"## Key Themes\n\n{bullet_list(review.themes)}\n\n"
        f"## Insights\n\n{bullet_list(review.insights)}"
    )


async def handle_list_weekly_reviews(client: JournalOwlClient, args: ListReviewsArgs) -> str:
    page = await client.list_weekly_reviews(limit=args.limit, offset=args.offset)

    if not page.items:
        return "No weekly reviews available yet."

    reviews = "\n\n".join(
        f"- **{format_date(review.week_start)} - {format_date(review.week_end)}** "
        f"({review.entries_count} entries)\n"
        f"  ID: {review.id}"
        for review in page.items
    )

    text = f"Found {page.total} weekly reviews (showing {len(page.items)}):\n\n{reviews}"
    if page.has_more:
        next_offset = (args.offset or 0) + len(page.items)
        text += f"\n\nMore reviews available. Use offset={next_offset} to see more."
    return text


async def handle_get_writing_style(client: JournalOwlClient, args: NoArgs) -> str:
    style = await client.get_writing_style()

    return (
        "# Your Writing Style\n\n"
        f"**Current Style:** {style.current_style}\n\n"
        f"**Description:** {style.style_description}\n\n"
        f"**Voice Tone:** {style.voice_tone}\n\n"
        "## Suggestions for Your Journaling\n\n"
        f"{bullet_list(style.suggestions)}"
    )


# ========== Dispatch ==========


@dataclass(frozen=True)
class ToolHandler:
    """A tool's argument model paired with the coroutine that serves it."""
    arguments: type[ToolArguments]
    handle: Callable[[JournalOwlClient, Any], Awaitable[str]]


HANDLERS: Mapping[str, ToolHandler] = MappingProxyType({
    "journal_create_entry": ToolHandler(CreateEntryArgs, handle_create_entry),
    "journal_finalize_entry": ToolHandler(EntryIdArgs, handle_finalize_entry),
    "journal_list_entries": ToolHandler(ListEntriesArgs, handle_list_entries),
    "journal_get_entry": ToolHandler(GetEntryArgs, handle_get_entry),
    "journal_search": ToolHandler(SearchArgs, handle_search_entries),
    "journal_get_weekly_review": ToolHandler(WeeklyReviewArgs, handle_get_weekly_review),
    "journal_list_weekly_reviews": ToolHandler(ListReviewsArgs, handle_list_weekly_reviews),
    "journal_get_writing_style": ToolHandler(NoArgs, handle_get_writing_style),
})


async def execute_tool(
    client: JournalOwlClient, name: str, arguments: Optional[Mapping[str, Any]]
) -> str:
    """Execute a JournalOwl tool and return its rendered text.

    Args:
        client: JournalOwlClient instance
        name: Tool name
        arguments: Raw tool arguments

    Returns:
        Human-readable result text

    Raises:
        UnknownToolError: If no tool has this name
        InvalidArgumentsError: If the arguments fail validation
        JournalOwlError: Backend and transport errors, unchanged
    """
    handler = HANDLERS.get(name)
    if handler is None:
        raise UnknownToolError(name)

    args = validate_arguments(name, handler.arguments, arguments)
    return await handler.handle(client, args)
