"""Error taxonomy for the JournalOwl MCP server."""

from __future__ import annotations

from typing import Optional


class JournalOwlError(Exception):
    """Base exception for all JournalOwl adapter errors."""
    pass


class ConfigurationError(JournalOwlError):
    """Raised when required configuration (usually the API key) is missing or invalid."""
    pass


class APIError(JournalOwlError):
    """The backend answered, but reported a failure."""

    def __init__(self, status_code: Optional[int], message: str):
        self.status_code = status_code
        self.message = message
        super().__init__(f"JournalOwl API Error ({status_code}): {message}")


class UnreachableError(JournalOwlError):
    """No response was received from the backend."""

    def __init__(self, cause: Optional[Exception] = None):
        super().__init__(
            "JournalOwl API is unreachable. Please check your network connection."
        )
        self.cause = cause


class RequestFailedError(JournalOwlError):
    """The request could not be formed or sent."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(f"Request failed: {message}")
        self.cause = cause


class UnknownToolError(JournalOwlError):
    """Raised when a tool name is not in the catalog."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"Unknown tool: {name}")


class UnknownResourceError(JournalOwlError):
    """Raised when a resource URI is not in the catalog."""

    def __init__(self, uri: str):
        self.uri = uri
        super().__init__(f"Unknown resource: {uri}")


class InvalidArgumentsError(JournalOwlError):
    """Tool arguments did not match the tool's input schema."""

    def __init__(self, tool: str, detail: str):
        self.tool = tool
        self.detail = detail
        super().__init__(f"Invalid arguments for {tool}: {detail}")
