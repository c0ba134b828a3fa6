"""Error types raised by crosshot.

Every error carries the platform it happened on, a timestamp and a list of
remediation suggestions, so library callers can branch on them instead of
parsing messages. ``to_dict()`` gives the structured form printed by the CLI.
"""

from datetime import datetime, timezone
from typing import Optional


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class ScreenshotError(Exception):
    """Base class for all capture failures."""

    def __init__(
        self,
        message: str,
        platform: Optional[str] = None,
        suggestions: Optional[list[str]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.platform = platform
        self.suggestions = list(suggestions or [])
        self.timestamp = _now()

    def to_dict(self) -> dict:
        return {
            "success": False,
            "error": self.message,
            "error_type": type(self).__name__,
            "platform": self.platform,
            "timestamp": self.timestamp,
            "suggestions": self.suggestions,
        }


class UnsupportedFormat(ScreenshotError, ValueError):
    """Requested image format is not one of the supported formats."""


class NoToolAvailable(ScreenshotError):
    """Every candidate tool was tried and none produced an output file."""

    def __init__(
        self,
        message: str,
        platform: Optional[str] = None,
        suggestions: Optional[list[str]] = None,
        available_tools: Optional[list[str]] = None,
    ):
        super().__init__(message, platform, suggestions)
        self.available_tools = list(available_tools or [])

    def to_dict(self) -> dict:
        data = super().to_dict()
        data["available_tools"] = self.available_tools
        return data


class DirectoryUnavailable(ScreenshotError):
    """Destination directory is missing and could not (or may not) be created."""


class EncodingFailure(ScreenshotError):
    """Captured file could not be read back for base64 encoding."""
