"""crosshot: cross-platform desktop screenshots.

Delegates to the native screenshot tool of the host:
- PowerShell / NirCmd on Windows
- screencapture on macOS
- grim, gnome-screenshot, spectacle, wayshot, flameshot, scrot or maim elsewhere

Usable from the command line (`crosshot`) or as a library.
"""

__version__ = "1.2.0"

from .capture import (  # noqa: E402
    CaptureOptions,
    ToolAvailability,
    capture_screen,
    get_available_tools,
    get_library_version,
    take_screenshot,
)
from .errors import (  # noqa: E402
    DirectoryUnavailable,
    EncodingFailure,
    NoToolAvailable,
    ScreenshotError,
    UnsupportedFormat,
)
from .output import CaptureResult, EncodedData  # noqa: E402
from .platforms import Platform, SUPPORTED_FORMATS  # noqa: E402

__all__ = [
    "CaptureOptions",
    "CaptureResult",
    "DirectoryUnavailable",
    "EncodedData",
    "EncodingFailure",
    "NoToolAvailable",
    "Platform",
    "SUPPORTED_FORMATS",
    "ScreenshotError",
    "ToolAvailability",
    "UnsupportedFormat",
    "capture_screen",
    "get_available_tools",
    "get_library_version",
    "take_screenshot",
]
