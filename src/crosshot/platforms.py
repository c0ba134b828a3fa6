"""Platform detection, format resolution and per-platform command tables.

Everything here is pure: no process is started and nothing touches the disk.
The order of the lists returned by build_commands() is the fallback priority
used by the capture cascade, most likely to work first.
"""

import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Optional

from .errors import UnsupportedFormat


class Platform(str, Enum):
    WINDOWS = "windows"
    MACOS = "macos"
    LINUX = "linux"  # Linux and any other Unix


SUPPORTED_FORMATS = ("png", "jpg", "jpeg", "bmp", "webp")

MIME_TYPES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "webp": "image/webp",
    "bmp": "image/bmp",
}

# System.Drawing.Imaging.ImageFormat members; webp has no native encoder
WINDOWS_ENCODERS = {
    "png": "Png",
    "jpg": "Jpeg",
    "jpeg": "Jpeg",
    "bmp": "Bmp",
    "webp": "Png",
}

MACOS_FORMATS = {"png", "jpg", "jpeg"}
GRIM_FORMATS = {"png", "jpg", "jpeg", "webp"}

PLATFORM_TOOLS = {
    Platform.WINDOWS: ["powershell", "nircmd", "screencapture"],
    Platform.MACOS: ["screencapture"],
    Platform.LINUX: [
        "grim",
        "gnome-screenshot",
        "spectacle",
        "wayshot",
        "flameshot",
        "scrot",
        "maim",
    ],
}

SUGGESTIONS = {
    Platform.WINDOWS: [
        "PowerShell (native to Windows)",
        "NirCmd from https://www.nirsoft.net/utils/nircmd.html",
        "pip install mss",
    ],
    Platform.MACOS: [
        "screencapture (native to macOS)",
        "Check screen recording permissions in System Settings",
    ],
    Platform.LINUX: [
        "grim (recommended for Wayland)",
        "gnome-screenshot (for GNOME environments)",
        "spectacle (for KDE Plasma)",
        "wayshot (alternative for Wayland)",
        "flameshot (GUI with extra features)",
        "scrot (for X11 systems)",
        "maim (alternative for X11)",
        "Install using your system package manager (apt, pacman, dnf, etc.)",
    ],
}


@dataclass(frozen=True)
class CandidateCommand:
    """One external tool invocation in the fallback cascade."""

    tool: str
    argv: tuple[str, ...]
    output_path: Path
    format: str


def current_platform(system: Optional[str] = None) -> Platform:
    """Map a ``sys.platform`` string (default: this host) to a Platform."""
    system = system if system is not None else sys.platform
    if system.startswith(("win32", "cygwin")):
        return Platform.WINDOWS
    if system == "darwin":
        return Platform.MACOS
    return Platform.LINUX


def resolve_format(value: Optional[str]) -> str:
    """Case-fold and validate a format name.

    Raises:
        UnsupportedFormat: If the format is not in SUPPORTED_FORMATS
    """
    normalized = (value or "").strip().lower()
    if normalized not in SUPPORTED_FORMATS:
        valid = ", ".join(SUPPORTED_FORMATS)
        raise UnsupportedFormat(
            f"Unsupported format: {value}. Supported formats: {valid}",
            platform=current_platform().value,
            suggestions=[f"Use one of these formats: {valid}"],
        )
    return normalized


def file_extension(fmt: str) -> str:
    return "jpg" if fmt == "jpeg" else fmt


def mime_type(fmt: str) -> str:
    return MIME_TYPES.get(fmt, "image/png")


def tools_for(platform: Platform) -> list[str]:
    return list(PLATFORM_TOOLS[platform])


def suggestions_for(platform: Platform) -> list[str]:
    return list(SUGGESTIONS[platform])


def _windows_commands(fmt: str, filepath: Path) -> list[CandidateCommand]:
    encoder = WINDOWS_ENCODERS[fmt]
    effective = "png" if fmt == "webp" else fmt
    if effective != fmt:
        filepath = filepath.with_suffix(".png")

    # PowerShell single-quoted string: double any embedded quote
    ps_path = str(filepath).replace("\\", "/").replace("'", "''")
    script = (
        "Add-Type -AssemblyName System.Windows.Forms; "
        "Add-Type -AssemblyName System.Drawing; "
        "$screen = [System.Windows.Forms.Screen]::PrimaryScreen; "
        "$bitmap = New-Object System.Drawing.Bitmap($screen.Bounds.Width, $screen.Bounds.Height); "
        "$graphics = [System.Drawing.Graphics]::FromImage($bitmap); "
        "$graphics.CopyFromScreen($screen.Bounds.X, $screen.Bounds.Y, 0, 0, $screen.Bounds.Size); "
        f"$bitmap.Save('{ps_path}', [System.Drawing.Imaging.ImageFormat]::{encoder}); "
        "$graphics.Dispose(); $bitmap.Dispose()"
    )
    target = str(filepath)
    return [
        CandidateCommand(
            "powershell",
            ("powershell", "-NoProfile", "-NonInteractive", "-Command", script),
            filepath,
            effective,
        ),
        CandidateCommand("nircmd", ("nircmd", "savescreenshot", target), filepath, effective),
        CandidateCommand("screencapture", ("screencapture", target), filepath, effective),
    ]


def _macos_commands(fmt: str, filepath: Path) -> list[CandidateCommand]:
    if fmt in MACOS_FORMATS:
        format_flag: tuple[str, ...] = () if fmt == "png" else ("-t", "jpg")
        effective = fmt
    else:
        filepath = filepath.with_suffix(".png")
        format_flag = ()
        effective = "png"

    target = str(filepath)
    return [
        CandidateCommand(
            "screencapture",
            ("screencapture", *format_flag, target),
            filepath,
            effective,
        ),
        CandidateCommand(
            "screencapture",
            ("screencapture", "-x", *format_flag, target),
            filepath,
            effective,
        ),
    ]


def _linux_commands(fmt: str, filepath: Path) -> list[CandidateCommand]:
    target = str(filepath)
    commands = []

    if fmt in GRIM_FORMATS:
        commands.append(
            CandidateCommand("grim", ("grim", "-t", file_extension(fmt), target), filepath, fmt)
        )

    # Best effort from here on: PNG only or format inferred from the extension
    commands.extend([
        CandidateCommand("gnome-screenshot", ("gnome-screenshot", "-f", target), filepath, fmt),
        CandidateCommand("spectacle", ("spectacle", "-b", "-n", "-o", target), filepath, fmt),
        CandidateCommand("wayshot", ("wayshot", "-f", target), filepath, fmt),
        CandidateCommand(
            "flameshot",
            ("flameshot", "full", "-p", target, "-d", "0"),
            filepath,
            fmt,
        ),
        CandidateCommand("scrot", ("scrot", target), filepath, fmt),
        CandidateCommand("maim", ("maim", target), filepath, fmt),
    ])
    return commands


def build_commands(platform: Platform, fmt: str, filepath: Path) -> list[CandidateCommand]:
    """Build the ordered candidate list for a platform and a resolved format.

    Args:
        platform: Target platform
        fmt: Format already validated by resolve_format()
        filepath: Requested destination file

    Returns:
        Candidates in fallback order. Their output_path may differ from
        filepath when the tool cannot write the requested format.
    """
    filepath = Path(filepath)
    if platform == Platform.WINDOWS:
        return _windows_commands(fmt, filepath)
    if platform == Platform.MACOS:
        return _macos_commands(fmt, filepath)
    return _linux_commands(fmt, filepath)
