"""Core screenshot capture functions.

Captures are delegated to whatever native screenshot program the host has.
take_screenshot() builds the platform's candidate list and runs it as a
fallback cascade: one process at a time, in priority order, stopping at the
first command whose expected output file actually exists.
"""

import logging
import shutil
import subprocess
import time
import uuid
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Union

from . import __version__
from .emit import emit
from .errors import DirectoryUnavailable, NoToolAvailable, ScreenshotError
from .output import CaptureResult, build_result
from .platforms import (
    CandidateCommand,
    Platform,
    build_commands,
    current_platform,
    file_extension,
    resolve_format,
    suggestions_for,
    tools_for,
)

log = logging.getLogger(__name__)

Runner = Callable[..., subprocess.CompletedProcess]
PathLike = Union[str, Path]

DEFAULT_TIMEOUT = 10.0


@dataclass
class CaptureOptions:
    """Options for a single capture."""

    silent: bool = False  # No console output at all
    verbose: bool = False  # Step-by-step diagnostics (ignored when silent)
    format: str = "png"  # png, jpg, jpeg, bmp, webp
    quality: int = 100  # Lossy formats only, advisory
    return_encoded_data: bool = False  # Attach base64 / data URL to the result
    timeout: float = DEFAULT_TIMEOUT  # Seconds per candidate command

    def __post_init__(self):
        self.format = resolve_format(self.format)
        if isinstance(self.quality, bool) or not isinstance(self.quality, int):
            raise ValueError("quality must be an integer")
        if not 1 <= self.quality <= 100:
            raise ValueError("quality must be between 1 and 100")
        if self.timeout <= 0:
            raise ValueError("timeout must be positive")


@dataclass
class ToolAvailability:
    """Which screenshot tools are resolvable on PATH."""

    platform: str
    available: list[str] = field(default_factory=list)
    total: int = 0

    @property
    def has_tools(self) -> bool:
        return bool(self.available)

    def to_dict(self) -> dict:
        return {
            "platform": self.platform,
            "available": list(self.available),
            "total": self.total,
            "has_tools": self.has_tools,
        }


def _resolve_platform(platform: Optional[Union[Platform, str]]) -> Platform:
    if platform is None:
        return current_platform()
    return Platform(platform)


def _say(options: CaptureOptions, level: int, msg: str, *args) -> None:
    """Log at `level` in verbose mode, otherwise keep it at DEBUG."""
    if options.verbose and not options.silent:
        log.log(level, msg, *args)
    else:
        log.debug(msg, *args)


def _stamp(path: Path) -> Optional[tuple]:
    """(inode, size, mtime) of path, or None if it does not exist."""
    try:
        st = path.stat()
    except OSError:
        return None
    return (st.st_ino, st.st_size, st.st_mtime_ns)


def _attempt(candidate: CandidateCommand, options: CaptureOptions, runner: Runner) -> bool:
    """Run one candidate to completion. True if it produced its output file."""
    before = _stamp(candidate.output_path)
    try:
        proc = runner(
            list(candidate.argv),
            capture_output=True,
            text=True,
            timeout=options.timeout,
        )
    except FileNotFoundError:
        _say(options, logging.WARNING, "%s not available, trying next...", candidate.tool)
        return False
    except subprocess.TimeoutExpired:
        _say(options, logging.WARNING, "%s timed out after %ss, trying next...",
             candidate.tool, options.timeout)
        return False
    except OSError as e:
        _say(options, logging.WARNING, "%s could not be run (%s), trying next...", candidate.tool, e)
        return False

    if proc.returncode != 0:
        _say(options, logging.WARNING, "%s not available, trying next...", candidate.tool)
        _say(options, logging.DEBUG, "Command failed (exit %s): %s", proc.returncode,
             (proc.stderr or "").strip())
        return False

    after = _stamp(candidate.output_path)
    if after is None or after == before:
        _say(options, logging.WARNING, "%s exited cleanly but wrote no file, trying next...",
             candidate.tool)
        return False

    return True


def run_candidates(
    candidates: list[CandidateCommand],
    platform: Platform,
    options: CaptureOptions,
    runner: Runner = subprocess.run,
) -> CandidateCommand:
    """Try each candidate in order until one produces its output file.

    Candidates never overlap: each process is waited for before the next
    one starts.

    Returns:
        The first candidate whose output file exists

    Raises:
        NoToolAvailable: If every candidate failed
    """
    for candidate in candidates:
        _say(options, logging.INFO, "Trying %s...", candidate.tool)
        if _attempt(candidate, options, runner):
            _say(options, logging.INFO, "Screenshot captured with %s: %s",
                 candidate.tool, candidate.output_path)
            return candidate

    message = "No screenshot tools found!"
    if not options.silent:
        log.error(message)
    raise NoToolAvailable(
        message,
        platform=platform.value,
        suggestions=suggestions_for(platform),
        available_tools=[c.tool for c in candidates],
    )


def take_screenshot(
    destination_dir: Optional[PathLike] = None,
    custom_name: Optional[str] = None,
    options: Optional[CaptureOptions] = None,
    *,
    platform: Optional[Union[Platform, str]] = None,
    runner: Runner = subprocess.run,
) -> CaptureResult:
    """Capture the screen into destination_dir.

    Args:
        destination_dir: Directory to write into (default: current directory)
        custom_name: File name without extension (default: screenshot-<epoch ms>)
        options: Capture options
        platform: Override the detected platform
        runner: subprocess.run-compatible callable used to start tools

    Returns:
        CaptureResult for the written file

    Raises:
        ScreenshotError: UnsupportedFormat or NoToolAvailable
    """
    options = options or CaptureOptions()
    target = _resolve_platform(platform)
    if destination_dir is None:
        destination_dir = Path.cwd()
    directory = destination_dir if isinstance(destination_dir, str) else str(destination_dir)

    name = custom_name or f"screenshot-{int(time.time() * 1000)}"
    filepath = Path(destination_dir) / f"{name}.{file_extension(options.format)}"

    _say(options, logging.INFO, "Platform detected: %s", target.value)
    _say(options, logging.INFO, "Taking screenshot...")

    operation_id = str(uuid.uuid4())
    emit("operation.started", {
        "operation_type": "screenshot.capture",
        "operation_id": operation_id,
        "platform": target.value,
        "format": options.format,
    })

    candidates = build_commands(target, options.format, filepath)
    try:
        winner = run_candidates(candidates, target, options, runner)
    except ScreenshotError as e:
        emit("error.handled", {
            "error_type": type(e).__name__,
            "message": e.message,
            "platform": target.value,
        })
        emit("operation.completed", {
            "operation_type": "screenshot.capture",
            "operation_id": operation_id,
            "success": False,
            "error_message": e.message,
        })
        raise

    result = build_result(
        winner,
        directory=directory,
        platform=target.value,
        requested_format=options.format,
        return_encoded_data=options.return_encoded_data,
        silent=options.silent,
        verbose=options.verbose,
    )
    if result.format != result.requested_format:
        _say(options, logging.WARNING, "%s cannot write %s on %s, saved as %s instead",
             winner.tool, result.requested_format, target.value, result.format)
    _say(options, logging.INFO, "Size: %.2f KB", result.size["kb"])

    emit("operation.completed", {
        "operation_type": "screenshot.capture",
        "operation_id": operation_id,
        "success": True,
        "outputs": [{"file_path": result.filepath, "file_type": "screenshot"}],
        "metadata": {"tool": result.tool, "format": result.format},
    })
    return result


def ensure_directory(path: PathLike, create: bool = True, platform: Optional[Platform] = None) -> Path:
    """Make sure a destination directory exists before any capture runs.

    Raises:
        DirectoryUnavailable: If it is missing and may not or could not be created
    """
    target = Path(path)
    if target.is_dir():
        return target

    platform_name = (platform or current_platform()).value
    if not create:
        raise DirectoryUnavailable(
            f"Directory does not exist: {path}",
            platform=platform_name,
            suggestions=[
                "Set create_dir=True to automatically create directories",
                "Create the directory manually before taking a screenshot",
            ],
        )

    try:
        target.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise DirectoryUnavailable(
            f"Error creating directory {path}: {e}",
            platform=platform_name,
            suggestions=["Check that the parent directory is writable"],
        ) from e
    log.debug("Created directory: %s", target)
    return target


def capture_screen(
    output_dir: Optional[PathLike] = None,
    filename: Optional[str] = None,
    *,
    silent: bool = True,
    verbose: bool = False,
    create_dir: bool = True,
    format: str = "png",
    quality: int = 100,
    return_encoded_data: bool = False,
    timeout: float = DEFAULT_TIMEOUT,
    platform: Optional[Union[Platform, str]] = None,
    runner: Runner = subprocess.run,
) -> CaptureResult:
    """Library-friendly wrapper around take_screenshot().

    Defaults to the current directory and silent output, and creates the
    destination directory unless create_dir is False.
    """
    options = CaptureOptions(
        silent=silent,
        verbose=verbose,
        format=format,
        quality=quality,
        return_encoded_data=return_encoded_data,
        timeout=timeout,
    )
    target = _resolve_platform(platform)
    if output_dir is None:
        output_dir = Path.cwd()

    ensure_directory(output_dir, create=create_dir, platform=target)
    return take_screenshot(output_dir, filename, options, platform=target, runner=runner)


def get_available_tools(
    platform: Optional[Union[Platform, str]] = None,
    which: Callable[[str], Optional[str]] = shutil.which,
) -> ToolAvailability:
    """Check which of the platform's screenshot tools are on PATH.

    All tools are probed concurrently; the result is built once every probe
    has finished and keeps the platform's priority order.
    """
    target = _resolve_platform(platform)
    tools = tools_for(target)

    with ThreadPoolExecutor(max_workers=len(tools)) as pool:
        probes = {tool: pool.submit(which, tool) for tool in tools}
    available = [tool for tool in tools if probes[tool].result()]

    return ToolAvailability(platform=target.value, available=available, total=len(tools))


def get_library_version() -> dict:
    return {
        "name": "crosshot",
        "version": __version__,
        "platform": current_platform().value,
        "description": "Cross-platform desktop screenshot utility",
    }
