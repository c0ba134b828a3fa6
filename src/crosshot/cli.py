"""Command-line interface for crosshot.

Entry point flow:
1. Parse arguments
2. Handle introspection / --version / --list-tools and exit
3. Make sure the output directory exists
4. Run the capture cascade and print the result
"""

import argparse
import atexit
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from . import __version__
from .capture import (
    CaptureOptions,
    ensure_directory,
    get_available_tools,
    take_screenshot,
)
from .config import (
    Config,
    config_defaults,
    config_schema,
    config_to_dict,
    load_config,
    validate_config_file,
)
from .emit import EVENT_CATALOG, configure, emit
from .errors import ScreenshotError
from .hooks import HOOK_CONTRACT, notify_save
from .platforms import SUPPORTED_FORMATS, Platform, current_platform, tools_for

log = logging.getLogger(__name__)

console = Console()
err_console = Console(stderr=True)


def _value(raw: str) -> str:
    """Accept `-n=shot` and quoted values as well as `-n shot`."""
    if raw.startswith("="):
        raw = raw[1:]
    return raw.strip("\"'")


def _output_dir(raw: str) -> str:
    value = _value(raw)
    if value.startswith("~"):
        return str(Path(value).expanduser())
    return value


def _quality(raw: Optional[str], default: int) -> int:
    """Parse -q, falling back to default for anything outside 1-100."""
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if not 1 <= value <= 100:
        log.warning("Invalid quality %r, using %d", raw, default)
        return default
    return value


def _timeout(raw: str) -> float:
    try:
        value = float(_value(raw))
    except ValueError:
        raise argparse.ArgumentTypeError(f"timeout must be a number, got {raw!r}")
    if value <= 0:
        raise argparse.ArgumentTypeError("timeout must be positive")
    return value


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the argument parser for CLI usage."""
    parser = argparse.ArgumentParser(
        prog="crosshot",
        description="Crosshot - Cross-Platform Screenshot Utility",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=f"""
Examples:
  %(prog)s
  %(prog)s -n="important-capture"
  %(prog)s -f=jpg -q=85
  %(prog)s -n=screenshot --format=webp
  %(prog)s -o="~/Images/Screenshots/" --verbose
  %(prog)s --list-tools

Supported formats: {", ".join(SUPPORTED_FORMATS)} (default: png).
Quality only affects lossy formats (jpg, webp).
Tilde (~) expands to your home directory.
""",
    )

    parser.add_argument(
        "-v", "--version",
        action="store_true",
        help="Show version information",
    )
    parser.add_argument(
        "--config",
        metavar="PATH",
        help="Path to config file (default: platform config dir)",
    )

    # Introspection
    parser.add_argument(
        "--print-defaults",
        action="store_true",
        help="Print default configuration as JSON and exit",
    )
    parser.add_argument(
        "--print-config-schema",
        action="store_true",
        help="Print configuration schema as JSON and exit",
    )
    parser.add_argument(
        "--validate-config",
        action="store_true",
        help="Validate configuration file and exit",
    )
    parser.add_argument(
        "--print-resolved",
        action="store_true",
        help="Print resolved configuration as JSON and exit",
    )
    parser.add_argument(
        "--print-hook-contract",
        action="store_true",
        help="Print hook contract as JSON and exit",
    )
    parser.add_argument(
        "--print-event-catalog",
        action="store_true",
        help="Print event catalog as JSON and exit",
    )
    parser.add_argument(
        "--list-tools",
        action="store_true",
        help="Show which screenshot tools are installed and exit",
    )

    # Output options
    parser.add_argument(
        "-n", "--name",
        type=_value,
        metavar="FILENAME",
        help="Custom filename for the screenshot (without extension)",
    )
    parser.add_argument(
        "-o", "--output",
        type=_output_dir,
        metavar="PATH",
        help="Output directory (created if it doesn't exist)",
    )
    parser.add_argument(
        "-f", "--format",
        type=_value,
        metavar="TYPE",
        help="Output format: png, jpg, jpeg, bmp, webp (default: png)",
    )
    parser.add_argument(
        "-q", "--quality",
        type=_value,
        metavar="1-100",
        help="Quality for lossy formats (default: 100)",
    )
    parser.add_argument(
        "--timeout",
        type=_timeout,
        metavar="SECONDS",
        help="Give up on a screenshot tool after this many seconds (default: 10)",
    )
    parser.add_argument(
        "--base64",
        action="store_true",
        help="Include base64 / data URL fields in the result",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Show detailed information and the result object",
    )
    parser.add_argument(
        "--events",
        action="store_true",
        help="Write structured JSON events to stderr",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    return parser


def _emit_json(payload: dict) -> None:
    print(json.dumps(payload, indent=2, sort_keys=True))


def _handle_introspection(args: argparse.Namespace) -> Optional[int]:
    config_path = Path(args.config).expanduser() if args.config else None

    if args.print_defaults:
        _emit_json(config_defaults())
        return 0

    if args.print_config_schema:
        _emit_json(config_schema())
        return 0

    if args.validate_config:
        try:
            errors = validate_config_file(config_path)
        except ValueError as e:
            errors = [str(e)]
        if errors:
            for error in errors:
                print(error, file=sys.stderr)
            return 1
        return 0

    if args.print_resolved:
        _emit_json(config_to_dict(load_config(config_path=config_path)))
        return 0

    if args.print_hook_contract:
        _emit_json(HOOK_CONTRACT)
        return 0

    if args.print_event_catalog:
        _emit_json({"catalog": EVENT_CATALOG})
        return 0

    return None


def show_version() -> None:
    console.print("[bold cyan]Crosshot[/bold cyan]")
    console.print(f"Version: {__version__}")
    console.print(f"[dim]Platform: {current_platform().value}[/dim]")
    console.print("[dim]Cross-platform desktop screenshot utility[/dim]")


def show_tools() -> None:
    tools = get_available_tools()
    table = Table(title=f"Screenshot tools ({tools.platform})")
    table.add_column("Tool")
    table.add_column("Status")

    for tool in tools_for(Platform(tools.platform)):
        if tool in tools.available:
            table.add_row(tool, "[green]available[/green]")
        else:
            table.add_row(tool, "[dim]not found[/dim]")
    console.print(table)

    if not tools.has_tools:
        console.print("[yellow]No screenshot tools found.[/yellow]")


def _print_error(error: ScreenshotError, verbose: bool) -> None:
    err_console.print(f"[bold red]ERROR:[/bold red] [red]{escape(error.message)}[/red]", highlight=False)
    if verbose and error.suggestions:
        console.print("\n[yellow]Suggestions:[/yellow]")
        for suggestion in error.suggestions:
            console.print(f"  - {suggestion}", markup=False, highlight=False)


def build_capture_options(args: argparse.Namespace, config: Config) -> CaptureOptions:
    """Build CaptureOptions from parsed arguments, falling back to config."""
    return CaptureOptions(
        silent=False,
        verbose=args.verbose,
        format=args.format or config.default_format,
        quality=_quality(args.quality, config.default_quality),
        return_encoded_data=args.base64,
        timeout=args.timeout or config.capture_timeout,
    )


def main(args: Optional[list[str]] = None) -> int:
    """Main entry point.

    Args:
        args: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = create_argument_parser()
    parsed_args = parser.parse_args(args)

    result = _handle_introspection(parsed_args)
    if result is not None:
        return result

    if parsed_args.version:
        show_version()
        return 0

    if parsed_args.debug:
        level = logging.DEBUG
    elif parsed_args.verbose:
        level = logging.INFO
    else:
        level = logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")

    configure("crosshot", stderr=parsed_args.events)
    atexit.register(lambda: emit("shutdown", {}))

    config_path = Path(parsed_args.config).expanduser() if parsed_args.config else None
    config = load_config(config_path=config_path)
    emit("config.resolved", {
        "config_path": str(config_path or "default"),
        "source": "cli" if config_path else "default",
    })

    if parsed_args.list_tools:
        show_tools()
        return 0

    output_dir = parsed_args.output or str(config.resolved_output_dir())

    try:
        options = build_capture_options(parsed_args, config)
        ensure_directory(output_dir, create=config.create_dir)
        if parsed_args.verbose:
            console.print(f"[blue]Output directory:[/blue] {escape(output_dir)}", highlight=False)

        capture = take_screenshot(output_dir, parsed_args.name, options)
    except ScreenshotError as e:
        _print_error(e, parsed_args.verbose)
        return 1
    except ValueError as e:
        err_console.print(f"[bold red]ERROR:[/bold red] [red]{escape(str(e))}[/red]", highlight=False)
        return 1

    notify_save(capture, config.hooks_dir)

    if parsed_args.verbose:
        console.print("[bold green]Screenshot taken successfully![/bold green]")
        console.print("[dim]Detailed result:[/dim]")
        console.print_json(data=capture.to_dict())
    else:
        console.print("[green]✓ Success[/green]")
        console.print(capture.filepath, markup=False, highlight=False, soft_wrap=True)
    return 0


if __name__ == "__main__":
    sys.exit(main())
