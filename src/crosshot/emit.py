"""
Structured event emitter for crosshot.

Events are single-line JSON objects, distinguishable from log lines:
    {"event_type": "...", "timestamp": "...", "source": {"tool": "crosshot"}, "data": {...}}

Library use stays quiet: nothing is written to stderr until configure() enables
it (the CLI does so with --events). Handlers registered with add_handler()
always receive every event.
"""

import json
import sys
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

EventHandler = Callable[[dict], None]

EVENT_CATALOG = [
    {
        "event_type": "config.resolved",
        "data_fields": ["config_path", "source"],
    },
    {
        "event_type": "operation.started",
        "data_fields": ["operation_type", "operation_id", "platform", "format"],
    },
    {
        "event_type": "operation.completed",
        "data_fields": ["operation_type", "operation_id", "success", "outputs", "metadata", "error_message"],
    },
    {
        "event_type": "artifact.created",
        "data_fields": ["file_path", "file_type", "metadata"],
    },
    {
        "event_type": "error.handled",
        "data_fields": ["error_type", "message", "platform"],
    },
    {
        "event_type": "shutdown",
        "data_fields": [],
    },
]

_handlers: List[EventHandler] = []
_source: str = "crosshot"
_stderr_enabled: bool = False


def configure(source: str = "crosshot", stderr: bool = False) -> None:
    """Set the event source name and whether events go to stderr."""
    global _source, _stderr_enabled
    _source = source
    _stderr_enabled = stderr


def add_handler(handler: EventHandler) -> None:
    _handlers.append(handler)


def remove_handler(handler: EventHandler) -> None:
    if handler in _handlers:
        _handlers.remove(handler)


def emit(
    event_type: str,
    data: Dict[str, Any],
    source: Optional[str] = None,
) -> dict:
    """
    Emit a structured event and return it.

    Args:
        event_type: Event type (e.g., "operation.completed")
        data: Event payload
        source: Override source name for this event
    """
    event = {
        "event_type": event_type,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "source": {
            "tool": source or _source,
        },
        "data": data,
    }

    if _stderr_enabled:
        try:
            print(json.dumps(event, default=str), file=sys.stderr, flush=True)
        except (TypeError, ValueError, OSError) as exc:
            logger.debug("Could not write event: %s", exc)

    for handler in list(_handlers):
        try:
            handler(event)
        except Exception as exc:
            logger.debug("Event handler error: %s", exc)

    return event
