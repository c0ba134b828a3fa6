"""User hook scripts run after a screenshot is saved.

Directory structure (hooks_dir defaults to the platformdirs config dir):
    <hooks_dir>/
    └── on_save.d/
        ├── 10-upload.sh
        └── 20-backup.sh

Scripts run in sorted order, in the background. Each receives:
    path size_bytes format timestamp
"""

import logging
import subprocess
from pathlib import Path
from typing import Optional, TYPE_CHECKING

if TYPE_CHECKING:
    from .output import CaptureResult

log = logging.getLogger(__name__)

HOOK_CONTRACT = {
    "events": [
        {
            "name": "on_save",
            "args": ["path", "size_bytes", "format", "timestamp"],
            "description": "Called after a screenshot is saved",
        }
    ]
}


def run_hooks(hooks_dir: Optional[Path], event: str, *args) -> list[Path]:
    """Start every executable script in <hooks_dir>/<event>.d/.

    Returns:
        Scripts that were started
    """
    if not hooks_dir:
        return []

    event_dir = Path(hooks_dir) / f"{event}.d"
    if not event_dir.is_dir():
        return []

    scripts = sorted(
        f for f in event_dir.iterdir()
        if f.is_file() and not f.name.startswith('.')
    )

    started = []
    for script in scripts:
        try:
            if not script.stat().st_mode & 0o111:
                log.debug("Skipping non-executable: %s", script)
                continue

            subprocess.Popen(
                [str(script)] + [str(a) for a in args],
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
            started.append(script)
            log.debug("Hook executed: %s", script.name)
        except OSError as e:
            log.warning("Hook %s failed: %s", script.name, e)
    return started


def notify_save(result: "CaptureResult", hooks_dir: Optional[Path]) -> list[Path]:
    return run_hooks(
        hooks_dir,
        "on_save",
        result.filepath,
        result.size["bytes"],
        result.format,
        result.timestamp,
    )
