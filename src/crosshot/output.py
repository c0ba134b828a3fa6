"""Capture result assembly.

Handles:
- Building the CaptureResult once the cascade has verified an output file
- Reading the file back for base64 / data URL encoding
- JSON output for scripting
"""

import base64
import json
import logging
import os
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .emit import emit
from .errors import EncodingFailure
from .platforms import CandidateCommand, mime_type

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class EncodedData:
    """Inline representation of the captured image."""

    data_url: str
    base64_raw: str
    mime_type: str

    def to_dict(self) -> dict:
        return {
            "data_url": self.data_url,
            "base64_raw": self.base64_raw,
            "mime_type": self.mime_type,
        }


@dataclass(frozen=True)
class CaptureResult:
    """Result of a successful capture. Built once, never mutated."""

    filename: str
    filepath: str
    absolute_path: str
    directory: str
    size: dict
    tool: str
    platform: str
    format: str
    requested_format: str
    timestamp: str
    metadata: dict = field(default_factory=dict)
    encoded: Optional[EncodedData] = None

    @property
    def success(self) -> bool:
        return True

    @property
    def path(self) -> Path:
        return Path(self.filepath)

    def to_dict(self) -> dict:
        data = {
            "success": True,
            "filename": self.filename,
            "filepath": self.filepath,
            "absolute_path": self.absolute_path,
            "directory": self.directory,
            "size": dict(self.size),
            "tool": self.tool,
            "platform": self.platform,
            "format": self.format,
            "requested_format": self.requested_format,
            "timestamp": self.timestamp,
            "metadata": dict(self.metadata),
        }
        if self.encoded is not None:
            data.update(self.encoded.to_dict())
        return data

    def to_json(self, indent: Optional[int] = None) -> str:
        return json.dumps(self.to_dict(), indent=indent)


def _iso(ts: float) -> str:
    return datetime.fromtimestamp(ts, tz=timezone.utc).isoformat()


def file_size(nbytes: int) -> dict:
    return {
        "bytes": nbytes,
        "kb": round(nbytes / 1024, 2),
        "mb": round(nbytes / (1024 * 1024), 2),
    }


def file_metadata(st: os.stat_result) -> dict:
    # st_birthtime only exists on macOS/BSD (and Windows on 3.12+)
    created = getattr(st, "st_birthtime", st.st_ctime)
    return {
        "created": _iso(created),
        "modified": _iso(st.st_mtime),
        "permissions": st.st_mode,
    }


def encode_file(path: Path, fmt: str) -> EncodedData:
    """Read an image back and encode it as base64 plus a data URL.

    Raises:
        EncodingFailure: If the file cannot be read
    """
    try:
        raw = Path(path).read_bytes()
    except OSError as e:
        raise EncodingFailure(f"Could not read {path} for encoding: {e}") from e

    encoded = base64.b64encode(raw).decode("ascii")
    mime = mime_type(fmt)
    return EncodedData(
        data_url=f"data:{mime};base64,{encoded}",
        base64_raw=encoded,
        mime_type=mime,
    )


def build_result(
    candidate: CandidateCommand,
    directory: str,
    platform: str,
    requested_format: str,
    return_encoded_data: bool = False,
    silent: bool = False,
    verbose: bool = False,
) -> CaptureResult:
    """Build the CaptureResult for a candidate whose output file exists.

    Args:
        candidate: The command that produced the file
        directory: Destination directory as the caller passed it
        platform: Platform value string
        requested_format: Format the caller asked for (may differ from the effective one)
        return_encoded_data: Attach base64/data URL fields
        silent: Never log above DEBUG
        verbose: Report an encoding failure at WARNING instead of DEBUG

    Returns:
        CaptureResult describing the file on disk
    """
    path = candidate.output_path
    st = path.stat()

    encoded = None
    if return_encoded_data:
        try:
            encoded = encode_file(path, candidate.format)
            log.debug("Encoded data generated (%d chars)", len(encoded.base64_raw))
        except EncodingFailure as e:
            level = logging.WARNING if verbose and not silent else logging.DEBUG
            log.log(level, "Could not generate encoded data: %s", e)

    result = CaptureResult(
        filename=path.name,
        filepath=str(path),
        absolute_path=str(path.absolute()),
        directory=directory,
        size=file_size(st.st_size),
        tool=candidate.tool,
        platform=platform,
        format=candidate.format,
        requested_format=requested_format,
        timestamp=datetime.now(timezone.utc).isoformat(),
        metadata=file_metadata(st),
        encoded=encoded,
    )

    emit("artifact.created", {
        "file_path": result.filepath,
        "file_type": "screenshot",
        "metadata": {
            "tool": result.tool,
            "format": result.format,
            "size_bytes": st.st_size,
            "timestamp": result.timestamp,
        },
    })

    return result
