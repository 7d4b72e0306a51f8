"""Video payloads handed to the analysis pipeline."""

from __future__ import annotations

import math
import mimetypes
from dataclasses import dataclass
from pathlib import Path

from .errors import InvalidVideoError

FILE_SIZE_UNITS = ["Bytes", "KB", "MB", "GB"]


@dataclass
class VideoUpload:
    """A video file selected for analysis."""

    filename: str
    content: bytes
    content_type: str = "application/octet-stream"

    @classmethod
    def from_path(cls, path: str | Path) -> VideoUpload:
        """Read a video file from disk, guessing its MIME type."""
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            filename=path.name,
            content=path.read_bytes(),
            content_type=content_type or "application/octet-stream",
        )

    @property
    def size(self) -> int:
        """Payload size in bytes."""
        return len(self.content)

    @property
    def is_video(self) -> bool:
        return self.content_type.startswith("video/")


def validate_video(upload: VideoUpload) -> VideoUpload:
    """Check that an upload is a non-empty video file."""
    if not upload.is_video:
        raise InvalidVideoError(
            f"{upload.filename} is not a video file (got {upload.content_type})"
        )
    if upload.size == 0:
        raise InvalidVideoError(f"{upload.filename} is empty")
    return upload


def format_file_size(num_bytes: int) -> str:
    """Format a byte count with 1024-based units, e.g. ``"9.54 MB"``."""
    if num_bytes <= 0:
        return "0 Bytes"
    exponent = min(int(math.floor(math.log(num_bytes, 1024))), len(FILE_SIZE_UNITS) - 1)
    value = round(num_bytes / 1024**exponent, 2)
    return f"{value:g} {FILE_SIZE_UNITS[exponent]}"
