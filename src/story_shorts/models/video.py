"""Models for rendered artifacts and their inputs."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

_EXTENSION_RE = re.compile(r"\.[a-zA-Z0-9]+$")


@dataclass(frozen=True)
class AudioTrack:
    """Caller-supplied audio to lay under the frames."""

    file_name: str
    content: bytes

    @property
    def extension(self) -> str:
        match = _EXTENSION_RE.search(self.file_name)
        return match.group(0) if match else ".mp3"


@dataclass
class RenderedVideo:
    """Encoded video handed back to the caller. The pipeline keeps no reference."""

    content: bytes
    file_name: str
    preview_path: Path
    content_type: str = "video/mp4"
    duration_sec: Optional[float] = None

    @property
    def size_bytes(self) -> int:
        return len(self.content)
