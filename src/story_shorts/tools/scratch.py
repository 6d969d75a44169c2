"""Scratch directory shared between the frame writer and the encoder."""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Union

import structlog

logger = structlog.get_logger()


class ScratchArena:
    """Flat working directory for one render at a time.

    Cleared at the start of every render rather than at the end, so residue
    from a failed run stays until the next call.
    """

    def __init__(self, root: Union[str, Path]) -> None:
        self.root = Path(root)

    def reset(self) -> int:
        """Delete everything under the arena, returning the number of entries removed."""
        self.root.mkdir(parents=True, exist_ok=True)
        removed = 0
        for entry in list(self.root.iterdir()):
            try:
                if entry.is_dir() and not entry.is_symlink():
                    shutil.rmtree(entry)
                else:
                    entry.unlink()
                removed += 1
            except FileNotFoundError:
                continue
        if removed:
            logger.info("scratch.reset", root=str(self.root), removed=removed)
        return removed

    def path(self, name: str) -> Path:
        return self.root / name

    def write(self, name: str, data: Union[bytes, str]) -> Path:
        target = self.path(name)
        if isinstance(data, str):
            target.write_text(data, encoding="utf-8")
        else:
            target.write_bytes(data)
        return target

    def read(self, name: str) -> bytes:
        return self.path(name).read_bytes()

    def listdir(self) -> list[str]:
        if not self.root.exists():
            return []
        return sorted(entry.name for entry in self.root.iterdir())
