"""ffmpeg encoder handle with an explicit load lifecycle."""

from __future__ import annotations

import asyncio
import subprocess
from enum import Enum
from pathlib import Path
from typing import Optional, Sequence

import structlog

from story_shorts.config import settings
from story_shorts.errors import EncoderError, EncoderLoadError, EncoderNotReadyError

logger = structlog.get_logger()


class EncoderState(str, Enum):
    UNINITIALIZED = "uninitialized"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


def _default_binary() -> str:
    """ffmpeg binary moviepy is configured to use (imageio-ffmpeg unless overridden)."""
    from moviepy.config import FFMPEG_BINARY

    return FFMPEG_BINARY


class FFmpegEncoder:
    """Wraps one ffmpeg binary.

    ``load()`` moves the encoder from ``uninitialized`` through ``loading`` to
    ``ready``, or to ``failed`` when the binary cannot be found or run. A
    failed encoder may be loaded again.
    """

    def __init__(self, binary: Optional[str] = None, timeout: Optional[float] = None) -> None:
        self._binary = binary or settings.ffmpeg_binary or None
        self._timeout = timeout if timeout is not None else settings.encoder_timeout_sec
        self.state = EncoderState.UNINITIALIZED
        self.version: Optional[str] = None

    @property
    def binary(self) -> Optional[str]:
        return self._binary

    @property
    def is_ready(self) -> bool:
        return self.state is EncoderState.READY

    def ensure_ready(self) -> None:
        if not self.is_ready:
            raise EncoderNotReadyError(f"Encoder is not ready yet (state: {self.state.value})")

    async def load(self) -> None:
        """Resolve the binary and check it runs.

        Raises:
            EncoderLoadError: If the binary is missing or ``-version`` fails.
        """
        if self.state is EncoderState.READY:
            return

        self.state = EncoderState.LOADING
        logger.info("ffmpeg.load.start")

        try:
            if not self._binary:
                self._binary = await asyncio.to_thread(_default_binary)
            result = await asyncio.to_thread(
                subprocess.run,
                [self._binary, "-hide_banner", "-version"],
                capture_output=True,
                text=True,
                timeout=30,
            )
        except (OSError, subprocess.SubprocessError, ImportError) as exc:
            self.state = EncoderState.FAILED
            logger.exception("ffmpeg.load.failed", binary=self._binary)
            raise EncoderLoadError(f"Failed to load ffmpeg: {exc}") from exc

        if result.returncode != 0:
            self.state = EncoderState.FAILED
            logger.error("ffmpeg.load.failed", binary=self._binary, stderr=result.stderr[-300:])
            raise EncoderLoadError(f"ffmpeg -version exited with code {result.returncode}")

        first_line = result.stdout.splitlines()[0] if result.stdout else ""
        self.version = first_line
        self.state = EncoderState.READY
        logger.info("ffmpeg.load.done", binary=self._binary, version=first_line)

    async def run(self, args: Sequence[str], cwd: Path) -> None:
        """Run one encode with *args* inside *cwd*.

        Raises:
            EncoderNotReadyError: If ``load()`` has not succeeded.
            EncoderError: On a non-zero exit, a timeout, or if the binary cannot be started.
        """
        self.ensure_ready()
        cmd = [self._binary, "-y", "-hide_banner", "-loglevel", "error", *args]
        logger.info("ffmpeg.run.start", args=list(args), cwd=str(cwd))

        try:
            result = await asyncio.to_thread(
                subprocess.run,
                cmd,
                cwd=str(cwd),
                capture_output=True,
                text=True,
                timeout=self._timeout,
            )
        except subprocess.TimeoutExpired as exc:
            logger.error("ffmpeg.run.timeout", timeout=self._timeout)
            raise EncoderError(f"ffmpeg timed out after {self._timeout:.0f}s") from exc
        except (OSError, subprocess.SubprocessError) as exc:
            logger.exception("ffmpeg.run.error", binary=self._binary)
            raise EncoderError(f"ffmpeg could not be run: {exc}") from exc

        if result.returncode != 0:
            logger.error("ffmpeg.run.failed", returncode=result.returncode, stderr=result.stderr[-500:])
            raise EncoderError(f"ffmpeg failed (exit {result.returncode}): {result.stderr[-500:].strip()}")

        logger.info("ffmpeg.run.done")

    async def probe_duration(self, path: Path) -> Optional[float]:
        """Measure the duration of an encoded file, ``None`` when it cannot be read."""
        from moviepy import VideoFileClip

        def _probe() -> float:
            clip = VideoFileClip(str(path))
            try:
                return clip.duration
            finally:
                clip.close()

        try:
            return await asyncio.to_thread(_probe)
        except Exception as exc:
            logger.warning("ffmpeg.probe.failed", path=str(path), error=str(exc))
            return None
