"""Video assembler: renders every scene to a frame and encodes one MP4.

Pipeline per call:
  reset scratch → frame-NN.png per scene + concat manifest (frames.txt)
  → optional audio<ext> → single ffmpeg concat encode → output.mp4
"""

from __future__ import annotations

import asyncio
import shutil
import time
from pathlib import Path
from typing import Callable, Optional, Sequence

import structlog

from story_shorts.config import get_output_dir, get_scratch_dir, settings
from story_shorts.errors import AssemblerBusyError, StoryboardValidationError
from story_shorts.models.scene import Scene
from story_shorts.models.video import AudioTrack, RenderedVideo
from story_shorts.nodes.frame_renderer import RenderOptions, render_frame
from story_shorts.tools.ffmpeg import FFmpegEncoder
from story_shorts.tools.images import ImageFetcher, fetch_image
from story_shorts.tools.scratch import ScratchArena

logger = structlog.get_logger()

ProgressListener = Callable[[float], None]

MANIFEST_NAME = "frames.txt"
OUTPUT_NAME = "output.mp4"
FRAME_PROGRESS_SHARE = 50.0


def frame_file_name(index: int) -> str:
    return f"frame-{index:02d}.png"


def build_concat_manifest(scenes: Sequence[Scene]) -> str:
    """Concat-demuxer list: one file/duration pair per scene, then the last file again.

    The trailing file line carries no duration; without it the demuxer drops
    the last frame's duration.
    """
    lines: list[str] = []
    for index, scene in enumerate(scenes):
        lines.append(f"file '{frame_file_name(index)}'")
        lines.append(f"duration {scene.duration:.2f}")
    lines.append(f"file '{frame_file_name(len(scenes) - 1)}'")
    return "\n".join(lines)


def build_encoder_args(audio_name: Optional[str] = None) -> list[str]:
    """ffmpeg arguments for the final encode, with or without an audio input."""
    args = ["-f", "concat", "-safe", "0", "-i", MANIFEST_NAME]
    if audio_name:
        args.extend(["-i", audio_name])
    args.extend(["-c:v", "libx264", "-pix_fmt", "yuv420p"])
    if audio_name:
        args.extend(["-c:a", "aac", "-shortest"])
    args.append(OUTPUT_NAME)
    return args


def default_output_name() -> str:
    return f"ai-video-{int(time.time() * 1000)}.mp4"


def prune_previews(output_dir: Path, keep: int, current: Path) -> list[Path]:
    """Delete the oldest preview MP4s so at most *keep* remain, *current* included.

    ``keep <= 0`` disables pruning. *current* is never deleted.
    """
    if keep <= 0:
        return []
    older = sorted(
        (path for path in output_dir.glob("*.mp4") if path != current),
        key=lambda path: path.stat().st_mtime,
        reverse=True,
    )
    stale = older[keep - 1:]
    for path in stale:
        path.unlink(missing_ok=True)
    return stale


class VideoAssembler:
    """Owns the encoder and the scratch arena; renders one video at a time."""

    def __init__(
        self,
        encoder: Optional[FFmpegEncoder] = None,
        scratch: Optional[ScratchArena] = None,
        output_dir: Optional[Path] = None,
        render_options: Optional[RenderOptions] = None,
        fetch_image: ImageFetcher = fetch_image,
        preview_retention: Optional[int] = None,
    ) -> None:
        self.encoder = encoder or FFmpegEncoder()
        self.scratch = scratch or ScratchArena(get_scratch_dir())
        self._output_dir = output_dir
        self.render_options = render_options or RenderOptions.from_settings()
        self._fetch_image = fetch_image
        self.preview_retention = (
            settings.preview_retention if preview_retention is None else preview_retention
        )
        self._lock = asyncio.Lock()
        self.progress = 0.0

    @property
    def is_busy(self) -> bool:
        return self._lock.locked()

    @property
    def output_dir(self) -> Path:
        if self._output_dir is None:
            return get_output_dir()
        self._output_dir.mkdir(parents=True, exist_ok=True)
        return self._output_dir

    async def assemble(
        self,
        scenes: Sequence[Scene],
        audio: Optional[AudioTrack] = None,
        on_progress: Optional[ProgressListener] = None,
        output_name: Optional[str] = None,
    ) -> RenderedVideo:
        """Render *scenes* in order and encode them into one MP4.

        Progress runs 0 → 50 while frames are written and jumps to 100 once
        the encoded file has been read back. Disk and image work runs in
        worker threads, so ``progress`` can be polled while a render is in
        flight.

        Raises:
            EncoderNotReadyError: If the encoder has not finished loading.
            AssemblerBusyError: If another assemble call is in flight.
            StoryboardValidationError: If *scenes* is empty.
            ImageLoadError: If an image background cannot be loaded.
            EncoderError: If ffmpeg fails.
        """
        self.encoder.ensure_ready()
        if self._lock.locked():
            raise AssemblerBusyError("A video is already being rendered")
        if not scenes:
            raise StoryboardValidationError("No scenes to render")

        async with self._lock:
            started = time.monotonic()

            def report(value: float) -> None:
                self.progress = value
                if on_progress is not None:
                    on_progress(value)

            report(0.0)
            await asyncio.to_thread(self.scratch.reset)

            total = len(scenes)
            logger.info("video_assembler.start", scene_count=total, has_audio=audio is not None)

            for index, scene in enumerate(scenes):
                frame = await render_frame(scene, self.render_options, fetch_image=self._fetch_image)
                await asyncio.to_thread(self.scratch.write, frame_file_name(index), frame)
                report(index / total * FRAME_PROGRESS_SHARE)
                logger.debug("video_assembler.frame_written", index=index, scene_id=scene.id)

            await asyncio.to_thread(self.scratch.write, MANIFEST_NAME, build_concat_manifest(scenes))

            audio_name = None
            if audio is not None:
                audio_name = f"audio{audio.extension}"
                await asyncio.to_thread(self.scratch.write, audio_name, audio.content)

            await self.encoder.run(build_encoder_args(audio_name), cwd=self.scratch.root)

            content = await asyncio.to_thread(self.scratch.read, OUTPUT_NAME)
            file_name = output_name or default_output_name()
            output_dir = self.output_dir
            preview_path = output_dir / file_name
            await asyncio.to_thread(shutil.copyfile, self.scratch.path(OUTPUT_NAME), preview_path)
            stale = await asyncio.to_thread(
                prune_previews, output_dir, self.preview_retention, preview_path
            )
            if stale:
                logger.info("video_assembler.previews_pruned", removed=len(stale))
            duration_sec = await self.encoder.probe_duration(preview_path)

            report(100.0)
            logger.info(
                "video_assembler.done",
                file_name=file_name,
                size_bytes=len(content),
                duration_sec=duration_sec,
                nominal_duration=sum(scene.duration for scene in scenes),
                elapsed=round(time.monotonic() - started, 2),
            )

            return RenderedVideo(
                content=content,
                file_name=file_name,
                preview_path=preview_path,
                duration_sec=duration_sec,
            )
