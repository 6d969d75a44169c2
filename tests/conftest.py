"""Shared fixtures and fakes for the story-shorts test suite."""

import io
import os
import tempfile
from pathlib import Path

# Keep rendered output and scratch out of the working tree, and apart from
# each other; must run before settings load
os.environ.setdefault("OUTPUT_BASE_DIR", tempfile.mkdtemp(prefix="story-shorts-output-"))
os.environ.setdefault("SCRATCH_DIR", tempfile.mkdtemp(prefix="story-shorts-scratch-"))

import pytest
from PIL import Image

from story_shorts.models.scene import ColorBackground, GradientBackground, Scene
from story_shorts.nodes.frame_renderer import RenderOptions
from story_shorts.tools.ffmpeg import EncoderState, FFmpegEncoder


# ---------------------------------------------------------------------------
# Scene factory
# ---------------------------------------------------------------------------


@pytest.fixture()
def make_scene():
    """Factory fixture building a valid scene; keyword overrides win."""

    def _make(index: int = 0, **overrides) -> Scene:
        fields = {
            "id": f"abc123-{index}",
            "title": f"Scene {index}",
            "narration": "Stop losing time editing videos from scratch.",
            "supporting_point": "Smart overlays auto-balance contrast so captions always stay readable.",
            "duration": 4,
            "background": GradientBackground(
                value="linear-gradient(135deg, rgba(17,24,39,1) 0%, rgba(59,130,246,1) 100%)"
            ),
            "overlay": "dark",
        }
        fields.update(overrides)
        return Scene(**fields)

    return _make


@pytest.fixture()
def color_scene(make_scene):
    return make_scene(background=ColorBackground(value="#336699"))


@pytest.fixture()
def small_options():
    """A 9:16 raster small enough to keep tests fast."""
    return RenderOptions(width=216, height=384)


# ---------------------------------------------------------------------------
# Image fetch fakes
# ---------------------------------------------------------------------------


def png_bytes(size=(64, 48), color=(200, 30, 30)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


@pytest.fixture()
def make_png():
    return png_bytes


@pytest.fixture()
def fake_fetch():
    """Async fetcher returning a small red PNG and recording requested URLs."""
    calls: list[str] = []

    async def _fetch(url: str) -> bytes:
        calls.append(url)
        return png_bytes()

    _fetch.calls = calls
    return _fetch


# ---------------------------------------------------------------------------
# Encoder fake
# ---------------------------------------------------------------------------


class FakeEncoder(FFmpegEncoder):
    """Encoder that records its inputs and writes a placeholder output.mp4."""

    def __init__(self, ready: bool = True, fail_with: Exception | None = None):
        super().__init__(binary="ffmpeg", timeout=5)
        self.state = EncoderState.READY if ready else EncoderState.UNINITIALIZED
        self.fail_with = fail_with
        self.calls: list[list[str]] = []
        self.manifests: list[str] = []
        self.scratch_listings: list[list[str]] = []

    async def load(self) -> None:
        self.state = EncoderState.READY

    async def run(self, args, cwd: Path) -> None:
        self.ensure_ready()
        self.calls.append(list(args))
        self.manifests.append((Path(cwd) / "frames.txt").read_text(encoding="utf-8"))
        self.scratch_listings.append(sorted(entry.name for entry in Path(cwd).iterdir()))
        if self.fail_with is not None:
            raise self.fail_with
        (Path(cwd) / "output.mp4").write_bytes(b"\x00\x00\x00\x18ftypmp42fake")

    async def probe_duration(self, path: Path):
        return 12.5


@pytest.fixture()
def fake_encoder():
    return FakeEncoder()


@pytest.fixture()
def make_encoder():
    return FakeEncoder
