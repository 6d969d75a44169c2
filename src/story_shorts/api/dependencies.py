"""FastAPI dependency injection: assembler and publishing client singletons."""

from __future__ import annotations

from functools import lru_cache

from story_shorts.nodes.video_assembler import VideoAssembler
from story_shorts.tools.instagram import InstagramClient


@lru_cache(maxsize=1)
def get_assembler() -> VideoAssembler:
    """Return the process-wide assembler. It owns the only encoder and scratch arena."""
    return VideoAssembler()


@lru_cache(maxsize=1)
def get_instagram_client() -> InstagramClient:
    return InstagramClient()
