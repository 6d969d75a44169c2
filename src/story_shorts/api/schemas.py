"""Request/Response schemas for the FastAPI endpoints."""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from story_shorts.models.brief import StoryBrief
from story_shorts.models.scene import Scene


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class StoryboardResponse(_CamelModel):
    brief_used: StoryBrief
    scenes: list[Scene]
    total_duration: float


class RenderResponse(_CamelModel):
    file_name: str
    content_type: str = "video/mp4"
    preview_url: str
    duration_sec: Optional[float] = None
    size_bytes: int


class RenderStatusResponse(_CamelModel):
    encoder_state: str  # "uninitialized" | "loading" | "ready" | "failed"
    ready: bool
    busy: bool
    progress: float = Field(ge=0, le=100)


class ErrorResponse(BaseModel):
    error: str
    details: Optional[Any] = None
