"""Pydantic models for storyboard scenes."""

from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from story_shorts.tools.colors import parse_css_color

Overlay = Literal["light", "dark"]


class GradientBackground(BaseModel):
    kind: Literal["gradient"] = "gradient"
    value: str = Field(description="CSS linear-gradient() string")


class ImageBackground(BaseModel):
    kind: Literal["image"] = "image"
    value: str = Field(description="http(s) URL of the background image")

    @field_validator("value")
    @classmethod
    def _require_http_url(cls, value: str) -> str:
        value = value.strip()
        if not value.startswith(("http://", "https://")):
            raise ValueError("Background image must be an http(s) URL")
        return value


class ColorBackground(BaseModel):
    kind: Literal["color"] = "color"
    value: str = Field(description="CSS color string")

    @field_validator("value")
    @classmethod
    def _require_parseable_color(cls, value: str) -> str:
        parse_css_color(value)
        return value


Background = Annotated[
    Union[GradientBackground, ImageBackground, ColorBackground],
    Field(discriminator="kind"),
]


class Scene(BaseModel):
    """One timed scene. Order in a storyboard is order of appearance."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    title: str
    narration: str
    supporting_point: str
    duration: float = Field(gt=0, description="Seconds on screen")
    background: Background
    overlay: Overlay = "dark"
    cta: Optional[str] = None
