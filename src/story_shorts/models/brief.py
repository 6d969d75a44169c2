"""Pydantic models for the creative brief."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class VideoTone(str, Enum):
    INSPIRATIONAL = "inspirational"
    EDUCATIONAL = "educational"
    PLAYFUL = "playful"
    DIRECT = "direct"


class VideoLength(str, Enum):
    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"


class StoryBrief(BaseModel):
    """Caller-supplied brief. Frozen so the pipeline can never mutate it."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)

    idea: str = ""
    audience: str = ""
    tone: VideoTone = VideoTone.DIRECT
    call_to_action: str = Field(default="", description="Optional closing call to action")
    length: VideoLength = VideoLength.MEDIUM


DEFAULT_BRIEF = StoryBrief(
    idea="AI-Powered Instagram Automation Launch",
    audience="busy solo creators and growth marketers",
    tone=VideoTone.DIRECT,
    call_to_action="Start your automation sprint today",
    length=VideoLength.MEDIUM,
)


def normalize_brief(brief: StoryBrief, defaults: StoryBrief = DEFAULT_BRIEF) -> StoryBrief:
    """Trim free-text fields and fill blanks from *defaults*.

    Run this before ``generate_storyboard`` so regenerating from the same
    brief always starts from the same inputs.
    """
    return brief.model_copy(
        update={
            "idea": brief.idea.strip() or defaults.idea,
            "audience": brief.audience.strip() or defaults.audience,
            "call_to_action": brief.call_to_action.strip() or defaults.call_to_action,
        }
    )
