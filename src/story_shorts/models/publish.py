"""Pydantic models for the upload and publish collaborators."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from story_shorts.errors import PublishValidationError

CAPTION_MAX_LENGTH = 2200
SCHEDULE_MIN_LEAD = timedelta(minutes=20)
SCHEDULE_MAX_LEAD = timedelta(days=75)


class UploadResult(BaseModel):
    url: str
    pathname: str
    extension: str = ".mp4"


class PublishRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    caption: Optional[str] = Field(
        default=None,
        max_length=CAPTION_MAX_LENGTH,
        description="Instagram captions must be 2200 characters or fewer",
    )
    video_url: HttpUrl
    scheduled_publish_time: Optional[datetime] = None
    cover_url: Optional[HttpUrl] = None
    share_to_feed: bool = False

    @field_validator("scheduled_publish_time")
    @classmethod
    def _within_schedule_window(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        lead = value - datetime.now(timezone.utc)
        if lead < SCHEDULE_MIN_LEAD or lead > SCHEDULE_MAX_LEAD:
            raise ValueError(
                "Scheduled publish time must be between 20 minutes and 75 days in the future"
            )
        return value


class PublishResult(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    creation_id: str
    scheduled_publish_time: Optional[str] = None
    status: Literal["scheduled", "published"]


def parse_publish_request(payload: object) -> PublishRequest:
    """Validate a raw publish payload, raising ``PublishValidationError`` with the first issue."""
    if not isinstance(payload, dict):
        raise PublishValidationError("Invalid JSON payload")
    if not payload.get("videoUrl") and not payload.get("video_url"):
        raise PublishValidationError("videoUrl is required to publish to Instagram.")

    try:
        return PublishRequest.model_validate(payload)
    except ValidationError as exc:
        issue = exc.errors()[0]
        field = ".".join(str(part) for part in issue["loc"])
        message = issue["msg"].removeprefix("Value error, ")
        raise PublishValidationError(
            f"{field}: {message}",
            details=exc.errors(include_url=False, include_context=False, include_input=False),
        ) from exc
