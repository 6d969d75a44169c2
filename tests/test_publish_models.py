"""Tests for story_shorts.models.publish validation."""

from datetime import datetime, timedelta, timezone

import pytest

from story_shorts.errors import PublishValidationError
from story_shorts.models.publish import PublishResult, parse_publish_request


def _in(delta: timedelta) -> str:
    return (datetime.now(timezone.utc) + delta).isoformat()


class TestParsePublishRequest:
    def test_minimal_payload(self):
        request = parse_publish_request({"videoUrl": "https://cdn.example.com/v.mp4"})

        assert str(request.video_url) == "https://cdn.example.com/v.mp4"
        assert request.caption is None
        assert request.share_to_feed is False

    def test_non_object_payload(self):
        with pytest.raises(PublishValidationError, match="Invalid JSON payload"):
            parse_publish_request(["videoUrl"])

    def test_missing_video_url(self):
        with pytest.raises(PublishValidationError, match="videoUrl is required"):
            parse_publish_request({"caption": "hi"})

    def test_invalid_video_url(self):
        with pytest.raises(PublishValidationError, match="videoUrl") as excinfo:
            parse_publish_request({"videoUrl": "not a url"})

        assert excinfo.value.details

    def test_caption_limit(self):
        parse_publish_request({"videoUrl": "https://x.example/v.mp4", "caption": "a" * 2200})

        with pytest.raises(PublishValidationError, match="caption"):
            parse_publish_request({"videoUrl": "https://x.example/v.mp4", "caption": "a" * 2201})

    def test_unparseable_schedule(self):
        with pytest.raises(PublishValidationError, match="scheduledPublishTime"):
            parse_publish_request({"videoUrl": "https://x.example/v.mp4", "scheduledPublishTime": "tomorrow-ish"})

    @pytest.mark.parametrize("delta", [timedelta(minutes=5), timedelta(days=90), timedelta(hours=-1)])
    def test_schedule_outside_window(self, delta):
        with pytest.raises(PublishValidationError, match="between 20 minutes and 75 days"):
            parse_publish_request({"videoUrl": "https://x.example/v.mp4", "scheduledPublishTime": _in(delta)})

    def test_schedule_inside_window(self):
        request = parse_publish_request(
            {"videoUrl": "https://x.example/v.mp4", "scheduledPublishTime": _in(timedelta(days=2))}
        )

        assert request.scheduled_publish_time.tzinfo is not None

    def test_naive_schedule_is_utc(self):
        naive = (datetime.now(timezone.utc) + timedelta(hours=3)).replace(tzinfo=None).isoformat()

        request = parse_publish_request({"videoUrl": "https://x.example/v.mp4", "scheduledPublishTime": naive})

        assert request.scheduled_publish_time.utcoffset() == timedelta(0)

    def test_snake_case_accepted(self):
        request = parse_publish_request({"video_url": "https://x.example/v.mp4", "share_to_feed": True})

        assert request.share_to_feed is True


class TestPublishResult:
    def test_serializes_camel_case(self):
        result = PublishResult(id="1", creation_id="2", status="published")

        assert result.model_dump(by_alias=True) == {
            "id": "1",
            "creationId": "2",
            "scheduledPublishTime": None,
            "status": "published",
        }
