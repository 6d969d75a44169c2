"""Instagram Graph API publishing: media container, then media_publish."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

import httpx
import structlog

from story_shorts.config import settings
from story_shorts.errors import ConfigurationError, InstagramAPIError, RemoteAPIError
from story_shorts.models.publish import PublishRequest, PublishResult

logger = structlog.get_logger()


class InstagramClient:
    """Publishes an already-hosted video to one Instagram business account.

    Pass ``http_client`` to reuse a connection pool (or a mock transport in
    tests); otherwise a short-lived ``httpx.AsyncClient`` is opened per call.
    """

    def __init__(
        self,
        user_id: Optional[str] = None,
        access_token: Optional[str] = None,
        graph_version: Optional[str] = None,
        base_url: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.user_id = user_id if user_id is not None else settings.instagram_user_id
        self.access_token = access_token if access_token is not None else settings.instagram_access_token
        self.graph_version = graph_version or settings.instagram_graph_version
        self.base_url = (base_url or settings.instagram_graph_url).rstrip("/")
        self._http_client = http_client

    def ensure_configured(self) -> None:
        if not self.user_id or not self.access_token:
            raise ConfigurationError(
                "Missing INSTAGRAM_USER_ID or INSTAGRAM_ACCESS_TOKEN environment variables."
            )

    def _endpoint(self, edge: str) -> str:
        return f"{self.base_url}/{self.graph_version}/{self.user_id}/{edge}"

    async def _post_form(self, edge: str, params: dict[str, str], fallback_error: str) -> dict[str, Any]:
        url = self._endpoint(edge)
        try:
            if self._http_client is not None:
                response = await self._http_client.post(url, data=params)
            else:
                async with httpx.AsyncClient(timeout=settings.http_timeout_sec) as http:
                    response = await http.post(url, data=params)
        except httpx.HTTPError as exc:
            logger.exception("instagram.request.transport_failed", edge=edge)
            raise RemoteAPIError(f"{fallback_error}: Instagram Graph API unreachable", details=str(exc)) from exc

        try:
            data = response.json()
        except ValueError:
            data = {"raw": response.text}

        if response.is_error:
            error = data.get("error") if isinstance(data, dict) else None
            message = error.get("message") if isinstance(error, dict) else None
            logger.error("instagram.request.failed", edge=edge, status=response.status_code)
            raise InstagramAPIError(message or fallback_error, details=data)

        return data

    async def create_media_container(self, request: PublishRequest) -> str:
        """Register the hosted video with Instagram and return the container id."""
        params = {
            "access_token": self.access_token,
            "media_type": "VIDEO",
            "video_url": str(request.video_url),
        }
        if request.caption:
            params["caption"] = request.caption
        if request.cover_url:
            params["cover_url"] = str(request.cover_url)
        if request.share_to_feed:
            params["share_to_feed"] = "true"

        data = await self._post_form("media", params, "Failed to create media container")
        creation_id = data.get("id") if isinstance(data, dict) else None
        if not creation_id:
            logger.error("instagram.container.missing_id", body=data)
            raise InstagramAPIError("Failed to create media container", details=data)
        logger.info("instagram.container.created", creation_id=creation_id)
        return creation_id

    async def publish_media(
        self,
        creation_id: str,
        scheduled_publish_time: Optional[datetime] = None,
    ) -> dict[str, Any]:
        params = {"access_token": self.access_token, "creation_id": creation_id}
        if scheduled_publish_time is not None:
            params["scheduled_publish_time"] = str(int(scheduled_publish_time.timestamp()))
            params["published"] = "false"

        data = await self._post_form("media_publish", params, "Failed to publish media")
        logger.info("instagram.media.published", creation_id=creation_id, publish_id=data.get("id"))
        return data

    async def publish(self, request: PublishRequest) -> PublishResult:
        """Create the container and publish it, immediately or on a schedule.

        Raises:
            ConfigurationError: If the account id or token is missing.
            InstagramAPIError: If either Graph API call is rejected.
            RemoteAPIError: If the Graph API cannot be reached.
        """
        self.ensure_configured()
        logger.info(
            "instagram.publish.start",
            scheduled=request.scheduled_publish_time is not None,
            has_caption=bool(request.caption),
        )

        creation_id = await self.create_media_container(request)
        publication = await self.publish_media(creation_id, request.scheduled_publish_time)

        scheduled_at = None
        if publication.get("scheduled_publish_time"):
            scheduled_at = datetime.fromtimestamp(
                int(publication["scheduled_publish_time"]), tz=timezone.utc
            ).isoformat().replace("+00:00", "Z")

        return PublishResult(
            id=publication.get("id") or creation_id,
            creation_id=creation_id,
            scheduled_publish_time=scheduled_at,
            status="scheduled" if publication.get("success") else "published",
        )
