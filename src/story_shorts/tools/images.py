"""Background image download for image-backed scenes."""

from __future__ import annotations

from typing import Awaitable, Callable, Optional

import httpx
import structlog

from story_shorts.config import settings
from story_shorts.errors import ImageLoadError

logger = structlog.get_logger()

ImageFetcher = Callable[[str], Awaitable[bytes]]


async def fetch_image(url: str, client: Optional[httpx.AsyncClient] = None) -> bytes:
    """Download *url* and return the raw image bytes.

    Raises:
        ImageLoadError: On any transport error, non-2xx status or empty body.
    """
    logger.info("fetch_image.start", url=url)

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=settings.http_timeout_sec, follow_redirects=True) as http:
                response = await http.get(url)
        else:
            response = await client.get(url)
        response.raise_for_status()
    except httpx.HTTPError as exc:
        logger.warning("fetch_image.failed", url=url, error=str(exc))
        raise ImageLoadError(url, str(exc)) from exc

    if not response.content:
        raise ImageLoadError(url, "empty response body")

    logger.info("fetch_image.done", url=url, bytes_read=len(response.content))
    return response.content
