"""Supabase Storage upload for rendered videos."""

from __future__ import annotations

import asyncio
import re
import time
from typing import Optional

import structlog
from supabase import create_client

from story_shorts.config import settings
from story_shorts.errors import ConfigurationError, UploadError
from story_shorts.models.publish import UploadResult

logger = structlog.get_logger()

DEFAULT_CONTENT_TYPE = "video/mp4"
PATH_PREFIX = "videos"

_UNSAFE_CHARS_RE = re.compile(r"[^a-z0-9.-]")
_DASH_RUN_RE = re.compile(r"-+")
_EXTENSION_RE = re.compile(r"\.[a-zA-Z0-9]+$")


def sanitize_file_name(name: str) -> str:
    """Lower-case *name*, replace anything outside ``[a-z0-9.-]`` and collapse dash runs."""
    return _DASH_RUN_RE.sub("-", _UNSAFE_CHARS_RE.sub("-", name.lower()))


def build_pathname(file_name: str, now_ms: Optional[int] = None) -> str:
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"{PATH_PREFIX}/{now_ms}-{sanitize_file_name(file_name)}"


def public_url(pathname: str) -> str:
    bucket = settings.supabase_storage_bucket
    return f"{settings.supabase_url}/storage/v1/object/public/{bucket}/{pathname}"


def _get_supabase_client():
    """Create a Supabase client using service_role key."""
    if not settings.supabase_url or not settings.supabase_service_role_key:
        raise ConfigurationError("Missing SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY environment variables.")
    return create_client(settings.supabase_url, settings.supabase_service_role_key)


def _upload_bytes_sync(client, pathname: str, content: bytes, content_type: str) -> None:
    """Upload one object to Supabase Storage (sync, runs in thread pool)."""
    client.storage.from_(settings.supabase_storage_bucket).upload(
        pathname,
        content,
        file_options={"content-type": content_type, "upsert": "true"},
    )


async def upload_video(
    content: bytes,
    file_name: str,
    content_type: Optional[str] = None,
    client=None,
) -> UploadResult:
    """Upload a rendered video and return its public URL.

    Runs the sync Supabase SDK call in a thread pool to avoid blocking the event loop.

    Raises:
        ConfigurationError: If the Supabase credentials are not configured.
        UploadError: If the storage call fails.
    """
    if client is None:
        client = _get_supabase_client()

    pathname = build_pathname(file_name)
    match = _EXTENSION_RE.search(file_name)
    extension = match.group(0) if match else ".mp4"

    try:
        await asyncio.to_thread(
            _upload_bytes_sync, client, pathname, content, content_type or DEFAULT_CONTENT_TYPE
        )
    except Exception as exc:
        logger.exception("supabase.upload.failed", pathname=pathname)
        raise UploadError(
            "Upload failed. Check storage credentials and quota.",
            details=str(exc),
        ) from exc

    url = public_url(pathname)
    logger.info("supabase.upload.success", pathname=pathname, size_bytes=len(content))
    return UploadResult(url=url, pathname=pathname, extension=extension)
