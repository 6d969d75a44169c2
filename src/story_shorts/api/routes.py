"""FastAPI route handlers for the storyboard, render and publish API."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import structlog
from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from pydantic import TypeAdapter, ValidationError

from story_shorts.api.dependencies import get_assembler, get_instagram_client
from story_shorts.api.schemas import RenderResponse, RenderStatusResponse, StoryboardResponse
from story_shorts.errors import PublishValidationError, StoryboardValidationError
from story_shorts.models.brief import StoryBrief, normalize_brief
from story_shorts.models.publish import PublishResult, UploadResult, parse_publish_request
from story_shorts.models.scene import Scene
from story_shorts.models.video import AudioTrack
from story_shorts.nodes.storyboard import generate_storyboard
from story_shorts.nodes.video_assembler import VideoAssembler
from story_shorts.tools.instagram import InstagramClient
from story_shorts.tools.supabase_storage import upload_video

logger = structlog.get_logger()

router = APIRouter(prefix="/api")

_SCENE_LIST = TypeAdapter(list[Scene])


def _parse_scenes(raw: str) -> list[Scene]:
    try:
        return _SCENE_LIST.validate_json(raw)
    except ValidationError as exc:
        issue = exc.errors()[0]
        location = ".".join(str(part) for part in issue["loc"])
        raise StoryboardValidationError(
            f"Invalid scenes ({location}): {issue['msg']}",
            details=exc.errors(include_url=False, include_context=False, include_input=False),
        ) from exc


def _safe_output_name(name: Optional[str]) -> Optional[str]:
    """Strip directories from a caller-chosen file name and force an .mp4 suffix."""
    if not name or not name.strip():
        return None
    base = Path(name.strip()).name
    if not base:
        return None
    return base if base.lower().endswith(".mp4") else f"{base}.mp4"


@router.post("/storyboard", response_model=StoryboardResponse)
async def create_storyboard(brief: StoryBrief):
    """Normalize the brief and expand it into a fresh scene sequence."""
    brief_used = normalize_brief(brief)
    scenes = generate_storyboard(brief_used)
    return StoryboardResponse(
        brief_used=brief_used,
        scenes=scenes,
        total_duration=sum(scene.duration for scene in scenes),
    )


@router.post("/render", response_model=RenderResponse)
async def render_video(
    scenes: str = Form(..., description="JSON array of scenes"),
    audio: Optional[UploadFile] = File(default=None),
    output_name: Optional[str] = Form(default=None, alias="outputName"),
    assembler: VideoAssembler = Depends(get_assembler),
):
    """Render the scenes, with optional audio, into one MP4 kept under /files/output."""
    parsed = _parse_scenes(scenes)

    track = None
    if audio is not None and audio.filename:
        track = AudioTrack(file_name=audio.filename, content=await audio.read())

    video = await assembler.assemble(parsed, audio=track, output_name=_safe_output_name(output_name))

    return RenderResponse(
        file_name=video.file_name,
        content_type=video.content_type,
        preview_url=f"/files/output/{video.file_name}",
        duration_sec=video.duration_sec,
        size_bytes=video.size_bytes,
    )


@router.get("/render/status", response_model=RenderStatusResponse)
async def render_status(assembler: VideoAssembler = Depends(get_assembler)):
    return RenderStatusResponse(
        encoder_state=assembler.encoder.state.value,
        ready=assembler.encoder.is_ready,
        busy=assembler.is_busy,
        progress=assembler.progress,
    )


@router.post("/upload", response_model=UploadResult)
async def upload_file(file: Optional[UploadFile] = File(default=None)):
    """Upload a rendered video to object storage and return its public URL."""
    if file is None:
        raise HTTPException(status_code=400, detail="File payload is required")

    content = await file.read()
    return await upload_video(content, file.filename or "video.mp4", file.content_type)


@router.post("/instagram/publish", response_model=PublishResult)
async def publish_to_instagram(
    request: Request,
    client: InstagramClient = Depends(get_instagram_client),
):
    """Publish a hosted video to Instagram, immediately or on a schedule."""
    client.ensure_configured()

    try:
        payload = await request.json()
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise PublishValidationError("Invalid JSON payload") from exc

    publish_request = parse_publish_request(payload)
    result = await client.publish(publish_request)
    logger.info("instagram.publish.done", id=result.id, status=result.status)
    return result
