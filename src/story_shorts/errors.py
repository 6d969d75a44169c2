"""Exception taxonomy shared by the pipeline, the collaborators and the API."""

from __future__ import annotations

from typing import Any


class StoryShortsError(RuntimeError):
    """Base exception for every failure raised by story-shorts."""

    status_code: int = 500

    def __init__(self, message: str, details: Any = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


class ConfigurationError(StoryShortsError):
    """Raised when credentials or settings required by a collaborator are missing."""


class StoryboardValidationError(StoryShortsError):
    """Raised when a storyboard cannot be rendered as given."""

    status_code = 400


class PublishValidationError(StoryShortsError):
    """Raised when a publish request is rejected before any network call."""

    status_code = 400


class ResourceLoadError(StoryShortsError):
    """Raised when an asset needed for a frame cannot be loaded."""

    status_code = 422


class ImageLoadError(ResourceLoadError):
    """Raised when a background image cannot be fetched or decoded."""

    def __init__(self, url: str, reason: str = "") -> None:
        message = f"Failed to load image {url}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.url = url


class EncoderError(StoryShortsError):
    """Raised when the ffmpeg invocation fails."""


class EncoderLoadError(EncoderError):
    """Raised when the encoder cannot be initialized."""


class EncoderNotReadyError(EncoderError):
    """Raised when a render is requested before the encoder is ready."""

    status_code = 503


class AssemblerBusyError(StoryShortsError):
    """Raised when a render is requested while another one is in flight."""

    status_code = 409


class RemoteAPIError(StoryShortsError):
    """Raised when a remote collaborator rejects a request."""


class InstagramAPIError(RemoteAPIError):
    """Raised when the Instagram Graph API returns an error response."""

    status_code = 400


class UploadError(RemoteAPIError):
    """Raised when the object storage upload fails."""
