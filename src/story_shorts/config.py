"""Application configuration loaded from environment variables."""

from pathlib import Path

from pydantic_settings import BaseSettings

from story_shorts.errors import ConfigurationError


class Settings(BaseSettings):
    model_config = {"env_file": ".env", "env_file_encoding": "utf-8", "extra": "ignore"}

    # Instagram Graph API
    instagram_user_id: str = ""
    instagram_access_token: str = ""
    instagram_graph_version: str = "v18.0"
    instagram_graph_url: str = "https://graph.facebook.com"

    # Object storage
    supabase_url: str = ""
    supabase_service_role_key: str = ""
    supabase_storage_bucket: str = "videos"

    # CORS (comma separated)
    allowed_origins: str = ""

    # Video Output
    video_width: int = 1080
    video_height: int = 1920
    font_family: str = ""

    # Encoder
    ffmpeg_binary: str = ""
    encoder_timeout_sec: float = 300.0

    # Remote fetches (background images, Graph API)
    http_timeout_sec: float = 60.0

    # Output
    output_base_dir: str = "./output"
    # Must live outside output_base_dir, which is served publicly
    scratch_dir: str = "./.scratch"
    # Newest preview MP4s kept in output_base_dir; 0 keeps all
    preview_retention: int = 20


settings = Settings()


def get_output_dir() -> Path:
    """Directory where rendered videos are kept for preview."""
    path = Path(settings.output_base_dir)
    path.mkdir(parents=True, exist_ok=True)
    return path


def get_scratch_dir() -> Path:
    """Working directory for frames, the concat manifest and uploaded audio.

    Raises:
        ConfigurationError: If it resolves inside ``output_base_dir``.
    """
    scratch = Path(settings.scratch_dir).resolve()
    output = Path(settings.output_base_dir).resolve()
    if scratch == output or output in scratch.parents:
        raise ConfigurationError(
            f"SCRATCH_DIR ({scratch}) must not be inside OUTPUT_BASE_DIR ({output})"
        )
    return scratch
