"""
Environment-driven settings.

Values come from the process environment, with the repo-level .env file
loaded first so local development does not need exported variables.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

env_path = Path(__file__).parent.parent / ".env"
load_dotenv(env_path)

DEFAULT_VIDEO_API_URL = "https://oi-server.onrender.com/chat/completions"
DEFAULT_VIDEO_MODEL = "replicate/google/veo-3"


@dataclass
class Settings:
    """Runtime configuration for the proxy and the studio."""
    video_provider: str = "veo"
    video_api_key: Optional[str] = None
    video_api_url: str = DEFAULT_VIDEO_API_URL
    video_model: str = DEFAULT_VIDEO_MODEL
    video_customer_id: Optional[str] = None
    video_timeout: float = 900.0
    studio_api_base_url: str = "http://localhost:8000/api"
    studio_data_dir: Path = Path(__file__).parent.parent / "data"
    cors_origins: List[str] = field(default_factory=lambda: ["http://localhost:3000"])


def _read_env(name: str) -> Optional[str]:
    value = os.getenv(name)
    if value is None:
        return None
    value = value.strip()
    return value or None


def get_settings() -> Settings:
    """
    Build settings from the current environment.

    Called at startup and by the provider factory, so tests can
    monkeypatch environment variables before constructing the app.
    """
    settings = Settings()
    settings.video_provider = (_read_env("VIDEO_PROVIDER") or settings.video_provider).lower()
    settings.video_api_key = _read_env("VIDEO_API_KEY")
    settings.video_api_url = _read_env("VIDEO_API_URL") or settings.video_api_url
    settings.video_model = _read_env("VIDEO_MODEL") or settings.video_model
    settings.video_customer_id = _read_env("VIDEO_CUSTOMER_ID")

    timeout = _read_env("VIDEO_TIMEOUT")
    if timeout:
        settings.video_timeout = float(timeout)

    settings.studio_api_base_url = (
        _read_env("STUDIO_API_BASE_URL") or settings.studio_api_base_url
    ).rstrip("/")

    data_dir = _read_env("STUDIO_DATA_DIR")
    if data_dir:
        settings.studio_data_dir = Path(data_dir).expanduser()

    origins = _read_env("CORS_ORIGINS")
    if origins:
        settings.cors_origins = [o.strip() for o in origins.split(",") if o.strip()]

    return settings
