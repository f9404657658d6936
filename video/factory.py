"""
Video provider factory.

Centralizes provider creation so new backends can be added
without modifying main.py.
"""
import logging
from typing import Optional

from core.config import Settings, get_settings
from video.veo import VeoProvider
from video.mock import MockProvider

logger = logging.getLogger(__name__)


def get_video_provider(settings: Optional[Settings] = None):
    """
    Get video provider based on the VIDEO_PROVIDER setting.

    Defaults to 'veo'. VeoProvider will use mock mode
    if VIDEO_API_KEY is missing, so it's safe to use in development.

    Returns:
        VideoProvider: The configured video provider instance
    """
    settings = settings or get_settings()
    provider_name = settings.video_provider.lower()

    if provider_name == "veo":
        return VeoProvider(settings)
    elif provider_name == "mock":
        return MockProvider()
    else:
        logger.warning(f"Unknown provider '{provider_name}', defaulting to Veo")
        return VeoProvider(settings)
