"""
FastAPI application for the video studio.

Hosts the generation proxy (/api/generate-video) and the studio
endpoints (/studio) that drive the generation tracker.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

import httpx
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import Settings, get_settings
from studio.client import GenerationAPIClient
from studio.history import HistoryStore
from studio.router import router as studio_router
from studio.storage import JsonFileStorage
from studio.tracker import GenerationTracker
from video.base import VideoProvider
from video.factory import get_video_provider
from video.router import router as video_router

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def create_app(
    settings: Optional[Settings] = None,
    video_provider: Optional[VideoProvider] = None,
    studio_transport: Optional[httpx.AsyncBaseTransport] = None,
    tracker: Optional[GenerationTracker] = None
) -> FastAPI:
    """
    Build the application and wire its dependencies.

    Args:
        settings: Configuration; read from the environment when omitted
        video_provider: Provider behind the proxy; chosen by VIDEO_PROVIDER when omitted
        studio_transport: httpx transport for the studio's proxy client
        tracker: Ready-made tracker, replacing the default wiring

    Returns:
        FastAPI: The configured application
    """
    settings = settings or get_settings()

    if tracker is None:
        client = GenerationAPIClient(
            settings.studio_api_base_url,
            transport=studio_transport,
            timeout=settings.video_timeout
        )
        storage = JsonFileStorage(settings.studio_data_dir / "storage.json")
        tracker = GenerationTracker(client, HistoryStore(storage))

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        tracker.start_ticker()
        logger.info(f"Studio ready, proxy at {settings.studio_api_base_url}")
        yield
        await tracker.aclose()
        await tracker.client.aclose()

    app = FastAPI(lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.state.settings = settings
    app.state.video_provider = video_provider or get_video_provider(settings)
    app.state.tracker = tracker

    # Include routers
    app.include_router(video_router)
    app.include_router(studio_router)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
