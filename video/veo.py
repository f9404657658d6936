"""
Veo video generation provider.

Sends the enhanced prompt to an OpenAI-style chat-completions gateway
that fronts the Veo model, then reads the video link out of the reply.
If no API key is configured, it falls back to mocked behavior.
"""
import logging
from typing import Optional

import httpx

from core.config import Settings, get_settings
from core.video import (
    create_enhanced_prompt,
    estimate_processing_time,
    extract_video_url,
    generate_task_id,
    looks_like_processing,
)
from video.base import ProviderError, VideoProvider, VideoTask
from video.mock import MOCK_VIDEO_URL
from video.polling import create_task, get_task, mark_task_completed
from video.schemas import VideoGenerationRequest, VideoGenerationResponse

logger = logging.getLogger(__name__)


class VeoProvider(VideoProvider):
    """
    Veo provider behind a chat-completions gateway.

    If VIDEO_API_KEY is not set, falls back to mocked behavior
    to allow development/testing without API keys.
    """

    def __init__(self, settings: Optional[Settings] = None, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.provider_name = "veo"
        self.settings = settings or get_settings()
        self.transport = transport
        self.use_mock = not bool(self.settings.video_api_key)
        if self.use_mock:
            logger.warning("VIDEO_API_KEY not set - using mock mode")

    def _headers(self) -> dict:
        headers = {
            "Authorization": f"Bearer {self.settings.video_api_key}",
            "Content-Type": "application/json"
        }
        if self.settings.video_customer_id:
            headers["customerId"] = self.settings.video_customer_id
        return headers

    async def generate_video(self, request: VideoGenerationRequest) -> VideoGenerationResponse:
        """
        Submit a generation to the gateway.

        Args:
            request: The validated generation request

        Returns:
            VideoGenerationResponse: completed with a URL, or processing
            with a task id

        Raises:
            ProviderError: On a non-2xx reply or an unusable response body
        """
        enhanced_prompt = create_enhanced_prompt(
            request.prompt,
            request.duration,
            request.aspect_ratio,
            request.style,
            request.quality
        )

        if self.use_mock:
            logger.info(f"[MOCK] Veo generation for prompt: {request.prompt[:50]}...")
            return self._processing(request)

        payload = {
            "model": self.settings.video_model,
            "messages": [
                {"role": "user", "content": enhanced_prompt}
            ]
        }

        async with httpx.AsyncClient(timeout=self.settings.video_timeout, transport=self.transport) as client:
            res = await client.post(self.settings.video_api_url, json=payload, headers=self._headers())

        if res.is_error:
            logger.error(f"Video generation API error: {res.text}")
            raise ProviderError(f"Failed to generate video: {res.status_code} {res.reason_phrase}")

        try:
            data = res.json()
        except ValueError:
            logger.error(f"Video generation API returned non-JSON body: {res.text[:200]}")
            raise ProviderError("Invalid response from video generation service")

        content = self._message_content(data)
        if content is None:
            raise ProviderError("Invalid response from video generation service")

        video_url = extract_video_url(content)
        if video_url:
            return VideoGenerationResponse(success=True, video_url=video_url, status="completed")

        if looks_like_processing(content):
            return self._processing(request)

        # Some gateway replies are nothing but the link itself
        return VideoGenerationResponse(success=True, video_url=content.strip(), status="completed")

    @staticmethod
    def _message_content(data) -> Optional[str]:
        if not isinstance(data, dict):
            return None
        choices = data.get("choices")
        if not choices or not isinstance(choices, list):
            return None
        message = choices[0].get("message") if isinstance(choices[0], dict) else None
        if not message:
            return None
        content = message.get("content")
        return content if isinstance(content, str) else None

    def _processing(self, request: VideoGenerationRequest) -> VideoGenerationResponse:
        task_id = generate_task_id()
        estimated = estimate_processing_time(request.duration, request.quality)
        create_task(task_id, provider=self.provider_name, estimated_time=estimated)
        logger.info(f"Veo generation {task_id} still processing (estimated {estimated}s)")
        return VideoGenerationResponse(
            success=True,
            status="processing",
            task_id=task_id,
            estimated_time=estimated
        )

    async def check_status(self, task_id: str) -> VideoTask:
        """
        Check the status of a processing task.

        The gateway has no task endpoint, so this reports what was
        recorded when the task was handed out. In mock mode the task
        completes on the first check.

        Raises:
            ValueError: If task doesn't exist
        """
        task = get_task(task_id, provider=self.provider_name)
        if not task:
            raise ValueError(f"Task {task_id} not found")

        if self.use_mock and task.status == "processing":
            mark_task_completed(task_id, MOCK_VIDEO_URL)
            task = get_task(task_id)

        return task
