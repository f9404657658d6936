"""
HTTP client for the generation proxy.

Submissions and status checks never raise: transport errors, non-2xx
replies and unreadable bodies are folded into a failed
VideoGenerationResponse. Only health() lets errors through.
"""
import logging
from typing import Optional

import httpx

from video.schemas import HealthStatus, VideoGenerationRequest, VideoGenerationResponse

logger = logging.getLogger(__name__)


class GenerationAPIClient:
    """
    Thin async client for /generate-video.

    Args:
        base_url: API root, e.g. "http://localhost:8000/api"
        transport: Optional httpx transport (tests plug in a mock or the ASGI app)
        timeout: Per-request timeout in seconds
    """

    def __init__(
        self,
        base_url: str = "/api",
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 900.0
    ):
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(transport=transport, timeout=timeout)

    @staticmethod
    def _failure(error: Exception) -> VideoGenerationResponse:
        return VideoGenerationResponse(
            success=False,
            error=str(error) or "Unknown error occurred",
            status="failed"
        )

    async def _call(self, method: str, url: str, **kwargs) -> VideoGenerationResponse:
        res = await self._client.request(method, url, **kwargs)
        if res.is_error:
            raise httpx.HTTPStatusError(
                f"HTTP error! status: {res.status_code}",
                request=res.request,
                response=res
            )
        return VideoGenerationResponse.model_validate(res.json())

    async def submit(self, request: VideoGenerationRequest) -> VideoGenerationResponse:
        """
        Send a generation request to the proxy.

        Args:
            request: Request already validated by the caller

        Returns:
            VideoGenerationResponse: completed, processing or failed
        """
        try:
            return await self._call(
                "POST",
                f"{self.base_url}/generate-video",
                json=request.model_dump(by_alias=True)
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Video generation API error: {e}")
            return self._failure(e)

    async def check_status(self, task_id: str) -> VideoGenerationResponse:
        """Look up a processing task by id. Same failure shape as submit."""
        try:
            return await self._call(
                "GET",
                f"{self.base_url}/generate-video/status",
                params={"taskId": task_id}
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Status check API error: {e}")
            return self._failure(e)

    async def health(self) -> HealthStatus:
        """
        Fetch service metadata.

        Raises:
            httpx.HTTPError: On transport failure or a non-2xx reply
        """
        try:
            res = await self._client.get(f"{self.base_url}/generate-video")
            res.raise_for_status()
            return HealthStatus.model_validate(res.json())
        except httpx.HTTPError as e:
            logger.error(f"Health check API error: {e}")
            raise

    async def aclose(self) -> None:
        await self._client.aclose()
