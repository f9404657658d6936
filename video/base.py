from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from video.schemas import VideoGenerationRequest, VideoGenerationResponse


class ProviderError(ValueError):
    """
    Raised when the upstream model call fails.

    The message is safe to show to the client; internal details
    are logged where the error is raised.
    """


@dataclass
class VideoTask:
    """
    Standardized task contract for asynchronous generations.
    Created when a provider answers "still processing".
    """
    task_id: str
    status: str  # "processing" | "completed"
    video_url: Optional[str]
    provider: str
    created_at: datetime
    estimated_time: Optional[float] = None

    def to_response(self) -> VideoGenerationResponse:
        """Convert VideoTask to the status response shape."""
        return VideoGenerationResponse(
            success=True,
            status=self.status,
            task_id=self.task_id,
            video_url=self.video_url,
            estimated_time=self.estimated_time if self.status == "processing" else None
        )


class VideoProvider(ABC):
    """
    Abstract interface for video generation providers.
    All providers must implement generate_video and check_status.
    """

    @abstractmethod
    async def generate_video(self, request: VideoGenerationRequest) -> VideoGenerationResponse:
        """
        Submit an already validated request to the model.

        Args:
            request: The validated generation request

        Returns:
            VideoGenerationResponse: completed with a URL, or processing
            with a task id and estimated time

        Raises:
            ProviderError: If the model call fails or returns garbage
        """
        pass

    @abstractmethod
    async def check_status(self, task_id: str) -> VideoTask:
        """
        Check the status of a task handed out by generate_video.

        Args:
            task_id: The task identifier

        Returns:
            VideoTask: The current task state

        Raises:
            ValueError: If the task doesn't exist
        """
        pass
