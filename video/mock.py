"""
Mock video provider for testing and fallback scenarios.

Answers every submission with "processing" and completes the task
on the first status check. Used for development and testing when
real API keys aren't available.
"""
from core.video import estimate_processing_time, generate_task_id
from video.base import VideoProvider, VideoTask
from video.polling import create_task, get_task, mark_task_completed
from video.schemas import VideoGenerationRequest, VideoGenerationResponse

MOCK_VIDEO_URL = "https://sample-videos.com/video321/mp4/720/big_buck_bunny_720p_1mb.mp4"


class MockProvider(VideoProvider):
    """
    Mock video provider.

    Simulates async generation: processing on submit,
    processing → completed after the first status check.
    """

    def __init__(self):
        self.provider_name = "mock"

    async def generate_video(self, request: VideoGenerationRequest) -> VideoGenerationResponse:
        """
        Register a mock task.

        Args:
            request: The validated generation request (only duration and
                quality are used, for the time estimate)

        Returns:
            VideoGenerationResponse: processing, with task id and estimate
        """
        task_id = generate_task_id()
        estimated = estimate_processing_time(request.duration, request.quality)
        create_task(task_id, provider=self.provider_name, estimated_time=estimated)
        return VideoGenerationResponse(
            success=True,
            status="processing",
            task_id=task_id,
            estimated_time=estimated
        )

    async def check_status(self, task_id: str) -> VideoTask:
        """
        Check status of a mock task.

        Raises:
            ValueError: If task doesn't exist
        """
        task = get_task(task_id, provider=self.provider_name)
        if not task:
            raise ValueError(f"Task {task_id} not found")

        if task.status == "processing":
            mark_task_completed(task_id, MOCK_VIDEO_URL)
            task = get_task(task_id)

        return task
