from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
import logging

from core.video import (
    MAX_DURATION,
    MAX_PROMPT_LENGTH,
    SUPPORTED_MODELS,
    VALID_ASPECT_RATIOS,
    validate_video_request,
)
from video.base import ProviderError, VideoProvider
from video.schemas import HealthStatus, VideoGenerationRequest, VideoGenerationResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/generate-video", tags=["video"])


def _failure(error: str, status_code: int, with_status: bool = True) -> JSONResponse:
    body = VideoGenerationResponse(success=False, error=error, status="failed" if with_status else None)
    return JSONResponse(content=body.to_json(), status_code=status_code)


def _provider(request: Request) -> VideoProvider:
    return request.app.state.video_provider


@router.post("")
async def generate_video(req: VideoGenerationRequest, request: Request):
    """
    Validate a submission and forward it to the video model.

    Response format:
    {
        "success": bool,
        "videoUrl": string?,        # when completed
        "taskId": string?,          # when processing
        "status": "processing" | "completed" | "failed",
        "estimatedTime": number?,   # seconds, when processing
        "error": string?
    }
    """
    error = validate_video_request(req.prompt, req.duration, req.aspect_ratio)
    if error:
        logger.info(f"Rejected video request: {error}")
        return _failure(error, 400, with_status=False)

    try:
        result = await _provider(request).generate_video(req)
    except ProviderError as e:
        logger.warning(f"Video provider failed: {e}")
        return _failure(str(e), 500)
    except Exception as e:
        logger.error(f"Video generation error: {str(e)}", exc_info=True)
        return _failure(str(e) or "Internal server error", 500)

    logger.info(f"Video request handled with status {result.status}")
    return JSONResponse(content=result.to_json())


@router.get("")
async def health():
    """Health check with the service limits clients validate against."""
    status = HealthStatus(
        status="healthy",
        service="video-generation",
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
        models=SUPPORTED_MODELS,
        supported_formats=list(VALID_ASPECT_RATIOS),
        max_duration=MAX_DURATION,
        max_prompt_length=MAX_PROMPT_LENGTH
    )
    return status.model_dump(by_alias=True)


@router.get("/status")
async def task_status(taskId: str, request: Request):
    """
    Get the status of a task handed out by a processing submission.

    Unknown task ids get a 404 with the usual failure body.
    """
    try:
        task = await _provider(request).check_status(taskId)
    except ValueError:
        logger.warning(f"Video task {taskId} not found")
        return _failure("Task not found", 404)
    except Exception as e:
        logger.error(f"Error checking video task {taskId}: {str(e)}", exc_info=True)
        return _failure("Failed to check task status", 500)

    return JSONResponse(content=task.to_response().to_json())
