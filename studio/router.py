from fastapi import APIRouter, HTTPException, Query, Request
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, ConfigDict, Field
import logging

from core.video import (
    ASPECT_RATIO_OPTIONS,
    DURATION_OPTIONS,
    QUALITY_OPTIONS,
    STYLE_OPTIONS,
    ValidationError,
)
from studio.history import HISTORY_SORTS, HISTORY_STATUS_FILTERS, filter_history
from studio.models import GenerationConfig
from studio.tracker import GenerationTracker

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/studio", tags=["studio"])

DEFAULT_CONFIG = GenerationConfig()


class StartGenerationRequest(BaseModel):
    """Prompt plus settings as picked in the generator form."""
    model_config = ConfigDict(populate_by_name=True)

    prompt: str
    duration: int = DEFAULT_CONFIG.duration
    aspect_ratio: str = Field(default=DEFAULT_CONFIG.aspect_ratio, alias="aspectRatio")
    style: str = DEFAULT_CONFIG.style
    quality: str = DEFAULT_CONFIG.quality

    def to_config(self) -> GenerationConfig:
        return GenerationConfig(
            duration=self.duration,
            aspect_ratio=self.aspect_ratio,
            style=self.style,
            quality=self.quality
        )


def _tracker(request: Request) -> GenerationTracker:
    return request.app.state.tracker


def _counts(tracker: GenerationTracker) -> dict:
    return {
        "active": tracker.active_count,
        "completed": tracker.completed_count,
        "failed": tracker.failed_count
    }


@router.get("/options")
async def options():
    """Choices offered by the settings form, with the form defaults."""
    return {
        "durations": DURATION_OPTIONS,
        "aspectRatios": ASPECT_RATIO_OPTIONS,
        "styles": STYLE_OPTIONS,
        "qualities": QUALITY_OPTIONS,
        "defaults": DEFAULT_CONFIG.to_dict()
    }


@router.get("/generations")
async def list_generations(request: Request):
    """Queue and history snapshot for the dashboard."""
    tracker = _tracker(request)
    return {
        "active": [g.to_dict() for g in tracker.active],
        "history": [g.to_dict() for g in tracker.history],
        "counts": _counts(tracker),
        "isGenerating": tracker.is_generating
    }


@router.post("/generations")
async def start_generation(req: StartGenerationRequest, request: Request):
    """
    Start a generation.

    Waits for the proxy to accept the request; the returned record is
    completed, failed, or still processing with a task id.
    """
    try:
        generation = await _tracker(request).start(req.prompt, req.to_config())
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return generation.to_dict()


@router.get("/generations/{generation_id}")
async def get_generation(generation_id: str, request: Request):
    generation = _tracker(request).get(generation_id)
    if generation is None:
        raise HTTPException(status_code=404, detail="Generation not found")
    return generation.to_dict()


@router.delete("/generations/{generation_id}")
async def cancel_generation(generation_id: str, request: Request):
    """Cancel a processing generation. 404 if it isn't in the queue."""
    generation = _tracker(request).cancel(generation_id)
    if generation is None:
        raise HTTPException(status_code=404, detail="No processing generation with that id")
    return generation.to_dict()


@router.post("/generations/{generation_id}/retry")
async def retry_generation(generation_id: str, request: Request):
    """Resubmit a finished generation under a new id."""
    tracker = _tracker(request)
    generation = tracker.get(generation_id)
    if generation is None:
        raise HTTPException(status_code=404, detail="Generation not found")
    if not generation.is_terminal:
        raise HTTPException(status_code=409, detail="Generation is still processing")

    try:
        retried = await tracker.retry(generation)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return retried.to_dict()


@router.get("/history")
async def search_history(
    request: Request,
    search: str = "",
    status: str = Query("all", pattern="^(" + "|".join(HISTORY_STATUS_FILTERS) + ")$"),
    sort: str = Query("newest", pattern="^(" + "|".join(HISTORY_SORTS) + ")$")
):
    """History filtered by prompt text and status, in the requested order."""
    tracker = _tracker(request)
    matches = filter_history(tracker.history, search=search, status=status, sort=sort)
    return {
        "history": [g.to_dict() for g in matches],
        "total": len(tracker.history)
    }


@router.delete("/history")
async def clear_history(request: Request):
    _tracker(request).clear_history()
    logger.info("Cleared generation history")
    return {"status": "cleared"}


@router.get("/history/export", response_class=PlainTextResponse)
async def export_history(request: Request):
    return PlainTextResponse(_tracker(request).export_history(), media_type="application/json")


@router.post("/history/import")
async def import_history(request: Request):
    """Replace history with an exported JSON list sent as the raw body."""
    tracker = _tracker(request)
    data = (await request.body()).decode("utf-8", errors="replace")
    if not tracker.import_history(data):
        raise HTTPException(status_code=400, detail="History import must be a JSON list of generations")
    return {"status": "imported", "count": len(tracker.history)}
