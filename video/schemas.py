from pydantic import BaseModel, ConfigDict, Field
from typing import Any, List, Optional


class VideoGenerationRequest(BaseModel):
    """
    Submission body for POST /api/generate-video.

    prompt, duration and aspectRatio accept any JSON value so that wrong
    types reach validate_video_request and get the 400 messages clients
    expect instead of a 422.
    """
    model_config = ConfigDict(populate_by_name=True)

    prompt: Any = None
    duration: Any = None
    aspect_ratio: Any = Field(default=None, alias="aspectRatio")
    style: str = "default"
    quality: str = "standard"


class VideoGenerationResponse(BaseModel):
    """Uniform result shape for submissions and status checks."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool
    video_url: Optional[str] = Field(default=None, alias="videoUrl")
    error: Optional[str] = None
    task_id: Optional[str] = Field(default=None, alias="taskId")
    status: Optional[str] = None  # "processing" | "completed" | "failed"
    estimated_time: Optional[float] = Field(default=None, alias="estimatedTime")

    def to_json(self) -> dict:
        """Wire form: camelCase keys, unset fields dropped."""
        return self.model_dump(by_alias=True, exclude_none=True)


class HealthStatus(BaseModel):
    """Service metadata returned by GET /api/generate-video."""
    model_config = ConfigDict(populate_by_name=True)

    status: str
    service: str
    timestamp: str
    models: List[str] = []
    supported_formats: List[str] = Field(default_factory=list, alias="supportedFormats")
    max_duration: int = Field(alias="maxDuration")
    max_prompt_length: int = Field(alias="maxPromptLength")
