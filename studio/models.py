from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

PROCESSING = "processing"
COMPLETED = "completed"
FAILED = "failed"
TERMINAL_STATUSES = (COMPLETED, FAILED)


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class GenerationConfig:
    """Settings chosen for one generation. Never changed after submission."""
    duration: int = 10
    aspect_ratio: str = "16:9"
    style: str = "cinematic"
    quality: str = "standard"

    def to_dict(self) -> dict:
        return {
            "duration": self.duration,
            "aspectRatio": self.aspect_ratio,
            "style": self.style,
            "quality": self.quality
        }

    @classmethod
    def from_dict(cls, data: dict) -> "GenerationConfig":
        return cls(
            duration=data["duration"],
            aspect_ratio=data["aspectRatio"],
            style=data.get("style", "cinematic"),
            quality=data.get("quality", "standard")
        )


@dataclass
class Generation:
    """
    One video creation attempt and its evolving state.

    Only the tracker mutates these. Once status is terminal exactly one
    of video_url/error is set and the record lives in history.
    """
    id: str
    prompt: str
    config: GenerationConfig
    status: str = PROCESSING  # "processing" | "completed" | "failed"
    progress: float = 0
    created_at: str = field(default_factory=utc_now_iso)
    completed_at: Optional[str] = None
    video_url: Optional[str] = None
    error: Optional[str] = None
    task_id: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in TERMINAL_STATUSES

    def to_dict(self) -> dict:
        """Convert to the camelCase record stored in history and returned by the API."""
        data = {
            "id": self.id,
            "prompt": self.prompt,
            "config": self.config.to_dict(),
            "status": self.status,
            "progress": self.progress,
            "createdAt": self.created_at
        }
        optional = {
            "completedAt": self.completed_at,
            "videoUrl": self.video_url,
            "error": self.error,
            "taskId": self.task_id
        }
        data.update({k: v for k, v in optional.items() if v is not None})
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "Generation":
        """
        Rebuild a record from its stored form.

        Raises:
            KeyError, TypeError: If required fields are missing or malformed
        """
        return cls(
            id=data["id"],
            prompt=data["prompt"],
            config=GenerationConfig.from_dict(data["config"]),
            status=data["status"],
            progress=data.get("progress", 0),
            created_at=data["createdAt"],
            completed_at=data.get("completedAt"),
            video_url=data.get("videoUrl"),
            error=data.get("error"),
            task_id=data.get("taskId")
        )
