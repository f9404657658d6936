"""
Centralized video task tracking.

Providers register a task here whenever they answer "processing",
so the status endpoint has a single source of truth to read from.
Tasks older than TASK_TTL are dropped and at most MAX_TASKS are kept.
"""
from typing import Dict, Optional
from datetime import datetime, timedelta
from video.base import VideoTask

TASK_TTL = timedelta(hours=1)
MAX_TASKS = 1000

# In-memory task store; lost on restart
_TASKS: Dict[str, VideoTask] = {}


def prune_tasks(now: Optional[datetime] = None) -> int:
    """
    Drop expired tasks, then the oldest ones beyond MAX_TASKS.

    Returns:
        Number of tasks removed
    """
    now = now or datetime.now()
    expired = [task_id for task_id, task in _TASKS.items() if now - task.created_at > TASK_TTL]
    for task_id in expired:
        del _TASKS[task_id]

    overflow = len(_TASKS) - MAX_TASKS
    if overflow > 0:
        oldest = sorted(_TASKS.values(), key=lambda task: task.created_at)[:overflow]
        for task in oldest:
            del _TASKS[task.task_id]

    return len(expired) + max(overflow, 0)


def create_task(task_id: str, provider: str, estimated_time: Optional[float] = None) -> VideoTask:
    """
    Create a new task in processing status.

    Args:
        task_id: Unique task identifier
        provider: Provider name (e.g., "veo", "mock")
        estimated_time: Seconds the provider expects to need

    Returns:
        VideoTask: The newly created task
    """
    task = VideoTask(
        task_id=task_id,
        status="processing",
        video_url=None,
        provider=provider,
        created_at=datetime.now(),
        estimated_time=estimated_time
    )
    _TASKS[task_id] = task
    prune_tasks()
    return task


def get_task(task_id: str, provider: Optional[str] = None) -> Optional[VideoTask]:
    """
    Retrieve a task by ID, or None.

    Args:
        task_id: The task identifier
        provider: When given, only a task registered by this provider matches
    """
    task = _TASKS.get(task_id)
    if task is not None and provider is not None and task.provider != provider:
        return None
    return task


def update_task_status(task_id: str, status: str, video_url: Optional[str] = None) -> bool:
    """
    Update task status.
    Completed tasks are never changed again.

    Returns:
        True if update succeeded, False if task not found or already completed
    """
    task = _TASKS.get(task_id)
    if task is None or task.status == "completed":
        return False

    task.status = status
    if video_url is not None:
        task.video_url = video_url
    return True


def mark_task_completed(task_id: str, video_url: str) -> bool:
    """Transition task to completed with its video URL."""
    return update_task_status(task_id, "completed", video_url=video_url)


def clear_tasks() -> None:
    _TASKS.clear()
