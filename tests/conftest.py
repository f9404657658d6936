"""Shared fixtures and fakes for the studio and proxy tests."""

import asyncio

import pytest

from core.config import Settings
from studio.history import HistoryStore
from studio.storage import JsonFileStorage
from video import polling
from video.schemas import VideoGenerationResponse


class FakeClient:
    """Stands in for GenerationAPIClient; replays queued responses."""

    def __init__(self, *responses, gate=None):
        self.responses = list(responses)
        self.requests = []
        self.gate = gate
        self.closed = False

    async def submit(self, request):
        self.requests.append(request)
        if self.gate is not None:
            await self.gate.wait()
        if self.responses:
            return self.responses.pop(0)
        return processing_response()

    async def aclose(self):
        self.closed = True


class MaxRandom:
    """Random source that always picks the top of the range."""

    def uniform(self, low, high):
        return high


def processing_response(task_id="task_1"):
    return VideoGenerationResponse(success=True, status="processing", task_id=task_id, estimated_time=100)


def completed_response(url="https://cdn.example.com/clip.mp4"):
    return VideoGenerationResponse(success=True, status="completed", video_url=url)


def failed_response(error="HTTP error! status: 500"):
    return VideoGenerationResponse(success=False, status="failed", error=error)


@pytest.fixture(autouse=True)
def _clean_tasks():
    polling.clear_tasks()
    yield
    polling.clear_tasks()


@pytest.fixture
def storage(tmp_path):
    return JsonFileStorage(tmp_path / "storage.json")


@pytest.fixture
def history_store(storage):
    return HistoryStore(storage)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        video_provider="mock",
        studio_api_base_url="http://testserver/api",
        studio_data_dir=tmp_path,
    )


def run(coro):
    return asyncio.run(coro)
