"""Proxy endpoint tests: validation, provider reply handling, health and task status."""

import json

import httpx
from fastapi.testclient import TestClient

from app.main import create_app
from conftest import FakeClient
from studio.tracker import GenerationTracker
from video.mock import MOCK_VIDEO_URL, MockProvider
from video.veo import VeoProvider

VALID_BODY = {
    "prompt": "A sunset",
    "duration": 10,
    "aspectRatio": "16:9",
    "style": "cinematic",
    "quality": "standard",
}


def _client(settings, history_store, provider):
    tracker = GenerationTracker(FakeClient(), history_store)
    app = create_app(settings=settings, video_provider=provider, tracker=tracker)
    return TestClient(app)


def _gateway(handler):
    return httpx.MockTransport(handler)


def test_validation_errors_are_400(settings, history_store):
    client = _client(settings, history_store, MockProvider())

    res = client.post("/api/generate-video", json={**VALID_BODY, "duration": 7})
    assert res.status_code == 400
    assert res.json() == {"success": False, "error": "Duration must be 5, 10, 15, or 30 seconds"}

    res = client.post("/api/generate-video", json={**VALID_BODY, "prompt": "x" * 1001})
    assert res.status_code == 400
    assert res.json()["error"] == "Prompt must be less than 1000 characters"

    res = client.post("/api/generate-video", json={**VALID_BODY, "prompt": "  "})
    assert res.json()["error"] == "Prompt is required"

    res = client.post("/api/generate-video", json={**VALID_BODY, "aspectRatio": "4:3"})
    assert res.json()["error"] == "Invalid aspect ratio"


def test_wrongly_typed_fields_are_400_not_coerced(settings, history_store):
    client = _client(settings, history_store, MockProvider())
    duration_error = {"success": False, "error": "Duration must be 5, 10, 15, or 30 seconds"}

    res = client.post("/api/generate-video", json={**VALID_BODY, "duration": "10"})
    assert res.status_code == 400
    assert res.json() == duration_error

    res = client.post("/api/generate-video", json={**VALID_BODY, "duration": 7.5})
    assert res.status_code == 400
    assert res.json() == duration_error

    res = client.post("/api/generate-video", json={**VALID_BODY, "prompt": 123})
    assert res.status_code == 400
    assert res.json() == {"success": False, "error": "Prompt is required"}

    res = client.post("/api/generate-video", json={**VALID_BODY, "aspectRatio": 169})
    assert res.status_code == 400
    assert res.json() == {"success": False, "error": "Invalid aspect ratio"}


def test_missing_fields_are_400(settings, history_store):
    client = _client(settings, history_store, MockProvider())

    res = client.post("/api/generate-video", json={"prompt": "A sunset"})

    assert res.status_code == 400
    assert res.json()["error"] == "Duration must be 5, 10, 15, or 30 seconds"


def test_task_from_another_provider_is_404(settings, history_store):
    submit = _client(settings, history_store, MockProvider())
    task_id = submit.post("/api/generate-video", json=VALID_BODY).json()["taskId"]

    other = _client(settings, history_store, VeoProvider(settings))
    res = other.get("/api/generate-video/status", params={"taskId": task_id})

    assert res.status_code == 404
    assert res.json()["error"] == "Task not found"


def test_validation_happens_before_the_provider_is_called(settings, history_store):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, json={})

    settings.video_api_key = "secret"
    provider = VeoProvider(settings, transport=_gateway(handler))
    client = _client(settings, history_store, provider)

    res = client.post("/api/generate-video", json={**VALID_BODY, "duration": 7})

    assert res.status_code == 400
    assert calls == []


def test_gateway_reply_with_mp4_link_completes(settings, history_store):
    seen = {}

    def handler(request):
        seen["headers"] = request.headers
        seen["payload"] = json.loads(request.content)
        content = "Your video is ready: https://cdn.example.com/out.mp4 enjoy"
        return httpx.Response(200, json={"choices": [{"message": {"content": content}}]})

    settings.video_api_key = "secret"
    settings.video_customer_id = "cus_123"
    provider = VeoProvider(settings, transport=_gateway(handler))
    client = _client(settings, history_store, provider)

    res = client.post("/api/generate-video", json=VALID_BODY)

    assert res.status_code == 200
    assert res.json() == {
        "success": True,
        "videoUrl": "https://cdn.example.com/out.mp4",
        "status": "completed",
    }
    assert seen["headers"]["authorization"] == "Bearer secret"
    assert seen["headers"]["customerid"] == "cus_123"
    assert seen["payload"]["model"] == "replicate/google/veo-3"
    message = seen["payload"]["messages"][0]
    assert message["role"] == "user"
    assert message["content"].startswith("Generate a 10-second video in widescreen format (16:9), cinematic style: A sunset.")


def test_gateway_reply_still_processing_returns_task(settings, history_store):
    def handler(request):
        return httpx.Response(200, json={"choices": [{"message": {"content": "Video is generating..."}}]})

    settings.video_api_key = "secret"
    client = _client(settings, history_store, VeoProvider(settings, transport=_gateway(handler)))

    body = client.post("/api/generate-video", json=VALID_BODY).json()

    assert body["success"] is True
    assert body["status"] == "processing"
    assert body["estimatedTime"] == 100
    assert body["taskId"].startswith("task_")

    status = client.get("/api/generate-video/status", params={"taskId": body["taskId"]}).json()
    assert status["status"] == "processing"
    assert status["taskId"] == body["taskId"]


def test_gateway_reply_with_bare_content_is_used_as_url(settings, history_store):
    def handler(request):
        return httpx.Response(200, json={"choices": [{"message": {"content": "  https://cdn.example.com/v/42  "}}]})

    settings.video_api_key = "secret"
    client = _client(settings, history_store, VeoProvider(settings, transport=_gateway(handler)))

    body = client.post("/api/generate-video", json=VALID_BODY).json()

    assert body["videoUrl"] == "https://cdn.example.com/v/42"
    assert body["status"] == "completed"


def test_gateway_error_becomes_500(settings, history_store):
    def handler(request):
        return httpx.Response(500, text="boom")

    settings.video_api_key = "secret"
    client = _client(settings, history_store, VeoProvider(settings, transport=_gateway(handler)))

    res = client.post("/api/generate-video", json=VALID_BODY)

    assert res.status_code == 500
    assert res.json() == {
        "success": False,
        "error": "Failed to generate video: 500 Internal Server Error",
        "status": "failed",
    }


def test_gateway_reply_without_choices_is_invalid(settings, history_store):
    def handler(request):
        return httpx.Response(200, json={"id": "abc"})

    settings.video_api_key = "secret"
    client = _client(settings, history_store, VeoProvider(settings, transport=_gateway(handler)))

    res = client.post("/api/generate-video", json=VALID_BODY)

    assert res.status_code == 500
    assert res.json()["error"] == "Invalid response from video generation service"


def test_veo_without_key_runs_in_mock_mode(settings, history_store):
    settings.video_api_key = None
    provider = VeoProvider(settings)
    assert provider.use_mock

    client = _client(settings, history_store, provider)
    body = client.post("/api/generate-video", json=VALID_BODY).json()
    assert body["status"] == "processing"

    status = client.get("/api/generate-video/status", params={"taskId": body["taskId"]}).json()
    assert status == {
        "success": True,
        "videoUrl": MOCK_VIDEO_URL,
        "taskId": body["taskId"],
        "status": "completed",
    }


def test_mock_provider_completes_on_first_status_check(settings, history_store):
    client = _client(settings, history_store, MockProvider())

    body = client.post("/api/generate-video", json={**VALID_BODY, "quality": "high"}).json()
    assert body["estimatedTime"] == 150

    status = client.get("/api/generate-video/status", params={"taskId": body["taskId"]}).json()
    assert status["status"] == "completed"
    assert status["videoUrl"] == MOCK_VIDEO_URL


def test_unknown_task_is_404(settings, history_store):
    client = _client(settings, history_store, MockProvider())

    res = client.get("/api/generate-video/status", params={"taskId": "task_missing"})

    assert res.status_code == 404
    assert res.json() == {"success": False, "error": "Task not found", "status": "failed"}


def test_health_document(settings, history_store):
    client = _client(settings, history_store, MockProvider())

    body = client.get("/api/generate-video").json()

    assert body["status"] == "healthy"
    assert body["service"] == "video-generation"
    assert body["models"] == ["replicate/google/veo-3"]
    assert body["supportedFormats"] == ["16:9", "9:16", "1:1"]
    assert body["maxDuration"] == 30
    assert body["maxPromptLength"] == 1000
    assert body["timestamp"].endswith("Z")
