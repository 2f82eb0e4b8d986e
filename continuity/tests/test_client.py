"""Tests for continuity/client.py — kie.ai payloads and task polling."""
from __future__ import annotations

import json
from typing import List, Optional

import pytest
import requests

from shot_engine.errors import GenerationFailedError, GenerationTimeoutError

from continuity.client import (
    DryRunVideoClient,
    GenerationRequest,
    KieVideoClient,
    build_create_task_payload,
    make_video_client,
    provider_duration,
    quality_to_mode,
)
from continuity.models import Element


# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------

class _FakeResponse:
    def __init__(self, body: dict, status_code: int = 200) -> None:
        self._body = body
        self.status_code = status_code

    def raise_for_status(self) -> None:
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self) -> dict:
        return self._body


class _FakeSession:
    def __init__(self, post_response: _FakeResponse, get_responses: Optional[List[_FakeResponse]] = None):
        self.post_response = post_response
        self.get_responses = list(get_responses or [])
        self.posts: List[dict] = []
        self.gets: List[dict] = []

    def post(self, url, json=None, headers=None, timeout=None):
        self.posts.append({"url": url, "json": json, "headers": headers, "timeout": timeout})
        return self.post_response

    def get(self, url, params=None, headers=None, timeout=None):
        self.gets.append({"url": url, "params": params, "headers": headers})
        return self.get_responses.pop(0)


class _FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.now += seconds


def _created(task_id: str = "task_abc") -> _FakeResponse:
    return _FakeResponse({"code": 200, "msg": "success", "data": {"taskId": task_id}})


def _record(state: str, **data) -> _FakeResponse:
    return _FakeResponse({"code": 200, "data": dict(state=state, **data)})


def _success(url: str = "https://cdn.example.com/out.mp4") -> _FakeResponse:
    return _record("success", resultJson=json.dumps({"resultUrls": [url]}))


def _client(session: _FakeSession, clock: Optional[_FakeClock] = None, timeout: float = 60) -> KieVideoClient:
    clock = clock or _FakeClock()
    return KieVideoClient(
        "test-key",
        base_url="https://api.example.com/api/v1/",
        model="kling-3.0/video",
        poll_interval=10,
        timeout=timeout,
        session=session,
        sleep=clock.sleep,
        clock=clock,
    )


# ---------------------------------------------------------------------------
# Payload
# ---------------------------------------------------------------------------

class TestPayload:

    def test_minimal(self, monkeypatch):
        monkeypatch.setattr("shot_engine.config.DEFAULT_ASPECT_RATIO", "16:9")
        payload = build_create_task_payload(GenerationRequest(prompt="A pier.", duration_seconds=5), "m")
        assert payload == {
            "model": "m",
            "input": {
                "prompt": "A pier.",
                "sound": False,
                "duration": "5",
                "aspect_ratio": "16:9",
                "mode": "std",
                "multi_shots": False,
            },
        }

    def test_full(self):
        element = Element(
            name="element_ana",
            description="Ana",
            image_urls=["https://cdn.example.com/a1.jpg", "https://cdn.example.com/a2.jpg"],
        )
        payload = build_create_task_payload(
            GenerationRequest(
                prompt="@element_ana waits.",
                duration_seconds=8,
                quality="cinema",
                negative_prompt="blur",
                generate_audio=True,
                start_image_url="https://cdn.example.com/start.jpg",
                elements=[element],
            ),
            "m",
        )["input"]
        assert payload["mode"] == "pro"
        assert payload["sound"] is True
        assert payload["negative_prompt"] == "blur"
        assert payload["image_urls"] == ["https://cdn.example.com/start.jpg"]
        assert payload["kling_elements"] == [
            {
                "name": "element_ana",
                "description": "Ana",
                "element_input_urls": [
                    "https://cdn.example.com/a1.jpg",
                    "https://cdn.example.com/a2.jpg",
                ],
            }
        ]

    def test_quality_modes(self):
        assert quality_to_mode("draft") == "std"
        assert quality_to_mode("standard") == "std"
        assert quality_to_mode("cinema") == "pro"

    def test_duration_clamped(self):
        assert provider_duration(2) == "3"
        assert provider_duration(7.5) == "8"
        assert provider_duration(20) == "15"


# ---------------------------------------------------------------------------
# KieVideoClient
# ---------------------------------------------------------------------------

class TestKieVideoClient:

    def test_requires_api_key(self, monkeypatch):
        monkeypatch.setattr("shot_engine.config.KIE_API_KEY", "")
        with pytest.raises(ValueError, match="KIE_API_KEY"):
            KieVideoClient()

    def test_create_task(self):
        session = _FakeSession(_created())
        task_id = _client(session).create_task(GenerationRequest(prompt="x", duration_seconds=5))
        assert task_id == "task_abc"
        post = session.posts[0]
        assert post["url"] == "https://api.example.com/api/v1/jobs/createTask"
        assert post["headers"]["Authorization"] == "Bearer test-key"
        assert post["json"]["model"] == "kling-3.0/video"

    def test_create_task_rejected(self):
        session = _FakeSession(_FakeResponse({"code": 402, "msg": "insufficient credits"}))
        with pytest.raises(GenerationFailedError, match="insufficient credits"):
            _client(session).create_task(GenerationRequest(prompt="x", duration_seconds=5))

    def test_create_task_http_error(self):
        session = _FakeSession(_FakeResponse({}, status_code=500))
        with pytest.raises(GenerationFailedError) as exc_info:
            _client(session).create_task(GenerationRequest(prompt="x", duration_seconds=5))
        assert exc_info.value.task_id is None

    def test_generate_polls_until_success(self):
        clock = _FakeClock()
        session = _FakeSession(_created(), [_record("waiting"), _record("generating"), _success()])
        response = _client(session, clock).generate(GenerationRequest(prompt="x", duration_seconds=5))
        assert response.video_url == "https://cdn.example.com/out.mp4"
        assert response.task_id == "task_abc"
        assert response.duration_ms == 20000
        assert response.is_dry_run is False
        assert session.gets[0]["params"] == {"taskId": "task_abc"}

    def test_failed_task(self):
        session = _FakeSession(_created(), [_record("fail", failMsg="nsfw content")])
        with pytest.raises(GenerationFailedError, match="nsfw content") as exc_info:
            _client(session).generate(GenerationRequest(prompt="x", duration_seconds=5))
        assert exc_info.value.task_id == "task_abc"

    def test_success_without_url(self):
        session = _FakeSession(_created(), [_record("success", resultJson="{}")])
        with pytest.raises(GenerationFailedError, match="without a result URL"):
            _client(session).generate(GenerationRequest(prompt="x", duration_seconds=5))

    def test_timeout(self):
        session = _FakeSession(_created(), [_record("waiting") for _ in range(5)])
        with pytest.raises(GenerationTimeoutError):
            _client(session, timeout=25).generate(GenerationRequest(prompt="x", duration_seconds=5))
        assert len(session.gets) == 4


# ---------------------------------------------------------------------------
# Dry run
# ---------------------------------------------------------------------------

class TestDryRun:

    def test_records_and_returns_sample(self):
        client = DryRunVideoClient(video_url="https://cdn.example.com/sample.mp4")
        response = client.generate(GenerationRequest(prompt="x", duration_seconds=5))
        assert response.is_dry_run
        assert response.video_url == "https://cdn.example.com/sample.mp4"
        assert response.task_id.startswith("dryrun-")
        assert len(client.requests) == 1

    def test_factory(self, monkeypatch):
        assert isinstance(make_video_client(dry_run=True), DryRunVideoClient)
        monkeypatch.setattr("shot_engine.config.KIE_API_KEY", "k")
        assert isinstance(make_video_client(dry_run=False), KieVideoClient)
