"""Video generation provider client (Kling 3.0 through the kie.ai job API).

A generation is two calls: POST jobs/createTask returns a task id, then
GET jobs/recordInfo is polled until the task reaches "success" or "fail" or
the client's timeout expires.  Failures raise GenerationError subclasses and
are never retried here.
"""
from __future__ import annotations

import json
import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Protocol

import requests
import structlog

from shot_engine import config
from shot_engine.errors import GenerationFailedError, GenerationTimeoutError
from shot_engine.planning.timing import round_half_up

from continuity.models import Element

logger = structlog.get_logger(__name__)

PROVIDER_MIN_DURATION_SEC = 3
PROVIDER_MAX_DURATION_SEC = 15

DRY_RUN_VIDEO_URL = (
    "https://storage.googleapis.com/falserverless/example_outputs/kling-v3/standard-i2v/out.mp4"
)


@dataclass
class GenerationRequest:
    prompt: str
    duration_seconds: float
    quality: str = "draft"
    negative_prompt: Optional[str] = None
    aspect_ratio: Optional[str] = None
    generate_audio: bool = False
    start_image_url: Optional[str] = None
    end_image_url: Optional[str] = None
    elements: List[Element] = field(default_factory=list)


@dataclass
class GenerationResponse:
    video_url: str
    task_id: str
    duration_ms: int
    is_dry_run: bool = False


class VideoGenerator(Protocol):
    def generate(self, request: GenerationRequest) -> GenerationResponse: ...


def quality_to_mode(quality: str) -> str:
    return "pro" if quality == "cinema" else "std"


def provider_duration(duration_seconds: float) -> str:
    """Whole seconds in the provider's 3-15 range, as the string it expects."""
    seconds = round_half_up(duration_seconds)
    return str(max(PROVIDER_MIN_DURATION_SEC, min(seconds, PROVIDER_MAX_DURATION_SEC)))


def build_create_task_payload(request: GenerationRequest, model: str) -> dict:
    payload_input = {
        "prompt": request.prompt,
        "sound": request.generate_audio,
        "duration": provider_duration(request.duration_seconds),
        "aspect_ratio": request.aspect_ratio or config.DEFAULT_ASPECT_RATIO,
        "mode": quality_to_mode(request.quality),
        "multi_shots": False,
    }
    if request.negative_prompt:
        payload_input["negative_prompt"] = request.negative_prompt
    image_urls = [u for u in (request.start_image_url, request.end_image_url) if u]
    if image_urls:
        payload_input["image_urls"] = image_urls
    if request.elements:
        payload_input["kling_elements"] = [
            {
                "name": el.name,
                "description": el.description,
                "element_input_urls": list(el.image_urls),
            }
            for el in request.elements
        ]
    return {"model": model, "input": payload_input}


class KieVideoClient:
    """VideoGenerator backed by the kie.ai job API."""

    def __init__(
        self,
        api_key: Optional[str] = None,
        *,
        base_url: Optional[str] = None,
        model: Optional[str] = None,
        poll_interval: Optional[float] = None,
        timeout: Optional[float] = None,
        request_timeout: Optional[float] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.api_key = api_key if api_key is not None else config.KIE_API_KEY
        if not self.api_key:
            raise ValueError("KIE_API_KEY environment variable is not set")
        self.base_url = (base_url or config.KIE_API_BASE_URL).rstrip("/")
        self.model = model or config.KIE_MODEL
        self.poll_interval = config.GENERATION_POLL_INTERVAL_SEC if poll_interval is None else poll_interval
        self.timeout = config.GENERATION_TIMEOUT_SEC if timeout is None else timeout
        self.request_timeout = config.REQUEST_TIMEOUT_SEC if request_timeout is None else request_timeout
        self.session = session or requests.Session()
        self._sleep = sleep
        self._clock = clock

    def _headers(self) -> dict:
        return {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

    def generate(self, request: GenerationRequest) -> GenerationResponse:
        started = self._clock()
        task_id = self.create_task(request)
        video_url = self.wait_for_result(task_id)
        elapsed_ms = int((self._clock() - started) * 1000)
        return GenerationResponse(video_url=video_url, task_id=task_id, duration_ms=elapsed_ms)

    def create_task(self, request: GenerationRequest) -> str:
        payload = build_create_task_payload(request, self.model)
        try:
            response = self.session.post(
                f"{self.base_url}/jobs/createTask",
                json=payload,
                headers=self._headers(),
                timeout=self.request_timeout,
            )
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise GenerationFailedError(None, f"createTask request failed: {exc}") from exc

        task_id = (body.get("data") or {}).get("taskId")
        if body.get("code") != 200 or not task_id:
            raise GenerationFailedError(None, f"createTask rejected: {body.get('msg') or body}")

        logger.info(
            "generation_task_created",
            task_id=task_id,
            mode=payload["input"]["mode"],
            duration=payload["input"]["duration"],
            elements=len(request.elements),
        )
        return task_id

    def get_task(self, task_id: str) -> dict:
        try:
            response = self.session.get(
                f"{self.base_url}/jobs/recordInfo",
                params={"taskId": task_id},
                headers=self._headers(),
                timeout=self.request_timeout,
            )
            response.raise_for_status()
            body = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise GenerationFailedError(task_id, f"recordInfo request failed: {exc}") from exc
        return body.get("data") or {}

    def wait_for_result(self, task_id: str) -> str:
        """Poll until the task finishes; return the first result video URL."""
        deadline = self._clock() + self.timeout
        while True:
            data = self.get_task(task_id)
            state = data.get("state")
            if state == "success":
                return self._result_url(task_id, data)
            if state == "fail":
                reason = data.get("failMsg") or data.get("failCode") or "unknown failure"
                raise GenerationFailedError(task_id, reason)

            if self._clock() >= deadline:
                raise GenerationTimeoutError(task_id, self.timeout)
            logger.debug("generation_task_pending", task_id=task_id, state=state)
            self._sleep(self.poll_interval)

    @staticmethod
    def _result_url(task_id: str, data: dict) -> str:
        try:
            result = json.loads(data.get("resultJson") or "{}")
            return result["resultUrls"][0]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise GenerationFailedError(task_id, "success without a result URL") from exc


class DryRunVideoClient:
    """VideoGenerator that spends nothing and returns a sample video."""

    def __init__(self, video_url: str = DRY_RUN_VIDEO_URL) -> None:
        self.video_url = video_url
        self.requests: List[GenerationRequest] = []

    def generate(self, request: GenerationRequest) -> GenerationResponse:
        self.requests.append(request)
        task_id = f"dryrun-{uuid.uuid4().hex[:12]}"
        logger.info("generation_dry_run", task_id=task_id, duration=request.duration_seconds)
        return GenerationResponse(
            video_url=self.video_url, task_id=task_id, duration_ms=0, is_dry_run=True
        )


def make_video_client(dry_run: Optional[bool] = None) -> VideoGenerator:
    """Dry-run client unless dry-run is disabled, in which case a real KieVideoClient."""
    use_dry_run = config.DRY_RUN if dry_run is None else dry_run
    if use_dry_run:
        return DryRunVideoClient()
    return KieVideoClient()
