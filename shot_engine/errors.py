"""Exception hierarchy shared by the planning core and the generation side."""
from __future__ import annotations


class ShotEngineError(Exception):
    """Base class for every error raised by shot-engine."""


class ShotNotFoundError(ShotEngineError):
    def __init__(self, shot_id: str) -> None:
        super().__init__(f"Shot {shot_id} not found")
        self.shot_id = shot_id


class MovieNotFoundError(ShotEngineError):
    def __init__(self, movie_id: str) -> None:
        super().__init__(f"Movie {movie_id} not found")
        self.movie_id = movie_id


class GenerationError(ShotEngineError):
    """The video provider did not return a usable result.

    Never retried inside shot-engine; the caller decides whether to mark the
    shot failed and refund credits.
    """


class GenerationFailedError(GenerationError):
    def __init__(self, task_id: str | None, reason: str) -> None:
        super().__init__(f"Generation task {task_id or '<unsubmitted>'} failed: {reason}")
        self.task_id = task_id
        self.reason = reason


class GenerationTimeoutError(GenerationError):
    def __init__(self, task_id: str, waited_sec: float) -> None:
        super().__init__(f"Generation task {task_id} timed out after {waited_sec:.0f}s")
        self.task_id = task_id
        self.waited_sec = waited_sec


class FrameExtractionError(ShotEngineError):
    """Last-frame extraction failed; callers degrade continuity instead of failing."""
