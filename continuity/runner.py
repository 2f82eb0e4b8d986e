"""Sequential generation driver for a whole movie.

One shot at a time, in order: a shot's generation (including the provider
wait) finishes before the next starts, so continuity frames from shot N are
available to shot N+1.  Pausing is cooperative; should_pause is checked
between shots, never during one.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, List, Optional

import structlog

from shot_engine.errors import GenerationError

from continuity.models import GenerationInput, GenerationOutcome, ShotStatus
from continuity.orchestrator import GenerationOrchestrator

logger = structlog.get_logger(__name__)


@dataclass
class RunSummary:
    movie_id: str
    outcomes: List[GenerationOutcome] = field(default_factory=list)
    completed_shot_ids: List[str] = field(default_factory=list)
    failed_shot_id: Optional[str] = None
    error: Optional[str] = None
    paused: bool = False
    cancelled_shot_id: Optional[str] = None

    @property
    def credits_used(self) -> int:
        return sum(o.credit_cost for o in self.outcomes)


def generate_sequentially(
    orchestrator: GenerationOrchestrator,
    movie_id: str,
    *,
    quality: str = "draft",
    generate_audio: bool = False,
    should_pause: Optional[Callable[[], bool]] = None,
) -> RunSummary:
    """Generate every incomplete shot of a movie in order.

    Stops at the first GenerationError after marking that shot FAILED; the
    failure is reported in the summary, not retried.  A shot cancelled while
    its generation was in flight also ends the run and is not counted as
    completed.
    """
    store = orchestrator.store
    summary = RunSummary(movie_id=movie_id)
    log = logger.bind(movie_id=movie_id)

    for shot in store.list_shots(movie_id):
        if shot.status == ShotStatus.COMPLETE:
            continue
        if should_pause is not None and should_pause():
            summary.paused = True
            log.info("generation_paused", next_shot_id=shot.id, order=shot.order)
            break

        store.update_shot(shot.id, status=ShotStatus.QUEUED)
        try:
            outcome = orchestrator.execute(
                GenerationInput(
                    shot_id=shot.id,
                    quality=quality,
                    generate_audio=generate_audio,
                )
            )
        except GenerationError as exc:
            store.update_shot(shot.id, status=ShotStatus.FAILED)
            summary.failed_shot_id = shot.id
            summary.error = str(exc)
            log.error("shot_generation_failed", shot_id=shot.id, order=shot.order, error=str(exc))
            break

        summary.outcomes.append(outcome)
        if outcome.cancelled:
            summary.cancelled_shot_id = shot.id
            log.info("generation_run_cancelled", shot_id=shot.id, order=shot.order)
            break
        summary.completed_shot_ids.append(shot.id)

    log.info(
        "generation_run_finished",
        completed=len(summary.completed_shot_ids),
        failed_shot_id=summary.failed_shot_id,
        paused=summary.paused,
        cancelled_shot_id=summary.cancelled_shot_id,
        credits_used=summary.credits_used,
    )
    return summary
