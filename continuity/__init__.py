"""Shot generation: continuity chaining, element binding, and provider calls."""

from continuity.models import (
    GenerationInput,
    GenerationOutcome,
    MovieRecord,
    MovieStatus,
    ShotRecord,
    ShotStatus,
    TakeRecord,
)
from continuity.orchestrator import GenerationOrchestrator
from continuity.runner import RunSummary, generate_sequentially

__all__ = [
    "GenerationInput",
    "GenerationOrchestrator",
    "GenerationOutcome",
    "generate_sequentially",
    "MovieRecord",
    "MovieStatus",
    "RunSummary",
    "ShotRecord",
    "ShotStatus",
    "TakeRecord",
]
