"""Natural-runtime estimate for a script, and how well a target fits it.

Advisory only: nothing here touches a plan.
"""
from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from shot_engine.models import ScriptAnalysis
from shot_engine.planning.timing import FIT_TOLERANCE, round_half_up
from shot_engine.planning.tones import get_duration_bias

VISUAL_BEAT_SEC: int = 5
DIALOGUE_BEAT_SEC: int = 7
MIN_VIABLE_RATIO: float = 0.6
MAX_COMFORT_RATIO: float = 1.4
SUGGESTION_THRESHOLD: int = 70
# Average seconds a trimmed beat gives back, used in the trimming advice.
_SECONDS_PER_TRIMMED_BEAT: int = 7

_MODEL_CONFIG = ConfigDict(extra="ignore", populate_by_name=True, alias_generator=to_camel)


class SceneBreakdown(BaseModel):
    model_config = _MODEL_CONFIG

    scene_index: int
    beats: int
    has_dialogue: bool
    estimated_seconds: int


class DurationAnalysis(BaseModel):
    model_config = _MODEL_CONFIG

    optimal_duration: int
    min_viable_duration: int
    max_comfort_duration: int
    breakdown: List[SceneBreakdown] = []
    fit_score: int
    suggestion: Optional[str] = None


def analyze_duration(analysis: ScriptAnalysis, target_duration: float) -> DurationAnalysis:
    """Estimate the story's natural length and score target_duration against it.

    Each beat needs 7s if it carries dialogue, else 5s, plus its tone bias.
    The score is 100 within ±15% of optimal and falls linearly to 0 at a
    100% deviation.  A suggestion is attached when the score is below 70.
    """
    breakdown: List[SceneBreakdown] = []
    total = 0.0

    for scene_index, scene in enumerate(analysis.scenes):
        scene_seconds = 0.0
        for beat in scene.beats:
            base = DIALOGUE_BEAT_SEC if beat.has_dialogue else VISUAL_BEAT_SEC
            scene_seconds += base + get_duration_bias(beat.emotional_tone)
        total += scene_seconds
        breakdown.append(
            SceneBreakdown(
                scene_index=scene_index,
                beats=len(scene.beats),
                has_dialogue=any(b.has_dialogue for b in scene.beats),
                estimated_seconds=round_half_up(scene_seconds),
            )
        )

    optimal = round_half_up(total)
    score = fit_score(optimal, target_duration)

    suggestion = None
    if score < SUGGESTION_THRESHOLD and optimal > 0:
        suggestion = _suggest(analysis, optimal, target_duration)

    return DurationAnalysis(
        optimal_duration=optimal,
        min_viable_duration=round_half_up(total * MIN_VIABLE_RATIO),
        max_comfort_duration=round_half_up(total * MAX_COMFORT_RATIO),
        breakdown=breakdown,
        fit_score=score,
        suggestion=suggestion,
    )


def fit_score(optimal_duration: int, target_duration: float) -> int:
    if optimal_duration == 0:
        return 100 if target_duration == 0 else 0
    deviation = abs(target_duration - optimal_duration) / optimal_duration
    if deviation <= FIT_TOLERANCE:
        return 100
    return max(0, round_half_up(100 * (1 - (deviation - FIT_TOLERANCE) / (1 - FIT_TOLERANCE))))


def format_seconds(seconds: float) -> str:
    """Seconds as "90s", or whole minutes from two minutes up ("3 minutes")."""
    if seconds >= 120:
        return f"{round_half_up(seconds / 60)} minutes"
    return f"{_plain_number(seconds)}s"


def _plain_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


def _suggest(analysis: ScriptAnalysis, optimal: int, target_duration: float) -> str:
    total_beats = analysis.beat_count
    dialogue_beats = sum(1 for s in analysis.scenes for b in s.beats if b.has_dialogue)
    if dialogue_beats:
        beat_info = f"{total_beats} beats ({dialogue_beats} with dialogue)"
    else:
        beat_info = f"{total_beats} beats"

    opening = f"Your story has {beat_info} — it naturally fits ~{optimal}s."
    if target_duration < optimal:
        trim = max(1, round_half_up((optimal - target_duration) / _SECONDS_PER_TRIMMED_BEAT))
        return (
            f"{opening} Consider trimming {trim} scene beats or extending to "
            f"{format_seconds(optimal)}."
        )
    return (
        f"{opening} Consider adding more scenes or beats to fill "
        f"{_plain_number(target_duration)}s, or reducing the target."
    )
