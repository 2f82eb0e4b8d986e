"""Shot duration rules, target-duration fitting, and timing_lock_hash.

All functions are pure: no I/O, no external state, no randomness.

Durations are whole seconds.  Every movement is clamped to 3-10 seconds except
the 360-degree orbit, which may run to 12; no shot is ever shorter than its
movement's declared minimum.
"""
from __future__ import annotations

import hashlib
import json
import math
from typing import List, Optional, Sequence, Tuple

from shot_engine.catalogs.camera_movements import ORBIT_MOVEMENT_ID, CameraMovement
from shot_engine.models import PlannedShot
from shot_engine.planning.tones import get_duration_bias

MIN_SHOT_SEC: int = 3
MAX_SHOT_SEC: int = 10
MAX_ORBIT_SEC: int = 12
DEFAULT_SHOT_SEC: int = 5
# Plans within this fraction of the requested total are left alone.
FIT_TOLERANCE: float = 0.15


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (round() would bank to even)."""
    return int(math.floor(value + 0.5))


def duration_bounds(movement_id: str, movement: Optional[CameraMovement]) -> Tuple[int, int]:
    """(lowest, highest) legal duration for a movement."""
    ceiling = MAX_ORBIT_SEC if movement_id == ORBIT_MOVEMENT_ID else MAX_SHOT_SEC
    floor = MIN_SHOT_SEC
    if movement is not None:
        floor = max(floor, movement.min_duration)
    return min(floor, ceiling), ceiling


def clamp_duration(value: float, movement_id: str, movement: Optional[CameraMovement]) -> int:
    low, high = duration_bounds(movement_id, movement)
    return max(low, min(round_half_up(value), high))


def estimate_shot_duration(
    tone: str,
    movement_id: str,
    movement: Optional[CameraMovement],
    avg_shot_duration: Optional[float] = None,
) -> int:
    """Base duration (genre average, default 5s) + tone bias, then clamped.

    Examples:
        melancholic (+2) on a 6s noir average with static-close-up  -> 8
        exciting (-1) on a 4s commercial average with chase-cam     -> 4 (min_duration)
        romantic (+1) with orbit-360                                -> 10 (min_duration)
    """
    base = DEFAULT_SHOT_SEC if avg_shot_duration is None else avg_shot_duration
    return clamp_duration(base + get_duration_bias(tone), movement_id, movement)


def needs_fitting(raw_total: float, target_duration: Optional[float]) -> bool:
    if not target_duration or target_duration <= 0 or raw_total <= 0:
        return False
    return abs(raw_total - target_duration) / target_duration > FIT_TOLERANCE


def fit_durations(
    durations: Sequence[int],
    movements: Sequence[Tuple[str, Optional[CameraMovement]]],
    target_duration: Optional[float],
) -> List[int]:
    """Uniformly rescale durations toward target_duration.

    Deviations of 15% or less are treated as creative variance and returned
    unchanged.  Otherwise each shot is scaled by target / raw_total and
    re-clamped to its own bounds, so the fitted total only approximates the
    target when many shots hit a bound.
    """
    raw_total = sum(durations)
    if not needs_fitting(raw_total, target_duration):
        return list(durations)

    scale = float(target_duration) / raw_total
    return [
        clamp_duration(duration * scale, movement_id, movement)
        for duration, (movement_id, movement) in zip(durations, movements)
    ]


def compute_timing_lock_hash(shots: List[PlannedShot]) -> str:
    """Deterministic SHA-256 over shot order and duration.

    Prompts, camera text, and lighting are excluded so prompts can be
    re-assembled at generation time without breaking the timing lock.

    Canonical JSON: sort_keys=True and separators=(',', ':') give byte-identical
    input across platforms.  Returns a lowercase 64-character hex string.
    """
    timing_data = [
        {
            "order": shot.order,
            "sceneIndex": shot.scene_index,
            "durationSeconds": shot.duration_seconds,
        }
        for shot in shots
    ]
    canonical = json.dumps(timing_data, sort_keys=True, separators=(",", ":"))
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()
