"""ScriptAnalysis → planned shots, plus runtime estimation."""

from shot_engine.planning.duration_analyzer import DurationAnalysis, SceneBreakdown, analyze_duration
from shot_engine.planning.lighting import pick_lighting
from shot_engine.planning.planner import build_shot_plan, plan_shots
from shot_engine.planning.randomness import RandomSource, SeededRandom, UnseededRandom, script_seed
from shot_engine.planning.timing import compute_timing_lock_hash, fit_durations

__all__ = [
    "analyze_duration",
    "build_shot_plan",
    "compute_timing_lock_hash",
    "DurationAnalysis",
    "fit_durations",
    "pick_lighting",
    "plan_shots",
    "RandomSource",
    "SceneBreakdown",
    "script_seed",
    "SeededRandom",
    "UnseededRandom",
]
