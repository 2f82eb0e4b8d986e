"""Emotional-tone tables shared by the shot planner and the duration analyzer.

Tones are open vocabulary.  Lookups normalise with lower().strip(); unknown
tones fall back to the "dramatic" camera mapping and a zero duration bias.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

FALLBACK_TONE = "dramatic"


@dataclass(frozen=True)
class ToneCamera:
    category: str
    preferred: Tuple[str, ...]


TONE_CAMERA_MAP: Dict[str, ToneCamera] = {
    "tense": ToneCamera("character", ("dolly-push-in", "static-close-up", "handheld")),
    "melancholic": ToneCamera("character", ("static-close-up", "slow-dolly-forward", "rack-focus")),
    "hopeful": ToneCamera("establishing", ("crane-up-reveal", "pull-out-reveal", "tilt-up")),
    "exciting": ToneCamera("action", ("tracking-follow", "speed-ramp", "chase-cam")),
    "mysterious": ToneCamera("transition", ("pan-reveal", "slow-dolly-forward", "rack-focus")),
    "dramatic": ToneCamera("character", ("dolly-push-in", "low-angle", "dutch-angle")),
    "peaceful": ToneCamera("establishing", ("static-wide", "aerial-drone", "crane-down")),
    "fearful": ToneCamera("action", ("handheld", "dutch-angle", "fpv-first-person")),
    "angry": ToneCamera("action", ("handheld", "low-angle-tracking", "crash-zoom")),
    "sad": ToneCamera("character", ("static-close-up", "pull-out-reveal", "dolly-push-in")),
    "romantic": ToneCamera("character", ("dolly-push-in", "orbit-360", "rack-focus")),
    "suspenseful": ToneCamera("transition", ("slow-dolly-forward", "pan-reveal", "rack-focus")),
    "triumphant": ToneCamera("character", ("low-angle", "crane-up-reveal", "orbit-360")),
    "chaotic": ToneCamera("action", ("handheld", "whip-pan", "chase-cam")),
    "reflective": ToneCamera("character", ("static-medium", "rack-focus", "dolly-push-in")),
    "ominous": ToneCamera("transition", ("slow-dolly-forward", "tilt-down", "dutch-angle")),
}

# Seconds added to (or removed from) the base shot length; range -2..+2.
TONE_DURATION_BIAS: Dict[str, int] = {
    "tense": 1,
    "melancholic": 2,
    "hopeful": 0,
    "exciting": -1,
    "mysterious": 1,
    "dramatic": 1,
    "peaceful": 2,
    "fearful": 0,
    "angry": -1,
    "sad": 2,
    "romantic": 1,
    "suspenseful": 1,
    "triumphant": 0,
    "chaotic": -1,
    "reflective": 2,
    "ominous": 1,
}


def normalize_tone(tone: str | None) -> str:
    return (tone or "").lower().strip()


def camera_for_tone(tone: str | None) -> ToneCamera:
    return TONE_CAMERA_MAP.get(normalize_tone(tone), TONE_CAMERA_MAP[FALLBACK_TONE])


def get_duration_bias(tone: str | None) -> int:
    return TONE_DURATION_BIAS.get(normalize_tone(tone), 0)
