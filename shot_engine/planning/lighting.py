"""Per-scene lighting selection.

Lighting must read the same for every shot of a scene and should differ from
scene to scene, without an LLM call.  The genre's lighting vocabulary is
shuffled with a generator seeded from the scene index and time of day.
"""
from __future__ import annotations

from typing import Dict, Optional

from shot_engine.catalogs.genre_presets import GenrePreset
from shot_engine.planning.randomness import seeded_random, simple_hash

DEFAULT_LIGHTING = "natural lighting"

TIME_OF_DAY_LIGHTING: Dict[str, str] = {
    "morning": "soft golden morning light, warm tones",
    "afternoon": "bright natural daylight, clean shadows",
    "evening": "warm golden hour light, long shadows",
    "night": "moonlight and practical light sources, deep shadows",
}


def pick_lighting(
    genre_preset: Optional[GenrePreset],
    time_of_day: str,
    scene_index: int = 0,
) -> str:
    """Return 2-3 lighting keywords, stable for a given (scene_index, time_of_day)."""
    keywords = list(genre_preset.lighting_keywords) if genre_preset else []
    if not keywords:
        return TIME_OF_DAY_LIGHTING.get((time_of_day or "").lower().strip(), DEFAULT_LIGHTING)

    seed = simple_hash(f"scene-{scene_index}-{time_of_day}")
    rand = seeded_random(seed)
    for i in range(len(keywords) - 1, 0, -1):
        j = int(rand() * (i + 1))
        keywords[i], keywords[j] = keywords[j], keywords[i]

    count = 2 + (seed % 2)
    return ", ".join(keywords[:count])
