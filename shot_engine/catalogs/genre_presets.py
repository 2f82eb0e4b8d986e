"""Genre preset catalog.

A preset bundles a style bible, an ordered list of preferred camera movements
(used by the planner as a fallback after tone preferences), a lighting
vocabulary for per-scene lighting draws, and the average shot length.
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Iterator, List, Mapping, Optional, Tuple

from shot_engine.models import StyleBible


@dataclass(frozen=True)
class GenrePreset:
    id: str
    name: str
    style_bible: StyleBible
    camera_preferences: Tuple[str, ...]
    lighting_keywords: Tuple[str, ...]
    pacing: str
    avg_shot_duration: int


class GenreCatalog(Mapping[str, GenrePreset]):
    """Read-only id → GenrePreset table."""

    def __init__(self, presets: Iterable[GenrePreset]) -> None:
        self._table = MappingProxyType({p.id: p for p in presets})

    def __getitem__(self, preset_id: str) -> GenrePreset:
        return self._table[preset_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def ids(self) -> List[str]:
        return list(self._table)


GENRE_PRESETS: Tuple[GenrePreset, ...] = (
    GenrePreset(
        id="noir",
        name="Film Noir",
        style_bible=StyleBible(
            film_stock="shot on 35mm film, anamorphic lens",
            color_palette="desaturated teal grade, crushed blacks",
            textures=[
                "heavy film grain",
                "shallow depth of field",
                "wet reflective surfaces",
                "hard shadows",
            ],
            negative_prompt=(
                "bright colors, sunny, cheerful, overexposed, cartoon, anime, saturated, "
                "warm tones, flat lighting, daytime exterior"
            ),
            style_string=(
                "Desaturated teal grade, crushed blacks, hard side-lighting, wet reflective "
                "surfaces, shot on 35mm film, anamorphic lens, heavy film grain, narrow depth "
                "of field, cinematic. 4K."
            ),
        ),
        camera_preferences=(
            "dolly-push-in",
            "static-wide",
            "pan-reveal",
            "low-angle-tracking",
            "dutch-angle",
        ),
        lighting_keywords=(
            "hard side-light",
            "neon reflections",
            "single source overhead",
            "rim lighting",
            "flickering",
            "chiaroscuro",
        ),
        pacing="slow",
        avg_shot_duration=6,
    ),
    GenrePreset(
        id="scifi",
        name="Sci-Fi Cinematic",
        style_bible=StyleBible(
            film_stock="shot on ARRI Alexa, anamorphic",
            color_palette="cool blue-steel palette, neon accents",
            textures=[
                "clean sharp focus",
                "lens flares",
                "volumetric lighting",
                "atmospheric haze",
            ],
            negative_prompt=(
                "vintage, warm tones, natural settings, amateur, shaky, film grain, rustic, "
                "pastoral, low resolution, hand-drawn"
            ),
            style_string=(
                "Cool blue-steel palette, volumetric lighting, lens flares, shot on ARRI Alexa, "
                "anamorphic, clean sharp focus, futuristic, neon accents, atmospheric haze, "
                "cinematic. 4K."
            ),
        ),
        camera_preferences=(
            "crane-up-reveal",
            "tracking-follow",
            "orbit-360",
            "dolly-push-in",
            "static-wide",
        ),
        lighting_keywords=(
            "neon",
            "holographic",
            "volumetric",
            "backlit",
            "cold LED",
            "bioluminescent",
        ),
        pacing="moderate",
        avg_shot_duration=5,
    ),
    GenrePreset(
        id="horror",
        name="Horror / Thriller",
        style_bible=StyleBible(
            film_stock="shot on 35mm film",
            color_palette="desaturated, high contrast, muted greens",
            textures=[
                "heavy film grain",
                "deep shadows",
                "claustrophobic framing",
                "flickering light",
            ],
            negative_prompt=(
                "bright, colorful, happy, wide open spaces, cheerful, cartoon, well-lit, "
                "saturated, clean, polished, studio lighting"
            ),
            style_string=(
                "Desaturated, high contrast, deep shadows, flickering light, handheld slight "
                "shake, 35mm film grain, claustrophobic framing, muted greens and yellows, "
                "cinematic. 4K."
            ),
        ),
        camera_preferences=(
            "handheld",
            "dolly-push-in",
            "dutch-angle",
            "rack-focus",
            "static-wide",
        ),
        lighting_keywords=(
            "flickering",
            "single candle",
            "moonlight",
            "deep shadow",
            "practical lights only",
            "under-lit",
        ),
        pacing="slow",
        avg_shot_duration=7,
    ),
    GenrePreset(
        id="commercial",
        name="Commercial / Product",
        style_bible=StyleBible(
            film_stock="shot on RED Komodo",
            color_palette="clean, bright, color-accurate",
            textures=[
                "shallow depth of field",
                "soft diffused lighting",
                "4K sharp",
                "high production value",
            ],
            negative_prompt=(
                "dark, gritty, noisy, amateur, shaky, film grain, vintage, desaturated, "
                "low budget, harsh shadows, ugly"
            ),
            style_string=(
                "Clean, bright, professional, shot on RED Komodo, shallow depth of field, soft "
                "diffused lighting, high production value, color-accurate, 4K sharp, cinematic."
            ),
        ),
        camera_preferences=(
            "orbit-360",
            "dolly-push-in",
            "macro-close-up",
            "crane-up-reveal",
            "tracking-follow",
        ),
        lighting_keywords=(
            "soft diffused",
            "bright key light",
            "rim light",
            "studio lighting",
            "golden hour",
            "beauty dish",
        ),
        pacing="moderate",
        avg_shot_duration=4,
    ),
    GenrePreset(
        id="documentary",
        name="Documentary / Observational",
        style_bible=StyleBible(
            film_stock="shot on 16mm film",
            color_palette="muted earth tones, natural",
            textures=[
                "handheld feel",
                "natural grain",
                "authentic",
                "available light",
            ],
            negative_prompt=(
                "dramatic lighting, neon, fantasy, CGI, perfect, polished, studio lighting, "
                "saturated, cinematic color grade, lens flares"
            ),
            style_string=(
                "Natural lighting, handheld feel, observational, 16mm film aesthetic, muted "
                "earth tones, authentic, unpolished, documentary. 4K."
            ),
        ),
        camera_preferences=(
            "handheld",
            "static-wide",
            "tracking-follow",
            "rack-focus",
        ),
        lighting_keywords=(
            "natural",
            "available light",
            "overcast",
            "window light",
            "practical",
            "mixed color temperature",
        ),
        pacing="moderate",
        avg_shot_duration=6,
    ),
)

DEFAULT_GENRES = GenreCatalog(GENRE_PRESETS)


def get_genre_preset(preset_id: Optional[str]) -> Optional[GenrePreset]:
    """Look up a preset in the default catalog; None for unknown or empty ids."""
    if not preset_id:
        return None
    return DEFAULT_GENRES.get(preset_id.lower().strip())
