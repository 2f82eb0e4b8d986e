"""ScriptAnalysis → PlannedShot list (one shot per beat).

Public entry points
-------------------
    plan_shots(analysis, characters, style_bible, genre_preset, target_duration) -> List[PlannedShot]
    build_shot_plan(...) -> ShotPlan   (adds plan id, timing lock, contract check)

Pipeline per beat: camera movement → shot type → duration → subject →
dialogue binding.  After every beat is drafted the plan is fitted to the
target duration, then each shot's prompt is assembled from its final
duration.

Randomness
----------
Movement draw, shot type, and nothing else use the injected RandomSource.
Lighting is seeded per scene (see lighting.py) and does not consume it.  The
default source is SeededRandom(script_seed(analysis)), so a given script
always yields the same plan.
"""
from __future__ import annotations

import hashlib
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Tuple

import structlog

from shot_engine.catalogs.camera_movements import DEFAULT_MOVEMENTS, CameraMovement, MovementCatalog
from shot_engine.catalogs.genre_presets import GenrePreset
from shot_engine.contract_validate import validate_plan_model
from shot_engine.models import (
    Beat,
    Character,
    PlannedShot,
    ScriptAnalysis,
    ShotDialogue,
    ShotPlan,
    StyleBible,
)
from shot_engine.planning.camera_text import compound_camera_for_duration
from shot_engine.planning.lighting import pick_lighting
from shot_engine.planning.randomness import RandomSource, SeededRandom, script_seed
from shot_engine.planning.timing import compute_timing_lock_hash, estimate_shot_duration, fit_durations
from shot_engine.planning.tones import camera_for_tone
from shot_engine.prompts.assembly import (
    PromptCharacter,
    PromptShot,
    assemble_prompt,
    format_negative_prompt,
    movement_exclusions,
)

logger = structlog.get_logger(__name__)

# Every story opens by orienting the viewer.
ESTABLISHING_MOVEMENTS: Tuple[str, ...] = (
    "static-wide",
    "crane-up-reveal",
    "aerial-drone",
    "slow-dolly-forward",
)
DIALOGUE_MOVEMENTS: Tuple[str, ...] = (
    "ots-dialogue",
    "shot-reverse-shot",
    "static-medium",
    "static-close-up",
)
SHOT_TYPE_FOR_CATEGORY: Dict[str, Tuple[str, ...]] = {
    "establishing": ("wide", "wide", "aerial"),
    "character": ("medium", "close-up", "medium"),
    "action": ("medium", "wide", "close-up"),
    "transition": ("medium", "wide", "close-up"),
}
FALLBACK_MOVEMENT = "static-medium"

# Draw weights for the 1st/2nd/3rd ranked candidate; the rest share 15%.
RANK_WEIGHTS: Tuple[float, ...] = (0.40, 0.25, 0.20)
REST_WEIGHT: float = 0.15
# Movements used in this many previous shots are excluded from the draw.
RECENT_WINDOW: int = 2

# Deterministic epoch default; the planner never reads the system clock.
_DEFAULT_CREATED_AT: str = "1970-01-01T00:00:00Z"


@dataclass
class _DraftShot:
    scene_index: int
    order: int
    shot_type: str
    movement_id: str
    movement: Optional[CameraMovement]
    subject: str
    action: str
    environment: str
    lighting: str
    dialogue: Optional[ShotDialogue]
    duration: int


# ── Public API ────────────────────────────────────────────────────────────────


def plan_shots(
    analysis: ScriptAnalysis,
    characters: Sequence[Character] = (),
    style_bible: Optional[StyleBible] = None,
    genre_preset: Optional[GenrePreset] = None,
    target_duration: Optional[float] = None,
    *,
    rng: Optional[RandomSource] = None,
    catalog: MovementCatalog = DEFAULT_MOVEMENTS,
) -> List[PlannedShot]:
    """Plan one shot per beat in scene-major, beat-minor order.

    Never raises for empty scenes, missing characters, a missing style bible
    or genre preset, or an unknown emotional tone.
    """
    if rng is None:
        rng = SeededRandom(script_seed(analysis))

    drafts = _draft_shots(analysis, characters, genre_preset, rng, catalog)
    durations = fit_durations(
        [d.duration for d in drafts],
        [(d.movement_id, d.movement) for d in drafts],
        target_duration,
    )

    prompt_characters = [PromptCharacter.from_character(c) for c in characters]
    shots = [
        _finalize_shot(draft, duration, prompt_characters, style_bible, genre_preset)
        for draft, duration in zip(drafts, durations)
    ]
    logger.debug(
        "shots_planned",
        shots=len(shots),
        total_seconds=sum(s.duration_seconds for s in shots),
        target_duration=target_duration,
    )
    return shots


def build_shot_plan(
    analysis: ScriptAnalysis,
    characters: Sequence[Character] = (),
    style_bible: Optional[StyleBible] = None,
    genre_preset: Optional[GenrePreset] = None,
    target_duration: Optional[float] = None,
    *,
    seed: Optional[int] = None,
    rng: Optional[RandomSource] = None,
    created_at: str = _DEFAULT_CREATED_AT,
    catalog: MovementCatalog = DEFAULT_MOVEMENTS,
) -> ShotPlan:
    """plan_shots() wrapped in a self-describing, contract-checked ShotPlan.

    Args:
        seed:       Seed for SeededRandom; defaults to script_seed(analysis).
                    Ignored when rng is given.
        rng:        Explicit random source (e.g. UnseededRandom()).  The plan's
                    seed field is the source's seed when it has one, else None.
        created_at: ISO 8601 stamp; defaults to the epoch so identical inputs
                    give byte-identical plans.

    Raises:
        jsonschema.ValidationError: the plan does not conform to ShotPlan.v1.json.
    """
    content_seed = script_seed(analysis)
    if rng is None:
        rng = SeededRandom(content_seed if seed is None else seed)
    plan_seed = getattr(rng, "seed", None)

    shots = plan_shots(
        analysis,
        characters,
        style_bible,
        genre_preset,
        target_duration,
        rng=rng,
        catalog=catalog,
    )
    plan = ShotPlan(
        plan_id=_make_plan_id(content_seed, plan_seed),
        seed=plan_seed,
        genre_preset_id=genre_preset.id if genre_preset else None,
        target_duration=target_duration,
        shots=shots,
        total_duration_seconds=sum(s.duration_seconds for s in shots),
        timing_lock_hash=compute_timing_lock_hash(shots),
        created_at=created_at,
    )
    validate_plan_model(plan)
    return plan


def _make_plan_id(content_seed: int, plan_seed: Optional[int]) -> str:
    """ "plan_" + first 16 hex chars of SHA-256 over script content and seed."""
    key = f"{content_seed:08x}:{'unseeded' if plan_seed is None else plan_seed}"
    return "plan_" + hashlib.sha256(key.encode("utf-8")).hexdigest()[:16]


# ── Drafting ──────────────────────────────────────────────────────────────────


def _draft_shots(
    analysis: ScriptAnalysis,
    characters: Sequence[Character],
    genre_preset: Optional[GenrePreset],
    rng: RandomSource,
    catalog: MovementCatalog,
) -> List[_DraftShot]:
    drafts: List[_DraftShot] = []
    recent: List[str] = []
    order = 0
    avg_duration = genre_preset.avg_shot_duration if genre_preset else None

    for scene_index, scene in enumerate(analysis.scenes):
        environment = f"{scene.location}, {scene.time_of_day}"
        lighting = pick_lighting(genre_preset, scene.time_of_day, scene_index)

        for beat_index, beat in enumerate(scene.beats):
            if scene_index == 0 and beat_index == 0:
                movement_id = pick_weighted(ESTABLISHING_MOVEMENTS, [], rng, catalog)
            elif beat.has_dialogue:
                movement_id = pick_weighted(DIALOGUE_MOVEMENTS, recent, rng, catalog)
            else:
                movement_id = pick_weighted(
                    tone_candidates(beat.emotional_tone, genre_preset, catalog),
                    recent,
                    rng,
                    catalog,
                )
            recent.append(movement_id)
            del recent[:-RECENT_WINDOW]

            movement = catalog.get(movement_id)
            category = movement.category if movement else "character"

            drafts.append(
                _DraftShot(
                    scene_index=scene_index,
                    order=order,
                    shot_type=pick_shot_type(category, rng),
                    movement_id=movement_id,
                    movement=movement,
                    subject=build_beat_subject(beat, scene.location, characters),
                    action=beat.description,
                    environment=environment,
                    lighting=lighting,
                    dialogue=bind_dialogue(beat, characters),
                    duration=estimate_shot_duration(
                        beat.emotional_tone, movement_id, movement, avg_duration
                    ),
                )
            )
            order += 1

    return drafts


def _finalize_shot(
    draft: _DraftShot,
    duration: int,
    characters: Sequence[PromptCharacter],
    style_bible: Optional[StyleBible],
    genre_preset: Optional[GenrePreset],
) -> PlannedShot:
    syntax = draft.movement.prompt_syntax if draft.movement else draft.movement_id
    camera_text = compound_camera_for_duration(syntax, draft.movement_id, duration)

    prompt = assemble_prompt(
        PromptShot(
            shot_type=draft.shot_type,
            camera_movement=camera_text,
            subject=draft.subject,
            action=draft.action,
            duration_seconds=duration,
            environment=draft.environment,
            lighting=draft.lighting,
            dialogue=draft.dialogue,
        ),
        characters,
        style_bible,
    )

    exclusions = movement_exclusions(draft.movement_id)
    if genre_preset is not None and genre_preset.style_bible.negative_prompt:
        exclusions.append(genre_preset.style_bible.negative_prompt)

    return PlannedShot(
        scene_index=draft.scene_index,
        order=draft.order,
        shot_type=draft.shot_type,
        camera_movement=draft.movement_id,
        subject=draft.subject,
        action=draft.action,
        environment=draft.environment,
        lighting=draft.lighting,
        dialogue=draft.dialogue,
        duration_seconds=duration,
        generated_prompt=prompt,
        negative_prompt=format_negative_prompt(style_bible, exclusions),
    )


# ── Camera movement selection ─────────────────────────────────────────────────


def tone_candidates(
    tone: str,
    genre_preset: Optional[GenrePreset],
    catalog: MovementCatalog = DEFAULT_MOVEMENTS,
) -> List[str]:
    """Ranked candidates: tone preferences, then genre preferences, then the tone's category."""
    mapping = camera_for_tone(tone)
    candidates: List[str] = list(mapping.preferred)
    if genre_preset is not None:
        for movement_id in genre_preset.camera_preferences:
            if movement_id not in candidates:
                candidates.append(movement_id)
    for movement in catalog.in_category(mapping.category):
        if movement.id not in candidates:
            candidates.append(movement.id)
    return candidates


def rank_weights(count: int) -> List[float]:
    weights = list(RANK_WEIGHTS[:count])
    rest = count - len(RANK_WEIGHTS)
    if rest > 0:
        weights.extend([REST_WEIGHT / rest] * rest)
    return weights


def pick_weighted(
    candidates: Sequence[str],
    recent: Sequence[str],
    rng: RandomSource,
    catalog: MovementCatalog = DEFAULT_MOVEMENTS,
) -> str:
    """Weighted draw over ranked candidates, skipping recently used movements.

    If every candidate was used recently the recency filter is dropped.  Ids
    missing from the catalog are never returned.  Rank weights are fixed
    (0.40, 0.25, 0.20, then 0.15 shared); in a short pool the unassigned
    probability falls to the last candidate, so two candidates draw 40:60.
    """
    filtered = [c for c in candidates if c not in recent] or list(candidates)
    pool = [c for c in filtered if c in catalog]
    if not pool:
        if FALLBACK_MOVEMENT in catalog or not len(catalog):
            return FALLBACK_MOVEMENT
        return catalog.ids()[0]

    weights = rank_weights(len(pool))
    roll = rng.next()
    cumulative = 0.0
    for movement_id, weight in zip(pool, weights):
        cumulative += weight
        if roll < cumulative:
            return movement_id
    return pool[-1]


def pick_shot_type(category: str, rng: RandomSource) -> str:
    options = SHOT_TYPE_FOR_CATEGORY.get(category, ("medium",))
    index = min(int(rng.next() * len(options)), len(options) - 1)
    return options[index]


# ── Subject and dialogue ──────────────────────────────────────────────────────


def build_beat_subject(beat: Beat, location: str, characters: Sequence[Character]) -> str:
    """Characters named in the description, then dialogue speakers, else the location.

    Each character appears once, as "Name, visual description"; multiple
    characters are joined with " and ".
    """
    description = beat.description.lower()
    picked: Dict[str, Character] = {}

    for char in characters:
        if char.name and char.name.lower() in description:
            picked.setdefault(char.id, char)

    for line in beat.dialogue:
        speaker = _find_character(line.character, characters)
        if speaker is not None:
            picked.setdefault(speaker.id, speaker)

    if not picked:
        return location
    return " and ".join(_describe(c) for c in picked.values())


def _describe(char: Character) -> str:
    if char.visual_description:
        return f"{char.name}, {char.visual_description}"
    return char.name


def _find_character(name: str, characters: Sequence[Character]) -> Optional[Character]:
    wanted = name.lower().strip()
    for char in characters:
        if char.name.lower().strip() == wanted:
            return char
    return None


def bind_dialogue(beat: Beat, characters: Sequence[Character]) -> Optional[ShotDialogue]:
    """Bind the beat's first dialogue line; character_id is "" when nobody matches."""
    if not beat.has_dialogue:
        return None
    line = beat.dialogue[0]
    speaker = _find_character(line.character, characters)
    return ShotDialogue(
        character_id=speaker.id if speaker else "",
        character_name=line.character,
        line=line.line,
        emotion=line.emotion,
    )
