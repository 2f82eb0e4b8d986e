"""Story and shot data models: the contracts shared by planner and generator.

Python attributes are snake_case; every model also accepts and emits the
camelCase field names used by the script-analysis LLM and the storage layer
(``populate_by_name`` + camelCase aliases).  extra="ignore" keeps older
readers working when newer producers add fields.
"""
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_MODEL_CONFIG = ConfigDict(extra="ignore", populate_by_name=True, alias_generator=to_camel)


# ── Script analysis (external LLM output, read-only here) ────────────────────


class DialogueLine(BaseModel):
    """One spoken line inside a beat."""

    model_config = _MODEL_CONFIG

    character: str
    line: str
    emotion: str = "neutral"


class Beat(BaseModel):
    """A narrative micro-event.  emotional_tone is open vocabulary."""

    model_config = _MODEL_CONFIG

    description: str
    emotional_tone: str = ""
    dialogue: List[DialogueLine] = []

    @field_validator("dialogue", mode="before")
    @classmethod
    def _null_dialogue(cls, value):
        # The analysis LLM emits null for beats without lines.
        return [] if value is None else value

    @property
    def has_dialogue(self) -> bool:
        return len(self.dialogue) > 0


class Scene(BaseModel):
    model_config = _MODEL_CONFIG

    title: str = ""
    location: str
    time_of_day: str = ""
    beats: List[Beat] = []


class ScriptAnalysis(BaseModel):
    """Scene/beat breakdown of a story."""

    model_config = _MODEL_CONFIG

    synopsis: str = ""
    genre: str = ""
    suggested_duration: Optional[float] = None
    scenes: List[Scene] = []

    @property
    def beat_count(self) -> int:
        return sum(len(scene.beats) for scene in self.scenes)


# ── Characters and style ──────────────────────────────────────────────────────


class VoiceProfile(BaseModel):
    model_config = _MODEL_CONFIG

    language: Optional[str] = None
    accent: Optional[str] = None
    tone: Optional[str] = None
    speed: Optional[str] = None


class Character(BaseModel):
    """A recurring character.

    generated_reference_url is a likeness harvested from a previously
    generated frame; scene_reference_frames maps str(scene_index) to the
    frame where the character first appeared in that scene.
    """

    model_config = _MODEL_CONFIG

    id: str
    name: str
    role: Optional[str] = None
    visual_description: str = ""
    reference_images: List[str] = []
    generated_reference_url: Optional[str] = None
    voice_profile: Optional[VoiceProfile] = None
    scene_reference_frames: Dict[str, str] = {}

    @property
    def has_reference_images(self) -> bool:
        return len(self.reference_images) > 0


class StyleBible(BaseModel):
    """Film-stock / grade / texture directives applied to every prompt."""

    model_config = ConfigDict(
        extra="ignore", populate_by_name=True, alias_generator=to_camel, frozen=True
    )

    film_stock: str = ""
    color_palette: str = ""
    textures: List[str] = []
    negative_prompt: str = ""
    style_string: str = ""


# ── Planned shots ─────────────────────────────────────────────────────────────


class ShotDialogue(BaseModel):
    """Dialogue bound to a shot.  character_id is "" when no Character matches."""

    model_config = _MODEL_CONFIG

    character_id: str = ""
    character_name: str
    line: str
    emotion: str = "neutral"


class PlannedShot(BaseModel):
    """One generation unit, produced for exactly one beat.

    camera_movement is a catalog id; generated_prompt already contains the
    rendered camera text for the shot's duration.
    """

    model_config = _MODEL_CONFIG

    scene_index: int
    order: int
    shot_type: str
    camera_movement: str
    subject: str
    action: str
    environment: Optional[str] = None
    lighting: Optional[str] = None
    dialogue: Optional[ShotDialogue] = None
    duration_seconds: int
    generated_prompt: str = ""
    negative_prompt: str = ""


class ShotPlan(BaseModel):
    """An ordered shot plan plus its timing lock.

    timing_lock_hash covers shot order and durations only, so prompts can be
    re-assembled later without invalidating downstream timing.
    """

    model_config = _MODEL_CONFIG

    schema_version: str = "1.0.0"
    plan_id: str
    seed: Optional[int] = None
    genre_preset_id: Optional[str] = None
    target_duration: Optional[float] = None
    shots: List[PlannedShot] = []
    total_duration_seconds: int = 0
    timing_lock_hash: str
    created_at: str  # ISO 8601
    metadata: Dict[str, str] = Field(default_factory=dict)
