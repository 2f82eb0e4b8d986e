"""Persistence-side records for generation: movies, shots, takes, scene packs."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from shot_engine.models import PlannedShot, StyleBible

_MODEL_CONFIG = ConfigDict(extra="ignore", populate_by_name=True, alias_generator=to_camel)

QualityTier = Literal["draft", "standard", "cinema"]
ChainSource = Literal["chain", "scene", "none"]


class ShotStatus(str, Enum):
    DRAFT = "DRAFT"
    QUEUED = "QUEUED"
    GENERATING = "GENERATING"
    COMPLETE = "COMPLETE"
    FAILED = "FAILED"


class MovieStatus(str, Enum):
    DRAFT = "DRAFT"
    SCRIPTING = "SCRIPTING"
    STORYBOARDING = "STORYBOARDING"
    GENERATING = "GENERATING"
    ASSEMBLING = "ASSEMBLING"
    COMPLETE = "COMPLETE"


_MOVIE_PIPELINE: List[MovieStatus] = list(MovieStatus)


def is_forward(current: MovieStatus, target: MovieStatus) -> bool:
    """True when target lies strictly later in the movie pipeline than current."""
    return _MOVIE_PIPELINE.index(target) > _MOVIE_PIPELINE.index(current)


class ScenePackImage(BaseModel):
    model_config = _MODEL_CONFIG

    angle: str = ""
    status: str = "pending"
    image_url: Optional[str] = None


class ScenePack(BaseModel):
    """Pre-generated environment stills for one scene, bound to an element token."""

    model_config = _MODEL_CONFIG

    scene_index: int
    status: str = "pending"
    element_name: str
    images: List[ScenePackImage] = []

    @property
    def is_complete(self) -> bool:
        return self.status == "complete"

    def completed_image_urls(self) -> List[str]:
        return [
            img.image_url for img in self.images
            if img.status == "complete" and img.image_url
        ]


class MovieRecord(BaseModel):
    """A movie and its continuity caches.

    scene_reference_frames maps str(scene_index) to the end frame of the
    first shot completed in that scene; entries are never overwritten.
    """

    model_config = _MODEL_CONFIG

    id: str
    title: str = ""
    status: MovieStatus = MovieStatus.DRAFT
    style_bible: Optional[StyleBible] = None
    genre_preset_id: Optional[str] = None
    aspect_ratio: Optional[str] = None
    scene_reference_frames: Dict[str, str] = {}
    scene_packs: List[ScenePack] = []

    def scene_pack_for(self, scene_index: int) -> Optional[ScenePack]:
        for pack in self.scene_packs:
            if pack.scene_index == scene_index:
                return pack
        return None


class ShotRecord(PlannedShot):
    """A planned shot as stored for generation, with status and continuity frames."""

    id: str
    movie_id: str
    status: ShotStatus = ShotStatus.DRAFT
    start_frame_url: Optional[str] = None
    end_frame_url: Optional[str] = None


class TakeRecord(BaseModel):
    """One generation attempt's result."""

    model_config = _MODEL_CONFIG

    id: str
    shot_id: str
    video_url: str
    is_hero: bool = False
    provider_task_id: Optional[str] = None
    generation_params: Dict[str, Any] = Field(default_factory=dict)


class Element(BaseModel):
    """Reference images bound to a named token (@name) for face or scene locking."""

    model_config = _MODEL_CONFIG

    name: str
    description: str
    image_urls: List[str] = Field(min_length=2, max_length=4)


class GenerationInput(BaseModel):
    model_config = _MODEL_CONFIG

    shot_id: str
    quality: QualityTier = "draft"
    generate_audio: bool = False
    character_reference_urls: List[str] = []


class GenerationOutcome(BaseModel):
    model_config = _MODEL_CONFIG

    take_id: str
    video_url: str
    credit_cost: int
    generation_time_ms: int
    chain_source: ChainSource
    stale_shot_ids: List[str] = []
    elements_used: int = 0
    cancelled: bool = False
