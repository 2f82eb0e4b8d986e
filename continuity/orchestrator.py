"""Generation orchestrator: one shot, end to end.

execute() runs these steps in order:

    1. prompt      reuse the planned prompt, or re-assemble it with current
                   character, voice and scene-element data
    2. continuity  start frame from the previous shot in the same scene
                   (chain), else the scene's reference frame (scene), else
                   none
    3. elements    face-lock elements for mentioned characters, plus a
                   scene-lock element from a complete scene pack
    4. generate    one provider call; failures propagate, nothing is retried
    5. cancel?     if the shot was reset to DRAFT meanwhile, keep the take as
                   a non-hero and stop
    6. bookkeeping hero take, end frame, shot COMPLETE, movie status, scene
                   and character reference caches, next-shot invalidation

Callers authorise the request and deduct credits before calling execute().
The returned credit_cost is informational.
"""
from __future__ import annotations

import uuid
from typing import Callable, Dict, List, Optional, Sequence, Tuple

import structlog

from shot_engine import config
from shot_engine.catalogs.camera_movements import DEFAULT_MOVEMENTS, MovementCatalog
from shot_engine.catalogs.genre_presets import DEFAULT_GENRES, GenreCatalog
from shot_engine.errors import FrameExtractionError, MovieNotFoundError, ShotNotFoundError
from shot_engine.models import Character, StyleBible, VoiceProfile
from shot_engine.planning.camera_text import compound_camera_for_duration
from shot_engine.prompts.assembly import (
    PromptCharacter,
    PromptShot,
    assemble_prompt,
    format_negative_prompt,
    movement_exclusions,
)

from continuity.client import GenerationRequest, VideoGenerator
from continuity.elements import build_character_elements, build_scene_element
from continuity.frames import FrameExtractor
from continuity.models import (
    ChainSource,
    GenerationInput,
    GenerationOutcome,
    MovieRecord,
    MovieStatus,
    ShotRecord,
    ShotStatus,
    TakeRecord,
    is_forward,
)
from continuity.pricing import credit_cost
from continuity.store import ShotStore

logger = structlog.get_logger(__name__)


def _new_take_id() -> str:
    return f"take_{uuid.uuid4().hex}"


class GenerationOrchestrator:
    def __init__(
        self,
        store: ShotStore,
        client: VideoGenerator,
        frames: FrameExtractor,
        *,
        catalog: MovementCatalog = DEFAULT_MOVEMENTS,
        genres: GenreCatalog = DEFAULT_GENRES,
        id_factory: Callable[[], str] = _new_take_id,
    ) -> None:
        self.store = store
        self.client = client
        self.frames = frames
        self.catalog = catalog
        self.genres = genres
        self._new_id = id_factory

    def execute(self, request: GenerationInput) -> GenerationOutcome:
        """Generate one take for request.shot_id.

        Raises:
            ShotNotFoundError: no such shot.
            MovieNotFoundError: the shot's movie is missing.
            GenerationError: the provider failed or timed out.  The shot is
                left GENERATING; the caller marks it failed and refunds.
        """
        shot = self.store.get_shot(request.shot_id)
        if shot is None:
            raise ShotNotFoundError(request.shot_id)
        movie = self.store.get_movie(shot.movie_id)
        if movie is None:
            raise MovieNotFoundError(shot.movie_id)
        characters = self.store.list_characters(movie.id)
        log = logger.bind(shot_id=shot.id, movie_id=movie.id, order=shot.order)

        style_bible = self._style_bible(movie)
        prompt, negative_prompt, reused = self.resolve_prompts(
            shot, movie, characters, style_bible, request.generate_audio
        )
        shot = self.store.update_shot(
            shot.id,
            status=ShotStatus.GENERATING,
            generated_prompt=prompt,
            negative_prompt=negative_prompt,
        )

        chain_source, start_frame_url = self.resolve_continuity(shot, movie)
        shot = self.store.update_shot(shot.id, start_frame_url=start_frame_url)

        shot_text = f"{prompt} {shot.subject} {shot.action}"
        elements = build_character_elements(
            characters, shot_text, shot.scene_index, request.character_reference_urls
        )
        scene_element = build_scene_element(movie.scene_pack_for(shot.scene_index), shot.environment)
        if scene_element is not None:
            elements.append(scene_element)

        cost = credit_cost(request.quality, shot.duration_seconds)
        log.info(
            "generation_started",
            prompt_reused=reused,
            chain_source=chain_source,
            elements=len(elements),
            quality=request.quality,
            credit_cost=cost,
        )

        result = self.client.generate(
            GenerationRequest(
                prompt=prompt,
                negative_prompt=negative_prompt or None,
                duration_seconds=shot.duration_seconds,
                aspect_ratio=movie.aspect_ratio or config.DEFAULT_ASPECT_RATIO,
                quality=request.quality,
                generate_audio=request.generate_audio,
                start_image_url=start_frame_url,
                elements=elements,
            )
        )
        params = {
            "prompt": prompt,
            "negativePrompt": negative_prompt,
            "quality": request.quality,
            "duration": shot.duration_seconds,
            "generationTimeMs": result.duration_ms,
            "elements": len(elements),
            "chainSource": chain_source,
        }

        # The call may have taken minutes; a reset to DRAFT in the meantime
        # means the user cancelled.
        fresh = self.store.get_shot(shot.id)
        if fresh is not None and fresh.status == ShotStatus.DRAFT:
            params["cancelledDuringGeneration"] = True
            take = self.store.add_take(
                TakeRecord(
                    id=self._new_id(),
                    shot_id=shot.id,
                    video_url=result.video_url,
                    is_hero=False,
                    provider_task_id=result.task_id,
                    generation_params=params,
                )
            )
            log.info("generation_cancelled", take_id=take.id)
            return GenerationOutcome(
                take_id=take.id,
                video_url=result.video_url,
                credit_cost=0,
                generation_time_ms=result.duration_ms,
                chain_source="none",
                stale_shot_ids=[],
                elements_used=len(elements),
                cancelled=True,
            )

        take = self.store.add_take(
            TakeRecord(
                id=self._new_id(),
                shot_id=shot.id,
                video_url=result.video_url,
                is_hero=True,
                provider_task_id=result.task_id,
                generation_params=params,
            )
        )

        end_frame_url = self.extract_end_frame(result.video_url)
        changes: Dict[str, object] = {"status": ShotStatus.COMPLETE}
        if end_frame_url:
            changes["end_frame_url"] = end_frame_url
        shot = self.store.update_shot(shot.id, **changes)

        self.advance_movie_status(movie.id)
        if end_frame_url:
            self.cache_reference_frames(shot, characters, end_frame_url)
        stale_shot_ids = self.invalidate_next_shot(shot)

        log.info(
            "generation_complete",
            take_id=take.id,
            end_frame=bool(end_frame_url),
            stale_shots=stale_shot_ids,
        )
        return GenerationOutcome(
            take_id=take.id,
            video_url=result.video_url,
            credit_cost=cost,
            generation_time_ms=result.duration_ms,
            chain_source=chain_source,
            stale_shot_ids=stale_shot_ids,
            elements_used=len(elements),
        )

    # ── Prompt ────────────────────────────────────────────────────────────

    def _style_bible(self, movie: MovieRecord) -> Optional[StyleBible]:
        if movie.style_bible is not None:
            return movie.style_bible
        preset = self.genres.get(movie.genre_preset_id) if movie.genre_preset_id else None
        return preset.style_bible if preset else None

    def resolve_prompts(
        self,
        shot: ShotRecord,
        movie: MovieRecord,
        characters: Sequence[Character],
        style_bible: Optional[StyleBible],
        generate_audio: bool,
    ) -> Tuple[str, str, bool]:
        """(prompt, negative prompt, reused) for this call.

        The stored prompt is reused only when nothing it depends on has
        changed: it exists, its dialogue is wanted (or it has none), no
        character has reference images to bind, and the scene has no
        complete scene pack.
        """
        has_dialogue = shot.dialogue is not None and bool(shot.dialogue.line)
        any_references = any(c.has_reference_images for c in characters)
        pack = movie.scene_pack_for(shot.scene_index)
        scene_element_name = pack.element_name if pack is not None and pack.is_complete else None

        reuse = (
            bool(shot.generated_prompt)
            and (not has_dialogue or generate_audio)
            and not any_references
            and scene_element_name is None
        )
        if reuse:
            prompt = shot.generated_prompt
        else:
            prompt = assemble_prompt(
                PromptShot(
                    shot_type=shot.shot_type,
                    camera_movement=self.camera_text(shot),
                    subject=shot.subject,
                    action=shot.action,
                    duration_seconds=shot.duration_seconds,
                    environment=shot.environment,
                    lighting=shot.lighting,
                    dialogue=shot.dialogue,
                    include_dialogue=generate_audio and has_dialogue,
                    scene_element_name=scene_element_name,
                ),
                [PromptCharacter.from_character(c) for c in characters],
                style_bible,
                _voice_profiles(characters),
            )

        negative_prompt = shot.negative_prompt or format_negative_prompt(
            style_bible, movement_exclusions(shot.camera_movement)
        )
        return prompt, negative_prompt, reuse

    def camera_text(self, shot: ShotRecord) -> str:
        movement = self.catalog.get(shot.camera_movement)
        syntax = movement.prompt_syntax if movement else shot.camera_movement
        return compound_camera_for_duration(syntax, shot.camera_movement, shot.duration_seconds)

    # ── Continuity ────────────────────────────────────────────────────────

    def resolve_continuity(
        self, shot: ShotRecord, movie: MovieRecord
    ) -> Tuple[ChainSource, Optional[str]]:
        """Start frame for this shot: previous shot in the same scene, then scene cache.

        Character reference images are never used as a start frame.
        """
        if shot.order > 0:
            previous = self.store.get_shot_by_order(movie.id, shot.order - 1)
            if (
                previous is not None
                and previous.status == ShotStatus.COMPLETE
                and previous.scene_index == shot.scene_index
            ):
                if previous.end_frame_url:
                    return "chain", previous.end_frame_url
                hero = self.store.hero_take(previous.id)
                if hero is not None:
                    frame_url = self.extract_end_frame(hero.video_url)
                    if frame_url:
                        self.store.update_shot(previous.id, end_frame_url=frame_url)
                        return "chain", frame_url

        scene_frame = movie.scene_reference_frames.get(str(shot.scene_index))
        if scene_frame:
            return "scene", scene_frame
        return "none", None

    def extract_end_frame(self, video_url: str) -> Optional[str]:
        """Last frame of a video, or None when extraction fails."""
        try:
            return self.frames.extract_last_frame(video_url)
        except FrameExtractionError as exc:
            logger.warning("frame_extraction_failed", video_url=video_url, error=str(exc))
            return None

    # ── Bookkeeping ───────────────────────────────────────────────────────

    def advance_movie_status(self, movie_id: str) -> None:
        """Move the movie to GENERATING, or ASSEMBLING once every shot is complete.

        Status only ever moves forward.
        """
        movie = self.store.get_movie(movie_id)
        if movie is None:
            raise MovieNotFoundError(movie_id)
        remaining = self.store.count_incomplete_shots(movie_id)
        target = MovieStatus.ASSEMBLING if remaining == 0 else MovieStatus.GENERATING
        if is_forward(movie.status, target):
            self.store.update_movie(movie_id, status=target)
            logger.info(
                "movie_status_advanced",
                movie_id=movie_id,
                from_status=movie.status.value,
                to_status=target.value,
            )

    def cache_reference_frames(
        self, shot: ShotRecord, characters: Sequence[Character], frame_url: str
    ) -> None:
        """First-writer-wins scene frame, character likeness backfill, per-scene character frames."""
        scene_key = str(shot.scene_index)
        self.store.set_scene_reference_frame_if_absent(shot.movie_id, scene_key, frame_url)

        text = f"{shot.subject} {shot.action}".lower()
        mentioned = [c for c in characters if c.name and c.name.lower() in text]

        needing_reference = [c.id for c in mentioned if not c.generated_reference_url]
        if needing_reference:
            self.store.bulk_set_generated_reference(shot.movie_id, needing_reference, frame_url)

        for char in mentioned:
            self.store.set_character_scene_frame_if_absent(
                shot.movie_id, char.id, scene_key, frame_url
            )

    def invalidate_next_shot(self, shot: ShotRecord) -> List[str]:
        """Clear the next shot's cached start frame if it chained from this one.

        Shots further downstream re-derive continuity on their own turn.
        """
        following = self.store.get_shot_by_order(shot.movie_id, shot.order + 1)
        if (
            following is None
            or following.scene_index != shot.scene_index
            or not following.start_frame_url
        ):
            return []
        self.store.update_shot(following.id, start_frame_url=None)
        return [following.id]


def _voice_profiles(characters: Sequence[Character]) -> Dict[str, VoiceProfile]:
    return {c.id: c.voice_profile for c in characters if c.voice_profile is not None}
