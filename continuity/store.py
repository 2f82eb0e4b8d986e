"""Persistence capability used by the generation orchestrator.

The orchestrator only needs point reads, atomic single-record updates, and
two read-modify-write operations (scene reference frames, per-scene
character frames) that must keep the first writer.  Anything providing these
methods can back it; InMemoryStore and JsonProjectStore ship here.
"""
from __future__ import annotations

import threading
from typing import Dict, Iterable, List, Optional, Protocol

from shot_engine.errors import MovieNotFoundError, ShotNotFoundError
from shot_engine.models import Character

from continuity.models import MovieRecord, ShotRecord, ShotStatus, TakeRecord


class ShotStore(Protocol):
    def get_shot(self, shot_id: str) -> Optional[ShotRecord]: ...

    def get_shot_by_order(self, movie_id: str, order: int) -> Optional[ShotRecord]: ...

    def list_shots(self, movie_id: str) -> List[ShotRecord]: ...

    def update_shot(self, shot_id: str, **changes) -> ShotRecord: ...

    def count_incomplete_shots(self, movie_id: str) -> int: ...

    def get_movie(self, movie_id: str) -> Optional[MovieRecord]: ...

    def update_movie(self, movie_id: str, **changes) -> MovieRecord: ...

    def set_scene_reference_frame_if_absent(
        self, movie_id: str, scene_key: str, frame_url: str
    ) -> bool: ...

    def list_characters(self, movie_id: str) -> List[Character]: ...

    def bulk_set_generated_reference(
        self, movie_id: str, character_ids: Iterable[str], frame_url: str
    ) -> None: ...

    def set_character_scene_frame_if_absent(
        self, movie_id: str, character_id: str, scene_key: str, frame_url: str
    ) -> bool: ...

    def add_take(self, take: TakeRecord) -> TakeRecord: ...

    def list_takes(self, shot_id: str) -> List[TakeRecord]: ...

    def hero_take(self, shot_id: str) -> Optional[TakeRecord]: ...


def apply_changes(record, changes: dict):
    """Copy of a pydantic record with changes applied; unknown fields are an error."""
    unknown = set(changes) - set(type(record).model_fields)
    if unknown:
        raise ValueError(f"Unknown field(s) for {type(record).__name__}: {sorted(unknown)}")
    return record.model_copy(update=changes)


class InMemoryStore:
    """Process-local ShotStore.  A single re-entrant lock guards every operation."""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._movies: Dict[str, MovieRecord] = {}
        self._shots: Dict[str, ShotRecord] = {}
        self._characters: Dict[str, Dict[str, Character]] = {}
        self._takes: Dict[str, List[TakeRecord]] = {}

    # ── Seeding ───────────────────────────────────────────────────────────

    def add_movie(self, movie: MovieRecord) -> MovieRecord:
        with self._lock:
            self._movies[movie.id] = movie
            self._characters.setdefault(movie.id, {})
            return movie

    def add_shot(self, shot: ShotRecord) -> ShotRecord:
        with self._lock:
            self._shots[shot.id] = shot
            return shot

    def add_character(self, movie_id: str, character: Character) -> Character:
        with self._lock:
            self._characters.setdefault(movie_id, {})[character.id] = character
            return character

    # ── Shots ─────────────────────────────────────────────────────────────

    def get_shot(self, shot_id: str) -> Optional[ShotRecord]:
        with self._lock:
            return self._shots.get(shot_id)

    def get_shot_by_order(self, movie_id: str, order: int) -> Optional[ShotRecord]:
        with self._lock:
            for shot in self._shots.values():
                if shot.movie_id == movie_id and shot.order == order:
                    return shot
            return None

    def list_shots(self, movie_id: str) -> List[ShotRecord]:
        with self._lock:
            shots = [s for s in self._shots.values() if s.movie_id == movie_id]
        return sorted(shots, key=lambda s: s.order)

    def update_shot(self, shot_id: str, **changes) -> ShotRecord:
        with self._lock:
            shot = self._shots.get(shot_id)
            if shot is None:
                raise ShotNotFoundError(shot_id)
            updated = apply_changes(shot, changes)
            self._shots[shot_id] = updated
            return updated

    def count_incomplete_shots(self, movie_id: str) -> int:
        with self._lock:
            return sum(
                1 for s in self._shots.values()
                if s.movie_id == movie_id and s.status != ShotStatus.COMPLETE
            )

    # ── Movies ────────────────────────────────────────────────────────────

    def get_movie(self, movie_id: str) -> Optional[MovieRecord]:
        with self._lock:
            return self._movies.get(movie_id)

    def update_movie(self, movie_id: str, **changes) -> MovieRecord:
        with self._lock:
            movie = self._movies.get(movie_id)
            if movie is None:
                raise MovieNotFoundError(movie_id)
            updated = apply_changes(movie, changes)
            self._movies[movie_id] = updated
            return updated

    def set_scene_reference_frame_if_absent(
        self, movie_id: str, scene_key: str, frame_url: str
    ) -> bool:
        with self._lock:
            movie = self._movies.get(movie_id)
            if movie is None:
                raise MovieNotFoundError(movie_id)
            if movie.scene_reference_frames.get(scene_key):
                return False
            frames = dict(movie.scene_reference_frames)
            frames[scene_key] = frame_url
            self._movies[movie_id] = movie.model_copy(update={"scene_reference_frames": frames})
            return True

    # ── Characters ────────────────────────────────────────────────────────

    def list_characters(self, movie_id: str) -> List[Character]:
        with self._lock:
            return list(self._characters.get(movie_id, {}).values())

    def bulk_set_generated_reference(
        self, movie_id: str, character_ids: Iterable[str], frame_url: str
    ) -> None:
        with self._lock:
            cast = self._characters.get(movie_id, {})
            for character_id in character_ids:
                if character_id in cast:
                    cast[character_id] = cast[character_id].model_copy(
                        update={"generated_reference_url": frame_url}
                    )

    def set_character_scene_frame_if_absent(
        self, movie_id: str, character_id: str, scene_key: str, frame_url: str
    ) -> bool:
        with self._lock:
            cast = self._characters.get(movie_id, {})
            character = cast.get(character_id)
            if character is None or character.scene_reference_frames.get(scene_key):
                return False
            frames = dict(character.scene_reference_frames)
            frames[scene_key] = frame_url
            cast[character_id] = character.model_copy(update={"scene_reference_frames": frames})
            return True

    # ── Takes ─────────────────────────────────────────────────────────────

    def add_take(self, take: TakeRecord) -> TakeRecord:
        with self._lock:
            self._takes.setdefault(take.shot_id, []).append(take)
            return take

    def list_takes(self, shot_id: str) -> List[TakeRecord]:
        with self._lock:
            return list(self._takes.get(shot_id, []))

    def hero_take(self, shot_id: str) -> Optional[TakeRecord]:
        with self._lock:
            for take in reversed(self._takes.get(shot_id, [])):
                if take.is_hero:
                    return take
            return None
