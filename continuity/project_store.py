"""
project_store.py: file-backed ShotStore, one JSON document per movie.

Layout under <base_dir>/<movie_id>/:

    MovieState.json     ← movie record, shots, characters, takes (always latest)

Documents are written with sorted keys and fixed indentation so that identical
states always produce byte-identical files.  Every operation is a
read-modify-write of the whole document under the store's lock, so the
first-writer-wins caches re-read the latest file before deciding.  The lock is
per process; two processes sharing a base_dir are not coordinated.
"""

from __future__ import annotations

import json
import os
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, TypeVar

from shot_engine import config
from shot_engine.errors import MovieNotFoundError, ShotNotFoundError
from shot_engine.models import Character

from continuity.models import MovieRecord, ShotRecord, ShotStatus, TakeRecord
from continuity.store import apply_changes

T = TypeVar("T")

_STATE_FILENAME = "MovieState.json"


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _movie_dir(movie_id: str, base_dir: Path) -> Path:
    return base_dir / movie_id


def _state_path(movie_id: str, base_dir: Path) -> Path:
    return _movie_dir(movie_id, base_dir) / _STATE_FILENAME


@dataclass
class _MovieDocument:
    movie: MovieRecord
    shots: List[ShotRecord] = field(default_factory=list)
    characters: List[Character] = field(default_factory=list)
    takes: List[TakeRecord] = field(default_factory=list)

    @classmethod
    def from_json(cls, data: dict) -> "_MovieDocument":
        return cls(
            movie=MovieRecord.model_validate(data["movie"]),
            shots=[ShotRecord.model_validate(s) for s in data.get("shots", [])],
            characters=[Character.model_validate(c) for c in data.get("characters", [])],
            takes=[TakeRecord.model_validate(t) for t in data.get("takes", [])],
        )

    def to_json(self) -> dict:
        def dump(record):
            return record.model_dump(mode="json", by_alias=True)

        return {
            "movie": dump(self.movie),
            "shots": [dump(s) for s in sorted(self.shots, key=lambda s: s.order)],
            "characters": [dump(c) for c in self.characters],
            "takes": [dump(t) for t in self.takes],
        }

    def shot_index(self, shot_id: str) -> int:
        for i, shot in enumerate(self.shots):
            if shot.id == shot_id:
                return i
        raise ShotNotFoundError(shot_id)


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

class JsonProjectStore:
    """ShotStore persisting each movie as <base_dir>/<movie_id>/MovieState.json."""

    def __init__(self, base_dir: Optional[str | Path] = None) -> None:
        self.base_dir = Path(base_dir) if base_dir is not None else config.STORE_DIR
        self._lock = threading.RLock()
        self._shot_movie: Dict[str, str] = {}

    # ── Document I/O ──────────────────────────────────────────────────────

    def _load(self, movie_id: str) -> _MovieDocument:
        path = _state_path(movie_id, self.base_dir)
        if not path.exists():
            raise MovieNotFoundError(movie_id)
        with open(path, "r", encoding="utf-8") as f:
            return _MovieDocument.from_json(json.load(f))

    def _save(self, doc: _MovieDocument) -> None:
        movie_dir = _movie_dir(doc.movie.id, self.base_dir)
        movie_dir.mkdir(parents=True, exist_ok=True)
        path = movie_dir / _STATE_FILENAME
        tmp_path = path.with_suffix(".json.tmp")
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(doc.to_json(), f, sort_keys=True, indent=2, ensure_ascii=False)
            f.write("\n")
        os.replace(tmp_path, path)
        for shot in doc.shots:
            self._shot_movie[shot.id] = doc.movie.id

    def _mutate(self, movie_id: str, fn: Callable[[_MovieDocument], T]) -> T:
        with self._lock:
            doc = self._load(movie_id)
            result = fn(doc)
            self._save(doc)
            return result

    def _movie_id_for_shot(self, shot_id: str) -> Optional[str]:
        with self._lock:
            if shot_id in self._shot_movie:
                return self._shot_movie[shot_id]
            if not self.base_dir.exists():
                return None
            for path in sorted(self.base_dir.glob(f"*/{_STATE_FILENAME}")):
                doc = self._load(path.parent.name)
                for shot in doc.shots:
                    self._shot_movie[shot.id] = doc.movie.id
            return self._shot_movie.get(shot_id)

    # ── Seeding ───────────────────────────────────────────────────────────

    def create_movie(
        self,
        movie: MovieRecord,
        shots: Iterable[ShotRecord] = (),
        characters: Iterable[Character] = (),
    ) -> None:
        """Write a new movie document.

        Raises:
            FileExistsError: a document for this movie id already exists.
        """
        with self._lock:
            path = _state_path(movie.id, self.base_dir)
            if path.exists():
                raise FileExistsError(f"Movie '{movie.id}' already exists at {path}")
            self._save(_MovieDocument(movie=movie, shots=list(shots), characters=list(characters)))

    # ── Shots ─────────────────────────────────────────────────────────────

    def get_shot(self, shot_id: str) -> Optional[ShotRecord]:
        movie_id = self._movie_id_for_shot(shot_id)
        if movie_id is None:
            return None
        with self._lock:
            doc = self._load(movie_id)
            for shot in doc.shots:
                if shot.id == shot_id:
                    return shot
            return None

    def get_shot_by_order(self, movie_id: str, order: int) -> Optional[ShotRecord]:
        for shot in self.list_shots(movie_id):
            if shot.order == order:
                return shot
        return None

    def list_shots(self, movie_id: str) -> List[ShotRecord]:
        with self._lock:
            return sorted(self._load(movie_id).shots, key=lambda s: s.order)

    def update_shot(self, shot_id: str, **changes) -> ShotRecord:
        movie_id = self._movie_id_for_shot(shot_id)
        if movie_id is None:
            raise ShotNotFoundError(shot_id)

        def _apply(doc: _MovieDocument) -> ShotRecord:
            i = doc.shot_index(shot_id)
            doc.shots[i] = apply_changes(doc.shots[i], changes)
            return doc.shots[i]

        return self._mutate(movie_id, _apply)

    def count_incomplete_shots(self, movie_id: str) -> int:
        return sum(1 for s in self.list_shots(movie_id) if s.status != ShotStatus.COMPLETE)

    # ── Movies ────────────────────────────────────────────────────────────

    def get_movie(self, movie_id: str) -> Optional[MovieRecord]:
        with self._lock:
            try:
                return self._load(movie_id).movie
            except MovieNotFoundError:
                return None

    def update_movie(self, movie_id: str, **changes) -> MovieRecord:
        def _apply(doc: _MovieDocument) -> MovieRecord:
            doc.movie = apply_changes(doc.movie, changes)
            return doc.movie

        return self._mutate(movie_id, _apply)

    def set_scene_reference_frame_if_absent(
        self, movie_id: str, scene_key: str, frame_url: str
    ) -> bool:
        def _apply(doc: _MovieDocument) -> bool:
            if doc.movie.scene_reference_frames.get(scene_key):
                return False
            frames = dict(doc.movie.scene_reference_frames)
            frames[scene_key] = frame_url
            doc.movie = doc.movie.model_copy(update={"scene_reference_frames": frames})
            return True

        return self._mutate(movie_id, _apply)

    # ── Characters ────────────────────────────────────────────────────────

    def list_characters(self, movie_id: str) -> List[Character]:
        with self._lock:
            return list(self._load(movie_id).characters)

    def bulk_set_generated_reference(
        self, movie_id: str, character_ids: Iterable[str], frame_url: str
    ) -> None:
        wanted = set(character_ids)

        def _apply(doc: _MovieDocument) -> None:
            doc.characters = [
                c.model_copy(update={"generated_reference_url": frame_url}) if c.id in wanted else c
                for c in doc.characters
            ]

        self._mutate(movie_id, _apply)

    def set_character_scene_frame_if_absent(
        self, movie_id: str, character_id: str, scene_key: str, frame_url: str
    ) -> bool:
        def _apply(doc: _MovieDocument) -> bool:
            for i, character in enumerate(doc.characters):
                if character.id != character_id:
                    continue
                if character.scene_reference_frames.get(scene_key):
                    return False
                frames = dict(character.scene_reference_frames)
                frames[scene_key] = frame_url
                doc.characters[i] = character.model_copy(update={"scene_reference_frames": frames})
                return True
            return False

        return self._mutate(movie_id, _apply)

    # ── Takes ─────────────────────────────────────────────────────────────

    def add_take(self, take: TakeRecord) -> TakeRecord:
        movie_id = self._movie_id_for_shot(take.shot_id)
        if movie_id is None:
            raise ShotNotFoundError(take.shot_id)

        def _apply(doc: _MovieDocument) -> TakeRecord:
            doc.takes.append(take)
            return take

        return self._mutate(movie_id, _apply)

    def list_takes(self, shot_id: str) -> List[TakeRecord]:
        movie_id = self._movie_id_for_shot(shot_id)
        if movie_id is None:
            return []
        with self._lock:
            return [t for t in self._load(movie_id).takes if t.shot_id == shot_id]

    def hero_take(self, shot_id: str) -> Optional[TakeRecord]:
        for take in reversed(self.list_takes(shot_id)):
            if take.is_hero:
                return take
        return None
