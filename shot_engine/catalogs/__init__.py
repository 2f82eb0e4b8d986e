"""Static reference catalogs: camera movements and genre presets."""

from shot_engine.catalogs.camera_movements import (
    CAMERA_MOVEMENTS,
    DEFAULT_MOVEMENTS,
    ORBIT_MOVEMENT_ID,
    CameraMovement,
    MovementCatalog,
    get_camera_movement,
)
from shot_engine.catalogs.genre_presets import (
    DEFAULT_GENRES,
    GENRE_PRESETS,
    GenreCatalog,
    GenrePreset,
    get_genre_preset,
)

__all__ = [
    "CAMERA_MOVEMENTS",
    "DEFAULT_MOVEMENTS",
    "ORBIT_MOVEMENT_ID",
    "CameraMovement",
    "MovementCatalog",
    "get_camera_movement",
    "DEFAULT_GENRES",
    "GENRE_PRESETS",
    "GenreCatalog",
    "GenrePreset",
    "get_genre_preset",
]
