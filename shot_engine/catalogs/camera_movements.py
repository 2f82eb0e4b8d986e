"""Camera movement catalog.

Each entry pairs a prompt fragment the video model understands with the
shortest duration (seconds) in which the movement can read on screen.  The
planner weights candidates by category and uses min_duration as a hard floor.
"""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Iterator, List, Mapping, Optional, Tuple

CATEGORIES: Tuple[str, ...] = ("establishing", "character", "action", "transition")


@dataclass(frozen=True)
class CameraMovement:
    id: str
    name: str
    category: str
    prompt_syntax: str
    min_duration: int


class MovementCatalog(Mapping[str, CameraMovement]):
    """Read-only id → CameraMovement table, preserving catalog order."""

    def __init__(self, movements: Iterable[CameraMovement]) -> None:
        table = {}
        for movement in movements:
            if movement.category not in CATEGORIES:
                raise ValueError(
                    f"Movement {movement.id!r} has unknown category {movement.category!r}"
                )
            table[movement.id] = movement
        self._table = MappingProxyType(table)

    def __getitem__(self, movement_id: str) -> CameraMovement:
        return self._table[movement_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def ids(self) -> List[str]:
        return list(self._table)

    def in_category(self, category: str) -> List[CameraMovement]:
        return [m for m in self._table.values() if m.category == category]


CAMERA_MOVEMENTS: Tuple[CameraMovement, ...] = (
    # ── Establishing & orientation ────────────────────────────────────────
    CameraMovement("static-wide", "Static Wide", "establishing", "Static tripod, wide shot", 3),
    CameraMovement("crane-up-reveal", "Crane Up Reveal", "establishing", "Crane shot sweeping upward to reveal the full scene", 5),
    CameraMovement("crane-down", "Crane Down", "establishing", "Crane shot descending from above, settling on the subject", 5),
    CameraMovement("aerial-drone", "Aerial Drone", "establishing", "Aerial drone shot gliding smoothly over the scene", 5),
    CameraMovement("slow-dolly-forward", "Slow Dolly Forward", "establishing", "Slow dolly forward, moving steadily into the scene", 5),
    CameraMovement("pull-out-reveal", "Pull-Out Reveal", "establishing", "Camera pulls back slowly from the subject, revealing the wider scene", 5),
    CameraMovement("tilt-up", "Tilt Up", "establishing", "Camera tilts upward from ground level", 3),
    CameraMovement("tilt-down", "Tilt Down", "establishing", "Camera tilts downward from above", 3),
    CameraMovement("bird-eye", "Bird's Eye View", "establishing", "Bird's eye view, camera looking directly down from above", 3),
    # ── Character & emotion ───────────────────────────────────────────────
    CameraMovement("dolly-push-in", "Dolly Push-In", "character", "Slow dolly push-in from medium shot to close-up", 5),
    CameraMovement("static-medium", "Static Medium Shot", "character", "Static tripod, medium shot", 3),
    CameraMovement("static-close-up", "Static Close-Up", "character", "Static tripod, close-up shot", 3),
    CameraMovement("extreme-close-up", "Extreme Close-Up", "character", "Extreme close-up, filling the frame with detail", 3),
    CameraMovement("ots-dialogue", "Over-the-Shoulder", "character", "Over-the-shoulder shot from behind one character, facing the other", 3),
    CameraMovement("dutch-angle", "Dutch Angle", "character", "Dutch angle, camera tilted off-axis", 3),
    CameraMovement("low-angle", "Low Angle", "character", "Low angle, camera looking upward at the subject", 3),
    CameraMovement("high-angle", "High Angle", "character", "High angle, camera looking down at the subject", 3),
    CameraMovement("orbit-360", "360-Degree Orbit", "character", "Camera orbits 360 degrees around the subject", 10),
    CameraMovement("rack-focus", "Rack Focus", "character", "Rack focus from foreground to background", 3),
    CameraMovement("macro-close-up", "Macro Close-Up", "character", "Macro close-up, extreme detail", 3),
    CameraMovement("shoulder-shot", "Shoulder Shot", "character", "Camera positioned just behind the subject's shoulder, looking forward", 3),
    # ── Action & movement ─────────────────────────────────────────────────
    CameraMovement("tracking-follow", "Tracking Follow", "action", "Tracking shot, camera follows behind the subject", 5),
    CameraMovement("tracking-alongside", "Tracking Alongside", "action", "Tracking shot, camera moves alongside the subject at shoulder height", 5),
    CameraMovement("steadicam-float", "Steadicam Float", "action", "Steadicam, smooth gliding movement through the scene", 5),
    CameraMovement("handheld", "Handheld", "action", "Handheld camera, organic movement", 3),
    CameraMovement("whip-pan", "Whip Pan", "action", "Whip pan, camera snaps rapidly to the side", 3),
    CameraMovement("speed-ramp", "Speed Ramp", "action", "Speed ramp, transitioning from normal speed to slow motion", 5),
    CameraMovement("fpv-first-person", "FPV / First Person", "action", "First-person POV, camera as the character's eyes", 3),
    CameraMovement("crash-zoom", "Crash Zoom", "action", "Crash zoom, rapid zoom into the subject", 3),
    CameraMovement("truck-left", "Truck Left", "action", "Camera trucks smoothly to the left", 4),
    CameraMovement("truck-right", "Truck Right", "action", "Camera trucks smoothly to the right", 4),
    CameraMovement("chase-cam", "Chase Cam", "action", "Chase cam, close behind the subject in rapid motion", 4),
    CameraMovement("low-angle-tracking", "Low-Angle Tracking", "action", "Low-angle tracking shot, camera below the subject looking up while following", 5),
    # ── Transitions & dialogue coverage ───────────────────────────────────
    CameraMovement("pan-reveal", "Pan-to-Reveal", "transition", "Camera pans slowly, revealing", 5),
    CameraMovement("dolly-zoom-vertigo", "Dolly Zoom (Vertigo Effect)", "transition", "Dolly zoom, background warping while subject stays fixed in frame", 4),
    CameraMovement("fade-in-black", "Fade In from Black", "transition", "Fade in from black, the scene gradually materializes", 4),
    CameraMovement("match-cut", "Match Cut", "transition", "Match cut composition, the subject mirrors the shape and position of the previous shot", 3),
    CameraMovement("shot-reverse-shot", "Shot-Reverse-Shot", "transition", "Medium close-up, dialogue framing", 3),
    CameraMovement("pan-left", "Pan Left", "transition", "Camera pans slowly to the left", 3),
    CameraMovement("pan-right", "Pan Right", "transition", "Camera pans slowly to the right", 3),
)

DEFAULT_MOVEMENTS = MovementCatalog(CAMERA_MOVEMENTS)

# The only movement allowed past the 10 second ceiling.
ORBIT_MOVEMENT_ID = "orbit-360"


def get_camera_movement(movement_id: str) -> Optional[CameraMovement]:
    """Look up a movement in the default catalog; None when unknown."""
    return DEFAULT_MOVEMENTS.get(movement_id)
