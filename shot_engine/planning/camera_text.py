"""Duration-aware camera descriptions.

A 5 second clip can carry a one-line movement such as "Crane shot sweeping
upward".  Given 8-10 seconds and the same line, video models tend to finish the
move early and invent a second, unintended one.  For longer shots each movement
is rewritten as a move that unfolds over the whole clip.
"""
from __future__ import annotations

import re
from typing import Dict

# Shots at or below this length keep the catalog's prompt syntax as-is.
COMPOUND_THRESHOLD_SEC = 5

_TEMPORAL_MARKER = re.compile(r"\b(slow|gradual|stead)", re.IGNORECASE)

COMPOUND_CAMERA: Dict[str, str] = {
    # establishing
    "static-wide": (
        "Static tripod, wide shot, the frame holds perfectly still and steady "
        "while the scene slowly comes alive within it"
    ),
    "crane-up-reveal": (
        "Crane shot begins low near the subject, then slowly sweeps upward, "
        "gradually rising until the full scene is revealed"
    ),
    "crane-down": (
        "Crane shot begins high above the scene, then gradually descends, "
        "slowly settling at eye level on the subject"
    ),
    "aerial-drone": (
        "Aerial drone shot begins high and distant, then glides steadily forward "
        "over the scene, gradually revealing more of the landscape"
    ),
    "slow-dolly-forward": (
        "Dolly begins at the threshold of the scene and moves steadily forward, "
        "gradually carrying the viewer deeper into the space"
    ),
    "pull-out-reveal": (
        "Camera begins tight on the subject, then slowly pulls back, "
        "gradually widening until the surrounding scene is revealed"
    ),
    "tilt-up": (
        "Camera begins at ground level, then slowly tilts upward, "
        "gradually revealing the subject from bottom to top"
    ),
    "tilt-down": (
        "Camera begins looking up at the scene, then slowly tilts downward, "
        "gradually settling on what lies below"
    ),
    "bird-eye": (
        "Bird's eye view, camera looking directly down from above, "
        "slowly drifting as the scene below gradually unfolds"
    ),
    # character
    "dolly-push-in": (
        "Camera begins at a distance and slowly pushes forward, "
        "gradually tightening from a medium shot to an intimate close-up"
    ),
    "static-medium": (
        "Static tripod, medium shot, the frame holds steady "
        "while the subject's expression slowly shifts"
    ),
    "static-close-up": (
        "Static tripod, close-up shot, the frame holds steady on the face "
        "as the emotion gradually builds"
    ),
    "extreme-close-up": (
        "Extreme close-up begins on a single detail, "
        "holding steady as the texture and movement slowly intensify"
    ),
    "ots-dialogue": (
        "Over-the-shoulder shot from behind one character, facing the other, "
        "holding steady as the exchange slowly unfolds"
    ),
    "dutch-angle": (
        "Dutch angle, camera tilted off-axis, slowly drifting "
        "as the unease gradually builds"
    ),
    "low-angle": (
        "Low angle, camera looking upward at the subject, "
        "slowly rising as the subject's presence gradually grows"
    ),
    "high-angle": (
        "High angle, camera looking down at the subject, "
        "slowly drifting higher as the subject gradually seems smaller"
    ),
    "orbit-360": (
        "Camera begins in front of the subject and orbits steadily around them, "
        "gradually completing a full 360-degree circle"
    ),
    "rack-focus": (
        "Focus begins sharp on the foreground, then slowly racks to the background, "
        "gradually shifting attention across the frame"
    ),
    "macro-close-up": (
        "Macro close-up begins on a tiny surface detail, "
        "slowly gliding across it as more texture gradually emerges"
    ),
    "shoulder-shot": (
        "Camera positioned just behind the subject's shoulder, looking forward, "
        "moving steadily with them as the view ahead gradually opens"
    ),
    # action
    "tracking-follow": (
        "Tracking shot begins behind the subject and follows steadily, "
        "gradually closing the distance as they move"
    ),
    "tracking-alongside": (
        "Tracking shot moves steadily alongside the subject at shoulder height, "
        "gradually matching and holding their pace"
    ),
    "steadicam-float": (
        "Steadicam begins at the edge of the scene, then glides steadily through it, "
        "gradually weaving around the subject"
    ),
    "handheld": (
        "Handheld camera begins close to the subject, "
        "then moves with them, the organic movement gradually growing more urgent"
    ),
    "whip-pan": (
        "Camera holds steady on the subject, then whip pans rapidly to the side, "
        "gradually settling on the new point of interest"
    ),
    "speed-ramp": (
        "Action begins at normal speed, then gradually ramps down into slow motion, "
        "lingering on the peak of the movement"
    ),
    "fpv-first-person": (
        "First-person POV begins still, then moves steadily forward through the scene, "
        "gradually picking up speed"
    ),
    "crash-zoom": (
        "Camera begins wide and steady, then crash zooms rapidly into the subject, "
        "holding on the tight frame as the moment slowly lands"
    ),
    "truck-left": (
        "Camera begins on one side of the subject and trucks steadily to the left, "
        "gradually revealing the space beside them"
    ),
    "truck-right": (
        "Camera begins on one side of the subject and trucks steadily to the right, "
        "gradually revealing the space beside them"
    ),
    "chase-cam": (
        "Chase cam begins close behind the subject in rapid motion, "
        "steadily keeping pace as the pursuit gradually intensifies"
    ),
    "low-angle-tracking": (
        "Low-angle tracking shot begins below the subject looking up, "
        "following steadily as they gradually tower over the frame"
    ),
    # transition
    "pan-reveal": (
        "Camera begins on an empty part of the scene, then pans slowly across, "
        "gradually revealing the subject"
    ),
    "dolly-zoom-vertigo": (
        "Dolly zoom begins subtly, then the background gradually warps and stretches "
        "while the subject stays fixed in frame"
    ),
    "fade-in-black": (
        "Frame begins in total black, then the scene slowly fades in, "
        "gradually materializing into full detail"
    ),
    "match-cut": (
        "Match cut composition, the subject mirrors the shape and position of the previous shot, "
        "then slowly moves out of that pose"
    ),
    "shot-reverse-shot": (
        "Medium close-up, dialogue framing, holding steady on the speaker "
        "as the exchange slowly unfolds"
    ),
    "pan-left": (
        "Camera begins on the right of the scene and pans slowly to the left, "
        "gradually taking in the whole space"
    ),
    "pan-right": (
        "Camera begins on the left of the scene and pans slowly to the right, "
        "gradually taking in the whole space"
    ),
}


def compound_camera_for_duration(prompt_syntax: str, movement_id: str, duration_seconds: float) -> str:
    """Return camera text with enough temporal structure for the shot length."""
    if duration_seconds <= COMPOUND_THRESHOLD_SEC:
        return prompt_syntax

    compound = COMPOUND_CAMERA.get(movement_id)
    if compound:
        return compound

    if _TEMPORAL_MARKER.search(prompt_syntax):
        return prompt_syntax
    if not prompt_syntax:
        return prompt_syntax
    return f"Slowly, {prompt_syntax[0].lower()}{prompt_syntax[1:]}"
