"""Prompt assembly for the video generation model.

Block order is part of the contract; the model weighs earlier blocks more
heavily and reads the style bible as a global grade only when it comes last:

    1. camera       : how the audience sees it (movement + shot type)
    2. subject      : who is on screen, as @element tokens when references exist
    3. dialogue     : speaker label + voice description (only with native audio)
    4. action       : what happens, with temporal structure for long shots
    5. environment  : where, with the scene element token when bound
    6. lighting
    7. style bible  : always last

Blocks are joined with ". " and the result ends with exactly one period.
All functions are pure.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from shot_engine.models import Character, ShotDialogue, StyleBible, VoiceProfile

UNIVERSAL_EXCLUSIONS = (
    "blur, flicker, distorted faces, warped limbs, unrealistic proportions, morphing, "
    "deformed hands, extra fingers, mutation, disfigured, low quality, artifacts, glitch"
)

_STATIC_EXCLUSIONS = ("camera shake", "handheld wobble", "zoom")

MOVEMENT_EXCLUSIONS: Dict[str, Sequence[str]] = {
    "static-wide": _STATIC_EXCLUSIONS,
    "static-medium": _STATIC_EXCLUSIONS,
    "static-close-up": _STATIC_EXCLUSIONS,
    "orbit-360": ("jump cuts", "sudden direction change"),
    "tracking-follow": ("jump cuts", "stutter"),
    "tracking-alongside": ("jump cuts", "stutter"),
    "steadicam-float": ("camera shake", "stutter"),
    "slow-dolly-forward": ("camera shake", "fast motion"),
    "dolly-push-in": ("camera shake", "fast motion"),
    "aerial-drone": ("camera shake", "tilted horizon"),
}

# Action text already containing these has enough temporal structure.
_HAS_TEMPORAL_LANGUAGE = re.compile(
    r"\b(then|before\s|after\s|while\s|slowly|gradually|begins?\sto|starts?\sto|eventually|"
    r"finally|continues?\sto|first\s|next\s|meanwhile|picks?\sup|sets?\sdown|"
    r"turns?\s(to|around|back)|steps?\s|reaches?\s(for|out)|pulls?\s|pushes?\s|opens?\s|closes?\s)",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class PromptCharacter:
    id: str
    name: str
    visual_description: str = ""
    has_reference_images: bool = False
    role: Optional[str] = None

    @classmethod
    def from_character(cls, character: Character) -> "PromptCharacter":
        return cls(
            id=character.id,
            name=character.name,
            visual_description=character.visual_description,
            has_reference_images=character.has_reference_images,
            role=character.role,
        )


@dataclass
class PromptShot:
    shot_type: str
    camera_movement: str  # rendered camera text, not the catalog id
    subject: str
    action: str
    duration_seconds: float
    environment: Optional[str] = None
    lighting: Optional[str] = None
    dialogue: Optional[ShotDialogue] = None
    include_dialogue: bool = True
    scene_element_name: Optional[str] = None


@dataclass
class PromptValidation:
    is_valid: bool
    character_coverage: bool
    estimated_quality: str  # "low" | "medium" | "high"
    warnings: List[str] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)


def element_name_for(name: str) -> str:
    """Element token for a character name: "Marcus Chen" -> "element_marcus_chen"."""
    return "element_" + re.sub(r"\s+", "_", name.strip().lower())


# ── Assembly ──────────────────────────────────────────────────────────────────


def assemble_prompt(
    shot: PromptShot,
    characters: Sequence[PromptCharacter],
    style_bible: Optional[StyleBible],
    voice_profiles: Optional[Mapping[str, VoiceProfile]] = None,
) -> str:
    """Render a shot into the prompt string sent to the video model."""
    blocks: List[str] = []

    blocks.append(build_camera_block(shot.shot_type, shot.camera_movement))
    blocks.append(build_subject_block(shot.subject, characters))

    if shot.include_dialogue and shot.dialogue is not None:
        profile = None
        if voice_profiles and shot.dialogue.character_id:
            profile = voice_profiles.get(shot.dialogue.character_id)
        blocks.append(format_dialogue(shot.dialogue, profile))

    if shot.action:
        blocks.append(enrich_action_for_duration(shot.action, shot.duration_seconds))

    environment = shot.environment or ""
    if shot.scene_element_name:
        environment = f"@{shot.scene_element_name} {environment}"
    blocks.append(environment.strip())

    blocks.append(shot.lighting or "")

    if style_bible is not None and style_bible.style_string:
        blocks.append(style_bible.style_string)

    return _join_blocks(blocks)


def _join_blocks(blocks: Iterable[str]) -> str:
    text = ". ".join(b.strip() for b in blocks if b and b.strip())
    if not text:
        return ""
    text = re.sub(r"\.(\s*\.)+", ".", text)
    text = re.sub(r"\s{2,}", " ", text).strip()
    return text.rstrip(". ") + "."


MAX_STORYBOARD_SHOTS = 6


def assemble_multi_shot_prompt(
    shots: Sequence[PromptShot],
    characters: Sequence[PromptCharacter],
    style_bible: Optional[StyleBible],
) -> str:
    """Storyboard prompt for the provider's multi-shot mode.

    One line per shot, "Shot N (Ds): camera, subject, action.", with its
    dialogue indented on the following line.  Shots past the sixth are
    dropped.  The style string, if any, closes the prompt as "Style: ...".
    """
    lines: List[str] = []
    for number, shot in enumerate(shots[:MAX_STORYBOARD_SHOTS], start=1):
        camera = build_camera_block(shot.shot_type, shot.camera_movement)
        subject = build_subject_block(shot.subject, characters)
        parts = ", ".join(p for p in (camera, subject, shot.action) if p)
        line = f"Shot {number} ({shot.duration_seconds:g}s): {parts}."
        dialogue = format_dialogue(shot.dialogue)
        if dialogue:
            line += f"\n  {dialogue}"
        lines.append(line)

    prompt = "\n".join(lines)
    if style_bible is not None and style_bible.style_string:
        prompt += f"\n\nStyle: {style_bible.style_string}"
    return prompt


def build_camera_block(shot_type: str, camera_text: str) -> str:
    """Camera text plus shot type, unless the camera text already names it."""
    if not camera_text:
        return shot_type or ""
    if not shot_type or shot_type.lower() in camera_text.lower():
        return camera_text
    return f"{camera_text}, {shot_type}"


def build_subject_block(subject: str, characters: Sequence[PromptCharacter]) -> str:
    """Swap inlined descriptions for @element tokens on referenced characters.

    The element token binds pixel-level identity from the reference images, so
    repeating the text description would only compete with it.  Characters
    without references keep their full description.
    """
    result = subject or ""

    for char in characters:
        if not char.has_reference_images or not char.name:
            continue
        token = "@" + element_name_for(char.name)
        name = re.escape(char.name)

        if char.visual_description:
            exact = re.compile(
                rf"\b{name}\b,\s*{re.escape(char.visual_description)}", re.IGNORECASE
            )
            if exact.search(result):
                result = exact.sub(lambda _m: token, result)
                continue

        up_to_and = re.compile(rf"\b{name}\b,\s+[^@]*?(?=\s+and\s+)", re.IGNORECASE)
        if up_to_and.search(result):
            result = up_to_and.sub(lambda _m: token, result)
            continue

        result = re.sub(rf"\b{name}\b", lambda _m: token, result, flags=re.IGNORECASE)

    for char in find_mentioned_characters(result, characters):
        if not char.has_reference_images:
            continue
        token = "@" + element_name_for(char.name)
        if token not in result:
            result += f". {token} is present in the scene"

    return re.sub(r"\s{2,}", " ", result).strip()


def find_mentioned_characters(
    text: str, characters: Sequence[PromptCharacter]
) -> List[PromptCharacter]:
    """Characters named in text by full name or by any name part of 3+ letters."""
    lower = text.lower()
    found: Dict[str, PromptCharacter] = {}
    for char in characters:
        if not char.name:
            continue
        if char.name.lower() in lower:
            found[char.id] = char
            continue
        for part in char.name.split():
            if len(part) < 3:
                continue
            if re.search(rf"\b{re.escape(part)}\b", text, re.IGNORECASE):
                found[char.id] = char
                break
    return list(found.values())


def format_dialogue(
    dialogue: Optional[ShotDialogue],
    voice_profile: Optional[VoiceProfile] = None,
) -> str:
    """[Name, emotion, tone, accent accent, speed pace voice]: "line" """
    if dialogue is None:
        return ""
    if not dialogue.character_name.strip() or not dialogue.line.strip():
        return ""

    voice_parts = [dialogue.emotion] if dialogue.emotion else []
    if voice_profile is not None:
        if voice_profile.tone:
            voice_parts.append(voice_profile.tone)
        if voice_profile.accent:
            voice_parts.append(f"{voice_profile.accent} accent")
        if voice_profile.speed and voice_profile.speed != "normal":
            voice_parts.append(f"{voice_profile.speed} pace")
    voice = ", ".join(voice_parts)
    label = f"{dialogue.character_name}, {voice} voice" if voice else dialogue.character_name
    return f'[{label}]: "{dialogue.line}"'


def enrich_action_for_duration(action: str, duration_seconds: float) -> str:
    """Give short actions in long shots a First/Then timeline."""
    if duration_seconds <= 5:
        return action
    if _HAS_TEMPORAL_LANGUAGE.search(action):
        return action
    if len(action.split()) >= 12:
        return action

    body = action.strip().rstrip(".")
    body = body[:1].lower() + body[1:]
    if duration_seconds >= 8:
        return (
            f"First, {body}. Then, the action develops and intensifies. "
            "Finally, the moment settles into stillness"
        )
    return f"First, {body}. Then, the moment lingers and develops"


# ── Negative prompt ───────────────────────────────────────────────────────────


def movement_exclusions(movement_id: Optional[str]) -> List[str]:
    if not movement_id:
        return []
    return list(MOVEMENT_EXCLUSIONS.get(movement_id, ()))


def format_negative_prompt(
    style_bible: Optional[StyleBible],
    additional_exclusions: Optional[Iterable[str]] = None,
) -> str:
    """Style-bible exclusions, universal quality exclusions, then extras.

    Phrases are comma fragments; repeats are dropped case-insensitively and
    the first spelling wins.  No "no ..." prefixes; the model reads the
    negative prompt as a plain exclusion list.
    """
    parts: List[str] = []
    if style_bible is not None and style_bible.negative_prompt:
        parts.append(style_bible.negative_prompt)
    parts.append(UNIVERSAL_EXCLUSIONS)
    if additional_exclusions:
        parts.extend(additional_exclusions)

    seen = set()
    fragments: List[str] = []
    for part in parts:
        for fragment in part.split(","):
            phrase = fragment.strip()
            key = phrase.lower()
            if not phrase or key in seen:
                continue
            seen.add(key)
            fragments.append(phrase)
    return ", ".join(fragments)


# ── Validation ────────────────────────────────────────────────────────────────


def validate_prompt(
    prompt: str,
    shot: PromptShot,
    characters: Sequence[PromptCharacter],
    style_bible: Optional[StyleBible],
) -> PromptValidation:
    """Pre-flight checks surfaced to the user before credits are spent."""
    warnings: List[str] = []
    errors: List[str] = []

    if len(prompt) < 50:
        warnings.append("Prompt is very short — more detail produces better results")
    if len(prompt) > 2000:
        warnings.append("Prompt is very long — the model may truncate or ignore parts")

    if "orbit" in shot.camera_movement.lower() and shot.duration_seconds < 10:
        errors.append("360 orbit requires minimum 10 seconds duration")
    if shot.duration_seconds > 8:
        warnings.append("Shots over 8 seconds have higher artifact risk")

    lower_prompt = prompt.lower()
    mentioned = [
        c for c in characters
        if c.name.lower() in lower_prompt or f"@{element_name_for(c.name)}" in prompt
    ]
    coverage = bool(mentioned) or not characters
    if characters and not mentioned:
        warnings.append("No characters referenced — is this an establishing shot?")

    untagged = [
        c.name for c in characters
        if c.has_reference_images and f"@{element_name_for(c.name)}" not in prompt
    ]
    if untagged:
        warnings.append(
            "Characters with face references not tagged in prompt: "
            f"{', '.join(untagged)}. Element binding may not activate."
        )

    has_style = style_bible is not None and bool(style_bible.style_string)
    if not has_style:
        warnings.append("No style bible applied — visual consistency may vary")

    quality = "medium"
    if errors:
        quality = "low"
    elif len(prompt) > 100 and not warnings and has_style:
        quality = "high"

    return PromptValidation(
        is_valid=not errors,
        character_coverage=coverage,
        estimated_quality=quality,
        warnings=warnings,
        errors=errors,
    )
