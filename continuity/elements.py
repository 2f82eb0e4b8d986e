"""Face-lock and scene-lock element selection for a single generation call.

The provider binds 2-4 reference images to a named token and the prompt
refers to it as @name.  Elements are only built for characters the shot
actually mentions; unused elements waste provider capacity.
"""
from __future__ import annotations

import re
from typing import List, Optional, Sequence

import structlog

from shot_engine.models import Character
from shot_engine.prompts.assembly import element_name_for

from continuity.models import Element, ScenePack

logger = structlog.get_logger(__name__)

MIN_ELEMENT_IMAGES = 2
MAX_ELEMENT_IMAGES = 4
MAX_DESCRIPTION_LEN = 100

# The provider accepts JPEG and PNG only.
UNSUPPORTED_IMAGE_EXTENSIONS = (".webp", ".gif", ".svg")


def filter_supported_image_urls(urls: Sequence[str]) -> List[str]:
    """Drop URLs whose path (query string ignored) ends in a denied extension."""
    kept = []
    for url in urls:
        path = url.lower().split("?", 1)[0]
        if not path.endswith(UNSUPPORTED_IMAGE_EXTENSIONS):
            kept.append(url)
    return kept


def truncate_at_word_boundary(text: str, max_len: int) -> str:
    """Cut to max_len, backing up to the last space when it is past the halfway mark."""
    if len(text) <= max_len:
        return text
    truncated = text[:max_len]
    last_space = truncated.rfind(" ")
    if last_space > max_len * 0.5:
        return truncated[:last_space]
    return truncated


def character_element_description(
    name: str, visual_description: str, role: Optional[str]
) -> str:
    """Name, role and the first visual clause, at most 100 chars."""
    desc = name
    if role:
        desc += f", the {role}"
    first_clause = re.split(r"[.,;]", visual_description or "", maxsplit=1)[0].strip()
    if len(first_clause) > 3:
        desc += f" — {first_clause}"
    return truncate_at_word_boundary(desc, MAX_DESCRIPTION_LEN)


def is_character_mentioned(character: Character, shot_text: str) -> bool:
    """Full name, @element token, or any name part of 3+ letters at a word boundary."""
    text = shot_text.lower()
    name = character.name.lower().strip()
    if not name:
        return False
    if name in text or f"@{element_name_for(character.name)}" in text:
        return True
    for part in name.split():
        if len(part) >= 3 and re.search(rf"\b{re.escape(part)}\b", text):
            return True
    return False


def character_image_urls(
    character: Character,
    scene_index: int,
    extra_urls: Sequence[str] = (),
) -> List[str]:
    """Reference images, generated likeness, per-scene frame, then caller extras; de-duplicated."""
    urls: List[str] = list(character.reference_images)
    if character.generated_reference_url:
        urls.append(character.generated_reference_url)
    scene_frame = character.scene_reference_frames.get(str(scene_index))
    if scene_frame:
        urls.append(scene_frame)
    urls.extend(extra_urls)

    seen = set()
    unique = []
    for url in filter_supported_image_urls(urls):
        if url not in seen:
            seen.add(url)
            unique.append(url)
    return unique


def build_character_elements(
    characters: Sequence[Character],
    shot_text: str,
    scene_index: int,
    extra_urls: Sequence[str] = (),
) -> List[Element]:
    """One element per mentioned character with at least two usable images.

    extra_urls (caller-supplied references for this call) are attached only
    when the shot mentions exactly one character, since they cannot be split
    between faces.  A character left with a single image is skipped and
    logged; it is never an error.
    """
    mentioned = []
    for char in characters:
        if is_character_mentioned(char, shot_text):
            mentioned.append(char)
        elif char.reference_images or char.generated_reference_url:
            logger.debug("element_skipped_not_mentioned", character=char.name)

    if extra_urls and len(mentioned) != 1:
        logger.warning(
            "extra_reference_urls_ignored",
            mentioned_characters=len(mentioned),
            urls=len(extra_urls),
        )
        extra_urls = ()

    elements: List[Element] = []
    for char in mentioned:
        urls = character_image_urls(char, scene_index, extra_urls)
        if len(urls) >= MIN_ELEMENT_IMAGES:
            elements.append(
                Element(
                    name=element_name_for(char.name),
                    description=character_element_description(
                        char.name, char.visual_description, char.role
                    ),
                    image_urls=urls[:MAX_ELEMENT_IMAGES],
                )
            )
        elif len(urls) == 1:
            logger.warning(
                "element_skipped_single_image",
                character=char.name,
                needed=MIN_ELEMENT_IMAGES,
            )
    return elements


def build_scene_element(
    scene_pack: Optional[ScenePack],
    environment: Optional[str],
) -> Optional[Element]:
    """Scene-lock element from a complete scene pack with at least two usable stills."""
    if scene_pack is None or not scene_pack.is_complete:
        return None
    urls = filter_supported_image_urls(scene_pack.completed_image_urls())
    if len(urls) < MIN_ELEMENT_IMAGES:
        logger.warning(
            "scene_element_skipped",
            scene_index=scene_pack.scene_index,
            usable_images=len(urls),
        )
        return None
    return Element(
        name=scene_pack.element_name,
        description=truncate_at_word_boundary(
            f"{environment or 'scene'} — environment and setting", MAX_DESCRIPTION_LEN
        ),
        image_urls=urls[:MAX_ELEMENT_IMAGES],
    )
