"""Prompt assembly for the video generation model."""

from shot_engine.prompts.assembly import (
    PromptCharacter,
    PromptShot,
    PromptValidation,
    assemble_prompt,
    build_subject_block,
    element_name_for,
    format_dialogue,
    format_negative_prompt,
    movement_exclusions,
    validate_prompt,
)

__all__ = [
    "PromptCharacter",
    "PromptShot",
    "PromptValidation",
    "assemble_prompt",
    "build_subject_block",
    "element_name_for",
    "format_dialogue",
    "format_negative_prompt",
    "movement_exclusions",
    "validate_prompt",
]
