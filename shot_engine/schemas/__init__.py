"""Versioned schema loaders and validators."""

from shot_engine.schemas.script_analysis_v1 import (
    dump_script_analysis,
    load_characters,
    load_script_analysis,
    validate_script_analysis,
)
from shot_engine.schemas.shotplan_v1 import dump_shotplan, load_shotplan, validate_shotplan

__all__ = [
    "load_script_analysis",
    "load_characters",
    "dump_script_analysis",
    "validate_script_analysis",
    "load_shotplan",
    "dump_shotplan",
    "validate_shotplan",
]
