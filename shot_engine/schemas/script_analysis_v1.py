"""ScriptAnalysis schema v1: load, dump, validate."""
from __future__ import annotations

import json
from pathlib import Path
from typing import List, Union

from pydantic import ValidationError

from shot_engine.models import Character, ScriptAnalysis

SCHEMA_VERSION = "1.0.0"


def _read(source: Union[str, bytes, dict, list, Path]):
    if isinstance(source, Path):
        return json.loads(source.read_text(encoding="utf-8"))
    if isinstance(source, (str, bytes)):
        return json.loads(source)
    return source


def load_script_analysis(source: Union[str, bytes, dict, Path]) -> ScriptAnalysis:
    """Parse a ScriptAnalysis from JSON string, bytes, dict, or file Path.

    Accepts camelCase (as produced by the analysis LLM) or snake_case keys.

    Raises:
        ValidationError: data does not conform to the ScriptAnalysis schema.
        FileNotFoundError: Path does not exist.
    """
    return ScriptAnalysis.model_validate(_read(source))


def load_characters(source: Union[str, bytes, list, Path]) -> List[Character]:
    """Parse a JSON array of Character records."""
    data = _read(source)
    if not isinstance(data, list):
        raise ValueError("characters document must be a JSON array")
    return [Character.model_validate(item) for item in data]


def dump_script_analysis(analysis: ScriptAnalysis, *, indent: int = 2) -> str:
    """Serialize a ScriptAnalysis to camelCase JSON (sort_keys=True)."""
    raw = analysis.model_dump(mode="json", by_alias=True)
    return json.dumps(raw, sort_keys=True, indent=indent, ensure_ascii=False)


def validate_script_analysis(data: dict) -> List[str]:
    """Validate a raw dict against the ScriptAnalysis model.

    Returns a list of human-readable error strings (empty list = valid).
    Does not raise.
    """
    try:
        ScriptAnalysis.model_validate(data)
        return []
    except ValidationError as exc:
        return [f"{e['loc']}: {e['msg']}" for e in exc.errors()]
