"""ShotPlan schema v1.0.0: load, dump, validate."""
from __future__ import annotations

import json
from pathlib import Path
from typing import List, Union

from pydantic import ValidationError

from shot_engine.models import ShotPlan

SCHEMA_VERSION = "1.0.0"


def load_shotplan(source: Union[str, bytes, dict, Path]) -> ShotPlan:
    """Parse a ShotPlan from JSON string, bytes, dict, or file Path.

    Raises:
        ValidationError: data does not conform to the ShotPlan schema.
        FileNotFoundError: Path does not exist.
    """
    if isinstance(source, Path):
        data = json.loads(source.read_text(encoding="utf-8"))
    elif isinstance(source, (str, bytes)):
        data = json.loads(source)
    else:
        data = source
    return ShotPlan.model_validate(data)


def plan_to_dict(plan: ShotPlan) -> dict:
    """camelCase JSON-ready dict, the shape stored on disk and checked by the contract."""
    return plan.model_dump(mode="json", by_alias=True)


def dump_shotplan(plan: ShotPlan, *, indent: int = 2) -> str:
    """Serialize a ShotPlan to canonical JSON (sort_keys=True, indent=2)."""
    return json.dumps(plan_to_dict(plan), sort_keys=True, indent=indent, ensure_ascii=False)


def canonical_json_bytes(plan: ShotPlan) -> bytes:
    """Canonical UTF-8 bytes for a ShotPlan; byte-stable for identical plans."""
    return dump_shotplan(plan, indent=2).encode("utf-8")


def validate_shotplan(data: dict) -> List[str]:
    """Validate a raw dict against the ShotPlan model.

    Returns a list of human-readable error strings (empty list = valid).
    Does not raise.
    """
    try:
        ShotPlan.model_validate(data)
        return []
    except ValidationError as exc:
        return [f"{e['loc']}: {e['msg']}" for e in exc.errors()]
