"""Schema-level tests for shotplan_v1: load, dump, validate, and the JSON contract."""
from __future__ import annotations

import json
from pathlib import Path

import jsonschema
import pytest
from pydantic import ValidationError

from shot_engine.contract_validate import validate_plan_model
from shot_engine.contract_validate import validate_shotplan as contract_validate_shotplan
from shot_engine.models import PlannedShot, ShotDialogue, ShotPlan
from shot_engine.planning.timing import compute_timing_lock_hash
from shot_engine.schema_loader import load_schema
from shot_engine.schemas.shotplan_v1 import (
    canonical_json_bytes,
    dump_shotplan,
    load_shotplan,
    plan_to_dict,
    validate_shotplan,
)


def _minimal_plan() -> ShotPlan:
    shots = [
        PlannedShot(
            scene_index=0,
            order=0,
            shot_type="wide",
            camera_movement="static-wide",
            subject="Harbour",
            action="Fog rolls in",
            environment="Harbour, dawn",
            lighting="overcast",
            duration_seconds=5,
            generated_prompt="Static tripod, wide shot. Harbour. Fog rolls in.",
            negative_prompt="blur",
        ),
        PlannedShot(
            scene_index=0,
            order=1,
            shot_type="medium",
            camera_movement="ots-dialogue",
            subject="Ana",
            action="Ana turns",
            dialogue=ShotDialogue(character_id="c1", character_name="Ana", line="Now."),
            duration_seconds=7,
        ),
    ]
    return ShotPlan(
        plan_id="plan_0123456789abcdef",
        seed=12,
        shots=shots,
        total_duration_seconds=12,
        timing_lock_hash=compute_timing_lock_hash(shots),
        created_at="2026-02-19T00:00:00Z",
    )


class TestLoadShotplan:
    def test_load_from_dict(self):
        plan = load_shotplan(plan_to_dict(_minimal_plan()))
        assert plan.plan_id == "plan_0123456789abcdef"

    def test_load_from_json_string(self):
        plan = load_shotplan(dump_shotplan(_minimal_plan()))
        assert plan.shots[1].dialogue.line == "Now."

    def test_load_from_path(self, tmp_path: Path):
        p = tmp_path / "plan.json"
        p.write_bytes(canonical_json_bytes(_minimal_plan()))
        assert load_shotplan(p).total_duration_seconds == 12

    def test_load_invalid_raises_validation_error(self):
        with pytest.raises(ValidationError):
            load_shotplan({"shots": []})


class TestDumpShotplan:
    def test_camel_case_keys(self):
        data = json.loads(dump_shotplan(_minimal_plan()))
        assert "timingLockHash" in data
        assert "durationSeconds" in data["shots"][0]
        assert data["shots"][1]["dialogue"]["characterName"] == "Ana"

    def test_canonical_bytes_stable(self):
        assert canonical_json_bytes(_minimal_plan()) == canonical_json_bytes(_minimal_plan())

    def test_sorted_keys(self):
        data = json.loads(dump_shotplan(_minimal_plan()))
        assert list(data) == sorted(data)


class TestValidateShotplan:
    def test_valid_returns_empty(self):
        assert validate_shotplan(plan_to_dict(_minimal_plan())) == []

    def test_missing_field_reported(self):
        data = plan_to_dict(_minimal_plan())
        del data["timingLockHash"]
        errors = validate_shotplan(data)
        assert errors
        assert any("timingLockHash" in e or "timing_lock_hash" in e for e in errors)


class TestContract:
    def test_schema_loads(self):
        assert load_schema("ShotPlan.v1.json")["title"] == "ShotPlan"

    def test_missing_schema_raises(self):
        with pytest.raises(FileNotFoundError, match="Missing canonical schema"):
            load_schema("Nope.v1.json")

    def test_model_conforms(self):
        validate_plan_model(_minimal_plan())

    def test_duration_out_of_range_rejected(self):
        data = plan_to_dict(_minimal_plan())
        data["shots"][0]["durationSeconds"] = 2
        with pytest.raises(jsonschema.ValidationError):
            contract_validate_shotplan(data)

    def test_bad_plan_id_rejected(self):
        data = plan_to_dict(_minimal_plan())
        data["planId"] = "sl_123"
        with pytest.raises(jsonschema.ValidationError):
            contract_validate_shotplan(data)

    def test_unknown_field_rejected(self):
        data = plan_to_dict(_minimal_plan())
        data["extra"] = True
        with pytest.raises(jsonschema.ValidationError):
            contract_validate_shotplan(data)

    def test_wrong_schema_version_rejected(self):
        data = plan_to_dict(_minimal_plan())
        data["schemaVersion"] = "2.0.0"
        with pytest.raises(jsonschema.ValidationError):
            contract_validate_shotplan(data)
