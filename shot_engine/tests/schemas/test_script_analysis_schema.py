"""Schema-level tests for script_analysis_v1 and the ScriptAnalysis contract."""
from __future__ import annotations

import json
from pathlib import Path

import jsonschema
import pytest
from pydantic import ValidationError

from shot_engine.contract_validate import validate_script_analysis as contract_validate
from shot_engine.schemas.script_analysis_v1 import (
    dump_script_analysis,
    load_characters,
    load_script_analysis,
    validate_script_analysis,
)

_ANALYSIS = {
    "synopsis": "A lighthouse keeper waits for a ship.",
    "genre": "drama",
    "suggestedDuration": 30,
    "scenes": [
        {
            "title": "The Lamp",
            "location": "Lighthouse gallery",
            "timeOfDay": "night",
            "beats": [
                {"description": "The lamp turns", "emotionalTone": "reflective"},
                {
                    "description": "Ana calls out to the sea",
                    "emotionalTone": "hopeful",
                    "dialogue": [{"character": "Ana", "line": "Come home."}],
                },
            ],
        }
    ],
}


class TestLoadScriptAnalysis:
    def test_camel_case_input(self):
        analysis = load_script_analysis(_ANALYSIS)
        assert analysis.suggested_duration == 30
        assert analysis.scenes[0].time_of_day == "night"
        assert analysis.scenes[0].beats[0].emotional_tone == "reflective"

    def test_snake_case_input(self):
        analysis = load_script_analysis(
            {"scenes": [{"location": "Pier", "time_of_day": "dawn", "beats": []}]}
        )
        assert analysis.scenes[0].time_of_day == "dawn"

    def test_defaults(self):
        beat = load_script_analysis(_ANALYSIS).scenes[0].beats[1]
        assert beat.dialogue[0].emotion == "neutral"
        assert beat.has_dialogue

    def test_beat_count(self):
        assert load_script_analysis(_ANALYSIS).beat_count == 2

    def test_null_dialogue_is_empty(self):
        analysis = load_script_analysis(
            {"scenes": [{"location": "Pier", "beats": [{"description": "x", "dialogue": None}]}]}
        )
        assert analysis.scenes[0].beats[0].dialogue == []

    def test_unknown_fields_ignored(self):
        data = dict(_ANALYSIS, mood="grim")
        assert load_script_analysis(data).genre == "drama"

    def test_load_from_path(self, tmp_path: Path):
        p = tmp_path / "analysis.json"
        p.write_text(json.dumps(_ANALYSIS), encoding="utf-8")
        assert load_script_analysis(p).synopsis.startswith("A lighthouse")

    def test_missing_location_raises(self):
        with pytest.raises(ValidationError):
            load_script_analysis({"scenes": [{"beats": []}]})

    def test_dump_round_trips_camel_case(self):
        dumped = json.loads(dump_script_analysis(load_script_analysis(_ANALYSIS)))
        assert dumped["scenes"][0]["timeOfDay"] == "night"


class TestLoadCharacters:
    def test_array(self):
        characters = load_characters(
            '[{"id": "c1", "name": "Ana", "referenceImages": ["a.jpg"]}]'
        )
        assert characters[0].reference_images == ["a.jpg"]
        assert characters[0].has_reference_images

    def test_object_rejected(self):
        with pytest.raises(ValueError, match="JSON array"):
            load_characters('{"id": "c1"}')


class TestValidateScriptAnalysis:
    def test_valid_returns_empty(self):
        assert validate_script_analysis(_ANALYSIS) == []

    def test_invalid_returns_messages(self):
        assert validate_script_analysis({"scenes": "nope"})


class TestContract:
    def test_valid(self):
        contract_validate(_ANALYSIS)

    def test_null_dialogue_allowed(self):
        data = {"scenes": [{"location": "Pier", "beats": [{"description": "x", "dialogue": None}]}]}
        contract_validate(data)

    def test_beat_without_description_rejected(self):
        data = {"scenes": [{"location": "Pier", "beats": [{"emotionalTone": "sad"}]}]}
        with pytest.raises(jsonschema.ValidationError):
            contract_validate(data)

    def test_missing_scenes_rejected(self):
        with pytest.raises(jsonschema.ValidationError):
            contract_validate({"synopsis": "x"})
