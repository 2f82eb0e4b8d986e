"""CLI tests for the shot-engine subcommands."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from shot_engine.cli import main


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

_SCRIPT = {
    "synopsis": "A courier crosses the city at night.",
    "genre": "noir",
    "scenes": [
        {
            "title": "Station",
            "location": "Empty train station",
            "timeOfDay": "night",
            "beats": [
                {"description": "A train pulls in, steam rolling", "emotionalTone": "ominous"},
                {"description": "Mara steps off carrying a case", "emotionalTone": "tense"},
            ],
        },
        {
            "title": "Bridge",
            "location": "Iron bridge",
            "timeOfDay": "night",
            "beats": [
                {
                    "description": "Mara hands over the case",
                    "emotionalTone": "suspenseful",
                    "dialogue": [{"character": "Mara", "line": "Don't open it here."}],
                },
            ],
        },
    ],
}

_CHARACTERS = [
    {"id": "char_mara", "name": "Mara", "visualDescription": "courier in a long coat"},
]


def _write(path: Path, data) -> Path:
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def _run(*args: str) -> int:
    with pytest.raises(SystemExit) as exc_info:
        main(list(args))
    return exc_info.value.code


def _plan(tmp_path: Path, *extra: str) -> Path:
    script = _write(tmp_path / "analysis.json", _SCRIPT)
    out = tmp_path / "plan.json"
    assert _run("plan-shots", "--script", str(script), "--output", str(out), *extra) == 0
    return out


# ---------------------------------------------------------------------------
# plan-shots
# ---------------------------------------------------------------------------

class TestPlanShots:

    def test_writes_plan(self, tmp_path: Path, capsys):
        out = _plan(tmp_path)
        plan = json.loads(out.read_text(encoding="utf-8"))
        assert len(plan["shots"]) == 3
        assert capsys.readouterr().out.startswith("OK: planned 3 shots")

    def test_output_is_byte_stable(self, tmp_path: Path):
        first = _plan(tmp_path).read_bytes()
        second = _plan(tmp_path).read_bytes()
        assert first == second

    def test_genre_and_characters(self, tmp_path: Path):
        chars = _write(tmp_path / "characters.json", _CHARACTERS)
        out = _plan(tmp_path, "--genre", "noir", "--characters", str(chars))
        plan = json.loads(out.read_text(encoding="utf-8"))
        assert plan["genrePresetId"] == "noir"
        assert plan["shots"][2]["dialogue"]["characterId"] == "char_mara"
        for shot in plan["shots"]:
            assert "desaturated teal grade" in shot["generatedPrompt"].lower()

    def test_seed_recorded(self, tmp_path: Path):
        plan = json.loads(_plan(tmp_path, "--seed", "99").read_text(encoding="utf-8"))
        assert plan["seed"] == 99

    def test_unseeded(self, tmp_path: Path):
        plan = json.loads(_plan(tmp_path, "--unseeded").read_text(encoding="utf-8"))
        assert plan["seed"] is None

    def test_seed_and_unseeded_conflict(self, tmp_path: Path):
        script = _write(tmp_path / "analysis.json", _SCRIPT)
        code = _run(
            "plan-shots", "--script", str(script), "--output", str(tmp_path / "p.json"),
            "--seed", "1", "--unseeded",
        )
        assert code == 2

    def test_target_duration(self, tmp_path: Path):
        plan = json.loads(_plan(tmp_path, "--target", "9").read_text(encoding="utf-8"))
        assert plan["targetDuration"] == 9
        assert plan["totalDurationSeconds"] == sum(s["durationSeconds"] for s in plan["shots"])

    def test_unknown_genre(self, tmp_path: Path, capsys):
        script = _write(tmp_path / "analysis.json", _SCRIPT)
        out = tmp_path / "plan.json"
        code = _run("plan-shots", "--script", str(script), "--output", str(out), "--genre", "western")
        assert code == 1
        assert "unknown genre preset" in capsys.readouterr().out
        assert not out.exists()

    def test_invalid_script_not_written(self, tmp_path: Path, capsys):
        script = _write(tmp_path / "analysis.json", {"scenes": [{"beats": []}]})
        out = tmp_path / "plan.json"
        code = _run("plan-shots", "--script", str(script), "--output", str(out))
        assert code == 1
        assert capsys.readouterr().out.startswith("ERROR: invalid ScriptAnalysis")
        assert not out.exists()


# ---------------------------------------------------------------------------
# validate-plan
# ---------------------------------------------------------------------------

class TestValidatePlan:

    def test_valid_plan(self, tmp_path: Path, capsys):
        out = _plan(tmp_path)
        capsys.readouterr()
        assert _run("validate-plan", "--plan", str(out)) == 0
        assert capsys.readouterr().out.strip() == "OK: ShotPlan is valid"

    def test_contract_violation(self, tmp_path: Path, capsys):
        out = _plan(tmp_path)
        data = json.loads(out.read_text(encoding="utf-8"))
        data["planId"] = "bogus"
        _write(out, data)
        capsys.readouterr()
        assert _run("validate-plan", "--plan", str(out)) == 1
        assert capsys.readouterr().out.startswith("ERROR: invalid ShotPlan")

    def test_tampered_timing(self, tmp_path: Path, capsys):
        out = _plan(tmp_path)
        data = json.loads(out.read_text(encoding="utf-8"))
        data["shots"][0]["durationSeconds"] = 10 if data["shots"][0]["durationSeconds"] != 10 else 9
        _write(out, data)
        capsys.readouterr()
        assert _run("validate-plan", "--plan", str(out)) == 1
        assert "timingLockHash" in capsys.readouterr().out


# ---------------------------------------------------------------------------
# analyze-duration / list-movements
# ---------------------------------------------------------------------------

class TestAnalyzeDuration:

    def test_report(self, tmp_path: Path, capsys):
        script = _write(tmp_path / "analysis.json", _SCRIPT)
        assert _run("analyze-duration", "--script", str(script), "--target", "20") == 0
        report = json.loads(capsys.readouterr().out)
        # (5+1) + (5+1) + (7+1)
        assert report["optimalDuration"] == 20
        assert report["fitScore"] == 100
        assert report["suggestion"] is None

    def test_missing_file(self, tmp_path: Path, capsys):
        code = _run("analyze-duration", "--script", str(tmp_path / "nope.json"), "--target", "20")
        assert code == 1
        assert capsys.readouterr().out.startswith("ERROR:")


class TestListMovements:

    def test_all(self, capsys):
        assert _run("list-movements") == 0
        lines = capsys.readouterr().out.strip().splitlines()
        assert len(lines) == 40
        assert lines[0].split("\t")[0] == "static-wide"

    def test_category(self, capsys):
        assert _run("list-movements", "--category", "transition") == 0
        for line in capsys.readouterr().out.strip().splitlines():
            assert line.split("\t")[1] == "transition"


class TestNoCommand:

    def test_prints_help_and_fails(self, capsys):
        assert _run() == 1
        assert "usage: shot-engine" in capsys.readouterr().out
