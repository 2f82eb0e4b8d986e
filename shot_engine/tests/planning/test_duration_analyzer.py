"""Tests for shot_engine/planning/duration_analyzer.py."""
from __future__ import annotations

from shot_engine.models import Beat, DialogueLine, Scene, ScriptAnalysis
from shot_engine.planning.duration_analyzer import analyze_duration, fit_score, format_seconds


def _beat(tone: str = "", dialogue: bool = False) -> Beat:
    lines = [DialogueLine(character="Ana", line="Hello.")] if dialogue else []
    return Beat(description="Something happens", emotional_tone=tone, dialogue=lines)


def _make_script(*scenes) -> ScriptAnalysis:
    return ScriptAnalysis(
        scenes=[Scene(location=f"Place {i}", beats=list(beats)) for i, beats in enumerate(scenes)]
    )


# ── Estimates ────────────────────────────────────────────────────────────────


class TestEstimates:

    def test_visual_and_dialogue_beats(self):
        # 5 + 7 + (5 + 2 melancholic) = 19
        script = _make_script([_beat(), _beat(dialogue=True)], [_beat("melancholic")])
        result = analyze_duration(script, 19)
        assert result.optimal_duration == 19
        assert result.min_viable_duration == 11
        assert result.max_comfort_duration == 27

    def test_breakdown_per_scene(self):
        script = _make_script([_beat(), _beat(dialogue=True)], [_beat("exciting")])
        breakdown = analyze_duration(script, 16).breakdown
        assert [b.scene_index for b in breakdown] == [0, 1]
        assert [b.beats for b in breakdown] == [2, 1]
        assert [b.has_dialogue for b in breakdown] == [True, False]
        assert [b.estimated_seconds for b in breakdown] == [12, 4]

    def test_unknown_tone_has_no_bias(self):
        script = _make_script([_beat("bewildered")])
        assert analyze_duration(script, 5).optimal_duration == 5

    def test_empty_script(self):
        result = analyze_duration(ScriptAnalysis(), 30)
        assert result.optimal_duration == 0
        assert result.fit_score == 0
        assert result.suggestion is None
        assert result.breakdown == []


# ── Fit score ────────────────────────────────────────────────────────────────


class TestFitScore:

    def test_within_tolerance_is_perfect(self):
        assert fit_score(100, 100) == 100
        assert fit_score(100, 115) == 100
        assert fit_score(100, 85) == 100

    def test_linear_falloff(self):
        # deviation 0.575 is halfway between 0.15 and 1.0
        assert fit_score(100, 157.5) == 50

    def test_floor_at_zero(self):
        assert fit_score(10, 100) == 0

    def test_zero_optimal(self):
        assert fit_score(0, 0) == 100
        assert fit_score(0, 10) == 0


# ── Suggestions ──────────────────────────────────────────────────────────────


class TestSuggestion:

    def test_no_suggestion_for_good_fit(self):
        script = _make_script([_beat(), _beat()])
        assert analyze_duration(script, 10).suggestion is None

    def test_trim_advice_when_target_too_short(self):
        script = _make_script([_beat(dialogue=True) for _ in range(10)])
        result = analyze_duration(script, 20)
        assert result.fit_score < 70
        assert result.suggestion.startswith("Your story has 10 beats (10 with dialogue)")
        assert "naturally fits ~70s" in result.suggestion
        assert "Consider trimming 7 scene beats or extending to 70s." in result.suggestion

    def test_extend_advice_when_target_too_long(self):
        script = _make_script([_beat(), _beat()])
        result = analyze_duration(script, 60)
        assert result.suggestion.startswith("Your story has 2 beats")
        assert "adding more scenes or beats to fill 60s" in result.suggestion

    def test_long_stories_quoted_in_minutes(self):
        script = _make_script([_beat(dialogue=True) for _ in range(30)])
        result = analyze_duration(script, 30)
        assert "extending to 4 minutes" in result.suggestion


class TestFormatSeconds:

    def test_seconds(self):
        assert format_seconds(90) == "90s"
        assert format_seconds(7.5) == "7.5s"

    def test_minutes(self):
        assert format_seconds(120) == "2 minutes"
        assert format_seconds(210) == "4 minutes"
