"""Tests for duration-aware camera text."""
from __future__ import annotations

import re

import pytest

from shot_engine.catalogs import DEFAULT_MOVEMENTS
from shot_engine.planning.camera_text import COMPOUND_CAMERA, compound_camera_for_duration

_TEMPORAL = re.compile(r"\b(slow|gradual|stead|then|begins)", re.IGNORECASE)


class TestShortShots:

    @pytest.mark.parametrize("duration", [3, 5])
    def test_unchanged_at_or_below_five_seconds(self, duration):
        movement = DEFAULT_MOVEMENTS["crane-up-reveal"]
        text = compound_camera_for_duration(movement.prompt_syntax, movement.id, duration)
        assert text == movement.prompt_syntax


class TestLongShots:

    def test_every_catalog_movement_has_a_compound_form(self):
        assert set(DEFAULT_MOVEMENTS) <= set(COMPOUND_CAMERA)

    @pytest.mark.parametrize("movement_id", list(DEFAULT_MOVEMENTS))
    def test_known_movements_gain_temporal_structure(self, movement_id):
        movement = DEFAULT_MOVEMENTS[movement_id]
        text = compound_camera_for_duration(movement.prompt_syntax, movement_id, 8)
        assert text != movement.prompt_syntax
        assert len(text) > len(movement.prompt_syntax)
        assert _TEMPORAL.search(text)

    def test_unknown_movement_is_prefixed(self):
        text = compound_camera_for_duration("Camera spins wildly", "spin", 8)
        assert text == "Slowly, camera spins wildly"

    def test_unknown_movement_with_temporal_marker_unchanged(self):
        text = compound_camera_for_duration("Camera drifts gradually left", "drift", 8)
        assert text == "Camera drifts gradually left"

    def test_empty_text_stays_empty(self):
        assert compound_camera_for_duration("", "spin", 9) == ""
