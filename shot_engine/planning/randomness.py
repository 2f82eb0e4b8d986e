"""Random sources for the shot planner.

Every per-shot random decision the planner makes (movement draw, shot type)
goes through a RandomSource.  The lighting shuffle does not: it is seeded per
scene from simple_hash, so lighting stays stable within a scene.  The default
source is seeded from the script content, so the same script always produces
the same plan; pass UnseededRandom() for per-run variety.

All integer arithmetic is 32-bit, so seeds and sequences are stable across
platforms and match values stored with earlier plans.
"""
from __future__ import annotations

import hashlib
import json
import random
from typing import Callable, Optional, Protocol, runtime_checkable

from shot_engine.models import ScriptAnalysis

_MASK32 = 0xFFFFFFFF


@runtime_checkable
class RandomSource(Protocol):
    def next(self) -> float:
        """Return a float in [0, 1)."""
        ...


def _to_int32(value: int) -> int:
    value &= _MASK32
    return value - 0x100000000 if value & 0x80000000 else value


def _imul(a: int, b: int) -> int:
    return (a * b) & _MASK32


def simple_hash(text: str) -> int:
    """Order-dependent 32-bit string hash (h = h*31 + code), always >= 0."""
    h = 0
    for ch in text:
        h = _to_int32((h << 5) - h + ord(ch))
    return abs(h)


def seeded_random(seed: int) -> Callable[[], float]:
    """mulberry32: a small deterministic generator returning floats in [0, 1)."""
    state = seed & _MASK32

    def _next() -> float:
        nonlocal state
        state = (state + 0x6D2B79F5) & _MASK32
        t = state
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & _MASK32
        t &= _MASK32
        return ((t ^ (t >> 14)) & _MASK32) / 4294967296

    return _next


class SeededRandom:
    """RandomSource backed by seeded_random(); identical seeds give identical plans."""

    def __init__(self, seed: int) -> None:
        self.seed = seed & _MASK32
        self._next = seeded_random(self.seed)

    def next(self) -> float:
        return self._next()


class UnseededRandom:
    """RandomSource with fresh entropy on every run."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()

    def next(self) -> float:
        return self._rng.random()


def script_seed(analysis: ScriptAnalysis) -> int:
    """Seed derived from the script content: first 8 hex chars of SHA-256."""
    canonical = json.dumps(
        analysis.model_dump(mode="json", by_alias=True),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
    digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
    return int(digest[:8], 16)
