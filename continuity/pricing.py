"""Credit cost of one generation call.

Reported back to the caller only; charging happens outside shot-engine.
"""
from __future__ import annotations

from typing import Dict, Tuple

# quality -> (cost up to 7s, cost above 7s)
CREDIT_COSTS: Dict[str, Tuple[int, int]] = {
    "draft": (5, 8),
    "standard": (15, 25),
    "cinema": (40, 65),
}
LONG_SHOT_THRESHOLD_SEC = 7


def credit_cost(quality: str, duration_seconds: float) -> int:
    """Credits for one take.

    Raises:
        ValueError: unknown quality tier.
    """
    try:
        short_cost, long_cost = CREDIT_COSTS[quality]
    except KeyError:
        raise ValueError(f"Unknown quality tier: {quality!r}") from None
    return long_cost if duration_seconds > LONG_SHOT_THRESHOLD_SEC else short_cost
