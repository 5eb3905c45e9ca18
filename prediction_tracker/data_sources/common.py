from __future__ import annotations

from math import isfinite
from typing import Any


def parse_positive_number(value: Any) -> float | None:
    """Coerce a provider value to a positive finite float, `None` otherwise."""
    if value is None or isinstance(value, bool):
        return None

    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None

    if not isfinite(parsed) or parsed <= 0.0:
        return None

    return parsed


def dig(payload: Any, *path: str) -> Any:
    node = payload
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node
