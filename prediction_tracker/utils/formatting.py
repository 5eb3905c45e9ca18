from __future__ import annotations

from math import isfinite

MISSING = "-"


def format_usd(value: float | None) -> str:
    if value is None or not isfinite(value):
        return MISSING
    return f"${value:,.2f}"


def format_pct(value: float | None) -> str:
    if value is None or not isfinite(value):
        return MISSING
    return f"{value:+.2f}%"
