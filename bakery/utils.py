from __future__ import annotations

from datetime import date


def iso_today() -> str:
    return date.today().isoformat()


def safe_div(n: float, d: float) -> float:
    return float(n) / float(d) if d else 0.0


def as_flag(value) -> int:
    # SQLite has no boolean type; print toggles are stored as 0/1.
    return 1 if value else 0
