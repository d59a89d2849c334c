"""Fellow roster model."""

from __future__ import annotations

from dataclasses import dataclass

PGY_LEVELS = (4, 5, 6)


@dataclass(frozen=True)
class Fellow:
    """A cardiology fellow."""
    name: str        # unique roster name, e.g. "Elkholy"
    pgy: int         # 4, 5 or 6


def pgy_levels(fellows: list[Fellow]) -> dict[str, int]:
    """Map fellow name → PGY level."""
    return {f.name: f.pgy for f in fellows}


def fellow_names(fellows: list[Fellow]) -> list[str]:
    return [f.name for f in fellows]
