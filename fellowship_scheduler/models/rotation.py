"""Rotation labels and their daily shift templates."""

from __future__ import annotations

from dataclasses import dataclass


NIGHTS = "Nights"
ICU = "ICU"
FLOOR_A = "Floor A"
FLOOR_B = "Floor B"

FLOOR_ROTATIONS = frozenset({FLOOR_A, FLOOR_B})

# Rotations that must be staffed every block
REQUIRED_ROTATIONS = (ICU, FLOOR_A, FLOOR_B, NIGHTS)


@dataclass(frozen=True)
class ShiftTemplate:
    """Daily shift for a rotation. Night shifts cross midnight (start > end)."""
    start_hour: int
    end_hour: int
    hours: int
    is_night: bool = False
    weekdays_only: bool = True


_DAY_12 = ShiftTemplate(7, 19, 12, weekdays_only=False)
_NIGHT_12 = ShiftTemplate(19, 7, 12, is_night=True, weekdays_only=False)
_DAY_10 = ShiftTemplate(7, 17, 10)
_DAY_8 = ShiftTemplate(8, 16, 8)
_OFF = ShiftTemplate(0, 0, 0)

SHIFT_TEMPLATES: dict[str, ShiftTemplate] = {
    # 12-hour rotations, every day
    ICU: _DAY_12,
    NIGHTS: _NIGHT_12,
    # 10-hour rotations (weekdays)
    FLOOR_A: _DAY_10, FLOOR_B: _DAY_10,
    "Cath": _DAY_10, "Cath 2": _DAY_10, "Cath 3": _DAY_10,
    "Echo": _DAY_10, "Echo 2": _DAY_10,
    "EP": _DAY_10,
    "Nuclear": _DAY_10, "Nuclear 2": _DAY_10,
    # 8-hour rotations (weekdays)
    "AI": _DAY_8, "AI 2": _DAY_8, "AI 3": _DAY_8,
    "Research": _DAY_8, "Research 2": _DAY_8,
    "CTS": _DAY_8, "Structural": _DAY_8, "Vascular": _DAY_8, "SPC": _DAY_8,
    # No duty
    "Admin": _OFF, "E": _OFF, "": _OFF,
}

# Weekend overlays
CALL_TEMPLATE = ShiftTemplate(7, 19, 12, weekdays_only=False)
NIGHT_FLOAT_TEMPLATE = ShiftTemplate(19, 7, 12, is_night=True, weekdays_only=False)


def get_shift_template(rotation: str) -> ShiftTemplate:
    """Shift template for a rotation label; unknown labels carry no duty."""
    return SHIFT_TEMPLATES.get(rotation, _OFF)


def is_floor(rotation: str) -> bool:
    return rotation in FLOOR_ROTATIONS
