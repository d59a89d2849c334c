"""Call/float weekend assignments and vacation requests."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass

RotationSchedule = dict[str, list[str]]

APPROVED = "approved"
VACATION_REASON = "Vacation"


@dataclass(frozen=True)
class DutyAssignment:
    """One call or night-float slot.

    ``rule`` names the relaxation that produced the fill
    (``relaxed_fallback``, ``over_target``, ``ignore_adjacency``) and is None
    for strict fills.
    """
    name: str | None
    relaxed: bool = False
    rule: str | None = None


DutySchedule = dict[str, DutyAssignment]


def normalize_assignment(value) -> DutyAssignment | None:
    """Coerce a bare name, mapping or DutyAssignment into a DutyAssignment."""
    if value is None:
        return None
    if isinstance(value, DutyAssignment):
        return value
    if isinstance(value, str):
        name = value.strip()
        return DutyAssignment(name=name) if name else None
    if isinstance(value, Mapping):
        name = value.get("name")
        if name is None:
            name = value.get("call")
        if isinstance(name, str):
            name = name.strip() or None
        return DutyAssignment(
            name=name,
            relaxed=bool(value.get("relaxed", False)),
            rule=value.get("rule"),
        )
    raise TypeError(f"Cannot interpret duty assignment {value!r}")


def normalize_duty_schedule(raw: Mapping | None) -> DutySchedule:
    """Normalise an externally supplied call/float schedule.

    Accepts ``{"B1-W1": "Name"}`` or ``{"B1-W1": {"name": ..., "relaxed": ...}}``.
    Empty entries are dropped.
    """
    result: DutySchedule = {}
    if not raw:
        return result
    for key, value in raw.items():
        entry = normalize_assignment(value)
        if entry is not None and entry.name:
            result[key] = entry
    return result


def assignee(schedule: DutySchedule, key: str) -> str | None:
    entry = schedule.get(key)
    return entry.name if entry else None


def copy_schedule(schedule: RotationSchedule) -> RotationSchedule:
    return {fellow: list(rotations) for fellow, rotations in schedule.items()}


@dataclass(frozen=True)
class Vacation:
    """A block-range time-off request."""
    fellow: str
    start_block: int
    end_block: int
    reason: str = VACATION_REASON
    status: str = APPROVED

    @property
    def suppresses_duty(self) -> bool:
        return self.status == APPROVED and self.reason == VACATION_REASON


def vacation_blocks_for(fellow: str, vacations: list[Vacation] | None) -> set[int]:
    """Block numbers where an approved vacation suppresses rotation hours."""
    blocks: set[int] = set()
    for vac in vacations or []:
        if vac.fellow == fellow and vac.suppresses_duty:
            blocks.update(range(vac.start_block, vac.end_block + 1))
    return blocks
