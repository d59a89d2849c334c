"""Day-by-day duty timeline for one fellow."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, timedelta

from fellowship_scheduler.models.assignments import DutySchedule, RotationSchedule, assignee
from fellowship_scheduler.models.calendar import Block, weekend_key
from fellowship_scheduler.models.rotation import (
    CALL_TEMPLATE,
    NIGHT_FLOAT_TEMPLATE,
    ShiftTemplate,
    get_shift_template,
)

ROTATION = "rotation"
CALL = "call"
NIGHT_FLOAT = "night_float"


@dataclass(frozen=True)
class Shift:
    """One shift worked on a given day."""
    source: str          # rotation / call / night_float
    start_hour: int
    end_hour: int
    hours: float
    is_night: bool = False
    rotation: str = ""

    @classmethod
    def from_template(cls, source: str, template: ShiftTemplate, rotation: str = "") -> Shift:
        return cls(
            source=source,
            start_hour=template.start_hour,
            end_hour=template.end_hour,
            hours=template.hours,
            is_night=template.is_night,
            rotation=rotation,
        )

    @property
    def end_offset(self) -> int:
        """End hour measured from midnight of the shift's day."""
        return 24 + self.end_hour if self.is_night else self.end_hour


@dataclass
class DayEntry:
    """Hours and shifts recorded on one calendar day."""
    day: date
    block: int
    hours: float = 0
    shifts: list[Shift] = field(default_factory=list)
    is_night: bool = False

    def add(self, shift: Shift) -> None:
        self.shifts.append(shift)
        self.hours += shift.hours
        if shift.is_night:
            self.is_night = True

    @property
    def has_duty(self) -> bool:
        return bool(self.shifts)

    @property
    def latest_end(self) -> int:
        return max((s.end_offset for s in self.shifts), default=0)

    @property
    def earliest_start(self) -> int:
        return min((s.start_hour for s in self.shifts), default=24)


DutyTimeline = dict[date, DayEntry]


def _is_weekend(day: date) -> bool:
    return day.weekday() >= 5


def build_timeline(
    fellow: str,
    schedule: RotationSchedule,
    call_schedule: DutySchedule,
    float_schedule: DutySchedule,
    blocks: list[Block],
    vacation_blocks: set[int] | None = None,
) -> DutyTimeline:
    """Build the day-indexed duty record for one fellow across every block.

    Rotation shifts are laid down first; call (Sat+Sun day shifts) and night
    float (Saturday night) are then stacked on top. Vacation blocks drop the
    rotation shift only, call/float overlays still apply.
    """
    vacation_blocks = vacation_blocks or set()
    rotations = schedule.get(fellow) or []
    timeline: DutyTimeline = {}

    for block_idx, block in enumerate(blocks):
        rotation = rotations[block_idx] if block_idx < len(rotations) else ""
        rotation = rotation or ""
        template = get_shift_template(rotation)
        on_vacation = block.number in vacation_blocks

        for day in block.days:
            entry = DayEntry(day=day, block=block.number)
            if (
                not on_vacation
                and template.hours > 0
                and not (template.weekdays_only and _is_weekend(day))
            ):
                entry.add(Shift.from_template(ROTATION, template, rotation))
            timeline[day] = entry

    for block in blocks:
        for weekend, saturday in enumerate(block.weekend_saturdays, start=1):
            key = weekend_key(block.number, weekend)
            if assignee(call_schedule, key) == fellow:
                for day in (saturday, saturday + timedelta(days=1)):
                    if day in timeline:
                        timeline[day].add(Shift.from_template(CALL, CALL_TEMPLATE))
            if assignee(float_schedule, key) == fellow and saturday in timeline:
                timeline[saturday].add(Shift.from_template(NIGHT_FLOAT, NIGHT_FLOAT_TEMPLATE))

    return timeline
