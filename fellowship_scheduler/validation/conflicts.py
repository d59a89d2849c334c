"""Double-booking and rotation coverage checks."""

from __future__ import annotations

from dataclasses import dataclass, field

from fellowship_scheduler.models.assignments import DutySchedule, RotationSchedule, Vacation
from fellowship_scheduler.models.calendar import Block
from fellowship_scheduler.models.rotation import REQUIRED_ROTATIONS
from fellowship_scheduler.models.violation import ERROR, WARN, Violation
from fellowship_scheduler.validation.work_hours import check_work_hours


@dataclass
class DoubleBooking:
    fellow: str
    day: str
    rotations: tuple[str, str]
    severity: str = ERROR

    @property
    def detail(self) -> str:
        first, second = self.rotations
        return f'{self.fellow} has conflicting overrides on {self.day}: "{first}" vs "{second}"'


@dataclass
class CoverageGap:
    block: int
    rotation: str
    start_date: str
    end_date: str
    severity: str = WARN

    @property
    def detail(self) -> str:
        return (
            f"Block {self.block} ({self.start_date} – {self.end_date}): "
            f"No fellow assigned to {self.rotation}"
        )


@dataclass
class ConflictReport:
    double_bookings: list[DoubleBooking] = field(default_factory=list)
    coverage_gaps: list[CoverageGap] = field(default_factory=list)
    work_hour_violations: list[Violation] = field(default_factory=list)

    @property
    def has_errors(self) -> bool:
        return bool(self.double_bookings)

    @property
    def has_warnings(self) -> bool:
        return bool(self.coverage_gaps or self.work_hour_violations)

    @property
    def total(self) -> int:
        return len(self.double_bookings) + len(self.coverage_gaps) + len(self.work_hour_violations)


def detect_double_bookings(day_overrides: dict[str, str]) -> list[DoubleBooking]:
    """Find fellows with two different day overrides on the same date.

    Override keys look like ``Fellow#B<block>#<YYYY-MM-DD>``; malformed keys
    are ignored.
    """
    seen: dict[tuple[str, str], str] = {}
    issues = []

    for key, rotation in day_overrides.items():
        parts = key.split("#")
        if len(parts) < 3:
            continue
        fellow, day = parts[0], parts[2]
        previous = seen.get((fellow, day))
        if previous is not None and previous != rotation:
            issues.append(DoubleBooking(fellow=fellow, day=day, rotations=(previous, rotation)))
        seen[(fellow, day)] = rotation

    return issues


def detect_coverage_gaps(
    schedule: RotationSchedule,
    fellows: list[str],
    blocks: list[Block],
) -> list[CoverageGap]:
    """Blocks where ICU, Floor A, Floor B or Nights has nobody assigned."""
    gaps = []
    for block_idx, block in enumerate(blocks):
        for required in REQUIRED_ROTATIONS:
            covered = any(
                block_idx < len(schedule.get(f) or []) and schedule[f][block_idx] == required
                for f in fellows
            )
            if not covered:
                gaps.append(CoverageGap(
                    block=block.number,
                    rotation=required,
                    start_date=block.start_date.isoformat(),
                    end_date=block.end_date.isoformat(),
                ))
    return gaps


def detect_conflicts(
    fellows: list[str],
    schedule: RotationSchedule,
    call_schedule: DutySchedule,
    float_schedule: DutySchedule,
    blocks: list[Block],
    vacations: list[Vacation] | None = None,
    day_overrides: dict[str, str] | None = None,
) -> ConflictReport:
    """Run double-booking, coverage and work-hour checks together."""
    return ConflictReport(
        double_bookings=detect_double_bookings(day_overrides or {}),
        coverage_gaps=detect_coverage_gaps(schedule, fellows, blocks),
        work_hour_violations=check_work_hours(
            fellows, schedule, call_schedule, float_schedule, blocks, vacations,
        ),
    )
