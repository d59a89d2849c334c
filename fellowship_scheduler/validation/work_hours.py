"""ACGME work-hour rule checks over per-fellow duty timelines.

Six independent rules, each evaluated on the same timeline:

1. 80-hour weekly limit, averaged over 4 Monday-aligned weeks
2. 24+4 max continuous duty (any day over 24h)
3. 8 hours off between shifts
4. One day off in 7, averaged as 4 days off per 28-day window
5. No more than 6 consecutive nights
6. 14 hours off after 24 hours of in-house duty
"""

from __future__ import annotations

from datetime import date, timedelta

from fellowship_scheduler.models.assignments import (
    DutySchedule,
    RotationSchedule,
    Vacation,
    vacation_blocks_for,
)
from fellowship_scheduler.models.calendar import Block, find_block_for_date
from fellowship_scheduler.models.constraints import DEFAULT_LIMITS, WorkHourLimits
from fellowship_scheduler.models.violation import (
    ERROR,
    RULE_24_PLUS_4,
    RULE_80_HOUR,
    RULE_8_HOUR_REST,
    RULE_CONSECUTIVE_NIGHTS,
    RULE_DAY_OFF,
    RULE_POST_CALL_REST,
    WARN,
    Violation,
)
from fellowship_scheduler.validation.timeline import DutyTimeline, build_timeline


def _fmt(hours: float) -> str:
    """Render hours to one decimal, dropping a trailing .0."""
    return f"{round(hours, 1):g}"


def _block_for(day: date, timeline: DutyTimeline, blocks: list[Block] | None) -> int | None:
    if blocks:
        return find_block_for_date(day, blocks)
    entry = timeline.get(day)
    return entry.block if entry else None


def check_80_hour_rule(
    fellow: str,
    timeline: DutyTimeline,
    blocks: list[Block] | None = None,
    limits: WorkHourLimits = DEFAULT_LIMITS,
) -> list[Violation]:
    violations = []
    dates = sorted(timeline)
    if not dates:
        return violations

    # Monday on or before the first day
    week_start = dates[0] - timedelta(days=dates[0].weekday())
    weekly: list[tuple[date, float]] = []
    while week_start <= dates[-1]:
        hours = 0.0
        for i in range(7):
            entry = timeline.get(week_start + timedelta(days=i))
            if entry:
                hours += entry.hours
        weekly.append((week_start, hours))
        week_start += timedelta(days=7)

    span = limits.averaging_weeks
    for i in range(len(weekly) - span + 1):
        window = weekly[i:i + span]
        avg = sum(h for _, h in window) / span
        if avg > limits.max_weekly_avg_hours:
            start = window[0][0]
            end = window[-1][0] + timedelta(days=6)
            violations.append(Violation(
                rule=RULE_80_HOUR,
                severity=ERROR,
                fellow=fellow,
                block=_block_for(start, timeline, blocks),
                start_date=start,
                end_date=end,
                hours=round(avg, 1),
                detail=(
                    f"{_fmt(avg)}h/wk average over {span} weeks ({start} to {end}). "
                    f"Limit: {_fmt(limits.max_weekly_avg_hours)}h."
                ),
            ))
    return violations


def check_24_plus_4_rule(
    fellow: str,
    timeline: DutyTimeline,
    blocks: list[Block] | None = None,
    limits: WorkHourLimits = DEFAULT_LIMITS,
) -> list[Violation]:
    """Per-day model: any day over 24h breaks the 24h + 4h handoff ceiling."""
    violations = []
    for day in sorted(timeline):
        entry = timeline[day]
        if entry.hours > limits.max_daily_hours:
            violations.append(Violation(
                rule=RULE_24_PLUS_4,
                severity=ERROR,
                fellow=fellow,
                block=_block_for(day, timeline, blocks),
                start_date=day,
                end_date=day,
                hours=entry.hours,
                detail=f"{_fmt(entry.hours)}h duty on {day}. Max continuous duty: 28h.",
            ))
    return violations


def check_8_hour_rest_rule(
    fellow: str,
    timeline: DutyTimeline,
    blocks: list[Block] | None = None,
    limits: WorkHourLimits = DEFAULT_LIMITS,
) -> list[Violation]:
    violations = []
    dates = sorted(timeline)
    for today_date, tomorrow_date in zip(dates, dates[1:]):
        today = timeline[today_date]
        tomorrow = timeline[tomorrow_date]
        if not today.has_duty or not tomorrow.has_duty:
            continue

        # Night shifts end the next morning (24 + end hour)
        gap = (24 - today.latest_end) + tomorrow.earliest_start
        if 0 <= gap < limits.min_rest_hours:
            violations.append(Violation(
                rule=RULE_8_HOUR_REST,
                severity=WARN,
                fellow=fellow,
                block=_block_for(today_date, timeline, blocks),
                start_date=today_date,
                end_date=tomorrow_date,
                hours=round(gap, 1),
                detail=(
                    f"Only {_fmt(gap)}h rest between {today_date} and {tomorrow_date}. "
                    f"Minimum: {_fmt(limits.min_rest_hours)}h."
                ),
            ))
    return violations


def check_one_day_off_rule(
    fellow: str,
    timeline: DutyTimeline,
    blocks: list[Block] | None = None,
    limits: WorkHourLimits = DEFAULT_LIMITS,
) -> list[Violation]:
    violations: list[Violation] = []
    dates = sorted(timeline)
    window = limits.day_off_window_days
    if len(dates) < window:
        return violations

    for i in range(len(dates) - window + 1):
        days_off = sum(1 for d in dates[i:i + window] if timeline[d].hours == 0)
        if days_off >= limits.min_days_off:
            continue

        start, end = dates[i], dates[i + window - 1]
        # One finding per run of overlapping short windows
        if violations and start <= violations[-1].end_date:
            continue
        violations.append(Violation(
            rule=RULE_DAY_OFF,
            severity=ERROR,
            fellow=fellow,
            block=_block_for(start, timeline, blocks),
            start_date=start,
            end_date=end,
            detail=(
                f"Only {days_off} days off in {window}-day window ({start} to {end}). "
                f"Minimum: {limits.min_days_off} days."
            ),
        ))
    return violations


def check_consecutive_nights_rule(
    fellow: str,
    timeline: DutyTimeline,
    blocks: list[Block] | None = None,
    limits: WorkHourLimits = DEFAULT_LIMITS,
) -> list[Violation]:
    violations = []
    dates = sorted(timeline)

    def flag(streak_start: date, streak_end: date, length: int) -> None:
        violations.append(Violation(
            rule=RULE_CONSECUTIVE_NIGHTS,
            severity=ERROR,
            fellow=fellow,
            block=_block_for(streak_start, timeline, blocks),
            start_date=streak_start,
            end_date=streak_end,
            detail=(
                f"{length} consecutive night shifts ({streak_start} to {streak_end}). "
                f"Max: {limits.max_consecutive_nights}."
            ),
        ))

    streak = 0
    streak_start = None
    for i, day in enumerate(dates):
        if timeline[day].is_night:
            if streak == 0:
                streak_start = day
            streak += 1
            continue
        if streak > limits.max_consecutive_nights:
            flag(streak_start, dates[i - 1], streak)
        streak = 0
        streak_start = None

    # Streak running to the end of the timeline
    if streak > limits.max_consecutive_nights and streak_start is not None:
        flag(streak_start, dates[-1], streak)

    return violations


def check_post_call_rest_rule(
    fellow: str,
    timeline: DutyTimeline,
    blocks: list[Block] | None = None,
    limits: WorkHourLimits = DEFAULT_LIMITS,
) -> list[Violation]:
    """Flag a 24h+ day followed by a shift starting before 14:00 the next day."""
    violations = []
    dates = sorted(timeline)
    for today_date, tomorrow_date in zip(dates, dates[1:]):
        today = timeline[today_date]
        if today.hours < limits.post_call_threshold_hours:
            continue
        tomorrow = timeline[tomorrow_date]
        if not tomorrow.has_duty:
            continue

        earliest = tomorrow.earliest_start
        if earliest < limits.min_post_call_rest_hours:
            violations.append(Violation(
                rule=RULE_POST_CALL_REST,
                severity=WARN,
                fellow=fellow,
                block=_block_for(today_date, timeline, blocks),
                start_date=today_date,
                end_date=tomorrow_date,
                hours=earliest,
                detail=(
                    f"Only {_fmt(earliest)}h rest after 24h duty on {today_date}. "
                    f"Minimum: {_fmt(limits.min_post_call_rest_hours)}h."
                ),
            ))
    return violations


RULE_CHECKS = (
    check_80_hour_rule,
    check_24_plus_4_rule,
    check_8_hour_rest_rule,
    check_one_day_off_rule,
    check_consecutive_nights_rule,
    check_post_call_rest_rule,
)


def check_timeline(
    fellow: str,
    timeline: DutyTimeline,
    blocks: list[Block] | None = None,
    limits: WorkHourLimits = DEFAULT_LIMITS,
) -> list[Violation]:
    """Run all six rules over one fellow's timeline (unsorted)."""
    violations = []
    for check in RULE_CHECKS:
        violations.extend(check(fellow, timeline, blocks, limits))
    return violations


def sort_violations(violations: list[Violation]) -> list[Violation]:
    """Order by start date, then fellow name."""
    return sorted(violations, key=lambda v: (v.start_date or date.min, v.fellow))


def check_work_hours(
    fellows: list[str],
    schedule: RotationSchedule,
    call_schedule: DutySchedule,
    float_schedule: DutySchedule,
    blocks: list[Block],
    vacations: list[Vacation] | None = None,
    limits: WorkHourLimits = DEFAULT_LIMITS,
) -> list[Violation]:
    """Check all work-hour rules for every fellow.

    Returns violations sorted by start date, then fellow.
    """
    violations = []
    for fellow in fellows:
        timeline = build_timeline(
            fellow,
            schedule,
            call_schedule,
            float_schedule,
            blocks,
            vacation_blocks_for(fellow, vacations),
        )
        violations.extend(check_timeline(fellow, timeline, blocks, limits))
    return sort_violations(violations)
