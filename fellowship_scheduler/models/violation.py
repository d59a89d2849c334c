"""Violation records shared by the assigner, audits and the work-hour checker."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

ERROR = "error"
WARN = "warn"

# Finding kinds
CALL = "call"
FLOAT = "float"
WORK_HOURS = "work_hours"

# Work-hour rules
RULE_80_HOUR = "80hr_weekly_avg"
RULE_24_PLUS_4 = "24plus4_max_duty"
RULE_8_HOUR_REST = "8hr_between_shifts"
RULE_DAY_OFF = "1_day_off_in_7"
RULE_CONSECUTIVE_NIGHTS = "6_consecutive_nights"
RULE_POST_CALL_REST = "14hr_post_call_rest"

WORK_HOUR_RULES = (
    RULE_80_HOUR,
    RULE_24_PLUS_4,
    RULE_8_HOUR_REST,
    RULE_DAY_OFF,
    RULE_CONSECUTIVE_NIGHTS,
    RULE_POST_CALL_REST,
)

RULE_LABELS: dict[str, str] = {
    RULE_80_HOUR: "80-Hour Weekly Average",
    RULE_24_PLUS_4: "24+4 Max Continuous Duty",
    RULE_8_HOUR_REST: "8-Hour Rest Between Shifts",
    RULE_DAY_OFF: "1 Day Off per 7 Days",
    RULE_CONSECUTIVE_NIGHTS: "6 Consecutive Night Limit",
    RULE_POST_CALL_REST: "14-Hour Post-Call Rest",
}

# Assignment rules
RULE_RELAXED_FALLBACK = "relaxed_fallback"
RULE_OVER_TARGET = "over_target"
RULE_IGNORE_ADJACENCY = "ignore_adjacency"
RULE_UNFILLED_SLOT = "unfilled_slot"
RULE_MISSING_CALL = "missing_call"
RULE_MISSING_FLOAT = "missing_float"
RULE_PGY4_FLOAT_BEFORE_FLOOR = "pgy4_float_before_floor"
RULE_ADJACENCY = "adjacency"
RULE_EXAM_WINDOW = "exam_window"


@dataclass(frozen=True)
class Violation:
    """A structured finding against one fellow (or an empty slot)."""
    rule: str
    severity: str
    fellow: str
    block: int | None = None
    start_date: date | None = None
    end_date: date | None = None
    hours: float | None = None
    detail: str = ""
    kind: str = WORK_HOURS
    weekend: str | None = None   # "W1" / "W2" for call/float findings

    @property
    def is_error(self) -> bool:
        return self.severity == ERROR

    @property
    def rule_label(self) -> str:
        return RULE_LABELS.get(self.rule, self.rule)

    def matches(self, other: Violation) -> bool:
        """Same underlying finding: rule, fellow and start date."""
        return (
            self.rule == other.rule
            and self.fellow == other.fellow
            and self.start_date == other.start_date
        )
