"""Call/float assignment rules, board-exam windows and work-hour limits."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class BoardExam:
    """A board exam that blocks PGY-6 call/float around it."""
    name: str
    exam_block: int      # 0-based block index
    exam_weekend: int    # 1 or 2 (informational)


# AY 2026-2027 exam dates
DEFAULT_BOARD_EXAMS = (
    BoardExam("ASE", 0, 2),       # 7/14/26
    BoardExam("CBCCT", 3, 2),     # 10/8/26
    BoardExam("CBNC", 13, 1),     # 12/29/26
    BoardExam("CBCMR", 21, 1),    # 5/29/27
    BoardExam("ACC", 19, 1),      # 10/13/27
)

DEFAULT_CALL_TARGETS = {4: 5, 5: 4, 6: 2}
DEFAULT_FLOAT_TARGETS = {4: 5, 5: 4, 6: 3}

# Targets for an unknown PGY level are effectively unbounded
NO_TARGET = 999


@dataclass
class SchedulerConfig:
    """Call and night-float assignment rules."""
    n_blocks: int = 26
    attempts: int = 80
    call_targets: dict[int, int] = field(default_factory=lambda: dict(DEFAULT_CALL_TARGETS))
    float_targets: dict[int, int] = field(default_factory=lambda: dict(DEFAULT_FLOAT_TARGETS))

    board_exams: tuple[BoardExam, ...] = DEFAULT_BOARD_EXAMS
    # Hard: 2 blocks prior through the exam block. Soft: 4 blocks prior.
    hard_window_blocks: int = 2
    soft_window_blocks: int = 4

    # PGY-6 fellows who can't float in the first blocks of the year
    pgy6_no_early_float: tuple[str, ...] = ()
    no_early_float_blocks: int = 4

    # Scoring
    preferred_bonus: float = 0.25
    jitter: float = 0.01
    missing_call_weight: int = 500
    missing_float_weight: int = 80

    def call_target(self, pgy: int | None) -> int:
        return self.call_targets.get(pgy, NO_TARGET)

    def float_target(self, pgy: int | None) -> int:
        return self.float_targets.get(pgy, NO_TARGET)

    def exam_hard_ranges(self) -> dict[str, tuple[int, int]]:
        """Exam name → (first, last) 0-based block index of the hard window."""
        return {
            exam.name: (max(0, exam.exam_block - self.hard_window_blocks), exam.exam_block)
            for exam in self.board_exams
        }

    def exam_soft_ranges(self) -> dict[str, tuple[int, int]]:
        return {
            exam.name: (max(0, exam.exam_block - self.soft_window_blocks), exam.exam_block)
            for exam in self.board_exams
        }

    def in_exam_hard_window(self, block_idx: int) -> bool:
        return any(lo <= block_idx <= hi for lo, hi in self.exam_hard_ranges().values())

    def in_exam_soft_window(self, block_idx: int) -> bool:
        """Soft window is reported but not enforced."""
        return any(lo <= block_idx <= hi for lo, hi in self.exam_soft_ranges().values())


@dataclass(frozen=True)
class WorkHourLimits:
    """ACGME duty-hour limits."""
    max_weekly_avg_hours: float = 80
    averaging_weeks: int = 4
    max_daily_hours: float = 24         # 24h duty; +4h handoff gives the 28h ceiling
    min_rest_hours: float = 8
    day_off_window_days: int = 28
    min_days_off: int = 4
    max_consecutive_nights: int = 6
    post_call_threshold_hours: float = 24
    min_post_call_rest_hours: float = 14


DEFAULT_LIMITS = WorkHourLimits()
