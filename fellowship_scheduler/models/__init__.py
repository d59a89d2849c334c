from .fellow import Fellow, pgy_levels
from .calendar import Block, compute_blocks, find_block_for_date, weekend_key, parse_weekend_key
from .rotation import ShiftTemplate, SHIFT_TEMPLATES, get_shift_template
from .assignments import DutyAssignment, Vacation, normalize_duty_schedule, vacation_blocks_for
from .constraints import BoardExam, SchedulerConfig, WorkHourLimits
from .violation import Violation

__all__ = [
    "Fellow", "pgy_levels",
    "Block", "compute_blocks", "find_block_for_date", "weekend_key", "parse_weekend_key",
    "ShiftTemplate", "SHIFT_TEMPLATES", "get_shift_template",
    "DutyAssignment", "Vacation", "normalize_duty_schedule", "vacation_blocks_for",
    "BoardExam", "SchedulerConfig", "WorkHourLimits",
    "Violation",
]
