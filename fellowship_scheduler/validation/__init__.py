from .timeline import build_timeline, DayEntry, Shift
from .work_hours import check_work_hours, check_timeline
from .conflicts import detect_conflicts, detect_coverage_gaps, detect_double_bookings
from .assignment_audit import audit_assignments
from .report import generate_report

__all__ = [
    "build_timeline", "DayEntry", "Shift",
    "check_work_hours", "check_timeline",
    "detect_conflicts", "detect_coverage_gaps", "detect_double_bookings",
    "audit_assignments",
    "generate_report",
]
