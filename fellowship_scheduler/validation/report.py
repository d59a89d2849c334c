"""Generate validation summary reports."""

from __future__ import annotations

from collections import Counter

from fellowship_scheduler.models.assignments import DutySchedule
from fellowship_scheduler.models.constraints import SchedulerConfig
from fellowship_scheduler.models.violation import RULE_LABELS, WORK_HOUR_RULES, Violation
from fellowship_scheduler.validation.conflicts import CoverageGap


def generate_report(
    fellows: list[str],
    pgy_levels: dict[str, int],
    call_schedule: DutySchedule,
    float_schedule: DutySchedule,
    assignment_violations: list[Violation],
    work_hour_violations: list[Violation],
    coverage_gaps: list[CoverageGap] | None = None,
    config: SchedulerConfig | None = None,
) -> str:
    """Generate a plain-text validation report.

    Sections:
    1. Call/float counts against PGY targets
    2. Assignment findings (relaxed fills, empty slots, audits)
    3. Work-hour violations grouped by rule
    4. Rotation coverage gaps
    """
    if config is None:
        config = SchedulerConfig()

    lines = []
    lines.append("=" * 70)
    lines.append("CALL / NIGHT FLOAT VALIDATION REPORT")
    lines.append("=" * 70)

    # 1. Counts
    call_counts = Counter(e.name for e in call_schedule.values())
    float_counts = Counter(e.name for e in float_schedule.values())
    total_slots = config.n_blocks * 2
    lines.append(
        f"\n## COVERAGE (call {len(call_schedule)}/{total_slots}, "
        f"float {len(float_schedule)}/{total_slots})"
    )
    for pgy in sorted({pgy_levels.get(f, 0) for f in fellows}):
        group = [f for f in fellows if pgy_levels.get(f, 0) == pgy]
        lines.append(
            f"  PGY-{pgy} (targets: call {config.call_target(pgy)}, "
            f"float {config.float_target(pgy)})"
        )
        for fellow in group:
            lines.append(
                f"    {fellow}: call={call_counts.get(fellow, 0)}, "
                f"float={float_counts.get(fellow, 0)}"
            )

    # 2. Assignment findings
    errors = [v for v in assignment_violations if v.is_error]
    lines.append(
        f"\n## ASSIGNMENT FINDINGS ({len(assignment_violations)} total, {len(errors)} errors)"
    )
    if assignment_violations:
        for v in assignment_violations[:30]:
            who = v.fellow or "-"
            lines.append(
                f"  [{v.severity}] {v.kind} B{v.block}-{v.weekend or '?'} {v.rule}: {who}: {v.detail}"
            )
        if len(assignment_violations) > 30:
            lines.append(f"  ... and {len(assignment_violations) - 30} more")
    else:
        lines.append("  All slots filled under strict rules.")

    # 3. Work hours
    by_rule = Counter(v.rule for v in work_hour_violations)
    lines.append(f"\n## WORK HOURS ({len(work_hour_violations)} violations)")
    if work_hour_violations:
        for rule in WORK_HOUR_RULES:
            if by_rule.get(rule):
                lines.append(f"  {RULE_LABELS[rule]}: {by_rule[rule]}")
        lines.append("")
        for v in work_hour_violations[:20]:
            lines.append(f"  {v.start_date} {v.fellow} [{v.severity}] {v.detail}")
        if len(work_hour_violations) > 20:
            lines.append(f"  ... and {len(work_hour_violations) - 20} more")
    else:
        lines.append("  No work-hour violations.")

    # 4. Coverage gaps
    if coverage_gaps is not None:
        lines.append(f"\n## ROTATION COVERAGE ({len(coverage_gaps)} gaps)")
        if coverage_gaps:
            for gap in coverage_gaps[:20]:
                lines.append(f"  {gap.detail}")
            if len(coverage_gaps) > 20:
                lines.append(f"  ... and {len(coverage_gaps) - 20} more")
        else:
            lines.append("  ICU, floors and nights covered every block.")

    lines.append("\n" + "=" * 70)
    return "\n".join(lines)
