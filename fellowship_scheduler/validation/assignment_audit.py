"""Re-check adjacency, target and exam-window rules on a call/float schedule.

Works on any schedule, generated or imported. Fills that carry a relaxation
tag explaining the breach are not reported again.
"""

from __future__ import annotations

from collections import Counter

from fellowship_scheduler.models.assignments import DutySchedule
from fellowship_scheduler.models.calendar import key_for_index
from fellowship_scheduler.models.constraints import SchedulerConfig
from fellowship_scheduler.models.violation import (
    CALL,
    ERROR,
    FLOAT,
    RULE_ADJACENCY,
    RULE_EXAM_WINDOW,
    RULE_IGNORE_ADJACENCY,
    RULE_OVER_TARGET,
    WARN,
    Violation,
)

_TARGET_EXEMPT = {RULE_OVER_TARGET, RULE_IGNORE_ADJACENCY}


def _adjacency_pairs(n_blocks: int) -> list[tuple[int, str, str]]:
    """(block number, earlier key, later key) for every adjacent weekend pair."""
    pairs = []
    for b in range(n_blocks):
        pairs.append((b + 1, key_for_index(b, 1), key_for_index(b, 2)))
        if b < n_blocks - 1:
            pairs.append((b + 1, key_for_index(b, 2), key_for_index(b + 1, 1)))
    return pairs


def check_adjacency(duty: DutySchedule, kind: str, n_blocks: int = 26) -> list[Violation]:
    violations = []
    for block, first_key, second_key in _adjacency_pairs(n_blocks):
        first, second = duty.get(first_key), duty.get(second_key)
        if not first or not second or first.name != second.name:
            continue
        if RULE_IGNORE_ADJACENCY in (first.rule, second.rule):
            continue
        violations.append(Violation(
            rule=RULE_ADJACENCY,
            severity=ERROR,
            fellow=first.name,
            block=block,
            weekend=second_key.split("-")[1],
            kind=kind,
            detail=f"{first.name} holds {kind} on adjacent weekends {first_key} and {second_key}.",
        ))
    return violations


def check_targets(
    duty: DutySchedule,
    kind: str,
    pgy_levels: dict[str, int],
    targets: dict[int, int],
) -> list[Violation]:
    counts = Counter(entry.name for entry in duty.values())
    explained = Counter(entry.name for entry in duty.values() if entry.rule in _TARGET_EXEMPT)

    violations = []
    for fellow, count in sorted(counts.items()):
        target = targets.get(pgy_levels.get(fellow))
        if target is None:
            continue
        excess = count - target
        if excess > explained[fellow]:
            violations.append(Violation(
                rule=RULE_OVER_TARGET,
                severity=WARN,
                fellow=fellow,
                kind=kind,
                detail=f"{fellow} has {count} {kind} weekends; PGY-{pgy_levels[fellow]} target is {target}.",
            ))
    return violations


def check_exam_windows(
    duty: DutySchedule,
    kind: str,
    pgy_levels: dict[str, int],
    config: SchedulerConfig,
) -> list[Violation]:
    violations = []
    for b in range(config.n_blocks):
        if not config.in_exam_hard_window(b):
            continue
        for weekend in (1, 2):
            entry = duty.get(key_for_index(b, weekend))
            if entry and pgy_levels.get(entry.name) == 6:
                violations.append(Violation(
                    rule=RULE_EXAM_WINDOW,
                    severity=ERROR,
                    fellow=entry.name,
                    block=b + 1,
                    weekend=f"W{weekend}",
                    kind=kind,
                    detail=f"PGY-6 {entry.name} assigned {kind} inside a board-exam window.",
                ))
    return violations


def audit_assignments(
    call_schedule: DutySchedule,
    float_schedule: DutySchedule,
    pgy_levels: dict[str, int],
    config: SchedulerConfig | None = None,
) -> list[Violation]:
    """Audit both duty schedules against the assignment rules."""
    if config is None:
        config = SchedulerConfig()

    violations = []
    for duty, kind, targets in (
        (call_schedule, CALL, config.call_targets),
        (float_schedule, FLOAT, config.float_targets),
    ):
        violations.extend(check_adjacency(duty, kind, config.n_blocks))
        violations.extend(check_targets(duty, kind, pgy_levels, targets))
        violations.extend(check_exam_windows(duty, kind, pgy_levels, config))
    return violations
