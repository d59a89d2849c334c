"""Search for schedule edits that clear a single work-hour violation.

Two strategies, applied in order:
1. Swap the fellow's rotation with another fellow in the violation's block.
2. Hand one of the fellow's call or float weekends (violation block +/- 1)
   to another fellow.

A candidate is accepted when the original violation disappears for the pair
of fellows involved and their combined violation count does not grow.
"""

from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass, field

from fellowship_scheduler.models.assignments import (
    DutyAssignment,
    DutySchedule,
    RotationSchedule,
    Vacation,
    copy_schedule,
)
from fellowship_scheduler.models.calendar import Block, key_for_index
from fellowship_scheduler.models.constraints import DEFAULT_LIMITS, WorkHourLimits
from fellowship_scheduler.models.violation import WORK_HOUR_RULES, Violation
from fellowship_scheduler.validation.work_hours import check_work_hours

logger = logging.getLogger(__name__)

MAX_SUGGESTIONS = 5

ROTATION_SWAP = "rotation_swap"
CALL_REASSIGN = "call_reassign"
FLOAT_REASSIGN = "float_reassign"

# Rules where moving a weekend duty can change the outcome
REASSIGNABLE_RULES = frozenset(WORK_HOUR_RULES)


@dataclass
class SuggestionContext:
    """Everything the work-hour checker needs to re-evaluate a schedule."""
    fellows: list[str]
    schedule: RotationSchedule
    call_schedule: DutySchedule = field(default_factory=dict)
    float_schedule: DutySchedule = field(default_factory=dict)
    blocks: list[Block] = field(default_factory=list)
    vacations: list[Vacation] = field(default_factory=list)
    limits: WorkHourLimits = DEFAULT_LIMITS

    def violations_for(
        self,
        fellows: list[str],
        schedule: RotationSchedule | None = None,
        call_schedule: DutySchedule | None = None,
        float_schedule: DutySchedule | None = None,
    ) -> list[Violation]:
        return check_work_hours(
            fellows,
            self.schedule if schedule is None else schedule,
            self.call_schedule if call_schedule is None else call_schedule,
            self.float_schedule if float_schedule is None else float_schedule,
            self.blocks,
            self.vacations,
            self.limits,
        )


@dataclass
class Suggestion:
    kind: str
    description: str
    net_change: int
    fellow_a: str
    fellow_b: str
    block_index: int | None = None
    rotation_a: str | None = None
    rotation_b: str | None = None
    weekend_key: str | None = None


def _accepts(
    violation: Violation,
    candidate: list[Violation],
    baseline_count: int,
) -> bool:
    if any(v.matches(violation) for v in candidate):
        return False
    return len(candidate) <= baseline_count


def _pair_baseline(baseline: list[Violation], fellow_a: str, fellow_b: str) -> int:
    return sum(1 for v in baseline if v.fellow in (fellow_a, fellow_b))


def _owned_weekends(
    violation: Violation,
    context: SuggestionContext,
    n_blocks: int,
) -> list[tuple[str, str]]:
    """(kind, key) for every call/float weekend the fellow holds near the violation."""
    if violation.block is None:
        return []
    block_indices = [
        b for b in (violation.block - 2, violation.block - 1, violation.block)
        if 0 <= b < n_blocks
    ]
    owned = []
    for b in block_indices:
        for weekend in (1, 2):
            key = key_for_index(b, weekend)
            call = context.call_schedule.get(key)
            if call and call.name == violation.fellow:
                owned.append((CALL_REASSIGN, key))
            float_ = context.float_schedule.get(key)
            if float_ and float_.name == violation.fellow:
                owned.append((FLOAT_REASSIGN, key))
    return owned


def _rotation_swaps(
    violation: Violation,
    context: SuggestionContext,
    baseline: list[Violation],
    max_suggestions: int,
) -> list[Suggestion]:
    if violation.block is None:
        return []

    block_idx = violation.block - 1
    fellow = violation.fellow
    own_rotations = context.schedule.get(fellow) or []
    if block_idx >= len(own_rotations):
        return []
    rotation_a = own_rotations[block_idx]

    suggestions = []
    for other in context.fellows:
        if len(suggestions) >= max_suggestions:
            break
        if other == fellow:
            continue
        other_rotations = context.schedule.get(other) or []
        if block_idx >= len(other_rotations):
            continue
        rotation_b = other_rotations[block_idx]
        if rotation_b == rotation_a:
            continue

        swapped = copy_schedule(context.schedule)
        swapped[fellow][block_idx] = rotation_b
        swapped[other][block_idx] = rotation_a

        candidate = context.violations_for([fellow, other], schedule=swapped)
        before = _pair_baseline(baseline, fellow, other)
        if not _accepts(violation, candidate, before):
            continue

        suggestions.append(Suggestion(
            kind=ROTATION_SWAP,
            description=(
                f"Swap {fellow}'s {rotation_a or 'Off'} with {other}'s "
                f"{rotation_b or 'Off'} in B{violation.block}"
            ),
            net_change=len(candidate) - before,
            fellow_a=fellow,
            fellow_b=other,
            block_index=block_idx,
            rotation_a=rotation_a,
            rotation_b=rotation_b,
        ))
    return suggestions


def _weekend_reassignments(
    violation: Violation,
    context: SuggestionContext,
    baseline: list[Violation],
    max_suggestions: int,
) -> list[Suggestion]:
    n_blocks = len(context.blocks) or max(
        (len(r) for r in context.schedule.values()), default=0
    )
    fellow = violation.fellow

    suggestions: list[Suggestion] = []
    for kind, key in _owned_weekends(violation, context, n_blocks):
        for other in context.fellows:
            if len(suggestions) >= max_suggestions:
                return suggestions
            if other == fellow:
                continue

            if kind == CALL_REASSIGN:
                duty = dict(context.call_schedule)
                duty[key] = DutyAssignment(name=other)
                candidate = context.violations_for([fellow, other], call_schedule=duty)
                label = "call"
            else:
                duty = dict(context.float_schedule)
                duty[key] = DutyAssignment(name=other)
                candidate = context.violations_for([fellow, other], float_schedule=duty)
                label = "night float"

            before = _pair_baseline(baseline, fellow, other)
            if not _accepts(violation, candidate, before):
                continue

            suggestions.append(Suggestion(
                kind=kind,
                description=f"Reassign {key} {label} from {fellow} to {other}",
                net_change=len(candidate) - before,
                fellow_a=fellow,
                fellow_b=other,
                weekend_key=key,
            ))
    return suggestions


def generate_suggestions(
    violation: Violation,
    context: SuggestionContext,
    max_suggestions: int = MAX_SUGGESTIONS,
) -> list[Suggestion]:
    """Return up to ``max_suggestions`` edits that clear ``violation``.

    Results are ordered by net change in the pair's violation count, most
    reducing first. An empty list means no acceptable edit was found.
    Inputs are never modified.
    """
    baseline = context.violations_for(context.fellows)

    suggestions = _rotation_swaps(violation, context, baseline, max_suggestions)
    remaining = max_suggestions - len(suggestions)
    if remaining > 0 and violation.rule in REASSIGNABLE_RULES:
        suggestions.extend(_weekend_reassignments(violation, context, baseline, remaining))

    suggestions.sort(key=lambda s: s.net_change)
    logger.debug(
        "%d suggestion(s) for %s %s %s",
        len(suggestions), violation.rule, violation.fellow, violation.start_date,
    )
    return suggestions[:max_suggestions]


def apply_suggestion(suggestion: Suggestion, context: SuggestionContext) -> SuggestionContext:
    """Return a new context with the suggested edit applied."""
    if suggestion.kind == ROTATION_SWAP:
        schedule = copy_schedule(context.schedule)
        idx = suggestion.block_index
        schedule[suggestion.fellow_a][idx] = suggestion.rotation_b
        schedule[suggestion.fellow_b][idx] = suggestion.rotation_a
        return dataclasses.replace(context, schedule=schedule)

    if suggestion.kind == CALL_REASSIGN:
        duty = dict(context.call_schedule)
        duty[suggestion.weekend_key] = DutyAssignment(name=suggestion.fellow_b)
        return dataclasses.replace(context, call_schedule=duty)

    if suggestion.kind == FLOAT_REASSIGN:
        duty = dict(context.float_schedule)
        duty[suggestion.weekend_key] = DutyAssignment(name=suggestion.fellow_b)
        return dataclasses.replace(context, float_schedule=duty)

    raise ValueError(f"Unknown suggestion kind: {suggestion.kind!r}")
