"""Weekend call and night-float assignment.

Randomised constrained fill, repeated over many attempts, followed by
escalating relaxation for whatever slots the best attempt left empty.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Callable
from dataclasses import dataclass, field, replace

from fellowship_scheduler.models.assignments import DutyAssignment, DutySchedule, RotationSchedule
from fellowship_scheduler.models.calendar import all_weekend_keys, key_for_index, parse_weekend_key
from fellowship_scheduler.models.constraints import SchedulerConfig
from fellowship_scheduler.models.violation import (
    CALL,
    ERROR,
    FLOAT,
    RULE_MISSING_CALL,
    RULE_MISSING_FLOAT,
    RULE_PGY4_FLOAT_BEFORE_FLOOR,
    RULE_UNFILLED_SLOT,
    WARN,
    Violation,
)
from fellowship_scheduler.phases.eligibility import (
    eligible_call,
    eligible_float_relaxed,
    eligible_float_strict,
    has_prior_floor,
    nights_fellow,
    violates_adjacency,
)
from fellowship_scheduler.phases.relaxation import (
    CALL_DETAILS,
    FLOAT_DETAILS,
    RELAXATION_PHASES,
    RelaxationPolicy,
)

logger = logging.getLogger(__name__)


@dataclass
class CallFloatResult:
    """Result of call/float generation."""
    call_schedule: DutySchedule = field(default_factory=dict)
    float_schedule: DutySchedule = field(default_factory=dict)
    call_counts: dict[str, int] = field(default_factory=dict)
    float_counts: dict[str, int] = field(default_factory=dict)
    violations: list[Violation] = field(default_factory=list)
    # Score of the best strict attempt (before relaxation)
    score: int = 0
    n_blocks: int = 26

    def missing_call_keys(self) -> list[str]:
        return [k for k in all_weekend_keys(self.n_blocks) if k not in self.call_schedule]

    def missing_float_keys(self) -> list[str]:
        return [k for k in all_weekend_keys(self.n_blocks) if k not in self.float_schedule]


@dataclass
class _Attempt:
    call_schedule: DutySchedule
    float_schedule: DutySchedule
    call_counts: dict[str, int]
    float_counts: dict[str, int]
    score: int = 0


@dataclass
class _Context:
    fellows: list[str]
    schedule: RotationSchedule
    pgy_levels: dict[str, int]
    config: SchedulerConfig
    rng: random.Random

    def shuffled(self, items: list) -> list:
        out = list(items)
        self.rng.shuffle(out)
        return out

    def jitter(self) -> float:
        return self.rng.random() * self.config.jitter

    def call_target(self, fellow: str) -> int:
        return self.config.call_target(self.pgy_levels.get(fellow))

    def float_target(self, fellow: str) -> int:
        return self.config.float_target(self.pgy_levels.get(fellow))


def assign_call_and_float(
    fellows: list[str],
    schedule: RotationSchedule,
    pgy_levels: dict[str, int],
    call_targets: dict[int, int] | None = None,
    float_targets: dict[int, int] | None = None,
    attempts: int | None = None,
    config: SchedulerConfig | None = None,
    rng: random.Random | None = None,
    seed: int | None = None,
) -> CallFloatResult:
    """Assign weekend call and night float for every block-weekend.

    Args:
        fellows: fellow names, in roster order
        schedule: {fellow: [rotation per block]}
        pgy_levels: {fellow: 4|5|6}
        call_targets / float_targets: {pgy: count}; override the config
        attempts: number of randomised strict attempts; overrides the config
        config: SchedulerConfig (calendar length, exam windows, scoring)
        rng: random source; built from ``seed`` when not given

    Returns:
        CallFloatResult. Slots that cannot be filled are reported as
        violations rather than raised.
    """
    if config is None:
        config = SchedulerConfig()
    overrides = {}
    if call_targets is not None:
        overrides["call_targets"] = dict(call_targets)
    if float_targets is not None:
        overrides["float_targets"] = dict(float_targets)
    if attempts is not None:
        overrides["attempts"] = attempts
    if overrides:
        config = replace(config, **overrides)
    if rng is None:
        rng = random.Random(seed)

    ctx = _Context(
        fellows=list(fellows),
        schedule=schedule,
        pgy_levels=pgy_levels,
        config=config,
        rng=rng,
    )

    # ── Best strict attempt ───────────────────────────────────
    best: _Attempt | None = None
    for i in range(max(1, config.attempts)):
        attempt = _run_attempt(ctx)
        logger.debug("Attempt %d: score %d", i + 1, attempt.score)
        if best is None or attempt.score < best.score:
            best = attempt

    logger.info(
        "Best strict attempt: score %d (%d calls, %d floats missing)",
        best.score,
        _count_missing(best.call_schedule, config.n_blocks),
        _count_missing(best.float_schedule, config.n_blocks),
    )

    # ── Relaxation ────────────────────────────────────────────
    violations: list[Violation] = []
    _relax_floats(ctx, best, violations)
    _flag_pgy4_floats(ctx, best, violations)
    _relax_calls(ctx, best, violations)
    _sweep_missing(ctx, best, violations)

    return CallFloatResult(
        call_schedule=best.call_schedule,
        float_schedule=best.float_schedule,
        call_counts=best.call_counts,
        float_counts=best.float_counts,
        violations=violations,
        score=best.score,
        n_blocks=config.n_blocks,
    )


def _count_missing(duty: DutySchedule, n_blocks: int) -> int:
    return sum(1 for key in all_weekend_keys(n_blocks) if key not in duty)


def _run_attempt(ctx: _Context) -> _Attempt:
    attempt = _Attempt(
        call_schedule={},
        float_schedule={},
        call_counts={f: 0 for f in ctx.fellows},
        float_counts={f: 0 for f in ctx.fellows},
    )
    _strict_float_fill(ctx, attempt)
    _strict_call_fill(ctx, attempt)

    n_blocks = ctx.config.n_blocks
    attempt.score = (
        _count_missing(attempt.call_schedule, n_blocks) * ctx.config.missing_call_weight
        + _count_missing(attempt.float_schedule, n_blocks) * ctx.config.missing_float_weight
    )
    return attempt


def _strict_float_fill(ctx: _Context, attempt: _Attempt) -> None:
    """Fill floats without exceeding targets; W2 prefers the Nights fellow."""
    config = ctx.config
    counts = attempt.float_counts
    duty = attempt.float_schedule

    def available(fellow: str, block_idx: int, weekend: int) -> bool:
        return (
            counts.get(fellow, 0) < ctx.float_target(fellow)
            and eligible_float_strict(fellow, block_idx, ctx.schedule, ctx.pgy_levels, config)
            and not violates_adjacency(duty, fellow, block_idx, weekend, config.n_blocks)
        )

    for block_idx in range(config.n_blocks):
        on_nights = nights_fellow(ctx.fellows, ctx.schedule, block_idx)

        for weekend in (1, 2):
            prefer_nights = weekend == 2 and on_nights is not None
            pick = None

            # Pair night float with the Nights rotation
            if prefer_nights and available(on_nights, block_idx, weekend):
                pick = on_nights

            if pick is None:
                candidates = [
                    f for f in ctx.shuffled(ctx.fellows)
                    if available(f, block_idx, weekend)
                    # W1: leave the Nights fellow alone
                    and not (weekend == 1 and f == on_nights)
                ]
                if candidates:
                    pick = min(
                        candidates,
                        key=lambda f: _float_score(ctx, counts, f, prefer_nights and f == on_nights),
                    )

            if pick is not None:
                duty[key_for_index(block_idx, weekend)] = DutyAssignment(name=pick)
                counts[pick] += 1


def _strict_call_fill(ctx: _Context, attempt: _Attempt) -> None:
    """Fill calls without exceeding targets, one call per fellow per block."""
    config = ctx.config
    counts = attempt.call_counts
    duty = attempt.call_schedule

    for block_idx in range(config.n_blocks):
        used_this_block: set[str] = set()

        for weekend in ctx.shuffled([1, 2]):
            candidates = [
                f for f in ctx.shuffled(ctx.fellows)
                if f not in used_this_block
                and counts.get(f, 0) < ctx.call_target(f)
                and eligible_call(f, block_idx, ctx.schedule, ctx.pgy_levels, config)
                and not violates_adjacency(duty, f, block_idx, weekend, config.n_blocks)
            ]
            if not candidates:
                continue
            pick = min(candidates, key=lambda f: _call_score(ctx, counts, f))
            duty[key_for_index(block_idx, weekend)] = DutyAssignment(name=pick)
            counts[pick] += 1
            used_this_block.add(pick)


def _float_score(ctx: _Context, counts: dict[str, int], fellow: str, preferred: bool) -> float:
    ratio = counts.get(fellow, 0) / max(ctx.float_target(fellow), 1)
    bonus = ctx.config.preferred_bonus if preferred else 0.0
    return ratio - bonus + ctx.jitter()


def _call_score(ctx: _Context, counts: dict[str, int], fellow: str) -> float:
    return counts.get(fellow, 0) / max(ctx.call_target(fellow), 1) + ctx.jitter()


# ── Relaxation phases ─────────────────────────────────────────


def _relaxed_pick(
    ctx: _Context,
    counts: dict[str, int],
    allowed: Callable[[str, RelaxationPolicy], bool],
) -> tuple[str | None, RelaxationPolicy | None]:
    """Try each relaxation phase in order; return the first fill."""
    for policy in RELAXATION_PHASES:
        candidates = [f for f in ctx.shuffled(ctx.fellows) if allowed(f, policy)]
        if not candidates:
            continue
        if policy.sorts_by_load:
            pick = min(candidates, key=lambda f: counts.get(f, 0) + ctx.jitter())
        else:
            pick = candidates[0]
        return pick, policy
    return None, None


def _relax_floats(ctx: _Context, best: _Attempt, violations: list[Violation]) -> None:
    config = ctx.config
    counts = best.float_counts
    duty = best.float_schedule

    for block_idx in range(config.n_blocks):
        for weekend in (1, 2):
            key = key_for_index(block_idx, weekend)
            if key in duty:
                continue

            def allowed(fellow: str, policy: RelaxationPolicy) -> bool:
                if not eligible_float_relaxed(fellow, block_idx, ctx.schedule, ctx.pgy_levels, config):
                    return False
                if policy.enforces_target and counts.get(fellow, 0) >= ctx.float_target(fellow):
                    return False
                if policy.enforces_adjacency and violates_adjacency(
                    duty, fellow, block_idx, weekend, config.n_blocks
                ):
                    return False
                return True

            pick, policy = _relaxed_pick(ctx, counts, allowed)
            if pick is None:
                logger.warning("No eligible fellow for float %s", key)
                violations.append(Violation(
                    rule=RULE_UNFILLED_SLOT,
                    severity=WARN,
                    fellow="",
                    block=block_idx + 1,
                    weekend=f"W{weekend}",
                    kind=FLOAT,
                    detail="No eligible fellow found for float, check exclusions/roster.",
                ))
                continue

            duty[key] = DutyAssignment(name=pick, relaxed=True, rule=policy.rule)
            counts[pick] = counts.get(pick, 0) + 1
            logger.debug("Float %s → %s (%s)", key, pick, policy.rule)
            violations.append(Violation(
                rule=policy.rule,
                severity=WARN,
                fellow=pick,
                block=block_idx + 1,
                weekend=f"W{weekend}",
                kind=FLOAT,
                detail=FLOAT_DETAILS[policy],
            ))


def _flag_pgy4_floats(ctx: _Context, best: _Attempt, violations: list[Violation]) -> None:
    """Flag PGY-4 floats placed before the fellow's first floor block."""
    for key, entry in best.float_schedule.items():
        if ctx.pgy_levels.get(entry.name) != 4:
            continue
        block_number, weekend = parse_weekend_key(key)
        if has_prior_floor(ctx.schedule, entry.name, block_number - 1):
            continue
        violations.append(Violation(
            rule=RULE_PGY4_FLOAT_BEFORE_FLOOR,
            severity=WARN,
            fellow=entry.name,
            block=block_number,
            weekend=f"W{weekend}",
            kind=FLOAT,
            detail="PGY4 assigned float before completing a floor block (relaxed).",
        ))


def _relax_calls(ctx: _Context, best: _Attempt, violations: list[Violation]) -> None:
    """Calls must be filled; PGY-6 never goes over target."""
    config = ctx.config
    counts = best.call_counts
    duty = best.call_schedule

    for block_idx in range(config.n_blocks):
        used_this_block = {
            duty[k].name
            for k in (key_for_index(block_idx, 1), key_for_index(block_idx, 2))
            if k in duty
        }

        for weekend in (1, 2):
            key = key_for_index(block_idx, weekend)
            if key in duty:
                continue

            def allowed(fellow: str, policy: RelaxationPolicy) -> bool:
                if fellow in used_this_block:
                    return False
                if not eligible_call(fellow, block_idx, ctx.schedule, ctx.pgy_levels, config):
                    return False
                if policy.enforces_target:
                    if counts.get(fellow, 0) >= ctx.call_target(fellow):
                        return False
                elif ctx.pgy_levels.get(fellow) == 6:
                    return False
                if policy.enforces_adjacency and violates_adjacency(
                    duty, fellow, block_idx, weekend, config.n_blocks
                ):
                    return False
                return True

            pick, policy = _relaxed_pick(ctx, counts, allowed)
            if pick is None:
                logger.warning("No eligible fellow for call %s", key)
                violations.append(Violation(
                    rule=RULE_UNFILLED_SLOT,
                    severity=ERROR,
                    fellow="",
                    block=block_idx + 1,
                    weekend=f"W{weekend}",
                    kind=CALL,
                    detail=(
                        "No eligible PGY4/5 available without violating hard rules. "
                        "Call slot left blank. Fix schedule/exclusions."
                    ),
                ))
                continue

            duty[key] = DutyAssignment(name=pick, relaxed=True, rule=policy.rule)
            counts[pick] = counts.get(pick, 0) + 1
            used_this_block.add(pick)
            logger.debug("Call %s → %s (%s)", key, pick, policy.rule)
            violations.append(Violation(
                rule=policy.rule,
                severity=WARN,
                fellow=pick,
                block=block_idx + 1,
                weekend=f"W{weekend}",
                kind=CALL,
                detail=CALL_DETAILS[policy],
            ))


def _sweep_missing(ctx: _Context, best: _Attempt, violations: list[Violation]) -> None:
    for block_idx in range(ctx.config.n_blocks):
        for weekend in (1, 2):
            key = key_for_index(block_idx, weekend)
            if key not in best.call_schedule:
                violations.append(Violation(
                    rule=RULE_MISSING_CALL,
                    severity=ERROR,
                    fellow="",
                    block=block_idx + 1,
                    weekend=f"W{weekend}",
                    kind=CALL,
                    detail="Call slot is missing after all fill phases.",
                ))
            if key not in best.float_schedule:
                violations.append(Violation(
                    rule=RULE_MISSING_FLOAT,
                    severity=WARN,
                    fellow="",
                    block=block_idx + 1,
                    weekend=f"W{weekend}",
                    kind=FLOAT,
                    detail="Float slot is missing after all fill phases.",
                ))
