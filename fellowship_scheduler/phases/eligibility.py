"""Call and night-float eligibility rules."""

from __future__ import annotations

from fellowship_scheduler.models.assignments import DutySchedule, RotationSchedule, assignee
from fellowship_scheduler.models.calendar import key_for_index
from fellowship_scheduler.models.constraints import SchedulerConfig
from fellowship_scheduler.models.rotation import FLOOR_A, FLOOR_B, ICU, NIGHTS, is_floor


def _rotation(schedule: RotationSchedule, fellow: str, block_idx: int) -> str:
    rotations = schedule.get(fellow) or []
    if 0 <= block_idx < len(rotations):
        return rotations[block_idx] or ""
    return ""


def has_icu_by_block(schedule: RotationSchedule, fellow: str, block_idx: int) -> bool:
    """ICU in any block up to and including ``block_idx``."""
    return any(r == ICU for r in (schedule.get(fellow) or [])[: block_idx + 1])


def has_prior_floor(schedule: RotationSchedule, fellow: str, block_idx: int) -> bool:
    """Floor A/B in a block strictly before ``block_idx``."""
    return any(is_floor(r) for r in (schedule.get(fellow) or [])[:block_idx])


def eligible_call(
    fellow: str,
    block_idx: int,
    schedule: RotationSchedule,
    pgy_levels: dict[str, int],
    config: SchedulerConfig,
) -> bool:
    pgy = pgy_levels.get(fellow)
    if not pgy:
        return False

    rot = _rotation(schedule, fellow, block_idx)
    if rot in (NIGHTS, FLOOR_A, FLOOR_B):
        return False

    if pgy == 6:
        if config.in_exam_hard_window(block_idx):
            return False
        # No PGY-6 call in the opening block
        if block_idx < 1:
            return False

    if pgy == 4 and not has_icu_by_block(schedule, fellow, block_idx):
        return False

    # Going to Nights next block
    if block_idx < config.n_blocks - 1 and _rotation(schedule, fellow, block_idx + 1) == NIGHTS:
        return False

    return True


def _float_base_eligible(
    fellow: str,
    block_idx: int,
    schedule: RotationSchedule,
    pgy_levels: dict[str, int],
    config: SchedulerConfig,
) -> bool:
    pgy = pgy_levels.get(fellow)
    if not pgy:
        return False

    rot = _rotation(schedule, fellow, block_idx)
    if rot in (ICU, FLOOR_A, FLOOR_B):
        return False

    if pgy == 6:
        if config.in_exam_hard_window(block_idx):
            return False
        if fellow in config.pgy6_no_early_float and block_idx < config.no_early_float_blocks:
            return False

    return True


def eligible_float_strict(
    fellow: str,
    block_idx: int,
    schedule: RotationSchedule,
    pgy_levels: dict[str, int],
    config: SchedulerConfig,
) -> bool:
    if not _float_base_eligible(fellow, block_idx, schedule, pgy_levels, config):
        return False
    if pgy_levels.get(fellow) == 4 and not has_prior_floor(schedule, fellow, block_idx):
        return False
    return True


def eligible_float_relaxed(
    fellow: str,
    block_idx: int,
    schedule: RotationSchedule,
    pgy_levels: dict[str, int],
    config: SchedulerConfig,
) -> bool:
    """Strict float eligibility without the PGY-4 prior-floor requirement."""
    return _float_base_eligible(fellow, block_idx, schedule, pgy_levels, config)


def violates_same_block(duty: DutySchedule, fellow: str, block_idx: int) -> bool:
    """Fellow already holds W1 or W2 of this block."""
    return (
        assignee(duty, key_for_index(block_idx, 1)) == fellow
        or assignee(duty, key_for_index(block_idx, 2)) == fellow
    )


def violates_consecutive(
    duty: DutySchedule, fellow: str, block_idx: int, weekend: int, n_blocks: int
) -> bool:
    """W2 of block N next to W1 of block N+1."""
    if weekend == 2 and block_idx < n_blocks - 1:
        return assignee(duty, key_for_index(block_idx + 1, 1)) == fellow
    if weekend == 1 and block_idx > 0:
        return assignee(duty, key_for_index(block_idx - 1, 2)) == fellow
    return False


def violates_adjacency(
    duty: DutySchedule, fellow: str, block_idx: int, weekend: int, n_blocks: int
) -> bool:
    return (
        violates_same_block(duty, fellow, block_idx)
        or violates_consecutive(duty, fellow, block_idx, weekend, n_blocks)
    )


def nights_fellow(fellows: list[str], schedule: RotationSchedule, block_idx: int) -> str | None:
    """First fellow on the Nights rotation in this block."""
    for fellow in fellows:
        if _rotation(schedule, fellow, block_idx) == NIGHTS:
            return fellow
    return None
