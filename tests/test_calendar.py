from datetime import date

import pytest

from fellowship_scheduler.models.assignments import (
    DutyAssignment,
    Vacation,
    normalize_assignment,
    normalize_duty_schedule,
    vacation_blocks_for,
)
from fellowship_scheduler.models.calendar import (
    all_weekend_keys,
    compute_blocks,
    find_block_for_date,
    parse_weekend_key,
    weekend_key,
)
from fellowship_scheduler.models.constraints import SchedulerConfig


def test_compute_blocks_academic_year() -> None:
    blocks = compute_blocks(date(2026, 7, 1))

    assert len(blocks) == 26
    assert (blocks[0].start_date, blocks[0].end_date) == (date(2026, 7, 1), date(2026, 7, 12))
    assert (blocks[1].start_date, blocks[1].end_date) == (date(2026, 7, 13), date(2026, 7, 26))
    assert (blocks[13].start_date, blocks[13].end_date) == (date(2026, 12, 28), date(2027, 1, 10))
    assert (blocks[-1].start_date, blocks[-1].end_date) == (date(2027, 6, 14), date(2027, 6, 27))
    for prev, nxt in zip(blocks, blocks[1:]):
        assert (nxt.start_date - prev.end_date).days == 1


def test_compute_blocks_monday_start() -> None:
    blocks = compute_blocks(date(2025, 6, 30), n_blocks=3)
    assert blocks[0].end_date == date(2025, 7, 13)
    assert blocks[1].start_date == date(2025, 7, 14)


def test_weekend_saturdays() -> None:
    blocks = compute_blocks(date(2026, 7, 1))
    assert blocks[0].weekend_saturdays == (date(2026, 7, 4), date(2026, 7, 11))
    assert blocks[1].saturday_for(1) == date(2026, 7, 18)
    assert blocks[1].saturday_for(2) == date(2026, 7, 25)


def test_find_block_for_date() -> None:
    blocks = compute_blocks(date(2026, 7, 1))
    assert find_block_for_date(date(2026, 7, 1), blocks) == 1
    assert find_block_for_date(date(2026, 7, 13), blocks) == 2
    assert find_block_for_date(date(2027, 6, 27), blocks) == 26
    assert find_block_for_date(date(2027, 6, 28), blocks) is None


def test_weekend_keys() -> None:
    assert weekend_key(14, 1) == "B14-W1"
    assert parse_weekend_key("B14-W2") == (14, 2)
    keys = all_weekend_keys(26)
    assert len(keys) == 52
    assert keys[:3] == ["B1-W1", "B1-W2", "B2-W1"]


@pytest.mark.parametrize("key", ["B14", "B1-W3", "14-W1", ""])
def test_parse_weekend_key_rejects_malformed(key: str) -> None:
    with pytest.raises(ValueError):
        parse_weekend_key(key)


def test_normalize_duty_schedule_accepts_both_shapes() -> None:
    duty = normalize_duty_schedule({
        "B1-W1": "Adler",
        "B1-W2": {"name": "Brooks", "relaxed": True, "rule": "over_target"},
        "B2-W1": {"call": "Chen"},
        "B2-W2": "",
        "B3-W1": {"name": None, "relaxed": False},
    })
    assert duty == {
        "B1-W1": DutyAssignment(name="Adler"),
        "B1-W2": DutyAssignment(name="Brooks", relaxed=True, rule="over_target"),
        "B2-W1": DutyAssignment(name="Chen"),
    }


def test_normalize_assignment_rejects_unknown_types() -> None:
    with pytest.raises(TypeError):
        normalize_assignment(42)


def test_vacation_blocks_only_count_approved_vacation() -> None:
    vacations = [
        Vacation(fellow="Adler", start_block=3, end_block=4),
        Vacation(fellow="Adler", start_block=8, end_block=8, status="pending"),
        Vacation(fellow="Adler", start_block=10, end_block=10, reason="Conference"),
        Vacation(fellow="Brooks", start_block=1, end_block=1),
    ]
    assert vacation_blocks_for("Adler", vacations) == {3, 4}
    assert vacation_blocks_for("Chen", vacations) == set()


def test_exam_windows() -> None:
    config = SchedulerConfig()
    hard = {b for b in range(26) if config.in_exam_hard_window(b)}
    assert hard == {0, 1, 2, 3, 11, 12, 13, 17, 18, 19, 20, 21}
    assert config.in_exam_soft_window(9)
    assert not config.in_exam_hard_window(9)


def test_targets_fall_back_for_unknown_pgy() -> None:
    config = SchedulerConfig()
    assert config.call_target(4) == 5
    assert config.float_target(6) == 3
    assert config.call_target(None) == 999
