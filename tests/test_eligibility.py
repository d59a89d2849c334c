from fellowship_scheduler.models.assignments import DutyAssignment
from fellowship_scheduler.models.constraints import SchedulerConfig
from fellowship_scheduler.phases.eligibility import (
    eligible_call,
    eligible_float_relaxed,
    eligible_float_strict,
    has_icu_by_block,
    has_prior_floor,
    nights_fellow,
    violates_adjacency,
)


def _config(**overrides) -> SchedulerConfig:
    return SchedulerConfig(board_exams=(), **overrides)


def test_call_blocked_on_nights_and_floors() -> None:
    schedule = {"A": ["Nights", "Floor A", "Floor B", "ICU", "Cath"]}
    levels = {"A": 5}
    config = _config(n_blocks=5)
    assert [eligible_call("A", b, schedule, levels, config) for b in range(5)] == [
        False, False, False, True, True,
    ]


def test_call_blocked_before_nights() -> None:
    schedule = {"A": ["Cath", "Nights"]}
    assert not eligible_call("A", 0, schedule, {"A": 5}, _config(n_blocks=2))


def test_pgy4_call_requires_icu_by_block() -> None:
    schedule = {"A": ["Cath", "ICU", "Echo"]}
    levels = {"A": 4}
    config = _config(n_blocks=3)
    assert not eligible_call("A", 0, schedule, levels, config)
    assert eligible_call("A", 1, schedule, levels, config)
    assert eligible_call("A", 2, schedule, levels, config)
    assert has_icu_by_block(schedule, "A", 1)


def test_pgy6_call_excluded_in_opening_block_and_exam_window() -> None:
    schedule = {"A": ["Cath"] * 26}
    levels = {"A": 6}
    config = SchedulerConfig()
    assert not eligible_call("A", 0, schedule, levels, config)
    assert not eligible_call("A", 12, schedule, levels, config)
    assert eligible_call("A", 8, schedule, levels, config)


def test_unknown_fellow_is_never_eligible() -> None:
    schedule = {"A": ["Cath"]}
    config = _config(n_blocks=1)
    assert not eligible_call("A", 0, schedule, {}, config)
    assert not eligible_float_relaxed("A", 0, schedule, {}, config)


def test_float_blocked_on_icu_and_floors() -> None:
    schedule = {"A": ["ICU", "Floor A", "Nights", "Echo"]}
    levels = {"A": 5}
    config = _config(n_blocks=4)
    assert [eligible_float_strict("A", b, schedule, levels, config) for b in range(4)] == [
        False, False, True, True,
    ]


def test_pgy4_strict_float_needs_prior_floor() -> None:
    schedule = {"A": ["Cath", "Floor A", "Echo"]}
    levels = {"A": 4}
    config = _config(n_blocks=3)
    assert not eligible_float_strict("A", 0, schedule, levels, config)
    assert eligible_float_relaxed("A", 0, schedule, levels, config)
    assert eligible_float_strict("A", 2, schedule, levels, config)
    assert not has_prior_floor(schedule, "A", 1)


def test_pgy6_early_float_exclusion() -> None:
    schedule = {"A": ["Cath"] * 6}
    levels = {"A": 6}
    config = _config(n_blocks=6, pgy6_no_early_float=("A",))
    assert not eligible_float_strict("A", 3, schedule, levels, config)
    assert eligible_float_strict("A", 4, schedule, levels, config)


def test_adjacency() -> None:
    duty = {"B2-W2": DutyAssignment(name="A")}
    # Same block
    assert violates_adjacency(duty, "A", 1, 1, 26)
    # B2-W2 next to B3-W1
    assert violates_adjacency(duty, "A", 2, 1, 26)
    # B1-W2 is two weekends away from B2-W2
    assert not violates_adjacency(duty, "A", 0, 2, 26)
    assert violates_adjacency({"B3-W1": DutyAssignment(name="A")}, "A", 1, 2, 26)
    assert not violates_adjacency(duty, "B", 1, 1, 26)


def test_nights_fellow() -> None:
    schedule = {"A": ["Cath", "Nights"], "B": ["Nights", "Echo"]}
    assert nights_fellow(["A", "B"], schedule, 0) == "B"
    assert nights_fellow(["A", "B"], schedule, 1) == "A"
    assert nights_fellow(["A"], schedule, 0) is None
