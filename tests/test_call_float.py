import random
from collections import Counter

from fellowship_scheduler.models.calendar import all_weekend_keys, key_for_index
from fellowship_scheduler.models.constraints import SchedulerConfig
from fellowship_scheduler.models.violation import (
    CALL,
    ERROR,
    FLOAT,
    RULE_IGNORE_ADJACENCY,
    RULE_MISSING_CALL,
    RULE_MISSING_FLOAT,
    RULE_OVER_TARGET,
    RULE_PGY4_FLOAT_BEFORE_FLOOR,
    RULE_RELAXED_FALLBACK,
    RULE_UNFILLED_SLOT,
    WARN,
)
from fellowship_scheduler.phases.call_float import assign_call_and_float
from fellowship_scheduler.phases.relaxation import RELAXATION_PHASES, RelaxationPolicy
from fellowship_scheduler.validation.assignment_audit import (
    audit_assignments,
    check_adjacency,
    check_exam_windows,
    check_targets,
)


def test_relaxation_phase_order() -> None:
    assert RELAXATION_PHASES == (
        RelaxationPolicy.RELAXED_ELIGIBILITY,
        RelaxationPolicy.OVER_TARGET,
        RelaxationPolicy.IGNORE_ADJACENCY,
    )
    assert RelaxationPolicy.STRICT_FILL.rule is None
    assert [p.rule for p in RELAXATION_PHASES] == [
        RULE_RELAXED_FALLBACK, RULE_OVER_TARGET, RULE_IGNORE_ADJACENCY,
    ]
    assert RelaxationPolicy.RELAXED_ELIGIBILITY.enforces_target
    assert not RelaxationPolicy.OVER_TARGET.enforces_target
    assert not RelaxationPolicy.IGNORE_ADJACENCY.enforces_adjacency


def test_full_year_adjacency_invariant(fellows, schedule, levels, config) -> None:
    result = assign_call_and_float(fellows, schedule, levels, config=config, seed=7)

    assert check_adjacency(result.call_schedule, CALL) == []
    assert check_adjacency(result.float_schedule, FLOAT) == []
    for duty in (result.call_schedule, result.float_schedule):
        for b in range(26):
            first = duty.get(key_for_index(b, 1))
            second = duty.get(key_for_index(b, 2))
            if first and second and first.name == second.name:
                assert RULE_IGNORE_ADJACENCY in (first.rule, second.rule)


def test_full_year_empty_call_slots_are_reported(fellows, schedule, levels, config) -> None:
    result = assign_call_and_float(fellows, schedule, levels, config=config, seed=11)

    for key in result.missing_call_keys():
        block, weekend = key[1:].split("-W")
        reasons = [
            v for v in result.violations
            if v.kind == CALL and v.block == int(block) and v.weekend == f"W{weekend}"
        ]
        assert {v.rule for v in reasons} >= {RULE_UNFILLED_SLOT, RULE_MISSING_CALL}
        assert all(v.severity == ERROR for v in reasons)

    for key in result.missing_float_keys():
        block, weekend = key[1:].split("-W")
        assert any(
            v.rule == RULE_MISSING_FLOAT and v.block == int(block) and v.weekend == f"W{weekend}"
            for v in result.violations
        )


def test_full_year_targets_only_exceeded_by_tagged_fills(fellows, schedule, levels, config) -> None:
    result = assign_call_and_float(fellows, schedule, levels, config=config, seed=3)

    assert check_targets(result.call_schedule, CALL, levels, config.call_targets) == []
    assert check_targets(result.float_schedule, FLOAT, levels, config.float_targets) == []
    assert result.call_counts == {
        f: Counter(e.name for e in result.call_schedule.values()).get(f, 0) for f in fellows
    }
    assert result.float_counts == {
        f: Counter(e.name for e in result.float_schedule.values()).get(f, 0) for f in fellows
    }
    # PGY-6 call never goes over target
    for fellow in fellows:
        if levels[fellow] == 6:
            assert result.call_counts[fellow] <= config.call_target(6)


def test_relaxed_fills_carry_a_warning(fellows, schedule, levels, config) -> None:
    result = assign_call_and_float(fellows, schedule, levels, config=config, seed=5)

    for kind, duty in ((CALL, result.call_schedule), (FLOAT, result.float_schedule)):
        for key, entry in duty.items():
            if not entry.relaxed:
                assert entry.rule is None
                continue
            block, weekend = key[1:].split("-W")
            assert any(
                v.kind == kind and v.rule == entry.rule and v.fellow == entry.name
                and v.block == int(block) and v.weekend == f"W{weekend}" and v.severity == WARN
                for v in result.violations
            )


def test_same_seed_same_result(fellows, schedule, levels, config) -> None:
    first = assign_call_and_float(fellows, schedule, levels, config=config, seed=42)
    second = assign_call_and_float(fellows, schedule, levels, config=config, seed=42)

    assert first.call_schedule == second.call_schedule
    assert first.float_schedule == second.float_schedule
    assert first.violations == second.violations


def test_injected_rng_matches_seed(fellows, schedule, levels, config) -> None:
    seeded = assign_call_and_float(fellows, schedule, levels, config=config, seed=9)
    injected = assign_call_and_float(fellows, schedule, levels, config=config, rng=random.Random(9))
    assert seeded.call_schedule == injected.call_schedule


def test_pgy6_never_assigned_inside_exam_window(fellows, schedule, levels, config) -> None:
    # Lopez is on Nights in block 3, inside the CBCCT hard window
    assert schedule["Lopez"][2] == "Nights"
    result = assign_call_and_float(fellows, schedule, levels, config=config, seed=1)

    assert check_exam_windows(result.call_schedule, CALL, levels, config) == []
    assert check_exam_windows(result.float_schedule, FLOAT, levels, config) == []
    for key in ("B3-W1", "B3-W2"):
        for duty in (result.call_schedule, result.float_schedule):
            entry = duty.get(key)
            assert entry is None or entry.name != "Lopez"


def test_generated_schedule_passes_audit(fellows, schedule, levels, config) -> None:
    result = assign_call_and_float(fellows, schedule, levels, config=config, seed=21)
    assert audit_assignments(result.call_schedule, result.float_schedule, levels, config) == []


def test_inputs_are_not_mutated(fellows, schedule, levels, config) -> None:
    before = {f: list(r) for f, r in schedule.items()}
    assign_call_and_float(fellows, schedule, levels, config=config, seed=2)
    assert schedule == before


def test_target_overrides(fellows, schedule, levels) -> None:
    result = assign_call_and_float(
        fellows, schedule, levels,
        call_targets={4: 0, 5: 0, 6: 0},
        attempts=1,
        seed=0,
    )
    assert all(entry.relaxed for entry in result.call_schedule.values())
    assert not any(v.rule == RULE_RELAXED_FALLBACK and v.kind == CALL for v in result.violations)


def test_unfillable_slots_are_reported_not_raised() -> None:
    config = SchedulerConfig(n_blocks=2, board_exams=(), attempts=3)
    schedule = {"A": ["Floor A", "Floor A"], "B": ["Floor B", "Floor B"]}
    result = assign_call_and_float(["A", "B"], schedule, {"A": 5, "B": 5}, config=config, seed=0)

    assert result.call_schedule == {}
    assert result.float_schedule == {}
    unfilled_calls = [v for v in result.violations if v.kind == CALL and v.rule == RULE_UNFILLED_SLOT]
    unfilled_floats = [v for v in result.violations if v.kind == FLOAT and v.rule == RULE_UNFILLED_SLOT]
    assert len(unfilled_calls) == 4 and all(v.severity == ERROR for v in unfilled_calls)
    assert len(unfilled_floats) == 4 and all(v.severity == WARN for v in unfilled_floats)
    assert sum(1 for v in result.violations if v.rule == RULE_MISSING_CALL) == 4
    assert sum(1 for v in result.violations if v.rule == RULE_MISSING_FLOAT) == 4
    assert result.score == 4 * config.missing_call_weight + 4 * config.missing_float_weight


def test_single_fellow_float_falls_back_to_ignoring_adjacency() -> None:
    config = SchedulerConfig(n_blocks=2, board_exams=(), attempts=5)
    schedule = {"A": ["Cath", "Cath"]}
    result = assign_call_and_float(["A"], schedule, {"A": 5}, config=config, seed=0)

    assert set(result.float_schedule) == set(all_weekend_keys(2))
    assert not result.float_schedule["B1-W1"].relaxed
    assert not result.float_schedule["B2-W1"].relaxed
    for key in ("B1-W2", "B2-W2"):
        entry = result.float_schedule[key]
        assert entry.name == "A"
        assert entry.relaxed and entry.rule == RULE_IGNORE_ADJACENCY
    assert sum(
        1 for v in result.violations if v.kind == FLOAT and v.rule == RULE_IGNORE_ADJACENCY
    ) == 2

    # One call per block; the other weekend cannot be filled by the same fellow
    assert len(result.call_schedule) == 2
    assert sum(1 for v in result.violations if v.rule == RULE_MISSING_CALL) == 2


def test_pgy4_float_before_first_floor_is_flagged() -> None:
    config = SchedulerConfig(n_blocks=2, board_exams=(), attempts=2)
    schedule = {"A": ["Cath", "Floor A"]}
    result = assign_call_and_float(["A"], schedule, {"A": 4}, config=config, seed=0)

    assert result.float_schedule["B1-W1"].rule == RULE_RELAXED_FALLBACK
    flagged = {
        (v.block, v.weekend) for v in result.violations if v.rule == RULE_PGY4_FLOAT_BEFORE_FLOOR
    }
    assert flagged == {(1, "W1"), (1, "W2")}
    assert "B2-W1" not in result.float_schedule


def test_missing_keys_follow_run_calendar_length() -> None:
    config = SchedulerConfig(n_blocks=2, board_exams=(), attempts=3)
    schedule = {"A": ["Cath", "Cath"], "B": ["Echo", "Echo"], "C": ["EP", "EP"]}
    result = assign_call_and_float(
        ["A", "B", "C"], schedule, {"A": 5, "B": 5, "C": 5}, config=config, seed=0,
    )

    assert result.n_blocks == 2
    assert set(result.call_schedule) == set(all_weekend_keys(2))
    assert result.missing_call_keys() == []
    assert result.missing_float_keys() == [
        k for k in all_weekend_keys(2) if k not in result.float_schedule
    ]


def test_night_float_pairs_with_nights_rotation() -> None:
    config = SchedulerConfig(n_blocks=3, board_exams=(), attempts=1)
    schedule = {
        "A": ["Cath", "Cath", "Cath"],
        "B": ["Echo", "Echo", "Echo"],
        "N": ["EP", "Nights", "EP"],
    }
    levels = {"A": 5, "B": 5, "N": 5}

    for seed in range(8):
        result = assign_call_and_float(["A", "B", "N"], schedule, levels, config=config, seed=seed)
        assert result.float_schedule["B2-W2"].name == "N"
        assert result.float_schedule["B2-W1"].name != "N"
