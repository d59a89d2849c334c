import copy
from datetime import date

import pytest

from fellowship_scheduler.models.assignments import DutyAssignment
from fellowship_scheduler.models.calendar import compute_blocks
from fellowship_scheduler.models.violation import RULE_8_HOUR_REST, RULE_POST_CALL_REST, Violation
from fellowship_scheduler.solver.suggester import (
    FLOAT_REASSIGN,
    REASSIGNABLE_RULES,
    ROTATION_SWAP,
    Suggestion,
    SuggestionContext,
    apply_suggestion,
    generate_suggestions,
)


@pytest.fixture()
def short_rest_context() -> SuggestionContext:
    """A works ICU and holds Saturday night float; B is on Research."""
    return SuggestionContext(
        fellows=["A", "B"],
        schedule={"A": ["ICU"], "B": ["Research"]},
        float_schedule={"B1-W1": DutyAssignment(name="A")},
        blocks=compute_blocks(date(2026, 7, 1), n_blocks=1),
    )


def _short_rest(context: SuggestionContext) -> Violation:
    return next(v for v in context.violations_for(context.fellows) if v.rule == RULE_8_HOUR_REST)


def test_baseline_has_short_rest_for_a_only(short_rest_context) -> None:
    violations = short_rest_context.violations_for(["A", "B"])
    assert {(v.fellow, v.rule) for v in violations} == {
        ("A", RULE_8_HOUR_REST),
        ("A", RULE_POST_CALL_REST),
    }
    assert _short_rest(short_rest_context).start_date == date(2026, 7, 4)


def test_rotation_swap_clears_short_rest(short_rest_context) -> None:
    violation = _short_rest(short_rest_context)
    suggestions = generate_suggestions(violation, short_rest_context)

    swap = next(s for s in suggestions if s.kind == ROTATION_SWAP)
    assert swap.net_change <= 0
    assert (swap.fellow_a, swap.fellow_b) == ("A", "B")
    assert (swap.block_index, swap.rotation_a, swap.rotation_b) == (0, "ICU", "Research")
    assert swap.description == "Swap A's ICU with B's Research in B1"


def test_float_reassignment_is_offered(short_rest_context) -> None:
    violation = _short_rest(short_rest_context)
    suggestions = generate_suggestions(violation, short_rest_context)

    reassign = next(s for s in suggestions if s.kind == FLOAT_REASSIGN)
    assert reassign.weekend_key == "B1-W1"
    assert reassign.fellow_b == "B"
    assert reassign.description == "Reassign B1-W1 night float from A to B"


def test_suggestions_sorted_and_capped(short_rest_context) -> None:
    violation = _short_rest(short_rest_context)
    suggestions = generate_suggestions(violation, short_rest_context)
    assert [s.net_change for s in suggestions] == sorted(s.net_change for s in suggestions)

    assert len(generate_suggestions(violation, short_rest_context, max_suggestions=1)) == 1


def test_inputs_are_not_mutated(short_rest_context) -> None:
    before = copy.deepcopy(short_rest_context)
    generate_suggestions(_short_rest(short_rest_context), short_rest_context)
    assert short_rest_context == before


def test_apply_swap_clears_violation(short_rest_context) -> None:
    violation = _short_rest(short_rest_context)
    swap = next(
        s for s in generate_suggestions(violation, short_rest_context) if s.kind == ROTATION_SWAP
    )
    updated = apply_suggestion(swap, short_rest_context)

    assert updated.schedule == {"A": ["Research"], "B": ["ICU"]}
    assert short_rest_context.schedule == {"A": ["ICU"], "B": ["Research"]}
    assert not any(v.matches(violation) for v in updated.violations_for(updated.fellows))


def test_apply_reassignment(short_rest_context) -> None:
    suggestion = Suggestion(
        kind=FLOAT_REASSIGN, description="", net_change=0,
        fellow_a="A", fellow_b="B", weekend_key="B1-W1",
    )
    updated = apply_suggestion(suggestion, short_rest_context)
    assert updated.float_schedule["B1-W1"] == DutyAssignment(name="B")
    assert short_rest_context.float_schedule["B1-W1"].name == "A"


def test_apply_rejects_unknown_kind(short_rest_context) -> None:
    with pytest.raises(ValueError):
        apply_suggestion(Suggestion("teleport", "", 0, "A", "B"), short_rest_context)


def test_no_candidates_is_an_empty_list(short_rest_context) -> None:
    alone = SuggestionContext(
        fellows=["A"],
        schedule={"A": ["ICU"]},
        float_schedule=dict(short_rest_context.float_schedule),
        blocks=short_rest_context.blocks,
    )
    assert generate_suggestions(_short_rest(alone), alone) == []


def test_identical_rotations_are_not_swapped() -> None:
    # Handing the float to B moves the short rest rather than removing it
    context = SuggestionContext(
        fellows=["A", "B"],
        schedule={"A": ["ICU"], "B": ["ICU"]},
        float_schedule={"B1-W1": DutyAssignment(name="A")},
        blocks=compute_blocks(date(2026, 7, 1), n_blocks=1),
    )
    suggestions = generate_suggestions(_short_rest(context), context)
    assert all(s.kind != ROTATION_SWAP for s in suggestions)
    assert [(s.kind, s.net_change) for s in suggestions] == [(FLOAT_REASSIGN, 0)]


def test_every_work_hour_rule_is_reassignable() -> None:
    assert len(REASSIGNABLE_RULES) == 6
