"""Escalating relaxation policies for filling empty call/float slots."""

from __future__ import annotations

from enum import Enum

from fellowship_scheduler.models.violation import (
    RULE_IGNORE_ADJACENCY,
    RULE_OVER_TARGET,
    RULE_RELAXED_FALLBACK,
)


class RelaxationPolicy(Enum):
    """Applied in declaration order until a slot fills."""
    STRICT_FILL = "strict_fill"
    RELAXED_ELIGIBILITY = RULE_RELAXED_FALLBACK
    OVER_TARGET = RULE_OVER_TARGET
    IGNORE_ADJACENCY = RULE_IGNORE_ADJACENCY

    @property
    def rule(self) -> str | None:
        """Violation rule recorded for a fill under this policy."""
        if self is RelaxationPolicy.STRICT_FILL:
            return None
        return self.value

    @property
    def enforces_target(self) -> bool:
        return self in (RelaxationPolicy.STRICT_FILL, RelaxationPolicy.RELAXED_ELIGIBILITY)

    @property
    def enforces_adjacency(self) -> bool:
        return self is not RelaxationPolicy.IGNORE_ADJACENCY

    @property
    def sorts_by_load(self) -> bool:
        """Last-resort fills take the first shuffled candidate."""
        return self is not RelaxationPolicy.IGNORE_ADJACENCY


# Phases (a)-(c) for slots still empty after the best strict attempt
RELAXATION_PHASES = (
    RelaxationPolicy.RELAXED_ELIGIBILITY,
    RelaxationPolicy.OVER_TARGET,
    RelaxationPolicy.IGNORE_ADJACENCY,
)

CALL_DETAILS: dict[RelaxationPolicy, str] = {
    RelaxationPolicy.RELAXED_ELIGIBILITY: "Filled missing call using relaxed adjacency rules.",
    RelaxationPolicy.OVER_TARGET: "Exceeded call target (PGY4/5 only) to fill missing call slot.",
    RelaxationPolicy.IGNORE_ADJACENCY: "Ignored adjacency rules to fill missing call slot.",
}

FLOAT_DETAILS: dict[RelaxationPolicy, str] = {
    RelaxationPolicy.RELAXED_ELIGIBILITY: "Filled missing float using relaxed eligibility rules.",
    RelaxationPolicy.OVER_TARGET: "Exceeded float target to fill missing float slot.",
    RelaxationPolicy.IGNORE_ADJACENCY: "Ignored adjacency rules to fill missing float slot.",
}
