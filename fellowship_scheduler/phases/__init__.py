from .call_float import assign_call_and_float, CallFloatResult
from .eligibility import (
    eligible_call,
    eligible_float_strict,
    eligible_float_relaxed,
    violates_adjacency,
)
from .relaxation import RelaxationPolicy, RELAXATION_PHASES

__all__ = [
    "assign_call_and_float", "CallFloatResult",
    "eligible_call", "eligible_float_strict", "eligible_float_relaxed",
    "violates_adjacency",
    "RelaxationPolicy", "RELAXATION_PHASES",
]
