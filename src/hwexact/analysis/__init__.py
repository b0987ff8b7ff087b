"""Analysis modules for hwexact."""

from hwexact.analysis.chain import (
    StepResult,
    apply_d_switch,
    apply_r_switch,
    chain_step,
    choose_pair,
    evaluate_switch,
    sample_window,
    transition_probability,
)
from hwexact.analysis.randomization import (
    Phase,
    RandomizationDriver,
    RandomizationState,
    run_randomization,
    run_replicates,
)

__all__ = [
    # Chain
    "StepResult",
    "apply_d_switch",
    "apply_r_switch",
    "chain_step",
    "choose_pair",
    "evaluate_switch",
    "sample_window",
    "transition_probability",
    # Driver
    "Phase",
    "RandomizationDriver",
    "RandomizationState",
    "run_randomization",
    "run_replicates",
]
