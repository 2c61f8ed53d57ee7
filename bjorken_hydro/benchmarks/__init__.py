"""Bjorken flow run driver and reference solutions."""

from .bjorken_flow import (
    BjorkenFlowSolution,
    BjorkenSimulation,
    SimulationResult,
    estimate_convergence_order,
    initial_conserved_state,
)

__all__ = [
    "BjorkenFlowSolution",
    "BjorkenSimulation",
    "SimulationResult",
    "estimate_convergence_order",
    "initial_conserved_state",
]
