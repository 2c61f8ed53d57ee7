"""
Numerical solvers for Bjorken flow.

- `PrimitiveVariableSolver`: recovers (u, e, p) from the evolved state vector
- `TimeEvolutionEngine`: fixed-step Heun predictor-corrector integrator
"""

from .predictor_corrector import EvolutionResult, TimeEvolutionEngine
from .primitives import PrimitiveVariableSolver, conserved_from_primitives

__all__ = [
    'EvolutionResult',
    'PrimitiveVariableSolver',
    'TimeEvolutionEngine',
    'conserved_from_primitives',
]
