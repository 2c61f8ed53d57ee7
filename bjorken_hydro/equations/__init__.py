"""
Physics equations for Bjorken flow.

- Equation of state (quasiparticle gas with bag function)
- Relaxation-time closures and transport bookkeeping
- Energy-momentum conservation in Milne coordinates
- Second-order relaxation equations for pi and Pi
"""

from .coefficients import (
    FixedMassClosure,
    KineticClosure,
    RelaxationTimeModel,
    SecondOrderCoefficients,
    TransportCoefficientCalculator,
    create_relaxation_model,
)
from .conservation import ConservationLaws, dTtn_dtau, dTtt_dtau, dTtx_dtau, dTty_dtau
from .equation_of_state import EquationOfState, QuasiparticleEOS
from .evolution import EvolutionEquations
from .relaxation import BjorkenRelaxationEquations

__all__ = [
    'BjorkenRelaxationEquations',
    'ConservationLaws',
    'EquationOfState',
    'EvolutionEquations',
    'FixedMassClosure',
    'KineticClosure',
    'QuasiparticleEOS',
    'RelaxationTimeModel',
    'SecondOrderCoefficients',
    'TransportCoefficientCalculator',
    'create_relaxation_model',
    'dTtn_dtau',
    'dTtt_dtau',
    'dTtx_dtau',
    'dTty_dtau',
]
