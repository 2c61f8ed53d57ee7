"""
Pytest configuration and shared fixtures.

Constructing the quasiparticle equation of state integrates the bag function
once, so the instance is shared across the session.
"""

import pytest

from bjorken_hydro.core.config import BjorkenConfig, ClosureType, InitialConditionType
from bjorken_hydro.core.performance import reset_performance_stats
from bjorken_hydro.equations.coefficients import (
    FixedMassClosure,
    KineticClosure,
    TransportCoefficientCalculator,
)
from bjorken_hydro.equations.equation_of_state import QuasiparticleEOS
from bjorken_hydro.solvers.primitives import PrimitiveVariableSolver


@pytest.fixture(scope="session")
def eos():
    """Quasiparticle equation of state with default parameters."""
    return QuasiparticleEOS()


@pytest.fixture(scope="session")
def fixed_mass_transport(eos):
    return TransportCoefficientCalculator(eos, FixedMassClosure(eos))


@pytest.fixture(scope="session")
def kinetic_transport(eos):
    return TransportCoefficientCalculator(eos, KineticClosure(eos))


@pytest.fixture
def reconstructor(eos):
    return PrimitiveVariableSolver(eos)


@pytest.fixture
def short_config(tmp_path):
    """Factory for short fixed-mass runs writing into a temporary directory."""

    def make(**overrides):
        parameters = {
            "initial_time": 0.25,
            "final_time": 1.0,
            "timestep": 0.01,
            "timesteps_per_write": 1,
            "closure": ClosureType.FIXED_MASS,
            "initial_conditions": InitialConditionType.EQUILIBRIUM,
            "output_directory": tmp_path / "results",
        }
        parameters.update(overrides)
        return BjorkenConfig(**parameters)

    return make


@pytest.fixture(autouse=True)
def clean_performance_stats():
    """Each test starts with empty profiling statistics."""
    reset_performance_stats()
    yield
    reset_performance_stats()
