"""
Tests for energy-momentum conservation in Milne coordinates.

The numeric source terms are checked against limiting cases and against a
symbolic derivation from the Christoffel symbols of the Milne metric.
"""

import numpy as np
import pytest
import sympy as sp

from bjorken_hydro.core.fields import ConservedState, PrimitiveVariables
from bjorken_hydro.equations.conservation import (
    ConservationLaws,
    dTtn_dtau,
    dTtt_dtau,
    dTtx_dtau,
    dTty_dtau,
)
from bjorken_hydro.solvers.primitives import conserved_from_primitives


def moving_primitives(tau: float, ux: float, uy: float, un: float, e: float, p: float):
    ut = np.sqrt(1.0 + ux**2 + uy**2 + tau**2 * un**2)
    return PrimitiveVariables(ut=ut, ux=ux, uy=uy, un=un, e=e, p=p)


@pytest.fixture(scope="module")
def laws():
    return ConservationLaws()


class TestMilneGeometry:
    """Christoffel symbols of ds^2 = dtau^2 - dx^2 - dy^2 - tau^2 deta^2."""

    def test_nonzero_christoffel_symbols(self, laws) -> None:
        gamma = laws.christoffel_symbols
        tau = laws.tau

        assert sp.simplify(gamma[0][3][3] - tau) == 0
        assert sp.simplify(gamma[3][0][3] - 1 / tau) == 0
        assert sp.simplify(gamma[3][3][0] - 1 / tau) == 0

    def test_remaining_symbols_vanish(self, laws) -> None:
        gamma = laws.christoffel_symbols
        nonzero = {(0, 3, 3), (3, 0, 3), (3, 3, 0)}
        for lam in range(4):
            for mu in range(4):
                for nu in range(4):
                    if (lam, mu, nu) not in nonzero:
                        assert gamma[lam][mu][nu] == 0

    def test_stress_tensor_symmetric(self, laws) -> None:
        T = laws.stress_energy_tensor()
        assert sp.simplify(T - T.T) == sp.zeros(4, 4)


class TestSourceTerms:
    """Numeric conservation laws."""

    def test_fluid_at_rest(self) -> None:
        """dTtt/dtau = -(e + P_L)/tau for u = (1, 0, 0, 0)."""
        e, p, pi, Pi, tau = 10.0, 3.0, 0.5, -0.2, 0.6
        primitives = PrimitiveVariables.at_rest(e, p)
        conserved = ConservedState(Ttt=e, Ttx=0.0, Tty=0.0, Ttn=0.0, pi=pi, Pi=Pi)

        assert dTtt_dtau(conserved, primitives, tau) == pytest.approx(-(e + p + Pi - pi) / tau)
        assert dTtx_dtau(conserved, primitives, tau) == 0.0
        assert dTty_dtau(conserved, primitives, tau) == 0.0
        assert dTtn_dtau(conserved, primitives, tau) == 0.0

    def test_ideal_bjorken_rate(self) -> None:
        e, tau = 12.0, 0.25
        primitives = PrimitiveVariables.at_rest(e, e / 3.0)
        conserved = ConservedState(e, 0.0, 0.0, 0.0, 0.0, 0.0)
        assert dTtt_dtau(conserved, primitives, tau) == pytest.approx(-4.0 * e / (3.0 * tau))

    def test_momentum_decay_rates(self) -> None:
        conserved = ConservedState(Ttt=5.0, Ttx=0.2, Tty=-0.4, Ttn=0.3, pi=0.0, Pi=0.0)
        primitives = moving_primitives(1.0, 0.1, -0.1, 0.05, 4.5, 1.4)
        tau = 2.0

        assert dTtx_dtau(conserved, primitives, tau) == pytest.approx(-0.1)
        assert dTty_dtau(conserved, primitives, tau) == pytest.approx(0.2)
        assert dTtn_dtau(conserved, primitives, tau) == pytest.approx(-0.45)

    @pytest.mark.parametrize(
        "tau,ux,uy,un,pi,Pi",
        [
            (0.25, 0.0, 0.0, 0.0, 0.4, -0.1),
            (0.8, 0.1, -0.2, 0.15, 0.3, -0.05),
            (3.0, -0.3, 0.05, 0.02, -0.1, 0.02),
        ],
    )
    def test_matches_symbolic_derivation(
        self, laws, tau: float, ux: float, uy: float, un: float, pi: float, Pi: float
    ) -> None:
        e, p = 5.0, 1.5
        primitives = moving_primitives(tau, ux, uy, un, e, p)
        conserved = conserved_from_primitives(primitives, pi, Pi, tau)
        symbolic = laws.numeric_source_terms()
        args = (tau, e, p + Pi, pi, primitives.ut, ux, uy, un)

        numeric = {
            "Ttt": dTtt_dtau(conserved, primitives, tau),
            "Ttx": dTtx_dtau(conserved, primitives, tau),
            "Tty": dTty_dtau(conserved, primitives, tau),
            "Ttn": dTtn_dtau(conserved, primitives, tau),
        }
        for name, value in numeric.items():
            assert value == pytest.approx(float(symbolic[name](*args)), rel=1e-12, abs=1e-14)
