"""
Tests for primitive-variable reconstruction.
"""

import numpy as np
import pytest

from bjorken_hydro.core.fields import ConservedState, PrimitiveVariables, ReconstructionError
from bjorken_hydro.solvers.primitives import PrimitiveVariableSolver, conserved_from_primitives


def moving_state(eos, T: float, tau: float, ux: float, uy: float, un: float):
    e, p = eos.energy_density(T), eos.pressure(T)
    ut = np.sqrt(1.0 + ux**2 + uy**2 + tau**2 * un**2)
    return PrimitiveVariables(ut=ut, ux=ux, uy=uy, un=un, e=e, p=p)


class TestReconstructionAtRest:
    """Comoving fluid: M = 0 and e = Ttt exactly."""

    def test_energy_density_is_Ttt(self, eos, reconstructor) -> None:
        T = 2.0
        e = eos.energy_density(T)
        conserved = ConservedState(e, 0.0, 0.0, 0.0, pi=0.5, Pi=-0.1)
        primitives = reconstructor.reconstruct(conserved, 0.5)

        assert primitives.e == e
        assert primitives.p == pytest.approx(eos.pressure(T), rel=1e-10)
        assert primitives.ut == pytest.approx(1.0, abs=1e-14)
        assert primitives.ux == primitives.uy == primitives.un == 0.0

    def test_forward_map_at_rest(self, eos) -> None:
        primitives = PrimitiveVariables.at_rest(10.0, 3.0)
        conserved = conserved_from_primitives(primitives, 0.4, -0.2, 1.0)
        assert conserved.Ttt == pytest.approx(10.0)
        assert conserved.Ttx == conserved.Tty == conserved.Ttn == 0.0
        assert (conserved.pi, conserved.Pi) == (0.4, -0.2)


class TestReconstructionWithMomentum:
    """Bracketed root finding for M > 0."""

    @pytest.mark.parametrize(
        "T,tau,ux,uy,un,Pi",
        [
            (2.0, 0.5, 0.3, 0.0, 0.0, 0.0),
            (1.0, 1.0, 0.1, -0.2, 0.05, 0.0),
            (0.7, 2.0, -0.4, 0.2, 0.1, -0.01),
            (3.0, 0.25, 0.0, 0.0, 1.5, 0.2),
        ],
    )
    def test_round_trip(
        self, eos, reconstructor, T: float, tau: float, ux: float, uy: float, un: float, Pi: float
    ) -> None:
        expected = moving_state(eos, T, tau, ux, uy, un)
        conserved = conserved_from_primitives(expected, 0.0, Pi, tau)
        primitives = reconstructor.reconstruct(conserved, tau)

        assert primitives.e == pytest.approx(expected.e, rel=1e-9)
        assert primitives.p == pytest.approx(expected.p, rel=1e-9)
        assert primitives.ut == pytest.approx(expected.ut, rel=1e-9)
        assert primitives.ux == pytest.approx(expected.ux, rel=1e-8, abs=1e-12)
        assert primitives.uy == pytest.approx(expected.uy, rel=1e-8, abs=1e-12)
        assert primitives.un == pytest.approx(expected.un, rel=1e-8, abs=1e-12)
        assert primitives.is_normalized(tau)

    def test_momentum_density(self) -> None:
        conserved = ConservedState(5.0, 0.3, 0.4, 0.5, 0.0, 0.0)
        assert PrimitiveVariableSolver.momentum_density_squared(conserved, 2.0) == pytest.approx(
            0.09 + 0.16 + 4.0 * 0.25
        )


class TestReconstructionFailures:
    """Every failure raises ReconstructionError."""

    def test_non_positive_Ttt(self, reconstructor) -> None:
        with pytest.raises(ReconstructionError, match="Ttt"):
            reconstructor.reconstruct(ConservedState(0.0, 0.0, 0.0, 0.0, 0.0, 0.0), 1.0)

    def test_non_finite_state(self, reconstructor) -> None:
        with pytest.raises(ReconstructionError, match="Non-finite"):
            reconstructor.reconstruct(ConservedState(np.nan, 0.0, 0.0, 0.0, 0.0, 0.0), 1.0)

    def test_negative_effective_pressure(self, reconstructor) -> None:
        conserved = ConservedState(10.0, 0.0, 0.0, 0.0, pi=0.0, Pi=-50.0)
        with pytest.raises(ReconstructionError, match="enthalpy"):
            reconstructor.reconstruct(conserved, 1.0)

    def test_unbracketed_root(self, reconstructor) -> None:
        """Momentum density larger than the energy density admits no solution."""
        conserved = ConservedState(1.0, 5.0, 0.0, 0.0, 0.0, 0.0)
        with pytest.raises(ReconstructionError, match="not bracketed"):
            reconstructor.reconstruct(conserved, 1.0)

    def test_iteration_budget(self, eos) -> None:
        solver = PrimitiveVariableSolver(eos, max_iterations=1)
        expected = moving_state(eos, 1.0, 1.0, 0.5, 0.0, 0.0)
        conserved = conserved_from_primitives(expected, 0.0, 0.0, 1.0)
        with pytest.raises(ReconstructionError, match="did not converge"):
            solver.reconstruct(conserved, 1.0)
