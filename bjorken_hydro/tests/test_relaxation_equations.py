"""
Test suite for the Bjorken relaxation equations and the full evolution
right-hand side.
"""

import pytest

from bjorken_hydro.core.fields import ConservedState, PrimitiveVariables, TransportState
from bjorken_hydro.equations.coefficients import SecondOrderCoefficients
from bjorken_hydro.equations.evolution import EvolutionEquations
from bjorken_hydro.equations.relaxation import BjorkenRelaxationEquations


def make_transport(**overrides) -> TransportState:
    values = {
        "T": 2.0,
        "cs2": 0.28,
        "taupi": 0.5,
        "taubulk": 0.1,
        "piNS": 4.0,
        "bulkNS": -0.3,
        "B": 0.0,
        "dB2nd": 0.0,
    }
    values.update(overrides)
    return TransportState(**values)


class TestRelaxationEquations:
    """Shear and bulk relaxation."""

    def setup_method(self) -> None:
        self.primitives = PrimitiveVariables.at_rest(40.0, 12.0)
        self.tau = 0.5

    def test_explicit_shear_rate(self, fixed_mass_transport) -> None:
        equations = BjorkenRelaxationEquations(fixed_mass_transport)
        transport = make_transport()
        conserved = ConservedState(40.0, 0.0, 0.0, 0.0, pi=3.0, Pi=-0.2)

        expected = (
            -(3.0 - 4.0) / 0.5
            - (10.0 / 21.0 + 4.0 / 3.0) * 3.0 / self.tau
            + 0.8 * (-0.2) / self.tau
        )
        assert equations.dpi_dtau(conserved, self.primitives, self.tau, transport) == (
            pytest.approx(expected)
        )

    def test_explicit_bulk_rate(self, fixed_mass_transport) -> None:
        equations = BjorkenRelaxationEquations(fixed_mass_transport)
        transport = make_transport()
        conserved = ConservedState(40.0, 0.0, 0.0, 0.0, pi=3.0, Pi=-0.2)

        expected = (
            -(-0.2 + 0.3) / 0.1
            - (2.0 / 3.0) * (-0.2) / self.tau
            + 1.6 * (1.0 / 3.0 - 0.28) * 3.0 / self.tau
        )
        assert equations.dPi_dtau(conserved, self.primitives, self.tau, transport) == (
            pytest.approx(expected)
        )

    def test_first_order_fixed_point(self, fixed_mass_transport) -> None:
        """Without second-order couplings the Navier-Stokes values are stationary."""
        equations = BjorkenRelaxationEquations(
            fixed_mass_transport,
            SecondOrderCoefficients(
                delta_pipi=0.0,
                tau_pipi=0.0,
                lambda_piPi=0.0,
                delta_PiPi=0.0,
                lambda_Pipi_factor=0.0,
            ),
        )
        transport = make_transport()
        conserved = ConservedState(40.0, 0.0, 0.0, 0.0, pi=transport.piNS, Pi=transport.bulkNS)

        assert equations.dpi_dtau(conserved, self.primitives, self.tau, transport) == 0.0
        assert equations.dPi_dtau(conserved, self.primitives, self.tau, transport) == 0.0

    def test_relaxation_toward_navier_stokes(self, fixed_mass_transport) -> None:
        equations = BjorkenRelaxationEquations(fixed_mass_transport)
        transport = make_transport(piNS=4.0)
        below = ConservedState(40.0, 0.0, 0.0, 0.0, pi=0.0, Pi=0.0)
        assert equations.dpi_dtau(below, self.primitives, self.tau, transport) > 0.0

    def test_transport_evaluated_from_primitives(self, eos, fixed_mass_transport) -> None:
        T = 1.8
        e, p = eos.energy_density(T), eos.pressure(T)
        primitives = PrimitiveVariables.at_rest(e, p)
        conserved = ConservedState(e, 0.0, 0.0, 0.0, pi=0.5, Pi=-0.1)
        transport = fixed_mass_transport.evaluate(e, p, self.tau, conserved.Pi)
        equations = BjorkenRelaxationEquations(fixed_mass_transport)

        assert equations.dpi_dtau(conserved, primitives, self.tau) == pytest.approx(
            equations.dpi_dtau(conserved, primitives, self.tau, transport)
        )
        assert equations.dPi_dtau(conserved, primitives, self.tau) == pytest.approx(
            equations.dPi_dtau(conserved, primitives, self.tau, transport)
        )

    def test_symbolic_equations_match(self, fixed_mass_transport) -> None:
        equations = BjorkenRelaxationEquations(fixed_mass_transport)
        transport = make_transport()
        conserved = ConservedState(40.0, 0.0, 0.0, 0.0, pi=3.0, Pi=-0.2)
        symbolic = equations.symbolic_equations()

        values = {
            "tau": self.tau,
            "pi": conserved.pi,
            "Pi": conserved.Pi,
            "pi_NS": transport.piNS,
            "Pi_NS": transport.bulkNS,
            "tau_pi": transport.taupi,
            "tau_Pi": transport.taubulk,
            "cs2": transport.cs2,
        }

        def evaluate(expr):
            return float(expr.subs({s: values[s.name] for s in expr.free_symbols}))

        assert evaluate(symbolic["pi"]) == pytest.approx(
            equations.dpi_dtau(conserved, self.primitives, self.tau, transport)
        )
        assert evaluate(symbolic["Pi"]) == pytest.approx(
            equations.dPi_dtau(conserved, self.primitives, self.tau, transport)
        )


class TestEvolutionEquations:
    """Aggregated right-hand side."""

    def setup_method(self) -> None:
        self.tau = 0.4

    def _state(self, eos):
        T = 2.0
        e, p = eos.energy_density(T), eos.pressure(T)
        primitives = PrimitiveVariables.at_rest(e, p)
        conserved = ConservedState(e, 0.0, 0.0, 0.0, pi=1.0, Pi=-0.1)
        return conserved, primitives

    def test_all_components(self, eos, fixed_mass_transport) -> None:
        conserved, primitives = self._state(eos)
        equations = EvolutionEquations(fixed_mass_transport)
        derivative = equations.derivatives(conserved, primitives, self.tau)

        assert isinstance(derivative, ConservedState)
        P = primitives.p + conserved.Pi
        assert derivative.Ttt == pytest.approx(-(conserved.Ttt + P - conserved.pi) / self.tau)
        assert derivative.pi == pytest.approx(
            equations.relaxation.dpi_dtau(conserved, primitives, self.tau)
        )
        assert derivative.Pi == pytest.approx(
            equations.relaxation.dPi_dtau(conserved, primitives, self.tau)
        )

    def test_ideal_mode_freezes_dissipative_components(self, eos, fixed_mass_transport) -> None:
        conserved, primitives = self._state(eos)
        equations = EvolutionEquations(fixed_mass_transport, ideal=True)
        derivative = equations.derivatives(conserved, primitives, self.tau)

        assert derivative.pi == 0.0
        assert derivative.Pi == 0.0
        assert derivative.Ttt < 0.0

    def test_default_coefficients(self, fixed_mass_transport) -> None:
        equations = EvolutionEquations(fixed_mass_transport)
        assert equations.coefficients == SecondOrderCoefficients()
