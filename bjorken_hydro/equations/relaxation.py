"""
Second-order relaxation equations for the Bjorken dissipative scalars.

For boost-invariant flow the shear tensor reduces to the single scalar
pi = -tau^2 pi^{eta eta} and the expansion rate to theta = 1/tau, so the
relaxation equations become ordinary differential equations:

    dpi/dtau = -(pi - pi_NS)/tau_pi - (tau_pipi/3 + delta_pipi) pi/tau
               + (2/3) lambda_piPi Pi/tau
    dPi/dtau = -(Pi - Pi_NS)/tau_Pi - delta_PiPi Pi/tau + lambda_Pipi pi/tau
"""

import sympy as sp

from ..core.fields import ConservedState, PrimitiveVariables, TransportState
from .coefficients import SecondOrderCoefficients, TransportCoefficientCalculator


class BjorkenRelaxationEquations:
    """
    Relaxation equations for the shear stress and bulk pressure.

    The relaxation times and Navier-Stokes targets are evaluated at the
    temperature of the supplied primitive variables, so the same instance
    serves both the predictor and the corrector stage.
    """

    def __init__(
        self,
        transport_calculator: TransportCoefficientCalculator,
        coefficients: SecondOrderCoefficients | None = None,
    ):
        """
        Initialize relaxation equations.

        Args:
            transport_calculator: Source of relaxation times and Navier-Stokes values
            coefficients: Second-order couplings, small-mass kinetic values by default
        """
        self.transport_calculator = transport_calculator
        self.coefficients = coefficients or SecondOrderCoefficients()

    def _transport(
        self,
        conserved: ConservedState,
        primitives: PrimitiveVariables,
        tau: float,
        transport: TransportState | None,
    ) -> TransportState:
        if transport is not None:
            return transport
        return self.transport_calculator.evaluate(primitives.e, primitives.p, tau, conserved.Pi)

    def dpi_dtau(
        self,
        conserved: ConservedState,
        primitives: PrimitiveVariables,
        tau: float,
        transport: TransportState | None = None,
    ) -> float:
        """Proper-time derivative of the shear stress pi."""
        transport = self._transport(conserved, primitives, tau, transport)
        c = self.coefficients
        return (
            -(conserved.pi - transport.piNS) / transport.taupi
            - c.shear_damping * conserved.pi / tau
            + c.shear_bulk_coupling * conserved.Pi / tau
        )

    def dPi_dtau(
        self,
        conserved: ConservedState,
        primitives: PrimitiveVariables,
        tau: float,
        transport: TransportState | None = None,
    ) -> float:
        """Proper-time derivative of the bulk pressure Pi."""
        transport = self._transport(conserved, primitives, tau, transport)
        c = self.coefficients
        return (
            -(conserved.Pi - transport.bulkNS) / transport.taubulk
            - c.delta_PiPi * conserved.Pi / tau
            + c.lambda_Pipi(transport.cs2) * conserved.pi / tau
        )

    def symbolic_equations(self) -> dict[str, sp.Expr]:
        """
        Right-hand sides as SymPy expressions.

        Symbols: tau, pi, Pi, pi_NS, Pi_NS, tau_pi, tau_Pi, cs2. Coefficient
        values are substituted as exact rationals where possible.
        """
        tau, tau_pi, tau_Pi = sp.symbols("tau tau_pi tau_Pi", positive=True)
        pi, Pi, pi_NS, Pi_NS, cs2 = sp.symbols("pi Pi pi_NS Pi_NS cs2", real=True)
        c = self.coefficients

        shear_damping = sp.nsimplify(c.shear_damping)
        shear_bulk = sp.nsimplify(c.shear_bulk_coupling)
        bulk_damping = sp.nsimplify(c.delta_PiPi)
        bulk_shear = sp.nsimplify(c.lambda_Pipi_factor) * (sp.Rational(1, 3) - cs2)

        return {
            "pi": -(pi - pi_NS) / tau_pi - shear_damping * pi / tau + shear_bulk * Pi / tau,
            "Pi": -(Pi - Pi_NS) / tau_Pi - bulk_damping * Pi / tau + bulk_shear * pi / tau,
        }
