"""
Right-hand side of the coupled Bjorken evolution system.

Combines the energy-momentum conservation laws with the relaxation
equations into a single map f(X, primitives, tau) -> dX/dtau over the
six-component state vector.
"""

from ..core.fields import ConservedState, PrimitiveVariables, TransportState
from .coefficients import SecondOrderCoefficients, TransportCoefficientCalculator
from .conservation import dTtn_dtau, dTtt_dtau, dTtx_dtau, dTty_dtau
from .relaxation import BjorkenRelaxationEquations


class EvolutionEquations:
    """
    Full derivative evaluator for the state vector.

    With ideal=True the dissipative components are frozen (zero derivative)
    and the transport coefficients are not evaluated, which yields ideal
    Bjorken flow when the initial pi and Pi vanish.
    """

    def __init__(
        self,
        transport_calculator: TransportCoefficientCalculator,
        coefficients: SecondOrderCoefficients | None = None,
        ideal: bool = False,
    ):
        self.transport_calculator = transport_calculator
        self.relaxation = BjorkenRelaxationEquations(transport_calculator, coefficients)
        self.ideal = ideal

    @property
    def coefficients(self) -> SecondOrderCoefficients:
        return self.relaxation.coefficients

    def derivatives(
        self,
        conserved: ConservedState,
        primitives: PrimitiveVariables,
        tau: float,
        transport: TransportState | None = None,
    ) -> ConservedState:
        """
        Evaluate dX/dtau.

        Args:
            conserved: Current state vector
            primitives: Primitive variables consistent with conserved at tau
            tau: Proper time in fm
            transport: Precomputed transport scalars at (primitives, tau), if any

        Returns:
            Derivative as a ConservedState
        """
        if self.ideal:
            dpi = dPi = 0.0
        else:
            if transport is None:
                transport = self.transport_calculator.evaluate(
                    primitives.e, primitives.p, tau, conserved.Pi
                )
            dpi = self.relaxation.dpi_dtau(conserved, primitives, tau, transport)
            dPi = self.relaxation.dPi_dtau(conserved, primitives, tau, transport)

        return ConservedState(
            Ttt=dTtt_dtau(conserved, primitives, tau),
            Ttx=dTtx_dtau(conserved, primitives, tau),
            Tty=dTty_dtau(conserved, primitives, tau),
            Ttn=dTtn_dtau(conserved, primitives, tau),
            pi=dpi,
            Pi=dPi,
        )
