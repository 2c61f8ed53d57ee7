"""
Primitive-variable reconstruction for Bjorken flow.

Recovers the four-velocity, energy density and equilibrium pressure from the
evolved components T^{tau mu} and the bulk pressure. For a state with
momentum density M^2 = Ttx^2 + Tty^2 + tau^2 Ttn^2 the energy density solves

    e = Ttt - M^2 / (Ttt + p(e) + Pi),

after which u^tau = sqrt((Ttt + P)/(e + P)) and u^i = T^{tau i}/((e + P) u^tau)
with P = p + Pi.
"""

import numpy as np
from scipy import optimize

from ..core.constants import ENERGY_DENSITY_MIN, NORMALIZATION_TOLERANCE, TOLERANCE_STRICT
from ..core.fields import (
    ConservedState,
    EquationOfStateError,
    PrimitiveVariables,
    ReconstructionError,
)
from ..equations.equation_of_state import EquationOfState
from ..utils.logging_config import HydroLoggerMixin, physics_logger


class PrimitiveVariableSolver(HydroLoggerMixin):
    """
    Inverts the conserved state for the primitive variables.

    Every failure mode raises ReconstructionError; the time-evolution engine
    treats it as fatal.
    """

    def __init__(
        self,
        eos: EquationOfState,
        tolerance: float = TOLERANCE_STRICT,
        max_iterations: int = 200,
        normalization_tolerance: float = NORMALIZATION_TOLERANCE,
    ):
        """
        Initialize reconstructor.

        Args:
            eos: Equation of state providing p(e)
            tolerance: Absolute tolerance of the energy-density root
            max_iterations: Iteration budget of the root finder
            normalization_tolerance: Allowed |u.u - 1|
        """
        self.eos = eos
        self.tolerance = tolerance
        self.max_iterations = max_iterations
        self.normalization_tolerance = normalization_tolerance

        self._minimum_energy_density = max(
            ENERGY_DENSITY_MIN, eos.energy_density(eos.temperature_min)
        )

    @staticmethod
    def momentum_density_squared(conserved: ConservedState, tau: float) -> float:
        """M^2 = Ttx^2 + Tty^2 + tau^2 Ttn^2."""
        return conserved.Ttx**2 + conserved.Tty**2 + tau**2 * conserved.Ttn**2

    def _pressure(self, e: float) -> float:
        try:
            return self.eos.equilibrium_pressure(e)
        except EquationOfStateError as exc:
            raise ReconstructionError(f"Equation of state rejected e = {e:.6e}: {exc}") from exc

    def _solve_energy_density(self, conserved: ConservedState, M2: float) -> float:
        Ttt, Pi = conserved.Ttt, conserved.Pi

        def residual(e: float) -> float:
            denominator = Ttt + self._pressure(e) + Pi
            if denominator <= 0.0:
                raise ReconstructionError(
                    f"Ttt + P = {denominator:.6e} is not positive at e = {e:.6e}"
                )
            return e - Ttt + M2 / denominator

        e_low, e_high = self._minimum_energy_density, Ttt
        f_low, f_high = residual(e_low), residual(e_high)
        if np.sign(f_low) == np.sign(f_high):
            raise ReconstructionError(
                f"Energy density root not bracketed in [{e_low:.3e}, {e_high:.6e}] "
                f"(Ttt = {Ttt:.6e}, M^2 = {M2:.6e}, Pi = {Pi:.6e})"
            )

        e, result = optimize.brentq(
            residual,
            e_low,
            e_high,
            xtol=self.tolerance,
            maxiter=self.max_iterations,
            full_output=True,
            disp=False,
        )
        physics_logger.log_convergence(
            "energy_density_root", result.iterations, abs(residual(e)), result.converged
        )
        if not result.converged:
            raise ReconstructionError(
                f"Energy density root did not converge after {result.iterations} "
                f"iterations ({result.flag})"
            )
        return float(e)

    def reconstruct(self, conserved: ConservedState, tau: float) -> PrimitiveVariables:
        """
        Primitive variables consistent with conserved at proper time tau.

        Args:
            conserved: Evolved state vector
            tau: Proper time in fm

        Returns:
            PrimitiveVariables with a normalized four-velocity

        Raises:
            ReconstructionError: If no physical solution exists or the solver fails
        """
        if not conserved.is_finite():
            raise ReconstructionError(f"Non-finite state at tau = {tau}: {conserved}")
        if conserved.Ttt <= 0.0:
            raise ReconstructionError(f"Ttt = {conserved.Ttt:.6e} is not positive at tau = {tau}")

        M2 = self.momentum_density_squared(conserved, tau)
        if M2 == 0.0:
            e = conserved.Ttt
        else:
            e = self._solve_energy_density(conserved, M2)
        if e < 0.0:
            raise ReconstructionError(f"Negative energy density {e:.6e} at tau = {tau}")

        p = self._pressure(e)
        P = p + conserved.Pi
        enthalpy = e + P
        if conserved.Ttt + P <= 0.0 or enthalpy <= 0.0:
            raise ReconstructionError(
                f"Non-positive effective enthalpy at tau = {tau}: "
                f"Ttt + P = {conserved.Ttt + P:.6e}, e + P = {enthalpy:.6e}"
            )

        ut = np.sqrt((conserved.Ttt + P) / enthalpy)
        scale = 1.0 / (enthalpy * ut)
        primitives = PrimitiveVariables(
            ut=float(ut),
            ux=conserved.Ttx * scale,
            uy=conserved.Tty * scale,
            un=conserved.Ttn * scale,
            e=float(e),
            p=float(p),
        )

        error = abs(primitives.normalization(tau) - 1.0)
        physics_logger.log_conservation_check(
            "four-velocity normalization", error, self.normalization_tolerance
        )
        if error > self.normalization_tolerance:
            raise ReconstructionError(
                f"Four-velocity not normalized at tau = {tau}: |u.u - 1| = {error:.3e}"
            )

        self.logger.debug(f"Reconstructed e = {e:.6e}, ut = {ut:.12f} at tau = {tau:.4f}")
        return primitives


def conserved_from_primitives(
    primitives: PrimitiveVariables, pi: float, Pi: float, tau: float
) -> ConservedState:
    """
    Forward map from primitive variables to the evolved state vector.

    T^{tau tau} = (e + P) ut^2 - P and T^{tau i} = (e + P) ut u^i with
    P = p + Pi; the shear tensor has no tau components.
    """
    P = primitives.p + Pi
    enthalpy = primitives.e + P
    ut = primitives.ut
    return ConservedState(
        Ttt=enthalpy * ut**2 - P,
        Ttx=enthalpy * ut * primitives.ux,
        Tty=enthalpy * ut * primitives.uy,
        Ttn=enthalpy * ut * primitives.un,
        pi=pi,
        Pi=Pi,
    )
