"""
Transport coefficients for second-order viscous Bjorken flow.

This module implements the two relaxation-time closures (quasiparticle
kinetic theory and the fixed-mass m/T << 1 asymptotic form), the
second-order coupling coefficients of the relaxation equations, and the
calculator that turns primitive variables into the bookkeeping transport
scalars (temperature, relaxation times, Navier-Stokes values, bag field).
"""

import warnings
from abc import ABC, abstractmethod
from dataclasses import dataclass

import numpy as np
from scipy import integrate

from ..core.config import ClosureType
from ..core.fields import FieldValidationError, TransportState
from ..core.performance import monitor_performance
from .equation_of_state import EquationOfState, QuasiparticleEOS


class RelaxationTimeModel(ABC):
    """
    Abstract base class for relaxation-time closures.

    Defines the interface for the temperature-dependent shear and bulk
    relaxation times tau_pi(T) and tau_Pi(T).
    """

    closure: ClosureType

    def __init__(self, eos: EquationOfState):
        self.eos = eos

    @abstractmethod
    def shear_relaxation_time(self, temperature: float) -> float:
        """Compute shear relaxation time tau_pi(T) in fm."""
        pass

    @abstractmethod
    def bulk_relaxation_time(self, temperature: float) -> float:
        """Compute bulk relaxation time tau_Pi(T) in fm."""
        pass


class KineticClosure(RelaxationTimeModel):
    """
    Quasiparticle kinetic-theory closure.

    tau_pi = s (eta/s) / beta_pi and tau_Pi = s (zeta/s) / beta_Pi, with the
    relaxation-time-approximation moments of the quasiparticle gas

        beta_pi = g T^4 / (30 pi^2) int x^6 / eps^2 exp(-eps) dx
        beta_Pi = g T^4 / (2 pi^2) int x^2 exp(-eps) / eps^2
                      [(1/3 - cs^2) x^2 - cs^2 (z^2 - m dm/dT / T)]^2 dx

    where x = |p|/T and eps = sqrt(x^2 + z^2).
    """

    closure = ClosureType.KINETIC

    def __init__(self, eos: QuasiparticleEOS, quadrature_tolerance: float = 1e-10):
        if not isinstance(eos, QuasiparticleEOS):
            raise TypeError("Kinetic closure requires a QuasiparticleEOS")
        super().__init__(eos)
        self.quadrature_tolerance = quadrature_tolerance

        self._cache: dict[tuple[str, float], float] = {}
        self._cache_size_limit = 4096

    def _quadrature(self, integrand) -> float:
        value, _ = integrate.quad(
            integrand,
            0.0,
            np.inf,
            epsabs=0.0,
            epsrel=self.quadrature_tolerance,
            limit=200,
        )
        return float(value)

    def _cached(self, name: str, temperature: float, compute) -> float:
        key = (name, temperature)
        if key not in self._cache:
            if len(self._cache) >= self._cache_size_limit:
                self._cache.clear()
            self._cache[key] = compute(temperature)
        return self._cache[key]

    @monitor_performance("kinetic_beta_shear")
    def _compute_beta_shear(self, temperature: float) -> float:
        z = self.eos.z_quasiparticle(temperature)
        z2 = z * z

        def integrand(x: float) -> float:
            eps2 = x * x + z2
            return x**6 / eps2 * np.exp(-np.sqrt(eps2))

        return self.eos.degeneracy * temperature**4 / (30.0 * np.pi**2) * self._quadrature(integrand)

    @monitor_performance("kinetic_beta_bulk")
    def _compute_beta_bulk(self, temperature: float) -> float:
        z = self.eos.z_quasiparticle(temperature)
        z2 = z * z
        cs2 = self.eos.speed_of_sound_squared(temperature)
        mass_term = z2 - self.eos.mdmdT_quasiparticle(temperature) / temperature**2
        conformal_breaking = 1.0 / 3.0 - cs2

        def integrand(x: float) -> float:
            x2 = x * x
            eps2 = x2 + z2
            source = conformal_breaking * x2 - cs2 * mass_term
            return x2 * np.exp(-np.sqrt(eps2)) / eps2 * source**2

        return self.eos.degeneracy * temperature**4 / (2.0 * np.pi**2) * self._quadrature(integrand)

    def beta_shear(self, temperature: float) -> float:
        """Kinetic coefficient beta_pi(T) in fm^-4."""
        return self._cached("beta_shear", temperature, self._compute_beta_shear)

    def beta_bulk(self, temperature: float) -> float:
        """Kinetic coefficient beta_Pi(T) in fm^-4."""
        return self._cached("beta_bulk", temperature, self._compute_beta_bulk)

    def shear_relaxation_time(self, temperature: float) -> float:
        s = self.eos.entropy_density(temperature)
        return s * self.eos.shear_viscosity_to_entropy(temperature) / self.beta_shear(temperature)

    def bulk_relaxation_time(self, temperature: float) -> float:
        s = self.eos.entropy_density(temperature)
        return s * self.eos.bulk_viscosity_to_entropy(temperature) / self.beta_bulk(temperature)

    def clear_cache(self) -> None:
        self._cache.clear()


class FixedMassClosure(RelaxationTimeModel):
    """
    Fixed-mass closure valid for m/T << 1.

    tau_pi = 5 (eta/s) / T and tau_Pi = (zeta/s) / (15 T (1/3 - cs^2)^2).
    """

    closure = ClosureType.FIXED_MASS

    def shear_relaxation_time(self, temperature: float) -> float:
        return 5.0 * self.eos.shear_viscosity_to_entropy(temperature) / temperature

    def bulk_relaxation_time(self, temperature: float) -> float:
        cs2 = self.eos.speed_of_sound_squared(temperature)
        return self.eos.bulk_viscosity_to_entropy(temperature) / (
            15.0 * temperature * (1.0 / 3.0 - cs2) ** 2
        )


def create_relaxation_model(closure: ClosureType | str, eos: EquationOfState) -> RelaxationTimeModel:
    """
    Create the relaxation-time model for a closure.

    Args:
        closure: Closure type or its string value
        eos: Equation of state shared with the rest of the run

    Returns:
        Configured relaxation-time model
    """
    closure = ClosureType(closure)
    if closure is ClosureType.KINETIC:
        return KineticClosure(eos)  # type: ignore[arg-type]
    if closure is ClosureType.FIXED_MASS:
        return FixedMassClosure(eos)
    raise ValueError(f"Unknown closure: {closure}")


@dataclass(frozen=True)
class SecondOrderCoefficients:
    """
    Second-order couplings of the Bjorken relaxation equations.

    Defaults are the small-mass kinetic-theory values:
    delta_pipi = 4/3, tau_pipi = 10/7, lambda_piPi = 6/5, delta_PiPi = 2/3,
    lambda_Pipi = (8/5)(1/3 - cs^2).
    """

    delta_pipi: float = 4.0 / 3.0
    tau_pipi: float = 10.0 / 7.0
    lambda_piPi: float = 6.0 / 5.0
    delta_PiPi: float = 2.0 / 3.0
    lambda_Pipi_factor: float = 8.0 / 5.0

    @property
    def shear_damping(self) -> float:
        """Coefficient of pi/tau in the shear equation, tau_pipi/3 + delta_pipi."""
        return self.tau_pipi / 3.0 + self.delta_pipi

    @property
    def shear_bulk_coupling(self) -> float:
        """Coefficient of Pi/tau in the shear equation, (2/3) lambda_piPi."""
        return 2.0 / 3.0 * self.lambda_piPi

    def lambda_Pipi(self, cs2: float) -> float:
        """Coefficient of pi/tau in the bulk equation."""
        return self.lambda_Pipi_factor * (1.0 / 3.0 - cs2)


class TransportCoefficientCalculator:
    """
    Computes the transport scalars attached to a fluid state.

    Combines the equation of state with a relaxation-time closure to produce
    the temperature, speed of sound, relaxation times, Navier-Stokes values of
    the dissipative quantities and the quasiparticle bag bookkeeping.
    """

    def __init__(self, eos: EquationOfState, relaxation_model: RelaxationTimeModel):
        self.eos = eos
        self.relaxation_model = relaxation_model

    @property
    def closure(self) -> ClosureType:
        return self.relaxation_model.closure

    def navier_stokes_shear(self, e: float, p: float, temperature: float, tau: float) -> float:
        """First-order shear stress pi_NS = 4 eta / (3 tau)."""
        return (
            4.0 * (e + p) / (3.0 * temperature * tau)
            * self.eos.shear_viscosity_to_entropy(temperature)
        )

    def navier_stokes_bulk(self, e: float, p: float, temperature: float, tau: float) -> float:
        """First-order bulk pressure Pi_NS = -zeta / tau."""
        return -(e + p) / (tau * temperature) * self.eos.bulk_viscosity_to_entropy(temperature)

    def bag_correction(
        self, temperature: float, cs2: float, taubulk: float, Pi: float, tau: float
    ) -> tuple[float, float]:
        """
        Quasiparticle bag field and its second-order correction.

        Returns:
            (B, dB2nd) with B = B_eq + dB2nd and
            dB2nd = -3 tau_Pi (m dm/dT) / z^2 * cs^2 Pi / (tau T);
            (0, 0) for equations of state without a bag field
        """
        if not isinstance(self.eos, QuasiparticleEOS):
            return 0.0, 0.0
        z = self.eos.z_quasiparticle(temperature)
        mdmdT = self.eos.mdmdT_quasiparticle(temperature)
        dB2nd = -3.0 * taubulk * mdmdT / z**2 * cs2 * Pi / (tau * temperature)
        return self.eos.equilibrium_bag(temperature) + dB2nd, dB2nd

    def relaxation_times(self, temperature: float) -> tuple[float, float]:
        """
        Shear and bulk relaxation times at temperature T.

        Raises:
            FieldValidationError: If either relaxation time is not positive and finite
        """
        taupi = self.relaxation_model.shear_relaxation_time(temperature)
        taubulk = self.relaxation_model.bulk_relaxation_time(temperature)
        for value, name in ((taupi, "shear"), (taubulk, "bulk")):
            if not np.isfinite(value) or value <= 0.0:
                raise FieldValidationError(
                    f"Non-physical {name} relaxation time {value} at T = {temperature:.6e} fm^-1"
                )
        return taupi, taubulk

    def evaluate(self, e: float, p: float, tau: float, Pi: float = 0.0) -> TransportState:
        """
        Transport scalars for primitive variables (e, p) at proper time tau.

        Args:
            e: Energy density in fm^-4
            p: Equilibrium pressure in fm^-4
            tau: Proper time in fm
            Pi: Bulk pressure, used only for the bag correction

        Returns:
            TransportState with T, cs2, relaxation times, NS values and bag field
        """
        temperature = self.eos.effective_temperature(e)
        cs2 = self.eos.speed_of_sound_squared(temperature)
        taupi, taubulk = self.relaxation_times(temperature)
        B, dB2nd = self.bag_correction(temperature, cs2, taubulk, Pi, tau)

        return TransportState(
            T=temperature,
            cs2=cs2,
            taupi=taupi,
            taubulk=taubulk,
            piNS=self.navier_stokes_shear(e, p, temperature, tau),
            bulkNS=self.navier_stokes_bulk(e, p, temperature, tau),
            B=B,
            dB2nd=dB2nd,
        )

    def check_timestep(self, transport: TransportState, timestep: float) -> None:
        """Warn when a relaxation time is not resolved by the step size."""
        for value, name in ((transport.taupi, "tau_pi"), (transport.taubulk, "tau_Pi")):
            if value < timestep:
                warnings.warn(
                    f"Relaxation time {name} = {value:.3e} fm is shorter than the "
                    f"timestep {timestep:.3e} fm; explicit integration may be unstable",
                    stacklevel=3,
                )
