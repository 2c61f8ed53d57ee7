"""
Equation of state for the expanding quark-gluon plasma.

The medium is modelled as a Boltzmann gas of quasiparticles with a
temperature-dependent mass m(T) = sqrt(m0^2 + (a T)^2). Thermodynamic
consistency (s = dp/dT) fixes the bag function B(T) through

    dB/dT = -g m^2 T K1(m/T) dm/dT / (2 pi^2),    B(T_min) = 0,

which is tabulated once at construction. All quantities are in fm units.
"""

from abc import ABC, abstractmethod

import numpy as np
from scipy import integrate, optimize, special

from ..core.constants import (
    DEFAULT_ETA_OVER_S,
    ENERGY_DENSITY_MIN,
    QGP_DEGREES_OF_FREEDOM,
    TEMPERATURE_MAX,
    TEMPERATURE_MIN,
)
from ..core.fields import EquationOfStateError
from ..core.performance import get_profiler

# Boltzmann degeneracy reproducing the Stefan-Boltzmann pressure of a
# massless QGP: g T^4 / pi^2 = (pi^2 / 90) g_QGP T^4
STEFAN_BOLTZMANN_DEGENERACY = np.pi**4 / 90.0 * QGP_DEGREES_OF_FREEDOM


class EquationOfState(ABC):
    """
    Abstract equation of state.

    Maps temperature to energy density, pressure, entropy density, speed of
    sound and specific viscosities, and inverts e(T) for the effective
    temperature. Implementations must be stateless apart from caches.
    """

    def __init__(
        self,
        temperature_range: tuple[float, float] = (TEMPERATURE_MIN, TEMPERATURE_MAX),
    ):
        self.temperature_min, self.temperature_max = temperature_range
        self._temperature_cache: dict[float, float] = {}
        self._cache_size_limit = 4096

    @abstractmethod
    def energy_density(self, temperature: float) -> float:
        """Equilibrium energy density e(T)."""
        pass

    @abstractmethod
    def pressure(self, temperature: float) -> float:
        """Equilibrium pressure p(T)."""
        pass

    @abstractmethod
    def speed_of_sound_squared(self, temperature: float) -> float:
        """Speed of sound squared dp/de at temperature T."""
        pass

    @abstractmethod
    def shear_viscosity_to_entropy(self, temperature: float) -> float:
        """Specific shear viscosity eta/s."""
        pass

    @abstractmethod
    def bulk_viscosity_to_entropy(self, temperature: float) -> float:
        """Specific bulk viscosity zeta/s."""
        pass

    def entropy_density(self, temperature: float) -> float:
        """Entropy density s = (e + p) / T."""
        self._check_temperature(temperature)
        return (self.energy_density(temperature) + self.pressure(temperature)) / temperature

    def effective_temperature(self, energy_density: float) -> float:
        """
        Temperature of the equilibrium state with the given energy density.

        Args:
            energy_density: Energy density in fm^-4

        Returns:
            Temperature in fm^-1

        Raises:
            EquationOfStateError: If the energy density is non-physical or
                outside the range covered by the equation of state
        """
        if not np.isfinite(energy_density) or energy_density < ENERGY_DENSITY_MIN:
            raise EquationOfStateError(
                f"Energy density must be positive and finite, got {energy_density}"
            )

        profiler = get_profiler()
        cached = self._temperature_cache.get(energy_density)
        if cached is not None:
            profiler.record_cache_hit("effective_temperature")
            return cached
        profiler.record_cache_miss("effective_temperature")

        e_low = self.energy_density(self.temperature_min)
        e_high = self.energy_density(self.temperature_max)
        if not e_low <= energy_density <= e_high:
            raise EquationOfStateError(
                f"Energy density {energy_density:.6e} fm^-4 outside tabulated range "
                f"[{e_low:.3e}, {e_high:.3e}]"
            )

        temperature, result = optimize.brentq(
            lambda T: self.energy_density(T) - energy_density,
            self.temperature_min,
            self.temperature_max,
            xtol=1e-14,
            maxiter=200,
            full_output=True,
            disp=False,
        )
        if not result.converged:
            raise EquationOfStateError(
                f"Temperature inversion did not converge for e = {energy_density:.6e} "
                f"({result.flag})"
            )

        if len(self._temperature_cache) >= self._cache_size_limit:
            self._temperature_cache.clear()
        self._temperature_cache[energy_density] = float(temperature)
        return float(temperature)

    def equilibrium_pressure(self, energy_density: float) -> float:
        """Pressure p(e) of the equilibrium state with energy density e."""
        return self.pressure(self.effective_temperature(energy_density))

    def clear_cache(self) -> None:
        """Clear the temperature inversion cache."""
        self._temperature_cache.clear()

    def _check_temperature(self, temperature: float) -> None:
        if not np.isfinite(temperature) or temperature <= 0.0:
            raise EquationOfStateError(
                f"Temperature must be positive and finite, got {temperature}"
            )
        if not self.temperature_min <= temperature <= self.temperature_max:
            raise EquationOfStateError(
                f"Temperature {temperature:.6e} fm^-1 outside range "
                f"[{self.temperature_min}, {self.temperature_max}]"
            )


class QuasiparticleEOS(EquationOfState):
    """
    Quasiparticle equation of state with a temperature-dependent mass.

    Kinetic contributions follow from Boltzmann statistics with z = m/T:

        p = g T^4 z^2 K2(z) / (2 pi^2) - B(T)
        e = g T^4 (3 z^2 K2(z) + z^3 K1(z)) / (2 pi^2) + B(T)
        s = g m^3 K3(z) / (2 pi^2)

    The bag function B(T) cancels in s = (e + p)/T, so the speed of sound
    cs^2 = s / (T ds/dT) is analytic. The specific bulk viscosity follows the
    conformality-breaking relation zeta/s = 15 (eta/s) (1/3 - cs^2)^2.
    """

    def __init__(
        self,
        vacuum_mass: float = 1.0,
        thermal_mass_coefficient: float = 1.1,
        degeneracy: float = STEFAN_BOLTZMANN_DEGENERACY,
        eta_over_s: float = DEFAULT_ETA_OVER_S,
        temperature_range: tuple[float, float] = (TEMPERATURE_MIN, TEMPERATURE_MAX),
    ):
        """
        Initialize quasiparticle equation of state.

        Args:
            vacuum_mass: Mass m0 at zero temperature in fm^-1
            thermal_mass_coefficient: Coefficient a of the thermal mass a*T
            degeneracy: Boltzmann degeneracy g
            eta_over_s: Constant specific shear viscosity
            temperature_range: (T_min, T_max) covered by the tabulated bag function
        """
        super().__init__(temperature_range)
        if vacuum_mass <= 0.0:
            raise ValueError(f"Vacuum mass must be positive, got {vacuum_mass}")
        if thermal_mass_coefficient < 0.0:
            raise ValueError(
                f"Thermal mass coefficient must be non-negative, got {thermal_mass_coefficient}"
            )
        if eta_over_s < 0.0:
            raise ValueError(f"eta/s must be non-negative, got {eta_over_s}")

        self.vacuum_mass = vacuum_mass
        self.thermal_mass_coefficient = thermal_mass_coefficient
        self.degeneracy = degeneracy
        self.eta_over_s = eta_over_s
        self._prefactor = degeneracy / (2.0 * np.pi**2)

        self._bag_solution = self._tabulate_bag_function()

    def _tabulate_bag_function(self):
        """Integrate dB/dT from T_min with B(T_min) = 0."""
        solution = integrate.solve_ivp(
            lambda T, y: [self._bag_derivative(T)],
            (self.temperature_min, self.temperature_max),
            [0.0],
            method="DOP853",
            dense_output=True,
            rtol=1e-11,
            atol=1e-14,
        )
        if not solution.success:
            raise EquationOfStateError(f"Bag function integration failed: {solution.message}")
        return solution.sol

    def _bag_derivative(self, temperature: float) -> float:
        m = self.mass(temperature)
        z = m / temperature
        return -self._prefactor * m**2 * temperature * special.kn(1, z) * self.mass_derivative(
            temperature
        )

    # Quasiparticle mass

    def mass(self, temperature: float) -> float:
        """Quasiparticle mass m(T) in fm^-1."""
        return float(np.hypot(self.vacuum_mass, self.thermal_mass_coefficient * temperature))

    def mass_derivative(self, temperature: float) -> float:
        """dm/dT."""
        return self.thermal_mass_coefficient**2 * temperature / self.mass(temperature)

    def z_quasiparticle(self, temperature: float) -> float:
        """Mass-to-temperature ratio z = m/T."""
        self._check_temperature(temperature)
        return self.mass(temperature) / temperature

    def mdmdT_quasiparticle(self, temperature: float) -> float:
        """Mass-derivative term m dm/dT."""
        self._check_temperature(temperature)
        return self.thermal_mass_coefficient**2 * temperature

    def equilibrium_bag(self, temperature: float) -> float:
        """Equilibrium bag function B_eq(T) in fm^-4."""
        self._check_temperature(temperature)
        return float(self._bag_solution(temperature)[0])

    # Thermodynamics

    def kinetic_pressure(self, temperature: float) -> float:
        """Pressure of the quasiparticle gas without the bag contribution."""
        z = self.z_quasiparticle(temperature)
        return self._prefactor * temperature**4 * z**2 * special.kn(2, z)

    def kinetic_energy_density(self, temperature: float) -> float:
        """Energy density of the quasiparticle gas without the bag contribution."""
        z = self.z_quasiparticle(temperature)
        return (
            self._prefactor
            * temperature**4
            * (3.0 * z**2 * special.kn(2, z) + z**3 * special.kn(1, z))
        )

    def energy_density(self, temperature: float) -> float:
        return self.kinetic_energy_density(temperature) + self.equilibrium_bag(temperature)

    def pressure(self, temperature: float) -> float:
        return self.kinetic_pressure(temperature) - self.equilibrium_bag(temperature)

    def entropy_density(self, temperature: float) -> float:
        self._check_temperature(temperature)
        m = self.mass(temperature)
        return self._prefactor * m**3 * special.kn(3, m / temperature)

    def entropy_density_derivative(self, temperature: float) -> float:
        """ds/dT, which also equals (de/dT) / T."""
        self._check_temperature(temperature)
        m = self.mass(temperature)
        dm = self.mass_derivative(temperature)
        z = m / temperature
        dz = (dm * temperature - m) / temperature**2
        k3 = special.kn(3, z)
        dk3 = -special.kn(2, z) - 3.0 * k3 / z
        return self._prefactor * (3.0 * m**2 * dm * k3 + m**3 * dk3 * dz)

    def speed_of_sound_squared(self, temperature: float) -> float:
        return self.entropy_density(temperature) / (
            temperature * self.entropy_density_derivative(temperature)
        )

    def shear_viscosity_to_entropy(self, temperature: float) -> float:
        self._check_temperature(temperature)
        return self.eta_over_s

    def bulk_viscosity_to_entropy(self, temperature: float) -> float:
        cs2 = self.speed_of_sound_squared(temperature)
        return 15.0 * self.eta_over_s * (1.0 / 3.0 - cs2) ** 2

    def __repr__(self) -> str:
        return (
            f"QuasiparticleEOS(m0={self.vacuum_mass}, a={self.thermal_mass_coefficient}, "
            f"g={self.degeneracy:.3f}, eta/s={self.eta_over_s})"
        )
