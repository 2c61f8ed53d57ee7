"""
Bjorken flow simulation driver and analytical references.

Sets up the initial state for a run configuration, wires the equation of
state, closure, reconstructor and integrator together, and provides the
ideal-fluid (entropy-conserving) and Navier-Stokes reference solutions used
for validation.
"""

import time
from dataclasses import dataclass

import numpy as np
from scipy import optimize

from ..core.config import BjorkenConfig, InitialConditionType
from ..core.constants import GLASMA_LONGITUDINAL_FRACTION, GLASMA_TRANSVERSE_FRACTION
from ..core.fields import ConservedState, EquationOfStateError, FluidState
from ..core.performance import monitor_performance
from ..equations.coefficients import TransportCoefficientCalculator, create_relaxation_model
from ..equations.equation_of_state import EquationOfState, QuasiparticleEOS
from ..equations.evolution import EvolutionEquations
from ..solvers.predictor_corrector import TimeEvolutionEngine
from ..solvers.primitives import PrimitiveVariableSolver
from ..utils.logging_config import get_logger, performance_logger
from ..utils.output import Recorder

logger = get_logger("BjorkenSimulation")


class BjorkenFlowSolution:
    """
    Reference solutions for Bjorken flow with a general equation of state.

    The ideal solution follows from entropy conservation s(T(tau)) tau = s0 tau0;
    the first-order solution evaluates the Navier-Stokes shear stress and bulk
    pressure along it.
    """

    def __init__(self, eos: EquationOfState, initial_temperature: float, initial_time: float):
        """
        Args:
            eos: Equation of state
            initial_temperature: T0 in fm^-1
            initial_time: tau0 in fm
        """
        self.eos = eos
        self.T0 = initial_temperature
        self.tau0 = initial_time

        self.epsilon0 = eos.energy_density(initial_temperature)
        self.s0 = eos.entropy_density(initial_temperature)

    def _temperature_at(self, tau: float) -> float:
        target = self.s0 * self.tau0 / tau
        try:
            return float(
                optimize.brentq(
                    lambda T: self.eos.entropy_density(T) - target,
                    self.eos.temperature_min,
                    self.eos.temperature_max,
                    xtol=1e-14,
                )
            )
        except ValueError as exc:
            raise EquationOfStateError(
                f"Ideal Bjorken temperature at tau = {tau} fm outside EOS range"
            ) from exc

    def ideal_solution(self, tau: float | np.ndarray) -> dict[str, np.ndarray]:
        """
        Ideal Bjorken flow at the requested proper times.

        Returns:
            Arrays of time, temperature, energy_density, pressure,
            entropy_density, u_tau, u_eta and expansion_rate (theta = 1/tau)
        """
        tau_array = np.atleast_1d(np.asarray(tau, dtype=float))
        temperature = np.array([self._temperature_at(t) for t in tau_array])

        return {
            "time": tau_array,
            "temperature": temperature,
            "energy_density": np.array([self.eos.energy_density(T) for T in temperature]),
            "pressure": np.array([self.eos.pressure(T) for T in temperature]),
            "entropy_density": self.s0 * self.tau0 / tau_array,
            "u_tau": np.ones_like(tau_array),
            "u_eta": np.zeros_like(tau_array),
            "expansion_rate": 1.0 / tau_array,
        }

    def first_order_viscous_solution(self, tau: float | np.ndarray) -> dict[str, np.ndarray]:
        """Navier-Stokes shear stress and bulk pressure along the ideal solution."""
        ideal = self.ideal_solution(tau)
        enthalpy = ideal["energy_density"] + ideal["pressure"]
        T, tau_array = ideal["temperature"], ideal["time"]

        eta_over_s = np.array([self.eos.shear_viscosity_to_entropy(t) for t in T])
        zeta_over_s = np.array([self.eos.bulk_viscosity_to_entropy(t) for t in T])

        return {
            **ideal,
            "shear_stress": 4.0 * enthalpy * eta_over_s / (3.0 * T * tau_array),
            "bulk_pressure": -enthalpy * zeta_over_s / (T * tau_array),
        }


def estimate_convergence_order(timesteps: list[float], errors: list[float]) -> float:
    """Least-squares slope of log(error) against log(timestep)."""
    if len(timesteps) < 2:
        return 0.0
    slope, _ = np.polyfit(np.log(timesteps), np.log(errors), 1)
    return float(slope)


def initial_conserved_state(
    config: BjorkenConfig,
    eos: EquationOfState,
    transport_calculator: TransportCoefficientCalculator,
) -> ConservedState:
    """
    State vector at tau0 for the configured initial-condition family.

    The fluid starts at rest with e = e(T0). Equilibrium initial conditions
    put pi and Pi at their Navier-Stokes values; glasma initial conditions fix
    the pressure anisotropy PL = 0.014925 e/3, PT = 1.4925 e/3.
    """
    e0 = eos.energy_density(config.initial_temperature)
    p0 = eos.pressure(config.initial_temperature)

    if config.initial_conditions is InitialConditionType.GLASMA:
        PL = GLASMA_LONGITUDINAL_FRACTION * e0 / 3.0
        PT = GLASMA_TRANSVERSE_FRACTION * e0 / 3.0
        pi = 2.0 * (PT - PL) / 3.0
        Pi = 2.0 * PT / 3.0 + PL / 3.0 - p0
    else:
        transport = transport_calculator.evaluate(e0, p0, config.initial_time)
        pi, Pi = transport.piNS, transport.bulkNS

    return ConservedState(Ttt=e0, Ttx=0.0, Tty=0.0, Ttn=0.0, pi=pi, Pi=Pi)


@dataclass(frozen=True)
class SimulationResult:
    """Initial and final states of a run with its bookkeeping."""

    initial_state: FluidState
    final_state: FluidState
    steps_completed: int
    samples_recorded: int
    wall_time: float


class BjorkenSimulation:
    """
    Complete Bjorken flow run for a configuration.

    Builds every collaborator once at construction so the closure and
    initial-condition family are fixed for the lifetime of the run.
    """

    def __init__(self, config: BjorkenConfig, eos: EquationOfState | None = None):
        """
        Initialize simulation.

        Args:
            config: Run configuration
            eos: Equation of state, a QuasiparticleEOS with the configured
                eta/s by default
        """
        self.config = config
        self.eos = eos if eos is not None else QuasiparticleEOS(eta_over_s=config.eta_over_s)

        self.relaxation_model = create_relaxation_model(config.closure, self.eos)
        self.transport_calculator = TransportCoefficientCalculator(
            self.eos, self.relaxation_model
        )
        self.equations = EvolutionEquations(self.transport_calculator)
        self.reconstructor = PrimitiveVariableSolver(self.eos)
        self.engine = TimeEvolutionEngine(self.equations, self.reconstructor, config.timestep)

    def initial_state(self) -> FluidState:
        """Self-consistent fluid state at tau0."""
        conserved = initial_conserved_state(self.config, self.eos, self.transport_calculator)
        return self.engine.synchronize(conserved, self.config.initial_time)

    def reference_solution(self) -> BjorkenFlowSolution:
        return BjorkenFlowSolution(
            self.eos, self.config.initial_temperature, self.config.initial_time
        )

    @monitor_performance("bjorken_simulation")
    def run(self, recorder: Recorder | None = None) -> SimulationResult:
        """
        Evolve from tau0 for floor((tauf - tau0)/dtau) steps.

        Args:
            recorder: Optional sink for sampled observables

        Returns:
            SimulationResult

        Raises:
            FieldValidationError: On any fatal numerical failure
        """
        config = self.config
        logger.info(
            f"Bjorken run: T0 = {config.initial_temperature:.4f} fm^-1, "
            f"tau0 = {config.initial_time} fm, tauf = {config.final_time} fm, "
            f"dtau = {config.timestep} fm, closure = {config.closure.value}, "
            f"initial conditions = {config.initial_conditions.value}"
        )

        start = time.perf_counter()
        initial = self.initial_state()
        result = self.engine.run(
            initial,
            config.n_steps,
            recorder=recorder,
            timesteps_per_write=config.timesteps_per_write,
            reference_energy_density=initial.e,
        )
        elapsed = time.perf_counter() - start

        performance_logger.log_operation(
            "bjorken_simulation",
            elapsed,
            n_steps=result.steps_completed,
            samples=result.samples_recorded,
            closure=config.closure.value,
        )
        return SimulationResult(
            initial_state=initial,
            final_state=result.final_state,
            steps_completed=result.steps_completed,
            samples_recorded=result.samples_recorded,
            wall_time=elapsed,
        )
