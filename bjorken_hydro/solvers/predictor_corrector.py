"""
Fixed-step predictor-corrector evolution of Bjorken flow.

Each step is a two-stage explicit Runge-Kutta (Heun) update of the
six-component state vector. Primitive variables are reconstructed after the
predictor and after the final average, so the derivatives of each stage are
evaluated on a self-consistent (conserved, primitive, tau) triple.
"""

from dataclasses import dataclass

from ..core.fields import ConfigurationError, ConservedState, FieldValidationError, FluidState
from ..core.performance import profile_operation
from ..equations.evolution import EvolutionEquations
from ..utils.logging_config import HydroLoggerMixin
from ..utils.output import Recorder, sample_observables
from .primitives import PrimitiveVariableSolver


@dataclass(frozen=True)
class EvolutionResult:
    """Outcome of a completed evolution."""

    final_state: FluidState
    steps_completed: int
    samples_recorded: int


class TimeEvolutionEngine(HydroLoggerMixin):
    """
    Heun predictor-corrector integrator.

    One step from (X, u, e, p) at tau:

        X_mid = X + dtau f(X, u, e, p, tau)
        (u, e, p)_mid = reconstruct(X_mid, tau + dtau)
        X_end = X_mid + dtau f(X_mid, (u, e, p)_mid, tau + dtau)
        X_new = (X + X_end) / 2
        (u, e, p)_new = reconstruct(X_new, tau + dtau)

    Any reconstruction or equation-of-state failure aborts the evolution.
    """

    def __init__(
        self,
        equations: EvolutionEquations,
        reconstructor: PrimitiveVariableSolver,
        timestep: float,
    ):
        """
        Initialize engine.

        Args:
            equations: Right-hand side of the evolution system
            reconstructor: Primitive-variable solver
            timestep: Fixed proper-time step in fm
        """
        if not timestep > 0.0:
            raise ValueError(f"Timestep must be positive, got {timestep}")
        self.equations = equations
        self.reconstructor = reconstructor
        self.timestep = timestep

    @property
    def transport_calculator(self):
        return self.equations.transport_calculator

    def synchronize(self, conserved: ConservedState, tau: float) -> FluidState:
        """Build a fully consistent fluid state from the state vector at tau."""
        primitives = self.reconstructor.reconstruct(conserved, tau)
        transport = self.transport_calculator.evaluate(
            primitives.e, primitives.p, tau, conserved.Pi
        )
        return FluidState(tau=tau, conserved=conserved, primitives=primitives, transport=transport)

    def advance(self, state: FluidState) -> FluidState:
        """
        Advance the fluid state by one timestep.

        Args:
            state: Self-consistent state at tau

        Returns:
            Self-consistent state at tau + dtau

        Raises:
            ReconstructionError: If a stage has no physical primitive solution
            EquationOfStateError: If the equation of state rejects a stage
        """
        dtau = self.timestep
        tau = state.tau
        X = state.conserved

        # Predictor
        derivative = self.equations.derivatives(X, state.primitives, tau, state.transport)
        X_mid = X.euler_step(derivative, dtau)
        primitives_mid = self.reconstructor.reconstruct(X_mid, tau + dtau)

        # Corrector
        derivative_mid = self.equations.derivatives(X_mid, primitives_mid, tau + dtau)
        X_end = X_mid.euler_step(derivative_mid, dtau)

        return self.synchronize(X.heun_average(X_end), tau + dtau)

    def run(
        self,
        state: FluidState,
        n_steps: int,
        recorder: Recorder | None = None,
        timesteps_per_write: int = 1,
        reference_energy_density: float | None = None,
    ) -> EvolutionResult:
        """
        Evolve for a fixed number of steps.

        A sample is recorded for the initial state and after every
        timesteps_per_write-th step. The recorder is closed on completion and
        on every error path.

        Args:
            state: Initial self-consistent state
            n_steps: Number of steps to take
            recorder: Optional sink for sampled observables
            timesteps_per_write: Output cadence in steps
            reference_energy_density: e0 for normalised output, initial e by default

        Returns:
            EvolutionResult with the final state and counters
        """
        if n_steps < 0:
            raise ValueError(f"Number of steps must be non-negative, got {n_steps}")
        if timesteps_per_write < 1:
            raise ConfigurationError(
                f"timesteps_per_write must be at least 1, got {timesteps_per_write}"
            )

        e0 = reference_energy_density if reference_energy_density is not None else state.e
        samples = 0
        self.transport_calculator.check_timestep(state.transport, self.timestep)
        self.logger.info(
            f"Evolving {n_steps} steps of {self.timestep} fm from tau = {state.tau} fm"
        )

        with profile_operation("time_evolution", {"n_steps": n_steps}):
            try:
                if recorder is not None:
                    recorder.open()
                    recorder.record(sample_observables(state, e0))
                    samples += 1

                for step in range(n_steps):
                    try:
                        state = self.advance(state)
                    except FieldValidationError as exc:
                        self.logger.error(
                            f"Evolution aborted at step {step + 1}/{n_steps} "
                            f"(tau = {state.tau:.6f} fm): {exc}"
                        )
                        raise

                    if recorder is not None and (step + 1) % timesteps_per_write == 0:
                        recorder.record(sample_observables(state, e0))
                        samples += 1
                        self.logger.debug(
                            f"Sample at tau = {state.tau:.4f} fm, e/e0 = {state.e / e0:.6e}"
                        )
            finally:
                if recorder is not None:
                    recorder.close()

        self.logger.info(f"Evolution finished at tau = {state.tau:.6f} fm ({samples} samples)")
        return EvolutionResult(final_state=state, steps_completed=n_steps, samples_recorded=samples)
