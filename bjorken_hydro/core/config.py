"""
Run configuration for Bjorken flow evolution.

Closure selection and the initial-condition family are explicit
enumerations resolved once at startup, so a single installation can run any
mode and tests can parametrize over them.
"""

import math
import os
from dataclasses import dataclass
from enum import Enum
from pathlib import Path

from .constants import (
    DEFAULT_ETA_OVER_S,
    DEFAULT_FINAL_TIME,
    DEFAULT_INITIAL_TEMPERATURE,
    DEFAULT_INITIAL_TIME,
    DEFAULT_TIMESTEP,
    DEFAULT_TIMESTEPS_PER_WRITE,
    gev_to_inverse_fm,
    validate_temperature,
    validate_transport_coefficient,
)
from .fields import ConfigurationError


class ClosureType(Enum):
    """Relaxation-time closure."""

    KINETIC = "kinetic"  # quasiparticle kinetic theory
    FIXED_MASS = "fixed_mass"  # m/T << 1 asymptotic closure


class InitialConditionType(Enum):
    """Initial-condition family at tau0."""

    EQUILIBRIUM = "equilibrium"  # dissipative quantities at Navier-Stokes values
    GLASMA = "glasma"  # fixed PL/PT anisotropy


@dataclass(frozen=True)
class BjorkenConfig:
    """
    Fixed parameters of a single Bjorken flow run.

    Args:
        initial_temperature: T0 in fm^-1
        initial_time: tau0 in fm
        final_time: tauf in fm
        timestep: Fixed proper-time step dtau in fm
        timesteps_per_write: Output cadence in steps
        closure: Relaxation-time closure
        initial_conditions: Initial-condition family
        eta_over_s: Specific shear viscosity
        output_directory: Destination for per-observable data files
    """

    initial_temperature: float = DEFAULT_INITIAL_TEMPERATURE
    initial_time: float = DEFAULT_INITIAL_TIME
    final_time: float = DEFAULT_FINAL_TIME
    timestep: float = DEFAULT_TIMESTEP
    timesteps_per_write: int = DEFAULT_TIMESTEPS_PER_WRITE
    closure: ClosureType = ClosureType.FIXED_MASS
    initial_conditions: InitialConditionType = InitialConditionType.EQUILIBRIUM
    eta_over_s: float = DEFAULT_ETA_OVER_S
    output_directory: Path = Path("results")

    def __post_init__(self) -> None:
        # Accept plain strings for the enumerations and the output path
        object.__setattr__(self, "closure", ClosureType(self.closure))
        object.__setattr__(
            self, "initial_conditions", InitialConditionType(self.initial_conditions)
        )
        object.__setattr__(self, "output_directory", Path(self.output_directory))
        self._validate()

    def _validate(self) -> None:
        try:
            validate_temperature(self.initial_temperature)
            validate_transport_coefficient(self.eta_over_s, "eta_over_s")
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc

        if not self.initial_time > 0.0:
            raise ConfigurationError(f"Initial time must be positive, got {self.initial_time}")
        if not self.timestep > 0.0:
            raise ConfigurationError(f"Timestep must be positive, got {self.timestep}")
        if not self.final_time > self.initial_time:
            raise ConfigurationError(
                f"Final time {self.final_time} must exceed initial time {self.initial_time}"
            )
        if self.timesteps_per_write < 1:
            raise ConfigurationError(
                f"timesteps_per_write must be at least 1, got {self.timesteps_per_write}"
            )
        if self.n_steps == 0:
            raise ConfigurationError(
                f"Time window ({self.initial_time}, {self.final_time}) is shorter than "
                f"one step of {self.timestep}"
            )

    @property
    def n_steps(self) -> int:
        """Number of fixed steps, floor((tauf - tau0) / dtau)."""
        return int(math.floor((self.final_time - self.initial_time) / self.timestep))

    @classmethod
    def from_environment(cls) -> "BjorkenConfig":
        """
        Build a configuration from environment variables.

        Environment Variables:
            BJORKEN_HYDRO_T0: Initial temperature in GeV (default: 0.5)
            BJORKEN_HYDRO_TAU0: Initial time in fm (default: 0.25)
            BJORKEN_HYDRO_TAUF: Final time in fm (default: 100.0)
            BJORKEN_HYDRO_DTAU: Step size in fm (default: 0.01)
            BJORKEN_HYDRO_WRITE_EVERY: Steps per sample (default: 10)
            BJORKEN_HYDRO_CLOSURE: "kinetic" or "fixed_mass" (default: fixed_mass)
            BJORKEN_HYDRO_INITIAL: "equilibrium" or "glasma" (default: equilibrium)
            BJORKEN_HYDRO_ETA_OVER_S: Specific shear viscosity (default: 0.2)
            BJORKEN_HYDRO_OUTPUT: Output directory (default: results)
        """
        try:
            return cls(
                initial_temperature=gev_to_inverse_fm(
                    float(os.getenv("BJORKEN_HYDRO_T0", "0.5"))
                ),
                initial_time=float(os.getenv("BJORKEN_HYDRO_TAU0", str(DEFAULT_INITIAL_TIME))),
                final_time=float(os.getenv("BJORKEN_HYDRO_TAUF", str(DEFAULT_FINAL_TIME))),
                timestep=float(os.getenv("BJORKEN_HYDRO_DTAU", str(DEFAULT_TIMESTEP))),
                timesteps_per_write=int(
                    os.getenv("BJORKEN_HYDRO_WRITE_EVERY", str(DEFAULT_TIMESTEPS_PER_WRITE))
                ),
                closure=os.getenv("BJORKEN_HYDRO_CLOSURE", ClosureType.FIXED_MASS.value).lower(),
                initial_conditions=os.getenv(
                    "BJORKEN_HYDRO_INITIAL", InitialConditionType.EQUILIBRIUM.value
                ).lower(),
                eta_over_s=float(
                    os.getenv("BJORKEN_HYDRO_ETA_OVER_S", str(DEFAULT_ETA_OVER_S))
                ),
                output_directory=Path(os.getenv("BJORKEN_HYDRO_OUTPUT", "results")),
            )
        except ValueError as exc:
            if isinstance(exc, ConfigurationError):
                raise
            raise ConfigurationError(f"Invalid environment configuration: {exc}") from exc
