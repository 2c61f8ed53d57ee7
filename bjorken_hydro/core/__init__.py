"""
Core module for Bjorken flow hydrodynamics.

State types, error taxonomy, run configuration, physical constants and
profiling utilities shared by the rest of the package.
"""

from .config import BjorkenConfig, ClosureType, InitialConditionType
from .constants import (
    DEFAULT_ETA_OVER_S,
    DEFAULT_FINAL_TIME,
    DEFAULT_INITIAL_TEMPERATURE,
    DEFAULT_INITIAL_TIME,
    DEFAULT_TIMESTEP,
    DEFAULT_TIMESTEPS_PER_WRITE,
    GEV_TO_INVERSE_FM,
    gev_to_inverse_fm,
    inverse_fm_to_gev,
)
from .fields import (
    ConfigurationError,
    ConservedState,
    EquationOfStateError,
    FieldValidationError,
    FluidState,
    PrimitiveVariables,
    ReconstructionError,
    TransportState,
)
from .performance import monitor_performance, performance_report, profile_operation

__all__ = [
    # Configuration
    "BjorkenConfig",
    "ClosureType",
    "InitialConditionType",
    # Constants
    "DEFAULT_ETA_OVER_S",
    "DEFAULT_FINAL_TIME",
    "DEFAULT_INITIAL_TEMPERATURE",
    "DEFAULT_INITIAL_TIME",
    "DEFAULT_TIMESTEP",
    "DEFAULT_TIMESTEPS_PER_WRITE",
    "GEV_TO_INVERSE_FM",
    "gev_to_inverse_fm",
    "inverse_fm_to_gev",
    # State and errors
    "ConfigurationError",
    "ConservedState",
    "EquationOfStateError",
    "FieldValidationError",
    "FluidState",
    "PrimitiveVariables",
    "ReconstructionError",
    "TransportState",
    # Profiling
    "monitor_performance",
    "performance_report",
    "profile_operation",
]
