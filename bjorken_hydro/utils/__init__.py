"""
Utilities module for Bjorken flow hydrodynamics.

Logging setup and the recorders that sample observables during evolution.
"""

from .logging_config import (
    HydroLoggerMixin,
    PerformanceLogger,
    PhysicsLogger,
    configure_logging,
    get_logger,
    performance_logger,
    physics_logger,
    setup_from_environment,
)
from .output import (
    OBSERVABLE_LABELS,
    CompositeRecorder,
    DatFileRecorder,
    MemoryRecorder,
    Recorder,
    SampleRecord,
    sample_observables,
)

__all__ = [
    "HydroLoggerMixin",
    "PerformanceLogger",
    "PhysicsLogger",
    "configure_logging",
    "get_logger",
    "performance_logger",
    "physics_logger",
    "setup_from_environment",
    "OBSERVABLE_LABELS",
    "CompositeRecorder",
    "DatFileRecorder",
    "MemoryRecorder",
    "Recorder",
    "SampleRecord",
    "sample_observables",
]
