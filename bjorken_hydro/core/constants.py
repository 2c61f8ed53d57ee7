"""
Physical constants and unit conventions for Bjorken flow hydrodynamics.

All quantities are in natural units (c = ħ = k_B = 1) with lengths in fm,
so temperatures are in fm^-1 and energy densities in fm^-4.
"""

import numpy as np

# Unit conversion constants
GEV_TO_INVERSE_FM = 5.067731  # 1 GeV = 5.067731 fm^-1
INVERSE_FM_TO_GEV = 1.0 / GEV_TO_INVERSE_FM

# Quark-gluon plasma degrees of freedom (2+1 flavours, Stefan-Boltzmann)
QGP_DEGREES_OF_FREEDOM = 47.5

# Root-finding tolerance
TOLERANCE_STRICT = 1e-14

# Four-velocity normalization tolerance |u.u - 1|
NORMALIZATION_TOLERANCE = 1e-8

# Thermodynamic limits
TEMPERATURE_MIN = 0.01  # fm^-1 (about 2 MeV)
TEMPERATURE_MAX = 50.0  # fm^-1 (about 10 GeV)
ENERGY_DENSITY_MIN = 1e-15

# Default run parameters
DEFAULT_INITIAL_TEMPERATURE = 0.5 * GEV_TO_INVERSE_FM
DEFAULT_INITIAL_TIME = 0.25  # fm
DEFAULT_FINAL_TIME = 100.0  # fm
DEFAULT_TIMESTEP = 0.01  # fm
DEFAULT_TIMESTEPS_PER_WRITE = 10
DEFAULT_ETA_OVER_S = 0.2

# Glasma initial anisotropy: PL = 0.014925 e/3, PT = 1.4925 e/3
GLASMA_LONGITUDINAL_FRACTION = 0.014925
GLASMA_TRANSVERSE_FRACTION = 1.4925

# Milne coordinates (tau, x, y, eta) with metric diag(1, -1, -1, -tau^2)
MILNE_COORDINATES = ["tau", "x", "y", "eta"]


def gev_to_inverse_fm(value_gev: float) -> float:
    """Convert an energy in GeV to fm^-1."""
    return value_gev * GEV_TO_INVERSE_FM


def inverse_fm_to_gev(value_fm: float) -> float:
    """Convert an energy in fm^-1 to GeV."""
    return value_fm * INVERSE_FM_TO_GEV


def validate_temperature(temperature: float) -> bool:
    """
    Validate temperature for thermodynamic calculations.

    Args:
        temperature: Temperature in fm^-1

    Returns:
        True if valid

    Raises:
        ValueError: If temperature is not positive and finite
    """
    if not np.isfinite(temperature):
        raise ValueError(f"Temperature must be finite, got {temperature}")
    if temperature <= 0.0:
        raise ValueError(f"Temperature must be positive, got {temperature}")
    return True


def validate_transport_coefficient(coefficient: float, name: str) -> bool:
    """
    Validate a transport coefficient (viscosity ratio, relaxation time).

    Raises:
        ValueError: If coefficient is negative or not finite
    """
    if coefficient < 0.0:
        raise ValueError(f"{name} must be non-negative, got {coefficient}")
    if not np.isfinite(coefficient):
        raise ValueError(f"{name} must be finite, got {coefficient}")
    return True
