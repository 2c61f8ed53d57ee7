"""
State variables for boost-invariant Bjorken flow.

This module defines the value types that flow through the time-evolution
engine: the six-component conserved/dissipative vector, the primitive
variables reconstructed from it, the bookkeeping transport scalars and the
full fluid state at a given proper time.
"""

from dataclasses import dataclass, fields

import numpy as np

from .constants import NORMALIZATION_TOLERANCE


class FieldValidationError(Exception):
    """Exception for field validation errors."""
    pass


class EquationOfStateError(FieldValidationError):
    """Non-physical input passed to the equation of state."""
    pass


class ReconstructionError(FieldValidationError):
    """No physical primitive-variable solution for the conserved quantities."""
    pass


class ConfigurationError(ValueError):
    """Inconsistent run configuration."""
    pass


@dataclass(frozen=True)
class ConservedState:
    """
    Conserved and dissipative quantities evolved by the integrator.

    Components of T^{tau mu} in Milne coordinates together with the shear
    stress scalar pi = -tau^2 pi^{eta eta} and the bulk pressure Pi, all in
    fm^-4. Instances are immutable; arithmetic returns new values, so a
    derivative is itself a ConservedState.
    """

    Ttt: float
    Ttx: float
    Tty: float
    Ttn: float
    pi: float
    Pi: float

    def __add__(self, other: "ConservedState") -> "ConservedState":
        if not isinstance(other, ConservedState):
            return NotImplemented
        return ConservedState.from_array(self.as_array() + other.as_array())

    def __mul__(self, factor: float) -> "ConservedState":
        return ConservedState.from_array(float(factor) * self.as_array())

    __rmul__ = __mul__

    def as_array(self) -> np.ndarray:
        """Return components as (Ttt, Ttx, Tty, Ttn, pi, Pi)."""
        return np.array([self.Ttt, self.Ttx, self.Tty, self.Ttn, self.pi, self.Pi])

    @classmethod
    def from_array(cls, values: np.ndarray) -> "ConservedState":
        values = np.asarray(values, dtype=float)
        if values.shape != (6,):
            raise ValueError(f"State vector must have 6 components, got shape {values.shape}")
        return cls(*(float(v) for v in values))

    def euler_step(self, derivative: "ConservedState", dtau: float) -> "ConservedState":
        """Explicit Euler update X + dtau * dX/dtau."""
        return self + derivative * dtau

    def heun_average(self, other: "ConservedState") -> "ConservedState":
        """Average 0.5 * (self + other) of two time levels."""
        return (self + other) * 0.5

    def is_finite(self) -> bool:
        return bool(np.all(np.isfinite(self.as_array())))

    @property
    def component_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in fields(self))


@dataclass(frozen=True)
class PrimitiveVariables:
    """
    Local rest-frame quantities consistent with a ConservedState.

    Four-velocity components u^mu = (ut, ux, uy, un) in Milne coordinates,
    energy density e and equilibrium pressure p.
    """

    ut: float
    ux: float
    uy: float
    un: float
    e: float
    p: float

    def normalization(self, tau: float) -> float:
        """u.u with metric diag(1, -1, -1, -tau^2)."""
        return self.ut**2 - self.ux**2 - self.uy**2 - tau**2 * self.un**2

    def is_normalized(self, tau: float, tolerance: float = NORMALIZATION_TOLERANCE) -> bool:
        return bool(abs(self.normalization(tau) - 1.0) <= tolerance)

    @classmethod
    def at_rest(cls, e: float, p: float) -> "PrimitiveVariables":
        """Fluid at rest in the comoving frame, u = (1, 0, 0, 0)."""
        return cls(ut=1.0, ux=0.0, uy=0.0, un=0.0, e=e, p=p)


@dataclass(frozen=True)
class TransportState:
    """
    Transport scalars derived from the primitive variables.

    These are recomputed after every step for bookkeeping and output; they do
    not feed back into the conserved quantities.

    Attributes:
        T: Effective temperature (fm^-1)
        cs2: Speed of sound squared
        taupi: Shear relaxation time (fm)
        taubulk: Bulk relaxation time (fm)
        piNS: Navier-Stokes shear stress (fm^-4)
        bulkNS: Navier-Stokes bulk pressure (fm^-4)
        B: Quasiparticle bag field including its second-order correction
        dB2nd: Second-order correction to the bag field
    """

    T: float
    cs2: float
    taupi: float
    taubulk: float
    piNS: float
    bulkNS: float
    B: float
    dB2nd: float


@dataclass(frozen=True)
class FluidState:
    """Complete, self-consistent fluid state at proper time tau."""

    tau: float
    conserved: ConservedState
    primitives: PrimitiveVariables
    transport: TransportState

    @property
    def e(self) -> float:
        return self.primitives.e

    @property
    def p(self) -> float:
        return self.primitives.p

    @property
    def pi(self) -> float:
        return self.conserved.pi

    @property
    def Pi(self) -> float:
        return self.conserved.Pi

    @property
    def longitudinal_pressure(self) -> float:
        """P_L = p + Pi - pi."""
        return self.p + self.Pi - self.pi

    @property
    def transverse_pressure(self) -> float:
        """P_T = p + Pi + pi/2."""
        return self.p + self.Pi + 0.5 * self.pi
