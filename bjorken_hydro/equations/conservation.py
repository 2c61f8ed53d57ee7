"""
Energy-momentum conservation for boost-invariant, transversally homogeneous flow.

In Milne coordinates (tau, x, y, eta) with metric diag(1, -1, -1, -tau^2) and
no spatial gradients, the covariant divergence of

    T^{mu nu} = (e + P) u^mu u^nu - P g^{mu nu} + pi^{mu nu},   P = p + Pi,
    pi^{mu nu} = diag(0, pi/2, pi/2, -pi/tau^2),

reduces to ordinary differential equations for T^{tau mu} with geometric
source terms proportional to 1/tau:

    dTtt/dtau = -(Ttt + P + (e + P) tau^2 un^2 - pi) / tau
    dTtx/dtau = -Ttx / tau
    dTty/dtau = -Tty / tau
    dTtn/dtau = -3 Ttn / tau

The same equations are derived symbolically from the Christoffel symbols in
ConservationLaws for validation.
"""

import functools
from collections.abc import Callable

import sympy as sp

from ..core.constants import MILNE_COORDINATES
from ..core.fields import ConservedState, PrimitiveVariables


def dTtt_dtau(conserved: ConservedState, primitives: PrimitiveVariables, tau: float) -> float:
    """Proper-time derivative of T^{tau tau}."""
    P = primitives.p + conserved.Pi
    enthalpy = primitives.e + P
    return -(conserved.Ttt + P + enthalpy * tau**2 * primitives.un**2 - conserved.pi) / tau


def dTtx_dtau(conserved: ConservedState, primitives: PrimitiveVariables, tau: float) -> float:
    """Proper-time derivative of T^{tau x}."""
    return -conserved.Ttx / tau


def dTty_dtau(conserved: ConservedState, primitives: PrimitiveVariables, tau: float) -> float:
    """Proper-time derivative of T^{tau y}."""
    return -conserved.Tty / tau


def dTtn_dtau(conserved: ConservedState, primitives: PrimitiveVariables, tau: float) -> float:
    """Proper-time derivative of T^{tau eta}."""
    return -3.0 * conserved.Ttn / tau


class ConservationLaws:
    """
    Symbolic energy-momentum conservation in Milne coordinates.

    Builds the Christoffel symbols of the Milne metric and the stress-energy
    tensor of a viscous Bjorken fluid with SymPy, and derives
    d T^{tau nu} / d tau from nabla_mu T^{mu nu} = 0 for a state without
    spatial gradients.
    """

    def __init__(self) -> None:
        self.tau = sp.Symbol(MILNE_COORDINATES[0], positive=True)
        self.x, self.y, self.eta = sp.symbols(MILNE_COORDINATES[1:], real=True)
        self.coordinates = [self.tau, self.x, self.y, self.eta]

        self.e, self.P = sp.symbols("e P", real=True)
        self.pi = sp.Symbol("pi_shear", real=True)
        self.ut, self.ux, self.uy, self.un = sp.symbols("ut ux uy un", real=True)

        self.metric = sp.diag(1, -1, -1, -self.tau**2)
        self.inverse_metric = self.metric.inv()

    @functools.cached_property
    def christoffel_symbols(self) -> list[list[list[sp.Expr]]]:
        """Gamma^lambda_{mu nu} indexed as [lambda][mu][nu]."""
        g, g_inv, x = self.metric, self.inverse_metric, self.coordinates
        return [
            [
                [
                    sp.simplify(
                        sum(
                            g_inv[lam, sig]
                            * (
                                sp.diff(g[sig, nu], x[mu])
                                + sp.diff(g[sig, mu], x[nu])
                                - sp.diff(g[mu, nu], x[sig])
                            )
                            for sig in range(4)
                        )
                        / 2
                    )
                    for nu in range(4)
                ]
                for mu in range(4)
            ]
            for lam in range(4)
        ]

    def stress_energy_tensor(self) -> sp.Matrix:
        """Contravariant T^{mu nu} of the viscous fluid."""
        u = [self.ut, self.ux, self.uy, self.un]
        shear = sp.diag(0, self.pi / 2, self.pi / 2, -self.pi / self.tau**2)
        return sp.Matrix(
            4,
            4,
            lambda m, n: (self.e + self.P) * u[m] * u[n]
            - self.P * self.inverse_metric[m, n]
            + shear[m, n],
        )

    @functools.cached_property
    def symbolic_source_terms(self) -> dict[str, sp.Expr]:
        """
        d T^{tau nu} / d tau for nu = tau, x, y, eta.

        From nabla_mu T^{mu nu} = d_tau T^{tau nu}
        + Gamma^mu_{mu lambda} T^{lambda nu} + Gamma^nu_{mu lambda} T^{mu lambda} = 0.
        """
        gamma = self.christoffel_symbols
        T = self.stress_energy_tensor()
        names = ["Ttt", "Ttx", "Tty", "Ttn"]

        source_terms = {}
        for nu, name in enumerate(names):
            connection = sum(
                gamma[mu][mu][lam] * T[lam, nu] for mu in range(4) for lam in range(4)
            ) + sum(gamma[nu][mu][lam] * T[mu, lam] for mu in range(4) for lam in range(4))
            source_terms[name] = sp.simplify(-connection)
        return source_terms

    def numeric_source_terms(self) -> dict[str, Callable[..., float]]:
        """
        Lambdified source terms.

        Each callable takes (tau, e, P, pi, ut, ux, uy, un).
        """
        arguments = [self.tau, self.e, self.P, self.pi, self.ut, self.ux, self.uy, self.un]
        return {
            name: sp.lambdify(arguments, expr, modules="numpy")
            for name, expr in self.symbolic_source_terms.items()
        }
