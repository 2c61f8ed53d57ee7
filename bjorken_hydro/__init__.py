"""
Bjorken Flow Hydrodynamics Package

Second-order viscous evolution of a boost-invariant, transversally
homogeneous relativistic fluid with a quasiparticle equation of state.
"""

# Initialize logging system early
from .utils.logging_config import setup_from_environment

setup_from_environment()

__version__ = "0.1.0"
__author__ = "Relativistic Hydrodynamics Team"

from . import (
    benchmarks,
    core,
    equations,
    solvers,
    utils,
)
