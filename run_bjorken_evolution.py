#!/usr/bin/env python3
"""
Bjorken Flow Evolution - Single Run

Evolves a boost-invariant viscous fluid from tau0 to tauf and writes one
'.dat' file per observable to the output directory.

Configuration is read from BJORKEN_HYDRO_* environment variables (see
BjorkenConfig.from_environment), for example:

    BJORKEN_HYDRO_CLOSURE=kinetic BJORKEN_HYDRO_TAUF=20 python run_bjorken_evolution.py
"""

import sys

from bjorken_hydro.benchmarks.bjorken_flow import BjorkenSimulation
from bjorken_hydro.core.config import BjorkenConfig
from bjorken_hydro.core.constants import inverse_fm_to_gev
from bjorken_hydro.core.fields import ConfigurationError, FieldValidationError
from bjorken_hydro.utils.logging_config import get_logger
from bjorken_hydro.utils.output import DatFileRecorder

logger = get_logger("run_bjorken_evolution")


def main() -> int:
    """Run one evolution; return the process exit status."""
    try:
        config = BjorkenConfig.from_environment()
    except ConfigurationError as exc:
        logger.error(f"Invalid configuration: {exc}")
        return 1

    print("BJORKEN FLOW EVOLUTION")
    print("=" * 50)
    print(f"T0        = {inverse_fm_to_gev(config.initial_temperature):.4f} GeV")
    print(f"tau0      = {config.initial_time} fm")
    print(f"tauf      = {config.final_time} fm")
    print(f"dtau      = {config.timestep} fm ({config.n_steps} steps)")
    print(f"closure   = {config.closure.value}")
    print(f"initial   = {config.initial_conditions.value}")
    print(f"output    = {config.output_directory}")
    print()

    try:
        simulation = BjorkenSimulation(config)
        result = simulation.run(DatFileRecorder(config.output_directory))
    except FieldValidationError as exc:
        logger.error(f"Evolution failed: {exc}")
        return 1

    final = result.final_state
    print(f"Final tau = {final.tau:.4f} fm, T = {inverse_fm_to_gev(final.transport.T):.6f} GeV")
    print(f"e/e0      = {final.e / result.initial_state.e:.6e}")
    print(f"Runtime   = {result.wall_time:.1f} s ({result.samples_recorded} samples)")
    print("Done")
    return 0


if __name__ == "__main__":
    sys.exit(main())
