"""
Centralized logging configuration for Bjorken flow hydrodynamics.

All package loggers live under the 'bjorken_hydro' namespace. Besides the
package logger there are three optional diagnostic channels, each with its
own handlers and no propagation:

- performance: run timing from the simulation driver
- solvers: the evolution engine and the primitive-variable solver
- physics: self-consistency checks and root-finder convergence

Output can go to the console, a rotating log file, or through structlog.
"""

import logging
import logging.config
import logging.handlers
import os
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import structlog

ROOT_LOGGER_NAME = "bjorken_hydro"

SOLVER_LOGGERS = ("TimeEvolutionEngine", "PrimitiveVariableSolver")

_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
_FORMATTERS = {
    "console": {
        "format": "%(asctime)s | %(name)-20s | %(levelname)-8s | %(message)s",
        "datefmt": _DATE_FORMAT,
    },
    "detailed": {
        "format": (
            "%(asctime)s | %(name)-20s | %(levelname)-8s | "
            "%(filename)s:%(lineno)d | %(funcName)s | %(message)s"
        ),
        "datefmt": _DATE_FORMAT,
    },
}


class HydroLoggerMixin:
    """Gives a class a logger named after it."""

    @property
    def logger(self) -> logging.Logger:
        return get_logger(self.__class__.__name__)


def get_logger(name: str) -> logging.Logger:
    """
    Logger in the package namespace.

    Args:
        name: Module or class name

    Returns:
        The 'bjorken_hydro.<name>' logger
    """
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def _channel(level: str, handlers: list[str]) -> dict[str, Any]:
    return {"level": level, "handlers": list(handlers), "propagate": False}


def _base_config(level: str, format_type: str, log_file: Path | None) -> dict[str, Any]:
    handlers: dict[str, Any] = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "console" if format_type == "console" else "detailed",
            "stream": "ext://sys.stdout",
        },
    }
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": level,
            "formatter": "detailed",
            "filename": str(log_file),
            "maxBytes": 10 * 1024 * 1024,
            "backupCount": 5,
        }

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {name: dict(spec) for name, spec in _FORMATTERS.items()},
        "handlers": handlers,
        "loggers": {
            ROOT_LOGGER_NAME: _channel(level, list(handlers)),
            "scipy": {"level": "WARNING"},
        },
        "root": {"level": "WARNING", "handlers": ["console"]},
    }


def configure_logging(
    level: str = "INFO",
    format_type: str = "console",
    log_file: Path | None = None,
    enable_performance: bool = False,
    enable_solver_logging: bool = False,
    enable_physics_validation: bool = False,
    enable_debug_mode: bool = False,
) -> None:
    """
    Configure logging for the bjorken_hydro package.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_type: "console", "detailed" or "structured"
        log_file: Optional file path for file logging
        enable_performance: Enable the performance channel
        enable_solver_logging: Enable per-step solver logging
        enable_physics_validation: Enable the physics validation channel
        enable_debug_mode: Force DEBUG on the package and on enabled channels
    """
    level = level.upper()
    config = _base_config(level, format_type, log_file)
    loggers = config["loggers"]
    handlers = loggers[ROOT_LOGGER_NAME]["handlers"]
    channel_level = "DEBUG" if enable_debug_mode else "INFO"

    if enable_performance:
        loggers[f"{ROOT_LOGGER_NAME}.performance"] = _channel("DEBUG", handlers)
    if enable_solver_logging:
        for name in SOLVER_LOGGERS:
            loggers[f"{ROOT_LOGGER_NAME}.{name}"] = _channel(channel_level, handlers)
    if enable_physics_validation:
        loggers[f"{ROOT_LOGGER_NAME}.physics"] = _channel(channel_level, handlers)
    if enable_debug_mode:
        loggers[ROOT_LOGGER_NAME]["level"] = "DEBUG"

    logging.config.dictConfig(config)

    if format_type == "structured":
        _configure_structlog(level)


def _configure_structlog(level: str) -> None:
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer()
            if level == "DEBUG"
            else structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(getattr(logging, level)),
        logger_factory=structlog.PrintLoggerFactory(),
        context_class=dict,
        cache_logger_on_first_use=True,
    )


def _env_flag(name: str) -> bool:
    return os.getenv(f"BJORKEN_HYDRO_LOG_{name}", "false").strip().lower() in ("1", "true", "yes")


def setup_from_environment() -> None:
    """
    Configure logging from environment variables.

    Environment Variables:
        BJORKEN_HYDRO_LOG_LEVEL: Log level (default: INFO)
        BJORKEN_HYDRO_LOG_FORMAT: Format type (default: console)
        BJORKEN_HYDRO_LOG_FILE: Optional log file path
        BJORKEN_HYDRO_LOG_PERFORMANCE: Enable the performance channel
        BJORKEN_HYDRO_LOG_SOLVERS: Enable solver logging
        BJORKEN_HYDRO_LOG_PHYSICS: Enable the physics validation channel
        BJORKEN_HYDRO_LOG_DEBUG: Enable debug mode
    """
    log_file = os.getenv("BJORKEN_HYDRO_LOG_FILE")
    configure_logging(
        level=os.getenv("BJORKEN_HYDRO_LOG_LEVEL", "INFO"),
        format_type=os.getenv("BJORKEN_HYDRO_LOG_FORMAT", "console"),
        log_file=Path(log_file) if log_file else None,
        enable_performance=_env_flag("PERFORMANCE"),
        enable_solver_logging=_env_flag("SOLVERS"),
        enable_physics_validation=_env_flag("PHYSICS"),
        enable_debug_mode=_env_flag("DEBUG"),
    )


class PerformanceLogger:
    """Run timing on the performance channel."""

    def __init__(self, name: str = "performance"):
        self.logger = get_logger(name)

    def log_operation(self, operation: str, duration: float, **kwargs: Any) -> None:
        self.logger.info(
            f"Operation completed: {operation} ({duration:.3f} s)",
            extra={
                "operation": operation,
                "duration_seconds": duration,
                "performance_data": kwargs,
            },
        )


class PhysicsLogger:
    """
    Physics validation on the physics channel.

    Passing checks are logged at DEBUG, failures at WARNING; raising is left
    to the caller.
    """

    def __init__(self, name: str = "physics"):
        self.logger = get_logger(name)

    def log_conservation_check(self, quantity: str, error: float, tolerance: float) -> None:
        passed = error < tolerance
        status = "PASSED" if passed else "FAILED"
        self.logger.log(
            logging.DEBUG if passed else logging.WARNING,
            f"Conservation check {status}: {quantity} (error={error:.3e})",
            extra={"quantity": quantity, "error": error, "tolerance": tolerance, "status": status},
        )

    def log_convergence(
        self, solver: str, iterations: int, residual: float, converged: bool
    ) -> None:
        status = "CONVERGED" if converged else "FAILED"
        self.logger.log(
            logging.DEBUG if converged else logging.WARNING,
            f"Solver {status}: {solver} ({iterations} iterations, residual={residual:.3e})",
            extra={
                "solver": solver,
                "iterations": iterations,
                "residual": residual,
                "converged": converged,
            },
        )


def _package_loggers() -> Iterator[logging.Logger]:
    prefix = f"{ROOT_LOGGER_NAME}."
    for name in list(logging.getLogger().manager.loggerDict):
        if name.startswith(prefix):
            yield logging.getLogger(name)


def set_log_level(level: str) -> None:
    """Adjust the package level and every channel with its own handlers."""
    numeric = getattr(logging, level.upper())
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(numeric)
    for logger in _package_loggers():
        if logger.handlers:
            logger.setLevel(numeric)


def get_logging_status() -> dict[str, Any]:
    """Current level, handler count and active channels."""
    package = logging.getLogger(ROOT_LOGGER_NAME)
    performance = get_logger("performance")
    return {
        "main_level": logging.getLevelName(package.level),
        "performance_enabled": not performance.disabled and bool(performance.handlers),
        "handlers_count": len(package.handlers),
        "active_loggers": [
            logger.name for logger in _package_loggers() if logger.handlers and not logger.disabled
        ],
    }


performance_logger = PerformanceLogger()
physics_logger = PhysicsLogger()
