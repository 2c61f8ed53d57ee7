"""
Unit tests for logging configuration and runtime controls.

Tests the logging infrastructure, environment variable handling,
and runtime logging control functionality.
"""

import logging
import logging.handlers
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from bjorken_hydro.utils.logging_config import (
    HydroLoggerMixin,
    configure_logging,
    get_logger,
    get_logging_status,
    performance_logger,
    physics_logger,
    set_log_level,
    setup_from_environment,
)


class TestLoggingConfig(unittest.TestCase):
    """Test logging configuration functionality."""

    def setUp(self):
        """Set up test environment."""
        package_logger = logging.getLogger("bjorken_hydro")
        package_logger.handlers.clear()

        for name in list(logging.getLogger().manager.loggerDict.keys()):
            if name.startswith("bjorken_hydro."):
                logger = logging.getLogger(name)
                logger.handlers.clear()
                logger.disabled = False
                logger.setLevel(logging.NOTSET)

    def tearDown(self):
        """Clean up after tests."""
        self.setUp()

    def test_get_logger(self):
        logger = get_logger("test_module")
        self.assertEqual(logger.name, "bjorken_hydro.test_module")

    def test_mixin_uses_class_name(self):
        class TimeEvolutionEngine(HydroLoggerMixin):
            pass

        self.assertEqual(TimeEvolutionEngine().logger.name, "bjorken_hydro.TimeEvolutionEngine")

    def test_basic_logging_configuration(self):
        configure_logging(level="DEBUG", format_type="console")

        logger = get_logger("test")
        self.assertEqual(logger.level, logging.NOTSET)  # Uses parent level

        package_logger = logging.getLogger("bjorken_hydro")
        self.assertTrue(len(package_logger.handlers) > 0)
        self.assertEqual(package_logger.level, logging.DEBUG)

    def test_file_logging_configuration(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            log_file = Path(temp_dir) / "logs" / "run.log"
            configure_logging(level="INFO", log_file=log_file)

            package_logger = logging.getLogger("bjorken_hydro")
            file_handlers = [
                h
                for h in package_logger.handlers
                if isinstance(h, logging.handlers.RotatingFileHandler)
            ]
            self.assertTrue(len(file_handlers) > 0)
            self.assertTrue(log_file.parent.exists())

            for handler in file_handlers:
                handler.close()

    def test_performance_logging_configuration(self):
        configure_logging(enable_performance=True)

        perf_logger = logging.getLogger("bjorken_hydro.performance")
        self.assertTrue(len(perf_logger.handlers) > 0)
        self.assertFalse(perf_logger.propagate)

    def test_solver_logging_configuration(self):
        configure_logging(enable_solver_logging=True, enable_debug_mode=True)

        for name in ["TimeEvolutionEngine", "PrimitiveVariableSolver"]:
            solver_logger = logging.getLogger(f"bjorken_hydro.{name}")
            self.assertTrue(len(solver_logger.handlers) > 0)
            self.assertEqual(solver_logger.level, logging.DEBUG)

    def test_physics_validation_configuration(self):
        configure_logging(enable_physics_validation=True)

        physics = logging.getLogger("bjorken_hydro.physics")
        self.assertTrue(len(physics.handlers) > 0)
        self.assertEqual(physics.level, logging.INFO)

    def test_runtime_log_level_adjustment(self):
        configure_logging(level="INFO")

        set_log_level("DEBUG")
        package_logger = logging.getLogger("bjorken_hydro")
        self.assertEqual(package_logger.level, logging.DEBUG)

        with self.assertRaises(AttributeError):
            set_log_level("INVALID_LEVEL")

    def test_logging_status(self):
        configure_logging(level="INFO", enable_performance=True)

        status = get_logging_status()

        self.assertEqual(status["main_level"], "INFO")
        self.assertTrue(status["performance_enabled"])
        self.assertGreater(status["handlers_count"], 0)
        self.assertIn("bjorken_hydro.performance", status["active_loggers"])

    def test_structured_format(self):
        configure_logging(level="INFO", format_type="structured")

        package_logger = logging.getLogger("bjorken_hydro")
        self.assertTrue(len(package_logger.handlers) > 0)

    @patch.dict(
        os.environ,
        {
            "BJORKEN_HYDRO_LOG_LEVEL": "DEBUG",
            "BJORKEN_HYDRO_LOG_FORMAT": "console",
            "BJORKEN_HYDRO_LOG_PERFORMANCE": "true",
            "BJORKEN_HYDRO_LOG_PHYSICS": "true",
        },
    )
    def test_environment_variable_configuration(self):
        setup_from_environment()

        package_logger = logging.getLogger("bjorken_hydro")
        perf_logger = logging.getLogger("bjorken_hydro.performance")
        physics = logging.getLogger("bjorken_hydro.physics")

        self.assertEqual(package_logger.level, logging.DEBUG)
        self.assertTrue(len(perf_logger.handlers) > 0)
        self.assertTrue(len(physics.handlers) > 0)

    def test_environment_file_logging(self):
        with tempfile.TemporaryDirectory() as temp_dir:
            log_file = Path(temp_dir) / "bjorken.log"
            with patch.dict(os.environ, {"BJORKEN_HYDRO_LOG_FILE": str(log_file)}):
                setup_from_environment()

            package_logger = logging.getLogger("bjorken_hydro")
            file_handlers = [
                h
                for h in package_logger.handlers
                if isinstance(h, logging.handlers.RotatingFileHandler)
            ]
            self.assertTrue(len(file_handlers) > 0)

            for handler in file_handlers:
                handler.close()


class TestLoggerClasses(unittest.TestCase):
    """Test logger utility classes."""

    def setUp(self):
        configure_logging(level="DEBUG", enable_physics_validation=True)

    def test_performance_logger(self):
        with self.assertLogs("bjorken_hydro.performance", level="INFO") as captured:
            performance_logger.log_operation("bjorken_simulation", 1.5, n_steps=75)

        self.assertIn("bjorken_simulation", captured.output[0])

    def test_conservation_check_levels(self):
        with self.assertLogs("bjorken_hydro.physics", level="DEBUG") as captured:
            physics_logger.log_conservation_check("normalization", 1e-12, 1e-8)
            physics_logger.log_conservation_check("normalization", 1e-4, 1e-8)

        self.assertIn("DEBUG", captured.output[0])
        self.assertIn("PASSED", captured.output[0])
        self.assertIn("WARNING", captured.output[1])
        self.assertIn("FAILED", captured.output[1])

    def test_convergence_logging(self):
        with self.assertLogs("bjorken_hydro.physics", level="DEBUG") as captured:
            physics_logger.log_convergence("energy_density_root", 12, 1e-15, True)
            physics_logger.log_convergence("energy_density_root", 200, 1e-3, False)

        self.assertIn("CONVERGED", captured.output[0])
        self.assertIn("FAILED", captured.output[1])


class TestLoggingIntegration(unittest.TestCase):
    """Test logging integration with other components."""

    def test_logger_isolation(self):
        configure_logging(level="INFO")

        logger1 = get_logger("module1")
        logger2 = get_logger("module2")

        self.assertTrue(logger1.name.startswith("bjorken_hydro."))
        self.assertTrue(logger2.name.startswith("bjorken_hydro."))
        self.assertNotEqual(logger1.name, logger2.name)

    def test_third_party_logger_levels(self):
        configure_logging()

        scipy_logger = logging.getLogger("scipy")
        self.assertGreaterEqual(scipy_logger.level, logging.WARNING)


if __name__ == "__main__":
    unittest.main()
