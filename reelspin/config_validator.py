"""
Configuration validation and startup checks.

Settings are read from the environment once, validated, and the process refuses
to start when a value is unusable rather than spinning with a half-broken setup.
"""

import os
import sys
import warnings
from typing import List, Optional

DEFAULT_MACHINES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'machines')
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


class ConfigValidationError(Exception):
    """Raised when critical configuration is missing or invalid."""
    pass


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ('true', '1', 't', 'yes')


class ConfigValidator:
    """Validates the reelspin environment settings."""

    def __init__(self, environ=None):
        """
        Args:
            environ: Mapping to read settings from, defaults to ``os.environ``.
        """
        self.environ = environ if environ is not None else os.environ
        self.errors: List[str] = []
        self.warnings: List[str] = []

    def _positive_int(self, var_name: str, default: int) -> int:
        raw = self.environ.get(var_name)
        if raw is None or raw.strip() == '':
            return default
        try:
            value = int(raw)
        except ValueError:
            self.errors.append(f"{var_name} must be an integer, got '{raw}'")
            return default
        if value <= 0:
            self.errors.append(f"{var_name} must be a positive integer, got {value}")
        return value

    def validate_machines_dir(self) -> str:
        machines_dir = self.environ.get('REELSPIN_MACHINES_DIR') or DEFAULT_MACHINES_DIR
        if not os.path.isdir(machines_dir):
            self.errors.append(f"REELSPIN_MACHINES_DIR '{machines_dir}' is not a directory")
        return machines_dir

    def validate_log_config(self):
        level = (self.environ.get('REELSPIN_LOG_LEVEL') or 'INFO').upper()
        if level not in LOG_LEVELS:
            self.errors.append(f"REELSPIN_LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got '{level}'")
        json_logs = _env_flag(self.environ.get('REELSPIN_JSON_LOGS', 'True'))
        return level, json_logs

    def validate_rng_seed(self) -> Optional[int]:
        raw = self.environ.get('REELSPIN_RNG_SEED')
        if raw is None or raw.strip() == '':
            return None
        try:
            seed = int(raw)
        except ValueError:
            self.errors.append(f"REELSPIN_RNG_SEED must be an integer, got '{raw}'")
            return None
        self.warnings.append("REELSPIN_RNG_SEED is set: spins are reproducible and must not be used for real play")
        return seed

    def validate_all(self) -> dict:
        """
        Validate all settings.

        Returns:
            Dictionary containing validated configuration values

        Raises:
            ConfigValidationError: If any setting is invalid
        """
        config = {}
        config['MACHINES_DIR'] = self.validate_machines_dir()
        config['LOG_LEVEL'], config['JSON_LOGS'] = self.validate_log_config()
        config['CONFIG_CACHE_TTL'] = self._positive_int('REELSPIN_CONFIG_CACHE_TTL', 300)
        config['MAX_SIMULATION_SPINS'] = self._positive_int('REELSPIN_MAX_SIMULATION_SPINS', 1_000_000)
        config['RNG_SEED'] = self.validate_rng_seed()

        if self.errors:
            error_msg = "Configuration validation failed:\n" + "\n".join(f"  - {error}" for error in self.errors)
            raise ConfigValidationError(error_msg)

        for warning in self.warnings:
            warnings.warn(warning, UserWarning)

        return config


def validate_settings() -> dict:
    """
    Validate settings with fail-fast behavior.

    Raises:
        SystemExit: If validation fails
    """
    try:
        return ConfigValidator().validate_all()
    except ConfigValidationError as e:
        print("\nCONFIGURATION VALIDATION FAILED\n", file=sys.stderr)
        print(str(e), file=sys.stderr)
        print("\nStartup aborted.\n", file=sys.stderr)
        sys.exit(1)
