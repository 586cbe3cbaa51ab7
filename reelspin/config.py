"""
Settings module with fail-fast validation.

Values come from the environment (a local .env file is loaded first) and are
validated once at import time.
"""
import os

from dotenv import load_dotenv

from reelspin.config_validator import validate_settings

load_dotenv()


class Config:
    """Runtime settings shared by the HTTP app and the CLI."""

    _validated_config = validate_settings()

    # Machine definitions: <MACHINES_DIR>/<name>/machine.json
    MACHINES_DIR = _validated_config['MACHINES_DIR']
    CONFIG_CACHE_TTL = _validated_config['CONFIG_CACHE_TTL']

    # Logging
    LOG_LEVEL = _validated_config['LOG_LEVEL']
    JSON_LOGS = _validated_config['JSON_LOGS']

    # Simulation guard rail
    MAX_SIMULATION_SPINS = _validated_config['MAX_SIMULATION_SPINS']

    # None -> secrets.SystemRandom
    RNG_SEED = _validated_config['RNG_SEED']

    JSON_SORT_KEYS = False


class TestingConfig(Config):
    TESTING = True
    MACHINES_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), 'tests', 'test_data', 'machines')
    CONFIG_CACHE_TTL = 1
    LOG_LEVEL = 'DEBUG'
    JSON_LOGS = False
    MAX_SIMULATION_SPINS = 1000
    RNG_SEED = 1234
