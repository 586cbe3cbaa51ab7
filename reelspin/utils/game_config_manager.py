"""
Machine Configuration Manager
Loads machine definitions from disk, validates them and caches them together
with their weight cache.
"""

import json
import logging
import os
import re
import threading
import time
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from marshmallow import ValidationError

from reelspin.error_codes import ErrorCodes
from reelspin.exceptions import NotFoundException, ValidationException
from reelspin.models import MachineConfig
from reelspin.schemas import MachineConfigSchema
from reelspin.utils.spin_handler import build_cache

logger = logging.getLogger(__name__)

MACHINE_FILE_NAME = "machine.json"
_MACHINE_NAME_RE = re.compile(r'^[A-Za-z0-9_-]+$')


class MachineConfigManager:
    """Process-wide cache of validated machine definitions"""

    _machines_dir: Optional[str] = None
    _config_cache: Dict[str, Tuple[MachineConfig, List[int]]] = {}
    _cache_timestamp: Dict[str, float] = {}
    _lock = threading.Lock()
    CACHE_TTL = 300  # 5 minutes cache TTL

    @classmethod
    def configure(cls, machines_dir: str, cache_ttl: Optional[int] = None):
        """Point the manager at a machines directory and drop anything cached from the previous one."""
        with cls._lock:
            cls._machines_dir = machines_dir
            if cache_ttl is not None:
                cls.CACHE_TTL = cache_ttl
            cls._config_cache.clear()
            cls._cache_timestamp.clear()

    @classmethod
    def machines_dir(cls) -> str:
        if cls._machines_dir is None:
            raise RuntimeError("MachineConfigManager.configure() must be called before loading machines")
        return cls._machines_dir

    @classmethod
    def list_machines(cls) -> List[str]:
        base_dir = cls.machines_dir()
        return sorted(
            entry for entry in os.listdir(base_dir)
            if _MACHINE_NAME_RE.match(entry) and os.path.isfile(os.path.join(base_dir, entry, MACHINE_FILE_NAME))
        )

    @classmethod
    def get_machine(cls, name: str) -> Tuple[MachineConfig, List[int]]:
        """
        Get a machine definition and its weight cache.

        Raises:
            NotFoundException: If no machine with that name exists.
            ValidationException: If the machine file is not valid JSON or fails validation.
        """
        current_time = time.time()
        with cls._lock:
            if (name in cls._config_cache and
                    current_time - cls._cache_timestamp.get(name, 0) < cls.CACHE_TTL):
                return cls._config_cache[name]

        config = cls.load_machine_config(name)
        entry = (config, build_cache(config))

        with cls._lock:
            cls._config_cache[name] = entry
            cls._cache_timestamp[name] = current_time
        logger.info(f"Loaded machine '{name}' ({config.num_reels} reels, {config.rows} rows, {len(config.lines)} lines)")
        return entry

    @classmethod
    def load_machine_config(cls, name: str) -> MachineConfig:
        """Read and validate ``<machines_dir>/<name>/machine.json`` without touching the cache."""
        if not isinstance(name, str) or not _MACHINE_NAME_RE.match(name):
            raise NotFoundException(f"Machine '{name}' not found", error_code=ErrorCodes.MACHINE_NOT_FOUND)

        file_path = os.path.join(cls.machines_dir(), name, MACHINE_FILE_NAME)
        if not os.path.isfile(file_path):
            logger.warning(f"Machine definition not found at {file_path}")
            raise NotFoundException(f"Machine '{name}' not found", error_code=ErrorCodes.MACHINE_NOT_FOUND)

        try:
            with open(file_path, 'r') as f:
                raw = json.load(f)
        except json.JSONDecodeError as e:
            logger.error(f"JSON decode error for {file_path}: {e.msg} at line {e.lineno} col {e.colno}")
            raise ValidationException(
                f"Invalid JSON in machine '{name}': {e.msg} (line {e.lineno}, col {e.colno})",
                error_code=ErrorCodes.INVALID_MACHINE_CONFIG
            )

        return cls.parse_machine_config(raw, name)

    @staticmethod
    def parse_machine_config(raw, name: str = 'inline') -> MachineConfig:
        """Validate an already decoded machine definition."""
        try:
            config = MachineConfigSchema().load(raw)
        except ValidationError as e:
            logger.error(f"Machine '{name}' failed validation: {e.messages}")
            raise ValidationException(
                f"Machine '{name}' is not a valid machine definition",
                details={'errors': e.messages},
                error_code=ErrorCodes.INVALID_MACHINE_CONFIG
            )
        if config.name is None:
            config = replace(config, name=name)
        return config

    @classmethod
    def clear_cache(cls, name: Optional[str] = None):
        """Clear configuration cache"""
        with cls._lock:
            if name:
                cls._config_cache.pop(name, None)
                cls._cache_timestamp.pop(name, None)
            else:
                cls._config_cache.clear()
                cls._cache_timestamp.clear()
