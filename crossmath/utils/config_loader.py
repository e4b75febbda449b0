"""
Configuration Management System for the CrossMath generator.

Settings come from three places, later ones winning:

1. Built-in defaults (``DEFAULTS``)
2. ``crossmath_config.txt``, found by walking up from the package directory
3. ``CROSSMATH_<KEY>`` environment variables

CLI arguments sit on top of all three and are applied by ``run_crossmath``.

Architecture:
- ConfigLoader: Typed access to the merged settings
- Grouped views for generation, solution counter and CLI settings
- Global config singleton via get_config(), rebuilt by reload_config()
"""

import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Union

logger = logging.getLogger(__name__)

__all__ = ["ConfigLoader", "DEFAULTS", "get_config", "reload_config"]

ENV_PREFIX = "CROSSMATH_"
SEARCH_DEPTH = 5

DEFAULTS: Dict[str, Any] = {
    # Generation loop
    "MAX_GENERATION_ATTEMPTS": 1000,
    "GENERATION_TIMEOUT_SECONDS": 0,
    "MAX_OPERATION_SHARE": 0.6,
    "DIFFICULTY_TOLERANCE": 1.0,
    "REMOVAL_JITTER": 0.5,
    "MAX_DUPLICATE_RETRIES": 3,
    # Solution counter
    "SOLVER_MIN_VALUE": 1,
    "SOLVER_MAX_VALUE": 20,
    "SOLUTION_COUNT_LIMIT": 2,
    # CLI defaults
    "DEFAULT_DIFFICULTY": 1,
    "DEFAULT_DIFFICULTIES": "",
    "DEFAULT_PUZZLE_COUNT": 5,
    "DEFAULT_OUTPUT_DIR": "",
}


class ConfigLoader:
    """
    Loads generator settings and hands them out with type conversion.

    Args:
        config_file: File name searched for from the package directory
            upwards, or an absolute path
    """

    def __init__(self, config_file: str = "crossmath_config.txt"):
        self.config_file = config_file
        self.config: Dict[str, Any] = dict(DEFAULTS)
        self.source: Optional[Path] = None

        path = self._find_config_file()
        if path is None:
            logger.warning(f"Config file {config_file} not found, using defaults")
        else:
            self._read_file(path)
        self._apply_environment()

    def _find_config_file(self) -> Optional[Path]:
        directory = Path(__file__).parent
        for _ in range(SEARCH_DEPTH):
            candidate = directory / self.config_file
            if candidate.exists():
                return candidate
            directory = directory.parent
        return None

    def _read_file(self, path: Path):
        logger.info(f"Loading configuration from {path}")
        try:
            lines = path.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            logger.error(f"Failed to read config {path}: {e}")
            return

        loaded = 0
        for number, raw in enumerate(lines, 1):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            key, sep, value = line.partition("=")
            if not sep:
                logger.warning(f"Ignoring config line {number}: {line}")
                continue
            self.config[key.strip()] = self._parse_value(value.strip())
            loaded += 1

        self.source = path
        logger.info(f"Loaded {loaded} settings from {path.name}")

    def _apply_environment(self):
        for name, value in os.environ.items():
            if name.startswith(ENV_PREFIX):
                key = name[len(ENV_PREFIX):]
                self.config[key] = self._parse_value(value.strip())
                logger.debug(f"{key} overridden from environment")

    @staticmethod
    def _parse_value(value: str) -> Union[str, int, float, bool]:
        """Turn a raw setting into a bool, int or float when it looks like one."""
        if value.lower() in ("true", "false"):
            return value.lower() == "true"
        digits = value.lstrip("-").replace(".", "", 1)
        if digits.isdigit():
            return float(value) if "." in value else int(value)
        return value

    def get(self, key: str, default: Any = None) -> Any:
        """Raw value of ``key``, or ``default`` if it is not set."""
        return self.config.get(key, default)

    def _typed(self, key: str, default: Any, cast: Callable[[Any], Any], kind: str):
        value = self.get(key, default)
        try:
            return cast(value)
        except (ValueError, TypeError):
            logger.warning(f"Setting {key}={value!r} is not a valid {kind}, using {default!r}")
            return default

    def get_int(self, key: str, default: int = 0) -> int:
        return self._typed(key, default, int, "integer")

    def get_float(self, key: str, default: float = 0.0) -> float:
        return self._typed(key, default, float, "number")

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key, default)
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, str)):
            return str(value).lower() in ("true", "1", "yes", "on")
        return default

    def get_string(self, key: str, default: str = "") -> str:
        value = self.get(key, default)
        return default if value is None else str(value)

    def get_list_of_ints(self, key: str, default: str = "") -> list:
        """Comma-separated integers, e.g. ``DEFAULT_DIFFICULTIES=1,2``."""

        def split(text):
            return [int(item) for item in text.split(",") if item.strip()]

        try:
            return split(self.get_string(key, default))
        except ValueError:
            logger.warning(f"Setting {key} is not a list of integers, using {default!r}")
            return split(default)

    def get_generation_config(self) -> Dict[str, Any]:
        """Settings of the generate-and-validate loop."""
        return {
            "max_generation_attempts": self.get_int("MAX_GENERATION_ATTEMPTS", 1000),
            "generation_timeout_seconds": self.get_float("GENERATION_TIMEOUT_SECONDS", 0.0),
            "max_operation_share": self.get_float("MAX_OPERATION_SHARE", 0.6),
            "difficulty_tolerance": self.get_float("DIFFICULTY_TOLERANCE", 1.0),
            "removal_jitter": self.get_float("REMOVAL_JITTER", 0.5),
            "max_duplicate_retries": self.get_int("MAX_DUPLICATE_RETRIES", 3),
        }

    def get_solver_config(self) -> Dict[str, Any]:
        """Candidate range and early-exit cap of the solution counter."""
        return {
            "min_value": self.get_int("SOLVER_MIN_VALUE", 1),
            "max_value": self.get_int("SOLVER_MAX_VALUE", 20),
            "solution_count_limit": self.get_int("SOLUTION_COUNT_LIMIT", 2),
        }

    def get_cli_defaults(self) -> Dict[str, Any]:
        """Defaults for run_crossmath arguments."""
        return {
            "difficulty": self.get_int("DEFAULT_DIFFICULTY", 1),
            "difficulties": self.get_list_of_ints("DEFAULT_DIFFICULTIES", ""),
            "count": self.get_int("DEFAULT_PUZZLE_COUNT", 5),
            "output_dir": self.get_string("DEFAULT_OUTPUT_DIR", "") or None,
        }


_config = None


def get_config() -> ConfigLoader:
    """Get global configuration instance."""
    global _config
    if _config is None:
        _config = ConfigLoader()
    return _config


def reload_config() -> ConfigLoader:
    """Re-read configuration (file and environment)."""
    global _config
    _config = ConfigLoader()
    return _config
