'''
Configuration management for the explosive package.

The configuration system follows a layered approach:
1. Default configurations built into the package
2. An optional user configuration file (JSON)
3. Environment variables (``EXPLOSIVE_<SECTION>_<OPTION>``)
4. Runtime modifications through ``set_config``

The simulation engines read their defaults (replication counts, probability
levels, parallel execution, worker count and seed) from here, so a user can
change e.g. the number of Monte Carlo replications for a whole session
without touching call sites.
'''

import json
import logging
import os
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .exceptions import ConfigError
from .types import DEFAULT_PROBS, LogLevel
from .validation import validate_probs

# Set up module-level logger
logger = logging.getLogger("explosive.core.config")

# Constants for configuration paths and environment variables
CONFIG_ENV_PREFIX = "EXPLOSIVE_"
CONFIG_FILE_ENV = "EXPLOSIVE_CONFIG_FILE"
DEFAULT_CONFIG_FILENAME = "explosive_config.json"
DEFAULT_CONFIG_DIR = Path.home() / ".explosive"


@dataclass
class CoreConfig:
    """
    Core configuration settings.

    Attributes:
        random_seed: Default seed for the simulation engines (None for fresh entropy)
    """
    random_seed: Optional[int] = None


@dataclass
class SimulationConfig:
    """
    Defaults for the critical value engines.

    Attributes:
        mc_iterations: Number of Monte Carlo replications
        nboot: Number of bootstrap replications (wild and sieve)
        probs: Probability levels at which quantiles are extracted
        parallel: Whether replications run on a worker pool
        ncores: Worker pool size (None for detected cores minus one)
        wild_distribution: Weight distribution for the wild bootstrap
        default_cv_seed: Seed of the Monte Carlo critical values that summary,
            diagnostics and datestamp simulate when none are supplied and
            ``core.random_seed`` is unset
    """
    mc_iterations: int = 2000
    nboot: int = 1000
    probs: Tuple[float, ...] = DEFAULT_PROBS
    parallel: bool = False
    ncores: Optional[int] = None
    wild_distribution: str = "rademacher"
    default_cv_seed: int = 123


@dataclass
class NumericalConfig:
    """
    Numerical tolerances used by the recursive regressions.

    Attributes:
        pivot_tolerance: Smallest admissible pivot when inverting the initial
            cross-product matrix scaled to unit diagonal (a bound on
            collinearity, independent of the units of the series)
    """
    pivot_tolerance: float = 1e-12


@dataclass
class LoggingConfig:
    """
    Logging configuration settings.

    Attributes:
        log_level: Level of the package logger
        log_format: Format string for log messages
        log_date_format: Format string for log message timestamps
        console_logging: Whether to log to the console
        log_file: Path to a log file (None for no file logging)
    """
    log_level: LogLevel = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    log_date_format: str = "%Y-%m-%d %H:%M:%S"
    console_logging: bool = True
    log_file: Optional[Path] = None


@dataclass
class ExplosiveConfig:
    """Complete configuration combining all sections."""
    core: CoreConfig = field(default_factory=CoreConfig)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)
    numerical: NumericalConfig = field(default_factory=NumericalConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


_SECTION_TYPES = {
    "core": CoreConfig,
    "simulation": SimulationConfig,
    "numerical": NumericalConfig,
    "logging": LoggingConfig,
}

_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_VALID_WILD_DISTRIBUTIONS = ("rademacher", "normal")


def _check_option(section: str, option: str, value: Any) -> None:
    """Validate one option value, raising ConfigError when it is inadmissible."""
    setting = f"{section}.{option}"

    if option in ("mc_iterations", "nboot"):
        if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
            raise ConfigError(
                f"{setting} must be a positive integer",
                setting=setting, value=value, issue="non-positive replication count"
            )
    elif option == "probs":
        validate_probs(value)
    elif option == "ncores":
        if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value < 1):
            raise ConfigError(
                f"{setting} must be None or an integer >= 1",
                setting=setting, value=value, issue="invalid worker count"
            )
    elif option == "random_seed":
        if value is not None and (isinstance(value, bool) or not isinstance(value, int) or value < 0):
            raise ConfigError(
                f"{setting} must be None or a non-negative integer",
                setting=setting, value=value
            )
    elif option == "default_cv_seed":
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ConfigError(
                f"{setting} must be a non-negative integer",
                setting=setting, value=value
            )
    elif option == "wild_distribution":
        if value not in _VALID_WILD_DISTRIBUTIONS:
            raise ConfigError(
                f"{setting} must be one of {_VALID_WILD_DISTRIBUTIONS}",
                setting=setting, value=value
            )
    elif option == "pivot_tolerance":
        if not isinstance(value, (int, float)) or not 0 < value < 1:
            raise ConfigError(
                f"{setting} must lie in (0, 1)",
                setting=setting, value=value
            )
    elif option == "log_level":
        if value not in _VALID_LOG_LEVELS:
            raise ConfigError(
                f"{setting} must be one of {_VALID_LOG_LEVELS}",
                setting=setting, value=value
            )


def _coerce(current: Any, option: str, value: Any) -> Any:
    """Convert a raw (string or JSON) value to the type of the current option."""
    if isinstance(value, str):
        if value.lower() in ("none", "null", ""):
            return None
        if option == "probs":
            return tuple(float(item.strip()) for item in value.split(','))
        if isinstance(current, bool):
            return value.lower() in ('true', 'yes', '1', 'y')
        if isinstance(current, int) or option in ("ncores", "random_seed"):
            return int(value)
        if isinstance(current, float):
            return float(value)
        if option == "log_file":
            return Path(value)
        return value
    if option == "probs" and isinstance(value, list):
        return tuple(float(item) for item in value)
    if option == "log_file" and value is not None:
        return Path(value)
    return value


class ConfigManager:
    """
    Configuration manager for the explosive package.

    Attributes:
        _config: The current configuration object
        _initialized: Whether the manager has loaded file and environment layers
        _config_file: Path to the user configuration file
    """

    def __init__(self):
        """Initialize the configuration manager with default settings."""
        self._config = ExplosiveConfig()
        self._initialized = False
        self._config_file: Optional[Path] = None
        self._modified_keys = set()

    def initialize(self) -> None:
        """
        Initialize the configuration manager.

        Loads the user configuration file when present, applies environment
        variable overrides and sets up logging.
        """
        if self._initialized:
            return

        env_file = os.environ.get(CONFIG_FILE_ENV)
        self._config_file = Path(env_file) if env_file else DEFAULT_CONFIG_DIR / DEFAULT_CONFIG_FILENAME

        self._load_user_config()
        self._apply_env_overrides()
        self._setup_logging()

        self._initialized = True
        logger.debug("Configuration manager initialized")

    def _load_user_config(self) -> None:
        """Load user configuration from file if it exists."""
        if not self._config_file or not self._config_file.exists():
            logger.debug("No user configuration file found")
            return

        try:
            with open(self._config_file, 'r') as f:
                user_config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Failed to load user configuration: {e}")
            return

        for section_name, section_dict in user_config.items():
            if section_name not in _SECTION_TYPES:
                logger.warning(f"Unknown configuration section: {section_name}")
                continue
            for option_name, option_value in section_dict.items():
                self._apply_layer(section_name, option_name, option_value, "file")
        logger.debug(f"Loaded user configuration from {self._config_file}")

    def _apply_env_overrides(self) -> None:
        """Apply ``EXPLOSIVE_<SECTION>_<OPTION>`` environment overrides."""
        for env_var, value in os.environ.items():
            if not env_var.startswith(CONFIG_ENV_PREFIX) or env_var == CONFIG_FILE_ENV:
                continue

            key = env_var[len(CONFIG_ENV_PREFIX):]
            parts = key.lower().split('_', 1)
            if len(parts) != 2:
                continue

            section, option = parts
            if section not in _SECTION_TYPES:
                continue
            self._apply_layer(section, option, value, f"environment ({env_var})")

    def _apply_layer(self, section: str, option: str, value: Any, source: str) -> None:
        """Apply a file or environment value; invalid values keep the default."""
        section_obj = getattr(self._config, section)
        if not hasattr(section_obj, option):
            logger.warning(f"Unknown configuration option from {source}: {section}.{option}")
            return
        try:
            typed_value = _coerce(getattr(section_obj, option), option, value)
            _check_option(section, option, typed_value)
        except (ValueError, ConfigError) as e:
            logger.warning(f"Ignoring invalid configuration value from {source}: {e}")
            return
        setattr(section_obj, option, typed_value)
        logger.debug(f"Applied {source} override: {section}.{option}={typed_value}")

    def _setup_logging(self) -> None:
        """Configure the package logger from the logging section."""
        root_logger = logging.getLogger("explosive")

        for handler in root_logger.handlers[:]:
            root_logger.removeHandler(handler)

        log_config = self._config.logging
        root_logger.setLevel(getattr(logging, log_config.log_level))

        formatter = logging.Formatter(
            fmt=log_config.log_format,
            datefmt=log_config.log_date_format
        )

        if log_config.console_logging:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(formatter)
            root_logger.addHandler(console_handler)

        if log_config.log_file:
            try:
                log_config.log_file.parent.mkdir(parents=True, exist_ok=True)
                file_handler = logging.FileHandler(log_config.log_file)
                file_handler.setFormatter(formatter)
                root_logger.addHandler(file_handler)
            except OSError as e:
                logger.warning(f"Failed to set up file logging: {e}")

    def get(self, section: str, option: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            section: The configuration section
            option: The configuration option
            default: Default value if the option is not found

        Returns:
            The configuration value, or the default if not found
        """
        section_obj = getattr(self._config, section, None)
        if section_obj is None or not hasattr(section_obj, option):
            return default
        return getattr(section_obj, option)

    def set(self, section: str, option: str, value: Any) -> None:
        """
        Set a configuration value.

        Args:
            section: The configuration section
            option: The configuration option
            value: The value to set

        Raises:
            ConfigError: If the section or option is unknown, or the value is invalid
        """
        if section not in _SECTION_TYPES:
            raise ConfigError(
                f"Unknown configuration section: {section}",
                setting=f"{section}.{option}",
                value=value,
                issue="Section not found"
            )

        section_obj = getattr(self._config, section)
        if not hasattr(section_obj, option):
            raise ConfigError(
                f"Unknown configuration option: {section}.{option}",
                setting=f"{section}.{option}",
                value=value,
                issue="Option not found"
            )

        try:
            typed_value = _coerce(getattr(section_obj, option), option, value)
        except ValueError as e:
            raise ConfigError(
                f"Failed to set configuration option: {section}.{option}",
                setting=f"{section}.{option}",
                value=value,
                issue=str(e)
            ) from e
        _check_option(section, option, typed_value)

        setattr(section_obj, option, typed_value)
        self._modified_keys.add(f"{section}.{option}")
        if section == "logging":
            self._setup_logging()
        logger.debug(f"Set configuration option: {section}.{option}={typed_value}")

    def reset(self, section: Optional[str] = None, option: Optional[str] = None) -> None:
        """
        Reset configuration to default values.

        Args:
            section: The section to reset, or None to reset everything
            option: The option to reset, or None to reset the whole section

        Raises:
            ConfigError: If the section or option is not found
        """
        if section is None:
            self._config = ExplosiveConfig()
            self._modified_keys.clear()
            logger.debug("Reset all configuration to defaults")
            return

        if section not in _SECTION_TYPES:
            raise ConfigError(
                f"Unknown configuration section: {section}",
                setting=section,
                issue="Section not found"
            )

        default_section = _SECTION_TYPES[section]()
        if option is None:
            setattr(self._config, section, default_section)
            self._modified_keys = {k for k in self._modified_keys if not k.startswith(f"{section}.")}
            logger.debug(f"Reset configuration section {section} to defaults")
            return

        if not hasattr(default_section, option):
            raise ConfigError(
                f"Unknown configuration option: {section}.{option}",
                setting=f"{section}.{option}",
                issue="Option not found"
            )
        setattr(getattr(self._config, section), option, getattr(default_section, option))
        self._modified_keys.discard(f"{section}.{option}")

    def get_modified_options(self) -> Dict[str, Any]:
        """Return the options changed at runtime with their current values."""
        return {
            key: self.get(*key.split('.', 1))
            for key in sorted(self._modified_keys)
        }

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the configuration to a dictionary.

        Returns:
            Dictionary representation of the configuration
        """
        result = {}
        for section_name in _SECTION_TYPES:
            section = getattr(self._config, section_name)
            section_dict = {}
            for f in fields(section):
                value = getattr(section, f.name)
                if isinstance(value, Path):
                    value = str(value)
                elif isinstance(value, tuple):
                    value = list(value)
                section_dict[f.name] = value
            result[section_name] = section_dict
        return result

    def save_user_config(self) -> None:
        """Save the current configuration to the user configuration file."""
        if not self._config_file:
            logger.warning("No user configuration file path available")
            return

        try:
            self._config_file.parent.mkdir(parents=True, exist_ok=True)
            with open(self._config_file, 'w') as f:
                json.dump(self.to_dict(), f, indent=2)
            logger.debug(f"Saved user configuration to {self._config_file}")
        except OSError as e:
            logger.warning(f"Failed to save user configuration: {e}")

    def get_section(self, section: str) -> Any:
        """
        Get a configuration section object.

        Raises:
            ConfigError: If the section is not found
        """
        if section not in _SECTION_TYPES:
            raise ConfigError(
                f"Unknown configuration section: {section}",
                setting=section,
                issue="Section not found"
            )
        return getattr(self._config, section)


# Create a singleton instance of the configuration manager
_config_manager = ConfigManager()


def initialize_config() -> None:
    """Initialize the configuration system."""
    _config_manager.initialize()


def get_config(section: str, option: str, default: Any = None) -> Any:
    """
    Get a configuration value.

    Args:
        section: The configuration section
        option: The configuration option
        default: Default value if the option is not found

    Returns:
        The configuration value, or the default if not found
    """
    if not _config_manager._initialized:
        initialize_config()

    return _config_manager.get(section, option, default)


def set_config(section: str, option: str, value: Any) -> None:
    """
    Set a configuration value.

    Raises:
        ConfigError: If the section or option is not found, or the value is invalid
    """
    if not _config_manager._initialized:
        initialize_config()

    _config_manager.set(section, option, value)


def reset_config(section: Optional[str] = None, option: Optional[str] = None) -> None:
    """Reset configuration to default values."""
    if not _config_manager._initialized:
        initialize_config()

    _config_manager.reset(section, option)


def save_config() -> None:
    """Save the current configuration to the user configuration file."""
    if not _config_manager._initialized:
        initialize_config()

    _config_manager.save_user_config()


def get_config_manager() -> ConfigManager:
    """Get the configuration manager instance."""
    if not _config_manager._initialized:
        initialize_config()

    return _config_manager


def get_simulation_config() -> SimulationConfig:
    """Get the simulation configuration section."""
    return get_config_manager().get_section("simulation")


def get_numerical_config() -> NumericalConfig:
    """Get the numerical configuration section."""
    return get_config_manager().get_section("numerical")
