"""
explosive core module

Foundation shared by the recursive ADF engine, the critical value engines and
their consumers: the exception hierarchy, type aliases and the closed set of
critical value methods, eager argument validation and the layered
configuration manager.
"""

import logging

# Set up module-level logger
logger = logging.getLogger("explosive.core")

from .exceptions import (
    ExplosiveError,
    InputError,
    InsufficientLength,
    InvalidWindow,
    ArgumentMismatchError,
    ConfigError,
    ComputationError,
    ExplosiveWarning,
)

from .types import (
    CriticalValueMethod,
    DEFAULT_PROBS,
    ProgressCallback,
)

from .config import (
    get_config,
    set_config,
    reset_config,
    save_config,
    get_config_manager,
)

__all__ = [
    # Exceptions
    'ExplosiveError',
    'InputError',
    'InsufficientLength',
    'InvalidWindow',
    'ArgumentMismatchError',
    'ConfigError',
    'ComputationError',
    'ExplosiveWarning',

    # Types
    'CriticalValueMethod',
    'DEFAULT_PROBS',
    'ProgressCallback',

    # Configuration
    'get_config',
    'set_config',
    'reset_config',
    'save_config',
    'get_config_manager',
]
