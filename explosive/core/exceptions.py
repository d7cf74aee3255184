'''
Custom exception classes for the explosive package.

This module defines the exception hierarchy used throughout the package. The
hierarchy separates problems with the supplied data (``InputError`` and its
subclasses), problems with the requested configuration (``ConfigError``) and
numerical failures inside the recursive regressions (``ComputationError``).

Every exception carries the primary message, optional details and a context
dictionary naming the precondition that failed together with the offending
values, so that user-visible failures are self-explanatory.
'''

import inspect
import warnings
from pathlib import Path
from typing import Any, Dict, Optional

import numpy as np


class ExplosiveError(Exception):
    """Base exception class for all explosive errors.

    Attributes:
        message: The error message
        details: Additional details about the error
        context: Dictionary containing contextual information about the error
    """

    def __init__(self,
                 message: str,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the ExplosiveError.

        Args:
            message: The primary error message
            details: Additional details about the error
            context: Dictionary containing contextual information about the error
        """
        self.message = message
        self.details = details
        self.context = context or {}

        full_message = message
        if details:
            full_message += f"\n\nDetails: {details}"

        if self.context:
            context_str = "\n".join(f"  {k}: {v}" for k, v in self.context.items())
            full_message += f"\n\nContext:\n{context_str}"

        # Add caller information for better debugging
        frame = inspect.currentframe()
        if frame:
            try:
                frame = frame.f_back
                if frame:
                    caller_info = inspect.getframeinfo(frame)
                    full_message += f"\n\nLocation: {Path(caller_info.filename).name}:{caller_info.lineno}"
            finally:
                del frame  # Avoid reference cycles

        super().__init__(full_message)


class InputError(ExplosiveError):
    """Exception raised for invalid input data or arguments.

    Raised when the data contains non-numeric or missing values, when a
    series is too short for the requested window and lag, or when arguments
    such as ``minw`` or ``lag`` are out of range.

    Attributes:
        argument: The name of the argument that caused the error
        value: The offending value
        constraint: Description of the precondition that was violated
    """

    def __init__(self,
                 message: str,
                 argument: Optional[str] = None,
                 value: Optional[Any] = None,
                 constraint: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the InputError.

        Args:
            message: The primary error message
            argument: The name of the argument that caused the error
            value: The offending value
            constraint: Description of the precondition that was violated
            details: Additional details about the error
            context: Dictionary containing contextual information about the error
        """
        self.argument = argument
        self.value = value
        self.constraint = constraint

        context_dict = dict(context or {})
        if argument:
            context_dict["Argument"] = argument
        if value is not None:
            if isinstance(value, np.ndarray) and value.size > 10:
                context_dict["Value"] = f"Array with shape {value.shape}"
            else:
                context_dict["Value"] = value
        if constraint:
            context_dict["Constraint"] = constraint

        super().__init__(message, details, context_dict)


class InsufficientLength(InputError):
    """Exception raised when a series is too short for the requested regression.

    Attributes:
        nobs: Number of observations available
        required: Minimum number of observations required
    """

    def __init__(self,
                 message: str,
                 nobs: Optional[int] = None,
                 required: Optional[int] = None,
                 argument: Optional[str] = None,
                 value: Optional[Any] = None,
                 constraint: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.nobs = nobs
        self.required = required

        context_dict = dict(context or {})
        if nobs is not None:
            context_dict["Observations"] = nobs
        if required is not None:
            context_dict["Required"] = required

        super().__init__(message, argument, value, constraint, details, context_dict)


class InvalidWindow(InputError):
    """Exception raised when the minimum window is outside its admissible range."""


class ArgumentMismatchError(InputError):
    """Exception raised when observed statistics and critical values disagree.

    Attributes:
        field: The attribute that differs (e.g. ``minw`` or ``lag``)
        observed: Value carried by the observed statistics
        critical: Value carried by the critical values
    """

    def __init__(self,
                 message: str,
                 field: Optional[str] = None,
                 observed: Optional[Any] = None,
                 critical: Optional[Any] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.field = field
        self.observed = observed
        self.critical = critical

        context_dict = dict(context or {})
        if field:
            context_dict["Field"] = field
        if observed is not None:
            context_dict["Observed statistics"] = observed
        if critical is not None:
            context_dict["Critical values"] = critical

        super().__init__(message, details=details, context=context_dict)


class ConfigError(ExplosiveError):
    """Exception raised for invalid configuration or simulation settings.

    Attributes:
        setting: The setting that caused the error
        value: The invalid setting value
        issue: Description of the issue with the setting
        config_file: The configuration file path, if the value came from a file
    """

    def __init__(self,
                 message: str,
                 setting: Optional[str] = None,
                 value: Optional[Any] = None,
                 issue: Optional[str] = None,
                 config_file: Optional[Path] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the ConfigError.

        Args:
            message: The primary error message
            setting: The setting that caused the error
            value: The invalid setting value
            issue: Description of the issue with the setting
            config_file: The configuration file path
            details: Additional details about the error
            context: Dictionary containing contextual information about the error
        """
        self.setting = setting
        self.value = value
        self.issue = issue
        self.config_file = config_file

        context_dict = dict(context or {})
        if config_file:
            context_dict["Config File"] = str(config_file)
        if setting:
            context_dict["Setting"] = setting
        if value is not None:
            context_dict["Value"] = value
        if issue:
            context_dict["Issue"] = issue

        super().__init__(message, details, context_dict)


class ComputationError(ExplosiveError):
    """Exception raised when a recursive regression is numerically degenerate.

    Attributes:
        operation: The operation that failed
        window_end: Zero-based design row at which the failure was detected
        replication: Replication index when raised from a simulation engine
        series: Series name or position when raised from a simulation engine
    """

    def __init__(self,
                 message: str,
                 operation: Optional[str] = None,
                 window_end: Optional[int] = None,
                 replication: Optional[int] = None,
                 series: Optional[Any] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.operation = operation
        self.window_end = window_end
        self.replication = replication
        self.series = series

        context_dict = dict(context or {})
        if operation:
            context_dict["Operation"] = operation
        if window_end is not None:
            context_dict["Window end"] = window_end
        if replication is not None:
            context_dict["Replication"] = replication
        if series is not None:
            context_dict["Series"] = series

        super().__init__(message, details, context_dict)


class ExplosiveWarning(UserWarning):
    """Base warning class for the explosive package."""

    def __init__(self,
                 message: str,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details
        self.context = context or {}

        full_message = message
        if details:
            full_message += f"\n\nDetails: {details}"
        if self.context:
            context_str = "\n".join(f"  {k}: {v}" for k, v in self.context.items())
            full_message += f"\n\nContext:\n{context_str}"

        super().__init__(full_message)


# Helper functions for raising exceptions with consistent formatting

def raise_input_error(message: str,
                      argument: Optional[str] = None,
                      value: Optional[Any] = None,
                      constraint: Optional[str] = None,
                      details: Optional[str] = None,
                      context: Optional[Dict[str, Any]] = None) -> None:
    """Raise an InputError with consistent formatting.

    Raises:
        InputError: The formatted input error
    """
    raise InputError(message, argument, value, constraint, details, context)


def warn_redundant(argument: str, reason: str) -> None:
    """Warn that an argument was supplied but has no effect.

    Args:
        argument: Name of the redundant argument
        reason: Why the argument is ignored
    """
    warnings.warn(
        ExplosiveWarning(
            f"Argument '{argument}' is redundant",
            details=reason,
            context={"Argument": argument}
        ),
        stacklevel=3
    )
