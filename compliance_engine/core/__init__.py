"""Core configuration, logging and error types."""

from .config import Settings, get_settings
from .errors import (
    ComplianceDataError,
    ConfinementError,
    InvalidVersionError,
    MissingValueError,
    ParameterMergeError,
)
from .logging_config import configure_logging

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "ComplianceDataError",
    "ConfinementError",
    "InvalidVersionError",
    "MissingValueError",
    "ParameterMergeError",
]
