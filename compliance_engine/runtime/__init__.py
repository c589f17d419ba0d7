"""Runtime: evaluation sessions, caching and host integration."""

from .cache import LookupCache
from .enforcement import (
    COMPILE_TIME_KEY,
    COMPLIANCE_DATA_KEY,
    DUMP_KEY,
    PROFILES_KEY,
    ComplianceEnforcer,
    LookupResult,
    is_reserved,
    profile_fingerprint,
)
from .host import HostContext, StaticHost

__all__ = [
    "LookupCache",
    "ComplianceEnforcer",
    "LookupResult",
    "HostContext",
    "StaticHost",
    "is_reserved",
    "profile_fingerprint",
    "PROFILES_KEY",
    "COMPLIANCE_DATA_KEY",
    "DUMP_KEY",
    "COMPILE_TIME_KEY",
]
