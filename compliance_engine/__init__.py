"""Compliance data compiler.

Compiles profiles, controls, checks and configuration elements into the
parameter values a host must enforce.
"""

from .compiler import ComplianceEngine
from .runtime import ComplianceEnforcer, LookupCache, LookupResult, StaticHost

__all__ = [
    "ComplianceEngine",
    "ComplianceEnforcer",
    "LookupCache",
    "LookupResult",
    "StaticHost",
]
