"""
Compiler package.

Merges compliance documents into catalogs, indexes checks and resolves
active profiles into parameter assignments.
"""

from .catalog import ComplianceCatalog
from .check_index import CheckIndexBuilder
from .confinement import ConfinementEvaluator, fact_match
from .engine import ComplianceEngine
from .models import CheckIndex, ParameterAssignment, Specification, SpecificationSettings
from .resolver import ParameterResolver
from .values import KNOCKOUT_PREFIX, deep_merge, merge_values, unique_concat
from .versions import VersionRange, parse_version

__all__ = [
    # Catalog
    "ComplianceCatalog",
    "ConfinementEvaluator",
    "fact_match",
    # Index
    "CheckIndex",
    "CheckIndexBuilder",
    # Resolution
    "ParameterAssignment",
    "ParameterResolver",
    "Specification",
    "SpecificationSettings",
    "ComplianceEngine",
    # Values
    "KNOCKOUT_PREFIX",
    "deep_merge",
    "merge_values",
    "unique_concat",
    "VersionRange",
    "parse_version",
]
