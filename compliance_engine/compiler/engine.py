"""Compliance engine: one compilation of the compliance data."""

from __future__ import annotations

from typing import Any, Iterable, Sequence

from .catalog import ComplianceCatalog
from .check_index import CheckIndexBuilder
from .confinement import ConfinementEvaluator, FactLookup, ModuleList
from .models import CheckIndex, ParameterAssignment
from .resolver import ParameterResolver


class ComplianceEngine:
    """Holds the merged catalogs of one compilation and resolves profiles.

    A new engine is created for every compilation attempt; catalogs are never
    updated incrementally.
    """

    def __init__(
        self,
        lookup_fact: FactLookup | None = None,
        module_list: ModuleList | None = None,
    ):
        confinement = ConfinementEvaluator(lookup_fact or (lambda name: None), module_list)
        self.catalog = ComplianceCatalog(confinement)
        self._index_builder = CheckIndexBuilder(self.catalog.checks, self.catalog.ces)

    @classmethod
    def from_host(cls, host) -> ComplianceEngine:
        """Create an engine reading facts and modules from a host context."""
        return cls(lookup_fact=host.lookup_fact, module_list=host.module_list)

    def load(self, documents: Iterable[tuple[str, Any]]) -> int:
        """Import (source_id, document) pairs. Returns the number imported."""
        return self.catalog.load(documents)

    @property
    def profiles(self) -> dict[str, Any]:
        return self.catalog.profiles

    @property
    def controls(self) -> dict[str, Any]:
        return self.catalog.controls

    @property
    def checks(self) -> dict[str, Any]:
        return self.catalog.checks

    @property
    def ces(self) -> dict[str, Any]:
        return self.catalog.ces

    @property
    def check_index(self) -> CheckIndex:
        return self._index_builder.index

    def list_puppet_params(self, profile_list: Sequence[str]) -> dict[str, ParameterAssignment]:
        """Resolve the active profiles into parameter assignments."""
        return ParameterResolver(self.profiles, self.check_index).resolve(profile_list)
