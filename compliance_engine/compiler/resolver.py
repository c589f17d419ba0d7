"""
Parameter resolver.

Walks the active profiles, collects every specification they reference and
merges those specifications into one assignment per parameter.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any, Sequence

from compliance_engine.core.errors import ParameterMergeError
from .models import CheckIndex, ParameterAssignment, Specification
from .values import merge_values

logger = logging.getLogger(__name__)

REFERENCE_KINDS = ("checks", "controls", "ces")
METADATA_FIELDS = ("controls", "identifiers", "oval-ids")


class ParameterResolver:
    """Resolves a profile list into parameter assignments."""

    def __init__(self, profiles: dict[str, Any], index: CheckIndex):
        self._profiles = profiles
        self._index = index

    def collect(self, profile_list: Sequence[str]) -> list[Specification]:
        """Collect the specifications referenced by the active profiles.

        Profiles are visited last to first, and within a profile by
        reference kind (checks, controls, ces).
        """
        specifications: list[Specification] = []

        for profile_name in reversed(list(profile_list)):
            if profile_name not in self._profiles:
                logger.debug(
                    "SKIP: Profile '%s' not in '%s'",
                    profile_name,
                    "', '".join(self._profiles.keys()),
                )
                continue

            info = self._profiles[profile_name]
            if not isinstance(info, dict):
                continue

            for kind in REFERENCE_KINDS:
                references = info.get(kind)
                if not isinstance(references, dict):
                    continue
                for name, enabled in references.items():
                    if not enabled:
                        continue
                    found = self._index.lookup(kind, name)
                    if found:
                        specifications.extend(found)

        return specifications

    def resolve(self, profile_list: Sequence[str]) -> dict[str, ParameterAssignment]:
        """Merge the active specifications into one assignment per parameter.

        Args:
            profile_list: Active profile names, highest precedence first

        Returns:
            Dict mapping parameter name to its ParameterAssignment

        Raises:
            ParameterMergeError: Specifications for a parameter have
                incompatible value or metadata types
        """
        specifications = self.collect(profile_list)
        if not specifications:
            return {}

        counts = Counter(spec.parameter for spec in specifications)
        for parameter, count in counts.items():
            if count > 1:
                logger.warning(
                    "Multiple valid specifications found for %s, "
                    "they will be merged in the order that they were defined",
                    parameter,
                )

        assignments: dict[str, ParameterAssignment] = {}
        for specification in specifications:
            parameter = specification.parameter

            if parameter not in assignments:
                assignments[parameter] = ParameterAssignment.from_specification(specification)
                continue

            self._merge(assignments[parameter], specification)

        return assignments

    def _merge(self, assignment: ParameterAssignment, specification: Specification) -> None:
        parameter = specification.parameter

        assignment.value = self._merge_field(
            parameter, "value", assignment.value, specification.settings.value
        )

        for field in METADATA_FIELDS:
            incoming = specification.metadata(field)
            if incoming is None:
                continue
            assignment.set_field(
                field,
                self._merge_field(parameter, field, assignment.get_field(field), incoming),
            )

    @staticmethod
    def _merge_field(parameter: str, field: str, existing: Any, incoming: Any) -> Any:
        try:
            return merge_values(existing, incoming)
        except TypeError as e:
            raise ParameterMergeError(parameter, field, mismatch=True) from e
        except (ValueError, RecursionError) as e:
            raise ParameterMergeError(parameter, field, mismatch=False) from e
