"""
Check map builder.

Inverts the check catalog so that profiles can reach specifications by
check name, by control, or by configuration element (CE).
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from compliance_engine.core.errors import MissingValueError
from .models import PUPPET_CHECK_TYPES, CheckIndex, Specification

logger = logging.getLogger(__name__)


class CheckIndexBuilder:
    """Builds the reverse indices of a catalog.

    The index is built on first access and reused afterwards; a catalog is
    not modified once compilation has loaded it.
    """

    def __init__(self, checks: dict[str, Any], ces: dict[str, Any]):
        self._checks = checks
        self._ces = ces
        self._index: CheckIndex | None = None

    @property
    def index(self) -> CheckIndex:
        if self._index is None:
            self._index = self.build()
        return self._index

    def build(self) -> CheckIndex:
        """Build the check, control and CE indices.

        Returns:
            CheckIndex with specifications in catalog order

        Raises:
            MissingValueError: A check names a parameter without a value
        """
        index = CheckIndex()

        for check_name, body in self._checks.items():
            specification = self._to_specification(check_name, body)
            if specification is None:
                continue

            index.checks[check_name] = [specification]

            for control_name, enabled in (specification.controls or {}).items():
                if enabled:
                    index.controls.setdefault(control_name, []).append(specification)

            for ce_name in specification.ces or []:
                ce = self._ces.get(ce_name) if isinstance(ce_name, str) else None
                if ce is None:
                    continue

                index.ces.setdefault(ce_name, []).append(specification)

                # Checks reached through a CE inherit the CE's controls
                ce_controls = ce.get("controls") if isinstance(ce, dict) else None
                for control_name, enabled in (ce_controls or {}).items():
                    if enabled:
                        index.controls.setdefault(control_name, []).append(specification)

        return index

    def _to_specification(self, check_name: str, body: Any) -> Specification | None:
        if not isinstance(body, dict):
            logger.debug("SKIP: '%s' is not a mapping", check_name)
            return None

        # Skip unless this item applies to puppet
        if body.get("type") not in PUPPET_CHECK_TYPES:
            logger.debug("SKIP: '%s' is not a puppet parameter", check_name)
            return None

        settings = body.get("settings")
        if not isinstance(settings, dict):
            logger.debug("SKIP: '%s' does not have any settings", check_name)
            return None

        if "parameter" not in settings:
            logger.debug("SKIP: '%s' does not have a parameter specified", check_name)
            return None

        if "value" not in settings:
            raise MissingValueError(check_name, str(settings["parameter"]))

        try:
            return Specification.from_check(check_name, body)
        except ValidationError as e:
            logger.debug("SKIP: '%s' is not a valid check: %s", check_name, e)
            return None
