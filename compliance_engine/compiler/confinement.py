"""
Confinement of catalog entries by host facts and installed modules.

An entry may carry a ``confine`` mapping. Each key is either a fact name,
matched against the host's current fact value, or one of the module keys
``module_name`` / ``module_version`` matched against the module inventory.
Entries failing any confinement are removed.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable

from compliance_engine.core.errors import ConfinementError, InvalidVersionError
from .versions import VersionRange, parse_version

logger = logging.getLogger(__name__)

MODULE_NAME_KEY = "module_name"
MODULE_VERSION_KEY = "module_version"

FactLookup = Callable[[str], Any]
ModuleList = Callable[[], Iterable[dict[str, Any]]]


def _string_match(fact_value: Any, confinement_value: str) -> bool:
    if confinement_value.startswith("!"):
        return fact_value != confinement_value[1:]
    return fact_value == confinement_value


def fact_match(fact_value: Any, confinement_value: Any) -> bool:
    """Check a fact value against a confinement value.

    - ``"!x"`` matches anything except ``"x"``
    - any other string matches by equality
    - a list matches when any element matches; nested lists compare by
      equality, other elements go through this same function
    - anything else matches by equality
    """
    if isinstance(confinement_value, list):
        return any(
            fact_value == value if isinstance(value, list) else fact_match(fact_value, value)
            for value in confinement_value
        )
    if isinstance(confinement_value, str):
        return _string_match(fact_value, confinement_value)
    return fact_value == confinement_value


class ConfinementEvaluator:
    """Drops catalog entries whose confinement does not hold on this host."""

    def __init__(
        self,
        lookup_fact: FactLookup,
        module_list: ModuleList | None = None,
    ):
        self._lookup_fact = lookup_fact
        self._module_list = module_list or (lambda: [])
        self._modules: list[dict[str, Any]] | None = None

    @property
    def modules(self) -> list[dict[str, Any]]:
        if self._modules is None:
            self._modules = list(self._module_list())
        return self._modules

    def apply(self, entries: dict[str, Any], location: str = "unknown") -> dict[str, Any]:
        """Remove entries that fail confinement.

        Args:
            entries: Mapping of entry name to entry body, modified in place
            location: Source identifier used in error messages

        Returns:
            The same mapping, without the rejected entries

        Raises:
            ConfinementError: An entry has a non-mapping ``confine`` and no
                settings value to fall back on
        """
        rejected = [
            name for name, body in entries.items()
            if not self.applies(name, body, location)
        ]
        for name in rejected:
            logger.debug("SKIP: '%s' in '%s' does not match its confinement", name, location)
            del entries[name]
        return entries

    def applies(self, name: str, body: Any, location: str = "unknown") -> bool:
        """Check whether a single entry applies on this host."""
        if not isinstance(body, dict) or "confine" not in body:
            return True

        confine = body["confine"]
        if not confine:
            return True

        if not isinstance(confine, dict):
            settings = body.get("settings")
            if not (isinstance(settings, dict) and "value" in settings):
                raise ConfinementError(f"'confine' must be a Hash in '{location}'")
            logger.debug("Ignoring non-mapping 'confine' on '%s' in '%s'", name, location)
            return True

        for setting, expected in confine.items():
            if setting == MODULE_NAME_KEY:
                if not self._module_applies(expected, confine.get(MODULE_VERSION_KEY)):
                    return False
                continue

            if setting == MODULE_VERSION_KEY and MODULE_NAME_KEY in confine:
                continue

            fact_value = self._lookup_fact(setting)
            if fact_value is None:
                continue
            if not fact_match(fact_value, expected):
                return False

        return True

    def _module_applies(self, module_name: Any, required_version: Any) -> bool:
        known = [m for m in self.modules if m.get("name") == module_name]
        if not known:
            return False

        if not required_version:
            return True

        try:
            current = parse_version(known[0].get("version"))
            required = VersionRange.parse(required_version)
        except InvalidVersionError:
            logger.warning(
                "Unable to match %s against version requirement %s",
                known[0],
                required_version,
            )
            return False

        return current in required
