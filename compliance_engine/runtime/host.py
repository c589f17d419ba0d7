"""
Host collaborators used during compilation.

The host answers key lookups (the active profile list and inline compliance
maps), fact lookups for confinement, and lists installed modules.
"""

from __future__ import annotations

from typing import Any, Iterable, Protocol


class HostContext(Protocol):
    """What the enforcer needs from the evaluating host."""

    def lookup(self, key: str, default: Any = None) -> Any:
        ...

    def lookup_fact(self, name: str) -> Any:
        ...

    def module_list(self) -> list[dict[str, Any]]:
        ...


class StaticHost:
    """Dictionary-backed host context.

    Example:
        host = StaticHost(
            values={"compliance_markup::enforcement": ["disa_stig"]},
            facts={"os": {"family": "RedHat"}},
            modules=[{"name": "simp-pki", "version": "6.2.0"}],
        )
    """

    def __init__(
        self,
        values: dict[str, Any] | None = None,
        facts: dict[str, Any] | None = None,
        modules: Iterable[dict[str, Any]] | None = None,
    ):
        self.values = dict(values or {})
        self.facts = dict(facts or {})
        self.modules = list(modules or [])

    def lookup(self, key: str, default: Any = None) -> Any:
        return self.values.get(key, default)

    def lookup_fact(self, name: str) -> Any:
        """Get a fact value; dotted names walk into structured facts."""
        if name in self.facts:
            return self.facts[name]

        value: Any = self.facts
        for part in name.split("."):
            if not isinstance(value, dict) or part not in value:
                return None
            value = value[part]
        return value

    def module_list(self) -> list[dict[str, Any]]:
        return self.modules
