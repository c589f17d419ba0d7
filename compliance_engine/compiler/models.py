"""
Value types produced by the compiler.

A Specification is one puppet-parameter check taken from the catalog;
a ParameterAssignment is the merged result for one parameter.
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .values import clone

PUPPET_CHECK_TYPES = ("puppet", "puppet-class-parameter")


class SpecificationSettings(BaseModel):
    """The parameter a check targets and the value it requires."""

    parameter: str
    value: Any = None


class Specification(BaseModel):
    """A single check entry describing a parameter assignment."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str
    type: str
    settings: SpecificationSettings
    controls: dict[str, Any] | None = None
    ces: list[Any] | None = None
    identifiers: Any = None
    oval_ids: Any = Field(default=None, alias="oval-ids")

    @property
    def parameter(self) -> str:
        return self.settings.parameter

    @classmethod
    def from_check(cls, name: str, body: dict[str, Any]) -> Specification:
        """Build a specification from a catalog check body.

        The body is copied; the catalog is never aliased.
        """
        return cls.model_validate({**clone(body), "name": name})

    def metadata(self, field: str) -> Any:
        """Return a metadata field by its document name."""
        return {
            "controls": self.controls,
            "identifiers": self.identifiers,
            "oval-ids": self.oval_ids,
        }[field]


class ParameterAssignment(BaseModel):
    """The merged value and metadata for one parameter."""

    model_config = ConfigDict(populate_by_name=True)

    parameter: str
    value: Any = None
    controls: Any = Field(default_factory=dict)
    identifiers: Any = Field(default_factory=dict)
    oval_ids: Any = Field(default_factory=dict, alias="oval-ids")

    @classmethod
    def from_specification(cls, specification: Specification) -> ParameterAssignment:
        return cls(
            parameter=specification.parameter,
            value=clone(specification.settings.value),
            controls=clone(specification.controls) if specification.controls is not None else {},
            identifiers=clone(specification.identifiers) if specification.identifiers is not None else {},
            oval_ids=clone(specification.oval_ids) if specification.oval_ids is not None else {},
        )

    def get_field(self, field: str) -> Any:
        return getattr(self, "oval_ids" if field == "oval-ids" else field)

    def set_field(self, field: str, value: Any) -> None:
        setattr(self, "oval_ids" if field == "oval-ids" else field, value)

    def project(self, mode: str = "value") -> Any:
        """Select the part of the assignment returned to the caller.

        ``raw`` returns the whole assignment as a dict.
        """
        data = self.model_dump(by_alias=True)
        if mode == "raw":
            return data
        if mode not in data:
            raise KeyError(f"Unknown enforcement mode: {mode}")
        return data[mode]


class CheckIndex(BaseModel):
    """Reverse indices from checks, controls and CEs to specifications."""

    checks: dict[str, list[Specification]] = Field(default_factory=dict)
    controls: dict[str, list[Specification]] = Field(default_factory=dict)
    ces: dict[str, list[Specification]] = Field(default_factory=dict)

    def lookup(self, kind: str, name: str) -> list[Specification] | None:
        """Get the specifications indexed under ``name`` for a reference kind."""
        return getattr(self, kind).get(name)
