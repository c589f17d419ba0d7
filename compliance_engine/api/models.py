"""API request/response models."""

from typing import Any

from pydantic import BaseModel, Field


class ModuleInfo(BaseModel):
    """An installed module."""

    name: str
    version: str | None = None


class LookupRequest(BaseModel):
    """Request to resolve a key for a host."""

    key: str
    profiles: list[str] = Field(default_factory=list)
    facts: dict[str, Any] = Field(default_factory=dict)
    modules: list[ModuleInfo] = Field(default_factory=list)
    values: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional host lookup values, e.g. inline compliance maps",
    )
    mode: str | None = None


class LookupResponse(BaseModel):
    """Resolved value for a key."""

    key: str
    found: bool
    value: Any = None
