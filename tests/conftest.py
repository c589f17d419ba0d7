"""Pytest fixtures for test suite."""

import pytest
from pathlib import Path
from typing import Any, Callable

from compliance_engine.core.config import Settings
from compliance_engine.runtime import ComplianceEnforcer, LookupCache, StaticHost
from compliance_engine.sources import DocumentLoader


# =============================================================================
# Document Fixtures
# =============================================================================


@pytest.fixture
def modules_dir() -> Path:
    """Path to the fixture module directory."""
    return Path(__file__).parent / "fixtures" / "modules"


@pytest.fixture
def settings(modules_dir: Path) -> Settings:
    """Settings searching the fixture modules."""
    return Settings(module_paths=[str(modules_dir)], compliance_data_dir=None)


@pytest.fixture
def document_loader(settings: Settings) -> DocumentLoader:
    """Loader over the fixture modules."""
    return DocumentLoader.from_settings(settings)


@pytest.fixture
def empty_loader() -> DocumentLoader:
    """Loader without any search roots."""
    return DocumentLoader([])


@pytest.fixture
def make_document() -> Callable[..., dict[str, Any]]:
    """Factory for version 2 compliance documents."""

    def _make(version: str = "2.0.0", **sections: Any) -> dict[str, Any]:
        document: dict[str, Any] = {"version": version}
        document.update(sections)
        return document

    return _make


# =============================================================================
# Host Fixtures
# =============================================================================


@pytest.fixture
def redhat_facts() -> dict[str, Any]:
    """Facts of a RedHat 8 host."""
    return {
        "kernel": "Linux",
        "os": {"family": "RedHat", "release": {"major": "8"}},
    }


@pytest.fixture
def make_enforcer(
    document_loader: DocumentLoader, settings: Settings
) -> Callable[..., ComplianceEnforcer]:
    """Factory for an enforcer session over the fixture modules."""

    def _make(
        profiles: list[str] | None = None,
        facts: dict[str, Any] | None = None,
        values: dict[str, Any] | None = None,
        modules: list[dict[str, Any]] | None = None,
        loader: DocumentLoader | None = None,
        mode: str | None = None,
    ) -> ComplianceEnforcer:
        host_values = dict(values or {})
        if profiles is not None:
            host_values["compliance_markup::enforcement"] = profiles
        host = StaticHost(values=host_values, facts=facts, modules=modules)
        return ComplianceEnforcer(
            host,
            cache=LookupCache(),
            loader=loader or document_loader,
            settings=settings,
            mode=mode,
        )

    return _make
