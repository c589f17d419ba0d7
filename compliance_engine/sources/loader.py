"""YAML/JSON compliance document discovery."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Iterator

import yaml

from compliance_engine.core.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_LOAD_PATHS = ("SIMP/compliance_profiles", "simp/compliance_profiles")
FILE_TYPES = ("yaml", "json")


class DocumentLoader:
    """Finds and parses compliance documents under a set of search roots.

    Every ``*.yaml`` and ``*.json`` file below ``<root>/<load_path>/`` is a
    candidate document.
    """

    def __init__(
        self,
        search_roots: list[str | Path] | None = None,
        load_paths: list[str] | tuple[str, ...] = DEFAULT_LOAD_PATHS,
    ):
        self.search_roots = [Path(p) for p in (search_roots or [])]
        self.load_paths = list(load_paths)

    @classmethod
    def from_settings(cls, settings: Settings) -> DocumentLoader:
        """Build a loader from configured module paths and overrides.

        Every child directory of a module path is a search root. A configured
        data directory replaces those roots; aux paths are always added.
        """
        roots: list[str | Path] = []
        for module_path in settings.module_paths:
            path = Path(module_path)
            if path.is_dir():
                roots.extend(sorted(child for child in path.iterdir() if child.is_dir()))

        if settings.data_dirs is not None:
            roots = list(settings.data_dirs)

        roots.extend(settings.aux_paths)
        return cls(roots, settings.load_paths)

    def discover(self) -> Iterator[tuple[str, Any]]:
        """Yield (source_id, parsed_document) for every valid document."""
        seen: set[Path] = set()
        for file_type in FILE_TYPES:
            for path in self._candidates(file_type):
                resolved = path.resolve()
                if resolved in seen:
                    continue
                seen.add(resolved)

                try:
                    document = self.load_file(path)
                except (OSError, ValueError, yaml.YAMLError) as e:
                    logger.warning(
                        "compliance_engine: Invalid '%s' file found at '%s' => %s",
                        file_type,
                        path,
                        e,
                    )
                    continue

                yield str(path), document

    def load_file(self, path: str | Path) -> Any:
        """Parse a single YAML or JSON document."""
        path = Path(path)
        with open(path, "r", encoding="utf-8") as f:
            if path.suffix == ".json":
                return json.load(f)
            return yaml.safe_load(f)

    def _candidates(self, file_type: str) -> Iterator[Path]:
        for root in self.search_roots:
            for load_path in self.load_paths:
                base = root / load_path
                if not base.is_dir():
                    continue
                yield from sorted(base.rglob(f"*.{file_type}"))
