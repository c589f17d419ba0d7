"""
Catalog of compliance data merged from every imported document.

Each document contributes to four sections: ``profiles``, ``controls``,
``checks`` and ``ce``. Entries with the same name are deep merged across
documents in import order, and ``--key`` removes ``key`` from the entry.
"""

from __future__ import annotations

import logging
from typing import Any

from compliance_engine.core.errors import InvalidVersionError
from .confinement import ConfinementEvaluator
from .values import KNOCKOUT_PREFIX, deep_merge, is_mapping
from .versions import parse_version

logger = logging.getLogger(__name__)

SUPPORTED_MAJOR_VERSION = 2

# Document section name -> catalog attribute
SECTIONS = {
    "profiles": "profiles",
    "controls": "controls",
    "checks": "checks",
    "ce": "ces",
}


class ComplianceCatalog:
    """The four merged catalogs of one compilation."""

    def __init__(self, confinement: ConfinementEvaluator):
        self.confinement = confinement
        self.profiles: dict[str, Any] = {}
        self.controls: dict[str, Any] = {}
        self.checks: dict[str, Any] = {}
        self.ces: dict[str, Any] = {}

    def load(self, documents) -> int:
        """Import every supported document.

        Args:
            documents: Iterable of (source_id, parsed_document) pairs

        Returns:
            Number of documents imported
        """
        imported = 0
        for source_id, document in documents:
            if self.supports(source_id, document):
                self.import_document(source_id, document)
                imported += 1
        return imported

    def supports(self, source_id: str, document: Any) -> bool:
        """Check whether a document declares a supported major version."""
        if not is_mapping(document) or "version" not in document:
            return False

        try:
            version = parse_version(document["version"])
        except InvalidVersionError as e:
            logger.warning("Skipping '%s': %s", source_id, e)
            return False

        if version.major != SUPPORTED_MAJOR_VERSION:
            logger.debug(
                "Skipping '%s': version %s is not supported", source_id, document["version"]
            )
            return False
        return True

    def import_document(self, source_id: str, document: dict[str, Any]) -> None:
        """Merge one document into the catalogs.

        Confinement runs over each section first, so whole entries may be
        dropped before merging.
        """
        for section, attribute in SECTIONS.items():
            entries = document.get(section)
            if not is_mapping(entries):
                continue

            entries = self.confinement.apply(dict(entries), location=source_id)
            catalog = getattr(self, attribute)

            for name, body in entries.items():
                if body is None:
                    catalog.setdefault(name, {})
                    continue
                catalog[name] = deep_merge(
                    catalog.get(name, {}), body, knockout_prefix=KNOCKOUT_PREFIX
                )

    def dump(self) -> dict[str, Any]:
        """Structural dump of the catalogs."""
        return {
            "version": "2.0.0",
            "profiles": self.profiles,
            "controls": self.controls,
            "ce": self.ces,
            "checks": self.checks,
        }
