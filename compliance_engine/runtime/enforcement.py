"""
Enforcement lookups.

The enforcer is the entry point used by a host to ask for the value of a
single key. It compiles the compliance data for the host's active profiles
once per profile set, caches the resulting parameter map and serves keys
from it.
"""

from __future__ import annotations

import hashlib
import json
import logging
import re
import time
from typing import Any, Callable, Sequence

from pydantic import BaseModel

from compliance_engine.compiler import ComplianceEngine
from compliance_engine.compiler.values import KNOCKOUT_PREFIX
from compliance_engine.core.config import Settings, get_settings
from compliance_engine.sources import DocumentLoader
from .cache import LookupCache
from .host import HostContext

logger = logging.getLogger(__name__)

LOCK_KEY = "_simp_compliance_markup_lock"
MAP_KEY_PREFIX = "compliance_map_"

PROFILES_KEY = "compliance_markup::debug::profiles"
COMPLIANCE_DATA_KEY = "compliance_markup::debug::compliance_data"
DUMP_KEY = "compliance_markup::debug::dump"
COMPILE_TIME_KEY = "compliance_markup::debug::hiera_backend_compile_time"
CATALOG_DEBUG_KEYS = (PROFILES_KEY, COMPLIANCE_DATA_KEY)

# Keys resolved by the enforcer itself would recurse back into it
RESERVED_KEYS = ("lookup_options", "compliance_map")
RESERVED_NAMESPACE = re.compile(r"^compliance_markup::(?!debug::)")

# Lookup key -> source id of the inline compliance maps
INLINE_MAPS = (
    ("compliance_markup::compliance_map", "puppet://compliance_markup::compliance_map"),
    ("compliance_map", "puppet://compliance_map"),
)

Lookup = Callable[[str, Any], Any]


class LookupResult(BaseModel):
    """Outcome of an enforcement lookup."""

    found: bool = False
    value: Any = None

    @classmethod
    def hit(cls, value: Any) -> LookupResult:
        return cls(found=True, value=value)

    @classmethod
    def miss(cls) -> LookupResult:
        return cls(found=False)


def profile_fingerprint(profile_list: Sequence[str]) -> str:
    """Stable, order-sensitive hash of an active profile list."""
    encoded = json.dumps(list(profile_list), default=str)
    return hashlib.sha256(encoded.encode()).hexdigest()[:16]


def is_reserved(key: str) -> bool:
    """Check whether a key must never be answered by enforcement."""
    return key in RESERVED_KEYS or RESERVED_NAMESPACE.match(key) is not None


def _as_list(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


class ComplianceEnforcer:
    """Answers key lookups from the compiled compliance data.

    One enforcer and its cache make up an evaluation session. The cache
    carries the reentrancy flag, so a lookup issued while compiling (for
    example by a host whose lookup funnels back into this enforcer) is
    answered with a miss instead of starting a second compilation.

    Each resolved parameter value is also stored in the cache under its own
    name for hosts that share the cache; the enforcer itself serves lookups
    from the cached compiled map.
    """

    def __init__(
        self,
        host: HostContext,
        cache: LookupCache | None = None,
        loader: DocumentLoader | None = None,
        settings: Settings | None = None,
        mode: str | None = None,
    ):
        settings = settings or get_settings()
        self.host = host
        self.cache = cache if cache is not None else LookupCache()
        self.loader = loader or DocumentLoader.from_settings(settings)
        self.mode = mode or settings.enforcement_mode
        self.enforcement_key = settings.enforcement_key
        self.compile_count = 0

    def enforce(self, key: str, lookup: Lookup | None = None) -> LookupResult:
        """Resolve a single key.

        Args:
            key: The key being looked up
            lookup: Callable (key, default) used to fetch the inline
                compliance maps; defaults to the host lookup

        Returns:
            LookupResult; a miss when the key is reserved, not enforced,
            knocked out, requested during compilation, or compilation failed
        """
        if is_reserved(key):
            return LookupResult.miss()

        if self.cache.has(LOCK_KEY) and self.cache.get(LOCK_KEY):
            logger.debug("Compilation in progress, not resolving '%s'", key)
            return LookupResult.miss()

        self.cache.set(LOCK_KEY, True)
        try:
            return self._enforce(key, lookup or self.host.lookup)
        except Exception as e:
            logger.warning("compliance_engine: compilation failed for '%s': %s", key, e)
            logger.debug("Compilation failure", exc_info=True)
            return LookupResult.miss()
        finally:
            self.cache.set(LOCK_KEY, False)

    def active_profiles(self) -> list[Any]:
        return _as_list(self.host.lookup(self.enforcement_key, []))

    def load_documents(self, lookup: Lookup) -> list[tuple[str, Any]]:
        """Discovered documents followed by the inline compliance maps."""
        documents = list(self.loader.discover())
        for key, source_id in INLINE_MAPS:
            documents.append((source_id, lookup(key, {})))
        return documents

    def compile(self, lookup: Lookup) -> ComplianceEngine:
        """Build a fresh engine from every available document."""
        self.compile_count += 1
        engine = ComplianceEngine.from_host(self.host)
        imported = engine.load(self.load_documents(lookup))
        logger.debug("Imported %d compliance documents", imported)
        return engine

    def _enforce(self, key: str, lookup: Lookup) -> LookupResult:
        profile_list = self.active_profiles()
        if not profile_list:
            return LookupResult.miss()

        logger.debug(
            "%s set to %s, attempting to enforce", self.enforcement_key, profile_list
        )

        map_key = MAP_KEY_PREFIX + profile_fingerprint(profile_list)
        if key not in CATALOG_DEBUG_KEYS and self.cache.has(map_key):
            return self._select(key, self.cache.get(map_key))

        logger.debug("compliance map for %s not found, starting compiler", profile_list)

        compile_start = time.perf_counter()
        engine = self.compile(lookup)

        if key == PROFILES_KEY:
            return LookupResult.hit(list(engine.profiles.keys()))
        if key == COMPLIANCE_DATA_KEY:
            return LookupResult.hit(engine.catalog.dump())

        profile_map: dict[str, Any] = {}
        for parameter, assignment in engine.list_puppet_params(profile_list).items():
            profile_map[parameter] = assignment.project(self.mode)
            # Read by hosts sharing the cache, not by the enforcer
            self.cache.set(parameter, assignment.value)

        compile_time = time.perf_counter() - compile_start
        profile_map[COMPILE_TIME_KEY] = compile_time
        self.cache.set(map_key, profile_map)

        logger.debug(
            "compiled compliance_map containing %d keys in %s seconds",
            len(profile_map),
            compile_time,
            extra={"duration_s": compile_time},
        )

        return self._select(key, profile_map)

    @staticmethod
    def _select(key: str, profile_map: dict[str, Any]) -> LookupResult:
        if key == DUMP_KEY:
            return LookupResult.hit(profile_map)

        # A knocked out key is absent even when a plain entry exists
        if KNOCKOUT_PREFIX + key in profile_map:
            return LookupResult.miss()
        if key in profile_map:
            return LookupResult.hit(profile_map[key])
        return LookupResult.miss()
