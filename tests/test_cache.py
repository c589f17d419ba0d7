"""Tests for the lookup cache and logging setup."""

import json
import logging

from compliance_engine.core.logging_config import JSONFormatter, configure_logging
from compliance_engine.runtime import LookupCache


class TestLookupCache:
    def test_set_get_has(self):
        cache = LookupCache()
        assert cache.has("a") is False
        cache.set("a", None)
        assert cache.has("a") is True
        assert "a" in cache
        assert cache.get("a", "default") is None

    def test_default_for_missing(self):
        assert LookupCache().get("missing", 5) == 5

    def test_stats(self):
        cache = LookupCache()
        cache.set("a", 1)
        cache.get("a")
        cache.get("b")
        stats = cache.get_stats()
        assert stats["size"] == 1
        assert stats["hits"] == 1
        assert stats["misses"] == 1
        assert stats["hit_rate"] == 0.5

    def test_invalidate_all(self):
        cache = LookupCache()
        cache.set("a", 1)
        cache.set("b", 2)
        assert cache.invalidate_all() == 2
        assert cache.has("a") is False


class TestLogging:
    def test_json_formatter(self):
        record = logging.LogRecord(
            "compliance_engine.test", logging.WARNING, __file__, 1, "compiled %d keys", (3,), None
        )
        record.duration_s = 0.25
        entry = json.loads(JSONFormatter().format(record))
        assert entry["message"] == "compiled 3 keys"
        assert entry["level"] == "WARNING"
        assert entry["duration_s"] == 0.25

    def test_configure_logging(self):
        root = logging.getLogger()
        original_handlers = root.handlers[:]
        original_level = root.level
        try:
            configure_logging("debug", json_output=True)
            assert root.level == logging.DEBUG
            assert isinstance(root.handlers[0].formatter, JSONFormatter)
        finally:
            root.handlers[:] = original_handlers
            root.setLevel(original_level)
