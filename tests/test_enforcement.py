"""
Tests for enforcement lookups.

Covers the compile/cache cycle, reserved keys, reentrancy and graceful
degradation on invalid data.
"""

import pytest

from compliance_engine.runtime import (
    COMPILE_TIME_KEY,
    COMPLIANCE_DATA_KEY,
    DUMP_KEY,
    PROFILES_KEY,
    ComplianceEnforcer,
    LookupCache,
    LookupResult,
    StaticHost,
    is_reserved,
    profile_fingerprint,
)
from compliance_engine.sources import DocumentLoader


class InlineHost(StaticHost):
    """Host with no files, serving compliance data inline."""

    def __init__(self, profiles, compliance_map, **kwargs):
        super().__init__(
            values={
                "compliance_markup::enforcement": profiles,
                "compliance_map": compliance_map,
            },
            **kwargs,
        )


def _inline_enforcer(profiles, compliance_map, settings) -> ComplianceEnforcer:
    return ComplianceEnforcer(
        InlineHost(profiles, compliance_map),
        cache=LookupCache(),
        loader=DocumentLoader([]),
        settings=settings,
    )


END_TO_END_MAP = {
    "version": "2.0.0",
    "profiles": {"baseline": {"checks": {"chk1": True}}},
    "checks": {
        "chk1": {
            "type": "puppet-class-parameter",
            "settings": {"parameter": "pkg::ensure", "value": "present"},
            "controls": {"AC-1": True},
        },
    },
}


class TestLookupResult:
    def test_hit(self):
        result = LookupResult.hit(None)
        assert result.found is True
        assert result.value is None

    def test_miss(self):
        assert LookupResult.miss().found is False


class TestReservedKeys:
    """Test keys that are never answered by enforcement."""

    @pytest.mark.parametrize(
        "key",
        [
            "lookup_options",
            "compliance_map",
            "compliance_markup::enforcement",
            "compliance_markup::compliance_map",
        ],
    )
    def test_reserved(self, key: str):
        assert is_reserved(key) is True

    @pytest.mark.parametrize("key", ["pkg::ensure", PROFILES_KEY, DUMP_KEY])
    def test_not_reserved(self, key: str):
        assert is_reserved(key) is False

    def test_reserved_key_is_not_compiled(self, make_enforcer):
        enforcer = make_enforcer(profiles=["baseline"])
        assert enforcer.enforce("compliance_markup::enforcement").found is False
        assert enforcer.compile_count == 0


class TestFingerprint:
    def test_order_sensitive(self):
        assert profile_fingerprint(["a", "b"]) != profile_fingerprint(["b", "a"])

    def test_stable(self):
        assert profile_fingerprint(["a", "b"]) == profile_fingerprint(["a", "b"])


class TestEndToEnd:
    """Test full compilations over inline and on-disk data."""

    def test_inline_scenario(self, settings):
        enforcer = _inline_enforcer(["baseline"], END_TO_END_MAP, settings)
        result = enforcer.enforce("pkg::ensure")
        assert result.found is True
        assert result.value == "present"

    def test_debug_profiles(self, settings):
        enforcer = _inline_enforcer(["baseline"], END_TO_END_MAP, settings)
        assert enforcer.enforce(PROFILES_KEY).value == ["baseline"]

    def test_debug_compliance_data(self, settings):
        enforcer = _inline_enforcer(["baseline"], END_TO_END_MAP, settings)
        data = enforcer.enforce(COMPLIANCE_DATA_KEY).value
        assert data["version"] == "2.0.0"
        assert "chk1" in data["checks"]
        assert "baseline" in data["profiles"]

    def test_debug_dump(self, settings):
        enforcer = _inline_enforcer(["baseline"], END_TO_END_MAP, settings)
        dump = enforcer.enforce(DUMP_KEY).value
        assert dump["pkg::ensure"] == "present"
        assert COMPILE_TIME_KEY in dump

    def test_fixture_modules(self, make_enforcer, redhat_facts):
        enforcer = make_enforcer(profiles=["baseline"], facts=redhat_facts)
        assert enforcer.enforce("pkg::ensure").value == "present"
        assert enforcer.enforce("selinux::ensure").value == "enforcing"
        assert enforcer.enforce("ssh::server::conf::permitrootlogin").value is False

    def test_fact_confinement(self, make_enforcer):
        enforcer = make_enforcer(profiles=["baseline"], facts={"os": {"family": "Debian"}})
        assert enforcer.enforce("selinux::ensure").found is False

    def test_first_listed_profile_wins(self, make_enforcer):
        enforcer = make_enforcer(profiles=["baseline", "strict"])
        assert enforcer.enforce("pkg::ensure").value == "present"

        enforcer = make_enforcer(profiles=["strict", "baseline"])
        assert enforcer.enforce("pkg::ensure").value == "latest"

    def test_knocked_out_reference(self, make_enforcer):
        enforcer = make_enforcer(profiles=["strict"])
        assert enforcer.enforce("auditd::rules").found is False

    def test_legacy_documents_ignored(self, make_enforcer):
        enforcer = make_enforcer(profiles=["legacy"])
        assert "legacy" not in enforcer.enforce(PROFILES_KEY).value

    def test_unknown_key(self, make_enforcer):
        enforcer = make_enforcer(profiles=["baseline"])
        assert enforcer.enforce("not::enforced").found is False

    def test_no_active_profiles(self, make_enforcer):
        enforcer = make_enforcer(profiles=[])
        assert enforcer.enforce("pkg::ensure").found is False
        assert enforcer.compile_count == 0

    def test_single_profile_string(self, make_enforcer):
        enforcer = make_enforcer(values={"compliance_markup::enforcement": "baseline"})
        assert enforcer.enforce("pkg::ensure").value == "present"

    def test_mode_projection(self, make_enforcer):
        enforcer = make_enforcer(profiles=["baseline"], mode="identifiers")
        assert enforcer.enforce("pkg::ensure").value == {"nist_800_53:rev4": ["AC-1"]}

    def test_parameter_knockout_masks_key(self, settings):
        compliance_map = {
            "version": "2.0.0",
            "profiles": {"p": {"checks": {"c1": True, "c2": True}}},
            "checks": {
                "c1": {
                    "type": "puppet",
                    "settings": {"parameter": "a::b", "value": 1},
                },
                "c2": {
                    "type": "puppet",
                    "settings": {"parameter": "--a::b", "value": True},
                },
            },
        }
        enforcer = _inline_enforcer(["p"], compliance_map, settings)
        assert enforcer.enforce("a::b").found is False
        assert "a::b" in enforcer.enforce(DUMP_KEY).value

    def test_invalid_check_does_not_hide_other_parameters(self, settings):
        compliance_map = {
            "version": "2.0.0",
            "profiles": {"p": {"checks": {"good": True, "odd": True}}},
            "checks": {
                "good": {
                    "type": "puppet",
                    "settings": {"parameter": "a::b", "value": 1},
                },
                "odd": {
                    "type": "puppet",
                    "settings": {"parameter": "c::d", "value": 2},
                    "controls": ["AC-1"],
                },
            },
        }
        enforcer = _inline_enforcer(["p"], compliance_map, settings)
        assert enforcer.enforce("a::b").value == 1
        assert enforcer.enforce("c::d").found is False


class TestCaching:
    """Test per-profile-set memoization."""

    def test_second_lookup_uses_cache(self, make_enforcer):
        enforcer = make_enforcer(profiles=["baseline"])
        first = enforcer.enforce("pkg::ensure")
        second = enforcer.enforce("pkg::ensure")
        assert first == second
        assert enforcer.compile_count == 1

    def test_identical_compiled_map(self, make_enforcer):
        enforcer = make_enforcer(profiles=["baseline"])
        first = enforcer.enforce(DUMP_KEY).value
        second = enforcer.enforce(DUMP_KEY).value
        assert first == second
        assert enforcer.compile_count == 1

    def test_cache_hit_serves_other_keys(self, make_enforcer):
        enforcer = make_enforcer(profiles=["baseline"])
        enforcer.enforce("pkg::ensure")
        assert enforcer.enforce("ssh::server::conf::permitrootlogin").value is False
        assert enforcer.enforce("not::enforced").found is False
        assert enforcer.compile_count == 1

    def test_parameters_cached_individually(self, make_enforcer):
        enforcer = make_enforcer(profiles=["baseline"])
        enforcer.enforce("pkg::ensure")
        assert enforcer.cache.get("pkg::ensure") == "present"
        assert enforcer.cache.has("compliance_map_" + profile_fingerprint(["baseline"]))

    def test_new_profile_set_recompiles(self, make_enforcer):
        enforcer = make_enforcer(profiles=["baseline"])
        enforcer.enforce("pkg::ensure")
        enforcer.host.values["compliance_markup::enforcement"] = ["strict"]
        assert enforcer.enforce("pkg::ensure").value == "latest"
        assert enforcer.compile_count == 2


class TestReentrancy:
    """Test the compilation lock."""

    def test_nested_lookup_is_a_miss(self, settings):
        nested = []

        class ReentrantHost(InlineHost):
            def lookup(self, key, default=None):
                if key == "compliance_map":
                    nested.append(enforcer.enforce("pkg::ensure"))
                return super().lookup(key, default)

        enforcer = ComplianceEnforcer(
            ReentrantHost(["baseline"], END_TO_END_MAP),
            cache=LookupCache(),
            loader=DocumentLoader([]),
            settings=settings,
        )

        assert enforcer.enforce("pkg::ensure").value == "present"
        assert nested == [LookupResult.miss()]
        assert enforcer.compile_count == 1

    def test_held_lock_is_a_miss(self, make_enforcer):
        enforcer = make_enforcer(profiles=["baseline"])
        enforcer.cache.set("_simp_compliance_markup_lock", True)
        assert enforcer.enforce("pkg::ensure").found is False
        assert enforcer.compile_count == 0

    def test_lock_released_after_success(self, make_enforcer):
        enforcer = make_enforcer(profiles=["baseline"])
        enforcer.enforce("pkg::ensure")
        assert enforcer.cache.get("_simp_compliance_markup_lock") is False


class TestFailures:
    """Test degradation to a miss on invalid data."""

    def test_missing_value_degrades_to_miss(self, settings):
        compliance_map = {
            "version": "2.0.0",
            "profiles": {"p": {"checks": {"c1": True, "c2": True}}},
            "checks": {
                "c1": {"type": "puppet", "settings": {"parameter": "p"}},
                "c2": {"type": "puppet", "settings": {"parameter": "q", "value": 1}},
            },
        }
        enforcer = _inline_enforcer(["p"], compliance_map, settings)
        assert enforcer.enforce("p").found is False
        assert enforcer.enforce("q").found is False
        assert enforcer.cache.get("_simp_compliance_markup_lock") is False

    def test_merge_mismatch_degrades_to_miss(self, settings):
        compliance_map = {
            "version": "2.0.0",
            "profiles": {"p": {"checks": {"c1": True, "c2": True}}},
            "checks": {
                "c1": {"type": "puppet", "settings": {"parameter": "x", "value": [1]}},
                "c2": {"type": "puppet", "settings": {"parameter": "x", "value": {"a": 1}}},
            },
        }
        enforcer = _inline_enforcer(["p"], compliance_map, settings)
        assert enforcer.enforce("x").found is False

    def test_failure_is_logged(self, settings, caplog):
        compliance_map = {
            "version": "2.0.0",
            "profiles": {"p": {"checks": {"c1": True}}},
            "checks": {"c1": {"type": "puppet", "settings": {"parameter": "p"}}},
        }
        enforcer = _inline_enforcer(["p"], compliance_map, settings)
        enforcer.enforce("p")
        assert "has no assigned value" in caplog.text

    def test_failed_compile_is_not_cached(self, settings):
        compliance_map = {
            "version": "2.0.0",
            "profiles": {"p": {"checks": {"c1": True}}},
            "checks": {"c1": {"type": "puppet", "settings": {"parameter": "p"}}},
        }
        enforcer = _inline_enforcer(["p"], compliance_map, settings)
        enforcer.enforce("p")
        enforcer.enforce("p")
        assert enforcer.compile_count == 2
