"""
Semantic version and version range parsing.

Module metadata expresses requirements with ranges such as
``>= 1.0.0 < 2.0.0``, ``1.x``, ``~1.2``, ``^1.2.3``, ``1.0.0 - 2.0.0`` and
``||`` alternatives. Each alternative is translated into a
``packaging`` SpecifierSet.
"""

from __future__ import annotations

import re

from packaging.specifiers import InvalidSpecifier, SpecifierSet
from packaging.version import InvalidVersion, Version

from compliance_engine.core.errors import InvalidVersionError

# Collapse "op version" into "opversion"
_OPERATOR_SPACE = re.compile(r"(>=|<=|>|<|=)\s+")
_HYPHEN_RANGE = re.compile(r"^(\S+)\s+-\s+(\S+)$")
_WILDCARDS = {"x", "X", "*"}


def parse_version(raw: object) -> Version:
    """Parse a version string such as ``2.0.0``.

    Raises:
        InvalidVersionError: The value is not a valid version
    """
    try:
        return Version(str(raw).strip())
    except InvalidVersion as e:
        raise InvalidVersionError(f"Invalid version: {raw!r}") from e


def _bump(parts: list[int], index: int) -> str:
    upper = parts[: index + 1]
    upper[index] += 1
    return ".".join(str(p) for p in upper)


def _numeric_parts(raw: str) -> list[int]:
    try:
        return [int(p) for p in raw.split(".")]
    except ValueError as e:
        raise InvalidVersionError(f"Invalid version: {raw!r}") from e


def _translate_term(term: str) -> list[str]:
    """Translate one whitespace-free range term into specifier clauses."""
    if term[0] == "~" and not term.startswith("~="):
        base = term.lstrip("~>").lstrip("=")
        parts = _numeric_parts(base)
        return [f">={base}", f"<{_bump(parts, min(len(parts) - 1, 1))}"]

    if term[0] == "^":
        base = term[1:]
        parts = _numeric_parts(base)
        # Bump the first non-zero component
        index = next((i for i, p in enumerate(parts) if p != 0), len(parts) - 1)
        return [f">={base}", f"<{_bump(parts, index)}"]

    if term[0] in "<>=!~":
        if term[0] == "=" and not term.startswith("=="):
            return [f"={term}"]
        return [term]

    pieces = term.split(".")
    if any(p in _WILDCARDS for p in pieces):
        fixed = []
        for piece in pieces:
            if piece in _WILDCARDS:
                break
            fixed.append(piece)
        if not fixed:
            return []
        return [f"=={'.'.join(fixed)}.*"]

    return [f"=={term}"]


def _translate_alternative(alternative: str) -> SpecifierSet:
    alternative = alternative.strip()
    if not alternative or alternative in _WILDCARDS:
        return SpecifierSet()

    hyphen = _HYPHEN_RANGE.match(alternative)
    if hyphen:
        return SpecifierSet(f">={hyphen.group(1)},<={hyphen.group(2)}")

    clauses: list[str] = []
    for term in _OPERATOR_SPACE.sub(r"\1", alternative).split():
        clauses.extend(_translate_term(term))
    return SpecifierSet(",".join(clauses))


class VersionRange:
    """A set of alternative version requirements."""

    def __init__(self, raw: str, alternatives: list[SpecifierSet]):
        self.raw = raw
        self.alternatives = alternatives

    @classmethod
    def parse(cls, raw: object) -> VersionRange:
        """Parse a version range string.

        Raises:
            InvalidVersionError: The range cannot be parsed
        """
        if not isinstance(raw, str):
            raw = str(raw)
        try:
            alternatives = [_translate_alternative(alt) for alt in raw.split("||")]
        except InvalidSpecifier as e:
            raise InvalidVersionError(f"Invalid version range: {raw!r}") from e
        return cls(raw, alternatives)

    def __contains__(self, version: Version | str) -> bool:
        if not isinstance(version, Version):
            version = parse_version(version)
        return any(spec.contains(version, prereleases=True) for spec in self.alternatives)

    def __repr__(self) -> str:
        return f"VersionRange({self.raw!r})"
