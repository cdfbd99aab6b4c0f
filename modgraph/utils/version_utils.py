"""
Semantic version parsing, ordering and constraint matching for modgraph.

Catalog versions are SemVer strings (``1.2.3``, ``1.0.0-beta.1``) and
dependency constraints use composer range syntax (``^1.2.3``, ``~1.2.0``,
``>=1.0.0 <2.0.0``, ``1.*``, ``!=1.1.0``). Parsing and range evaluation are
delegated to :mod:`semantic_version`; this module adds the catalog's own
ordering rule, composer's prerelease matching, ``!=`` exclusions and the
fail-closed policy for bad constraint strings.

Prereleases match a range when their release triple does, so
``1.1.0-beta.2`` satisfies ``^1.0.0`` while ``2.0.0-rc.1`` does not
satisfy ``<2.0.0``. Exact pins still require the exact version.

Ordering: numeric precedence on ``(major, minor, patch)``; a stable release
ranks above every prerelease of the same triple; prerelease labels compare
as plain strings.

Examples:
    >>> satisfies("1.8.0", "^1.5.0")
    True
    >>> highest_satisfying(["1.0.0", "1.5.0", "1.8.0"], ["^1.0.0", "^1.5.0"])
    '1.8.0'
    >>> highest_satisfying(["1.0.0", "2.0.0"], ["^1.0.0", "^2.0.0"]) is None
    True
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, List, Optional, Sequence, Tuple

from semantic_version import NpmSpec, Version

from modgraph.utils.logger import get_logger

logger = get_logger("version_utils")

#: ``(major, minor, patch, is_stable, prerelease_label)``
VersionKey = Tuple[int, int, int, int, str]

_LEADING_V = re.compile(r"^[vV](?=\d)")
_OR_SEPARATOR = re.compile(r"\s*\|\|?\s*")
_AND_COMMA = re.compile(r"\s*,\s*")
_OPERATOR_GAP = re.compile(r"(>=|<=|!=|>|<|=|\^|~)\s+")
_EXACT_PIN = re.compile(r"^=?[vV]?\d+\.\d+\.\d+(?:-[0-9A-Za-z.-]+)?$")
_PRERELEASE_BOUND = re.compile(r"\d-[0-9A-Za-z]")


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


@lru_cache(maxsize=4096)
def parse_version(value: Optional[str]) -> Optional[Version]:
    """Parse a catalog version string.

    Accepts a leading ``v`` and partial versions (``1.2`` becomes
    ``1.2.0``).

    Args:
        value: Raw version string.

    Returns:
        Parsed :class:`semantic_version.Version`, or ``None`` when the
        string is empty or not a version.
    """
    if not value or not value.strip():
        return None

    cleaned = _LEADING_V.sub("", value.strip())
    try:
        return Version.coerce(cleaned)
    except ValueError:
        logger.debug("Unparseable version %r", value)
        return None


def normalize_constraint(expression: str) -> str:
    """Rewrite a constraint into the form :class:`NpmSpec` accepts.

    Commas become conjunction spaces, a single ``|`` becomes ``||`` and
    whitespace between an operator and its version is removed.

    Example::

        >>> normalize_constraint(">= 1.0.0, < 2.0.0")
        '>=1.0.0 <2.0.0'
    """
    text = expression.strip()
    text = _OR_SEPARATOR.sub(" || ", text)
    text = _AND_COMMA.sub(" ", text)
    text = _OPERATOR_GAP.sub(r"\1", text)
    return " ".join(text.split())


def _release_key(version: Version) -> Tuple[int, int, int, Tuple[str, ...]]:
    return (version.major, version.minor, version.patch, tuple(version.prerelease))


class _Alternative:
    """One ``||`` branch: an npm range plus ``!=`` exclusions."""

    __slots__ = ("spec", "excluded", "pinned", "prerelease_bound")

    def __init__(
        self,
        spec: Optional[NpmSpec],
        excluded: Tuple[Version, ...],
        pinned: bool = False,
        prerelease_bound: bool = False,
    ) -> None:
        self.spec = spec
        self.excluded = excluded
        self.pinned = pinned
        self.prerelease_bound = prerelease_bound

    def match(self, version: Version) -> bool:
        key = _release_key(version)
        if any(key == _release_key(other) for other in self.excluded):
            return False
        if self.spec is None:
            return True
        if not version.prerelease or self.pinned:
            return self.spec.match(version)

        # Prereleases are judged by their release triple
        if self.spec.match(version.truncate()):
            return True
        return self.prerelease_bound and self.spec.match(version)


class Constraint:
    """A parsed constraint expression.

    Matches the way composer does: a prerelease satisfies a range when its
    release triple does, unless the branch pins an exact version.
    """

    __slots__ = ("expression", "alternatives")

    def __init__(self, expression: str, alternatives: Sequence[_Alternative]) -> None:
        self.expression = expression
        self.alternatives = tuple(alternatives)

    def match(self, version: Version) -> bool:
        return any(alt.match(version) for alt in self.alternatives)

    def __repr__(self) -> str:
        return f"Constraint({self.expression!r})"


def _parse_alternative(text: str) -> _Alternative:
    tokens = text.split()
    if not tokens:
        raise ValueError("empty alternative")

    excluded: List[Version] = []
    ranges: List[str] = []
    for token in tokens:
        if token.startswith("!="):
            target = parse_version(token[2:])
            if target is None:
                raise ValueError(f"invalid exclusion {token!r}")
            excluded.append(target)
        else:
            ranges.append(token)

    if not ranges:
        return _Alternative(None, tuple(excluded))

    return _Alternative(
        NpmSpec(" ".join(ranges)),
        tuple(excluded),
        pinned="-" not in ranges and any(_EXACT_PIN.match(t) for t in ranges),
        prerelease_bound=any(_PRERELEASE_BOUND.search(t) for t in ranges),
    )


@lru_cache(maxsize=4096)
def parse_constraint(expression: Optional[str]) -> Optional[Constraint]:
    """Parse a constraint expression.

    Args:
        expression: Raw constraint string from a dependency declaration.

    Returns:
        Parsed :class:`Constraint`, or ``None`` when the expression is
        empty or malformed.
    """
    if not expression or not expression.strip():
        return None

    normalized = normalize_constraint(expression)
    try:
        alternatives = [_parse_alternative(part) for part in normalized.split("||")]
    except ValueError:
        logger.debug("Malformed constraint %r never matches", expression)
        return None
    return Constraint(normalized, alternatives)


# ---------------------------------------------------------------------------
# Ordering
# ---------------------------------------------------------------------------


def prerelease_label(version: Version) -> str:
    """Return the dotted prerelease label, ``""`` for stable releases."""
    return ".".join(version.prerelease)


def make_version_key(major: int, minor: int, patch: int, label: str) -> VersionKey:
    """Build the catalog ordering key from decomposed version fields."""
    return (major, minor, patch, 0 if label else 1, label)


def version_key(value: str) -> Optional[VersionKey]:
    """Return the ordering key for a version string, ``None`` if invalid."""
    parsed = parse_version(value)
    if parsed is None:
        return None
    return make_version_key(
        parsed.major, parsed.minor, parsed.patch, prerelease_label(parsed)
    )


def compare_versions(a: str, b: str) -> int:
    """Compare two version strings.

    Returns:
        ``-1``, ``0`` or ``1``.

    Raises:
        ValueError: If either string is not a version.
    """
    key_a = version_key(a)
    key_b = version_key(b)
    if key_a is None or key_b is None:
        raise ValueError(f"Cannot compare {a!r} with {b!r}")
    return (key_a > key_b) - (key_a < key_b)


def sort_versions(versions: Iterable[str], *, reverse: bool = False) -> List[str]:
    """Sort version strings by catalog ordering, dropping invalid ones."""
    keyed = [(version_key(v), v) for v in versions]
    valid = [(key, v) for key, v in keyed if key is not None]
    valid.sort(key=lambda item: item[0], reverse=reverse)
    return [v for _, v in valid]


# ---------------------------------------------------------------------------
# Matching
# ---------------------------------------------------------------------------


def satisfies(version: str, constraint: str) -> bool:
    """Return True if *version* satisfies *constraint*.

    Unparseable versions and malformed constraints never match.
    """
    spec = parse_constraint(constraint)
    parsed = parse_version(version)
    if spec is None or parsed is None:
        return False
    return spec.match(parsed)


def satisfies_all(version: str, constraints: Sequence[str]) -> bool:
    """Return True if *version* satisfies every constraint in *constraints*."""
    return all(satisfies(version, c) for c in constraints)


def highest_satisfying(
    versions: Iterable[str],
    constraints: Sequence[str],
) -> Optional[str]:
    """Pick the highest version satisfying all *constraints* at once.

    Args:
        versions: Candidate version strings, any order.
        constraints: Constraint expressions that must all hold.

    Returns:
        The highest matching version string as given, or ``None`` when no
        version matches or any constraint is malformed.
    """
    specs = [parse_constraint(c) for c in constraints]
    if any(spec is None for spec in specs):
        return None

    best: Optional[str] = None
    best_key: Optional[VersionKey] = None

    for candidate in versions:
        parsed = parse_version(candidate)
        if parsed is None:
            continue
        if not all(spec.match(parsed) for spec in specs):
            continue
        key = make_version_key(
            parsed.major, parsed.minor, parsed.patch, prerelease_label(parsed)
        )
        if best_key is None or key > best_key:
            best, best_key = candidate, key

    return best


# ---------------------------------------------------------------------------
# Update classification
# ---------------------------------------------------------------------------


def get_update_type(
    current_version: Optional[str],
    target_version: Optional[str],
) -> str:
    """Determine the semantic update type between two versions.

    Args:
        current_version: Currently installed version, or ``None``.
        target_version: Target version to compare against.

    Returns:
        One of:
            - ``"new"``        : No current version exists
            - ``"same"``       : Versions are identical
            - ``"downgrade"``  : Target version is lower than current
            - ``"major"``      : Major version change
            - ``"minor"``      : Minor version change
            - ``"patch"``      : Patch-level change
            - ``"prerelease"`` : Same release triple, label change only
            - ``"unknown"``    : Invalid or unsupported version comparison

    Examples:
        >>> get_update_type("1.0.0", "2.0.0")
        'major'
        >>> get_update_type("1.0.0-beta.1", "1.0.0")
        'prerelease'
    """
    if current_version is None and target_version is None:
        return "unknown"

    if current_version is None:
        return "new"

    if target_version is None:
        return "unknown"

    current = version_key(current_version)
    target = version_key(target_version)
    if current is None or target is None:
        return "unknown"

    if target == current:
        return "same"

    if target < current:
        return "downgrade"

    if current[0] != target[0]:
        return "major"

    if current[1] != target[1]:
        return "minor"

    if current[2] != target[2]:
        return "patch"

    return "prerelease"
