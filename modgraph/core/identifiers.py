"""Resolution of ``identifier:version`` request strings.

A request names installed packages as comma-separated pairs such as
``"5:1.2.0,com.example.mod:2.0.5"``. The identifier is a numeric package
id or a package guid; the version must match a published version string
exactly.

Malformed pairs are skipped individually. Only an entirely blank input or
one with no usable pair is rejected, via :class:`ValidationError`. A
well-formed pair that matches nothing is dropped silently.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from modgraph.constants import IDENTIFIER_SEPARATOR, PAIR_SEPARATOR
from modgraph.core.catalog import CatalogView
from modgraph.exceptions import ValidationError
from modgraph.models.package import Package, PackageVersion
from modgraph.utils.logger import get_logger

logger = get_logger("identifiers")

IdentifierPair = Tuple[str, str]


def split_pairs(raw: str) -> List[str]:
    """Split a raw request string into trimmed, unique, non-empty pairs."""
    seen = set()
    pairs: List[str] = []
    for chunk in raw.split(PAIR_SEPARATOR):
        item = chunk.strip()
        if item and item not in seen:
            seen.add(item)
            pairs.append(item)
    return pairs


def parse_pair(item: str) -> Optional[IdentifierPair]:
    """Parse one ``identifier:version`` item, ``None`` if malformed."""
    parts = item.split(IDENTIFIER_SEPARATOR)
    if len(parts) != 2:
        return None

    identifier, version = parts[0].strip(), parts[1].strip()
    if not identifier or not version:
        return None
    return identifier, version


def parse_identifier_pairs(raw: Optional[str]) -> List[IdentifierPair]:
    """Parse every well-formed pair in *raw*, skipping malformed ones.

    Example::

        >>> parse_identifier_pairs(" 5:1.0.0, bad, a:b:c, guid:2.0.0 ,5:1.0.0")
        [('5', '1.0.0'), ('guid', '2.0.0')]
    """
    if not raw:
        return []

    pairs: List[IdentifierPair] = []
    for item in split_pairs(raw):
        parsed = parse_pair(item)
        if parsed is None:
            logger.debug("Skipping malformed identifier pair %r", item)
            continue
        pairs.append(parsed)
    return pairs


def require_identifier_pairs(raw: Optional[str], *, parameter: str = "mods") -> List[IdentifierPair]:
    """Parse *raw*, raising if the caller supplied nothing usable.

    Raises:
        ValidationError: If *raw* is blank or contains no well-formed pair.
    """
    if raw is None or not raw.strip():
        raise ValidationError(
            f"The {parameter} parameter is required and cannot be empty.",
            parameter=parameter,
            value=raw,
        )

    pairs = parse_identifier_pairs(raw)
    if not pairs:
        raise ValidationError(
            f"Invalid {parameter} format. Expected identifier:version pairs "
            "(e.g. 5:1.0.0,com.example.mod:2.0.0).",
            parameter=parameter,
            value=raw,
        )
    return pairs


def is_numeric_identifier(identifier: str) -> bool:
    """Return True if *identifier* names a package by positive numeric id."""
    return identifier.isascii() and identifier.isdigit() and int(identifier) > 0


class IdentifierResolver:
    """Maps identifier pairs to visible package versions.

    Args:
        view: Visibility-filtered catalog view for this request.
    """

    def __init__(self, view: CatalogView) -> None:
        self.view = view

    def resolve_package(self, identifier: str) -> Optional[Package]:
        """Return the visible package named by an id or guid."""
        if is_numeric_identifier(identifier):
            return self.view.visible_package(int(identifier))
        return self.view.visible_package_by_guid(identifier)

    def resolve_pair(self, identifier: str, version: str) -> Optional[PackageVersion]:
        """Return the visible version for one pair, or ``None``."""
        package = self.resolve_package(identifier)
        if package is None:
            logger.debug("No visible package for identifier %r", identifier)
            return None

        resolved = self.view.find_visible_version(package.id, version)
        if resolved is None:
            logger.debug("No visible version %s of package %s", version, package.id)
        return resolved

    def resolve(self, pairs: List[IdentifierPair]) -> List[PackageVersion]:
        """Resolve pairs to unique visible versions, in request order."""
        seen = set()
        versions: List[PackageVersion] = []
        for identifier, version in pairs:
            resolved = self.resolve_pair(identifier, version)
            if resolved is None or resolved.id in seen:
                continue
            seen.add(resolved.id)
            versions.append(resolved)

        logger.debug("Resolved %d of %d identifier pairs", len(versions), len(pairs))
        return versions

    def resolve_ids(self, pairs: List[IdentifierPair]) -> List[int]:
        """Resolve pairs to unique visible version ids."""
        return [version.id for version in self.resolve(pairs)]
