"""
Semantic version ordering used to pick the latest version of a package.
"""
import logging
import re
from typing import Iterable, Optional

from semver import Version

from pkgregistry.core.results import ServerError

logger = logging.getLogger(__name__)

# Same leading triple the query layer accepts for engine/semver values
_CORE_PATTERN = re.compile(r"^(0|[1-9]\d*)\.(0|[1-9]\d*)\.(0|[1-9]\d*)")


def parse_version(value: str) -> Version:
    """
    Parse a semver string for ordering.

    Full SemVer 2.0 strings keep their pre-release precedence. Anything else
    that starts with major.minor.patch is ordered by that triple alone.
    """
    try:
        return Version.parse(value)
    except (ValueError, TypeError):
        match = _CORE_PATTERN.match(value or "")
        if not match:
            raise ServerError(f"'{value}' is not a semantic version")
        logger.debug(f"Ordering non-conforming version {value!r} by its core triple")
        return Version(*(int(part) for part in match.groups()))


def compare_versions(left: str, right: str) -> int:
    """Return -1, 0 or 1 as left orders before, equal to, or after right."""
    return parse_version(left).compare(parse_version(right))


def is_greater(candidate: str, current: str) -> bool:
    return compare_versions(candidate, current) > 0


def highest(versions: Iterable[str]) -> Optional[str]:
    """Highest semver string in the iterable, or None if it is empty."""
    best = None
    for value in versions:
        if best is None or is_greater(value, best):
            best = value
    return best
