"""
Version comparison utilities for depradar.

npm manifests declare ranges rather than installed versions, so parsing
is deliberately loose: range operators and ``v`` prefixes are stripped,
pre-release/build tags are dropped, and only ``major.minor.patch`` is
compared.
"""

from __future__ import annotations

import re
from typing import List, Optional

from depradar.models.version import VersionDelta, VersionSpec

# Anything before the first ASCII digit: ``^``, ``~``, ``>=``, ``v``, spaces...
_LEADING_NON_DIGITS = re.compile(r"^[^0-9]*")


def parse_semver(raw: Optional[str]) -> Optional[VersionSpec]:
    """Parse a loosely formatted version string.

    Args:
        raw: Version or range string such as ``"^1.2.3"`` or ``"v2"``.

    Returns:
        A :class:`VersionSpec`, or ``None`` when *raw* is empty or any
        retained component is not a plain number.

    Examples:
        >>> parse_semver("^18.2.0")
        VersionSpec(major=18, minor=2, patch=0, raw='18.2.0')
        >>> parse_semver(">=4.1.0-beta.3").raw
        '4.1.0'
        >>> parse_semver("latest") is None
        True
    """
    if not raw:
        return None

    clean = _LEADING_NON_DIGITS.sub("", str(raw)).split("-", 1)[0].strip()
    if not clean:
        return None

    parts: List[int] = []
    for segment in clean.split("."):
        segment = segment.strip()
        if not (segment.isascii() and segment.isdigit()):
            return None
        try:
            parts.append(int(segment))
        except ValueError:
            # beyond the interpreter's integer string conversion limit
            return None

    parts.extend([0] * (3 - len(parts)))
    major, minor, patch = parts[:3]
    return VersionSpec(major=major, minor=minor, patch=patch, raw=clean)


def classify_delta(
    current: Optional[str],
    latest: Optional[str],
) -> VersionDelta:
    """Classify how far *latest* is ahead of *current*.

    The first component (major, then minor, then patch) in which *latest*
    is greater decides the result. A *latest* that is equal to or behind
    *current* is reported as up to date; there is no downgrade category.

    Examples:
        >>> classify_delta("^1.2.3", "2.0.0")
        <VersionDelta.MAJOR: 'major'>
        >>> classify_delta("1.2.3", None)
        <VersionDelta.UNKNOWN: 'unknown'>
    """
    current_spec = parse_semver(current)
    latest_spec = parse_semver(latest)

    if current_spec is None or latest_spec is None:
        return VersionDelta.UNKNOWN

    if latest_spec.major > current_spec.major:
        return VersionDelta.MAJOR
    if latest_spec.minor > current_spec.minor:
        return VersionDelta.MINOR
    if latest_spec.patch > current_spec.patch:
        return VersionDelta.PATCH
    return VersionDelta.UP_TO_DATE
