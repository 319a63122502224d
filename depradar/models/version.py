"""
Version data models for depradar.

npm declared ranges (``^1.2.0``, ``~4.18``, ``>=2``) are read loosely:
only the numeric ``major.minor.patch`` core matters for risk scoring, so
a :class:`VersionSpec` keeps just those three numbers plus the cleaned
text they came from.
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass
from typing import Tuple


class VersionDelta(str, Enum):
    """Magnitude of the gap between a declared and the latest version."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"
    UP_TO_DATE = "up-to-date"
    UNKNOWN = "unknown"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class VersionSpec:
    """Numeric core of a loosely formatted version string.

    Attributes:
        major: Major component (non-negative).
        minor: Minor component, ``0`` when missing.
        patch: Patch component, ``0`` when missing.
        raw: The cleaned string the numbers were read from.
    """

    major: int
    minor: int = 0
    patch: int = 0
    raw: str = ""

    @property
    def triple(self) -> Tuple[int, int, int]:
        """``(major, minor, patch)`` tuple."""
        return (self.major, self.minor, self.patch)

    def __str__(self) -> str:
        return f"{self.major}.{self.minor}.{self.patch}"
