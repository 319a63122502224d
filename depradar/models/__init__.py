"""
Unified data model exports for depradar.

Example:
    >>> from depradar.models import DependencyResult, ResultSet, RiskTier
"""

from __future__ import annotations

from depradar.models.version import VersionDelta, VersionSpec
from depradar.models.result import (
    ALL_TIERS,
    DependencyResult,
    ReleaseEvidence,
    ResultSet,
    RiskTier,
)

__all__ = [
    "ALL_TIERS",
    "DependencyResult",
    "ReleaseEvidence",
    "ResultSet",
    "RiskTier",
    "VersionDelta",
    "VersionSpec",
]
