"""
depradar — dependency upgrade-risk radar for npm manifests

depradar reads a ``package.json``, asks the npm registry for the latest
version of every dependency, skims recent GitHub release notes for risky
wording, and ranks each dependency by how painful the upgrade is likely
to be.

Features include:
    • Semver delta classification (major / minor / patch)
    • Repository discovery from registry metadata
    • Keyword-based release-note risk heuristics
    • Bounded-concurrency analysis with per-package error isolation
    • Named manifest snapshots
"""

from __future__ import annotations

from depradar.__version__ import __version__

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "depradar Contributors"
__license__ = "Apache-2.0"
__description__ = "Heuristic upgrade-risk scoring for npm dependencies."

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

from depradar.core.pipeline import analyze, PackageAnalysisPipeline
from depradar.models import DependencyResult, ResultSet, RiskTier, VersionDelta

__all__ = [
    "__version__",
    "analyze",
    "PackageAnalysisPipeline",
    "DependencyResult",
    "ResultSet",
    "RiskTier",
    "VersionDelta",
]
