"""
Core functionality exports for depradar.

Importing from here keeps user-facing imports clean and stable:

    from depradar.core import PackageAnalysisPipeline, read_manifest
"""

from __future__ import annotations

from depradar.core.manifest import read_manifest, sample_manifest_text
from depradar.core.registry import NpmRegistryClient, RegistryMetadata
from depradar.core.releases import GitHubReleasesClient, ReleaseEntry
from depradar.core.repository import locate_repository
from depradar.core.risk import collect_release_evidence, score_risk
from depradar.core.pipeline import PackageAnalysisPipeline, analyze
from depradar.core.snapshots import Snapshot, SnapshotStore

__all__ = [
    "read_manifest",
    "sample_manifest_text",
    "NpmRegistryClient",
    "RegistryMetadata",
    "GitHubReleasesClient",
    "ReleaseEntry",
    "locate_repository",
    "collect_release_evidence",
    "score_risk",
    "PackageAnalysisPipeline",
    "analyze",
    "Snapshot",
    "SnapshotStore",
]
