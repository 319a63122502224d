"""Per-dependency risk analysis pipeline for depradar.

For every ``(name, declared range)`` pair the pipeline:

1. fetches registry metadata (latest version, repository field);
2. classifies the version delta;
3. fetches recent GitHub releases and extracts keyword clues;
4. scores the upgrade risk;
5. assembles an immutable :class:`DependencyResult`.

:meth:`PackageAnalysisPipeline.analyze_one` never raises. A failed
registry lookup degrades the row to ``latest="error"``, ``delta=unknown``,
``risk=medium``; a failed release lookup only replaces the clues. One bad
package therefore never aborts the batch.

Typical usage::

    results = await analyze(Path("package.json").read_text(), config=config)
    for result in results.filter("high"):
        print(result.name, result.clue_summary)
"""

from __future__ import annotations

import asyncio
from typing import Callable, Dict, List, Mapping, Optional

from depradar.config import DepRadarConfig
from depradar.exceptions import DepRadarError
from depradar.models import DependencyResult, ReleaseEvidence, ResultSet, RiskTier
from depradar.models import VersionDelta
from depradar.utils.http import HTTPClient
from depradar.utils.logger import get_logger
from depradar.utils.version_utils import classify_delta
from depradar.core.manifest import read_manifest
from depradar.core.registry import NpmRegistryClient, RegistryMetadata
from depradar.core.releases import GitHubReleasesClient
from depradar.core.risk import collect_release_evidence, score_risk
from depradar.constants import (
    CLUE_FETCH_FAILED,
    CLUE_NO_REPOSITORY,
    CLUE_SUMMARY_LIMIT,
    DEFAULT_CONCURRENCY,
    ERROR_VERSION,
    RELEASE_FETCH_LIMIT,
)

logger = get_logger("pipeline")

__all__ = ["PackageAnalysisPipeline", "analyze", "ProgressCallback"]

#: Called as ``(completed, total)`` after each dependency finishes.
ProgressCallback = Callable[[int, int], None]

#: Risk assigned when registry metadata cannot be fetched.
DEGRADED_RISK = RiskTier.MEDIUM


def _error_message(exc: Exception) -> str:
    if isinstance(exc, DepRadarError):
        return exc.message
    return str(exc) or exc.__class__.__name__


class PackageAnalysisPipeline:
    """Analyze dependencies against a registry and a release-notes source.

    Args:
        registry: Object with ``async fetch_meta(name)``.
        releases: Object with ``async fetch_recent(repository, limit)``.
        concurrency: Maximum dependencies analyzed at once; ``1`` processes
            them strictly one after another.

    Example::

        >>> async with HTTPClient() as http:
        ...     pipeline = PackageAnalysisPipeline(
        ...         NpmRegistryClient(http), GitHubReleasesClient(http)
        ...     )
        ...     result = await pipeline.analyze_one("left-pad", "1.0.0")
    """

    def __init__(
        self,
        registry: NpmRegistryClient,
        releases: GitHubReleasesClient,
        *,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")

        self.registry = registry
        self.releases = releases
        self.concurrency = concurrency

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def analyze_one(self, name: str, current_spec: str) -> DependencyResult:
        """Analyze a single dependency; failures become degraded results."""
        try:
            meta = await self.registry.fetch_meta(name)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Registry lookup failed for %s: %s", name, exc)
            return self.degraded_result(name, current_spec, _error_message(exc))

        try:
            return await self._assess(name, current_spec, meta)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Analysis failed for %s: %s", name, exc)
            return self.degraded_result(name, current_spec, _error_message(exc))

    async def analyze_all(
        self,
        dependencies: Mapping[str, str],
        *,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> ResultSet:
        """Analyze every dependency and return the sorted :class:`ResultSet`.

        The set is built only after all dependencies have finished.
        """
        total = len(dependencies)
        completed = 0
        semaphore = asyncio.Semaphore(self.concurrency)

        async def run(name: str, spec: str) -> DependencyResult:
            nonlocal completed
            async with semaphore:
                result = await self.analyze_one(name, spec)
            completed += 1
            logger.debug("Processed %d/%d packages", completed, total)
            if progress_callback:
                progress_callback(completed, total)
            return result

        logger.info("Analyzing %d packages...", total)
        results: List[DependencyResult] = await asyncio.gather(
            *(run(name, spec) for name, spec in dependencies.items())
        )
        logger.info("Done. Analyzed %d packages.", total)
        return ResultSet(results)

    def degraded_result(
        self,
        name: str,
        current_spec: str,
        message: str,
    ) -> DependencyResult:
        """Build the fixed result used when registry metadata is unavailable."""
        return DependencyResult(
            name=name,
            current_spec=current_spec,
            latest_version=ERROR_VERSION,
            delta=VersionDelta.UNKNOWN,
            risk=DEGRADED_RISK,
            clue_summary=message,
            clues=(message,),
            error=True,
        )

    # ------------------------------------------------------------------
    # Steps (private)
    # ------------------------------------------------------------------

    async def _assess(
        self,
        name: str,
        current_spec: str,
        meta: RegistryMetadata,
    ) -> DependencyResult:
        repository = meta.repository
        delta = classify_delta(current_spec, meta.latest)
        evidence = await self._release_evidence(repository)
        risk = score_risk(delta, evidence.text)

        return DependencyResult(
            name=name,
            current_spec=current_spec,
            latest_version=meta.latest,
            delta=delta,
            risk=risk,
            clue_summary="; ".join(evidence.clues[:CLUE_SUMMARY_LIMIT]),
            repository=repository,
            homepage=meta.homepage,
            clues=evidence.clues,
        )

    async def _release_evidence(self, repository: Optional[str]) -> ReleaseEvidence:
        if not repository:
            return ReleaseEvidence(clues=(CLUE_NO_REPOSITORY,))

        try:
            releases = await self.releases.fetch_recent(
                repository, limit=RELEASE_FETCH_LIMIT
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("Release lookup failed for %s: %s", repository, exc)
            return ReleaseEvidence(clues=(CLUE_FETCH_FAILED,))

        return collect_release_evidence(releases)


async def analyze(
    manifest_text: str,
    *,
    config: Optional[DepRadarConfig] = None,
    github_token: Optional[str] = None,
    progress_callback: Optional[ProgressCallback] = None,
    source: Optional[str] = None,
) -> ResultSet:
    """Analyze a whole manifest.

    The manifest is validated first, so input errors surface before any
    network activity.

    Args:
        manifest_text: Raw ``package.json`` text.
        config: Settings (endpoints, timeout, concurrency); defaults apply
            when omitted.
        github_token: Optional GitHub token for the releases API.
        progress_callback: Optional ``(completed, total)`` observer.
        source: Manifest origin, used in error details.

    Raises:
        ManifestError: The manifest is malformed or declares nothing.
    """
    config = config or DepRadarConfig()
    dependencies: Dict[str, str] = read_manifest(manifest_text, source=source)

    async with HTTPClient(
        timeout=config.timeout,
        max_retries=0,
        max_429_retries=0,
        max_concurrency=max(config.concurrency * 2, 2),
    ) as http:
        pipeline = PackageAnalysisPipeline(
            NpmRegistryClient(http, base_url=config.registry_url),
            GitHubReleasesClient(
                http, token=github_token, base_url=config.github_api_url
            ),
            concurrency=config.concurrency,
        )
        return await pipeline.analyze_all(
            dependencies, progress_callback=progress_callback
        )
