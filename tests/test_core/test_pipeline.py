"""Unit tests for depradar.core.pipeline.

Test Coverage:
- Result assembly for the no-repository, release-failure and keyword paths
- Degraded results when registry lookups fail
- Batch analysis: ordering, progress reporting, concurrency bound
- Top-level ``analyze``: manifest validation before any network activity
"""

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional, Tuple
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from depradar.config import DepRadarConfig
from depradar.core.pipeline import PackageAnalysisPipeline, analyze
from depradar.core.registry import RegistryMetadata
from depradar.core.releases import ReleaseEntry
from depradar.exceptions import ManifestError, RegistryError, ReleaseNotesError
from depradar.models import ResultSet, RiskTier, VersionDelta


def meta(
    name: str,
    latest: Optional[str],
    repository: Optional[str] = None,
) -> RegistryMetadata:
    field = f"https://github.com/{repository}" if repository else None
    return RegistryMetadata(name=name, latest=latest, repository_field=field)


@pytest.fixture
def registry() -> MagicMock:
    mock = MagicMock()
    mock.fetch_meta = AsyncMock()
    return mock


@pytest.fixture
def releases() -> MagicMock:
    mock = MagicMock()
    mock.fetch_recent = AsyncMock(return_value=[])
    return mock


@pytest.fixture
def pipeline(registry: MagicMock, releases: MagicMock) -> PackageAnalysisPipeline:
    return PackageAnalysisPipeline(registry, releases, concurrency=2)


@pytest.mark.unit
class TestAnalyzeOne:
    """Tests for PackageAnalysisPipeline.analyze_one."""

    @pytest.mark.asyncio
    async def test_major_without_repository(
        self,
        pipeline: PackageAnalysisPipeline,
        registry: MagicMock,
        releases: MagicMock,
    ) -> None:
        registry.fetch_meta.return_value = meta("left-pad", "2.0.0")

        result = await pipeline.analyze_one("left-pad", "1.0.0")

        assert result.latest_version == "2.0.0"
        assert result.delta is VersionDelta.MAJOR
        assert result.risk is RiskTier.MEDIUM
        assert result.clue_summary == "No GitHub repo found"
        assert result.repository is None
        assert result.error is False
        releases.fetch_recent.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_registry_not_found_degrades(
        self,
        pipeline: PackageAnalysisPipeline,
        registry: MagicMock,
        releases: MagicMock,
    ) -> None:
        registry.fetch_meta.side_effect = RegistryError(
            "404 Not Found", package_name="nope", status_code=404
        )

        result = await pipeline.analyze_one("nope", "^1.0.0")

        assert result.name == "nope"
        assert result.current_spec == "^1.0.0"
        assert result.latest_version == "error"
        assert result.delta is VersionDelta.UNKNOWN
        assert result.risk is RiskTier.MEDIUM
        assert result.clue_summary == "404 Not Found"
        assert result.error is True
        releases.fetch_recent.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unexpected_registry_failure_degrades(
        self,
        pipeline: PackageAnalysisPipeline,
        registry: MagicMock,
    ) -> None:
        registry.fetch_meta.side_effect = RuntimeError("boom")

        result = await pipeline.analyze_one("x", "1.0.0")

        assert result.error is True
        assert result.clue_summary == "boom"

    @pytest.mark.asyncio
    async def test_oversized_declared_version_is_unknown(
        self,
        pipeline: PackageAnalysisPipeline,
        registry: MagicMock,
    ) -> None:
        registry.fetch_meta.return_value = meta("x", "1.0.0")

        result = await pipeline.analyze_one("x", "9" * 5000)

        assert result.delta is VersionDelta.UNKNOWN
        assert result.risk is RiskTier.LOW
        assert result.error is False

    @pytest.mark.asyncio
    async def test_assessment_failure_degrades(
        self,
        pipeline: PackageAnalysisPipeline,
        registry: MagicMock,
    ) -> None:
        registry.fetch_meta.return_value = meta("x", "1.0.0")

        with patch(
            "depradar.core.pipeline.classify_delta",
            side_effect=ValueError("bad version"),
        ):
            result = await pipeline.analyze_one("x", "1.0.0")

        assert result.latest_version == "error"
        assert result.delta is VersionDelta.UNKNOWN
        assert result.risk is RiskTier.MEDIUM
        assert result.clue_summary == "bad version"
        assert result.error is True

    @pytest.mark.asyncio
    async def test_release_failure_only_affects_clues(
        self,
        pipeline: PackageAnalysisPipeline,
        registry: MagicMock,
        releases: MagicMock,
    ) -> None:
        registry.fetch_meta.return_value = meta("axios", "1.7.0", "axios/axios")
        releases.fetch_recent.side_effect = ReleaseNotesError(
            "403 Forbidden", repository="axios/axios"
        )

        result = await pipeline.analyze_one("axios", "^1.6.0")

        assert result.latest_version == "1.7.0"
        assert result.delta is VersionDelta.MINOR
        assert result.risk is RiskTier.LOW
        assert result.repository == "axios/axios"
        assert result.clue_summary == "Could not load releases (rate limit or private repo)"
        assert result.error is False

    @pytest.mark.asyncio
    async def test_keywords_raise_risk(
        self,
        pipeline: PackageAnalysisPipeline,
        registry: MagicMock,
        releases: MagicMock,
    ) -> None:
        registry.fetch_meta.return_value = meta("react", "18.3.1", "facebook/react")
        releases.fetch_recent.return_value = [
            ReleaseEntry(name="18.3.1", body="Removed legacy context."),
            ReleaseEntry(name="18.0.0", body="BREAKING: see the migration guide."),
        ]

        result = await pipeline.analyze_one("react", "^17.0.2")

        releases.fetch_recent.assert_awaited_once_with("facebook/react", limit=5)
        assert result.delta is VersionDelta.MAJOR
        assert result.risk is RiskTier.HIGH
        assert result.clues == (
            'mentions "breaking"',
            'mentions "migration"',
            'mentions "removed"',
        )
        assert result.clue_summary == (
            'mentions "breaking"; mentions "migration"; mentions "removed"'
        )

    @pytest.mark.asyncio
    async def test_summary_keeps_first_three_clues(
        self,
        pipeline: PackageAnalysisPipeline,
        registry: MagicMock,
        releases: MagicMock,
    ) -> None:
        registry.fetch_meta.return_value = meta("lib", "1.0.1", "o/lib")
        releases.fetch_recent.return_value = [
            ReleaseEntry(body="breaking deprecated migration security removed"),
        ]

        result = await pipeline.analyze_one("lib", "1.0.0")

        assert len(result.clues) == 5
        assert result.clue_summary.count("mentions") == 3
        assert result.risk is RiskTier.HIGH

    @pytest.mark.asyncio
    async def test_quiet_releases(
        self,
        pipeline: PackageAnalysisPipeline,
        registry: MagicMock,
        releases: MagicMock,
    ) -> None:
        registry.fetch_meta.return_value = meta("lib", "1.0.0", "o/lib")
        releases.fetch_recent.return_value = [ReleaseEntry(name="1.0.0", body="Docs")]

        result = await pipeline.analyze_one("lib", "1.0.0")

        assert result.delta is VersionDelta.UP_TO_DATE
        assert result.risk is RiskTier.LOW
        assert result.clue_summary == "No risky keywords in latest releases"

    @pytest.mark.asyncio
    async def test_missing_latest_is_unknown(
        self,
        pipeline: PackageAnalysisPipeline,
        registry: MagicMock,
    ) -> None:
        registry.fetch_meta.return_value = meta("odd", None)

        result = await pipeline.analyze_one("odd", "1.0.0")

        assert result.latest_version is None
        assert result.delta is VersionDelta.UNKNOWN
        assert result.risk is RiskTier.LOW
        assert result.error is False


@pytest.mark.unit
class TestAnalyzeAll:
    """Tests for PackageAnalysisPipeline.analyze_all."""

    @pytest.mark.asyncio
    async def test_results_sorted_and_isolated(
        self,
        pipeline: PackageAnalysisPipeline,
        registry: MagicMock,
    ) -> None:
        latest = {"zeta": "1.0.1", "alpha": "2.0.0", "beta": "3.0.0"}

        async def fetch_meta(name: str) -> RegistryMetadata:
            if name == "broken":
                raise RegistryError("500 Internal Server Error", package_name=name)
            return meta(name, latest[name])

        registry.fetch_meta.side_effect = fetch_meta
        deps = {"zeta": "1.0.0", "broken": "1.0.0", "beta": "1.0.0", "alpha": "1.0.0"}

        results = await pipeline.analyze_all(deps)

        assert isinstance(results, ResultSet)
        assert [r.name for r in results] == ["alpha", "beta", "broken", "zeta"]
        assert [r.risk for r in results] == [
            RiskTier.MEDIUM, RiskTier.MEDIUM, RiskTier.MEDIUM, RiskTier.LOW,
        ]
        assert results.filter("medium")[2].error is True

    @pytest.mark.asyncio
    async def test_progress_callback(
        self,
        pipeline: PackageAnalysisPipeline,
        registry: MagicMock,
    ) -> None:
        registry.fetch_meta.side_effect = lambda name: meta(name, "1.0.0")
        calls: List[Tuple[int, int]] = []

        await pipeline.analyze_all(
            {"a": "1.0.0", "b": "1.0.0", "c": "1.0.0"},
            progress_callback=lambda done, total: calls.append((done, total)),
        )

        assert calls == [(1, 3), (2, 3), (3, 3)]

    @pytest.mark.asyncio
    async def test_concurrency_bound(
        self,
        registry: MagicMock,
        releases: MagicMock,
    ) -> None:
        in_flight = 0
        peak = 0

        async def fetch_meta(name: str) -> RegistryMetadata:
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0)
            in_flight -= 1
            return meta(name, "1.0.0")

        registry.fetch_meta.side_effect = fetch_meta
        deps: Dict[str, str] = {f"pkg{i}": "1.0.0" for i in range(8)}

        pipeline = PackageAnalysisPipeline(registry, releases, concurrency=3)
        results = await pipeline.analyze_all(deps)

        assert len(results) == 8
        assert 1 <= peak <= 3

    @pytest.mark.asyncio
    async def test_sequential_mode(
        self,
        registry: MagicMock,
        releases: MagicMock,
    ) -> None:
        order: List[str] = []

        async def fetch_meta(name: str) -> RegistryMetadata:
            order.append(name)
            await asyncio.sleep(0)
            return meta(name, "1.0.0")

        registry.fetch_meta.side_effect = fetch_meta

        pipeline = PackageAnalysisPipeline(registry, releases, concurrency=1)
        await pipeline.analyze_all({"c": "1", "a": "1", "b": "1"})

        assert order == ["c", "a", "b"]

    def test_invalid_concurrency(self, registry: MagicMock, releases: MagicMock) -> None:
        with pytest.raises(ValueError):
            PackageAnalysisPipeline(registry, releases, concurrency=0)


@pytest.mark.unit
class TestAnalyze:
    """Tests for the module-level analyze function."""

    @pytest.mark.asyncio
    async def test_manifest_error_before_network(self) -> None:
        with patch("depradar.core.pipeline.HTTPClient") as mock_http:
            with pytest.raises(ManifestError, match="No dependencies"):
                await analyze('{"dependencies": {}}')

        mock_http.assert_not_called()

    @pytest.mark.asyncio
    async def test_wires_clients_from_config(self) -> None:
        config = DepRadarConfig(
            concurrency=3,
            timeout=7,
            registry_url="https://npm.example.com",
            github_api_url="https://ghe.example.com/api/v3",
        )
        fake_registry = MagicMock()
        fake_registry.fetch_meta = AsyncMock(return_value=meta("left-pad", "2.0.0"))

        with patch("depradar.core.pipeline.HTTPClient") as mock_http, patch(
            "depradar.core.pipeline.NpmRegistryClient", return_value=fake_registry
        ) as mock_registry, patch(
            "depradar.core.pipeline.GitHubReleasesClient"
        ) as mock_releases:
            results = await analyze(
                '{"dependencies": {"left-pad": "1.0.0"}}',
                config=config,
                github_token="tok",
            )

        http = mock_http.return_value.__aenter__.return_value
        mock_http.assert_called_once_with(
            timeout=7, max_retries=0, max_429_retries=0, max_concurrency=6
        )
        mock_registry.assert_called_once_with(http, base_url="https://npm.example.com")
        mock_releases.assert_called_once_with(
            http, token="tok", base_url="https://ghe.example.com/api/v3"
        )

        (result,) = results.results
        assert result.name == "left-pad"
        assert result.delta is VersionDelta.MAJOR
        assert result.risk is RiskTier.MEDIUM
        assert result.clue_summary == "No GitHub repo found"
