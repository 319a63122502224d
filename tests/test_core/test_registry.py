"""Unit tests for depradar.core.registry.

The shared HTTP client is mocked; no network access happens here.
"""

from __future__ import annotations

from typing import Any, Dict
from unittest.mock import AsyncMock, MagicMock

import pytest

from depradar.core.registry import NpmRegistryClient, RegistryMetadata, parse_packument
from depradar.exceptions import NetworkError, RegistryError
from depradar.utils.http import HTTPClient


@pytest.fixture
def http_client() -> MagicMock:
    client = MagicMock(spec=HTTPClient)
    client.get_json = AsyncMock()
    return client


@pytest.fixture
def express_packument() -> Dict[str, Any]:
    return {
        "name": "express",
        "dist-tags": {"latest": "4.19.2", "next": "5.0.0-beta.3"},
        "repository": {"type": "git", "url": "git+https://github.com/expressjs/express.git"},
        "homepage": "http://expressjs.com/",
        "versions": {},
    }


@pytest.mark.unit
class TestPackageUrl:
    """Tests for NpmRegistryClient.package_url."""

    def test_plain_name(self, http_client: MagicMock) -> None:
        registry = NpmRegistryClient(http_client)

        assert registry.package_url("react") == "https://registry.npmjs.org/react"

    def test_scoped_name_is_escaped(self, http_client: MagicMock) -> None:
        registry = NpmRegistryClient(http_client)

        assert registry.package_url("@types/node") == (
            "https://registry.npmjs.org/%40types%2Fnode"
        )

    def test_custom_base_url(self, http_client: MagicMock) -> None:
        registry = NpmRegistryClient(http_client, base_url="https://npm.example.com/")

        assert registry.package_url("left-pad") == "https://npm.example.com/left-pad"


@pytest.mark.unit
class TestFetchMeta:
    """Tests for NpmRegistryClient.fetch_meta."""

    @pytest.mark.asyncio
    async def test_success(
        self,
        http_client: MagicMock,
        express_packument: Dict[str, Any],
    ) -> None:
        http_client.get_json.return_value = express_packument
        registry = NpmRegistryClient(http_client)

        meta = await registry.fetch_meta("express")

        http_client.get_json.assert_awaited_once_with("https://registry.npmjs.org/express")
        assert meta.latest == "4.19.2"
        assert meta.repository == "expressjs/express"
        assert meta.homepage == "http://expressjs.com/"

    @pytest.mark.asyncio
    async def test_not_found_is_wrapped(self, http_client: MagicMock) -> None:
        http_client.get_json.side_effect = NetworkError(
            "404 Not Found",
            url="https://registry.npmjs.org/nope",
            status_code=404,
        )
        registry = NpmRegistryClient(http_client)

        with pytest.raises(RegistryError) as exc_info:
            await registry.fetch_meta("nope")

        error = exc_info.value
        assert error.message == "404 Not Found"
        assert error.package_name == "nope"
        assert error.status_code == 404
        assert error.details["package"] == "nope"

    @pytest.mark.asyncio
    async def test_transport_error_keeps_url(self, http_client: MagicMock) -> None:
        http_client.get_json.side_effect = NetworkError("Request timed out")
        registry = NpmRegistryClient(http_client)

        with pytest.raises(RegistryError) as exc_info:
            await registry.fetch_meta("slow")

        assert exc_info.value.url == "https://registry.npmjs.org/slow"
        assert exc_info.value.status_code is None


@pytest.mark.unit
class TestParsePackument:
    """Tests for parse_packument."""

    def test_missing_fields(self) -> None:
        assert parse_packument("bare", {}) == RegistryMetadata(name="bare")

    def test_missing_latest_tag(self) -> None:
        meta = parse_packument("x", {"dist-tags": {"beta": "1.0.0-beta"}})

        assert meta.latest is None

    def test_non_string_latest_ignored(self) -> None:
        assert parse_packument("x", {"dist-tags": {"latest": 3}}).latest is None

    def test_homepage_falls_back_to_bugs(self) -> None:
        meta = parse_packument(
            "x", {"bugs": {"url": "https://github.com/o/x/issues"}}
        )

        assert meta.homepage == "https://github.com/o/x/issues"

    def test_string_repository(self) -> None:
        meta = parse_packument("x", {"repository": "https://github.com/o/x"})

        assert meta.repository_field == "https://github.com/o/x"
        assert meta.repository == "o/x"

    def test_non_github_repository(self) -> None:
        meta = parse_packument(
            "x", {"repository": {"url": "https://gitlab.com/o/x.git"}}
        )

        assert meta.repository is None
