"""Unit tests for depradar.core.releases."""

from __future__ import annotations

from unittest.mock import AsyncMock, MagicMock

import pytest

from depradar.core.releases import GitHubReleasesClient, ReleaseEntry
from depradar.exceptions import NetworkError, ReleaseNotesError
from depradar.utils.http import HTTPClient


@pytest.fixture
def http_client() -> MagicMock:
    client = MagicMock(spec=HTTPClient)
    client.get_json_list = AsyncMock(return_value=[])
    return client


@pytest.mark.unit
class TestReleaseEntry:
    """Tests for ReleaseEntry.from_json."""

    def test_name_and_body(self) -> None:
        entry = ReleaseEntry.from_json({"name": "v2.0.0", "body": "Breaking", "id": 1})

        assert entry == ReleaseEntry(name="v2.0.0", body="Breaking")

    def test_null_fields(self) -> None:
        assert ReleaseEntry.from_json({"name": None, "body": None}) == ReleaseEntry()

    def test_non_object(self) -> None:
        assert ReleaseEntry.from_json("v1.0.0") == ReleaseEntry()


@pytest.mark.unit
class TestHeaders:
    """Tests for request headers."""

    def test_anonymous(self, http_client: MagicMock) -> None:
        headers = GitHubReleasesClient(http_client).headers

        assert headers["Accept"] == "application/vnd.github+json"
        assert headers["X-GitHub-Api-Version"] == "2022-11-28"
        assert "Authorization" not in headers

    def test_with_token(self, http_client: MagicMock) -> None:
        headers = GitHubReleasesClient(http_client, token="ghp_abc").headers

        assert headers["Authorization"] == "Bearer ghp_abc"

    def test_empty_token_is_anonymous(self, http_client: MagicMock) -> None:
        assert "Authorization" not in GitHubReleasesClient(http_client, token="").headers


@pytest.mark.unit
class TestFetchRecent:
    """Tests for GitHubReleasesClient.fetch_recent."""

    @pytest.mark.asyncio
    async def test_request_shape(self, http_client: MagicMock) -> None:
        client = GitHubReleasesClient(http_client, token="t")

        await client.fetch_recent("facebook/react")

        http_client.get_json_list.assert_awaited_once_with(
            "https://api.github.com/repos/facebook/react/releases",
            params={"per_page": 5},
            headers=client.headers,
        )

    @pytest.mark.asyncio
    async def test_custom_base_url(self, http_client: MagicMock) -> None:
        client = GitHubReleasesClient(http_client, base_url="https://ghe.example.com/api/v3/")

        await client.fetch_recent("o/r", limit=2)

        args, kwargs = http_client.get_json_list.call_args
        assert args[0] == "https://ghe.example.com/api/v3/repos/o/r/releases"
        assert kwargs["params"] == {"per_page": 2}

    @pytest.mark.asyncio
    async def test_returns_entries_in_order(self, http_client: MagicMock) -> None:
        http_client.get_json_list.return_value = [
            {"name": "v3", "body": "newest"},
            {"name": "v2", "body": "older"},
        ]

        entries = await GitHubReleasesClient(http_client).fetch_recent("o/r")

        assert [e.name for e in entries] == ["v3", "v2"]

    @pytest.mark.asyncio
    async def test_truncates_to_limit(self, http_client: MagicMock) -> None:
        http_client.get_json_list.return_value = [{"name": str(i)} for i in range(10)]

        entries = await GitHubReleasesClient(http_client).fetch_recent("o/r", limit=3)

        assert len(entries) == 3

    @pytest.mark.asyncio
    async def test_failure_is_wrapped(self, http_client: MagicMock) -> None:
        http_client.get_json_list.side_effect = NetworkError(
            "403 Forbidden", status_code=403
        )

        with pytest.raises(ReleaseNotesError) as exc_info:
            await GitHubReleasesClient(http_client).fetch_recent("private/repo")

        error = exc_info.value
        assert error.message == "403 Forbidden"
        assert error.repository == "private/repo"
        assert error.url == "https://api.github.com/repos/private/repo/releases"
