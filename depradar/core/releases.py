"""GitHub releases client for depradar.

Reads the most recent releases of a repository so that their names and
bodies can be scanned for risky wording. Request headers follow the
GitHub REST conventions; a token raises the rate limit from 60 to 5 000
requests per hour.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from depradar.exceptions import NetworkError, ReleaseNotesError
from depradar.utils.http import HTTPClient
from depradar.utils.logger import get_logger
from depradar.constants import (
    GITHUB_API_URL,
    GITHUB_API_VERSION,
    RELEASE_FETCH_LIMIT,
)

logger = get_logger("releases")

__all__ = ["GitHubReleasesClient", "ReleaseEntry"]


@dataclass(frozen=True)
class ReleaseEntry:
    """Name and body of one release; either may be missing."""

    name: Optional[str] = None
    body: Optional[str] = None

    @classmethod
    def from_json(cls, data: Any) -> "ReleaseEntry":
        if not isinstance(data, dict):
            return cls()
        name = data.get("name")
        body = data.get("body")
        return cls(
            name=name if isinstance(name, str) else None,
            body=body if isinstance(body, str) else None,
        )


class GitHubReleasesClient:
    """Release-notes collaborator backed by the GitHub REST API.

    Args:
        http_client: Shared :class:`HTTPClient`.
        token: Optional personal access token.
        base_url: API root; override for GitHub Enterprise.
    """

    def __init__(
        self,
        http_client: HTTPClient,
        token: Optional[str] = None,
        base_url: str = GITHUB_API_URL,
    ) -> None:
        self.http_client = http_client
        self.token = token
        self.base_url = base_url.rstrip("/")

    @property
    def headers(self) -> Dict[str, str]:
        h: Dict[str, str] = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": GITHUB_API_VERSION,
        }
        if self.token:
            h["Authorization"] = f"Bearer {self.token}"
        return h

    async def fetch_recent(
        self,
        repository: str,
        limit: int = RELEASE_FETCH_LIMIT,
    ) -> List[ReleaseEntry]:
        """Return up to *limit* most recent releases of ``owner/repo``.

        Raises:
            ReleaseNotesError: The request failed (missing or private
                repository, rate limiting, transport error).
        """
        url = f"{self.base_url}/repos/{repository}/releases"
        logger.debug("Fetching releases: %s", url)

        try:
            data = await self.http_client.get_json_list(
                url,
                params={"per_page": limit},
                headers=self.headers,
            )
        except NetworkError as exc:
            raise ReleaseNotesError(
                exc.message,
                repository=repository,
                url=exc.url or url,
                status_code=exc.status_code,
            ) from exc

        return [ReleaseEntry.from_json(item) for item in data[:limit]]
