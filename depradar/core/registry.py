"""npm registry client for depradar.

Fetches the packument (``GET /<name>``) of a package and keeps the three
fields risk analysis needs: the ``latest`` dist-tag, the raw
``repository`` field and a homepage link.

Typical usage::

    async with HTTPClient() as http:
        registry = NpmRegistryClient(http)
        meta = await registry.fetch_meta("express")
        print(meta.latest, meta.repository)     # "4.19.2" "expressjs/express"
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import quote

from depradar.exceptions import NetworkError, RegistryError
from depradar.utils.http import HTTPClient
from depradar.utils.logger import get_logger
from depradar.constants import NPM_REGISTRY_URL
from depradar.core.repository import RepositoryField, locate_repository

logger = get_logger("registry")

__all__ = ["NpmRegistryClient", "RegistryMetadata"]


@dataclass(frozen=True)
class RegistryMetadata:
    """Registry facts about one package.

    Attributes:
        name: Package name that was queried.
        latest: Version tagged ``latest``, or ``None`` if the tag is absent.
        repository_field: Raw ``repository`` value (string, object or None).
        homepage: ``homepage`` or, failing that, the ``bugs`` URL.
    """

    name: str
    latest: Optional[str] = None
    repository_field: RepositoryField = None
    homepage: Optional[str] = None

    @property
    def repository(self) -> Optional[str]:
        """GitHub ``owner/repo`` derived from :attr:`repository_field`."""
        return locate_repository(self.repository_field)


class NpmRegistryClient:
    """Package registry collaborator backed by the npm registry.

    Args:
        http_client: Shared :class:`HTTPClient`.
        base_url: Registry root; override for mirrors or private registries.
    """

    def __init__(
        self,
        http_client: HTTPClient,
        base_url: str = NPM_REGISTRY_URL,
    ) -> None:
        self.http_client = http_client
        self.base_url = base_url.rstrip("/")

    def package_url(self, name: str) -> str:
        """Return the packument URL for *name* (scoped names are escaped)."""
        return f"{self.base_url}/{quote(name, safe='')}"

    async def fetch_meta(self, name: str) -> RegistryMetadata:
        """Fetch registry metadata for *name*.

        Raises:
            RegistryError: Non-2xx response, transport failure or a body
                that is not a JSON object. The message is the HTTP status
                line (``"404 Not Found"``) when one is available.
        """
        url = self.package_url(name)
        logger.debug("Fetching registry metadata: %s", url)

        try:
            data = await self.http_client.get_json(url)
        except NetworkError as exc:
            raise RegistryError(
                exc.message,
                package_name=name,
                url=exc.url or url,
                status_code=exc.status_code,
            ) from exc

        return parse_packument(name, data)


def parse_packument(name: str, data: Dict[str, Any]) -> RegistryMetadata:
    """Extract :class:`RegistryMetadata` from a raw packument."""
    dist_tags = data.get("dist-tags") or {}
    latest = dist_tags.get("latest") if isinstance(dist_tags, dict) else None

    bugs = data.get("bugs")
    bugs_url = bugs.get("url") if isinstance(bugs, dict) else None
    homepage = data.get("homepage") or bugs_url

    return RegistryMetadata(
        name=name,
        latest=latest if isinstance(latest, str) else None,
        repository_field=data.get("repository"),
        homepage=homepage if isinstance(homepage, str) else None,
    )
