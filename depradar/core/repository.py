"""Repository discovery from npm registry metadata.

The registry's ``repository`` field comes in several shapes: a plain URL
string, ``{"type": "git", "url": "..."}``, with ``git+`` prefixes,
``git://`` schemes or ``.git`` suffixes. :func:`locate_repository`
reduces all of them to a GitHub ``owner/repo`` identifier.
"""

from __future__ import annotations

import re
from typing import Any, Mapping, Optional, Union

RepositoryField = Union[str, Mapping[str, Any], None]

_GITHUB_REPO = re.compile(r"github\.com[/:]([^/]+)/([^/]+)", re.IGNORECASE)


def repository_url(field: RepositoryField) -> Optional[str]:
    """Return the URL string held by a registry ``repository`` field."""
    if not field:
        return None
    if isinstance(field, str):
        return field
    if isinstance(field, Mapping):
        url = field.get("url")
        return url if isinstance(url, str) and url else None
    return None


def normalize_repository_url(url: str) -> str:
    """Strip ``git+`` and ``.git`` and rewrite ``git://`` to ``https://``."""
    if url.startswith("git+"):
        url = url[len("git+"):]
    if url.endswith(".git"):
        url = url[: -len(".git")]
    if url.startswith("git://"):
        url = "https://" + url[len("git://"):]
    return url


def locate_repository(field: RepositoryField) -> Optional[str]:
    """Extract ``owner/repo`` from a registry ``repository`` field.

    Examples:
        >>> locate_repository("git+https://github.com/axios/axios.git")
        'axios/axios'
        >>> locate_repository({"type": "git", "url": "git://github.com/expressjs/express"})
        'expressjs/express'
        >>> locate_repository("https://gitlab.com/foo/bar") is None
        True
    """
    url = repository_url(field)
    if url is None:
        return None

    match = _GITHUB_REPO.search(normalize_repository_url(url))
    if not match:
        return None
    return f"{match.group(1)}/{match.group(2)}"
