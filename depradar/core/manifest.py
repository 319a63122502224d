"""Manifest reader for depradar.

Turns ``package.json`` text into a flat ``{name: declared range}``
mapping. ``dependencies`` and ``devDependencies`` are merged; a package
listed in both keeps its ``devDependencies`` range. A missing or falsy
section (``null``, ``false``, ``""``, ``0``) counts as empty.

Every problem here is fatal for the run and is raised as
:class:`ManifestError` before any network request is made.
"""

from __future__ import annotations

import json
from typing import Any, Dict, Optional

from depradar.exceptions import ManifestError
from depradar.utils.logger import get_logger

logger = get_logger("manifest")

#: Manifest sections that are merged, in increasing precedence.
DEPENDENCY_SECTIONS = ("dependencies", "devDependencies")

SAMPLE_MANIFEST: Dict[str, Any] = {
    "dependencies": {
        "react": "^18.2.0",
        "axios": "^1.6.0",
        "express": "^4.18.0",
    },
    "devDependencies": {
        "vite": "^5.0.0",
        "eslint": "^8.50.0",
    },
}


def sample_manifest_text() -> str:
    """Return a small example manifest, pretty-printed."""
    return json.dumps(SAMPLE_MANIFEST, indent=2)


def read_manifest(text: str, *, source: Optional[str] = None) -> Dict[str, str]:
    """Parse manifest *text* into ``{package name: declared range}``.

    Args:
        text: Raw ``package.json`` content.
        source: Description of where the text came from, for error details.

    Returns:
        Merged dependency mapping in declaration order.

    Raises:
        ManifestError: Invalid JSON, a document or section that is not an
            object, or no dependencies at all.

    Example::

        >>> read_manifest('{"dependencies": {"a": "1"}, "devDependencies": {"a": "2"}}')
        {'a': '2'}
    """
    try:
        document = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ManifestError(f"Invalid JSON: {exc}", source=source) from exc

    if not isinstance(document, dict):
        raise ManifestError(
            "Manifest must be a JSON object",
            source=source,
        )

    merged: Dict[str, str] = {}
    for section in DEPENDENCY_SECTIONS:
        entries = document.get(section)
        if not entries:
            continue
        if not isinstance(entries, dict):
            raise ManifestError(
                f"'{section}' must be an object mapping names to versions",
                source=source,
            )
        for name, spec in entries.items():
            merged[name] = spec if isinstance(spec, str) else json.dumps(spec)

    if not merged:
        raise ManifestError(
            "No dependencies/devDependencies found.",
            source=source,
        )

    logger.debug("Read %d dependencies from %s", len(merged), source or "manifest")
    return merged
