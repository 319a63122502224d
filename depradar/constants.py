"""
Centralized constants for depradar.

This module defines immutable configuration values used across depradar,
including network endpoints, risk heuristics, snapshot limits and logging
formats. All values are intended to be treated as read-only.
"""

from typing import Final, Mapping, Sequence

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

#: HTTP User-Agent template used for outbound requests.
USER_AGENT_TEMPLATE: Final[str] = "depradar/{version}"

# ---------------------------------------------------------------------------
# Remote endpoints
# ---------------------------------------------------------------------------

#: Base URL of the npm registry.
NPM_REGISTRY_URL: Final[str] = "https://registry.npmjs.org"

#: Public package page on npmjs.com.
NPM_PACKAGE_PAGE: Final[str] = "https://www.npmjs.com/package/{package}"

#: Base URL of the GitHub REST API.
GITHUB_API_URL: Final[str] = "https://api.github.com"

#: GitHub REST API version header value.
GITHUB_API_VERSION: Final[str] = "2022-11-28"

# ---------------------------------------------------------------------------
# HTTP configuration
# ---------------------------------------------------------------------------

#: Default network timeout in seconds.
DEFAULT_TIMEOUT: Final[int] = 30

#: Retries for transient HTTP failures. Failed calls degrade a single result
#: instead of being retried, so retrying is opt-in.
DEFAULT_MAX_RETRIES: Final[int] = 0

#: Retries after a 429 response (opt-in, like DEFAULT_MAX_RETRIES).
DEFAULT_MAX_429_RETRIES: Final[int] = 0

#: Longest honoured Retry-After wait, in seconds.
MAX_RETRY_AFTER: Final[int] = 30

#: Number of dependencies analyzed concurrently.
DEFAULT_CONCURRENCY: Final[int] = 4

# ---------------------------------------------------------------------------
# Risk heuristics
# ---------------------------------------------------------------------------

#: Keywords that add one risk point each when found in release notes.
RISK_KEYWORDS: Final[Sequence[str]] = (
    "breaking",
    "deprecated",
    "migration",
    "security",
    "removed",
)

#: Order in which matched keywords are reported as clues.
CLUE_KEYWORD_ORDER: Final[Sequence[str]] = (
    "breaking",
    "migration",
    "deprecated",
    "security",
    "removed",
)

#: Points contributed by the version delta.
DELTA_POINTS: Final[Mapping[str, int]] = {
    "major": 2,
    "minor": 1,
}

#: Minimum points for the high and medium tiers.
HIGH_RISK_THRESHOLD: Final[int] = 4
MEDIUM_RISK_THRESHOLD: Final[int] = 2

#: Number of recent releases inspected per repository.
RELEASE_FETCH_LIMIT: Final[int] = 5

#: Maximum number of characters of release text that is scanned.
RELEASE_TEXT_LIMIT: Final[int] = 12000

#: Number of clues joined into a result's summary.
CLUE_SUMMARY_LIMIT: Final[int] = 3

#: Clue placeholders.
CLUE_NO_REPOSITORY: Final[str] = "No GitHub repo found"
CLUE_NO_KEYWORDS: Final[str] = "No risky keywords in latest releases"
CLUE_FETCH_FAILED: Final[str] = "Could not load releases (rate limit or private repo)"

#: Latest-version marker for packages whose registry lookup failed.
ERROR_VERSION: Final[str] = "error"

# ---------------------------------------------------------------------------
# Snapshots
# ---------------------------------------------------------------------------

#: Maximum number of saved manifest snapshots.
MAX_SNAPSHOTS: Final[int] = 20

#: Default snapshot file location (``~`` is expanded at load time).
DEFAULT_SNAPSHOT_FILE: Final[str] = "~/.depradar/snapshots.json"

# ---------------------------------------------------------------------------
# Security constraints
# ---------------------------------------------------------------------------

#: Maximum allowed file size (in bytes) when reading manifests.
MAX_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
