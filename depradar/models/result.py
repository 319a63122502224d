"""
Risk assessment data models for depradar.

A run produces one :class:`DependencyResult` per manifest entry. Results
are immutable; the whole collection lives in a :class:`ResultSet` that is
sorted once on construction and replaced wholesale on the next run.
"""

from __future__ import annotations

from enum import Enum
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Iterator, Optional, Tuple, Union

from depradar.constants import NPM_PACKAGE_PAGE
from depradar.models.version import VersionDelta


class RiskTier(str, Enum):
    """Heuristic upgrade-risk tier."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def rank(self) -> int:
        """Sort rank: high sorts first."""
        return _TIER_RANK[self]

    def __str__(self) -> str:
        return self.value


_TIER_RANK: Dict[RiskTier, int] = {
    RiskTier.HIGH: 0,
    RiskTier.MEDIUM: 1,
    RiskTier.LOW: 2,
}

#: Filter value selecting every tier.
ALL_TIERS = "all"

TierFilter = Union[RiskTier, str]


@dataclass(frozen=True)
class ReleaseEvidence:
    """Text gathered from recent releases and the keyword clues found in it.

    Attributes:
        clues: Human-readable findings, e.g. ``'mentions "breaking"'``, or a
            single placeholder explaining why there are none.
        text: Release text that was scanned (empty when unavailable).
    """

    clues: Tuple[str, ...]
    text: str = ""


@dataclass(frozen=True)
class DependencyResult:
    """Risk assessment for one declared dependency.

    Attributes:
        name: Package name as declared in the manifest.
        current_spec: Declared version range.
        latest_version: Latest registry version; ``"error"`` when the
            registry lookup failed; ``None`` when the registry has none.
        delta: Classified gap between declared and latest version.
        risk: Heuristic risk tier.
        clue_summary: First few clues joined with ``"; "`` (or the error
            message for a failed lookup).
        repository: ``owner/repo`` on GitHub, when known.
        homepage: Project homepage or issue tracker URL, when known.
        clues: Every clue gathered for the package.
        error: True when this row is a degraded registry-failure result.
    """

    name: str
    current_spec: str
    latest_version: Optional[str]
    delta: VersionDelta
    risk: RiskTier
    clue_summary: str
    repository: Optional[str] = None
    homepage: Optional[str] = None
    clues: Tuple[str, ...] = field(default_factory=tuple)
    error: bool = False

    @property
    def package_url(self) -> str:
        """Package page on npmjs.com."""
        return NPM_PACKAGE_PAGE.format(package=self.name)

    def to_json(self) -> Dict[str, Any]:
        """Return a JSON-serializable representation."""
        return {
            "name": self.name,
            "current": self.current_spec,
            "latest": self.latest_version,
            "delta": self.delta.value,
            "risk": self.risk.value,
            "clues": self.clue_summary,
            "repository": self.repository,
            "homepage": self.homepage,
            "error": self.error,
        }


def _sort_key(result: DependencyResult) -> Tuple[int, str]:
    return (result.risk.rank, result.name)


def normalize_tier(tier: TierFilter) -> Union[RiskTier, str]:
    """Validate a filter value, returning a :class:`RiskTier` or ``"all"``.

    Raises:
        ValueError: *tier* is neither ``"all"`` nor a known tier.
    """
    if isinstance(tier, RiskTier):
        return tier
    value = str(tier).lower()
    if value == ALL_TIERS:
        return ALL_TIERS
    return RiskTier(value)


class ResultSet:
    """Sorted, read-only collection of :class:`DependencyResult` records.

    Ordering is by risk (high first) then name. ``sorted`` is stable, so
    records that share both keep their input order.

    Example::

        >>> results = ResultSet([low_result, high_result])
        >>> [r.risk.value for r in results]
        ['high', 'low']
        >>> results.summary_counts()
        {'high': 1, 'medium': 0, 'low': 1}
    """

    __slots__ = ("_results",)

    def __init__(self, results: Iterable[DependencyResult] = ()) -> None:
        self._results: Tuple[DependencyResult, ...] = ()
        self.replace_all(results)

    def replace_all(self, results: Iterable[DependencyResult]) -> None:
        """Discard current contents and store a sorted copy of *results*."""
        self._results = tuple(sorted(results, key=_sort_key))

    @property
    def results(self) -> Tuple[DependencyResult, ...]:
        """All records in sorted order."""
        return self._results

    def filter(self, tier: TierFilter = ALL_TIERS) -> Tuple[DependencyResult, ...]:
        """Return the records of one tier, or all of them for ``"all"``.

        Relative order is preserved.
        """
        selected = normalize_tier(tier)
        if selected == ALL_TIERS:
            return self._results
        return tuple(r for r in self._results if r.risk is selected)

    def summary_counts(self) -> Dict[str, int]:
        """Count records per tier over the whole set."""
        counts = {tier.value: 0 for tier in RiskTier}
        for result in self._results:
            counts[result.risk.value] += 1
        return counts

    def to_json(self, tier: TierFilter = ALL_TIERS) -> Dict[str, Any]:
        """Return the (optionally filtered) records and overall counts."""
        return {
            "summary": self.summary_counts(),
            "results": [r.to_json() for r in self.filter(tier)],
        }

    def __len__(self) -> int:
        return len(self._results)

    def __iter__(self) -> Iterator[DependencyResult]:
        return iter(self._results)

    def __bool__(self) -> bool:
        return bool(self._results)

    def __repr__(self) -> str:
        return f"ResultSet({self.summary_counts()!r})"
