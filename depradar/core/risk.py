"""Heuristic upgrade-risk scoring.

Risk points come from two sources:

* the version delta: ``major`` adds 2, ``minor`` adds 1;
* release notes: each of ``breaking``, ``deprecated``, ``migration``,
  ``security`` and ``removed`` adds 1 when it appears anywhere in the
  text.

Keywords are matched as case-insensitive substrings, so ``"undeprecated"``
also counts as ``deprecated``. That false-positive source is accepted to
keep scores comparable with earlier reports.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from depradar.models import ReleaseEvidence, RiskTier, VersionDelta
from depradar.core.releases import ReleaseEntry
from depradar.constants import (
    CLUE_KEYWORD_ORDER,
    CLUE_NO_KEYWORDS,
    DELTA_POINTS,
    HIGH_RISK_THRESHOLD,
    MEDIUM_RISK_THRESHOLD,
    RELEASE_TEXT_LIMIT,
    RISK_KEYWORDS,
)


def matched_keywords(
    text: str,
    keywords: Sequence[str] = RISK_KEYWORDS,
) -> List[str]:
    """Return the *keywords* found in *text*, in the order given."""
    lowered = text.lower()
    return [word for word in keywords if word in lowered]


def risk_points(delta: VersionDelta, release_text: str) -> int:
    """Total risk points for a delta and release text."""
    points = DELTA_POINTS.get(VersionDelta(delta).value, 0)
    return points + len(matched_keywords(release_text))


def tier_for_points(points: int) -> RiskTier:
    """Map a point total to a :class:`RiskTier`."""
    if points >= HIGH_RISK_THRESHOLD:
        return RiskTier.HIGH
    if points >= MEDIUM_RISK_THRESHOLD:
        return RiskTier.MEDIUM
    return RiskTier.LOW


def score_risk(delta: VersionDelta, release_text: str) -> RiskTier:
    """Score an upgrade.

    Examples:
        >>> score_risk(VersionDelta.MAJOR, "")
        <RiskTier.MEDIUM: 'medium'>
        >>> score_risk(VersionDelta.MAJOR, "Breaking: removed old API")
        <RiskTier.HIGH: 'high'>
        >>> score_risk(VersionDelta.PATCH, "no risky words here")
        <RiskTier.LOW: 'low'>
    """
    return tier_for_points(risk_points(delta, release_text))


def release_text(
    releases: Iterable[ReleaseEntry],
    limit: Optional[int] = RELEASE_TEXT_LIMIT,
) -> str:
    """Join release names and bodies into one block of text."""
    text = "\n".join(f"{r.name or ''}\n{r.body or ''}" for r in releases)
    return text if limit is None else text[:limit]


def collect_release_evidence(releases: Iterable[ReleaseEntry]) -> ReleaseEvidence:
    """Build clues from recent releases.

    Each matched keyword yields a ``mentions "<keyword>"`` clue; when none
    match, the single clue is a placeholder saying so.
    """
    text = release_text(releases)
    clues = tuple(
        f'mentions "{word}"' for word in matched_keywords(text, CLUE_KEYWORD_ORDER)
    )
    return ReleaseEvidence(clues=clues or (CLUE_NO_KEYWORDS,), text=text)
