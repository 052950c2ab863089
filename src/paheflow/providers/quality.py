"""
Quality selection over the download entries of one episode page.

Target resolution:
   0  → highest available
  -1  → lowest available
   N  → first entry that is exactly N p, otherwise the highest

animepahe lists the Japanese-audio entries first, so "first match wins" picks
the preferred track. Candidates must be passed in page order.
"""
from __future__ import annotations
import re
from typing import Sequence

from .base import EpisodeCandidate
from .errors import EmptyCandidateSet

HIGHEST = 0
LOWEST = -1

_RES_RE = re.compile(r"\b(\d{3,4})p\b")


def parse_resolution(label: str) -> int:
    """'SubsPlease · 1080p (165MB)' → 1080; no tag → 0."""
    m = _RES_RE.search(label or "")
    return int(m.group(1)) if m else 0


def select_candidate(candidates: Sequence[EpisodeCandidate], target_resolution: int = HIGHEST) -> EpisodeCandidate:
    if not candidates:
        raise EmptyCandidateSet()
    if target_resolution < LOWEST:
        raise ValueError(f"{target_resolution} is not a valid target resolution")

    best = worst = candidates[0]
    for cand in candidates:
        if target_resolution > 0 and cand.resolution_height == target_resolution:
            return cand
        # strict comparisons keep the first of equal heights
        if cand.resolution_height > best.resolution_height:
            best = cand
        if cand.resolution_height < worst.resolution_height:
            worst = cand

    if target_resolution == LOWEST:
        return worst
    return best
