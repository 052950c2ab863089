"""
Episode ranges and animepahe release-API paging (30 episodes per page).
"""
from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Optional

from .errors import InvalidEpisodeRange

PAGE_SIZE = 30

_RANGE_RE = re.compile(r"(\d+)-(\d+)")


@dataclass(frozen=True)
class EpisodeRange:
    start: int
    end: int

    def __contains__(self, episode: int) -> bool:
        return self.start <= episode <= self.end

    def __str__(self):
        return f"{self.start}-{self.end}"


def get_page(episode: int) -> int:
    """API page holding the given 1-based episode number."""
    return max(1, (episode + PAGE_SIZE - 1) // PAGE_SIZE)


def pagination_range(start: int, end: int) -> list[int]:
    return list(range(get_page(start), get_page(end) + 1))


def parse_episode_range(text: str) -> Optional[EpisodeRange]:
    """'all' → None, '1-15' → EpisodeRange(1, 15)."""
    if text == "all":
        return None
    m = _RANGE_RE.fullmatch(text or "")
    if m:
        start, end = int(m.group(1)), int(m.group(2))
        if start > 0 and end > start:
            return EpisodeRange(start, end)
    raise InvalidEpisodeRange(f"Invalid episode range format {text!r}. Use 'all' or '1-15'.")
