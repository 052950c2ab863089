"""
Core types for the paheflow provider system.

Pipeline records, in the order they are produced:
  - EpisodeCandidate: one pahe.win download entry scraped from an episode page
  - DecodeParameters: the packed-JS arguments scraped from a locker/kwik page
  - ResolvedLink:     kwik form action + token, ready for the token exchange
  - RunOutput:        final direct link (or the error) for one episode
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional

# ──────────────────────────────
#  Scraped episode entries
# ──────────────────────────────
@dataclass(frozen=True)
class EpisodeCandidate:
    locker_link: str                  # https://pahe.win/xxxx
    display_name: str                 # "SubsPlease · 1080p (165MB)"
    resolution_height: int = 0        # 0 = unknown

    def to_dict(self):
        return {
            "link": self.locker_link,
            "name": self.display_name,
            "resolution": self.resolution_height,
        }

# ──────────────────────────────
#  Packed payload
# ──────────────────────────────
@dataclass(frozen=True)
class DecodeParameters:
    encoded_payload: str
    source_alphabet: str              # digit symbols, then the run delimiter
    source_base: int
    numeric_offset: int
    target_base: int = 10

# ──────────────────────────────
#  Token exchange input
# ──────────────────────────────
@dataclass(frozen=True)
class ResolvedLink:
    intermediate_link: str            # kwik form action, e.g. https://kwik.si/d/xxxx
    csrf_token: str
    session_cookie: str = ""
    referer: str = ""                 # page the form was scraped from

# ──────────────────────────────
#  Landing page metadata
# ──────────────────────────────
@dataclass
class SeriesInfo:
    title: str = ""
    kind: str = ""                    # "TV" | "Movie" | "OVA" ...
    episodes: str = ""

    def to_dict(self):
        return {"title": self.title, "type": self.kind, "episodes": self.episodes}

@dataclass
class EpisodeInfo:
    title: str = ""
    episode: str = ""

    def to_dict(self):
        return {"title": self.title, "episode": self.episode}

# ──────────────────────────────
#  Final run output
# ──────────────────────────────
@dataclass
class RunOutput:
    episode_number: int
    page_link: str
    candidate: Optional[EpisodeCandidate] = None
    direct_link: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.direct_link is not None

    def to_dict(self):
        return {
            "episode": self.episode_number,
            "page": self.page_link,
            "candidate": self.candidate.to_dict() if self.candidate else None,
            "link": self.direct_link,
            "error": self.error,
        }
