"""
Provider engine — finds the source scraper for a link, picks a download entry
per episode and resolves it through the matching embed resolver.

Usage:
    with ProviderEngine() as engine:
        pages = engine.episode_pages(link, episode_range)
        for number, page in enumerate(pages, start=1):
            print(engine.run_episode(number, page).to_dict())
"""
from __future__ import annotations
import logging
from typing import Optional
from urllib.parse import urlparse

import requests

from .base import EpisodeInfo, RunOutput, SeriesInfo
from .errors import PaheError
from .fetcher import Fetcher
from .pagination import EpisodeRange
from .. import config

log = logging.getLogger("paheflow.providers")


# ──────────────────────────────
#  Scraper registries
# ──────────────────────────────
class _SourceScraper:
    id: str
    name: str
    rank: int
    domains: list[str]

    def fetch_metadata(self, url: str, fetcher: Fetcher) -> SeriesInfo | EpisodeInfo:
        raise NotImplementedError

    def episode_pages(self, url: str, fetcher: Fetcher, episode_range: Optional[EpisodeRange] = None) -> list[str]:
        raise NotImplementedError

    def fetch_episode(self, url: str, fetcher: Fetcher, target_resolution: int = 0):
        raise NotImplementedError


class _EmbedScraper:
    id: str
    name: str
    rank: int
    domains: list[str]

    def resolve(self, url: str, fetcher: Fetcher, max_attempts: int = config.KWIK_MAX_ATTEMPTS) -> str:
        raise NotImplementedError


# Global registries, populated when source/embed modules are imported
_SOURCES: list[_SourceScraper] = []
_EMBEDS: dict[str, _EmbedScraper] = {}


def register_source(scraper):
    """Decorator to register a source scraper class."""
    global _SOURCES
    _SOURCES = [s for s in _SOURCES if s.id != scraper.id]
    _SOURCES.append(scraper())
    _SOURCES.sort(key=lambda s: s.rank, reverse=True)
    return scraper


def register_embed(scraper):
    """Decorator to register an embed scraper class."""
    inst = scraper()
    _EMBEDS[inst.id] = inst
    return scraper


def _host_matches(url: str, domains: list[str]) -> bool:
    host = (urlparse(url).hostname or "").lower()
    return any(host == d or host.endswith("." + d) for d in domains)


def find_source(url: str) -> _SourceScraper:
    for source in _SOURCES:
        if _host_matches(url, source.domains):
            return source
    raise PaheError(f"No source scraper handles {url}")


def find_embed(url: str) -> _EmbedScraper:
    for embed in sorted(_EMBEDS.values(), key=lambda e: e.rank, reverse=True):
        if _host_matches(url, embed.domains):
            return embed
    raise PaheError(f"No embed resolver handles {url}")


# ──────────────────────────────
#  Engine
# ──────────────────────────────
class ProviderEngine:
    def __init__(self, *, timeout: int = config.HTTP_TIMEOUT, max_attempts: int = config.KWIK_MAX_ATTEMPTS,
                 fetcher: Fetcher | None = None):
        self.fetcher = fetcher or Fetcher(timeout=timeout)
        self.max_attempts = max_attempts

    def close(self):
        self.fetcher.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def metadata(self, link: str) -> SeriesInfo | EpisodeInfo:
        return find_source(link).fetch_metadata(link, self.fetcher)

    def episode_pages(self, link: str, episode_range: Optional[EpisodeRange] = None) -> list[str]:
        """Play-page links for the requested episodes (a single page for an episode link)."""
        return find_source(link).episode_pages(link, self.fetcher, episode_range)

    def run_episode(self, number: int, page_link: str, target_resolution: int = 0) -> RunOutput:
        """Select and resolve one episode. Failures are recorded, never raised."""
        out = RunOutput(episode_number=number, page_link=page_link)
        try:
            source = find_source(page_link)
            log.info(f"[{source.id}] EP{number:02d} listing downloads...")
            out.candidate = source.fetch_episode(page_link, self.fetcher, target_resolution)

            embed = find_embed(out.candidate.locker_link)
            log.info(f"  [{source.id} → {embed.id}] resolving {out.candidate.display_name}")
            out.direct_link = embed.resolve(out.candidate.locker_link, self.fetcher, self.max_attempts)
        except (PaheError, requests.RequestException) as e:
            log.warning(f"EP{number:02d} failed: {e}")
            out.error = str(e)
        return out


# ──────────────────────────────
#  Import all scrapers to register them
# ──────────────────────────────
def _load_scrapers():
    from .sources import animepahe      # noqa: F401
    from .embeds import kwik            # noqa: F401

_load_scrapers()
