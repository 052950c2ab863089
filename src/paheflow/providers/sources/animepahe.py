"""
AnimePahe — series/episode pages → pahe.win download entries.

Flow:
  1. /anime/<uuid>                           → series metadata
  2. /api?m=release&id=<uuid>&page=<p>       → episode sessions (30 per page)
  3. /play/<uuid>/<session>                  → pahe.win links labelled
                                               "<fansub> · 1080p (165MB)"
  4. pick one entry per the target resolution, hand it to the kwik resolver
"""
from __future__ import annotations
import logging
import re
from typing import Optional
from urllib.parse import urlparse

from ..base import EpisodeCandidate, EpisodeInfo, SeriesInfo
from ..errors import InvalidEpisodeRange, NoCandidatesFound, UpstreamUnavailable
from ..fetcher import Fetcher
from ..pagination import PAGE_SIZE, EpisodeRange, pagination_range
from ..quality import parse_resolution, select_candidate
from ..runner import register_source
from ..scanning import consume, flatten, unescape
from ... import config

log = logging.getLogger("paheflow.providers.animepahe")

SERIES_URL_RE = re.compile(r"https://animepahe\.(?:ru|com|org|si)/anime/([a-f0-9-]{36})")
EPISODE_URL_RE = re.compile(r"https://animepahe\.(?:ru|com|org|si)/play/([a-f0-9-]{36})/[a-f0-9]{64}")

CANDIDATE_RE = re.compile(r'href="(https://pahe\.win/\S*)"[^>]*>([^)]*\))[^<]*<')

SERIES_TITLE_RE = re.compile(r'style=[^=]+title="([^"]+)"')
SERIES_TYPE_RE = re.compile(r'Type:[^>]*title="[^"]*"[^>]*>([^<]+)</a>')
SERIES_EPISODES_RE = re.compile(r'Episode[^>]*>\s*(\S*)</p')
EPISODE_TITLE_RE = re.compile(r'title="[^>]*>([^<]*)</a>\D*(\d*)<span')


def is_series_url(url: str) -> bool:
    return bool(SERIES_URL_RE.fullmatch(url))


def is_episode_url(url: str) -> bool:
    return bool(EPISODE_URL_RE.fullmatch(url))


def series_id(url: str) -> str:
    m = SERIES_URL_RE.match(url) or EPISODE_URL_RE.match(url)
    if not m:
        raise ValueError(f"Not an animepahe link: {url}")
    return m.group(1)


def _origin(url: str) -> str:
    parsed = urlparse(url)
    return f"{parsed.scheme}://{parsed.netloc}"


@register_source
class AnimePahe:
    id = "animepahe"
    name = "AnimePahe"
    rank = 100
    domains = ["animepahe.ru", "animepahe.com", "animepahe.org", "animepahe.si"]

    def _headers(self, link: str) -> dict:
        return {
            "Accept": "application/json, text/javascript, */*; q=0.01",
            "Accept-Language": "en-US,en;q=0.9",
            "Referer": link,
        }

    def _get(self, url: str, fetcher: Fetcher, referer: str):
        resp = fetcher.get(url, headers=self._headers(referer), cookies={"__ddg2_": config.DDG_COOKIE})
        if resp.status_code != 200:
            raise UpstreamUnavailable(url, resp.status_code)
        return resp

    # ── metadata ─────────────────────────────

    def fetch_metadata(self, url: str, fetcher: Fetcher) -> SeriesInfo | EpisodeInfo:
        page = flatten(self._get(url, fetcher, url).text)

        if not is_series_url(url):
            m, _ = consume(EPISODE_TITLE_RE, page)
            if not m:
                return EpisodeInfo()
            return EpisodeInfo(title=unescape(m.group(1)), episode=unescape(m.group(2)))

        info = SeriesInfo()
        m, _ = consume(SERIES_TITLE_RE, page)
        if m:
            info.title = unescape(m.group(1))
        # the episode count sits after the type row
        m, pos = consume(SERIES_TYPE_RE, page)
        if m:
            info.kind = unescape(m.group(1))
        m, _ = consume(SERIES_EPISODES_RE, page, pos)
        if m:
            info.episodes = unescape(m.group(1))
        return info

    # ── series paging ────────────────────────

    def _release_page(self, url: str, fetcher: Fetcher, page: int) -> dict:
        api = f"{_origin(url)}/api"
        params = {"m": "release", "id": series_id(url), "sort": "episode_asc", "page": page}
        resp = fetcher.get_json(api, headers=self._headers(url), params=params,
                                cookies={"__ddg2_": config.DDG_COOKIE})
        if resp.status_code != 200:
            raise UpstreamUnavailable(resp.url or api, resp.status_code)
        return resp.json()

    def episode_count(self, url: str, fetcher: Fetcher) -> int:
        total = self._release_page(url, fetcher, 1).get("total")
        return total if isinstance(total, int) else 0

    def fetch_series(self, url: str, fetcher: Fetcher, episode_range: Optional[EpisodeRange] = None) -> list[str]:
        """Play-page links for ``episode_range`` (every episode when None), in episode order."""
        count = self.episode_count(url, fetcher)
        if episode_range is None:
            episode_range = EpisodeRange(1, count)
        elif episode_range.start > count or episode_range.end > count:
            raise InvalidEpisodeRange(
                f"Invalid episode range: {episode_range} for series with {count} episodes")
        if count == 0:
            return []

        sid = series_id(url)
        origin = _origin(url)
        pages = pagination_range(episode_range.start, episode_range.end)
        index = (pages[0] - 1) * PAGE_SIZE
        links = []
        for page in pages:
            log.info("[animepahe] requesting release page %d", page)
            for item in self._release_page(url, fetcher, page).get("data") or []:
                index += 1
                if index in episode_range:
                    links.append(f"{origin}/play/{sid}/{item.get('session', 'unknown')}")
        return links

    def episode_pages(self, url: str, fetcher: Fetcher, episode_range: Optional[EpisodeRange] = None) -> list[str]:
        if is_series_url(url):
            return self.fetch_series(url, fetcher, episode_range)
        return [url]

    # ── episode page ─────────────────────────

    def list_candidates(self, url: str, fetcher: Fetcher) -> list[EpisodeCandidate]:
        page = flatten(self._get(url, fetcher, url).text)

        candidates = []
        pos = 0
        while True:
            m, pos = consume(CANDIDATE_RE, page, pos)
            if not m:
                break
            label = unescape(m.group(2))
            candidates.append(EpisodeCandidate(
                locker_link=unescape(m.group(1)),
                display_name=label,
                resolution_height=parse_resolution(label),
            ))

        if not candidates:
            raise NoCandidatesFound(url)
        log.info("[animepahe] %d download entries on %s", len(candidates), url)
        return candidates

    def fetch_episode(self, url: str, fetcher: Fetcher, target_resolution: int = 0) -> EpisodeCandidate:
        return select_candidate(self.list_candidates(url, fetcher), target_resolution)
