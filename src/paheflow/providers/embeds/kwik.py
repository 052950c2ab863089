"""
Kwik — pahe.win locker → kwik page → token exchange → direct MP4 link.

Flow per attempt:
  1. GET pahe.win/<id>                      → literal kwik link (fast path)
                                              or packed JS → decode → kwik /d/ link,
                                              rewritten to /f/ (slow path)
  2. GET kwik.<tld>/f/<id>                  → kwik_session cookie + packed JS
                                              → decode → form action + _token
  3. POST form action {_token}, no redirect → 302 Location = direct link

Only the scraping steps are retried (pages sometimes come back without the
packed call); a fetch error or a token exchange that does not redirect is
raised straight away.
"""
from __future__ import annotations
import logging
import re
from typing import Optional

import requests

from ..base import ResolvedLink
from ..errors import (
    ExtractionError, MalformedPayload, MarkerNotFound, RedirectNotFound,
    RetryLimitExceeded, UpstreamUnavailable,
)
from ..fetcher import Fetcher
from ..runner import register_embed
from ..scanning import consume, flatten, unescape
from .. import unpacker
from ... import config

log = logging.getLogger("paheflow.providers.kwik")

KWIK_LINK_RE = re.compile(r'"(https?://kwik\.[^/\s"]+/[^/\s"]+/[^"\s]*)"')
TOKEN_RE = re.compile(r'name="_token"[^"]*"(\S*)">')
SESSION_RE = re.compile(r"kwik_session=([^;]*);")
# /d/ is the download form, /f/ the page that serves it
_DOWNLOAD_PATH_RE = re.compile(r"(https://kwik\.[^/]+/)d/")


def _session_cookie(resp: requests.Response) -> str:
    m = SESSION_RE.search(resp.headers.get("Set-Cookie", ""))
    return m.group(1) if m else ""


@register_embed
class KwikResolver:
    id = "kwik"
    name = "Kwik"
    rank = 100
    domains = ["pahe.win"]

    def resolve(self, locker_link: str, fetcher: Fetcher, max_attempts: int = config.KWIK_MAX_ATTEMPTS) -> str:
        """Turn a pahe.win link into the final direct download link."""
        if max_attempts < 1:
            raise RetryLimitExceeded(locker_link, max_attempts)

        for attempt in range(1, max_attempts + 1):
            try:
                kwik_link = self.extract_kwik_link(locker_link, fetcher)
                resolved = self.extract_form(kwik_link, fetcher)
            except ExtractionError as e:
                log.info("[kwik] attempt %d/%d for %s failed: %s", attempt, max_attempts, locker_link, e)
                continue
            return self.exchange_token(resolved, fetcher)

        raise RetryLimitExceeded(locker_link, max_attempts)

    # ── step 1: locker page ──────────────────

    def extract_kwik_link(self, locker_link: str, fetcher: Fetcher) -> str:
        page = self._fetch_page(locker_link, fetcher)

        m, _ = consume(KWIK_LINK_RE, page)
        if m:
            log.debug("[kwik] direct link on %s", locker_link)
            return unescape(m.group(1))

        decoded = self._decode_page(page, locker_link)
        m, _ = consume(KWIK_LINK_RE, decoded)
        if not m:
            raise MarkerNotFound(f"no kwik link in decoded content of {locker_link}")
        return _DOWNLOAD_PATH_RE.sub(r"\1f/", unescape(m.group(1)), count=1)

    # ── step 2: kwik page ────────────────────

    def extract_form(self, kwik_link: str, fetcher: Fetcher) -> ResolvedLink:
        # a stale kwik_session from an earlier page must not ride along
        fetcher.forget_cookies(kwik_link)
        resp = fetcher.get(kwik_link)
        if resp.status_code != 200:
            raise UpstreamUnavailable(kwik_link, resp.status_code)
        session = _session_cookie(resp)

        decoded = self._decode_page(flatten(resp.text), kwik_link)
        link_m, _ = consume(KWIK_LINK_RE, decoded)
        token_m, _ = consume(TOKEN_RE, decoded)
        if not link_m or not token_m or not link_m.group(1) or not token_m.group(1):
            raise MarkerNotFound(f"form link or token missing on {kwik_link}")

        return ResolvedLink(
            intermediate_link=unescape(link_m.group(1)),
            csrf_token=token_m.group(1),
            session_cookie=session,
            referer=kwik_link,
        )

    # ── step 3: token exchange ───────────────

    def exchange_token(self, resolved: ResolvedLink, fetcher: Fetcher) -> str:
        headers = {"Referer": resolved.referer or resolved.intermediate_link}
        if resolved.session_cookie:
            headers["Cookie"] = f"kwik_session={resolved.session_cookie}"
        resp = fetcher.post(
            resolved.intermediate_link,
            headers=headers,
            data={"_token": resolved.csrf_token},
            follow_redirects=False,
        )
        location: Optional[str] = resp.headers.get("Location")
        if resp.status_code != 302 or not location:
            raise RedirectNotFound(resolved.intermediate_link, resp.status_code)
        log.info("[kwik] direct link resolved for %s", resolved.intermediate_link)
        return location

    # ── helpers ──────────────────────────────

    def _fetch_page(self, url: str, fetcher: Fetcher) -> str:
        resp = fetcher.get(url)
        if resp.status_code != 200:
            raise UpstreamUnavailable(url, resp.status_code)
        return flatten(resp.text)

    def _decode_page(self, page: str, url: str) -> str:
        params, _ = unpacker.find_decode_parameters(page)
        if params is None:
            raise MarkerNotFound(f"no packed parameters on {url}")
        try:
            return unpacker.decode_parameters(params)
        except MalformedPayload as e:
            raise MalformedPayload(f"{url}: {e}") from e


def resolve_episode_direct_link(
    locker_link: str,
    fetcher: Fetcher | None = None,
    max_attempts: int = config.KWIK_MAX_ATTEMPTS,
) -> str:
    """One-shot helper: resolve a pahe.win link, owning the fetcher if none is given."""
    if fetcher is not None:
        return KwikResolver().resolve(locker_link, fetcher, max_attempts)
    with Fetcher() as own:
        return KwikResolver().resolve(locker_link, own, max_attempts)
