"""
HTTP fetcher for provider scrapers. Wraps requests.Session with common
defaults: user agent, timeout and the animepahe DDoS-Guard cookie.

Every call blocks; responses are returned as ``requests.Response`` so scrapers
can read status codes and raw headers (Location, Set-Cookie).
"""
from __future__ import annotations
from typing import Optional
from urllib.parse import urljoin, urlparse

import requests

from .. import config


class Fetcher:
    def __init__(self, *, timeout: int = config.HTTP_TIMEOUT, user_agent: str = config.USER_AGENT):
        self.timeout = timeout
        self.user_agent = user_agent
        self._session: Optional[requests.Session] = None

    def _get_session(self) -> requests.Session:
        if self._session is None:
            self._session = requests.Session()
            self._session.headers.update({"User-Agent": self.user_agent})
        return self._session

    def close(self):
        if self._session is not None:
            self._session.close()
            self._session = None

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.close()

    def forget_cookies(self, url: str):
        """Drop any cookies held for the url's host."""
        host = urlparse(url).hostname
        if not host or self._session is None:
            return
        jar = self._session.cookies
        for domain in {c.domain for c in jar if c.domain.lstrip(".") == host}:
            jar.clear(domain=domain)

    # ── convenience methods ──────────────────

    def get(
        self,
        url: str,
        *,
        base_url: str | None = None,
        headers: dict | None = None,
        params: dict | None = None,
        cookies: dict | None = None,
        follow_redirects: bool = True,
    ) -> requests.Response:
        full = urljoin(base_url, url) if base_url else url
        return self._get_session().get(
            full,
            headers=headers or {},
            params=params,
            cookies=cookies,
            allow_redirects=follow_redirects,
            timeout=self.timeout,
        )

    def get_json(
        self,
        url: str,
        *,
        base_url: str | None = None,
        headers: dict | None = None,
        params: dict | None = None,
        cookies: dict | None = None,
    ) -> requests.Response:
        """GET with a JSON accept header; call ``.json()`` on the result."""
        merged = {"Accept": "application/json, text/javascript, */*; q=0.01"}
        merged.update(headers or {})
        return self.get(url, base_url=base_url, headers=merged, params=params, cookies=cookies)

    def post(
        self,
        url: str,
        *,
        base_url: str | None = None,
        headers: dict | None = None,
        data: dict | str | None = None,
        cookies: dict | None = None,
        follow_redirects: bool = True,
    ) -> requests.Response:
        full = urljoin(base_url, url) if base_url else url
        return self._get_session().post(
            full,
            headers=headers or {},
            data=data,
            cookies=cookies,
            allow_redirects=follow_redirects,
            timeout=self.timeout,
        )
