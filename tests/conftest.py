import json

import pytest
import requests


def make_response(status=200, text="", headers=None, url=None):
    resp = requests.Response()
    resp.status_code = status
    resp._content = text.encode("utf-8")
    resp.encoding = "utf-8"
    resp.url = url
    for key, value in (headers or {}).items():
        resp.headers[key] = value
    return resp


def encode_payload(plaintext, alphabet, base, offset):
    """Inverse of the kwik decoder, for building fixtures."""
    digits = alphabet[:base]
    delimiter = alphabet[base]
    runs = []
    for ch in plaintext:
        value = ord(ch) + offset
        numeral = ""
        while True:
            numeral = digits[value % base] + numeral
            value //= base
            if value == 0:
                break
        runs.append(numeral)
    return delimiter.join(runs) + delimiter


def packed_page(plaintext, alphabet="abcdefghi", base=8, offset=17):
    payload = encode_payload(plaintext, alphabet, base, offset)
    return (
        '<html><body><script>eval(function(h,u,n,t,e,r){r="";return r}'
        f'("{payload}",42,"{alphabet}",{offset},{base},19))</script></body></html>'
    )


class FakeFetcher:
    """Serves canned responses per URL, recording every request."""

    def __init__(self, routes=None):
        # url -> response or list of responses (served in order, last one repeats)
        self.routes = dict(routes or {})
        self.calls = []
        self.forgotten = []

    def _next(self, method, url):
        self.calls.append((method, url))
        route = self.routes.get((method, url), self.routes.get(url))
        if route is None:
            return make_response(404, "not found", url=url)
        if isinstance(route, list):
            return route.pop(0) if len(route) > 1 else route[0]
        return route

    def get(self, url, **kwargs):
        return self._next("GET", url)

    def get_json(self, url, **kwargs):
        params = kwargs.get("params") or {}
        key = url + "?" + "&".join(f"{k}={v}" for k, v in params.items()) if params else url
        return self._next("GET", key)

    def post(self, url, **kwargs):
        self.last_post = kwargs
        return self._next("POST", url)

    def forget_cookies(self, url):
        self.forgotten.append(url)

    def close(self):
        pass

    def count(self, method, url):
        return sum(1 for m, u in self.calls if m == method and u == url)


def json_response(payload, status=200):
    return make_response(status, json.dumps(payload), headers={"Content-Type": "application/json"})


@pytest.fixture
def fake_fetcher():
    return FakeFetcher()


# ──────────────────────────────
#  animepahe page fixtures
# ──────────────────────────────
SERIES_ID = "0b1b2c3d-1111-2222-3333-444455556666"
SERIES_URL = f"https://animepahe.ru/anime/{SERIES_ID}"


def play_url(session):
    return f"https://animepahe.ru/play/{SERIES_ID}/{session}"


def api_key(page):
    return f"https://animepahe.ru/api?m=release&id={SERIES_ID}&sort=episode_asc&page={page}"


def session_hash(n):
    return f"{n:064x}"


def series_page(title="Sousou no Frieren", kind="TV", episodes="28"):
    return (
        '<html><body>\n'
        f'<div class="anime-cover" style="background-image: url(cover.jpg)" title="{title}"></div>\n'
        '<div class="anime-info">\n'
        f'<p>Type: <a href="/anime/type/tv" title="{kind}">{kind}</a></p>\n'
        f'<p><strong>Episodes:</strong> {episodes}</p>\n'
        '</div></body></html>'
    )


def episode_page(entries, title="Sousou no Frieren", episode="05"):
    """``entries`` is a list of (pahe.win link, label) pairs, in page order."""
    links = "\n".join(
        f'<a href="{link}" class="dropdown-item" target="_blank">{label} '
        '<span class="badge badge-primary">BD</span></a>'
        for link, label in entries
    )
    return (
        '<html><body>\n'
        f'<div class="theatre-info"><h1><a href="/anime/{SERIES_ID}" title="{title}">{title}</a>'
        f' - {episode}<span class="text-muted"></span></h1></div>\n'
        f'<div id="pickDownload">\n{links}\n</div></body></html>'
    )


def release_page(total, sessions, page=1):
    return json_response({
        "total": total,
        "per_page": 30,
        "current_page": page,
        "data": [{"episode": n, "session": s} for n, s in sessions],
    })
