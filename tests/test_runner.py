import pytest

from paheflow.providers.base import EpisodeInfo
from paheflow.providers.errors import PaheError
from paheflow.providers.runner import ProviderEngine, find_embed, find_source

from conftest import (
    SERIES_URL, FakeFetcher, api_key, episode_page, make_response, packed_page, play_url,
    release_page, session_hash,
)

LOCKER = "https://pahe.win/AbCd"
KWIK_F = "https://kwik.si/f/Xy12"
KWIK_D = "https://kwik.si/d/Xy12"
FINAL = "https://eu-01.files.nextcdn.org/get/01/abc/video.mp4"

FORM = f'<form action="{KWIK_D}" method="POST"><input type="hidden" name="_token" value="t0k3n"></form>'


def resolvable_routes(page_link):
    """Routes for one episode page that resolves all the way to FINAL."""
    return {
        page_link: make_response(200, episode_page([(LOCKER, "SubsPlease &middot; 720p (90MB)")])),
        LOCKER: make_response(200, f'<a class="redirect" href="{KWIK_F}">Continue</a>'),
        KWIK_F: make_response(200, packed_page(FORM), headers={"Set-Cookie": "kwik_session=abc; path=/"}),
        ("POST", KWIK_D): make_response(302, "", headers={"Location": FINAL}),
    }


def test_find_source_and_embed():
    assert find_source(SERIES_URL).id == "animepahe"
    assert find_source("https://www.animepahe.com/anime/x").id == "animepahe"
    assert find_embed(LOCKER).id == "kwik"


def test_unknown_hosts_are_rejected():
    with pytest.raises(PaheError):
        find_source("https://example.com/anime/x")
    with pytest.raises(PaheError):
        find_embed("https://example.com/file")


def test_run_episode_resolves_direct_link():
    page = play_url(session_hash(1))
    engine = ProviderEngine(fetcher=FakeFetcher(resolvable_routes(page)))

    out = engine.run_episode(1, page, 720)
    assert out.ok
    assert out.direct_link == FINAL
    assert out.candidate.locker_link == LOCKER
    assert out.to_dict()["candidate"]["resolution"] == 720


def test_failed_episode_is_recorded_and_batch_continues():
    good, bad = play_url(session_hash(1)), play_url(session_hash(2))
    engine = ProviderEngine(fetcher=FakeFetcher(resolvable_routes(good)))

    results = [engine.run_episode(n, link) for n, link in enumerate([bad, good], start=1)]
    assert not results[0].ok
    assert "404" in results[0].error
    assert results[0].candidate is None
    assert results[1].direct_link == FINAL


def test_retry_limit_is_recorded_per_episode():
    page = play_url(session_hash(1))
    routes = resolvable_routes(page)
    routes[LOCKER] = make_response(200, "<html>no link</html>")
    fetcher = FakeFetcher(routes)

    out = ProviderEngine(fetcher=fetcher, max_attempts=2).run_episode(3, page)
    assert "retry limit (2)" in out.error
    assert out.candidate is not None
    assert fetcher.count("GET", LOCKER) == 2


def test_engine_delegates_to_source():
    page = play_url(session_hash(7))
    fetcher = FakeFetcher({
        page: make_response(200, episode_page([(LOCKER, "x &middot; 720p (1MB)")], episode="07")),
        api_key(1): release_page(2, [(1, "s01"), (2, "s02")]),
    })
    with ProviderEngine(fetcher=fetcher) as engine:
        assert engine.metadata(page) == EpisodeInfo(title="Sousou no Frieren", episode="07")
        assert engine.episode_pages(page) == [page]
        assert engine.episode_pages(SERIES_URL) == [play_url("s01"), play_url("s02")]
