import pytest

from paheflow.providers.errors import InvalidEpisodeRange
from paheflow.providers.pagination import EpisodeRange, get_page, pagination_range, parse_episode_range


def test_get_page():
    assert get_page(1) == 1
    assert get_page(30) == 1
    assert get_page(31) == 2
    assert get_page(60) == 2
    assert get_page(61) == 3


def test_get_page_floor():
    """Episode 0 and below still map to the first page."""
    assert get_page(0) == 1
    assert get_page(-5) == 1


def test_pagination_range_spans_pages():
    assert pagination_range(29, 61) == [1, 2, 3]
    assert pagination_range(1, 30) == [1]
    assert pagination_range(31, 45) == [2]


def test_parse_episode_range():
    assert parse_episode_range("all") is None
    assert parse_episode_range("1-15") == EpisodeRange(1, 15)
    assert str(parse_episode_range("29-31")) == "29-31"


@pytest.mark.parametrize("text", ["0-5", "5-5", "9-3", "1-", "-3", "abc", "1 - 5", ""])
def test_parse_episode_range_rejects(text):
    with pytest.raises(InvalidEpisodeRange):
        parse_episode_range(text)


def test_range_membership():
    r = EpisodeRange(3, 7)
    assert 3 in r and 7 in r
    assert 2 not in r and 8 not in r
