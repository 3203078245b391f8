import pytest

from dub_info.dub_info.anisearch import AniSearchClient
from dub_info.dub_info.logging import FormatError

CANONICAL = "https://anisearch.com/anime/1540"


@pytest.mark.parametrize("raw", [
    "anime/1540,alps-monogatari-watashi-no-annette",
    "https://www.anisearch.com/anime/1540,x",
    "www.anisearch.com/anime/1540",
    "anisearch.com/anime/1540",
    "https://anisearch.com/anime/1540",
    "HTTPS://WWW.ANISEARCH.COM/ANIME/1540,Alps",
])
def test_format_anisearch_url_variants(raw):
    assert AniSearchClient.format_anisearch_url(raw) == CANONICAL


def test_format_anisearch_url_is_idempotent():
    for raw in ["anime/15141,foo", "www.anisearch.com/anime/2852/", "https://anisearch.com/anime/18285"]:
        once = AniSearchClient.format_anisearch_url(raw)
        assert AniSearchClient.format_anisearch_url(once) == once


def test_format_anisearch_url_stops_at_first_non_digit():
    assert AniSearchClient.format_anisearch_url("anime/12a34") == "https://anisearch.com/anime/12"


@pytest.mark.parametrize("raw", [
    "https://anisearch.de/anime/14",
    "https://www.anisearch.com/manga/1540",
    "https://myanimelist.net/anime/1535",
    "character/1540",
])
def test_format_anisearch_url_rejects_other_urls(raw):
    with pytest.raises(FormatError):
        AniSearchClient.format_anisearch_url(raw)


def test_format_anisearch_url_without_id_is_degenerate():
    """A link without digits still formats, callers have to drop it."""
    url = AniSearchClient.format_anisearch_url("anime/index")
    assert url == "https://anisearch.com/anime/"
    assert not AniSearchClient.has_anisearch_id(url)
    assert AniSearchClient.has_anisearch_id(CANONICAL)
