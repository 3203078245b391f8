from unittest.mock import patch

from dub_info.dub_info.identifiers import extract_identifiers, is_anisearch_url, parse_mal_id
from dub_info.dub_info.models import CatalogEntry


def entry(*sources, title="Test Anime"):
    return CatalogEntry(sources=tuple(sources), title=title)


def test_parse_mal_id():
    assert parse_mal_id("https://myanimelist.net/anime/1535") == 1535
    assert parse_mal_id("https://myanimelist.net/anime/1535/death-note") is None
    assert parse_mal_id("https://myanimelist.net/anime/") is None
    assert parse_mal_id("https://myanimelist.net/manga/1535") is None
    assert parse_mal_id("https://anilist.co/anime/1535") is None


def test_is_anisearch_url():
    assert is_anisearch_url("https://anisearch.com/anime/1540")
    assert is_anisearch_url("https://www.anisearch.com/anime/1540")
    assert is_anisearch_url("anisearch.com/anime/1540")
    assert not is_anisearch_url("https://anisearch.de/anime/1540")
    assert not is_anisearch_url("https://myanimelist.net/anime/1540")
    assert not is_anisearch_url("http://anisearch.com/anime/1540")
    assert not is_anisearch_url("http://www.anisearch.com/anime/1540")


def test_http_anisearch_url_is_ignored_without_warning():
    with patch("dub_info.dub_info.identifiers.logger") as mock_logger:
        result = extract_identifiers(entry(
            "https://myanimelist.net/anime/1",
            "http://anisearch.com/anime/10",
        ))

    assert result.anisearch_urls == ()
    assert not mock_logger.warning.called


def test_extract_identifiers():
    result = extract_identifiers(entry(
        "https://anidb.net/anime/4563",
        "https://anisearch.com/anime/3633",
        "https://myanimelist.net/anime/1535",
        "https://anisearch.com/anime/3634",
    ))

    assert result.mal_ids == (1535,)
    assert result.anisearch_urls == (
        "https://anisearch.com/anime/3633",
        "https://anisearch.com/anime/3634",
    )


def test_extract_identifiers_dedups_anisearch_urls():
    result = extract_identifiers(entry(
        "https://myanimelist.net/anime/1",
        "https://anisearch.com/anime/10",
        "https://www.anisearch.com/anime/10,some-title",
    ))

    assert result.anisearch_urls == ("https://anisearch.com/anime/10",)


def test_unparsable_mal_url_drops_whole_entry():
    result = extract_identifiers(entry(
        "https://myanimelist.net/anime/1",
        "https://myanimelist.net/anime/two",
        "https://anisearch.com/anime/10",
    ))

    assert result is None


def test_entry_without_mal_url_is_dropped():
    assert extract_identifiers(entry("https://anisearch.com/anime/10")) is None


def test_bad_anisearch_urls_are_left_out():
    result = extract_identifiers(entry(
        "https://myanimelist.net/anime/1",
        "https://anisearch.com/manga/10",
        "https://anisearch.com/anime/",
    ))

    assert result.mal_ids == (1,)
    assert result.anisearch_urls == ()
