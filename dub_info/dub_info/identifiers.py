"""
Extraction of MyAnimeList ids and aniSearch urls from catalog entries.
"""

from typing import NamedTuple, Optional, Tuple

from . import constants as c
from .anisearch import AniSearchClient
from .models import CatalogEntry
from .logging import get_logger, FormatError

logger = get_logger(__name__)


class EntryIdentifiers(NamedTuple):
    mal_ids: Tuple[int, ...]
    anisearch_urls: Tuple[str, ...]


def parse_mal_id(mal_url: str) -> Optional[int]:
    """
    Parses the id of https://myanimelist.net/anime/<id>.

    Returns None for anything else, including trailing slugs or slashes.
    """
    if not mal_url.startswith(c.MAL_ANIME_URL_PREFIX):
        return None
    anime_id = mal_url[len(c.MAL_ANIME_URL_PREFIX):]
    if not (anime_id.isascii() and anime_id.isdigit()):
        return None
    return int(anime_id)


def is_anisearch_url(url: str) -> bool:
    """Scheme-less or https links only, the normalizer rejects any other scheme."""
    host_and_path = url.lower()
    if host_and_path.startswith("https://"):
        host_and_path = host_and_path[len("https://"):]
    elif "://" in host_and_path:
        return False
    if host_and_path.startswith("www."):
        host_and_path = host_and_path[len("www."):]
    return host_and_path.startswith(c.ANISEARCH_HOST + "/")


def extract_identifiers(entry: CatalogEntry) -> Optional[EntryIdentifiers]:
    """
    Collects the MAL ids and canonical aniSearch urls of a catalog entry.

    MAL ids are all or nothing: a single MyAnimeList url without a parsable
    id drops the whole entry (returns None). Entries without any MyAnimeList
    url are dropped too. aniSearch urls are lenient, urls that do not
    normalize are left out.
    """
    mal_urls = [src for src in entry.sources if src.startswith(c.MAL_BASE_URL)]
    if not mal_urls:
        return None

    mal_ids = []
    for mal_url in mal_urls:
        mal_id = parse_mal_id(mal_url)
        if mal_id is None:
            logger.warning(f"Failed to parse id from MyAnimeList URL: {mal_url} ({entry.title})")
            return None
        mal_ids.append(mal_id)

    anisearch_urls = {}
    for src in entry.sources:
        if not is_anisearch_url(src):
            continue
        try:
            anisearch_url = AniSearchClient.format_anisearch_url(src)
        except FormatError as e:
            logger.warning(f"{e} ({entry.title})")
            continue
        if AniSearchClient.has_anisearch_id(anisearch_url):
            anisearch_urls[anisearch_url] = None

    return EntryIdentifiers(
        mal_ids=tuple(dict.fromkeys(mal_ids)),
        anisearch_urls=tuple(anisearch_urls),
    )
