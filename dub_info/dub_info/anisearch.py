"""
aniSearch scraping client.

Fetches the dubbed anime index and the dub status of single anime pages.
Selectors and URL shapes follow the aniSearch markup and will need an update
if the site changes.
"""

import re
import threading
import time
from typing import Optional

import requests
from bs4 import BeautifulSoup

from . import constants as c
from .config import AniSearchConfig, get_anisearch_config
from .models import DubStatus, ListingPage
from .logging import (
    get_logger,
    log_api_call,
    ConfigError,
    FetchCancelledError,
    FetchConnectionError,
    FormatError,
    RateLimitedError,
    ResponseError,
    ServerError,
)

logger = get_logger(__name__)

_ANISEARCH_ID_RE = re.compile(r"[0-9]*")
_TRAILING_NUMBER_RE = re.compile(r"([0-9]+)$")

# Failures below the HTTP layer that are worth waiting out
_TRANSIENT_REQUEST_ERRORS = (
    requests.exceptions.ConnectionError,
    requests.exceptions.Timeout,
    requests.exceptions.ChunkedEncodingError,
)


def resolve_language_code(language: str) -> str:
    """Maps 'german' or 'de' to the aniSearch synchro code 'de'."""
    value = language.strip().lower()
    if value in c.LANGUAGE_CODES:
        return c.LANGUAGE_CODES[value]
    if value in c.LANGUAGE_CODES.values():
        return value
    raise ConfigError(f"Unsupported dub language: {language}")


class AniSearchClient:
    """
    Blocking aniSearch client with retry and backoff.

    Connection failures and 429 responses are waited out, forever unless
    config.max_retries is set. Setting cancel_event aborts a pending wait.
    The CLI never sets it, Ctrl-C arrives as KeyboardInterrupt there. The
    event is for callers that drive the client from another thread.
    """

    def __init__(
        self,
        config: Optional[AniSearchConfig] = None,
        language: Optional[str] = None,
        cancel_event: Optional[threading.Event] = None,
        session: Optional[requests.Session] = None,
    ):
        self.config = config or get_anisearch_config()
        self.language = resolve_language_code(language or self.config.language)
        self.cancel_event = cancel_event or threading.Event()

        self.session = session or requests.Session()
        self.session.headers.update({"User-Agent": self.config.user_agent})

        self.dub_info_selector = c.ANISEARCH_DUB_INFO_SELECTOR_TEMPLATE.format(lang=self.language)
        self.dub_status_selector = c.ANISEARCH_DUB_STATUS_SELECTOR_TEMPLATE.format(lang=self.language)

    def close(self) -> None:
        self.session.close()

    def _backoff(self, step: int, count: int) -> int:
        return min(step * count, self.config.backoff_cap)

    def _wait_before_retry(self, message: str, seconds: int) -> None:
        """Sleeps one second at a time so a cancellation is noticed quickly."""
        logger.warning(f"{message}, retrying in {seconds}s...")
        for _ in range(seconds):
            if self.cancel_event.is_set():
                break
            time.sleep(1)

        if self.cancel_event.is_set():
            raise FetchCancelledError(f"Cancelled while waiting to retry: {message}")

    def get_page(self, url: str) -> BeautifulSoup:
        """
        Fetches a page and parses it.

        Raises:
            ServerError: aniSearch answered with 5xx.
            ResponseError: Any other non-200 answer or an unreadable body.
            FetchConnectionError, RateLimitedError: Retry ceiling reached.
            FetchCancelledError: cancel_event was set during a wait.
        """
        timeout = (self.config.connect_timeout, self.config.timeout)
        connection_failures = 0
        too_many_requests = 0
        retries = 0

        while True:
            if self.cancel_event.is_set():
                raise FetchCancelledError(f"Cancelled before fetching {url}", url)

            log_api_call(url)
            try:
                response = self.session.get(url, timeout=timeout)
            except requests.exceptions.ContentDecodingError as e:
                raise ResponseError(f"Failed to decode response for: {url}. Error: {e}", url) from e
            except _TRANSIENT_REQUEST_ERRORS as e:
                connection_failures += 1
                error = FetchConnectionError(f"Request failed for: {url}. Error: {e}", url)
                wait = self._backoff(self.config.connection_backoff_step, connection_failures)
                message = "Request failed"
            except requests.RequestException as e:
                raise ResponseError(f"Request could not be sent for: {url}. Error: {e}", url) from e
            else:
                status = response.status_code

                if status == requests.codes.ok:
                    try:
                        body = response.text
                    except (UnicodeDecodeError, requests.RequestException) as e:
                        raise ResponseError(f"Failed to parse text for: {url}. Error: {e}", url) from e
                    return BeautifulSoup(body, "lxml")

                if status == requests.codes.too_many_requests:
                    too_many_requests += 1
                    error = RateLimitedError(f"aniSearch rate limited: {url}", url)
                    wait = self._backoff(self.config.rate_limit_backoff_step, too_many_requests)
                    message = "Too many requests"
                elif 500 <= status < 600:
                    raise ServerError(f"aniSearch returned server error {status} for: {url}", url)
                else:
                    raise ResponseError(f"aniSearch returned error {status} for: {url}", url)

            if self.config.max_retries is not None and retries >= self.config.max_retries:
                logger.error(f"Giving up on {url} after {retries} retries")
                raise error

            retries += 1
            self._wait_before_retry(message, wait)

    def get_dubbed_anime_list(self, page: int) -> ListingPage:
        """
        Fetches one page of the dubbed anime index.

        Returns:
            ListingPage with the total page count and the canonical aniSearch
            urls found on the page (deduplicated, page order kept).
        """
        url = c.ANISEARCH_DUBBED_LIST_URL_TEMPLATE.format(page=page, lang=self.language)
        document = self.get_page(url)

        page_info = document.select_one(c.ANISEARCH_PAGE_INFO_SELECTOR)
        if page_info is None:
            raise ResponseError(f"Page navigation info missing for: {url}", url)

        match = _TRAILING_NUMBER_RE.search(page_info.get_text().strip())
        if match is None:
            raise ResponseError(f"Could not read total pages from '{page_info.get_text().strip()}' for: {url}", url)
        total_pages = int(match.group(1))

        anisearch_urls = {}
        for a_element in document.select(c.ANISEARCH_ANIME_LINK_SELECTOR):
            href = a_element.get("href")
            if href is None:
                logger.error(f"Got <a> element without href for: {url}")
                continue

            try:
                anisearch_url = self.format_anisearch_url(href)
            except FormatError as e:
                logger.error(str(e))
                continue

            if not self.has_anisearch_id(anisearch_url):
                logger.warning(f"Skipping aniSearch link without id: {href}")
                continue

            anisearch_urls[anisearch_url] = None

        return ListingPage(total_pages=total_pages, anisearch_urls=tuple(anisearch_urls))

    def get_dub_status(self, anime_url: str) -> DubStatus:
        """
        Classifies the dub of a single anime.

        Raises:
            ResponseError: The page has no dub status for this language.
        """
        document = self.get_page(anime_url)

        status_element = document.select_one(self.dub_status_selector)
        if status_element is None:
            raise ResponseError(f"No dub status found for: {anime_url}", anime_url)
        status_text = status_element.get_text().lower()

        if c.ANISEARCH_STATUS_COMPLETED in status_text:
            return DubStatus.COMPLETE
        if c.ANISEARCH_STATUS_UPCOMING in status_text:
            return DubStatus.UPCOMING

        info_element = document.select_one(self.dub_info_selector)
        if info_element is None:
            raise ResponseError(f"No dub info found for: {anime_url}", anime_url)

        if c.ANISEARCH_NEVER_RELEASED in info_element.get_text().lower():
            return DubStatus.NEVER_RELEASED
        return DubStatus.INCOMPLETE

    @staticmethod
    def format_anisearch_url(url: str) -> str:
        """
        Normalizes any aniSearch anime link to https://anisearch.com/anime/<id>.

            anime/1540,alps-monogatari-watashi-no-annette
            -> https://anisearch.com/anime/1540

        Raises:
            FormatError: The link does not point to an aniSearch anime.
        """
        url = url.lower()
        if url.startswith("https://www."):
            url = "https://" + url[len("https://www."):]
        elif url.startswith("https://"):
            pass
        elif url.startswith("www."):
            url = "https://" + url[len("www."):]
        elif url.startswith(c.ANISEARCH_HOST + "/"):
            url = "https://" + url
        else:
            url = c.ANISEARCH_BASE_URL + url

        if not url.startswith(c.ANISEARCH_ANIME_URL_PREFIX):
            raise FormatError(f"Could not format aniSearch url: {url}")

        id_and_name = url[len(c.ANISEARCH_ANIME_URL_PREFIX):]
        anime_id = _ANISEARCH_ID_RE.match(id_and_name).group(0)
        return c.ANISEARCH_ANIME_URL_PREFIX + anime_id

    @staticmethod
    def has_anisearch_id(anisearch_url: str) -> bool:
        """False for the degenerate https://anisearch.com/anime/ result."""
        return len(anisearch_url) > len(c.ANISEARCH_ANIME_URL_PREFIX)
