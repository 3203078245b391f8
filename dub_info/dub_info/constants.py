"""
Constants used throughout the dub-info application.
"""

# Catalog (anime-offline-database) Configuration
DEFAULT_DATABASE_PATH = "../anime-offline-database/anime-offline-database-minified.json"
DEFAULT_OUTPUT_PATH = "../data/dubInfo.json"
MAL_BASE_URL = "https://myanimelist.net/"
MAL_ANIME_URL_PREFIX = f"{MAL_BASE_URL}anime/"

# aniSearch Configuration
ANISEARCH_HOST = "anisearch.com"
ANISEARCH_BASE_URL = f"https://{ANISEARCH_HOST}/"
ANISEARCH_ANIME_URL_PREFIX = f"{ANISEARCH_BASE_URL}anime/"
ANISEARCH_DUBBED_LIST_URL_TEMPLATE = (
    "https://www.anisearch.com/anime/index/page-{page}"
    "?synchro={lang}&sort=title&order=asc&view=2&limit=100"
)

# aniSearch markup
ANISEARCH_PAGE_INFO_SELECTOR = "div.pagenav-info"
ANISEARCH_ANIME_LINK_SELECTOR = "th > a[lang]"
ANISEARCH_DUB_INFO_SELECTOR_TEMPLATE = 'div.title[lang="{lang}"]'
ANISEARCH_DUB_STATUS_SELECTOR_TEMPLATE = 'div.title[lang="{lang}"] + div.status'
ANISEARCH_STATUS_COMPLETED = "completed"
ANISEARCH_STATUS_UPCOMING = "upcoming"
ANISEARCH_NEVER_RELEASED = "never released"

# Languages offered by the aniSearch "synchro" filter
LANGUAGE_CODES = {
    "german": "de",
    "english": "en",
    "french": "fr",
    "italian": "it",
    "spanish": "es",
}
DEFAULT_LANGUAGE = "german"

# Scraper Configuration
SCRAPER_USER_AGENT = "Mozilla/5.0 (Windows NT 10.0; rv:109.0) Gecko/20100101 Firefox/115.0"
SCRAPER_TIMEOUT_SECONDS = 20
SCRAPER_CONNECT_TIMEOUT_SECONDS = 20
SCRAPER_PAGE_DELAY_SECONDS = 1.0  # Pause between listing pages
SCRAPER_STATUS_DELAY_SECONDS = 1.0  # Pause between dub status checks

# Retry / Backoff
CONNECTION_BACKOFF_STEP_SECONDS = 10  # Multiplied by the number of failed connections
RATE_LIMIT_BACKOFF_STEP_SECONDS = 60  # Multiplied by the number of 429 responses
BACKOFF_CAP_SECONDS = 300

# Progress Display
PROGRESS_REFRESH_RATE = 10  # Refresh per second for progress bars
