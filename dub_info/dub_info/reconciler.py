"""
Reconciliation of the catalog against the aniSearch dubbed anime index.

An anime counts as dubbed once every aniSearch entry it references shows up
on the dubbed index. The per-entry dub status then decides whether it is
complete, incomplete, or removed because the dub was never released.
"""

import time
from typing import Callable, Dict, Iterable, List, Optional, Set

from .anisearch import AniSearchClient
from .identifiers import extract_identifiers
from .models import CatalogEntry, DubResult, DubStatus, ListingPage, ReferenceGroup
from .logging import get_logger, log_step, FetchCancelledError, FetchError

logger = get_logger(__name__)

# (phase, completed, total, detail)
ProgressCallback = Callable[[str, int, int, str], None]
CheckpointCallback = Callable[[DubResult], None]

PHASE_LISTING = "listing"
PHASE_STATUS = "status"


class ReferenceIndex:
    """
    Maps canonical aniSearch urls to reference groups.

    Groups are kept in one list and the url map stores list positions, so
    several urls of the same anime share one counter.
    """

    def __init__(self):
        self.groups: List[ReferenceGroup] = []
        self._group_by_url: Dict[str, int] = {}

    @classmethod
    def from_catalog(cls, entries: Iterable[CatalogEntry]) -> "ReferenceIndex":
        index = cls()
        skipped = 0

        for entry in entries:
            identifiers = extract_identifiers(entry)
            if identifiers is None:
                skipped += 1
                continue
            index.add_entry(identifiers.mal_ids, identifiers.anisearch_urls, title=entry.title)

        logger.info(
            f"Reference index built: {len(index.groups)} anime, "
            f"{len(index)} aniSearch urls, {skipped} skipped"
        )
        return index

    def add_entry(self, mal_ids: Iterable[int], anisearch_urls: Iterable[str], title: str = "") -> ReferenceGroup:
        anisearch_urls = list(dict.fromkeys(anisearch_urls))
        group = ReferenceGroup(
            mal_ids=tuple(mal_ids),
            validations_required=len(anisearch_urls),
            title=title,
        )
        self.groups.append(group)
        position = len(self.groups) - 1

        for anisearch_url in anisearch_urls:
            previous = self._group_by_url.get(anisearch_url)
            if previous is not None:
                logger.debug(
                    f"{anisearch_url} is referenced by '{self.groups[previous].title}' "
                    f"and '{title}', keeping the latter"
                )
            self._group_by_url[anisearch_url] = position

        return group

    def group_for(self, anisearch_url: str) -> Optional[ReferenceGroup]:
        position = self._group_by_url.get(anisearch_url)
        if position is None:
            return None
        return self.groups[position]

    def record_page(self, anisearch_urls: Iterable[str]) -> Set[int]:
        """
        Counts one validation for the group of every url on a listing page.

        A url seen again on a later page counts again; the counter stops at
        validations_required.

        Returns:
            MAL ids of the groups that became fully validated on this page.
        """
        newly_dubbed = set()
        for anisearch_url in anisearch_urls:
            group = self.group_for(anisearch_url)
            if group is None:
                continue
            if group.validate():
                newly_dubbed.update(group.mal_ids)
        return newly_dubbed

    def __contains__(self, anisearch_url: str) -> bool:
        return anisearch_url in self._group_by_url

    def __len__(self) -> int:
        return len(self._group_by_url)


class DubReconciler:
    """
    Drives a full run: listing crawl, dub status checks and final merge.
    """

    def __init__(
        self,
        client: AniSearchClient,
        index: ReferenceIndex,
        checkpoint: Optional[CheckpointCallback] = None,
        progress_callback: Optional[ProgressCallback] = None,
        page_delay: Optional[float] = None,
        status_delay: Optional[float] = None,
    ):
        self.client = client
        self.index = index
        self.checkpoint = checkpoint
        self.progress_callback = progress_callback
        self.page_delay = client.config.page_delay if page_delay is None else page_delay
        self.status_delay = client.config.status_delay if status_delay is None else status_delay

        self.dubbed_mal_ids: Set[int] = set()
        self.dubbed_anisearch_urls: Set[str] = set()
        self.incomplete_mal_ids: Set[int] = set()
        self.never_released_mal_ids: Set[int] = set()

    def _report(self, phase: str, completed: int, total: int, detail: str) -> None:
        if self.progress_callback:
            self.progress_callback(phase, completed, total, detail)

    def run(self) -> DubResult:
        """
        Runs every phase and returns the final result.

        Raises:
            FetchError: A listing page could not be fetched. The run is lost.
        """
        log_step("Checking dubbed anime list")
        self.crawl_listing()

        # Intermediate result, dub completeness is not known yet
        checkpoint = self.current_result()
        if self.checkpoint:
            self.checkpoint(checkpoint)

        log_step("Checking if dubs are complete")
        self.check_dub_status()

        result = self.finalize()
        if self.checkpoint:
            self.checkpoint(result)
        return result

    def process_listing_page(self, listing: ListingPage) -> None:
        newly_dubbed = self.index.record_page(listing.anisearch_urls)
        self.dubbed_mal_ids.update(newly_dubbed)
        self.dubbed_anisearch_urls.update(listing.anisearch_urls)

    def crawl_listing(self) -> None:
        logger.info("Checking dubbed anime page 1/??...")
        first_page = self.client.get_dubbed_anime_list(1)
        self.process_listing_page(first_page)
        total_pages = first_page.total_pages
        self._report(PHASE_LISTING, 1, total_pages, "page 1")

        for page in range(2, total_pages + 1):
            logger.info(f"Checking dubbed anime page {page}/{total_pages}...")
            listing = self.client.get_dubbed_anime_list(page)
            self.process_listing_page(listing)
            self._report(PHASE_LISTING, page, total_pages, f"page {page}")
            time.sleep(self.page_delay)

        logger.info(
            f"Listing done: {len(self.dubbed_anisearch_urls)} aniSearch urls, "
            f"{len(self.dubbed_mal_ids)} dubbed MAL ids"
        )

    def apply_dub_status(self, anisearch_url: str, status: Optional[DubStatus]) -> None:
        """
        Folds one dub status into the result sets.

        None stands for a status that could not be determined and is
        treated as incomplete.
        """
        group = self.index.group_for(anisearch_url)
        if group is None:
            return

        if status is DubStatus.COMPLETE:
            return
        if status is DubStatus.NEVER_RELEASED:
            self.never_released_mal_ids.update(group.mal_ids)
            logger.info(f"Dub has never been released: {anisearch_url}")
            return

        # Upcoming dubs count as incomplete
        self.incomplete_mal_ids.update(group.mal_ids)
        if status is not None:
            logger.info(f"Dub is incomplete: {anisearch_url}")

    def check_dub_status(self) -> None:
        targets = sorted(url for url in self.dubbed_anisearch_urls if url in self.index)
        unknown = len(self.dubbed_anisearch_urls) - len(targets)
        if unknown:
            logger.info(f"Skipping {unknown} dubbed aniSearch urls that are not in the database")

        for position, anisearch_url in enumerate(targets, start=1):
            logger.info(f"Checking if dub is complete {position}/{len(targets)}: {anisearch_url}")

            try:
                status = self.client.get_dub_status(anisearch_url)
            except FetchCancelledError:
                raise
            except FetchError as e:
                logger.error(f"Failed to check if the dub is complete for: {anisearch_url}. Error: {e}")
                status = None

            self.apply_dub_status(anisearch_url, status)
            self._report(PHASE_STATUS, position, len(targets), anisearch_url)
            time.sleep(self.status_delay)

    def current_result(self) -> DubResult:
        return DubResult(
            dubbed=sorted(self.dubbed_mal_ids),
            incomplete=sorted(self.incomplete_mal_ids & self.dubbed_mal_ids),
        )

    def finalize(self) -> DubResult:
        """Removes never released dubs from both sets and returns the result."""
        self.incomplete_mal_ids -= self.never_released_mal_ids
        self.dubbed_mal_ids -= self.never_released_mal_ids
        return self.current_result()
