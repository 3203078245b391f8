from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


@dataclass(frozen=True)
class AnimeSeason:
    season: str = "UNDEFINED"
    year: Optional[int] = None


@dataclass(frozen=True)
class CatalogEntry:
    """A single anime from anime-offline-database."""
    sources: Tuple[str, ...]
    title: str
    type: str = "UNKNOWN"
    episodes: int = 0
    status: str = "UNKNOWN"
    anime_season: AnimeSeason = field(default_factory=AnimeSeason)
    picture: str = ""
    thumbnail: str = ""
    synonyms: Tuple[str, ...] = ()
    relations: Tuple[str, ...] = ()
    tags: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'CatalogEntry':
        season = data.get("animeSeason") or {}
        return cls(
            sources=tuple(data.get("sources", [])),
            title=data.get("title", ""),
            type=data.get("type", "UNKNOWN"),
            episodes=data.get("episodes", 0),
            status=data.get("status", "UNKNOWN"),
            anime_season=AnimeSeason(
                season=season.get("season", "UNDEFINED"),
                year=season.get("year"),
            ),
            picture=data.get("picture", ""),
            thumbnail=data.get("thumbnail", ""),
            synonyms=tuple(data.get("synonyms", [])),
            relations=tuple(data.get("relations", [])),
            tags=tuple(data.get("tags", [])),
        )


@dataclass(frozen=True)
class Catalog:
    """Root object of anime-offline-database."""
    data: Tuple[CatalogEntry, ...]
    license_name: str = ""
    license_url: str = ""
    repository: str = ""
    last_update: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Catalog':
        license_info = data.get("license") or {}
        return cls(
            data=tuple(CatalogEntry.from_dict(entry) for entry in data.get("data", [])),
            license_name=license_info.get("name", ""),
            license_url=license_info.get("url", ""),
            repository=data.get("repository", ""),
            last_update=data.get("lastUpdate", ""),
        )


@dataclass
class ReferenceGroup:
    """
    Tracks how many aniSearch entries of one catalog entry were confirmed
    on the dubbed listing. The entry counts as dubbed once every one of
    them has been seen.
    """
    mal_ids: Tuple[int, ...]
    validations_required: int
    current_validations: int = 0
    title: str = ""

    @property
    def is_validated(self) -> bool:
        return self.validations_required > 0 and self.current_validations >= self.validations_required

    def validate(self) -> bool:
        """
        Counts one observation.

        Returns True only for the observation that completes the group.
        """
        if self.current_validations >= self.validations_required:
            return False
        self.current_validations += 1
        return self.current_validations == self.validations_required


class DubStatus(Enum):
    COMPLETE = "complete"
    INCOMPLETE = "incomplete"
    UPCOMING = "upcoming"
    NEVER_RELEASED = "never_released"


@dataclass(frozen=True)
class ListingPage:
    """One page of the aniSearch dubbed anime index."""
    total_pages: int
    anisearch_urls: Tuple[str, ...]


@dataclass
class DubResult:
    dubbed: List[int] = field(default_factory=list)
    incomplete: List[int] = field(default_factory=list)
