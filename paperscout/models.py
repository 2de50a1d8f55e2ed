from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

UNKNOWN_TITLE = "Unknown Title"
NO_ABSTRACT = "No abstract available"
UNKNOWN_YEAR = "Unknown"
UNKNOWN_VENUE = "Unknown Venue"
SENTINELS = frozenset({UNKNOWN_TITLE, NO_ABSTRACT, UNKNOWN_YEAR, UNKNOWN_VENUE, ""})


def is_known(value: object) -> bool:
    """Return False for empty values and the placeholder strings used for missing fields."""
    if isinstance(value, (list, tuple)):
        return bool(value)
    return str(value or "") not in SENTINELS


class SearchMode(str, Enum):
    KEYWORD = "keyword"
    CITATION = "citation"


class SearchStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"


class CitationsStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    SUCCESS = "success"
    ERROR = "error"
    UNAVAILABLE = "unavailable"


@dataclass(frozen=True)
class WeightedTerm:
    term: str
    weight: int

    def __post_init__(self) -> None:
        if not self.term or self.term != self.term.lower():
            raise ValueError(f"Term must be lowercase and non-empty: {self.term!r}")
        if self.weight <= 0:
            raise ValueError(f"Term weight must be positive: {self.weight}")


@dataclass(frozen=True)
class PaperSummary:
    """One arXiv record."""

    id: str
    title: str
    summary: str
    authors: tuple[str, ...]
    published: str
    link: str


@dataclass(frozen=True)
class CitingPaper:
    """One paper citing the source paper, as reported by Semantic Scholar."""

    paper_id: str = ""
    title: str = UNKNOWN_TITLE
    abstract: str = NO_ABSTRACT
    authors: tuple[str, ...] = ()
    year: str = UNKNOWN_YEAR
    url: str = ""
    venue: str = UNKNOWN_VENUE


@dataclass(frozen=True)
class SourcePaperInfo:
    title: str
    id: str
    authors: tuple[str, ...]
    semantic_scholar_id: str | None = None


@dataclass(frozen=True)
class SearchState:
    """Visible result of the most recently dispatched search."""

    sequence: int = 0
    mode: SearchMode = SearchMode.KEYWORD
    query: str = ""
    status: SearchStatus = SearchStatus.IDLE
    error: str | None = None
    papers: tuple[PaperSummary, ...] = ()
    source_paper: SourcePaperInfo | None = None
    scholar_link: str | None = None
    extracted_terms: tuple[WeightedTerm, ...] = ()
    citing_papers: tuple[CitingPaper, ...] = ()
    citations_status: CitationsStatus = CitationsStatus.IDLE
    citations_error: str | None = None
    stale: bool = field(default=False, compare=False)

    @property
    def loading(self) -> bool:
        return self.status is SearchStatus.LOADING

    @property
    def citations_loading(self) -> bool:
        return self.citations_status is CitationsStatus.LOADING
