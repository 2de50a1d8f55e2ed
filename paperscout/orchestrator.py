"""Keyword and citation search pipelines over arXiv and Semantic Scholar.

The orchestrator owns the visible :class:`SearchState`. Every call to a
``run_*`` method or :meth:`SearchOrchestrator.set_mode` takes the next sequence
number and starts from a fresh state, so nothing from a previous query survives.
A pipeline publishes its progress step by step; a publish whose sequence number
is no longer the latest is dropped and the pipeline stops early.
"""

from __future__ import annotations

from dataclasses import replace
import logging
import threading

import requests

from paperscout.arxiv import ArxivParseError
from paperscout.arxiv import get_paper as arxiv_get_paper
from paperscout.arxiv import search_papers as arxiv_search_papers
from paperscout.config import AppConfig
from paperscout.identifiers import build_scholar_query, resolve_arxiv_id
from paperscout.models import (
    CitationsStatus,
    SearchMode,
    SearchState,
    SearchStatus,
    SourcePaperInfo,
    WeightedTerm,
)
from paperscout.s2 import (
    SemanticScholarRateLimitError,
    find_paper_id as s2_find_paper_id,
    get_citations as s2_get_citations,
)
from paperscout.terms import top_terms

RELATED_TERM_COUNT = 5
CITATION_LIMIT = 10

INVALID_ID_MESSAGE = "Unable to extract a valid arXiv ID from the provided URL"
EMPTY_KEYWORDS_MESSAGE = "Please enter at least one keyword"

FETCH_ERRORS = (
    requests.RequestException,
    ArxivParseError,
    SemanticScholarRateLimitError,
    ValueError,
)

logger = logging.getLogger(__name__)


def split_keywords(raw: str) -> list[str]:
    return [part.strip() for part in str(raw or "").split(",") if part.strip()]


def is_same_paper(candidate_id: str, source_id: str) -> bool:
    # Containment also catches versioned ids such as 2303.08774v2.
    if not candidate_id or not source_id:
        return False
    return candidate_id == source_id or source_id in candidate_id


class SearchOrchestrator:
    def __init__(
        self,
        config: AppConfig | None = None,
        session: requests.Session | None = None,
        mode: SearchMode = SearchMode.KEYWORD,
    ) -> None:
        self._config = config or AppConfig()
        self._session = session
        self._lock = threading.Lock()
        self._sequence = 0
        self._state = SearchState(mode=mode)

    @property
    def state(self) -> SearchState:
        with self._lock:
            return self._state

    @property
    def mode(self) -> SearchMode:
        return self.state.mode

    def _dispatch(self, mode: SearchMode, query: str, status: SearchStatus) -> SearchState:
        with self._lock:
            self._sequence += 1
            self._state = SearchState(sequence=self._sequence, mode=mode, query=query, status=status)
            return self._state

    def _publish(self, draft: SearchState) -> SearchState:
        with self._lock:
            if draft.sequence != self._sequence:
                logger.debug(
                    "Dropping stale search result sequence=%s latest=%s",
                    draft.sequence,
                    self._sequence,
                )
                return replace(draft, stale=True)
            self._state = draft
            return draft

    def _fail(self, draft: SearchState, message: str) -> SearchState:
        return self._publish(replace(draft, status=SearchStatus.ERROR, error=message, papers=()))

    def set_mode(self, mode: SearchMode) -> SearchState:
        """Switch modes, discarding results and any search still in flight."""
        return self._dispatch(SearchMode(mode), "", SearchStatus.IDLE)

    def run(self, mode: SearchMode, value: str) -> SearchState:
        if SearchMode(mode) is SearchMode.CITATION:
            return self.run_citation_search(value)
        return self.run_keyword_search(value)

    def run_keyword_search(self, keywords: str) -> SearchState:
        draft = self._dispatch(SearchMode.KEYWORD, keywords, SearchStatus.LOADING)
        terms = split_keywords(keywords)
        if not terms:
            return self._fail(draft, EMPTY_KEYWORDS_MESSAGE)

        logger.info("Keyword search sequence=%s terms=%s", draft.sequence, terms)
        try:
            papers = arxiv_search_papers(
                terms,
                limit=self._config.max_results,
                session=self._session,
                timeout=self._config.request_timeout,
                base_url=self._config.arxiv_base_url,
            )
        except FETCH_ERRORS as error:
            logger.warning("Keyword search failed sequence=%s: %s", draft.sequence, error)
            return self._fail(draft, f"Failed to fetch papers: {error}")

        return self._publish(replace(draft, status=SearchStatus.SUCCESS, papers=tuple(papers)))

    def run_citation_search(self, value: str) -> SearchState:
        draft = self._dispatch(SearchMode.CITATION, value, SearchStatus.LOADING)
        arxiv_id = resolve_arxiv_id(value)
        if arxiv_id is None:
            return self._fail(draft, INVALID_ID_MESSAGE)

        logger.info("Citation search sequence=%s arxiv_id=%s", draft.sequence, arxiv_id)
        try:
            paper = arxiv_get_paper(
                arxiv_id,
                session=self._session,
                timeout=self._config.request_timeout,
                base_url=self._config.arxiv_base_url,
            )
        except FETCH_ERRORS as error:
            logger.warning("Paper details lookup failed for %s: %s", arxiv_id, error)
            return self._fail(draft, f"Failed to fetch paper details: {error}")
        if paper is None:
            return self._fail(draft, f"Paper {arxiv_id} not found on arXiv")

        s2_id = self._lookup_semantic_scholar_id(paper.title)
        source = SourcePaperInfo(
            title=paper.title,
            id=arxiv_id,
            authors=paper.authors,
            semantic_scholar_id=s2_id,
        )
        terms = top_terms(paper.title, count=RELATED_TERM_COUNT)
        draft = self._publish(
            replace(
                draft,
                source_paper=source,
                scholar_link=build_scholar_query(source.title, source.authors),
                extracted_terms=tuple(terms),
                citations_status=CitationsStatus.LOADING if s2_id else CitationsStatus.UNAVAILABLE,
            )
        )
        if draft.stale:
            return draft

        if s2_id:
            draft = self._publish(self._with_citations(draft, s2_id))
            if draft.stale:
                return draft

        return self._publish(self._with_related(draft, terms, arxiv_id))

    def _lookup_semantic_scholar_id(self, title: str) -> str | None:
        try:
            return s2_find_paper_id(
                title,
                api_key=self._config.s2_api_key or None,
                session=self._session,
                timeout=self._config.request_timeout,
                base_url=self._config.s2_base_url,
            )
        except FETCH_ERRORS as error:
            logger.warning(
                "Semantic Scholar lookup failed for %r, continuing without citations: %s",
                title,
                error,
            )
            return None

    def _with_citations(self, draft: SearchState, s2_id: str) -> SearchState:
        try:
            citing = s2_get_citations(
                s2_id,
                limit=CITATION_LIMIT,
                api_key=self._config.s2_api_key or None,
                session=self._session,
                timeout=self._config.request_timeout,
                base_url=self._config.s2_base_url,
            )
        except FETCH_ERRORS as error:
            logger.warning("Citation fetch failed for %s: %s", s2_id, error)
            return replace(
                draft,
                citations_status=CitationsStatus.ERROR,
                citations_error=f"Failed to fetch citations: {error}",
            )
        return replace(draft, citations_status=CitationsStatus.SUCCESS, citing_papers=tuple(citing))

    def _with_related(self, draft: SearchState, terms: list[WeightedTerm], source_id: str) -> SearchState:
        if not terms:
            return replace(draft, status=SearchStatus.SUCCESS, papers=())
        try:
            candidates = arxiv_search_papers(
                [item.term for item in terms],
                limit=self._config.max_results,
                session=self._session,
                timeout=self._config.request_timeout,
                base_url=self._config.arxiv_base_url,
            )
        except FETCH_ERRORS as error:
            logger.warning("Related paper search failed for %s: %s", source_id, error)
            return replace(
                draft,
                status=SearchStatus.ERROR,
                error=f"Failed to fetch related papers: {error}",
                papers=(),
            )
        related = tuple(paper for paper in candidates if not is_same_paper(paper.id, source_id))
        return replace(draft, status=SearchStatus.SUCCESS, papers=related)
