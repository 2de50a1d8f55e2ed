from __future__ import annotations

import logging
import threading
import time
from typing import Any
from urllib.parse import quote

import requests

from paperscout.models import (
    NO_ABSTRACT,
    UNKNOWN_TITLE,
    UNKNOWN_VENUE,
    UNKNOWN_YEAR,
    CitingPaper,
)

S2_BASE = "https://api.semanticscholar.org/graph/v1"
DEFAULT_TIMEOUT = 20.0
USER_AGENT = "paperscout/0.1"
MIN_REQUEST_INTERVAL_SECONDS = 1.05

SEARCH_FIELDS = "paperId,title"
CITATION_FIELDS = ",".join(["title", "abstract", "authors", "year", "url", "venue"])

_rate_lock = threading.Lock()
_last_request_at = 0.0

logger = logging.getLogger(__name__)


class SemanticScholarRateLimitError(RuntimeError):
    """Raised when Semantic Scholar returns 429."""


def _respect_rate_limit() -> None:
    global _last_request_at
    with _rate_lock:
        now = time.monotonic()
        wait = MIN_REQUEST_INTERVAL_SECONDS - (now - _last_request_at)
        if wait > 0:
            time.sleep(wait)
        _last_request_at = time.monotonic()


def _headers(api_key: str | None) -> dict[str, str]:
    headers = {"User-Agent": USER_AGENT}
    if api_key:
        headers["x-api-key"] = api_key
    return headers


def _s2_get(client: Any, url: str, **kwargs: Any) -> requests.Response:
    _respect_rate_limit()
    logger.debug("Semantic Scholar request url=%s params=%s", url, kwargs.get("params"))
    response = client.get(url, **kwargs)
    if response.status_code == 429:
        raise SemanticScholarRateLimitError("Semantic Scholar rate limited (429).")
    return response


def _data_list(payload: Any) -> list[Any]:
    if not isinstance(payload, dict):
        raise ValueError("Unexpected Semantic Scholar payload: expected an object")
    data = payload.get("data") or []
    if not isinstance(data, list):
        raise ValueError("Unexpected Semantic Scholar payload: 'data' is not a list")
    return data


def _text_or(value: Any, default: str) -> str:
    text = str(value or "").strip()
    return text or default


def _author_names(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    names = [str(author.get("name") or "").strip() for author in value if isinstance(author, dict)]
    return tuple(name for name in names if name)


def _to_citing_paper(item: dict[str, Any]) -> CitingPaper:
    year = item.get("year")
    return CitingPaper(
        paper_id=_text_or(item.get("paperId"), ""),
        title=_text_or(item.get("title"), UNKNOWN_TITLE),
        abstract=_text_or(item.get("abstract"), NO_ABSTRACT),
        authors=_author_names(item.get("authors")),
        year=str(year) if year else UNKNOWN_YEAR,
        url=_text_or(item.get("url"), ""),
        venue=_text_or(item.get("venue"), UNKNOWN_VENUE),
    )


def find_paper_id(
    title: str,
    api_key: str | None = None,
    session: requests.Session | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    base_url: str = S2_BASE,
) -> str | None:
    query = str(title or "").strip()
    if not query:
        return None

    response = _s2_get(
        session or requests,
        f"{base_url}/paper/search",
        params={"query": query, "limit": 1, "fields": SEARCH_FIELDS},
        headers=_headers(api_key),
        timeout=timeout,
    )
    response.raise_for_status()
    for item in _data_list(response.json()):
        if isinstance(item, dict) and item.get("paperId"):
            return str(item["paperId"])
    return None


def get_citations(
    paper_id: str,
    limit: int = 10,
    api_key: str | None = None,
    session: requests.Session | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    base_url: str = S2_BASE,
) -> list[CitingPaper]:
    encoded = quote(str(paper_id or "").strip(), safe="")
    if not encoded:
        return []

    response = _s2_get(
        session or requests,
        f"{base_url}/paper/{encoded}/citations",
        params={"fields": CITATION_FIELDS, "limit": limit},
        headers=_headers(api_key),
        timeout=timeout,
    )
    response.raise_for_status()

    result: list[CitingPaper] = []
    for wrapper in _data_list(response.json()):
        if not isinstance(wrapper, dict):
            continue
        citing = wrapper.get("citingPaper")
        if not isinstance(citing, dict) or not citing:
            continue
        result.append(_to_citing_paper(citing))
    return result
