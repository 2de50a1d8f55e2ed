from __future__ import annotations

import logging
from typing import Any
import xml.etree.ElementTree as ET

import requests

from paperscout.models import PaperSummary

ARXIV_BASE = "http://export.arxiv.org/api/query"
ATOM_NS = {"atom": "http://www.w3.org/2005/Atom"}
DEFAULT_TIMEOUT = 20.0
USER_AGENT = "paperscout/0.1"

logger = logging.getLogger(__name__)


class ArxivParseError(ValueError):
    """Raised when the arXiv feed is not well-formed Atom."""


def _clean(value: str) -> str:
    return " ".join(str(value or "").split())


def _extract_arxiv_id(id_url: str) -> str:
    text = str(id_url or "").strip()
    if not text:
        return ""
    if "/abs/" in text:
        return text.split("/abs/", 1)[1]
    parts = text.split("/")
    return parts[-1] if parts else text


def _entry_text(entry: ET.Element, tag: str) -> str:
    node = entry.find(f"atom:{tag}", ATOM_NS)
    if node is None or node.text is None:
        return ""
    return node.text.strip()


def _entry_authors(entry: ET.Element) -> tuple[str, ...]:
    authors: list[str] = []
    for author in entry.findall("atom:author", ATOM_NS):
        name_node = author.find("atom:name", ATOM_NS)
        if name_node is not None and name_node.text:
            authors.append(name_node.text.strip())
    return tuple(authors)


def _entry_link(entry: ET.Element, fallback: str) -> str:
    for link in entry.findall("atom:link", ATOM_NS):
        href = link.attrib.get("href", "")
        if link.attrib.get("rel") == "alternate" and href:
            return href
    return fallback


def _is_error_entry(entry: ET.Element) -> bool:
    # arXiv reports bad queries as a single entry titled "Error".
    id_url = _entry_text(entry, "id")
    return "/api/errors" in id_url or _entry_text(entry, "title") == "Error"


def _to_paper_summary(entry: ET.Element) -> PaperSummary:
    id_url = _entry_text(entry, "id")
    return PaperSummary(
        id=_extract_arxiv_id(id_url),
        title=_clean(_entry_text(entry, "title")),
        summary=_clean(_entry_text(entry, "summary")),
        authors=_entry_authors(entry),
        published=_entry_text(entry, "published"),
        link=_entry_link(entry, id_url),
    )


def parse_feed(xml_text: str) -> list[PaperSummary]:
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as error:
        raise ArxivParseError(f"Malformed arXiv response: {error}") from error
    entries = root.findall("atom:entry", ATOM_NS)
    return [_to_paper_summary(entry) for entry in entries if not _is_error_entry(entry)]


def _quote_term(term: str) -> str:
    text = str(term or "").strip()
    if " " in text:
        return f'"{text}"'
    return text


def build_search_query(terms: list[str] | tuple[str, ...]) -> str:
    """Join ``all:`` clauses with OR; URL-encoding renders the separator as ``+OR+``."""
    clauses = [f"all:{_quote_term(term)}" for term in terms if str(term or "").strip()]
    return " OR ".join(clauses)


def _get_feed(
    client: Any,
    params: dict[str, Any],
    timeout: float,
    base_url: str = ARXIV_BASE,
) -> list[PaperSummary]:
    logger.debug("arXiv request params=%s", params)
    response = client.get(
        base_url,
        params=params,
        headers={"User-Agent": USER_AGENT},
        timeout=timeout,
    )
    response.raise_for_status()
    return parse_feed(response.text)


def search_papers(
    terms: list[str] | tuple[str, ...],
    limit: int = 10,
    sort_by: str = "submittedDate",
    sort_order: str = "descending",
    session: requests.Session | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    base_url: str = ARXIV_BASE,
) -> list[PaperSummary]:
    query = build_search_query(terms)
    if not query:
        return []
    params = {
        "search_query": query,
        "sortBy": sort_by,
        "sortOrder": sort_order,
        "start": 0,
        "max_results": max(1, min(limit, 100)),
    }
    return _get_feed(session or requests, params, timeout, base_url)


def get_paper(
    arxiv_id: str,
    session: requests.Session | None = None,
    timeout: float = DEFAULT_TIMEOUT,
    base_url: str = ARXIV_BASE,
) -> PaperSummary | None:
    normalized = str(arxiv_id or "").strip()
    if not normalized:
        return None
    params = {"id_list": normalized, "max_results": 1}
    papers = _get_feed(session or requests, params, timeout, base_url)
    return papers[0] if papers else None
