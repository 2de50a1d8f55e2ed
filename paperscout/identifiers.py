from __future__ import annotations

import re
from urllib.parse import quote

SCHOLAR_SEARCH_URL = "https://scholar.google.com/scholar"
S2_PAPER_PAGE = "https://www.semanticscholar.org/paper"
ARXIV_ABS_PAGE = "https://arxiv.org/abs"

ARXIV_ID_PATTERNS = (
    re.compile(r"arxiv\.org/abs/(\d+\.\d+)", re.IGNORECASE),
    re.compile(r"arxiv\.org/pdf/(\d+\.\d+)", re.IGNORECASE),
    re.compile(r"arxiv\.org/abs/([a-z\-]+(?:\.[a-z\-]+)?/\d+)", re.IGNORECASE),
    re.compile(r"arxiv\.org/pdf/([a-z\-]+(?:\.[a-z\-]+)?/\d+)", re.IGNORECASE),
    re.compile(r"(\d+\.\d+)", re.IGNORECASE),
)


def resolve_arxiv_id(value: str) -> str | None:
    """Pull an arXiv identifier out of an abs/pdf URL or a bare ``YYMM.NNNNN`` string."""
    text = str(value or "")
    for pattern in ARXIV_ID_PATTERNS:
        match = pattern.search(text)
        if match:
            return match.group(1)
    return None


def _last_name(full_name: str) -> str:
    parts = str(full_name or "").split()
    return parts[-1] if parts else ""


def build_scholar_query(title: str, authors: list[str] | tuple[str, ...]) -> str:
    query = quote(f'intitle:"{title or ""}"', safe="")
    if authors:
        query += "+author:" + quote(_last_name(authors[0]), safe="")
    return f"{SCHOLAR_SEARCH_URL}?q={query}"


def semantic_scholar_page(paper_id: str) -> str:
    return f"{S2_PAPER_PAGE}/{quote(paper_id, safe='')}"


def arxiv_abs_page(arxiv_id: str) -> str:
    return f"{ARXIV_ABS_PAGE}/{arxiv_id}"
