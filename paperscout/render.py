from __future__ import annotations

import re
from typing import Any, Iterable

from paperscout.identifiers import arxiv_abs_page, build_scholar_query, semantic_scholar_page
from paperscout.models import (
    CitationsStatus,
    CitingPaper,
    PaperSummary,
    SearchMode,
    SearchState,
    SearchStatus,
    is_known,
)

SUMMARY_PREVIEW_CHARS = 400


def _clean_text(value: Any) -> str:
    return re.sub(r"\s+", " ", str(value or "")).strip()


def _authors_text(authors: Iterable[str]) -> str:
    names = [_clean_text(name) for name in authors]
    names = [name for name in names if name]
    if not names:
        return "Unknown Author"
    if len(names) <= 3:
        return ", ".join(names)
    return ", ".join(names[:3]) + ", et al."


def _preview(text: str) -> str:
    cleaned = _clean_text(text)
    if len(cleaned) <= SUMMARY_PREVIEW_CHARS:
        return cleaned
    return cleaned[:SUMMARY_PREVIEW_CHARS].rstrip() + "..."


def display_items(state: SearchState) -> list[PaperSummary | CitingPaper]:
    """Items in the order they are numbered on screen: citing papers, then papers."""
    return [*state.citing_papers, *state.papers]


def open_link(item: PaperSummary | CitingPaper) -> str:
    if isinstance(item, PaperSummary):
        return item.link
    if is_known(item.url):
        return item.url
    if is_known(item.paper_id):
        return semantic_scholar_page(item.paper_id)
    return build_scholar_query(item.title, item.authors)


def _paper_lines(index: int, paper: PaperSummary, expanded: bool) -> list[str]:
    date = paper.published.split("T", 1)[0]
    lines = [f"  {index}. {_clean_text(paper.title)} ({date or 'n.d.'})"]
    lines.append(f"     {_authors_text(paper.authors)}")
    if expanded:
        lines.append(f"     {_preview(paper.summary)}")
        lines.append(f"     Open: {open_link(paper)}")
    return lines


def _citing_lines(index: int, paper: CitingPaper, expanded: bool) -> list[str]:
    lines = [f"  {index}. {_clean_text(paper.title)} ({paper.year})"]
    lines.append(f"     {_authors_text(paper.authors)} | {paper.venue}")
    if expanded:
        lines.append(f"     {_preview(paper.abstract)}")
        lines.append(f"     Open: {open_link(paper)}")
    return lines


def _citations_section(state: SearchState, expanded: set[int]) -> list[str]:
    status = state.citations_status
    if status is CitationsStatus.LOADING:
        return ["Citing papers: loading..."]
    if status is CitationsStatus.ERROR:
        return [f"Citing papers: error: {state.citations_error}"]
    if status is CitationsStatus.UNAVAILABLE:
        return ["Citing papers: no citation data available."]
    if status is CitationsStatus.IDLE:
        return []
    if not state.citing_papers:
        return ["Citing papers: none found."]
    lines = [f"Citing papers ({len(state.citing_papers)}):"]
    for index, paper in enumerate(state.citing_papers, start=1):
        lines.extend(_citing_lines(index, paper, index in expanded))
    return lines


def _papers_section(state: SearchState, heading: str, expanded: set[int]) -> list[str]:
    if state.status is SearchStatus.LOADING:
        return [f"{heading}: loading..."]
    if state.status is SearchStatus.ERROR:
        return [f"{heading}: error: {state.error}"]
    if state.status is SearchStatus.IDLE:
        return []
    if not state.papers:
        return [f"{heading}: none found."]
    offset = len(state.citing_papers)
    lines = [f"{heading} ({len(state.papers)}):"]
    for index, paper in enumerate(state.papers, start=offset + 1):
        lines.extend(_paper_lines(index, paper, index in expanded))
    return lines


def _source_section(state: SearchState) -> list[str]:
    source = state.source_paper
    if source is None:
        return []
    lines = [f"Source paper: {_clean_text(source.title)} [{source.id}]"]
    lines.append(f"  Authors: {_authors_text(source.authors)}")
    lines.append(f"  arXiv: {arxiv_abs_page(source.id)}")
    if state.scholar_link:
        lines.append(f"  Google Scholar: {state.scholar_link}")
    if source.semantic_scholar_id:
        lines.append(f"  Semantic Scholar: {semantic_scholar_page(source.semantic_scholar_id)}")
    if state.extracted_terms:
        lines.append("  Key terms: " + ", ".join(item.term for item in state.extracted_terms))
    return lines


def render_state(state: SearchState, expanded: Iterable[int] | bool = ()) -> str:
    """Render a search state as plain text.

    ``expanded`` holds the 1-based item numbers whose details and "Open" link
    are shown; ``True`` expands every item.
    """
    if expanded is True:
        expanded_set = set(range(1, len(display_items(state)) + 1))
    elif expanded is False:
        expanded_set = set()
    else:
        expanded_set = set(expanded)

    lines = [f"[{state.mode.value} mode]"]
    if state.query:
        lines[0] += f" {state.query}"

    if state.mode is SearchMode.KEYWORD:
        lines.extend(_papers_section(state, "Papers", expanded_set))
        return "\n".join(lines)

    if state.source_paper is None:
        if state.status is SearchStatus.ERROR:
            lines.append(f"Error: {state.error}")
        elif state.status is SearchStatus.LOADING:
            lines.append("Looking up paper...")
        return "\n".join(lines)

    lines.extend(_source_section(state))
    lines.extend(_citations_section(state, expanded_set))
    lines.extend(_papers_section(state, "Related papers", expanded_set))
    return "\n".join(lines)
