from __future__ import annotations

import unittest
from unittest.mock import MagicMock

import requests

from paperscout.arxiv import (
    ARXIV_BASE,
    ArxivParseError,
    build_search_query,
    get_paper,
    parse_feed,
    search_papers,
)

FEED = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <title>ArXiv Query</title>
  <entry>
    <id>http://arxiv.org/abs/2303.08774v6</id>
    <published>2023-03-15T17:15:04Z</published>
    <title>GPT-4 Technical
      Report</title>
    <summary>  We report the development of GPT-4,
      a large-scale, multimodal model.  </summary>
    <author><name>OpenAI</name></author>
    <author><name>Josh Achiam</name></author>
    <link href="http://arxiv.org/abs/2303.08774v6" rel="alternate" type="text/html"/>
    <link title="pdf" href="http://arxiv.org/pdf/2303.08774v6" rel="related" type="application/pdf"/>
  </entry>
  <entry>
    <id>http://arxiv.org/abs/hep-th/9901001v1</id>
    <published>1999-01-01T00:00:00Z</published>
    <title>Legacy Paper</title>
    <summary>Old style identifier.</summary>
    <author><name>A. Physicist</name></author>
  </entry>
</feed>
"""

ERROR_FEED = """<?xml version="1.0" encoding="UTF-8"?>
<feed xmlns="http://www.w3.org/2005/Atom">
  <entry>
    <id>http://arxiv.org/api/errors#incorrect_id_format_for_9999.0</id>
    <title>Error</title>
    <summary>incorrect id format for 9999.0</summary>
  </entry>
</feed>
"""

EMPTY_FEED = '<feed xmlns="http://www.w3.org/2005/Atom"><title>ArXiv Query</title></feed>'


def _session(text: str, status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.text = text
    if status_code >= 400:
        response.raise_for_status.side_effect = requests.HTTPError(f"{status_code} Server Error")
    session = MagicMock()
    session.get.return_value = response
    return session


class ParseFeedTests(unittest.TestCase):
    def test_entries_become_paper_summaries(self) -> None:
        papers = parse_feed(FEED)
        self.assertEqual(len(papers), 2)
        first = papers[0]
        self.assertEqual(first.id, "2303.08774v6")
        self.assertEqual(first.title, "GPT-4 Technical Report")
        self.assertEqual(
            first.summary,
            "We report the development of GPT-4, a large-scale, multimodal model.",
        )
        self.assertEqual(first.authors, ("OpenAI", "Josh Achiam"))
        self.assertEqual(first.published, "2023-03-15T17:15:04Z")
        self.assertEqual(first.link, "http://arxiv.org/abs/2303.08774v6")

    def test_legacy_id_keeps_category_and_falls_back_to_id_link(self) -> None:
        legacy = parse_feed(FEED)[1]
        self.assertEqual(legacy.id, "hep-th/9901001v1")
        self.assertEqual(legacy.link, "http://arxiv.org/abs/hep-th/9901001v1")

    def test_error_entry_is_ignored(self) -> None:
        self.assertEqual(parse_feed(ERROR_FEED), [])

    def test_malformed_xml_raises_parse_error(self) -> None:
        with self.assertRaises(ArxivParseError):
            parse_feed("<feed><entry>")


class QueryTests(unittest.TestCase):
    def test_multi_word_terms_are_quoted_and_or_joined(self) -> None:
        query = build_search_query(["LLM", "machine learning", "  "])
        self.assertEqual(query, 'all:LLM OR all:"machine learning"')

    def test_encoded_request_uses_plus_or_plus(self) -> None:
        request = requests.Request(
            "GET",
            ARXIV_BASE,
            params={"search_query": build_search_query(["llm", "agents"])},
        ).prepare()
        self.assertIn("search_query=all%3Allm+OR+all%3Aagents", request.url)

    def test_empty_terms_skip_the_request(self) -> None:
        session = _session(FEED)
        self.assertEqual(search_papers([], session=session), [])
        session.get.assert_not_called()


class ClientTests(unittest.TestCase):
    def test_search_papers_requests_latest_submissions(self) -> None:
        session = _session(FEED)
        papers = search_papers(["LLM"], limit=10, session=session, timeout=12.0)
        self.assertEqual(len(papers), 2)
        args, kwargs = session.get.call_args
        self.assertEqual(args[0], ARXIV_BASE)
        self.assertEqual(kwargs["timeout"], 12.0)
        self.assertEqual(
            kwargs["params"],
            {
                "search_query": "all:LLM",
                "sortBy": "submittedDate",
                "sortOrder": "descending",
                "start": 0,
                "max_results": 10,
            },
        )

    def test_get_paper_uses_id_list(self) -> None:
        session = _session(FEED)
        paper = get_paper("2303.08774", session=session)
        self.assertIsNotNone(paper)
        self.assertEqual(paper.title, "GPT-4 Technical Report")
        self.assertEqual(session.get.call_args.kwargs["params"]["id_list"], "2303.08774")

    def test_get_paper_not_found(self) -> None:
        self.assertIsNone(get_paper("9999.0", session=_session(ERROR_FEED)))
        self.assertIsNone(get_paper("2303.99999", session=_session(EMPTY_FEED)))

    def test_http_error_propagates(self) -> None:
        with self.assertRaises(requests.HTTPError):
            search_papers(["LLM"], session=_session("", status_code=503))


if __name__ == "__main__":
    unittest.main()
