from __future__ import annotations

import unittest

from paperscout.models import WeightedTerm
from paperscout.terms import MAX_TERMS, extract_terms, top_terms


def _pairs(terms: list[WeightedTerm]) -> list[tuple[str, int]]:
    return [(item.term, item.weight) for item in terms]


class ExtractTermsTests(unittest.TestCase):
    def test_domain_phrase_gets_top_weight(self) -> None:
        terms = extract_terms("A survey of machine learning methods")
        self.assertIn(WeightedTerm("machine learning", 10), terms)
        self.assertEqual(terms[0], WeightedTerm("machine learning", 10))
        self.assertEqual(
            _pairs(terms[1:]),
            [("survey", 2), ("machine", 2), ("learning", 2), ("methods", 2)],
        )

    def test_technical_tokens_are_lowercased_with_weight_eight(self) -> None:
        terms = extract_terms("Scaling GPT4 and ResNet50 with LoRA on x86")
        self.assertEqual(
            _pairs(terms),
            [("gpt4", 8), ("resnet50", 8), ("lora", 8), ("x86", 8), ("scaling", 2)],
        )

    def test_repeated_words_weigh_three_plus_count(self) -> None:
        terms = extract_terms("graph graph graph pruning pruning methods")
        self.assertEqual(_pairs(terms), [("graph", 6), ("pruning", 5), ("methods", 2)])

    def test_stop_words_short_and_punctuated_tokens_are_skipped(self) -> None:
        self.assertEqual(_pairs(extract_terms("using using graphs")), [("graphs", 2)])
        self.assertEqual(
            _pairs(extract_terms("state-of-the-art results, results")),
            [("results", 2)],
        )

    def test_ties_keep_discovery_order(self) -> None:
        terms = extract_terms("alpha bravo charlie delta")
        self.assertEqual([item.term for item in terms], ["alpha", "bravo", "charlie", "delta"])

    def test_empty_and_blank_input(self) -> None:
        self.assertEqual(extract_terms(""), [])
        self.assertEqual(extract_terms("   \n\t"), [])

    def test_never_more_than_cap(self) -> None:
        text = (
            "Deep learning, machine learning, reinforcement learning and transfer learning "
            "for computer vision with a neural network, a transformer, a knowledge graph "
            "and a diffusion model in BERT, GPT3, ResNet and ViT benchmarks "
        ) * 20
        terms = extract_terms(text)
        self.assertEqual(len(terms), MAX_TERMS)
        weights = [item.weight for item in terms]
        self.assertEqual(weights, sorted(weights, reverse=True))

    def test_deterministic(self) -> None:
        title = "Attention Is All You Need: Transformer models for NLP"
        self.assertEqual(extract_terms(title), extract_terms(title))

    def test_domain_and_technical_passes_can_repeat_a_term(self) -> None:
        # The two passes are not reconciled: "llm" shows up at weight 10 and 8.
        terms = extract_terms("LLM agents for LLM evaluation")
        self.assertEqual(
            _pairs(terms),
            [("llm", 10), ("llm", 8), ("agents", 2), ("evaluation", 2)],
        )

    def test_merge_duplicates_keeps_heaviest_entry(self) -> None:
        terms = extract_terms("LLM agents for LLM evaluation", merge_duplicates=True)
        self.assertEqual(_pairs(terms), [("llm", 10), ("agents", 2), ("evaluation", 2)])


class TopTermsTests(unittest.TestCase):
    def test_retags_with_display_weight(self) -> None:
        terms = top_terms("GPT-4 Technical Report")
        self.assertEqual(_pairs(terms), [("gpt", 8), ("technical", 8), ("report", 8)])

    def test_limits_count(self) -> None:
        terms = top_terms("alpha bravo charlie delta echoes foxtrot golfing", count=5)
        self.assertEqual(len(terms), 5)


class WeightedTermTests(unittest.TestCase):
    def test_rejects_uppercase_or_empty_term(self) -> None:
        with self.assertRaises(ValueError):
            WeightedTerm("LLM", 8)
        with self.assertRaises(ValueError):
            WeightedTerm("", 8)

    def test_rejects_non_positive_weight(self) -> None:
        with self.assertRaises(ValueError):
            WeightedTerm("llm", 0)


if __name__ == "__main__":
    unittest.main()
