from __future__ import annotations

from collections import Counter
import re

from paperscout.models import WeightedTerm

MAX_TERMS = 8
DOMAIN_WEIGHT = 10
TECHNICAL_WEIGHT = 8
FREQUENCY_BASE_WEIGHT = 3
RARE_WEIGHT = 2

DOMAIN_TERMS = (
    "machine learning",
    "deep learning",
    "neural network",
    "artificial intelligence",
    "natural language processing",
    "computer vision",
    "reinforcement learning",
    "large language model",
    "language model",
    "llm",
    "transformer",
    "attention mechanism",
    "generative model",
    "diffusion model",
    "graph neural network",
    "convolutional neural network",
    "recurrent neural network",
    "federated learning",
    "transfer learning",
    "self-supervised learning",
    "contrastive learning",
    "knowledge graph",
    "question answering",
    "multimodal",
    "retrieval augmented generation",
    "few-shot learning",
    "zero-shot learning",
    "fine-tuning",
    "in-context learning",
    "prompt engineering",
)

STOP_WORDS = frozenset(
    {
        "the", "and", "for", "with", "that", "this", "from", "are", "was", "were",
        "has", "have", "had", "not", "but", "its", "our", "their", "they", "them",
        "into", "onto", "over", "under", "about", "than", "then", "via", "using",
        "based", "towards", "toward", "between", "through", "can", "will", "what",
        "when", "how", "why", "which", "who", "all", "any", "some", "such",
    }
)

# Acronyms, CamelCase, letter-digit mixes and words with an inner capital.
TECHNICAL_TERM_PATTERN = re.compile(
    r"\b(?:"
    r"[A-Z]{2,}[A-Za-z0-9]*"
    r"|[A-Z][a-z]+[A-Z][A-Za-z0-9]*"
    r"|[A-Za-z]+[0-9][A-Za-z0-9]*"
    r"|[A-Za-z0-9]*[a-z0-9][A-Z][A-Za-z0-9]*"
    r")\b"
)
TECHNICAL_EXCLUDED = frozenset({"I", "A", "The"})
PLAIN_TOKEN_PATTERN = re.compile(r"[a-z0-9]+")


def _domain_terms(lowered: str) -> list[WeightedTerm]:
    return [WeightedTerm(term, DOMAIN_WEIGHT) for term in DOMAIN_TERMS if term in lowered]


def _technical_terms(text: str) -> list[WeightedTerm]:
    matches = dict.fromkeys(TECHNICAL_TERM_PATTERN.findall(text))
    return [
        WeightedTerm(match.lower(), TECHNICAL_WEIGHT)
        for match in matches
        if match not in TECHNICAL_EXCLUDED
    ]


def _candidate_tokens(lowered: str) -> list[str]:
    return [
        token
        for token in lowered.split()
        if token not in STOP_WORDS and len(token) > 2 and PLAIN_TOKEN_PATTERN.fullmatch(token)
    ]


def _merge_by_max_weight(terms: list[WeightedTerm]) -> list[WeightedTerm]:
    merged: dict[str, WeightedTerm] = {}
    for item in terms:
        current = merged.get(item.term)
        if current is None or item.weight > current.weight:
            merged[item.term] = item
    return list(merged.values())


def extract_terms(text: str, merge_duplicates: bool = False) -> list[WeightedTerm]:
    """Rank keyword candidates found in ``text``.

    Domain vocabulary hits weigh 10, technical-looking tokens 8, repeated plain
    words ``3 + count`` and single long words 2. At most eight terms are
    returned, heaviest first, ties in the order they were found.

    The domain and technical passes are not checked against each other, so a
    term such as ``llm`` can be listed twice (weights 10 and 8). Pass
    ``merge_duplicates=True`` to keep only the heaviest entry per term.
    """
    if not text or not text.strip():
        return []

    lowered = text.lower()
    found = _domain_terms(lowered)
    found.extend(_technical_terms(text))

    counts = Counter(_candidate_tokens(lowered))
    for token, count in counts.items():
        if count <= 1:
            continue
        if any(item.term == token for item in found):
            continue
        found.append(WeightedTerm(token, FREQUENCY_BASE_WEIGHT + count))

    for token, count in counts.items():
        if count != 1 or len(token) <= 3:
            continue
        if any(item.term == token for item in found):
            continue
        found.append(WeightedTerm(token, RARE_WEIGHT))

    if merge_duplicates:
        found = _merge_by_max_weight(found)

    ranked = sorted(found, key=lambda item: item.weight, reverse=True)
    return ranked[:MAX_TERMS]


def top_terms(text: str, count: int = 5, display_weight: int = TECHNICAL_WEIGHT) -> list[WeightedTerm]:
    """Return the ``count`` heaviest terms of ``text`` re-tagged with one display weight."""
    return [WeightedTerm(item.term, display_weight) for item in extract_terms(text)[:count]]
