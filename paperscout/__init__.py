"""arXiv keyword search and citation explorer."""

__all__ = [
    "arxiv",
    "cli",
    "config",
    "identifiers",
    "models",
    "orchestrator",
    "render",
    "s2",
    "terms",
]
