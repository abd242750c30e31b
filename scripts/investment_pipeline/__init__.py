"""
Virtual-economy investment analysis pipeline.

This package provides an end-to-end pipeline for:
- Loading item catalogs and fetching daily market history
- Normalizing raw history payloads into price series
- Extracting price change, volatility and momentum
- Scoring items against a budget and filtering illiquid candidates
- Ranking the best candidates and writing a run summary
"""

__version__ = "1.0.0"
__all__ = [
    "config",
    "models",
    "normalizer",
    "analyzers",
    "scoring",
    "filters",
    "ranking",
    "fetchers",
    "summarizer",
    "pipeline"
]
