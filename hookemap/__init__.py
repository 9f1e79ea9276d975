"""
hookemap - Similarity Maps by Spring Relaxation

Lays out labelled entities so that their pairwise distances approximate
distances derived from measured similarities. Every pair is joined by a
Hookean spring; random restarts pick a good starting layout, a long
relaxation refines it and the result is rotated into a canonical frame
around a chosen reference entity.
"""

__version__ = "0.1.0"
__author__ = "hookemap developers"

from .config import EmbeddingConfig, SimilarityTransform, get_preset
from .model.embedding import Embedding
from .layout.search import OptimizationSearch, SearchResult
from .data.ingest import load_embedding

__all__ = [
    "EmbeddingConfig",
    "SimilarityTransform",
    "get_preset",
    "Embedding",
    "OptimizationSearch",
    "SearchResult",
    "load_embedding",
]
