"""Layout search: multi-start seeding and refinement of an embedding."""

from .search import OptimizationSearch, SearchResult, StepCallback

__all__ = [
    "OptimizationSearch",
    "SearchResult",
    "StepCallback",
]
