"""Core data model: vectors, the similarity field, entities and the embedding."""

from .vector import Vector
from .field import SimilarityField, SymmetricMatrix
from .entity import Entity, clean_label
from .embedding import Embedding, PlotPoint, normalize_similarity

__all__ = [
    "Vector",
    "SimilarityField",
    "SymmetricMatrix",
    "Entity",
    "clean_label",
    "Embedding",
    "PlotPoint",
    "normalize_similarity",
]
