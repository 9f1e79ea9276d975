"""
Shared test fixtures for hookemap tests.

Provides small configurations, embeddings and similarity files that keep
simulations short and deterministic.
"""

import pytest
from pathlib import Path
from typing import List, Tuple

from hookemap.config import EmbeddingConfig, SimilarityTransform
from hookemap.model.embedding import Embedding


# Three entities whose one-minus distances form a triangle:
# A-B 0.1, A-C 0.4, B-C 0.35
ABC_RECORDS: List[Tuple[str, str, float]] = [
    ("A", "B", 0.9),
    ("A", "C", 0.6),
    ("B", "C", 0.65),
]

SIMILARITY_TEXT = """\
# label label similarity
wind        breeze      0.82
wind        gale        0.64
wind        storm       0.41
breeze      gale        0.55
breeze      storm       0.30
gale        storm       0.77
"""


@pytest.fixture
def small_config() -> EmbeddingConfig:
    """Seeded one-minus configuration with short runs."""
    return EmbeddingConfig(
        transform=SimilarityTransform.ONE_MINUS,
        number_of_starts=3,
        initial_iterations=50,
        final_iterations=1000,
        seed=7,
    )


@pytest.fixture
def abc_records() -> List[Tuple[str, str, float]]:
    return list(ABC_RECORDS)


@pytest.fixture
def abc_embedding(small_config) -> Embedding:
    """A/B/C embedding with A as reference."""
    return Embedding.from_records(ABC_RECORDS, "A", small_config)


@pytest.fixture
def similarity_file(tmp_path) -> Path:
    """A small similarity file centred on 'wind'."""
    path = tmp_path / "wind.txt"
    path.write_text(SIMILARITY_TEXT)
    return path
