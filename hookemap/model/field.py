"""
Similarity Field

Symmetric N x N storage for the target ("ideal") distance, the inverse spring
constant and the data-present flag of every entity pair. Rows and columns
are entity slots. The field starts at a fixed capacity and doubles whenever
more entities need room.
"""

import logging
from typing import Any, List, Optional

from ..config import EmbeddingConfig, SimilarityTransform

logger = logging.getLogger(__name__)


class SymmetricMatrix:
    """Dense square matrix whose only mutator writes both [i][j] and [j][i]."""

    def __init__(self, size: int, fill: Any):
        self.size = size
        self.fill = fill
        self._rows: List[List[Any]] = [[fill] * size for _ in range(size)]

    def get(self, i: int, j: int) -> Any:
        return self._rows[i][j]

    def set(self, i: int, j: int, value: Any):
        self._rows[i][j] = value
        self._rows[j][i] = value

    def expanded(self, new_size: int, keep: int) -> "SymmetricMatrix":
        """Return a ``new_size`` matrix holding this one's first ``keep`` rows/cols."""
        result = SymmetricMatrix(new_size, self.fill)
        for i in range(keep):
            result._rows[i][:keep] = self._rows[i][:keep]
        return result

    def without(self, index: int, keep: int) -> "SymmetricMatrix":
        """Return a same-size matrix with row/column ``index`` removed from the first ``keep``."""
        result = SymmetricMatrix(self.size, self.fill)
        remaining = [k for k in range(keep) if k != index]
        for new_i, old_i in enumerate(remaining):
            row = self._rows[old_i]
            result._rows[new_i][:len(remaining)] = [row[old_j] for old_j in remaining]
        return result


class SimilarityField:
    """Pairwise ideal distances, force constants and presence flags."""

    def __init__(self, config: Optional[EmbeddingConfig] = None,
                 size: Optional[int] = None):
        self.config = config or EmbeddingConfig()
        self.transform: SimilarityTransform = self.config.transform
        self.size = size or self.config.initial_field_size

        self._ideal = SymmetricMatrix(self.size, 0.0)
        self._force = SymmetricMatrix(self.size, self.config.default_force_constant)
        self._present = SymmetricMatrix(self.size, False)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def ideal_distance(self, i: int, j: int) -> float:
        return self._ideal.get(i, j)

    def force_constant(self, i: int, j: int) -> float:
        return self._force.get(i, j)

    def present(self, i: int, j: int) -> bool:
        return self._present.get(i, j)

    def distance_from_similarity(self, similarity: float) -> float:
        """Ideal distance for a similarity under this run's transform."""
        return self.transform.apply(similarity)

    # ------------------------------------------------------------------
    # Mutators
    # ------------------------------------------------------------------

    def set_ideal_distance(self, i: int, j: int, value: float):
        self._ideal.set(i, j, value)

    def set_force_constant(self, i: int, j: int, value: float):
        self._force.set(i, j, value)

    def set_present(self, i: int, j: int):
        self._present.set(i, j, True)

    def set_strong_force_constant(self, slot: int, count: int):
        """Anchor ``slot`` to every entity in [0, count) with the strong constant."""
        strong = self.config.strong_force_constant
        for k in range(count):
            self._force.set(slot, k, strong)

    def fill_missing_with_minimum(self, min_similarity: float) -> int:
        """
        Impute every pair that was never given a distance.

        A pair is unset when its ideal distance is still 0. Such pairs are
        assumed to be no more similar than the weakest observed pair: they
        receive the distance of ``min_similarity``, the weak force constant
        and are marked present.

        Returns:
            Number of pairs filled
        """
        distance = self.distance_from_similarity(min_similarity)
        weak = self.config.weak_force_constant
        filled = 0
        for i in range(self.size):
            for j in range(i + 1, self.size):
                if self._ideal.get(i, j) == 0:
                    self._ideal.set(i, j, distance)
                    self._force.set(i, j, weak)
                    self._present.set(i, j, True)
                    filled += 1

        logger.debug(
            "Filled %d missing pairs with similarity %.3f (distance %.4f)",
            filled, min_similarity, distance,
        )
        return filled

    def expand(self, entity_count: int):
        """Double the capacity, keeping every cell of the first ``entity_count`` slots."""
        new_size = self.size * 2
        self._ideal = self._ideal.expanded(new_size, entity_count)
        self._force = self._force.expanded(new_size, entity_count)
        self._present = self._present.expanded(new_size, entity_count)
        logger.debug("Expanded similarity field %d -> %d", self.size, new_size)
        self.size = new_size

    def remove(self, slot: int, entity_count: int):
        """Drop ``slot`` and move the following slots down by one."""
        self._ideal = self._ideal.without(slot, entity_count)
        self._force = self._force.without(slot, entity_count)
        self._present = self._present.without(slot, entity_count)

    def __str__(self) -> str:
        lines = [f"Field Size: {self.size}"]
        for i in range(self.size):
            lines.append(" ".join(f"{self._ideal.get(i, j):.2f}" for j in range(self.size)))
        return "\n".join(lines)
