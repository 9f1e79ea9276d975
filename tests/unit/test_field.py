"""
Tests for the similarity field.

Tests cover:
- Symmetric storage
- Similarity to distance transforms
- Imputation of missing pairs
- Growth and slot removal
"""

import pytest

from hookemap.config import EmbeddingConfig, SimilarityTransform
from hookemap.model.field import SimilarityField, SymmetricMatrix


@pytest.fixture
def field() -> SimilarityField:
    config = EmbeddingConfig(
        transform=SimilarityTransform.ONE_MINUS,
        default_force_constant=500.0,
        weak_force_constant=250.0,
        strong_force_constant=100.0,
    )
    return SimilarityField(config, size=4)


# =============================================================================
# Storage Tests
# =============================================================================

class TestSymmetricStorage:
    """Every write lands on both [i][j] and [j][i]."""

    def test_matrix_set_is_symmetric(self):
        m = SymmetricMatrix(3, 0)
        m.set(0, 2, 5)
        assert m.get(0, 2) == 5
        assert m.get(2, 0) == 5

    def test_field_defaults(self, field):
        assert field.ideal_distance(0, 1) == 0.0
        assert field.force_constant(0, 1) == 500.0
        assert field.present(0, 1) is False

    def test_field_setters_are_symmetric(self, field):
        field.set_ideal_distance(1, 3, 0.7)
        field.set_force_constant(1, 3, 42.0)
        field.set_present(1, 3)

        assert field.ideal_distance(3, 1) == 0.7
        assert field.force_constant(3, 1) == 42.0
        assert field.present(3, 1) is True

    def test_strong_force_constant_anchors_slot(self, field):
        field.set_strong_force_constant(2, 3)
        for k in range(3):
            assert field.force_constant(2, k) == 100.0
            assert field.force_constant(k, 2) == 100.0
        assert field.force_constant(2, 3) == 500.0


# =============================================================================
# Transform Tests
# =============================================================================

class TestTransforms:
    """Tests for the similarity to ideal distance transforms."""

    @pytest.mark.parametrize("transform,expected", [
        (SimilarityTransform.ONE_MINUS, 0.5),
        (SimilarityTransform.INVERSE, 2.0),
        (SimilarityTransform.INVERSE_OFFSET, 1.0),
        (SimilarityTransform.INVERSE_2_OFFSET, 3.0),
        (SimilarityTransform.INVERSE_3_OFFSET, 7.0),
    ])
    def test_values_at_half(self, transform, expected):
        assert transform.apply(0.5) == pytest.approx(expected)

    @pytest.mark.parametrize("transform", list(SimilarityTransform))
    def test_more_similar_is_closer(self, transform):
        distances = [transform.apply(s) for s in (0.1, 0.3, 0.5, 0.7, 0.9)]
        assert distances == sorted(distances, reverse=True)
        assert all(d > 0 for d in distances)

    def test_field_uses_configured_transform(self):
        config = EmbeddingConfig(transform=SimilarityTransform.INVERSE)
        field = SimilarityField(config)
        assert field.distance_from_similarity(0.25) == pytest.approx(4.0)


# =============================================================================
# Imputation Tests
# =============================================================================

class TestMissingPairs:
    """Tests for filling unset pairs at the minimum similarity."""

    def test_fills_only_unset_pairs(self, field):
        field.set_ideal_distance(0, 1, 0.1)
        field.set_present(0, 1)

        filled = field.fill_missing_with_minimum(0.3)

        assert filled == 5  # 6 pairs in a 4-slot field, one already set
        assert field.ideal_distance(0, 1) == 0.1
        assert field.force_constant(0, 1) == 500.0
        assert field.ideal_distance(2, 3) == pytest.approx(0.7)
        assert field.force_constant(3, 2) == 250.0
        assert field.present(2, 3) is True

    def test_diagonal_never_present(self, field):
        field.fill_missing_with_minimum(0.3)
        for i in range(field.size):
            assert field.present(i, i) is False


# =============================================================================
# Growth Tests
# =============================================================================

class TestGrowth:
    """Tests for capacity doubling and slot removal."""

    def test_expand_preserves_cells(self, field):
        field.set_ideal_distance(0, 2, 0.4)
        field.set_force_constant(1, 2, 20.0)
        field.set_present(0, 2)

        field.expand(3)

        assert field.size == 8
        assert field.ideal_distance(2, 0) == 0.4
        assert field.force_constant(2, 1) == 20.0
        assert field.present(0, 2) is True

    def test_expand_initialises_new_cells(self, field):
        field.expand(4)
        assert field.ideal_distance(5, 6) == 0.0
        assert field.force_constant(0, 7) == 500.0
        assert field.present(3, 4) is False

    def test_remove_shifts_later_slots(self, field):
        field.set_ideal_distance(0, 1, 0.1)
        field.set_ideal_distance(0, 2, 0.2)
        field.set_ideal_distance(1, 2, 0.3)
        field.set_present(1, 2)

        field.remove(0, 3)

        assert field.ideal_distance(0, 1) == 0.3
        assert field.present(1, 0) is True
        assert field.ideal_distance(0, 2) == 0.0
        assert field.size == 4
