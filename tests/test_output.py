"""
Tests for layout output: positions, snapshots and SVG plots.
"""

import math

import pytest

from hookemap.config import EmbeddingConfig, SimilarityTransform
from hookemap.errors import IngestionError, InvalidDimensionCountError
from hookemap.model.embedding import Embedding
from hookemap.model.vector import Vector
from hookemap.output.plot import EmbeddingPlotter, check_plot_dimensions
from hookemap.output.writer import (
    LayoutSnapshot,
    load_snapshot,
    save_positions,
    save_snapshot,
)


# =============================================================================
# Positions Tests
# =============================================================================

class TestPositions:
    """Tests for the tab-separated positions file."""

    def test_one_line_per_entity(self, abc_embedding, tmp_path):
        path = save_positions(abc_embedding, tmp_path / "out.tsv")
        lines = path.read_text().splitlines()

        assert len(lines) == 3
        label, x, y = lines[1].split("\t")
        assert label == "B"
        assert (float(x), float(y)) == abc_embedding.positions()["B"]


# =============================================================================
# Snapshot Tests
# =============================================================================

class TestSnapshot:
    """Tests for YAML snapshots."""

    def test_from_embedding(self, abc_embedding):
        abc_embedding.step()
        snapshot = LayoutSnapshot.from_embedding(abc_embedding)

        assert snapshot.reference == "A"
        assert snapshot.dimensions == 2
        assert snapshot.distortion == abc_embedding.sum_error
        assert snapshot.config["transform"] == "one_minus"
        assert list(snapshot.entities) == ["A", "B", "C"]

    def test_save_and_load(self, abc_embedding, tmp_path):
        path = tmp_path / "layout.yaml"
        saved = save_snapshot(abc_embedding, path)
        loaded = load_snapshot(path)

        assert loaded.reference == "A"
        assert loaded.entities == saved.entities
        assert loaded.config["seed"] == 7
        assert loaded.created == saved.created

    def test_snapshot_seeds_new_embedding(self, abc_embedding, abc_records, tmp_path):
        path = tmp_path / "layout.yaml"
        save_snapshot(abc_embedding, path)

        other = Embedding.from_records(
            abc_records, "A", EmbeddingConfig(transform=SimilarityTransform.ONE_MINUS, seed=99)
        )
        placed = other.apply_positions(load_snapshot(path).entities)

        assert placed == 3
        for label, coords in other.positions().items():
            assert coords == pytest.approx(abc_embedding.positions()[label], abs=1e-6)

    def test_not_a_snapshot(self, tmp_path):
        path = tmp_path / "other.yaml"
        path.write_text("name: something else\n")
        with pytest.raises(IngestionError):
            load_snapshot(path)

    def test_missing_snapshot(self, tmp_path):
        with pytest.raises(IngestionError):
            load_snapshot(tmp_path / "nope.yaml")


# =============================================================================
# Plot Tests
# =============================================================================

class TestPlot:
    """Tests for the SVG plotter."""

    @pytest.mark.parametrize("dimensions", [1, 4, 7])
    def test_unsupported_dimensions(self, dimensions):
        with pytest.raises(InvalidDimensionCountError):
            check_plot_dimensions(dimensions)

    def test_plotter_rejects_high_dimensions(self, abc_records):
        config = EmbeddingConfig(transform=SimilarityTransform.ONE_MINUS, dimensions=4, seed=1)
        embedding = Embedding.from_records(abc_records, "A", config)
        with pytest.raises(InvalidDimensionCountError):
            EmbeddingPlotter(embedding)

    def test_render_svg(self, abc_embedding):
        svg = EmbeddingPlotter(abc_embedding, size=300).render_svg()

        assert svg.startswith("<svg")
        assert svg.rstrip().endswith("</svg>")
        assert svg.count("<circle") == 3
        assert 'width="300"' in svg
        assert "#cc2222" in svg  # reference colour

    def test_points_inside_padding(self, abc_embedding):
        plotter = EmbeddingPlotter(abc_embedding, size=300)
        frame = plotter.capture_frame("Test", 0)
        svg = plotter.render_svg(frame)

        for chunk in svg.split('<circle cx="')[1:]:
            cx = float(chunk.split('"')[0])
            assert 80 - 1e-6 <= cx <= 220 + 1e-6
        assert "Test (iter 0" in svg

    def test_equal_scale_on_both_axes(self, abc_embedding):
        abc_embedding.set_positions([
            Vector([0.0, 0.0]), Vector([1.0, 0.0]), Vector([0.0, 0.01]),
        ])
        svg = EmbeddingPlotter(abc_embedding, size=700).render_svg()

        centres = []
        for chunk in svg.split('<circle cx="')[1:]:
            cx, rest = chunk.split('"', 1)
            cy = rest.split('cy="', 1)[1].split('"', 1)[0]
            centres.append((float(cx), float(cy)))
        a, b, c = centres

        # The wider axis spans the canvas inside the padding
        assert math.dist(a, b) == pytest.approx(700 - 2 * 80)
        assert math.dist(a, b) / math.dist(a, c) == pytest.approx(100.0)

    def test_labels_escaped(self, small_config):
        embedding = Embedding.from_records(
            [("a<b", "c", 0.5), ("a<b", "d", 0.4), ("c", "d", 0.3)], "a<b", small_config
        )
        svg = EmbeddingPlotter(embedding).render_svg()
        assert "A&lt;b" in svg

    def test_export_frames(self, abc_embedding, tmp_path):
        plotter = EmbeddingPlotter(abc_embedding, output_dir=tmp_path / "frames")
        plotter.capture_frame("Start", 0)
        abc_embedding.step()
        plotter.capture_frame("Step", 1)

        paths = plotter.export_frames()

        assert [p.name for p in paths] == ["frame_00000.svg", "frame_00001.svg"]
        assert all(p.exists() for p in paths)

    def test_export_needs_directory(self, abc_embedding):
        with pytest.raises(ValueError):
            EmbeddingPlotter(abc_embedding).export_frames()
