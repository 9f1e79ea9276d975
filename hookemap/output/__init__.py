"""Writing finished layouts: TSV positions, YAML snapshots and SVG plots."""

from .writer import LayoutSnapshot, save_positions, save_snapshot, load_snapshot
from .plot import EmbeddingPlotter, PlotFrame, check_plot_dimensions

__all__ = [
    "LayoutSnapshot",
    "save_positions",
    "save_snapshot",
    "load_snapshot",
    "EmbeddingPlotter",
    "PlotFrame",
    "check_plot_dimensions",
]
