"""
SVG plots of an embedding.

The plotter only reads the embedding's renderer view (labels, positions and
the reference flag); it never changes simulation state. Layouts are drawn on
their first two axes with one scale for both, so the wider axis fills the
canvas inside a fixed padding. The reference entity is drawn in a distinct
colour.
"""

import logging
from dataclasses import dataclass, field
from html import escape
from pathlib import Path
from typing import List, Optional, Tuple, Union

from ..errors import InvalidDimensionCountError
from ..model.embedding import Embedding, PlotPoint

logger = logging.getLogger(__name__)

PAD = 80  # pixels between the outermost point and the canvas edge

POINT_SIZE = 4
POINT_COLOUR = "#000000"
TERM_COLOUR = "#1f3fbf"
REFTERM_COLOUR = "#cc2222"
FONT_FAMILY = "Lucida Grande, Helvetica, sans-serif"
FONT_SIZE = 16


@dataclass
class PlotFrame:
    """One captured state of the layout."""
    index: int
    label: str = ""
    iteration: int = 0
    distortion: float = 0.0
    points: List[PlotPoint] = field(default_factory=list)


def check_plot_dimensions(dimensions: int):
    """Only 2D and 3D layouts can be plotted."""
    if dimensions < 2 or dimensions > 3:
        raise InvalidDimensionCountError(f"Can't plot in {dimensions} dimensions")


class EmbeddingPlotter:
    """Renders embedding frames to SVG."""

    def __init__(
        self,
        embedding: Embedding,
        output_dir: Optional[Path] = None,
        size: int = 700,
    ):
        """
        Args:
            embedding: Layout to draw
            output_dir: Directory for exported frames
            size: Width and height of the canvas in pixels

        Raises:
            InvalidDimensionCountError: If the layout is not 2D or 3D
        """
        check_plot_dimensions(embedding.config.dimensions)
        self.embedding = embedding
        self.output_dir = Path(output_dir) if output_dir else None
        self.size = size
        self.frames: List[PlotFrame] = []

    def capture_frame(self, label: str = "", iteration: int = 0) -> PlotFrame:
        """Record the embedding's current committed layout."""
        frame = PlotFrame(
            index=len(self.frames),
            label=label,
            iteration=iteration,
            distortion=self.embedding.sum_error,
            points=self.embedding.points(),
        )
        self.frames.append(frame)
        return frame

    def _bounds(self, points: List[PlotPoint]) -> Tuple[float, float, float, float]:
        xs = [p.position[0] for p in points]
        ys = [p.position[1] for p in points]
        return min(xs), min(ys), max(xs), max(ys)

    def render_svg(self, frame: Optional[PlotFrame] = None) -> str:
        """Render ``frame`` (or the current layout) as an SVG document."""
        if frame is None:
            frame = PlotFrame(index=-1, distortion=self.embedding.sum_error,
                              points=self.embedding.points())

        size = self.size
        lines = [
            f'<svg xmlns="http://www.w3.org/2000/svg" '
            f'width="{size}" height="{size}" viewBox="0 0 {size} {size}">',
            '<rect width="100%" height="100%" fill="white"/>',
        ]

        if frame.points:
            min_x, min_y, max_x, max_y = self._bounds(frame.points)
            span = size - 2 * PAD
            # Equal scale on both axes
            extent = max(max_x - min_x, max_y - min_y)
            scale = span / extent if extent > 0 else 1.0

            def tx(x: float) -> float:
                return PAD + (x - min_x) * scale

            def ty(y: float) -> float:
                # Screen y grows downwards
                return size - (PAD + (y - min_y) * scale)

            for point in frame.points:
                lines.append(self._render_point(point, tx(point.position[0]), ty(point.position[1])))

        if frame.label:
            lines.append(
                f'<text x="10" y="20" font-family="monospace" font-size="14">'
                f'{escape(frame.label)} (iter {frame.iteration}, '
                f'distortion {frame.distortion:.4f})</text>'
            )

        lines.append('</svg>')
        return '\n'.join(lines)

    def _render_point(self, point: PlotPoint, x: float, y: float) -> str:
        colour = REFTERM_COLOUR if point.is_reference else TERM_COLOUR
        weight = "bold" if point.is_reference else "normal"
        return (
            f'<circle cx="{x:.2f}" cy="{y:.2f}" r="{POINT_SIZE / 2}" fill="{POINT_COLOUR}"/>'
            f'<text x="{x + POINT_SIZE:.2f}" y="{y - POINT_SIZE:.2f}" '
            f'font-family="{FONT_FAMILY}" font-size="{FONT_SIZE}" '
            f'font-weight="{weight}" fill="{colour}">{escape(point.display_label)}</text>'
        )

    def save_svg(self, path: Union[str, Path], frame: Optional[PlotFrame] = None) -> Path:
        path = Path(path)
        path.write_text(self.render_svg(frame), encoding="utf-8")
        logger.info("Saved plot: %s", path)
        return path

    def export_frames(self) -> List[Path]:
        """Write every captured frame as ``frame_NNNNN.svg`` into the output directory."""
        if self.output_dir is None:
            raise ValueError("No output directory configured for frame export")
        self.output_dir.mkdir(parents=True, exist_ok=True)

        paths = []
        for frame in self.frames:
            path = self.output_dir / f"frame_{frame.index:05d}.svg"
            path.write_text(self.render_svg(frame), encoding="utf-8")
            paths.append(path)
        logger.info("Exported %d frames to %s", len(paths), self.output_dir)
        return paths
