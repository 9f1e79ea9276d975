"""
Multi-start Optimization Search

Spring relaxation settles into whichever local minimum its random start
leads to. The search runs several short relaxations from fresh random
layouts, keeps the *starting* layout of the trial that ended with the
lowest distortion, and then relaxes that seed for the full number of
iterations.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from ..config import EmbeddingConfig
from ..model.embedding import Embedding
from ..model.vector import Vector

logger = logging.getLogger(__name__)

# Called after each step with (step index, distortion of that step)
StepCallback = Callable[[int, float], None]


@dataclass
class SearchResult:
    """Outcome of a complete optimization run."""
    best_trial: int = -1
    best_trial_error: float = float("inf")
    trial_errors: List[float] = field(default_factory=list)
    seed_positions: List[Vector] = field(default_factory=list)
    final_error: float = 0.0
    iterations: int = 0
    normalized: bool = False
    elapsed: float = 0.0


class OptimizationSearch:
    """Best-of-N random restarts followed by a long refinement."""

    def __init__(self, embedding: Embedding, config: Optional[EmbeddingConfig] = None):
        self.embedding = embedding
        self.config = config or embedding.config
        self.trial_errors: List[float] = []
        self.best_trial: int = -1
        self.best_trial_error: float = float("inf")

    def relax(self, iterations: int, callback: Optional[StepCallback] = None) -> float:
        """
        Run ``iterations`` simulation steps.

        Returns:
            Distortion of the last step (0.0 when no step ran)
        """
        sum_error = 0.0
        log_every = max(1, iterations // 10)
        for step in range(iterations):
            sum_error = self.embedding.impose_forces()
            self.embedding.advance_time()

            if callback:
                callback(step, sum_error)

            if logger.isEnabledFor(logging.DEBUG) and step % log_every == 0:
                logger.debug("Step %d/%d: distortion=%.6f", step, iterations, sum_error)
        return sum_error

    def find_best_starting_positions(self) -> List[Vector]:
        """
        Run the exploratory trials.

        Each trial starts from a fresh random layout and runs
        ``initial_iterations`` steps. The starting layout of the trial with
        the lowest final distortion is returned; with no trials the current
        layout is returned.
        """
        starts = self.config.number_of_starts
        iterations = self.config.initial_iterations
        best_positions = self.embedding.clone_positions()
        self.trial_errors = []
        self.best_trial = -1
        self.best_trial_error = float("inf")

        logger.info(
            "Searching %d random starts of %d iterations over %d entities",
            starts, iterations, len(self.embedding),
        )
        for trial in range(starts):
            self.embedding.reset_entities()
            start_positions = self.embedding.clone_positions()
            error = self.relax(iterations)
            self.trial_errors.append(error)

            if error < self.best_trial_error:
                self.best_trial_error = error
                self.best_trial = trial
                best_positions = start_positions
                logger.info("Start %d/%d: distortion=%.6f (best so far)", trial + 1, starts, error)
            else:
                logger.debug("Start %d/%d: distortion=%.6f", trial + 1, starts, error)

        return best_positions

    def run(self, normalize: bool = True,
            callback: Optional[StepCallback] = None) -> SearchResult:
        """
        Search for a seed, refine it and optionally fix the orientation.

        Args:
            normalize: Rotate/reflect into the canonical frame at the end
            callback: Called after every refinement step

        Returns:
            SearchResult describing the run
        """
        started = time.monotonic()

        seed = self.find_best_starting_positions()
        self.embedding.seed_positions(seed)

        iterations = self.config.final_iterations
        logger.info("Refining best start for %d iterations", iterations)
        final_error = self.relax(iterations, callback=callback)

        if normalize:
            self.embedding.normalize_orientation()

        result = SearchResult(
            best_trial=self.best_trial,
            best_trial_error=self.best_trial_error,
            trial_errors=list(self.trial_errors),
            seed_positions=[p.copy() for p in seed],
            final_error=final_error,
            iterations=iterations,
            normalized=normalize,
            elapsed=time.monotonic() - started,
        )
        logger.info(
            "Final distortion %.6f after %d iterations (%.2fs)",
            final_error, iterations, result.elapsed,
        )
        return result
