"""
Embedding

Owns the similarity field and the entity arena and advances the spring
simulation one step at a time:

1. ``impose_forces`` - every entity accumulates Hookean forces from all of
   its present partners, reading only committed (pre-step) positions, and
   integrates them into its pending position.
2. ``advance_time`` - the whole layout is shifted so the reference entity
   sits on the origin, then every entity commits its step.

After the optimization the layout is rotated so the first orientor lies on
the positive first axis and reflected so the second orientor has a
non-negative second coordinate.
"""

import logging
import math
import random
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

from ..config import EmbeddingConfig
from ..errors import ClockInconsistentError, MissingEntityError
from .entity import Entity
from .field import SimilarityField
from .vector import Vector

logger = logging.getLogger(__name__)


def normalize_similarity(value: float) -> float:
    """Round to three decimals (half up) and clamp to at most 1.0."""
    return min(math.floor(value * 1000 + 0.5) / 1000, 1.0)


@dataclass
class PlotPoint:
    """What a renderer needs to know about one entity."""
    label: str
    display_label: str
    position: Tuple[float, ...]
    is_reference: bool


class Embedding:
    """Entities, their pairwise field and the stepping of the simulation."""

    def __init__(self, config: Optional[EmbeddingConfig] = None,
                 rng: Optional[random.Random] = None):
        self.config = config or EmbeddingConfig()
        self.rng = rng or random.Random(self.config.seed)
        self.field = SimilarityField(self.config)

        # Arena addressed by slot, plus label -> slot index
        self.entities: List[Entity] = []
        self._slots: Dict[str, int] = {}
        self.excluded: List[Entity] = []

        self.sum_error: float = 0.0
        self.internal_clock: int = 0
        self.reference_label: Optional[str] = None
        self.reference_slot: Optional[int] = None
        self.orientors: Optional[Tuple[int, int]] = None

        # Observed similarity range of accepted records
        self.min_similarity: Optional[float] = None
        self.max_similarity: Optional[float] = None

    @classmethod
    def from_records(
        cls,
        records: Iterable[Tuple[str, str, float]],
        reference: str,
        config: Optional[EmbeddingConfig] = None,
        rng: Optional[random.Random] = None,
    ) -> "Embedding":
        """
        Build a ready-to-run embedding.

        Args:
            records: (label, label, similarity) triples
            reference: Label of the entity the layout is centred on
            config: Run configuration
            rng: Random source for initial placement

        Raises:
            MissingEntityError: If the reference is unknown or fewer than two
                other entities exist to orient the layout
        """
        embedding = cls(config, rng)
        accepted = 0
        total = 0
        for label_a, label_b, similarity in records:
            total += 1
            if embedding.add_similarity(label_a, label_b, similarity):
                accepted += 1

        logger.info(
            "Accepted %d of %d similarity records for %d entities (min=%s max=%s)",
            accepted, total, len(embedding),
            embedding.min_similarity, embedding.max_similarity,
        )

        embedding.complete_missing()
        embedding.set_reference_entity(reference)
        embedding.select_orientors()
        return embedding

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def __len__(self) -> int:
        return len(self.entities)

    def __iter__(self) -> Iterator[Entity]:
        return iter(self.entities)

    def __contains__(self, label: str) -> bool:
        return label in self._slots

    @property
    def labels(self) -> List[str]:
        """Labels in slot order."""
        return [e.label for e in self.entities]

    def slot_of(self, label: str) -> int:
        try:
            return self._slots[label]
        except KeyError:
            raise MissingEntityError(label) from None

    def entity(self, label: str) -> Entity:
        return self.entities[self.slot_of(label)]

    @property
    def reference(self) -> Optional[Entity]:
        if self.reference_slot is None:
            return None
        return self.entities[self.reference_slot]

    def is_reference(self, entity: Entity) -> bool:
        return self.reference_slot is not None and entity.slot == self.reference_slot

    # ------------------------------------------------------------------
    # Ingestion
    # ------------------------------------------------------------------

    def add_similarity(self, label_a: str, label_b: str, similarity: float) -> bool:
        """
        Record one similarity measurement.

        The value is rounded to three decimals and clamped to 1.0. Values at
        or outside (0, 1) carry no usable distance and are discarded, as are
        pairs of an entity with itself.

        Returns:
            True if the record was accepted
        """
        similarity = normalize_similarity(similarity)
        if not 0.0 < similarity < 1.0:
            if logger.isEnabledFor(logging.DEBUG):
                logger.debug("Discarding %s-%s similarity %.3f", label_a, label_b, similarity)
            return False
        if label_a == label_b:
            logger.debug("Discarding self-similarity of %s", label_a)
            return False

        if self.min_similarity is None or similarity < self.min_similarity:
            self.min_similarity = similarity
        if self.max_similarity is None or similarity > self.max_similarity:
            self.max_similarity = similarity

        slot_a = self._register(label_a)
        slot_b = self._register(label_b)

        self.field.set_ideal_distance(
            slot_a, slot_b, self.field.distance_from_similarity(similarity)
        )
        if self.config.use_data:
            self.field.set_present(slot_a, slot_b)
        return True

    def _register(self, label: str) -> int:
        """Return the slot of ``label``, creating a randomly placed entity on first sight."""
        slot = self._slots.get(label)
        if slot is not None:
            return slot

        slot = len(self.entities)
        if slot + 1 > self.field.size:
            self.field.expand(slot)

        entity = Entity(
            label=label,
            slot=slot,
            dimensions=self.config.dimensions,
            mass=self.config.default_mass,
        )
        entity.place_randomly(self.rng)
        self.entities.append(entity)
        self._slots[label] = slot
        return slot

    def complete_missing(self) -> int:
        """Impute unobserved pairs at the minimum similarity if enabled."""
        if not self.config.set_missing_to_min or self.min_similarity is None:
            return 0
        filled = self.field.fill_missing_with_minimum(self.min_similarity)
        logger.info(
            "Imputed %d missing pairs at similarity %.3f", filled, self.min_similarity
        )
        return filled

    # ------------------------------------------------------------------
    # Reference frame
    # ------------------------------------------------------------------

    def set_reference_entity(self, label: str) -> int:
        """
        Make ``label`` the reference entity.

        The reference gets the reference mass and strong springs to every
        other entity. When the configuration excludes the reference from the
        layout it is removed from the arena instead, the following slots move
        down by one, and no recentring takes place.

        Returns:
            The reference slot, or -1 if the reference was excluded

        Raises:
            MissingEntityError: If the label is unknown
        """
        slot = self.slot_of(label)
        entity = self.entities[slot]
        entity.mass = self.config.reference_mass
        self.field.set_strong_force_constant(slot, len(self.entities))
        self.reference_label = label
        logger.info("Reference entity: %s (slot %d)", label, slot)

        if not self.config.include_reference:
            self._exclude(slot)
            self.reference_slot = None
            return -1

        self.reference_slot = slot
        return slot

    def _exclude(self, slot: int):
        count = len(self.entities)
        entity = self.entities.pop(slot)
        entity.included = False
        self.excluded.append(entity)
        self.field.remove(slot, count)

        for later in self.entities[slot:]:
            later.slot -= 1
        self._slots = {e.label: e.slot for e in self.entities}
        logger.info("Excluded %s from the layout", entity.label)

    def select_orientors(self) -> Tuple[int, int]:
        """
        Pick the first two non-reference slots.

        Raises:
            MissingEntityError: If fewer than two such entities exist
        """
        candidates = [e.slot for e in self.entities if e.slot != self.reference_slot]
        if len(candidates) < 2:
            raise MissingEntityError(
                self.reference_label or "",
                f"Need two non-reference entities to orient the layout, found {len(candidates)}",
            )
        self.orientors = (candidates[0], candidates[1])
        logger.info(
            "Orientors: %s, %s",
            self.entities[candidates[0]].label, self.entities[candidates[1]].label,
        )
        return self.orientors

    # ------------------------------------------------------------------
    # Simulation
    # ------------------------------------------------------------------

    def impose_forces(self) -> float:
        """
        Accumulate and integrate spring forces for every entity.

        Each present pair pulls (or pushes) by half its distance discrepancy
        divided by the pair's force constant. Damping is per entity:
        ``sqrt(n / 10**mean(log10(force_constant)))`` over its partners, so
        entities held by stiff springs settle faster.

        Returns:
            Distortion of this step: sum of half the absolute discrepancy
            over all evaluated pairs
        """
        dimensions = self.config.dimensions
        threshold = self.config.coincident_threshold
        # Unit length only in two dimensions
        fallback = [1.0 / math.sqrt(2)] * dimensions
        count = len(self.entities)
        field = self.field

        sum_error = 0.0
        for entity in self.entities:
            j = entity.slot
            coords = entity.before_position
            force = [0.0] * dimensions
            log_rate_sum = 0.0
            partners = 0

            for other in self.entities:
                i = other.slot
                if i == j or not field.present(j, i):
                    continue

                delta = [o - c for o, c in zip(other.before_position, coords)]
                distance = math.sqrt(sum(d * d for d in delta))
                if distance < threshold:
                    direction = fallback
                else:
                    direction = [d / distance for d in delta]

                difference = (abs(distance) - field.ideal_distance(j, i)) / 2
                sum_error += abs(difference)

                force_constant = field.force_constant(j, i)
                log_rate_sum += math.log10(force_constant)
                partners += 1
                for k in range(dimensions):
                    force[k] += difference * direction[k] / force_constant

            entity.impose_force(force, self.friction(log_rate_sum, partners, count))

        self.sum_error = sum_error
        return sum_error

    @staticmethod
    def friction(log_rate_sum: float, partners: int, count: int) -> float:
        """Damping coefficient from the summed log10 force constants of an entity."""
        mean_log_rate = log_rate_sum / partners if partners else 0.0
        effective_rate = 10 ** mean_log_rate
        return math.sqrt(count / effective_rate)

    def advance_time(self):
        """Recentre on the reference entity and commit every entity's step."""
        reference = self.reference
        shift = reference.after_position.copy() if reference is not None else None
        for entity in self.entities:
            if shift is not None:
                entity.shift_coords(shift)
            entity.advance_time()
        self.internal_clock += 1

    def step(self) -> float:
        """One full simulation step."""
        error = self.impose_forces()
        self.advance_time()
        return error

    def rotate_coords_2d(self) -> bool:
        """
        Rotate every entity so the first orientor lies on the positive first axis.

        Returns:
            False if the orientor sits on the origin, where its angle is
            undefined, and nothing was rotated
        """
        orientor = self.entities[self._orientors()[0]]
        sin_theta = orientor.after_position.sin_theta_2d()
        cos_theta = orientor.after_position.cos_theta_2d()
        if math.isnan(sin_theta) or math.isnan(cos_theta):
            logger.warning(
                "Orientor %s is on the origin; rotation skipped", orientor.label
            )
            return False

        for entity in self.entities:
            entity.rotate_coords_2d(sin_theta, cos_theta)
        return True

    def reflect_coords_2d(self) -> bool:
        """
        Reflect across the first axis if the second orientor lies below it.

        Returns:
            True if the layout was reflected
        """
        orientor = self.entities[self._orientors()[1]]
        if orientor.after_position[1] >= 0:
            return False
        for entity in self.entities:
            entity.reflect_x_axis()
        return True

    def normalize_orientation(self):
        """Rotate, reflect and commit the canonical orientation."""
        self.rotate_coords_2d()
        self.reflect_coords_2d()
        self.advance_time()

    def _orientors(self) -> Tuple[int, int]:
        if self.orientors is None:
            return self.select_orientors()
        return self.orientors

    # ------------------------------------------------------------------
    # Positions
    # ------------------------------------------------------------------

    def reset_entities(self):
        """Fresh random layout with zero velocities and clocks."""
        for entity in self.entities:
            entity.reset()
            entity.place_randomly(self.rng)
        self.internal_clock = 0
        self.sum_error = 0.0

    def clone_positions(self) -> List[Vector]:
        """Copies of every entity's pending position, in slot order."""
        return [e.after_position.copy() for e in self.entities]

    def set_positions(self, positions: Sequence[Vector]):
        """Place every entity at the matching entry of ``positions``."""
        if len(positions) != len(self.entities):
            raise ValueError(
                f"Expected {len(self.entities)} positions, got {len(positions)}"
            )
        for entity, position in zip(self.entities, positions):
            entity.set_position(position)

    def seed_positions(self, positions: Sequence[Vector]):
        """Restart from ``positions``: motion and clocks are zeroed as for a fresh trial."""
        for entity in self.entities:
            entity.reset()
        self.internal_clock = 0
        self.sum_error = 0.0
        self.set_positions(positions)

    def apply_positions(self, positions: Mapping[str, Sequence[float]]) -> int:
        """
        Place entities named in ``positions``; others keep their position.

        Returns:
            Number of entities placed
        """
        placed = 0
        for label, coords in positions.items():
            if label not in self._slots:
                logger.debug("Ignoring position for unknown entity %s", label)
                continue
            self.entity(label).set_position(coords)
            placed += 1
        return placed

    def check_clock(self) -> int:
        """
        Verify every entity has completed the same number of steps.

        Raises:
            ClockInconsistentError: On the first entity that is out of line
        """
        for entity in self.entities:
            if entity.internal_clock != self.internal_clock:
                raise ClockInconsistentError(
                    f"Clock for {entity.label} is {entity.internal_clock}, "
                    f"expected {self.internal_clock}"
                )
        return self.internal_clock

    def positions(self) -> Dict[str, Tuple[float, ...]]:
        """Committed positions by label."""
        return {e.label: e.before_position.as_tuple() for e in self.entities}

    def points(self) -> List[PlotPoint]:
        """Renderer view of every entity, in slot order."""
        return [
            PlotPoint(
                label=e.label,
                display_label=e.display_label,
                position=e.before_position.as_tuple(),
                is_reference=self.is_reference(e),
            )
            for e in self.entities
        ]

    def __str__(self) -> str:
        lines = []
        for entity in self.entities:
            dims = " ".join(
                f"Dim {k}: {c:.2f}" for k, c in enumerate(entity.before_position)
            )
            lines.append(f"Name: {entity.label} {dims}")
        return "\n".join(lines)
