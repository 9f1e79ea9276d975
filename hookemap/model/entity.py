"""A mapped entity: label, slot and the physical state of its point."""

import random
from dataclasses import dataclass, field
from typing import Optional

from .vector import Operand, Vector


def clean_label(label: str) -> str:
    """Display form of a label: underscores become spaces, words are capitalised."""
    words = label.replace("_", " ").split(" ")
    return " ".join(w[:1].upper() + w[1:] for w in words)


@dataclass
class Entity:
    """
    One point of the embedding.

    ``before_position`` is the committed position every other entity reads
    during a step; ``after_position`` accumulates the move and becomes the
    next ``before_position`` when the step is committed by ``advance_time``.
    """
    label: str
    slot: int
    dimensions: int = 2
    mass: float = 1.0
    before_position: Vector = field(default=None)  # type: ignore[assignment]
    after_position: Vector = field(default=None)  # type: ignore[assignment]
    velocity: Vector = field(default=None)  # type: ignore[assignment]
    acceleration: Vector = field(default=None)  # type: ignore[assignment]
    internal_clock: int = 0
    included: bool = True

    def __post_init__(self):
        if self.before_position is None:
            self.before_position = Vector.zeros(self.dimensions)
        if self.after_position is None:
            self.after_position = self.before_position.copy()
        if self.velocity is None:
            self.velocity = Vector.zeros(self.dimensions)
        if self.acceleration is None:
            self.acceleration = Vector.zeros(self.dimensions)

    @property
    def display_label(self) -> str:
        return clean_label(self.label)

    @property
    def position(self) -> Vector:
        """Committed position."""
        return self.before_position

    def impose_force(self, force: Operand, damping: float):
        """
        Integrate one unit time step under ``force``.

        Friction opposes the current velocity with magnitude
        ``damping * 0.5``. The new velocity is the explicit Euler update; the
        position moves by the average of the old and new velocity.
        """
        friction = self.velocity.scaled(damping * 0.5)
        net_force = Vector.zeros(self.dimensions).add(force).subtract(friction)

        self.acceleration = net_force.scaled(1.0 / self.mass)
        old_velocity = self.velocity.copy()
        self.velocity.add(self.acceleration)

        average_velocity = old_velocity.add(self.velocity).multiply(0.5)
        self.after_position.add(average_velocity)

    def advance_time(self):
        """Commit the step."""
        self.internal_clock += 1
        self.before_position = self.after_position.copy()

    def shift_coords(self, delta: Operand):
        self.after_position.subtract(delta)

    def rotate_coords_2d(self, sin_theta: float, cos_theta: float):
        self.after_position.rotate_2d(sin_theta, cos_theta)

    def reflect_x_axis(self):
        self.after_position.reflect_x_axis()

    def reset(self):
        """Zero position, velocity, acceleration and clock. Identity and mass persist."""
        self.before_position.reset()
        self.after_position.reset()
        self.velocity.reset()
        self.acceleration.reset()
        self.internal_clock = 0

    def set_position(self, position: Operand):
        """Place the entity at ``position``, committed and pending alike."""
        self.after_position.set(position)
        self.before_position = self.after_position.copy()

    def place_randomly(self, rng: Optional[random.Random] = None):
        """Move to a uniformly random point of [-1, 1]^D."""
        rng = rng or random
        self.set_position([rng.random() * 2 - 1 for _ in range(self.dimensions)])

    def __str__(self) -> str:
        def fmt(v: Vector) -> str:
            return "  ".join(f"{c:.2f}" for c in v)

        return (
            f"{self.label}\n"
            f"Pos bef : {fmt(self.before_position)}\n"
            f"Pos aft : {fmt(self.after_position)}\n"
            f"Velocity: {fmt(self.velocity)}\n"
            f"Accel   : {fmt(self.acceleration)}\n"
            f"Mass    : {self.mass}\n"
            f"Time    : {self.internal_clock}"
        )
