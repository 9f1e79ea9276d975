"""Fixed-dimension coordinate vectors used for positions, velocities and forces."""

import math
from typing import Iterable, Iterator, Sequence, Tuple, Union

from ..errors import DimensionMismatchError

Operand = Union[float, int, "Vector", Sequence[float]]


class Vector:
    """
    Mutable tuple of D real components.

    The in-place operations (``add``, ``subtract``, ``multiply``) accept a
    scalar, another Vector or a plain sequence of numbers. Non-scalar
    operands must have the same dimension; a mismatch raises
    DimensionMismatchError rather than truncating or padding.
    """

    def __init__(self, coords: Iterable[float]):
        self._coords = [float(c) for c in coords]

    @classmethod
    def zeros(cls, dimensions: int) -> "Vector":
        return cls([0.0] * dimensions)

    @property
    def dimensions(self) -> int:
        return len(self._coords)

    def __len__(self) -> int:
        return len(self._coords)

    def __getitem__(self, index: int) -> float:
        return self._coords[index]

    def __iter__(self) -> Iterator[float]:
        return iter(self._coords)

    def __eq__(self, other) -> bool:
        if isinstance(other, Vector):
            return self._coords == other._coords
        return NotImplemented

    def __repr__(self) -> str:
        return "Vector([" + ", ".join(f"{c:.4f}" for c in self._coords) + "])"

    def as_tuple(self) -> Tuple[float, ...]:
        return tuple(self._coords)

    def copy(self) -> "Vector":
        return Vector(self._coords)

    def reset(self):
        """Set every component to zero."""
        for i in range(len(self._coords)):
            self._coords[i] = 0.0

    def set(self, values: Operand):
        """Replace the components with ``values`` (same dimension)."""
        self._coords = [float(v) for v in self._operand(values)]

    # ------------------------------------------------------------------
    # In-place arithmetic
    # ------------------------------------------------------------------

    def add(self, other: Operand) -> "Vector":
        if isinstance(other, (int, float)):
            self._coords = [c + other for c in self._coords]
        else:
            self._coords = [a + b for a, b in zip(self._coords, self._operand(other))]
        return self

    def subtract(self, other: Operand) -> "Vector":
        if isinstance(other, (int, float)):
            self._coords = [c - other for c in self._coords]
        else:
            self._coords = [a - b for a, b in zip(self._coords, self._operand(other))]
        return self

    def multiply(self, other: Operand) -> "Vector":
        if isinstance(other, (int, float)):
            self._coords = [c * other for c in self._coords]
        else:
            self._coords = [a * b for a, b in zip(self._coords, self._operand(other))]
        return self

    def scaled(self, factor: float) -> "Vector":
        """Return a new vector multiplied by ``factor``; self is unchanged."""
        return Vector(c * factor for c in self._coords)

    # Operator forms return new vectors
    def __add__(self, other: Operand) -> "Vector":
        return self.copy().add(other)

    def __sub__(self, other: Operand) -> "Vector":
        return self.copy().subtract(other)

    def __mul__(self, other: Operand) -> "Vector":
        return self.copy().multiply(other)

    __rmul__ = __mul__

    def __truediv__(self, divisor: float) -> "Vector":
        return self.scaled(1.0 / divisor)

    def norm(self) -> float:
        return math.sqrt(sum(c * c for c in self._coords))

    def distance_to(self, other: "Vector") -> float:
        return math.sqrt(sum((a - b) ** 2 for a, b in zip(self._coords, self._operand(other))))

    # ------------------------------------------------------------------
    # 2D orientation helpers (act on the first two axes)
    # ------------------------------------------------------------------

    def cos_theta_2d(self) -> float:
        """
        Cosine of the angle between the point and the first axis.

        Returns ``nan`` when the point lies on the origin, where the angle
        is undefined.
        """
        self._require_2d()
        hyp = math.hypot(self._coords[0], self._coords[1])
        if hyp == 0.0:
            return math.nan
        return self._coords[0] / hyp

    def sin_theta_2d(self) -> float:
        """
        Sine of the angle between the point and the first axis.

        Returns ``nan`` when the point lies on the origin, where the angle
        is undefined.
        """
        self._require_2d()
        hyp = math.hypot(self._coords[0], self._coords[1])
        if hyp == 0.0:
            return math.nan
        return self._coords[1] / hyp

    def rotate_2d(self, sin_theta: float, cos_theta: float) -> "Vector":
        """Rotate clockwise by theta in the plane of the first two axes."""
        self._require_2d()
        x, y = self._coords[0], self._coords[1]
        self._coords[0] = cos_theta * x + sin_theta * y
        self._coords[1] = -sin_theta * x + cos_theta * y
        return self

    def reflect_x_axis(self) -> "Vector":
        """Reflect across the first axis (negate the second component)."""
        self._require_2d()
        self._coords[1] = -self._coords[1]
        return self

    # ------------------------------------------------------------------

    def _operand(self, other: Operand) -> Sequence[float]:
        values = other._coords if isinstance(other, Vector) else other
        if len(values) != len(self._coords):
            raise DimensionMismatchError(len(self._coords), len(values))
        return values

    def _require_2d(self):
        if len(self._coords) < 2:
            raise DimensionMismatchError(2, len(self._coords))
