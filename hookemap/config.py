"""
Embedding Configuration

Run parameters for the spring simulation, the similarity-to-distance
transform, the multi-start search and the animated driver. A configuration
is always handed explicitly to the objects that need it.

Configurations can be taken from a named preset or loaded from YAML:

```yaml
preset: quick            # optional, values below override the preset
dimensions: 2
number_of_starts: 10
transform: one_minus
set_missing_to_min: true
seed: 42
```
"""

import logging
from dataclasses import dataclass, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .errors import ConfigError

logger = logging.getLogger(__name__)


class SimilarityTransform(Enum):
    """Transform from a similarity in (0, 1) to an ideal distance."""
    ONE_MINUS = "one_minus"                # 1 - s
    INVERSE = "inverse"                    # 1 / s
    INVERSE_OFFSET = "inverse_offset"      # 1 / s - 1
    INVERSE_2_OFFSET = "inverse_2_offset"  # 1 / s^2 - 1
    INVERSE_3_OFFSET = "inverse_3_offset"  # 1 / s^3 - 1

    def apply(self, similarity: float) -> float:
        """Return the ideal distance for ``similarity``."""
        if self is SimilarityTransform.ONE_MINUS:
            return 1.0 - similarity
        if self is SimilarityTransform.INVERSE:
            return 1.0 / similarity
        if self is SimilarityTransform.INVERSE_OFFSET:
            return 1.0 / similarity - 1.0
        if self is SimilarityTransform.INVERSE_2_OFFSET:
            return 1.0 / similarity / similarity - 1.0
        return 1.0 / similarity / similarity / similarity - 1.0


@dataclass
class EmbeddingConfig:
    """Configuration for a single embedding run."""
    # Geometry
    dimensions: int = 2

    # Multi-start search
    number_of_starts: int = 30      # Random restarts
    initial_iterations: int = 1500  # Steps per restart
    final_iterations: int = 8000    # Steps for the chosen seed

    # Masses
    default_mass: float = 1.0
    reference_mass: float = 1.0
    include_reference: bool = True  # Keep the reference in the layout

    # Inverse spring constants (larger = weaker spring)
    default_force_constant: float = 500.0
    weak_force_constant: float = 500.0    # Imputed (missing) pairs
    strong_force_constant: float = 500.0  # Pairs involving the reference

    # Similarity handling
    transform: SimilarityTransform = SimilarityTransform.INVERSE_3_OFFSET
    set_missing_to_min: bool = True  # Unseen pairs sit at the minimum similarity
    use_data: bool = True            # False models only the imputed minimum

    # Storage and numerics
    initial_field_size: int = 16
    coincident_threshold: float = 0.0005  # Distance below which points coincide

    # Randomness (None = nondeterministic)
    seed: Optional[int] = None

    # Animated driver pacing
    frame_delay_ms: float = 6.0
    frame_delay_decay: float = 0.999

    def __post_init__(self):
        if isinstance(self.transform, str):
            self.transform = parse_transform(self.transform)
        self.validate()

    def validate(self):
        """Raise ConfigError for values the simulation cannot run with."""
        if self.dimensions < 1:
            raise ConfigError(f"dimensions must be >= 1, got {self.dimensions}")
        for name in ("number_of_starts", "initial_iterations", "final_iterations"):
            if getattr(self, name) < 0:
                raise ConfigError(f"{name} must be >= 0, got {getattr(self, name)}")
        for name in ("default_mass", "reference_mass", "default_force_constant",
                     "weak_force_constant", "strong_force_constant"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive, got {getattr(self, name)}")
        if self.initial_field_size < 2:
            raise ConfigError(
                f"initial_field_size must be >= 2, got {self.initial_field_size}"
            )

    def to_dict(self) -> Dict[str, Any]:
        """Plain dictionary suitable for YAML output."""
        data = {f.name: getattr(self, f.name) for f in fields(self)}
        data["transform"] = self.transform.value
        return data


def parse_transform(name: str) -> SimilarityTransform:
    """Look up a SimilarityTransform by value or member name."""
    key = name.strip().lower()
    for transform in SimilarityTransform:
        if key in (transform.value, transform.name.lower()):
            return transform
    available = ", ".join(t.value for t in SimilarityTransform)
    raise ConfigError(f"Unknown similarity transform '{name}'. Available: {available}")


# Pre-defined presets

STANDARD = EmbeddingConfig()

QUICK = EmbeddingConfig(
    number_of_starts=5,
    initial_iterations=300,
    final_iterations=1500,
)

THOROUGH = EmbeddingConfig(
    number_of_starts=60,
    initial_iterations=2000,
    final_iterations=12000,
)

PRESETS: Dict[str, EmbeddingConfig] = {
    "standard": STANDARD,
    "quick": QUICK,
    "thorough": THOROUGH,
}


def get_preset(name: str) -> EmbeddingConfig:
    """
    Get a copy of a named preset.

    Raises:
        ConfigError: If the preset name is not found
    """
    if name not in PRESETS:
        available = ", ".join(sorted(PRESETS.keys()))
        raise ConfigError(f"Unknown preset '{name}'. Available: {available}")
    return replace(PRESETS[name])


def list_presets() -> List[str]:
    """List all preset names."""
    return sorted(PRESETS.keys())


def config_from_dict(data: Dict[str, Any]) -> EmbeddingConfig:
    """Build a config from a mapping, starting from its ``preset`` if given."""
    data = dict(data)
    base = get_preset(str(data.pop("preset", "standard")))

    known = {f.name for f in fields(EmbeddingConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise ConfigError(f"Unknown configuration keys: {unknown}")

    try:
        return replace(base, **data)
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def load_config(path: Union[str, Path]) -> EmbeddingConfig:
    """
    Load a configuration from a YAML file.

    Args:
        path: Path to the YAML document

    Returns:
        EmbeddingConfig with the file's values applied over its preset

    Raises:
        ConfigError: If the file is missing, unparseable or has bad values
    """
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Configuration file not found: {path}")

    try:
        with open(path, 'r') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse configuration {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Configuration {path} must be a mapping")

    config = config_from_dict(data)
    logger.debug("Loaded configuration from %s: %s", path, config)
    return config
